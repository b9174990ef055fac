"""Exceptions raised by parca.

Lookup failures carry the set of valid choices so callers can show them.
Transport failures are split into "could not talk to the host"
(SourceAccessError) and "the host answered that it does not exist"
(RemoteNotFoundError, RefResolutionError).
"""


class ParcaError(Exception):
    """Base class for all parca errors."""


class AssetNotFoundError(ParcaError):
    """Asset id is not declared in the manifest."""

    def __init__(self, asset_id: str, available: list[str]) -> None:
        self.asset_id = asset_id
        self.available = available
        listing = ", ".join(available) if available else "(none)"
        super().__init__(f'Asset "{asset_id}" not found in manifest. Available: {listing}')


class NoMatchingVersionError(ParcaError):
    """No declared version satisfies the requested specifier."""

    def __init__(self, asset_id: str, specifier: str, available: list[str]) -> None:
        self.asset_id = asset_id
        self.specifier = specifier
        self.available = available
        listing = ", ".join(available) if available else "(none)"
        super().__init__(
            f'No version matching "{specifier}" found for asset "{asset_id}". '
            f"Available: {listing}"
        )


class VersionNotFoundError(ParcaError):
    """Exact version is not present in the manifest snapshot being used."""

    def __init__(self, asset_id: str, version: str, available: list[str]) -> None:
        self.asset_id = asset_id
        self.version = version
        self.available = available
        listing = ", ".join(available) if available else "(none)"
        super().__init__(
            f'Version "{version}" not found for asset "{asset_id}". Available: {listing}'
        )


class MissingSkillEntryError(ParcaError):
    """Skill payload has no SKILL.md at its root."""

    def __init__(self, asset_id: str, path: str) -> None:
        self.asset_id = asset_id
        self.path = path
        super().__init__(f'Skill "{asset_id}" is missing SKILL.md in {path}')


class InvalidPayloadError(ParcaError):
    """Fetched payload cannot be stored safely (e.g. a path escaping the cache)."""


class IntegrityMismatchError(ParcaError):
    """Content changed underneath a locked version."""

    def __init__(self, asset_id: str, version: str, expected: str, actual: str) -> None:
        self.asset_id = asset_id
        self.version = version
        self.expected = expected
        self.actual = actual
        super().__init__(
            f'Integrity mismatch for "{asset_id}@{version}": '
            f"expected SHA-256 {expected}, got {actual}. "
            f"The content of this version changed in the source registry. "
            f'Run "parca install --force" (or "parca update") to accept the new content.'
        )


class DuplicateVersionError(ParcaError):
    """Publishing a version that already exists."""

    def __init__(self, asset_id: str, version: str) -> None:
        self.asset_id = asset_id
        self.version = version
        super().__init__(
            f"Version {version} of asset {asset_id} is already defined in the manifest."
        )


class SourceNotRegisteredError(ParcaError):
    """Asset entry references a source alias missing from the consumer config."""

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f'Source "{alias}" not defined.')


class ManifestFormatError(ParcaError):
    """Manifest document is structurally invalid."""


class ConfigFormatError(ParcaError):
    """Consumer configuration is structurally invalid."""


class SourceAccessError(ParcaError):
    """Host or network failure talking to a source repository."""


class RemoteNotFoundError(ParcaError):
    """Path does not exist in the source repository at the requested ref."""

    def __init__(self, path: str, ref: str) -> None:
        self.path = path
        self.ref = ref
        super().__init__(f"{path} not found at ref {ref}")


class RefResolutionError(ParcaError):
    """Ref could not be resolved to a commit."""

    def __init__(self, ref: str, repo_url: str) -> None:
        self.ref = ref
        self.repo_url = repo_url
        super().__init__(f'Could not resolve ref "{ref}" in {repo_url}')


class AssetNotInstalledError(ParcaError):
    """Asset id is not declared in the consumer configuration."""

    def __init__(self, asset_id: str, installed: list[str]) -> None:
        self.asset_id = asset_id
        self.installed = installed
        listing = ", ".join(installed) if installed else "(none)"
        super().__init__(f'Asset "{asset_id}" is not installed. Installed: {listing}')
