"""Source manifest models (parca-manifest.yaml)."""

from dataclasses import dataclass, field, replace
from typing import Any, Literal, cast

AssetKind = Literal["prompt", "skill", "instruction"]

ASSET_KINDS: tuple[AssetKind, ...] = ("prompt", "skill", "instruction")


def validate_asset_kind(value: str) -> AssetKind:
    """Validate and return an asset kind.

    Args:
        value: String to validate

    Returns:
        Valid AssetKind

    Raises:
        ValueError: If value is not a known asset kind
    """
    if value not in ASSET_KINDS:
        raise ValueError(f"Invalid asset kind: {value} (expected one of {', '.join(ASSET_KINDS)})")
    return cast(AssetKind, value)


@dataclass(frozen=True)
class ManifestVersion:
    """One published version of an asset.

    A version without ``ref`` is rolling: it resolves against whatever ref the
    manifest itself was read at.
    """

    path: str
    ref: str | None = None
    runtime: dict[str, Any] | None = None

    @property
    def is_rolling(self) -> bool:
        return self.ref is None


@dataclass(frozen=True)
class ManifestAsset:
    """An asset declared by a source repository."""

    kind: AssetKind
    versions: dict[str, ManifestVersion] = field(default_factory=dict)
    description: str | None = None

    def with_version(self, version: str, meta: ManifestVersion) -> "ManifestAsset":
        """Return new asset with the version added or replaced."""
        return replace(self, versions={**self.versions, version: meta})


@dataclass(frozen=True)
class Manifest:
    """The registry document published on the source repository's main line."""

    schema: str
    assets: dict[str, ManifestAsset]
    version_template: str | None = None

    def with_asset(self, asset_id: str, asset: ManifestAsset) -> "Manifest":
        """Return new manifest with the asset added or replaced."""
        return replace(self, assets={**self.assets, asset_id: asset})
