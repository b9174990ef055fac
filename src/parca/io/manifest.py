"""Manifest I/O for parca-manifest.yaml."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from parca.errors import ManifestFormatError
from parca.models.manifest import Manifest, ManifestAsset, ManifestVersion, validate_asset_kind

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "parca-manifest.yaml"

DEFAULT_SCHEMA = "1.0"
DEFAULT_TEMPLATE = "v{{version}}"


def _parse_version(asset_id: str, version: str, data: Any) -> ManifestVersion:
    if not isinstance(data, dict) or not data.get("path"):
        raise ManifestFormatError(f'Version "{version}" of asset "{asset_id}" missing "path" field.')
    runtime = data.get("runtime")
    if runtime is not None and not isinstance(runtime, dict):
        raise ManifestFormatError(
            f'Version "{version}" of asset "{asset_id}" has invalid "runtime" field.'
        )
    ref = data.get("ref")
    return ManifestVersion(
        path=str(data["path"]),
        ref=str(ref) if ref is not None else None,
        runtime=runtime,
    )


def parse_manifest(data: Any) -> Manifest:
    """Build a Manifest from a parsed YAML document.

    Raises:
        ManifestFormatError: If required fields are missing or malformed
    """
    if not isinstance(data, dict):
        raise ManifestFormatError("Manifest must be a mapping.")
    if not data.get("schema"):
        raise ManifestFormatError('Manifest missing "schema" field.')
    assets_data = data.get("assets")
    if not isinstance(assets_data, dict):
        raise ManifestFormatError('Manifest missing or invalid "assets" field.')

    assets: dict[str, ManifestAsset] = {}
    for asset_id, asset_data in assets_data.items():
        asset_id = str(asset_id)
        if not isinstance(asset_data, dict) or not asset_data.get("kind"):
            raise ManifestFormatError(f'Asset "{asset_id}" missing "kind" field.')
        try:
            kind = validate_asset_kind(asset_data["kind"])
        except ValueError as e:
            raise ManifestFormatError(f'Asset "{asset_id}": {e}') from e

        versions_data = asset_data.get("versions")
        if not isinstance(versions_data, dict):
            raise ManifestFormatError(f'Asset "{asset_id}" missing or invalid "versions" field.')

        # YAML reads unquoted 1.0 as a float; version keys are always strings
        versions = {
            str(version): _parse_version(asset_id, str(version), version_data)
            for version, version_data in versions_data.items()
        }
        assets[asset_id] = ManifestAsset(
            kind=kind,
            versions=versions,
            description=asset_data.get("description"),
        )

    strategy = data.get("version-strategy") or {}
    template = strategy.get("template") if isinstance(strategy, dict) else None

    return Manifest(schema=str(data["schema"]), assets=assets, version_template=template)


def load_manifest_text(text: str) -> Manifest:
    """Parse manifest YAML text.

    Raises:
        ManifestFormatError: If the text is not valid YAML or not a valid manifest
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestFormatError(f"Manifest is not valid YAML: {e}") from e
    return parse_manifest(data)


def manifest_to_document(manifest: Manifest) -> dict[str, Any]:
    """Convert a Manifest back into its YAML document shape."""
    document: dict[str, Any] = {"schema": manifest.schema}
    if manifest.version_template is not None:
        document["version-strategy"] = {"template": manifest.version_template}

    assets: dict[str, Any] = {}
    for asset_id, asset in manifest.assets.items():
        asset_doc: dict[str, Any] = {"kind": asset.kind}
        if asset.description is not None:
            asset_doc["description"] = asset.description

        versions: dict[str, Any] = {}
        for version, meta in asset.versions.items():
            version_doc: dict[str, Any] = {"path": meta.path}
            if meta.ref is not None:
                version_doc["ref"] = meta.ref
            if meta.runtime is not None:
                version_doc["runtime"] = meta.runtime
            versions[version] = version_doc
        asset_doc["versions"] = versions
        assets[asset_id] = asset_doc

    document["assets"] = assets
    return document


def dump_manifest(manifest: Manifest) -> str:
    return yaml.safe_dump(
        manifest_to_document(manifest), sort_keys=False, default_flow_style=False, width=120
    )


def manifest_hash(document: Any) -> str:
    """SHA-256 of the canonical JSON encoding of a manifest document.

    Key order does not affect the hash, so the same registry state always
    hashes the same regardless of how the YAML was laid out.
    """
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ManifestStore:
    """The manifest file at the root of a maintainer's source repository."""

    def __init__(self, repo_root: Path) -> None:
        self._repo_root = repo_root

    @property
    def path(self) -> Path:
        return self._repo_root / MANIFEST_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Manifest:
        """Load the manifest.

        Raises:
            FileNotFoundError: If no manifest exists in the repository
            ManifestFormatError: If the manifest is invalid
        """
        if not self.exists():
            raise FileNotFoundError(
                f"{MANIFEST_FILENAME} not found in {self._repo_root}. "
                f"Run 'parca publish --init' to create one."
            )
        return load_manifest_text(self.path.read_text(encoding="utf-8"))

    def save(self, manifest: Manifest) -> None:
        self.path.write_text(dump_manifest(manifest), encoding="utf-8")
        logger.debug("Wrote manifest to %s", self.path)

    def init(self) -> Manifest:
        """Create an empty manifest with the default version strategy."""
        manifest = Manifest(schema=DEFAULT_SCHEMA, assets={}, version_template=DEFAULT_TEMPLATE)
        self.save(manifest)
        return manifest
