"""Reading manifests from source repositories."""

import logging
from dataclasses import dataclass

import yaml

from parca.core.versions import latest_version, sort_versions
from parca.errors import ManifestFormatError
from parca.integrations.source.abc import SourceRepository
from parca.io.manifest import MANIFEST_FILENAME, manifest_hash, parse_manifest
from parca.models.manifest import AssetKind, Manifest
from parca.models.resolution import RemoteAssetInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedManifest:
    """A manifest together with the ref it was read at and its document hash."""

    manifest: Manifest
    ref: str
    document_hash: str


async def fetch_manifest(repo: SourceRepository, ref: str) -> FetchedManifest:
    """Fetch and parse parca-manifest.yaml at ref.

    Raises:
        ManifestFormatError: If the manifest is not valid YAML or is malformed
        RemoteNotFoundError: If the repository has no manifest at ref
    """
    logger.debug("Fetching manifest from %s at %s", repo.url, ref)
    result = await repo.fetch_file(MANIFEST_FILENAME, ref)
    try:
        document = yaml.safe_load(result.content)
    except yaml.YAMLError as e:
        raise ManifestFormatError(f"Manifest in {repo.url} is not valid YAML: {e}") from e
    return FetchedManifest(
        manifest=parse_manifest(document),
        ref=ref,
        document_hash=manifest_hash(document),
    )


def list_assets(
    manifest: Manifest, kind: AssetKind | None = None, *, resolved_commit: str | None = None
) -> list[RemoteAssetInfo]:
    """Summarize manifest assets, optionally filtered by kind."""
    results: list[RemoteAssetInfo] = []
    for asset_id, asset in manifest.assets.items():
        if kind is not None and asset.kind != kind:
            continue
        versions = sort_versions(asset.versions)
        results.append(
            RemoteAssetInfo(
                id=asset_id,
                kind=asset.kind,
                description=asset.description or "",
                latest_version=latest_version(versions) or "unknown",
                versions=versions,
                resolved_commit=resolved_commit,
            )
        )
    return results
