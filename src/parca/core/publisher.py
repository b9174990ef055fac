"""Maintainer-side publishing with checkpointing.

The registry is the manifest on a mutable branch, with no tag per version.
To keep that safe, publishing version N+1 freezes the previously rolling
version at the commit currently checked out. At any moment at most one
version per asset is rolling; every older one is pinned.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from semver import Version

from parca.core.versions import is_semver, latest_version
from parca.errors import DuplicateVersionError
from parca.integrations.vcs.abc import VersionControl
from parca.io.manifest import ManifestStore
from parca.models.manifest import AssetKind, Manifest, ManifestAsset, ManifestVersion
from parca.models.resolution import PublishResult

logger = logging.getLogger(__name__)

BumpLevel = Literal["patch", "minor", "major"]

INITIAL_VERSION = "1.0.0"


@dataclass(frozen=True)
class Checkpoint:
    version: str
    ref: str


def rolling_checkpoint_candidate(asset: ManifestAsset) -> str | None:
    """The highest SemVer-valid version without an explicit ref, if any."""
    rolling = [v for v, meta in asset.versions.items() if is_semver(v) and meta.ref is None]
    return latest_version(rolling)


class CheckpointingPublisher:
    """Adds versions to a source repository's manifest."""

    def __init__(self, repo_root: Path, *, vcs: VersionControl) -> None:
        self._repo_root = repo_root
        self._vcs = vcs
        self._store = ManifestStore(repo_root)

    @property
    def manifest_path(self) -> Path:
        return self._store.path

    def is_source_repo(self) -> bool:
        return self._store.exists()

    def load_manifest(self) -> Manifest:
        return self._store.load()

    def init_manifest(self) -> Manifest:
        return self._store.init()

    def propose_next_version(
        self, manifest: Manifest, asset_id: str, level: BumpLevel = "patch"
    ) -> str:
        asset = manifest.assets.get(asset_id)
        if asset is None:
            return INITIAL_VERSION
        latest = latest_version(v for v in asset.versions if is_semver(v))
        if latest is None:
            return INITIAL_VERSION

        current = Version.parse(latest)
        if level == "major":
            return str(current.bump_major())
        if level == "minor":
            return str(current.bump_minor())
        # A pre-release bumps to its own release, as npm does
        if current.prerelease is not None:
            return str(current.finalize_version())
        return str(current.bump_patch())

    def publish(
        self,
        manifest: Manifest,
        asset_id: str,
        new_version: str,
        content_path: str,
        kind: AssetKind = "prompt",
    ) -> PublishResult:
        """Add new_version as the asset's rolling version and save the manifest.

        The previously rolling version is pinned to the current revision
        first. When the revision is unavailable that step is skipped with a
        warning; publication still proceeds.

        Args:
            manifest: Manifest to publish into
            asset_id: Asset to publish; created with ``kind`` if new
            new_version: Version to add
            content_path: Path of the content inside the source repository
            kind: Kind used when the asset is new; existing assets keep theirs

        Returns:
            PublishResult with the updated manifest and checkpoint details

        Raises:
            DuplicateVersionError: If new_version already exists for the asset
        """
        asset = manifest.assets.get(asset_id)
        if asset is None:
            asset = ManifestAsset(kind=kind, versions={})
        if new_version in asset.versions:
            raise DuplicateVersionError(asset_id, new_version)

        warnings: list[str] = []
        checkpoint: Checkpoint | None = None
        candidate = rolling_checkpoint_candidate(asset)
        if candidate is not None:
            revision = self._vcs.current_revision()
            if revision is None:
                message = (
                    f"Could not checkpoint previous version {candidate}: "
                    f"current revision unavailable"
                )
                logger.warning(message)
                warnings.append(message)
            else:
                previous = asset.versions[candidate]
                asset = asset.with_version(
                    candidate,
                    ManifestVersion(path=previous.path, ref=revision, runtime=previous.runtime),
                )
                checkpoint = Checkpoint(version=candidate, ref=revision)
                logger.debug("Pinned %s@%s to %s", asset_id, candidate, revision)

        asset = asset.with_version(new_version, ManifestVersion(path=content_path))
        updated = manifest.with_asset(asset_id, asset)
        self._store.save(updated)

        return PublishResult(
            manifest=updated,
            asset_id=asset_id,
            version=new_version,
            checkpointed_version=checkpoint.version if checkpoint else None,
            checkpoint_ref=checkpoint.ref if checkpoint else None,
            warnings=warnings,
        )
