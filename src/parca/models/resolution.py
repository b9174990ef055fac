"""Resolution result models."""

from dataclasses import dataclass, field
from pathlib import Path

from parca.models.config import AssetEntry
from parca.models.manifest import AssetKind, Manifest


@dataclass(frozen=True)
class CacheKey:
    """Identity of one cached asset version."""

    source: str
    asset_id: str
    version: str


@dataclass(frozen=True)
class ResolvedAsset:
    """Outcome of resolving one asset. Not persisted."""

    id: str
    version: str
    source: str
    commit: str
    sha256: str
    content: str
    cache_path: Path
    kind: AssetKind
    mapping: str | None = None
    from_cache: bool = False


@dataclass(frozen=True)
class InstallConflict:
    """Returned by install when the asset is already declared and force is off."""

    existing: AssetEntry
    selected_version: str


@dataclass(frozen=True)
class RemoteAssetInfo:
    """Summary of an asset available from a remote source."""

    id: str
    kind: AssetKind
    description: str
    latest_version: str
    versions: list[str]
    resolved_commit: str | None = None


@dataclass(frozen=True)
class PublishResult:
    """Outcome of publishing a new version to a manifest."""

    manifest: Manifest
    asset_id: str
    version: str
    checkpointed_version: str | None = None
    checkpoint_ref: str | None = None
    warnings: list[str] = field(default_factory=list)
