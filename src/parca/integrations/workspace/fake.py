"""Fake WorkspaceProjector for testing."""

from pathlib import Path

from parca.integrations.workspace.abc import WorkspaceProjector, mapping_target
from parca.models.manifest import AssetKind


class FakeWorkspaceProjector(WorkspaceProjector):
    """Records projections without touching the filesystem.

    This class has NO public setup methods.
    """

    def __init__(self, *, workspace_root: Path = Path("/workspace")) -> None:
        self._workspace_root = workspace_root
        self._projected: list[tuple[Path, str, str]] = []
        self._removed: list[tuple[str, str]] = []

    @property
    def projected(self) -> list[tuple[Path, str, str]]:
        """(cache_path, mapping, asset_id) tuples passed to project()."""
        return self._projected

    @property
    def removed(self) -> list[tuple[str, str]]:
        """(mapping, asset_id) tuples passed to remove()."""
        return self._removed

    def project(self, cache_path: Path, mapping: str, asset_id: str, kind: AssetKind) -> Path:
        self._projected.append((cache_path, mapping, asset_id))
        return mapping_target(self._workspace_root, mapping, asset_id, kind)

    def remove(self, mapping: str, asset_id: str) -> None:
        self._removed.append((mapping, asset_id))
