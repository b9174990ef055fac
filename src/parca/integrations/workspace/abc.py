"""Placing resolved assets into the consumer workspace."""

from abc import ABC, abstractmethod
from pathlib import Path

from parca.models.manifest import AssetKind


def default_mapping(asset_id: str, kind: AssetKind) -> str:
    """Workspace location used when an install names no mapping."""
    if kind == "skill":
        return ".github/skills/"
    if kind == "instruction":
        return f".github/instructions/{asset_id}.instructions.md"
    return f".github/prompts/{asset_id}.prompt.md"


def mapping_target(workspace_root: Path, mapping: str, asset_id: str, kind: AssetKind) -> Path:
    """Resolve a mapping to the path the asset occupies in the workspace.

    A mapping ending in a slash names a directory: skills land in
    ``<dir>/<asset_id>``, single files in ``<dir>/<asset_id>.md``.
    """
    if mapping.endswith(("/", "\\")):
        name = asset_id if kind == "skill" else f"{asset_id}.md"
        return workspace_root / mapping.rstrip("/\\") / name
    return workspace_root / mapping


class WorkspaceProjector(ABC):
    """Makes cached asset content visible at a workspace location."""

    @abstractmethod
    def project(self, cache_path: Path, mapping: str, asset_id: str, kind: AssetKind) -> Path:
        """Expose cache_path at the mapping location, replacing what was there.

        Returns:
            The workspace path the asset now occupies
        """
        ...

    @abstractmethod
    def remove(self, mapping: str, asset_id: str) -> None:
        """Remove a projection created by project(); missing targets are ignored.

        For directory mappings both the skill and the single-file location are
        checked, since the kind is not recorded in the consumer configuration.
        """
        ...
