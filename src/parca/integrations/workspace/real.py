"""Symlink-based workspace projection with .gitignore bookkeeping."""

import logging
import shutil
from pathlib import Path

from parca.integrations.workspace.abc import WorkspaceProjector, mapping_target
from parca.models.manifest import AssetKind

logger = logging.getLogger(__name__)

GITIGNORE_MARKER = "# PARCA managed assets"

_KINDS_BY_LOCATION: tuple[AssetKind, ...] = ("skill", "prompt")


class SymlinkWorkspaceProjector(WorkspaceProjector):
    """Links workspace paths to cache entries and keeps them out of version control."""

    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root

    def project(self, cache_path: Path, mapping: str, asset_id: str, kind: AssetKind) -> Path:
        target = mapping_target(self._workspace_root, mapping, asset_id, kind)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._clear(target)
        target.symlink_to(cache_path, target_is_directory=cache_path.is_dir())
        logger.debug("Linked %s -> %s", target, cache_path)
        self._ensure_gitignored(target)
        return target

    def remove(self, mapping: str, asset_id: str) -> None:
        for kind in _KINDS_BY_LOCATION:
            target = mapping_target(self._workspace_root, mapping, asset_id, kind)
            # Only links are ours to delete
            if target.is_symlink():
                target.unlink()
                logger.debug("Unlinked %s", target)

    def _clear(self, target: Path) -> None:
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.is_dir():
            shutil.rmtree(target)

    def _ensure_gitignored(self, target: Path) -> None:
        gitignore = self._workspace_root / ".gitignore"
        relative = target.relative_to(self._workspace_root).as_posix()

        content = gitignore.read_text(encoding="utf-8") if gitignore.exists() else ""
        if relative in content.splitlines():
            return

        if GITIGNORE_MARKER not in content:
            if content and not content.endswith("\n"):
                content += "\n"
            content += f"\n{GITIGNORE_MARKER}\n" if content else f"{GITIGNORE_MARKER}\n"

        # Entries go directly below the marker
        marker_end = content.index(GITIGNORE_MARKER) + len(GITIGNORE_MARKER)
        content = content[:marker_end] + f"\n{relative}" + content[marker_end:]
        if not content.endswith("\n"):
            content += "\n"
        gitignore.write_text(content, encoding="utf-8")
