"""Lockfile I/O for .parca-assets.lock."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from parca.errors import ConfigFormatError
from parca.models.lockfile import LockedAsset, Lockfile

logger = logging.getLogger(__name__)

LOCKFILE_FILENAME = ".parca-assets.lock"


def _parse_locked(data: Any) -> LockedAsset:
    try:
        return LockedAsset(
            id=data["id"],
            version=data["version"],
            source=data["source"],
            commit=data["commit"],
            sha256=data["sha256"],
            manifest_hash=data["manifestHash"],
            resolved_at=data["resolvedAt"],
        )
    except (KeyError, TypeError) as e:
        raise ConfigFormatError(f"Invalid lockfile entry: {data}") from e


def _locked_to_document(locked: LockedAsset) -> dict[str, str]:
    return {
        "id": locked.id,
        "version": locked.version,
        "source": locked.source,
        "commit": locked.commit,
        "sha256": locked.sha256,
        "manifestHash": locked.manifest_hash,
        "resolvedAt": locked.resolved_at,
    }


class LockfileStore:
    """Whole-file persistence for the lockfile.

    Every mutation loads the full file, applies one change and rewrites it.
    Writes go through a temporary file renamed into place, so readers never
    observe a partial lockfile. Concurrent writers from separate processes
    are not coordinated; the last rename wins.
    """

    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root

    @property
    def path(self) -> Path:
        return self._workspace_root / LOCKFILE_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Lockfile:
        """Load the lockfile; a missing file is an empty lockfile.

        Raises:
            ConfigFormatError: If the file is not a valid lockfile
        """
        if not self.exists():
            return Lockfile()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigFormatError(f"{self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("assets", []), list):
            raise ConfigFormatError(f'{self.path} missing or invalid "assets" field.')
        return Lockfile(assets=tuple(_parse_locked(item) for item in data.get("assets", [])))

    def save(self, lockfile: Lockfile) -> None:
        content = json.dumps(
            {"assets": [_locked_to_document(locked) for locked in lockfile.assets]}, indent=2
        )
        fd, tmp_name = tempfile.mkstemp(
            dir=self._workspace_root, prefix=f"{LOCKFILE_FILENAME}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d locked asset(s) to %s", len(lockfile.assets), self.path)

    def find(self, asset_id: str, source: str) -> LockedAsset | None:
        return self.load().find(asset_id, source)

    def upsert(self, entry: LockedAsset) -> Lockfile:
        lockfile = self.load().upsert(entry)
        self.save(lockfile)
        return lockfile

    def remove(self, asset_id: str, source: str) -> Lockfile:
        lockfile = self.load().remove(asset_id, source)
        self.save(lockfile)
        return lockfile
