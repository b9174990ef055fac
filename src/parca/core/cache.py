"""Content-addressed cache of fetched asset versions.

Layout: ``<root>/<source>/<asset_id>/<version>/``. Single-file kinds keep
``<asset_id>.md`` inside that directory; skills occupy the directory itself.

Hashes are SHA-256 over LF-normalized UTF-8 bytes, so a CRLF checkout and an LF
checkout of the same content hash identically. Directory hashes feed every
file's relative POSIX path followed by its content, in sorted path order.
"""

import hashlib
import logging
import posixpath
import shutil
from collections.abc import Iterable
from pathlib import Path

from parca.errors import InvalidPayloadError
from parca.models.resolution import CacheKey

logger = logging.getLogger(__name__)


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def hash_bytes(data: bytes) -> str:
    """Hash raw content; equal to hash_text() of the same UTF-8 text."""
    return hashlib.sha256(data.replace(b"\r\n", b"\n")).hexdigest()


def hash_text(text: str) -> str:
    return hash_bytes(text.encode("utf-8"))


def _hash_file_bytes(files: Iterable[tuple[str, bytes]]) -> str:
    digest = hashlib.sha256()
    for relative, data in sorted(files, key=lambda item: item[0]):
        # Path and content are concatenated unframed; recorded lockfile
        # hashes depend on this exact byte stream.
        digest.update(relative.encode("utf-8"))
        digest.update(data.replace(b"\r\n", b"\n"))
    return digest.hexdigest()


def hash_files(files: Iterable[tuple[str, str]]) -> str:
    """Hash (relative path, content) pairs independent of their order."""
    return _hash_file_bytes((relative, content.encode("utf-8")) for relative, content in files)


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def hash_directory(directory: Path) -> str:
    """Hash a tree from its raw bytes, so undecodable files still hash."""
    files = [
        (file.relative_to(directory).as_posix(), file.read_bytes())
        for file in directory.rglob("*")
        if file.is_file()
    ]
    return _hash_file_bytes(files)


def safe_relative_path(path: str) -> str:
    """Normalize a remote relative path to POSIX form.

    Raises:
        InvalidPayloadError: If the path is empty, absolute or escapes its root
    """
    candidate = path.replace("\\", "/")
    if not candidate or candidate.startswith("/") or (len(candidate) > 1 and candidate[1] == ":"):
        raise InvalidPayloadError(f"Refusing to cache file with unsafe path: {path!r}")
    normalized = posixpath.normpath(candidate)
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        raise InvalidPayloadError(f"Refusing to cache file with unsafe path: {path!r}")
    return normalized


class ContentAddressedCache:
    """Unbounded local store of asset versions; nothing is ever evicted."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def asset_dir(self, key: CacheKey) -> Path:
        return self._root / key.source / key.asset_id / key.version

    def file_path(self, key: CacheKey) -> Path:
        return self.asset_dir(key) / f"{key.asset_id}.md"

    def write_file(self, key: CacheKey, content: str) -> Path:
        """Store a single-file asset, normalized to LF."""
        path = self.file_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_text(path, normalize_line_endings(content))
        logger.debug("Cached %s", path)
        return path

    def write_directory(self, key: CacheKey, files: Iterable[tuple[str, str]]) -> Path:
        """Store a directory asset, replacing any previous tree wholesale."""
        directory = self.asset_dir(key)
        entries = [(safe_relative_path(relative), content) for relative, content in files]

        if directory.exists():
            shutil.rmtree(directory)
        directory.mkdir(parents=True)

        for relative, content in entries:
            target = directory / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            _write_text(target, normalize_line_endings(content))
        logger.debug("Cached %d file(s) under %s", len(entries), directory)
        return directory

    def read_file(self, path: Path) -> str:
        return _read_text(path)

    def compute_hash(self, path: Path) -> str:
        """Recompute the content hash of a cached file or directory from disk."""
        if path.is_dir():
            return hash_directory(path)
        return hash_bytes(path.read_bytes())
