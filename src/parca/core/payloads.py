"""Payload shapes: how each asset kind is fetched, cached and hashed.

``prompt`` and ``instruction`` assets are a single file; ``skill`` assets are
a directory tree with a SKILL.md at its root. The resolver works through
``payload_for(kind)`` and never branches on the kind itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from parca.core.cache import ContentAddressedCache, hash_files, hash_text, safe_relative_path
from parca.errors import MissingSkillEntryError
from parca.integrations.source.abc import SourceRepository
from parca.models.manifest import AssetKind
from parca.models.resolution import CacheKey

SKILL_ENTRY = "skill.md"


@dataclass(frozen=True)
class FetchedPayload:
    """Bytes fetched for one asset version, hashed but not yet stored.

    ``files`` holds (relative path, content) pairs; ``content`` is the
    primary text shown to callers (the file itself, or the skill's SKILL.md).
    """

    files: tuple[tuple[str, str], ...]
    content: str
    sha256: str


class PayloadShape(ABC):
    """Fetch/store/verify operations for one family of asset kinds."""

    @abstractmethod
    def cache_path(self, cache: ContentAddressedCache, key: CacheKey) -> Path:
        """Path the asset occupies in the cache (a file or a directory)."""
        ...

    @abstractmethod
    async def fetch(
        self, repo: SourceRepository, path: str, ref: str, *, asset_id: str
    ) -> FetchedPayload:
        """Fetch the payload at ref and hash it in memory."""
        ...

    @abstractmethod
    def store(self, cache: ContentAddressedCache, key: CacheKey, payload: FetchedPayload) -> Path:
        """Write a fetched payload into the cache, returning its cache path."""
        ...

    @abstractmethod
    def read_cached(self, cache: ContentAddressedCache, key: CacheKey) -> str:
        """Return the primary text of a cached payload."""
        ...

    @abstractmethod
    def is_well_formed(self, cache_path: Path) -> bool:
        """Whether the cached payload has the structure its kind requires."""
        ...

    def is_cached(self, cache: ContentAddressedCache, key: CacheKey, expected_sha256: str) -> bool:
        """Whether the cache holds this key with exactly the expected content.

        The hash is recomputed from disk so edits to cached files are caught.
        """
        path = self.cache_path(cache, key)
        if not path.exists() or not self.is_well_formed(path):
            return False
        return cache.compute_hash(path) == expected_sha256


class SingleFilePayload(PayloadShape):
    def cache_path(self, cache: ContentAddressedCache, key: CacheKey) -> Path:
        return cache.file_path(key)

    async def fetch(
        self, repo: SourceRepository, path: str, ref: str, *, asset_id: str
    ) -> FetchedPayload:
        result = await repo.fetch_file(path, ref)
        return FetchedPayload(
            files=((f"{asset_id}.md", result.content),),
            content=result.content,
            sha256=hash_text(result.content),
        )

    def store(self, cache: ContentAddressedCache, key: CacheKey, payload: FetchedPayload) -> Path:
        return cache.write_file(key, payload.content)

    def read_cached(self, cache: ContentAddressedCache, key: CacheKey) -> str:
        return cache.read_file(cache.file_path(key))

    def is_well_formed(self, cache_path: Path) -> bool:
        return cache_path.is_file()


def _find_skill_entry(names: list[str]) -> str | None:
    for name in names:
        if name.lower() == SKILL_ENTRY:
            return name
    return None


class DirectoryPayload(PayloadShape):
    """A skill: a directory tree that must contain SKILL.md at its root."""

    def cache_path(self, cache: ContentAddressedCache, key: CacheKey) -> Path:
        return cache.asset_dir(key)

    async def fetch(
        self, repo: SourceRepository, path: str, ref: str, *, asset_id: str
    ) -> FetchedPayload:
        result = await repo.fetch_directory(path, ref)
        files = tuple((safe_relative_path(f.path), f.content) for f in result.files)

        entry = _find_skill_entry([relative for relative, _content in files])
        if entry is None:
            raise MissingSkillEntryError(asset_id, path)

        contents = dict(files)
        return FetchedPayload(files=files, content=contents[entry], sha256=hash_files(files))

    def store(self, cache: ContentAddressedCache, key: CacheKey, payload: FetchedPayload) -> Path:
        return cache.write_directory(key, payload.files)

    def read_cached(self, cache: ContentAddressedCache, key: CacheKey) -> str:
        directory = cache.asset_dir(key)
        entry = _find_skill_entry([child.name for child in directory.iterdir() if child.is_file()])
        if entry is None:
            raise MissingSkillEntryError(key.asset_id, str(directory))
        return cache.read_file(directory / entry)

    def is_well_formed(self, cache_path: Path) -> bool:
        if not cache_path.is_dir():
            return False
        names = [child.name for child in cache_path.iterdir() if child.is_file()]
        return _find_skill_entry(names) is not None


_SINGLE_FILE = SingleFilePayload()
_DIRECTORY = DirectoryPayload()

_SHAPES: dict[AssetKind, PayloadShape] = {
    "prompt": _SINGLE_FILE,
    "instruction": _SINGLE_FILE,
    "skill": _DIRECTORY,
}


def payload_for(kind: AssetKind) -> PayloadShape:
    return _SHAPES[kind]
