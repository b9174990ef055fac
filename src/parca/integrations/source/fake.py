"""In-memory fake SourceRepository for testing."""

import hashlib

from parca.errors import RefResolutionError, RemoteNotFoundError, SourceAccessError
from parca.integrations.source.abc import (
    DirectoryResult,
    FileResult,
    RemoteFile,
    SourceRepository,
)


class FakeSourceRepository(SourceRepository):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods.
    """

    def __init__(
        self,
        *,
        url: str = "https://github.com/test-org/test-repo",
        refs: dict[str, str] | None = None,
        trees: dict[str, dict[str, str]] | None = None,
        unreachable: bool = False,
    ) -> None:
        """Create FakeSourceRepository with pre-configured state.

        Args:
            url: Repository URL reported by the fake
            refs: Mapping of symbolic ref (branch/tag) -> commit id
            trees: Mapping of commit id -> {path: file content}
            unreachable: If True, every call fails with SourceAccessError
        """
        self._url = url
        self._refs = refs or {}
        self._trees = trees or {}
        self._unreachable = unreachable
        self._resolved_refs: list[str] = []
        self._fetched_files: list[tuple[str, str]] = []
        self._fetched_directories: list[tuple[str, str]] = []

    @property
    def url(self) -> str:
        return self._url

    @property
    def resolved_refs(self) -> list[str]:
        """Refs passed to resolve_ref(), for test assertions."""
        return self._resolved_refs

    @property
    def fetched_files(self) -> list[tuple[str, str]]:
        """(path, ref) tuples passed to fetch_file(), for test assertions."""
        return self._fetched_files

    @property
    def fetched_directories(self) -> list[tuple[str, str]]:
        """(path, ref) tuples passed to fetch_directory(), for test assertions."""
        return self._fetched_directories

    def _check_reachable(self) -> None:
        if self._unreachable:
            raise SourceAccessError(f"Simulated network failure for {self._url}")

    def _commit_for(self, ref: str) -> str:
        if ref in self._refs:
            return self._refs[ref]
        if ref in self._trees:
            return ref
        raise RefResolutionError(ref, self._url)

    async def resolve_ref(self, ref: str) -> str:
        self._check_reachable()
        self._resolved_refs.append(ref)
        return self._commit_for(ref)

    async def fetch_file(self, path: str, ref: str) -> FileResult:
        self._check_reachable()
        self._fetched_files.append((path, ref))
        tree = self._trees.get(self._commit_for(ref), {})
        if path not in tree:
            raise RemoteNotFoundError(path, ref)
        content = tree[path]
        content_id = hashlib.sha1(content.encode("utf-8")).hexdigest()
        return FileResult(content=content, content_id=content_id)

    async def fetch_directory(self, path: str, ref: str) -> DirectoryResult:
        self._check_reachable()
        self._fetched_directories.append((path, ref))
        tree = self._trees.get(self._commit_for(ref), {})
        prefix = path.rstrip("/") + "/"
        files = [
            RemoteFile(path=file_path[len(prefix) :], content=content)
            for file_path, content in sorted(tree.items())
            if file_path.startswith(prefix)
        ]
        if not files:
            raise RemoteNotFoundError(path, ref)
        return DirectoryResult(files=files)
