"""Source repository interface.

Architecture:
- SourceRepository: Abstract base class defining the transport the resolver needs
- GitHubSourceRepository / AzureSourceRepository: REST implementations over httpx
- FakeSourceRepository: In-memory implementation for tests

Failure contract for every implementation:
- RemoteNotFoundError: the host answered that the path does not exist at the ref
- RefResolutionError: the host answered that the ref does not exist
- SourceAccessError: anything else (network, auth, unexpected payloads)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FileResult:
    """A single file fetched at a ref."""

    content: str
    content_id: str


@dataclass(frozen=True)
class RemoteFile:
    """One file inside a fetched directory, path relative to that directory."""

    path: str
    content: str


@dataclass(frozen=True)
class DirectoryResult:
    """All files below a directory at a ref."""

    files: list[RemoteFile]


class SourceRepository(ABC):
    """Abstract interface for reading a remote source repository.

    All implementations (real and fake) must implement this interface.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Repository URL, for messages."""
        ...

    @abstractmethod
    async def resolve_ref(self, ref: str) -> str:
        """Resolve a branch, tag or commit to a commit id."""
        ...

    @abstractmethod
    async def fetch_file(self, path: str, ref: str) -> FileResult:
        """Fetch a single file at a ref."""
        ...

    @abstractmethod
    async def fetch_directory(self, path: str, ref: str) -> DirectoryResult:
        """Fetch every file below a directory (recursively) at a ref."""
        ...

    async def aclose(self) -> None:
        """Release transport resources. Default is a no-op."""
        return None
