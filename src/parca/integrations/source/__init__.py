from parca.integrations.source.abc import (
    DirectoryResult,
    FileResult,
    RemoteFile,
    SourceRepository,
)
from parca.integrations.source.fake import FakeSourceRepository

__all__ = [
    "DirectoryResult",
    "FakeSourceRepository",
    "FileResult",
    "RemoteFile",
    "SourceRepository",
]
