from parca.integrations.workspace.abc import WorkspaceProjector, default_mapping
from parca.integrations.workspace.fake import FakeWorkspaceProjector
from parca.integrations.workspace.real import SymlinkWorkspaceProjector

__all__ = [
    "FakeWorkspaceProjector",
    "SymlinkWorkspaceProjector",
    "WorkspaceProjector",
    "default_mapping",
]
