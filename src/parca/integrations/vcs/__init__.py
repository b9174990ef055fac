from parca.integrations.vcs.abc import VersionControl
from parca.integrations.vcs.fake import FakeVersionControl
from parca.integrations.vcs.real import GitVersionControl

__all__ = ["FakeVersionControl", "GitVersionControl", "VersionControl"]
