"""Git-backed VersionControl."""

import logging
from pathlib import Path

from parca.integrations.vcs.abc import VersionControl
from parca.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)


class GitVersionControl(VersionControl):
    """Production implementation running git in the source repository."""

    def __init__(self, repo_root: Path) -> None:
        self._repo_root = repo_root

    def current_revision(self) -> str | None:
        try:
            result = run_subprocess_with_context(
                ["git", "rev-parse", "HEAD"],
                operation_context="read HEAD commit",
                cwd=self._repo_root,
            )
        except RuntimeError as e:
            logger.debug("HEAD unavailable in %s: %s", self._repo_root, e)
            return None
        return result.stdout.strip() or None
