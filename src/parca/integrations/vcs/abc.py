"""Version control context for the maintainer's working copy."""

from abc import ABC, abstractmethod


class VersionControl(ABC):
    """Abstract access to the publishing repository's current revision."""

    @abstractmethod
    def current_revision(self) -> str | None:
        """Return the commit id of HEAD, or None when it cannot be determined."""
        ...
