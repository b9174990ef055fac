"""Fake VersionControl for testing."""

from parca.integrations.vcs.abc import VersionControl


class FakeVersionControl(VersionControl):
    """In-memory fake returning a fixed revision (None simulates no git context)."""

    def __init__(self, *, revision: str | None = None) -> None:
        self._revision = revision
        self._calls = 0

    @property
    def call_count(self) -> int:
        """Number of current_revision() calls, for test assertions."""
        return self._calls

    def current_revision(self) -> str | None:
        self._calls += 1
        return self._revision
