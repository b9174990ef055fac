"""Fake clock implementation for testing."""

from datetime import UTC, datetime

from parca.integrations.time.abc import Time


class FakeTime(Time):
    """Clock frozen at a constructor-provided instant.

    This class has NO public setup methods.
    """

    def __init__(self, *, now: datetime | None = None) -> None:
        self._now = now or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self._now
