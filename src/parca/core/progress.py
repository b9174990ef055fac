"""Progress reporting for batch resolution."""


class ResolveProgress:
    """Receives per-asset events from AssetResolver.resolve_all().

    The base implementation ignores every event; override what you need.
    """

    def on_asset_start(self, asset_id: str, version: str) -> None:
        pass

    def on_asset_done(self, asset_id: str, version: str) -> None:
        pass

    def on_asset_error(self, asset_id: str, message: str) -> None:
        pass


class RecordingProgress(ResolveProgress):
    """Collects events in order, for callers that report after the run."""

    def __init__(self) -> None:
        self.started: list[tuple[str, str]] = []
        self.done: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []

    def on_asset_start(self, asset_id: str, version: str) -> None:
        self.started.append((asset_id, version))

    def on_asset_done(self, asset_id: str, version: str) -> None:
        self.done.append((asset_id, version))

    def on_asset_error(self, asset_id: str, message: str) -> None:
        self.errors.append((asset_id, message))
