"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from parca.core.cache import ContentAddressedCache
from parca.core.publisher import CheckpointingPublisher
from parca.core.resolver import AssetResolver
from parca.core.settings import (
    FilesystemSettingsStore,
    ParcaSettings,
    SettingsStore,
)
from parca.integrations.source.factory import SourceRepositoryFactory, create_source_repository
from parca.integrations.time.abc import Time
from parca.integrations.time.real import RealTime
from parca.integrations.vcs.abc import VersionControl
from parca.integrations.vcs.real import GitVersionControl
from parca.integrations.workspace.abc import WorkspaceProjector
from parca.integrations.workspace.real import SymlinkWorkspaceProjector
from parca.io.config import ConsumerConfigStore
from parca.io.lockfile import LockfileStore


@dataclass(frozen=True)
class ParcaContext:
    """Immutable context holding all dependencies for parca commands.

    Created at the CLI entry point and passed to commands through click's
    ``ctx.obj``. Tests build one with ``for_test``.
    """

    cwd: Path
    settings: ParcaSettings
    settings_store: SettingsStore
    source_factory: SourceRepositoryFactory
    projector: WorkspaceProjector
    vcs: VersionControl
    time: Time

    def resolver(self) -> AssetResolver:
        return AssetResolver(
            config_store=ConsumerConfigStore(self.cwd),
            lockfile_store=LockfileStore(self.cwd),
            cache=ContentAddressedCache(self.settings.cache_root),
            projector=self.projector,
            source_factory=self.source_factory,
            time=self.time,
            registry_ref=self.settings.registry_ref,
        )

    def publisher(self) -> CheckpointingPublisher:
        return CheckpointingPublisher(self.cwd, vcs=self.vcs)

    @staticmethod
    def for_test(
        cwd: Path,
        settings: ParcaSettings | None = None,
        settings_store: SettingsStore | None = None,
        source_factory: SourceRepositoryFactory | None = None,
        projector: WorkspaceProjector | None = None,
        vcs: VersionControl | None = None,
        time: Time | None = None,
    ) -> "ParcaContext":
        """Create test context with fakes for anything unspecified.

        Args:
            cwd: Workspace directory (normally pytest's tmp_path)
            settings: Settings to use. If None, caches under cwd/.cache.
            settings_store: If None, an InMemorySettingsStore holding settings.
            source_factory: If None, every URL maps to an empty FakeSourceRepository.
            projector: If None, a FakeWorkspaceProjector rooted at cwd.
            vcs: If None, a FakeVersionControl with no revision.
            time: If None, a FakeTime.

        Example:
            >>> repo = FakeSourceRepository(refs={"main": "abc"}, trees={"abc": {...}})
            >>> ctx = ParcaContext.for_test(tmp_path, source_factory=lambda p, u: repo)
        """
        from parca.core.settings import InMemorySettingsStore
        from parca.integrations.source.fake import FakeSourceRepository
        from parca.integrations.time.fake import FakeTime
        from parca.integrations.vcs.fake import FakeVersionControl
        from parca.integrations.workspace.fake import FakeWorkspaceProjector

        if settings is None:
            settings = ParcaSettings(cache_root=cwd / ".cache")

        if settings_store is None:
            settings_store = InMemorySettingsStore(settings)

        if source_factory is None:

            def empty_source(provider: str, url: str) -> FakeSourceRepository:
                return FakeSourceRepository(url=url)

            source_factory = empty_source

        if projector is None:
            projector = FakeWorkspaceProjector(workspace_root=cwd)

        if vcs is None:
            vcs = FakeVersionControl()

        if time is None:
            time = FakeTime()

        return ParcaContext(
            cwd=cwd,
            settings=settings,
            settings_store=settings_store,
            source_factory=source_factory,
            projector=projector,
            vcs=vcs,
            time=time,
        )


def create_context() -> ParcaContext:
    """Create production context with real implementations.

    Called at the CLI entry point for the whole command execution.
    """
    cwd = Path.cwd()
    settings_store = FilesystemSettingsStore()
    return ParcaContext(
        cwd=cwd,
        settings=settings_store.load(),
        settings_store=settings_store,
        source_factory=create_source_repository,
        projector=SymlinkWorkspaceProjector(cwd),
        vcs=GitVersionControl(cwd),
        time=RealTime(),
    )
