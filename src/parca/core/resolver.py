"""Resolution of declared assets into the cache, lockfile and workspace.

Three sources of truth are reconciled here: the remote manifest, the local
lockfile and the local cache. The rules that keep a locked consumer stable:

- A locked asset re-resolved at its locked version reads the manifest at the
  locked commit, so a rolling version cannot drift with the registry branch.
- A lockfile record whose version and commit still match, with cache content
  that re-hashes to the recorded value, is served without fetching.
- Content that hashes differently from the locked record for the same asset
  and source is an integrity failure unless the caller explicitly allows an
  update, even when the declared version moved. Nothing is written in that
  case.
"""

import logging
from dataclasses import replace
from pathlib import Path

from parca.core.cache import ContentAddressedCache
from parca.core.manifests import FetchedManifest, fetch_manifest, list_assets
from parca.core.payloads import payload_for
from parca.core.progress import ResolveProgress
from parca.core.refs import effective_ref
from parca.core.versions import pick_version, sort_versions
from parca.errors import (
    AssetNotFoundError,
    AssetNotInstalledError,
    IntegrityMismatchError,
    ParcaError,
    SourceNotRegisteredError,
    VersionNotFoundError,
)
from parca.integrations.source.abc import SourceRepository
from parca.integrations.source.factory import SourceRepositoryFactory, infer_provider
from parca.integrations.time.abc import Time
from parca.integrations.workspace.abc import (
    WorkspaceProjector,
    default_mapping,
    mapping_target,
)
from parca.io.config import ConsumerConfigStore
from parca.io.lockfile import LockfileStore
from parca.models.config import AssetEntry
from parca.models.lockfile import LockedAsset
from parca.models.manifest import AssetKind, ManifestAsset
from parca.models.resolution import CacheKey, InstallConflict, RemoteAssetInfo, ResolvedAsset

logger = logging.getLogger(__name__)


def _lookup_asset(fetched: FetchedManifest, asset_id: str) -> ManifestAsset:
    asset = fetched.manifest.assets.get(asset_id)
    if asset is None:
        raise AssetNotFoundError(asset_id, sorted(fetched.manifest.assets))
    return asset


def _projection_moved(old: AssetEntry, new: AssetEntry, kind: AssetKind) -> bool:
    """Whether a re-install projects to a different workspace path than before."""
    root = Path()
    before = mapping_target(root, old.mapping or "", old.id, kind)
    return before != mapping_target(root, new.mapping or "", new.id, kind)


class AssetResolver:
    """Installs and resolves assets for one consumer workspace."""

    def __init__(
        self,
        *,
        config_store: ConsumerConfigStore,
        lockfile_store: LockfileStore,
        cache: ContentAddressedCache,
        projector: WorkspaceProjector,
        source_factory: SourceRepositoryFactory,
        time: Time,
        registry_ref: str = "main",
    ) -> None:
        self._config_store = config_store
        self._lockfile_store = lockfile_store
        self._cache = cache
        self._projector = projector
        self._source_factory = source_factory
        self._time = time
        self._registry_ref = registry_ref

    @property
    def registry_ref(self) -> str:
        return self._registry_ref

    async def _fetch_registry_manifest(self, repo: SourceRepository) -> FetchedManifest:
        """Pin the registry branch to a commit and read the manifest there."""
        commit = await repo.resolve_ref(self._registry_ref)
        return await fetch_manifest(repo, commit)

    async def list_remote(self, url: str, kind: AssetKind | None = None) -> list[RemoteAssetInfo]:
        """List assets a remote source publishes at the registry's current commit."""
        repo = self._source_factory(infer_provider(url), url)
        try:
            fetched = await self._fetch_registry_manifest(repo)
        finally:
            await repo.aclose()
        return list_assets(fetched.manifest, kind, resolved_commit=fetched.ref)

    async def install(
        self,
        url: str,
        asset_id: str,
        specifier: str = "latest",
        force: bool = False,
        mapping: str | None = None,
    ) -> ResolvedAsset | InstallConflict:
        """Install one asset from a remote source.

        When the asset is already declared and force is off, nothing is
        changed and an InstallConflict is returned so the caller can decide.
        The consumer configuration is written only after resolution succeeds.

        Raises:
            AssetNotFoundError: If the manifest does not declare asset_id
            NoMatchingVersionError: If no version satisfies specifier
        """
        provider = infer_provider(url)
        repo = self._source_factory(provider, url)
        try:
            fetched = await self._fetch_registry_manifest(repo)
            asset = _lookup_asset(fetched, asset_id)
            version = pick_version(asset.versions, specifier, asset_id=asset_id)

            config = self._config_store.load_or_default()
            existing = config.find_asset(asset_id)
            if existing is not None and not force:
                logger.debug(
                    "%s already installed at %s; selected %s", asset_id, existing.version, version
                )
                return InstallConflict(existing=existing, selected_version=version)

            config, alias = self._config_store.ensure_source(config, url, provider)
            if mapping is None and existing is not None:
                mapping = existing.mapping
            entry = AssetEntry(
                id=asset_id,
                source=alias,
                version=version,
                mapping=mapping or default_mapping(asset_id, asset.kind),
            )

            resolved = await self.resolve_asset(
                entry, fetched, repo, fetched.ref, allow_update=True
            )
        finally:
            await repo.aclose()

        if existing is not None:
            if existing.mapping and _projection_moved(existing, entry, asset.kind):
                self._projector.remove(existing.mapping, existing.id)
            config = config.without_asset(asset_id)
            if existing.source != alias:
                self._lockfile_store.remove(existing.id, existing.source)
        self._config_store.add_asset(config, entry)
        return resolved

    async def update(self, asset_id: str, specifier: str = "latest") -> ResolvedAsset:
        """Move an installed asset to the newest version matching specifier.

        This is the explicit path that accepts new content for a locked asset.

        Raises:
            AssetNotInstalledError: If the asset is not declared
            SourceNotRegisteredError: If its source alias is unknown
        """
        config = self._config_store.load()
        entry = config.find_asset(asset_id)
        if entry is None:
            raise AssetNotInstalledError(asset_id, [a.id for a in config.assets])
        source = config.sources.get(entry.source)
        if source is None:
            raise SourceNotRegisteredError(entry.source)

        repo = self._source_factory(source.provider, source.url)
        try:
            fetched = await self._fetch_registry_manifest(repo)
            asset = _lookup_asset(fetched, asset_id)
            version = pick_version(asset.versions, specifier, asset_id=asset_id)
            updated = replace(entry, version=version)
            resolved = await self.resolve_asset(
                updated, fetched, repo, fetched.ref, allow_update=True
            )
        finally:
            await repo.aclose()

        self._config_store.add_asset(config, updated)
        return resolved

    async def resolve_all(self, progress: ResolveProgress | None = None) -> list[ResolvedAsset]:
        """Resolve every declared asset, honouring the lockfile.

        Assets are processed one at a time, grouped by source. A failure is
        reported through progress and the remaining assets still resolve; a
        source that cannot be opened fails only the assets declared against it.

        Returns:
            The assets that resolved successfully
        """
        if progress is None:
            progress = ResolveProgress()

        config = self._config_store.load()
        lockfile = self._lockfile_store.load()

        by_source: dict[str, list[AssetEntry]] = {}
        for entry in config.assets:
            by_source.setdefault(entry.source, []).append(entry)

        results: list[ResolvedAsset] = []
        for alias, entries in by_source.items():
            source = config.sources.get(alias)
            if source is None:
                message = str(SourceNotRegisteredError(alias))
                for entry in entries:
                    progress.on_asset_error(entry.id, message)
                continue

            try:
                repo = self._source_factory(source.provider, source.url)
            except (ParcaError, ValueError) as e:
                logger.debug("Cannot open source %s (%s): %s", alias, source.url, e)
                for entry in entries:
                    progress.on_asset_error(entry.id, str(e))
                continue

            manifests: dict[str, FetchedManifest] = {}
            try:
                for entry in entries:
                    progress.on_asset_start(entry.id, entry.version)
                    locked = lockfile.find(entry.id, entry.source)
                    if locked is not None and locked.version == entry.version:
                        manifest_ref = locked.commit
                    else:
                        manifest_ref = self._registry_ref

                    try:
                        if manifest_ref not in manifests:
                            manifests[manifest_ref] = await fetch_manifest(repo, manifest_ref)
                        resolved = await self.resolve_asset(
                            entry, manifests[manifest_ref], repo, manifest_ref
                        )
                    except (ParcaError, OSError) as e:
                        logger.debug("Failed to resolve %s: %s", entry.id, e)
                        progress.on_asset_error(entry.id, str(e))
                        continue

                    results.append(resolved)
                    progress.on_asset_done(entry.id, entry.version)
            finally:
                await repo.aclose()

        return results

    async def resolve_asset(
        self,
        entry: AssetEntry,
        fetched: FetchedManifest,
        repo: SourceRepository,
        manifest_ref: str,
        allow_update: bool = False,
    ) -> ResolvedAsset:
        """Resolve one declared asset against a manifest snapshot.

        Args:
            entry: The consumer's declared asset
            fetched: Manifest snapshot to look the version up in
            repo: Repository that published the manifest
            manifest_ref: Ref the snapshot was read at; rolling versions resolve to it
            allow_update: Accept content that differs from the lockfile record

        Raises:
            AssetNotFoundError: If the snapshot does not declare the asset
            VersionNotFoundError: If the snapshot lacks entry.version
            MissingSkillEntryError: If a skill has no SKILL.md
            IntegrityMismatchError: If locked content changed and allow_update is off
        """
        asset = _lookup_asset(fetched, entry.id)
        meta = asset.versions.get(entry.version)
        if meta is None:
            raise VersionNotFoundError(entry.id, entry.version, sort_versions(asset.versions))

        ref = effective_ref(
            meta,
            manifest_ref,
            version=entry.version,
            template=fetched.manifest.version_template,
        )
        commit = await repo.resolve_ref(ref)
        logger.debug("%s@%s: ref %s -> %s", entry.id, entry.version, ref, commit)

        key = CacheKey(source=entry.source, asset_id=entry.id, version=entry.version)
        shape = payload_for(asset.kind)
        locked = self._lockfile_store.find(entry.id, entry.source)
        locked_same_version = locked is not None and locked.version == entry.version

        if (
            locked is not None
            and locked_same_version
            and locked.commit == commit
            and not allow_update
            and shape.is_cached(self._cache, key, locked.sha256)
        ):
            logger.debug("%s@%s: cache hit at %s", entry.id, entry.version, commit)
            cache_path = shape.cache_path(self._cache, key)
            resolved = ResolvedAsset(
                id=entry.id,
                version=entry.version,
                source=entry.source,
                commit=commit,
                sha256=locked.sha256,
                content=shape.read_cached(self._cache, key),
                cache_path=cache_path,
                kind=asset.kind,
                mapping=entry.mapping,
                from_cache=True,
            )
        else:
            payload = await shape.fetch(repo, meta.path, commit, asset_id=entry.id)

            if locked is not None and locked.sha256 != payload.sha256 and not allow_update:
                raise IntegrityMismatchError(
                    entry.id, entry.version, expected=locked.sha256, actual=payload.sha256
                )

            cache_path = shape.store(self._cache, key, payload)
            self._lockfile_store.upsert(
                LockedAsset(
                    id=entry.id,
                    version=entry.version,
                    source=entry.source,
                    commit=commit,
                    sha256=payload.sha256,
                    manifest_hash=fetched.document_hash,
                    resolved_at=self._timestamp(),
                )
            )
            logger.debug(
                "%s@%s: locked at %s (%s)", entry.id, entry.version, commit, payload.sha256
            )
            resolved = ResolvedAsset(
                id=entry.id,
                version=entry.version,
                source=entry.source,
                commit=commit,
                sha256=payload.sha256,
                content=payload.content,
                cache_path=cache_path,
                kind=asset.kind,
                mapping=entry.mapping,
            )

        if entry.mapping:
            self._projector.project(cache_path, entry.mapping, entry.id, asset.kind)
        return resolved

    def list_installed(self) -> list[AssetEntry]:
        return self._config_store.installed_assets()

    def remove(self, asset_id: str) -> AssetEntry:
        """Drop an asset's declaration, lockfile record and workspace link.

        The cached content stays; the cache is never evicted.

        Raises:
            AssetNotInstalledError: If the asset is not declared
        """
        config = self._config_store.load()
        entry = config.find_asset(asset_id)
        if entry is None:
            raise AssetNotInstalledError(asset_id, [a.id for a in config.assets])

        if entry.mapping:
            self._projector.remove(entry.mapping, entry.id)
        self._lockfile_store.remove(entry.id, entry.source)
        self._config_store.remove_asset(config, asset_id)
        return entry

    def _timestamp(self) -> str:
        now = self._time.now()
        return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
