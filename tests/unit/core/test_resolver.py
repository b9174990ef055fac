"""Tests for AssetResolver: install, resolve_all and the integrity rules."""

from pathlib import Path

import pytest

from parca.core.cache import hash_files, hash_text
from parca.core.manifests import fetch_manifest
from parca.core.progress import RecordingProgress
from parca.errors import (
    AssetNotFoundError,
    AssetNotInstalledError,
    IntegrityMismatchError,
    MissingSkillEntryError,
    NoMatchingVersionError,
    RemoteNotFoundError,
)
from parca.integrations.source.abc import SourceRepository
from parca.integrations.source.fake import FakeSourceRepository
from parca.integrations.source.github import GitHubSourceRepository
from parca.models.config import AssetEntry, ConsumerConfig, SourceConfig
from parca.models.resolution import InstallConflict, ResolvedAsset
from tests.test_utils.builders import (
    COMMIT_1,
    COMMIT_2,
    COMMIT_3,
    REPO_URL,
    SOURCE_ALIAS,
    build_resolver,
    manifest_yaml,
    prompt_asset,
    single_repo,
)

SINGLE_VERSION_MANIFEST = manifest_yaml(
    {"test-asset": prompt_asset({"1.0.0": {"path": "prompts/test.md"}})}
)

TWO_VERSION_MANIFEST = manifest_yaml(
    {
        "test-asset": prompt_asset(
            {
                "1.0.0": {"path": "prompts/test-v1.md", "ref": COMMIT_1},
                "1.1.0": {"path": "prompts/test.md"},
            }
        )
    }
)


def _repo_at(commit: str, trees: dict[str, dict[str, str]]) -> FakeSourceRepository:
    return FakeSourceRepository(url=REPO_URL, refs={"main": commit}, trees=trees)


class _Switchable:
    """Source factory whose repository can be swapped to simulate registry movement."""

    def __init__(self, repo: SourceRepository) -> None:
        self.repo = repo

    def __call__(self, provider: str, url: str) -> SourceRepository:
        return self.repo


class TestInstall:
    async def test_install_latest_caches_and_locks(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {
                COMMIT_1: {
                    "parca-manifest.yaml": SINGLE_VERSION_MANIFEST,
                    "prompts/test.md": "Hello\r\nWorld\r\n",
                }
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))

        result = await env.resolver.install(REPO_URL, "test-asset", "latest")

        assert isinstance(result, ResolvedAsset)
        assert result.version == "1.0.0"
        assert result.commit == COMMIT_1
        assert result.sha256 == hash_text("Hello\nWorld\n")
        assert result.cache_path.read_bytes() == b"Hello\nWorld\n"
        assert result.cache_path == env.cache.root / SOURCE_ALIAS / "test-asset" / "1.0.0" / (
            "test-asset.md"
        )

        locked = env.lockfile_store.find("test-asset", SOURCE_ALIAS)
        assert locked is not None
        assert locked.version == "1.0.0"
        assert locked.commit == COMMIT_1
        assert locked.sha256 == result.sha256
        assert locked.resolved_at == "2024-01-01T00:00:00.000Z"

        config = env.config_store.load()
        assert config.sources[SOURCE_ALIAS] == SourceConfig(url=REPO_URL, provider="github")
        assert config.assets == [
            AssetEntry(
                id="test-asset",
                source=SOURCE_ALIAS,
                version="1.0.0",
                mapping=".github/prompts/test-asset.prompt.md",
            )
        ]
        assert env.projector.projected == [
            (result.cache_path, ".github/prompts/test-asset.prompt.md", "test-asset")
        ]

    async def test_install_reads_manifest_at_pinned_registry_commit(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "x"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))

        await env.resolver.install(REPO_URL, "test-asset")

        assert repo.resolved_refs[0] == "main"
        assert ("parca-manifest.yaml", COMMIT_1) in repo.fetched_files
        assert ("prompts/test.md", COMMIT_1) in repo.fetched_files

    async def test_range_selects_and_pinned_version_uses_its_ref(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_2,
            {
                COMMIT_1: {"prompts/test-v1.md": "frozen v1"},
                COMMIT_2: {
                    "parca-manifest.yaml": TWO_VERSION_MANIFEST,
                    "prompts/test-v1.md": "edited after freeze",
                    "prompts/test.md": "v1.1",
                },
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))

        result = await env.resolver.install(REPO_URL, "test-asset", "~1.0.0")

        assert isinstance(result, ResolvedAsset)
        assert result.version == "1.0.0"
        assert result.commit == COMMIT_1
        assert result.content == "frozen v1"

    async def test_template_ref_is_resolved_when_opted_in(self, tmp_path: Path) -> None:
        manifest = manifest_yaml(
            {"test-asset": prompt_asset({"2.0.0": {"path": "p.md", "ref": "@template"}})},
            template="v{{version}}",
        )
        repo = FakeSourceRepository(
            url=REPO_URL,
            refs={"main": COMMIT_2, "v2.0.0": COMMIT_1},
            trees={COMMIT_1: {"p.md": "tagged"}, COMMIT_2: {"parca-manifest.yaml": manifest}},
        )
        env = build_resolver(tmp_path, single_repo(repo))

        result = await env.resolver.install(REPO_URL, "test-asset")

        assert isinstance(result, ResolvedAsset)
        assert result.commit == COMMIT_1
        assert result.content == "tagged"

    async def test_unknown_asset_lists_available_and_writes_nothing(self, tmp_path: Path) -> None:
        repo = _repo_at(COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST}})
        env = build_resolver(tmp_path, single_repo(repo))

        with pytest.raises(AssetNotFoundError) as exc_info:
            await env.resolver.install(REPO_URL, "missing")

        assert "test-asset" in str(exc_info.value)
        assert not env.config_store.exists()
        assert not env.lockfile_store.exists()

    async def test_unsatisfiable_range_raises(self, tmp_path: Path) -> None:
        repo = _repo_at(COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST}})
        env = build_resolver(tmp_path, single_repo(repo))

        with pytest.raises(NoMatchingVersionError):
            await env.resolver.install(REPO_URL, "test-asset", "^2.0.0")

    async def test_existing_asset_returns_conflict_without_mutation(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_2,
            {
                COMMIT_1: {"prompts/test-v1.md": "v1"},
                COMMIT_2: {"parca-manifest.yaml": TWO_VERSION_MANIFEST, "prompts/test.md": "v1.1"},
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))
        await env.resolver.install(REPO_URL, "test-asset", "1.0.0")
        config_before = env.config_store.path.read_text(encoding="utf-8")
        lock_before = env.lockfile_store.path.read_text(encoding="utf-8")

        result = await env.resolver.install(REPO_URL, "test-asset", "latest")

        assert isinstance(result, InstallConflict)
        assert result.existing.version == "1.0.0"
        assert result.selected_version == "1.1.0"
        assert env.config_store.path.read_text(encoding="utf-8") == config_before
        assert env.lockfile_store.path.read_text(encoding="utf-8") == lock_before

    async def test_force_replaces_existing_entry(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_2,
            {
                COMMIT_1: {"prompts/test-v1.md": "v1"},
                COMMIT_2: {"parca-manifest.yaml": TWO_VERSION_MANIFEST, "prompts/test.md": "v1.1"},
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))
        await env.resolver.install(REPO_URL, "test-asset", "1.0.0", mapping="prompts/")

        result = await env.resolver.install(REPO_URL, "test-asset", "latest", force=True)

        assert isinstance(result, ResolvedAsset)
        assert result.version == "1.1.0"
        config = env.config_store.load()
        assert [(a.id, a.version, a.mapping) for a in config.assets] == [
            ("test-asset", "1.1.0", "prompts/")
        ]
        lockfile = env.lockfile_store.load()
        assert len(lockfile.assets) == 1
        assert lockfile.assets[0].version == "1.1.0"
        assert lockfile.assets[0].commit == COMMIT_2

    async def test_failed_forced_install_keeps_previous_install(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_2,
            {
                COMMIT_1: {"prompts/test-v1.md": "v1"},
                COMMIT_2: {"parca-manifest.yaml": TWO_VERSION_MANIFEST},
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))
        await env.resolver.install(REPO_URL, "test-asset", "1.0.0")
        config_before = env.config_store.path.read_text(encoding="utf-8")
        lock_before = env.lockfile_store.path.read_text(encoding="utf-8")

        with pytest.raises(RemoteNotFoundError):
            await env.resolver.install(
                REPO_URL, "test-asset", "1.1.0", force=True, mapping="other/x.md"
            )

        assert env.projector.removed == []
        assert env.config_store.path.read_text(encoding="utf-8") == config_before
        assert env.lockfile_store.path.read_text(encoding="utf-8") == lock_before

    async def test_forced_install_with_new_mapping_removes_old_link(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "Hi"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))
        await env.resolver.install(REPO_URL, "test-asset", mapping="prompts/")

        await env.resolver.install(
            REPO_URL, "test-asset", force=True, mapping="prompts/test-asset.md"
        )
        assert env.projector.removed == []

        await env.resolver.install(REPO_URL, "test-asset", force=True, mapping="other/x.md")
        assert env.projector.removed == [("prompts/test-asset.md", "test-asset")]
        assert env.config_store.load().assets[0].mapping == "other/x.md"

    async def test_skill_without_entry_fails_and_persists_nothing(self, tmp_path: Path) -> None:
        manifest = manifest_yaml(
            {"review": prompt_asset({"1.0.0": {"path": "skills/review"}}, kind="skill")}
        )
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": manifest, "skills/review/notes.md": "no entry"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))

        with pytest.raises(MissingSkillEntryError):
            await env.resolver.install(REPO_URL, "review")

        assert not env.config_store.exists()
        assert not env.lockfile_store.exists()

    async def test_skill_installs_directory(self, tmp_path: Path) -> None:
        manifest = manifest_yaml(
            {"review": prompt_asset({"1.0.0": {"path": "skills/review"}}, kind="skill")}
        )
        files = {"SKILL.md": "# Review\n", "refs/guide.md": "Guide\n"}
        repo = _repo_at(
            COMMIT_1,
            {
                COMMIT_1: {
                    "parca-manifest.yaml": manifest,
                    **{f"skills/review/{name}": body for name, body in files.items()},
                }
            },
        )
        env = build_resolver(tmp_path, single_repo(repo))

        result = await env.resolver.install(REPO_URL, "review")

        assert isinstance(result, ResolvedAsset)
        assert result.kind == "skill"
        assert result.content == "# Review\n"
        assert result.cache_path == env.cache.root / SOURCE_ALIAS / "review" / "1.0.0"
        assert (result.cache_path / "refs" / "guide.md").read_text(encoding="utf-8") == "Guide\n"
        assert result.sha256 == hash_files(files.items())
        assert result.mapping == ".github/skills/"


class TestResolveAll:
    async def test_second_run_takes_fast_path(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "Hi"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))
        installed = await env.resolver.install(REPO_URL, "test-asset")
        assert isinstance(installed, ResolvedAsset)
        lock_before = env.lockfile_store.load()

        results = await env.resolver.resolve_all()

        assert len(results) == 1
        assert results[0].from_cache
        assert results[0].sha256 == installed.sha256
        assert results[0].content == "Hi"
        assert repo.fetched_files.count(("prompts/test.md", COMMIT_1)) == 1
        assert env.lockfile_store.load() == lock_before

    async def test_locked_rolling_version_ignores_registry_movement(self, tmp_path: Path) -> None:
        trees = {
            COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "old"},
            COMMIT_2: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "new"},
        }
        factory = _Switchable(_repo_at(COMMIT_1, trees))
        env = build_resolver(tmp_path, factory)
        await env.resolver.install(REPO_URL, "test-asset")

        moved = _repo_at(COMMIT_2, trees)
        factory.repo = moved
        results = await env.resolver.resolve_all()

        assert [r.content for r in results] == ["old"]
        assert results[0].commit == COMMIT_1
        assert ("parca-manifest.yaml", COMMIT_1) in moved.fetched_files
        assert "main" not in moved.resolved_refs

    async def test_tampered_cache_is_refetched(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "Hi"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))
        installed = await env.resolver.install(REPO_URL, "test-asset")
        assert isinstance(installed, ResolvedAsset)
        installed.cache_path.write_text("tampered", encoding="utf-8")

        results = await env.resolver.resolve_all()

        assert not results[0].from_cache
        assert results[0].sha256 == installed.sha256
        assert installed.cache_path.read_text(encoding="utf-8") == "Hi"

    async def test_failures_are_isolated_per_asset(self, tmp_path: Path) -> None:
        good = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "ok"}},
        )
        broken_url = "https://github.com/other-org/registry"
        broken = FakeSourceRepository(url=broken_url, unreachable=True)
        repos: dict[str, SourceRepository] = {REPO_URL: good, broken_url: broken}
        env = build_resolver(tmp_path, lambda provider, url: repos[url])
        env.config_store.save(
            ConsumerConfig(
                schema="1.0",
                sources={
                    SOURCE_ALIAS: SourceConfig(url=REPO_URL, provider="github"),
                    "other-org": SourceConfig(url=broken_url, provider="github"),
                },
                assets=[
                    AssetEntry(id="unreachable", source="other-org", version="1.0.0"),
                    AssetEntry(id="test-asset", source=SOURCE_ALIAS, version="1.0.0"),
                    AssetEntry(id="not-published", source=SOURCE_ALIAS, version="1.0.0"),
                    AssetEntry(id="orphan", source="ghost", version="1.0.0"),
                    AssetEntry(id="wrong-version", source=SOURCE_ALIAS, version="9.9.9"),
                ],
            )
        )
        progress = RecordingProgress()

        results = await env.resolver.resolve_all(progress)

        assert [r.id for r in results] == ["test-asset"]
        errors = dict(progress.errors)
        assert set(errors) == {"unreachable", "not-published", "orphan", "wrong-version"}
        assert errors["orphan"] == 'Source "ghost" not defined.'
        assert "test-asset" in errors["not-published"]
        assert "9.9.9" in errors["wrong-version"]
        assert "1.0.0" in errors["wrong-version"]
        assert progress.done == [("test-asset", "1.0.0")]

    async def test_manifest_fetched_once_per_source_and_ref(self, tmp_path: Path) -> None:
        manifest = manifest_yaml(
            {
                "a": prompt_asset({"1.0.0": {"path": "a.md"}}),
                "b": prompt_asset({"1.0.0": {"path": "b.md"}}),
            }
        )
        repo = _repo_at(
            COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": manifest, "a.md": "A", "b.md": "B"}}
        )
        env = build_resolver(tmp_path, single_repo(repo))
        env.config_store.save(
            ConsumerConfig(
                schema="1.0",
                sources={SOURCE_ALIAS: SourceConfig(url=REPO_URL, provider="github")},
                assets=[
                    AssetEntry(id="a", source=SOURCE_ALIAS, version="1.0.0"),
                    AssetEntry(id="b", source=SOURCE_ALIAS, version="1.0.0"),
                ],
            )
        )

        results = await env.resolver.resolve_all()

        assert [r.id for r in results] == ["a", "b"]
        manifest_fetches = [f for f in repo.fetched_files if f[0] == "parca-manifest.yaml"]
        assert manifest_fetches == [("parca-manifest.yaml", "main")]

    async def test_source_that_cannot_be_opened_fails_only_its_assets(
        self, tmp_path: Path
    ) -> None:
        good = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "ok"}},
        )
        bad_url = "https://github.com/onlyowner"

        def factory(provider: str, url: str) -> SourceRepository:
            if url == bad_url:
                return GitHubSourceRepository(url, token="t")
            return good

        env = build_resolver(tmp_path, factory)
        env.config_store.save(
            ConsumerConfig(
                schema="1.0",
                sources={
                    "broken": SourceConfig(url=bad_url, provider="github"),
                    SOURCE_ALIAS: SourceConfig(url=REPO_URL, provider="github"),
                },
                assets=[
                    AssetEntry(id="first", source="broken", version="1.0.0"),
                    AssetEntry(id="second", source="broken", version="1.0.0"),
                    AssetEntry(id="test-asset", source=SOURCE_ALIAS, version="1.0.0"),
                ],
            )
        )
        progress = RecordingProgress()

        results = await env.resolver.resolve_all(progress)

        assert [r.id for r in results] == ["test-asset"]
        errors = dict(progress.errors)
        assert set(errors) == {"first", "second"}
        assert "Invalid GitHub URL" in errors["first"]
        assert progress.done == [("test-asset", "1.0.0")]

    async def test_undecodable_cache_is_refetched_without_failing_others(
        self, tmp_path: Path
    ) -> None:
        manifest = manifest_yaml(
            {
                "a": prompt_asset({"1.0.0": {"path": "a.md"}}),
                "b": prompt_asset({"1.0.0": {"path": "b.md"}}),
            }
        )
        repo = _repo_at(
            COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": manifest, "a.md": "A", "b.md": "B"}}
        )
        env = build_resolver(tmp_path, single_repo(repo))
        installed = await env.resolver.install(REPO_URL, "a")
        await env.resolver.install(REPO_URL, "b")
        assert isinstance(installed, ResolvedAsset)
        installed.cache_path.write_bytes(b"\xff\xfe garbage")
        progress = RecordingProgress()

        results = await env.resolver.resolve_all(progress)

        assert progress.errors == []
        assert [(r.id, r.from_cache) for r in results] == [("a", False), ("b", True)]
        assert installed.cache_path.read_text(encoding="utf-8") == "A"


class TestIntegrity:
    async def test_changed_content_at_locked_version_is_refused(self, tmp_path: Path) -> None:
        trees = {
            COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "v1"},
            COMMIT_2: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "v1!"},
        }
        env = build_resolver(tmp_path, single_repo(_repo_at(COMMIT_1, trees)))
        installed = await env.resolver.install(REPO_URL, "test-asset")
        assert isinstance(installed, ResolvedAsset)
        lock_before = env.lockfile_store.path.read_text(encoding="utf-8")

        moved = _repo_at(COMMIT_2, trees)
        entry = env.config_store.load().assets[0]
        fetched = await fetch_manifest(moved, "main")
        with pytest.raises(IntegrityMismatchError) as exc_info:
            await env.resolver.resolve_asset(entry, fetched, moved, "main")

        message = str(exc_info.value)
        assert installed.sha256 in message
        assert hash_text("v1!") in message
        assert "--force" in message
        assert env.lockfile_store.path.read_text(encoding="utf-8") == lock_before
        assert installed.cache_path.read_text(encoding="utf-8") == "v1"

    async def test_same_commit_with_changed_bytes_is_refused(self, tmp_path: Path) -> None:
        manifest = SINGLE_VERSION_MANIFEST
        original = _repo_at(
            COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": manifest, "prompts/test.md": "a"}}
        )
        env = build_resolver(tmp_path, single_repo(original))
        installed = await env.resolver.install(REPO_URL, "test-asset")
        assert isinstance(installed, ResolvedAsset)
        installed.cache_path.unlink()

        rewritten = _repo_at(
            COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": manifest, "prompts/test.md": "b"}}
        )
        entry = env.config_store.load().assets[0]
        fetched = await fetch_manifest(rewritten, COMMIT_1)
        with pytest.raises(IntegrityMismatchError):
            await env.resolver.resolve_asset(entry, fetched, rewritten, COMMIT_1)

        locked = env.lockfile_store.find("test-asset", SOURCE_ALIAS)
        assert locked is not None
        assert locked.sha256 == installed.sha256

    async def test_update_accepts_new_content(self, tmp_path: Path) -> None:
        trees = {
            COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "v1"},
            COMMIT_2: {"parca-manifest.yaml": TWO_VERSION_MANIFEST, "prompts/test.md": "v1.1"},
        }
        factory = _Switchable(_repo_at(COMMIT_1, trees))
        env = build_resolver(tmp_path, factory)
        await env.resolver.install(REPO_URL, "test-asset")
        factory.repo = _repo_at(COMMIT_2, trees)

        result = await env.resolver.update("test-asset")

        assert result.version == "1.1.0"
        assert result.content == "v1.1"
        assert env.config_store.load().assets[0].version == "1.1.0"
        locked = env.lockfile_store.find("test-asset", SOURCE_ALIAS)
        assert locked is not None
        assert (locked.version, locked.commit) == ("1.1.0", COMMIT_2)

    async def test_changing_declared_version_with_different_content_is_refused(
        self, tmp_path: Path
    ) -> None:
        trees = {
            COMMIT_1: {"prompts/test-v1.md": "v1"},
            COMMIT_3: {"parca-manifest.yaml": TWO_VERSION_MANIFEST, "prompts/test.md": "v1.1"},
        }
        env = build_resolver(tmp_path, single_repo(_repo_at(COMMIT_3, trees)))
        await env.resolver.install(REPO_URL, "test-asset", "1.0.0")
        lock_before = env.lockfile_store.path.read_text(encoding="utf-8")
        config = env.config_store.load()
        env.config_store.save(
            config.without_asset("test-asset").with_asset(
                AssetEntry(id="test-asset", source=SOURCE_ALIAS, version="1.1.0")
            )
        )
        progress = RecordingProgress()

        results = await env.resolver.resolve_all(progress)

        assert results == []
        message = dict(progress.errors)["test-asset"]
        assert hash_text("v1") in message
        assert hash_text("v1.1") in message
        assert env.lockfile_store.path.read_text(encoding="utf-8") == lock_before

        updated = await env.resolver.update("test-asset", "1.1.0")

        assert updated.content == "v1.1"


class TestInstalledAssets:
    async def test_list_remote_summarizes_manifest(self, tmp_path: Path) -> None:
        manifest = manifest_yaml(
            {
                "test-asset": prompt_asset({"1.0.0": {"path": "a"}, "1.10.0": {"path": "b"}}),
                "review": prompt_asset({"0.1.0": {"path": "skills/review"}}, kind="skill"),
            }
        )
        repo = _repo_at(COMMIT_1, {COMMIT_1: {"parca-manifest.yaml": manifest}})
        env = build_resolver(tmp_path, single_repo(repo))

        infos = await env.resolver.list_remote(REPO_URL)
        skills = await env.resolver.list_remote(REPO_URL, "skill")

        by_id = {info.id: info for info in infos}
        assert by_id["test-asset"].latest_version == "1.10.0"
        assert by_id["test-asset"].versions == ["1.0.0", "1.10.0"]
        assert by_id["test-asset"].resolved_commit == COMMIT_1
        assert [info.id for info in skills] == ["review"]

    async def test_remove_drops_declaration_lock_and_link(self, tmp_path: Path) -> None:
        repo = _repo_at(
            COMMIT_1,
            {COMMIT_1: {"parca-manifest.yaml": SINGLE_VERSION_MANIFEST, "prompts/test.md": "x"}},
        )
        env = build_resolver(tmp_path, single_repo(repo))
        installed = await env.resolver.install(REPO_URL, "test-asset")
        assert isinstance(installed, ResolvedAsset)

        removed = env.resolver.remove("test-asset")

        assert removed.id == "test-asset"
        assert env.resolver.list_installed() == []
        assert env.lockfile_store.find("test-asset", SOURCE_ALIAS) is None
        assert env.projector.removed == [(".github/prompts/test-asset.prompt.md", "test-asset")]
        assert installed.cache_path.exists()

    def test_remove_unknown_asset_raises(self, tmp_path: Path) -> None:
        env = build_resolver(tmp_path, single_repo(FakeSourceRepository()))
        env.config_store.init()

        with pytest.raises(AssetNotInstalledError):
            env.resolver.remove("nothing")
