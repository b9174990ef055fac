"""Consumer declaration I/O for .parca-assets.yaml."""

import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml

from parca.errors import ConfigFormatError
from parca.models.config import (
    AssetEntry,
    ConsumerConfig,
    ProviderName,
    SourceConfig,
    validate_provider,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".parca-assets.yaml"

DEFAULT_SCHEMA = "1.0"


def derive_alias(url: str) -> str:
    """Derive a source alias from a repository URL (the org segment).

    https://github.com/my-org/repo -> my-org
    """
    parts = [p for p in urlparse(url).path.removesuffix(".git").split("/") if p]
    if "_git" in parts:
        # Azure DevOps: /{org}/{project}/_git/{repo}
        return parts[0]
    if len(parts) >= 2:
        return parts[-2]
    if parts:
        return parts[0]
    return "default"


def _unique_alias(alias: str, taken: dict[str, SourceConfig]) -> str:
    if alias not in taken:
        return alias
    suffix = 2
    while f"{alias}-{suffix}" in taken:
        suffix += 1
    return f"{alias}-{suffix}"


def _parse_config(data: Any, path: Path) -> ConsumerConfig:
    if not isinstance(data, dict):
        raise ConfigFormatError(f"{path} must contain a mapping.")
    if not data.get("schema"):
        raise ConfigFormatError('PARCA config missing "schema" field.')

    sources_data = data.get("sources")
    if sources_data is None:
        sources_data = {}
    if not isinstance(sources_data, dict):
        raise ConfigFormatError('PARCA config missing or invalid "sources" field.')

    sources: dict[str, SourceConfig] = {}
    for alias, source_data in sources_data.items():
        if not isinstance(source_data, dict) or not source_data.get("url"):
            raise ConfigFormatError(f'Source "{alias}" missing "url" field.')
        try:
            provider = validate_provider(source_data.get("provider", "github"))
        except ValueError as e:
            raise ConfigFormatError(f'Source "{alias}": {e}') from e
        sources[str(alias)] = SourceConfig(
            url=source_data["url"],
            provider=provider,
            type=source_data.get("type", "git"),
        )

    assets_data = data.get("assets")
    if assets_data is None:
        assets_data = []
    if not isinstance(assets_data, list):
        raise ConfigFormatError('PARCA config missing or invalid "assets" field.')

    assets: list[AssetEntry] = []
    for asset_data in assets_data:
        if not isinstance(asset_data, dict) or not all(
            asset_data.get(key) for key in ("id", "source", "version")
        ):
            raise ConfigFormatError(
                f"PARCA asset entry missing required fields (id, source, version): {asset_data}"
            )
        assets.append(
            AssetEntry(
                id=str(asset_data["id"]),
                source=str(asset_data["source"]),
                version=str(asset_data["version"]),
                mapping=asset_data.get("mapping"),
            )
        )

    return ConsumerConfig(schema=str(data["schema"]), sources=sources, assets=assets)


def _config_to_document(config: ConsumerConfig) -> dict[str, Any]:
    assets: list[dict[str, Any]] = []
    for entry in config.assets:
        entry_doc: dict[str, Any] = {
            "id": entry.id,
            "source": entry.source,
            "version": entry.version,
        }
        if entry.mapping is not None:
            entry_doc["mapping"] = entry.mapping
        assets.append(entry_doc)

    return {
        "schema": config.schema,
        "sources": {
            alias: {"type": source.type, "provider": source.provider, "url": source.url}
            for alias, source in config.sources.items()
        },
        "assets": assets,
    }


class ConsumerConfigStore:
    """Reads and writes the consumer's declared assets in a workspace."""

    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root

    @property
    def path(self) -> Path:
        return self._workspace_root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> ConsumerConfig:
        """Load and validate the consumer configuration.

        Asset entries may reference aliases missing from ``sources``; that is
        reported per asset during resolution rather than here.

        Raises:
            FileNotFoundError: If the workspace has no configuration
            ConfigFormatError: If the configuration is malformed
        """
        if not self.exists():
            raise FileNotFoundError(
                f"PARCA config not found at {self.path}. Run 'parca install' to create one."
            )
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigFormatError(f"{self.path} is not valid YAML: {e}") from e
        return _parse_config(data, self.path)

    def load_or_default(self) -> ConsumerConfig:
        if not self.exists():
            return ConsumerConfig(schema=DEFAULT_SCHEMA, sources={}, assets=[])
        return self.load()

    def save(self, config: ConsumerConfig) -> None:
        content = yaml.safe_dump(
            _config_to_document(config), sort_keys=False, default_flow_style=False, width=120
        )
        self.path.write_text(content, encoding="utf-8")
        logger.debug("Wrote consumer config to %s", self.path)

    def init(self) -> ConsumerConfig:
        """Create a fresh configuration with no sources and no assets."""
        config = ConsumerConfig(schema=DEFAULT_SCHEMA, sources={}, assets=[])
        self.save(config)
        return config

    def ensure_source(
        self, config: ConsumerConfig, url: str, provider: ProviderName
    ) -> tuple[ConsumerConfig, str]:
        """Return config with the URL registered, and the alias it lives under.

        Does not save; callers persist once the whole operation has succeeded.
        """
        existing = config.find_source_alias(url)
        if existing is not None:
            return config, existing

        alias = _unique_alias(derive_alias(url), config.sources)
        return config.with_source(alias, SourceConfig(url=url, provider=provider)), alias

    def add_asset(self, config: ConsumerConfig, entry: AssetEntry) -> ConsumerConfig:
        """Replace any entry for the same id and source, then save."""
        updated = config.with_asset(entry)
        self.save(updated)
        return updated

    def remove_asset(self, config: ConsumerConfig, asset_id: str) -> ConsumerConfig:
        updated = config.without_asset(asset_id)
        self.save(updated)
        return updated

    def installed_assets(self) -> list[AssetEntry]:
        if not self.exists():
            return []
        return self.load().assets
