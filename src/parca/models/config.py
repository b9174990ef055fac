"""Consumer declaration models (.parca-assets.yaml)."""

from dataclasses import dataclass, replace
from typing import Literal, cast

ProviderName = Literal["github", "azure"]


def validate_provider(value: str) -> ProviderName:
    """Validate and return a Git hosting provider name.

    Raises:
        ValueError: If value is not a supported provider
    """
    if value not in ("github", "azure"):
        raise ValueError(f"Invalid provider: {value}")
    return cast(ProviderName, value)


@dataclass(frozen=True)
class SourceConfig:
    """A registered remote source repository."""

    url: str
    provider: ProviderName
    type: str = "git"


@dataclass(frozen=True)
class AssetEntry:
    """An asset the consumer has chosen, pinned to an exact version."""

    id: str
    source: str
    version: str
    mapping: str | None = None


@dataclass(frozen=True)
class ConsumerConfig:
    """Consumer configuration from .parca-assets.yaml."""

    schema: str
    sources: dict[str, SourceConfig]
    assets: list[AssetEntry]

    def find_asset(self, asset_id: str) -> AssetEntry | None:
        for entry in self.assets:
            if entry.id == asset_id:
                return entry
        return None

    def find_source_alias(self, url: str) -> str | None:
        for alias, source in self.sources.items():
            if source.url == url:
                return alias
        return None

    def with_source(self, alias: str, source: SourceConfig) -> "ConsumerConfig":
        """Return new config with the source registered under alias."""
        return replace(self, sources={**self.sources, alias: source})

    def with_asset(self, entry: AssetEntry) -> "ConsumerConfig":
        """Return new config with entry replacing any entry for the same id and source."""
        kept = [a for a in self.assets if not (a.id == entry.id and a.source == entry.source)]
        return replace(self, assets=[*kept, entry])

    def without_asset(self, asset_id: str) -> "ConsumerConfig":
        return replace(self, assets=[a for a in self.assets if a.id != asset_id])
