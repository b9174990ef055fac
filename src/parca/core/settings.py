"""User-level settings loaded from ~/.parca/config.toml.

Settings are read once at the CLI entry point and carried in ParcaContext.
Environment variables override the file: PARCA_CACHE_DIR and
PARCA_REGISTRY_REF.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

DEFAULT_REGISTRY_REF = "main"

SETTINGS_KEYS = ("cache_root", "registry_ref")


def default_cache_root() -> Path:
    return Path.home() / ".parca-cache"


@dataclass(frozen=True)
class ParcaSettings:
    """Immutable user settings.

    registry_ref is the branch a source's manifest is read from when nothing
    is locked yet.
    """

    cache_root: Path
    registry_ref: str = DEFAULT_REGISTRY_REF

    @classmethod
    def defaults(cls) -> "ParcaSettings":
        return cls(cache_root=default_cache_root(), registry_ref=DEFAULT_REGISTRY_REF)

    def with_value(self, key: str, value: str) -> "ParcaSettings":
        """Return new settings with one key changed.

        Raises:
            ValueError: If key is not a known setting or value is empty
        """
        if key not in SETTINGS_KEYS:
            raise ValueError(f"Unknown setting: {key} (expected one of {', '.join(SETTINGS_KEYS)})")
        if not value:
            raise ValueError(f"Setting {key} cannot be empty")
        if key == "cache_root":
            return replace(self, cache_root=Path(value).expanduser())
        return replace(self, registry_ref=value)


def apply_env_overrides(settings: ParcaSettings, environ: Mapping[str, str]) -> ParcaSettings:
    cache_dir = environ.get("PARCA_CACHE_DIR")
    if cache_dir:
        settings = replace(settings, cache_root=Path(cache_dir).expanduser())
    registry_ref = environ.get("PARCA_REGISTRY_REF")
    if registry_ref:
        settings = replace(settings, registry_ref=registry_ref)
    return settings


class SettingsStore(ABC):
    """Abstract access to user settings, so tests never touch the home directory."""

    @abstractmethod
    def exists(self) -> bool: ...

    @abstractmethod
    def load(self) -> ParcaSettings:
        """Load settings, falling back to defaults for anything unset.

        Raises:
            ValueError: If the settings file is malformed
        """
        ...

    @abstractmethod
    def save(self, settings: ParcaSettings) -> None: ...

    @abstractmethod
    def path(self) -> Path:
        """Location of the settings (for messages)."""
        ...


class FilesystemSettingsStore(SettingsStore):
    """Production implementation that reads/writes ~/.parca/config.toml."""

    def __init__(
        self, config_path: Path | None = None, environ: Mapping[str, str] | None = None
    ) -> None:
        self._config_path = config_path
        self._environ = environ if environ is not None else os.environ

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> ParcaSettings:
        settings = ParcaSettings.defaults()
        config_path = self.path()
        if config_path.exists():
            try:
                data = tomllib.loads(config_path.read_text(encoding="utf-8"))
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {config_path}: {e}") from e
            for key in SETTINGS_KEYS:
                if key in data:
                    settings = settings.with_value(key, str(data[key]))
        return apply_env_overrides(settings, self._environ)

    def save(self, settings: ParcaSettings) -> None:
        config_path = self.path()
        parent = config_path.parent
        if parent.exists() and not os.access(parent, os.W_OK):
            raise PermissionError(f"Cannot write to directory: {parent}")
        parent.mkdir(parents=True, exist_ok=True)

        content = f"""# Global parca configuration
cache_root = "{settings.cache_root}"
registry_ref = "{settings.registry_ref}"
"""
        config_path.write_text(content, encoding="utf-8")

    def path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        return Path.home() / ".parca" / "config.toml"


class InMemorySettingsStore(SettingsStore):
    """Test implementation that keeps settings in memory."""

    def __init__(self, settings: ParcaSettings | None = None) -> None:
        """Initialize in-memory settings store.

        Args:
            settings: Initial state (None = nothing saved yet; load() returns defaults)
        """
        self._settings = settings

    def exists(self) -> bool:
        return self._settings is not None

    def load(self) -> ParcaSettings:
        if self._settings is None:
            return ParcaSettings.defaults()
        return self._settings

    def save(self, settings: ParcaSettings) -> None:
        self._settings = settings

    def path(self) -> Path:
        return Path("/fake/parca/config.toml")
