"""
Configuration management.

The configuration is stored as a TOML file in the config directory
(``$COBB_CONFIG_DIR`` or ``~/.cobb``). It also serves as the settings
store that remembers the last opened corpus directory.
"""

import os
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import tomli_w

from .types import DEFAULT_EXTENSION, HIDDEN_TAG


CONFIG_FILENAME = "cobb.toml"
CONFIG_VERSION = 1

LAST_DIRECTORY_KEY = "last_directory"


def get_config_dir() -> Path:
    """Config directory, respecting COBB_CONFIG_DIR."""
    env = os.environ.get("COBB_CONFIG_DIR")
    if env:
        return Path(env).expanduser()
    return Path.home() / ".cobb"


@dataclass
class CobbConfig:
    """Complete configuration."""
    path: Path
    version: int = CONFIG_VERSION
    created: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    # Corpus format
    extension: str = DEFAULT_EXTENSION
    hidden_tag: str = HIDDEN_TAG

    # Review defaults
    default_scope: str = ""
    last_directory: Optional[str] = None

    @property
    def config_path(self) -> Path:
        """Path to the TOML config file."""
        return self.path / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()


def load_config(config_dir: Path) -> CobbConfig:
    """
    Load configuration from a config directory.

    Raises:
        FileNotFoundError: If config doesn't exist
        ValueError: If config is invalid
    """
    config_path = config_dir / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    store = data.get("store", {})
    version = store.get("version", 1)
    if version > CONFIG_VERSION:
        raise ValueError(f"Config version {version} is newer than supported ({CONFIG_VERSION})")

    corpus = data.get("corpus", {})
    review = data.get("review", {})
    extension = corpus.get("extension", DEFAULT_EXTENSION)
    if not extension.startswith("."):
        raise ValueError(f"corpus.extension must start with '.': {extension!r}")
    hidden_tag = corpus.get("hidden_tag", HIDDEN_TAG)
    if not hidden_tag.strip() or "," in hidden_tag:
        raise ValueError(f"corpus.hidden_tag must be non-blank without commas: {hidden_tag!r}")

    return CobbConfig(
        path=config_dir,
        version=version,
        created=store.get("created", ""),
        extension=extension,
        hidden_tag=hidden_tag,
        default_scope=review.get("default_scope", ""),
        last_directory=review.get(LAST_DIRECTORY_KEY) or None,
    )


def save_config(config: CobbConfig) -> None:
    """
    Save configuration to the config directory.

    Creates the directory if it doesn't exist.
    """
    config.path.mkdir(parents=True, exist_ok=True)

    review: dict[str, Any] = {"default_scope": config.default_scope}
    if config.last_directory:
        review[LAST_DIRECTORY_KEY] = config.last_directory

    data = {
        "store": {
            "version": config.version,
            "created": config.created,
        },
        "corpus": {
            "extension": config.extension,
            "hidden_tag": config.hidden_tag,
        },
        "review": review,
    }

    with open(config.config_path, "wb") as f:
        tomli_w.dump(data, f)


def load_or_create_config(config_dir: Optional[Path] = None) -> CobbConfig:
    """
    Load existing config or create a new one with defaults.

    This is the main entry point for config management.
    """
    config_dir = config_dir if config_dir is not None else get_config_dir()
    if (config_dir / CONFIG_FILENAME).exists():
        return load_config(config_dir)
    config = CobbConfig(path=config_dir)
    save_config(config)
    return config


class TomlSettings:
    """Settings store backed by the config file.

    Only ``last_directory`` and ``default_scope`` are settable.
    """

    _KEYS = (LAST_DIRECTORY_KEY, "default_scope")

    def __init__(self, config: CobbConfig):
        self._config = config

    def get(self, key: str) -> Optional[Any]:
        if key not in self._KEYS:
            return None
        return getattr(self._config, key)

    def set(self, key: str, value: Any) -> None:
        if key not in self._KEYS:
            raise KeyError(key)
        if value is None:
            value = None if key == LAST_DIRECTORY_KEY else ""
        else:
            value = str(value)
        setattr(self._config, key, value)
        save_config(self._config)
