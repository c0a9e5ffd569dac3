"""
Configuration management for BMK.

The configuration is a small JSON file (~/.config/bmk/config.json) that is
created with sensible defaults on first run.

Configuration hierarchy (highest to lowest priority):
1. Command-line arguments
2. Environment variables (BMK_*)
3. Config file
4. Defaults
"""
import json
import logging
import os
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional, Union

logger = logging.getLogger(__name__)

ENV_PREFIX = "BMK_"
CONFIG_ENV_VAR = "BMK_CONFIG"

OUTPUT_FORMATS = ("plain", "table", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_STORE_NAME = ".bookmarks.json"


class ConfigError(Exception):
    """Raised when the config file cannot be read or written."""


def default_config_path() -> Path:
    """Location of the user config file, honoring ``BMK_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(os.path.expanduser(override))
    return Path.home() / ".config" / "bmk" / "config.json"


def default_store_path() -> str:
    return str(Path.home() / DEFAULT_STORE_NAME)


@dataclass
class BmkConfig:
    """BMK configuration with sensible defaults."""

    # Absolute path of the bookmark store file
    store: str = field(default_factory=default_store_path)

    # Display settings
    output_format: str = field(default="table")  # plain, table, json

    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None, create: bool = True,
             env: bool = True) -> "BmkConfig":
        """
        Load configuration from file and environment.

        Args:
            config_file: Config file to read (defaults to the user config)
            create: Write a default config file if none exists yet
            env: Apply BMK_* overrides and expand paths. Pass False to get
                the values exactly as stored in the file, e.g. before saving.

        Returns:
            Merged configuration object

        Raises:
            ConfigError: If the file exists but is not a JSON object
        """
        config = cls()
        path = Path(config_file) if config_file else default_config_path()

        if path.exists():
            config._merge(cls._load_json(path))
        elif create:
            logger.debug(f"No config at {path}. Writing defaults.")
            config.save(path)

        if env:
            config._apply_env_vars()
            config._expand_paths()

        return config

    @staticmethod
    def _load_json(path: Path) -> Dict[str, Any]:
        """Load a JSON configuration file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Unable to read config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must contain a JSON object")
        logger.debug(f"Loaded config from {path}.")
        return data

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)
            else:
                logger.debug(f"Ignoring unknown config key: {key}")

    def _apply_env_vars(self):
        """Apply environment variables with BMK_ prefix."""
        known = {f.name for f in fields(self)}
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX) and key != CONFIG_ENV_VAR:
                config_key = key[len(ENV_PREFIX):].lower()
                if config_key in known:
                    setattr(self, config_key, value)

    def _expand_paths(self):
        """Expand ~ and environment variables in the store path."""
        if isinstance(self.store, str):
            self.store = os.path.expanduser(os.path.expandvars(self.store))

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration as JSON.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = default_config_path()
        path = Path(path)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(asdict(self), f, indent=4)
                f.write("\n")
        except OSError as e:
            raise ConfigError(f"Unable to write config {path}: {e}") from e
        logger.debug(f"Saved config to {path}.")

    def get_store_path(self) -> Path:
        """Get the resolved store path."""
        path = Path(os.path.expanduser(self.store))
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


def init_config(config_file: Optional[Union[str, Path]] = None, store: Optional[str] = None,
                **kwargs) -> BmkConfig:
    """
    Load configuration and apply command-line overrides.

    Args:
        config_file: Config file path override
        store: Store path override
        **kwargs: Other configuration overrides (None values are skipped)

    Returns:
        Configured instance
    """
    config = BmkConfig.load(Path(config_file) if config_file else None)

    if store:
        config.store = os.path.expanduser(store)

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
