"""
User configuration management for uhkupdate.

This module handles user-specific configuration settings with multiple sources:
1. Environment variables (highest precedence)
2. Command-line provided config file
3. Config file in current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from uhkupdate.config.models import UserConfigData
from uhkupdate.core.errors import ConfigError
from uhkupdate.core.logging import get_logger


logger = get_logger(__name__)

ENV_PREFIX = "UHK_UPDATE_"
CONFIG_DIR_NAME = "uhk-update"


class UserConfig:
    """Loads user configuration from YAML and environment variables."""

    def __init__(self, cli_config_path: str | Path | None = None):
        """
        Initialize the user configuration handler.

        Args:
            cli_config_path: Optional config file path provided via CLI
        """
        self._cli_config_path = (
            Path(cli_config_path).expanduser().resolve() if cli_config_path else None
        )
        self._config_paths = self._generate_config_paths()
        self._loaded_path: Path | None = None
        self._load_config()

    @property
    def config(self) -> UserConfigData:
        """The validated configuration data."""
        return self._config

    @property
    def loaded_path(self) -> Path | None:
        """The config file that was loaded, if any."""
        return self._loaded_path

    def _generate_config_paths(self) -> list[Path]:
        """Generate a list of config paths to search in order of precedence."""
        config_paths = []

        if self._cli_config_path:
            config_paths.append(self._cli_config_path)

        config_paths.extend(
            [Path.cwd() / "uhk-update.yaml", Path.cwd() / ".uhk-update.yml"]
        )

        xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
        base = (
            Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
        ) / CONFIG_DIR_NAME
        config_paths.extend([base / "config.yaml", base / "config.yml"])

        return config_paths

    def _load_config(self) -> None:
        if self._cli_config_path and not self._cli_config_path.is_file():
            raise ConfigError(f"Config file not found: {self._cli_config_path}")

        if logging.getLogger().isEnabledFor(logging.DEBUG):
            logger.debug(
                "config_search_paths", paths=[str(p) for p in self._config_paths]
            )
            env_vars = [k for k in os.environ if k.startswith(ENV_PREFIX)]
            if env_vars:
                logger.debug("config_env_vars_found", names=env_vars)

        config_data: dict[str, Any] = {}
        for path in self._config_paths:
            if path.is_file():
                config_data = self._read_yaml(path)
                self._loaded_path = path
                logger.debug("user_config_loaded", path=str(path))
                break
        else:
            logger.info("user_config_not_found_using_defaults")

        try:
            self._config = UserConfigData(**config_data)
        except ValidationError as e:
            source = self._loaded_path or "environment"
            raise ConfigError(f"Invalid configuration in {source}: {e}") from e

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        try:
            with path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def get_log_level_int(self) -> int:
        """Get the configured log level as an integer."""
        return getattr(logging, self._config.log_level, logging.WARNING)


def create_user_config(cli_config_path: str | Path | None = None) -> UserConfig:
    """Create a UserConfig instance.

    Args:
        cli_config_path: Optional config file path provided via CLI

    Returns:
        Loaded UserConfig
    """
    return UserConfig(cli_config_path=cli_config_path)
