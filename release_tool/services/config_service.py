"""Configuration management service"""

import os
from pathlib import Path
from typing import Optional, Union

import yaml

from ..api.exceptions import ConfigError
from ..constants import CONFIG_FILE, ENV_CONFIG_PATH, ENV_LOG_LEVEL, ENV_STATE_DIR
from ..models.config import ReleaseToolConfig


class ConfigService:
    """Service for loading release-tool configuration"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config service

        Args:
            config_path: Explicit configuration file. Falls back to
                $RELEASE_TOOL_CONFIG, then ./release-tool.yaml
        """
        self.explicit = config_path is not None or ENV_CONFIG_PATH in os.environ
        if config_path is None:
            config_path = os.environ.get(ENV_CONFIG_PATH, CONFIG_FILE)
        self.config_path = Path(config_path)
        self._config: Optional[ReleaseToolConfig] = None

    @property
    def config(self) -> ReleaseToolConfig:
        """Get current configuration (lazy load)"""
        if self._config is None:
            self.load_config()
        return self._config

    def load_config(self) -> ReleaseToolConfig:
        """Load configuration from file

        A missing default file yields the built-in configuration; a
        missing explicitly named file is an error.

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        data = {}
        if self.config_path.exists():
            content = self.config_path.read_text(encoding='utf-8')

            # Simple environment variable expansion
            content = os.path.expandvars(content)

            try:
                data = yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")
            if not isinstance(data, dict):
                raise ConfigError(f"Configuration in {self.config_path} must be a YAML map")
        elif self.explicit:
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        try:
            config = ReleaseToolConfig.from_dict(data)
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid configuration in {self.config_path}: {e}")

        self._apply_environment(config)
        self._config = config
        return config

    def save_config(self, config: Optional[ReleaseToolConfig] = None) -> None:
        """Save configuration to file

        Args:
            config: Configuration to save (uses current if not provided)
        """
        if config:
            self._config = config

        if not self._config:
            raise ValueError("No configuration to save")

        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self._config.to_dict(), f, default_flow_style=False, sort_keys=False)

    @staticmethod
    def _apply_environment(config: ReleaseToolConfig) -> None:
        state_dir = os.environ.get(ENV_STATE_DIR)
        if state_dir and config.repository.type == "filesystem":
            config.repository.path = state_dir

        log_level = os.environ.get(ENV_LOG_LEVEL)
        if log_level:
            config.log_level = log_level.upper()
