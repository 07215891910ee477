"""Configuration management for templatehub."""

import os
import sys
from pathlib import Path
from typing import Any

import yaml

from templatehub.models.config import AppConfig


def default_config_path() -> Path:
    """Platform-specific location of config.yaml."""
    if sys.platform == "win32":
        # Windows: %APPDATA%\templatehub
        config_dir = Path(os.getenv("APPDATA", str(Path.home()))) / "templatehub"
    elif sys.platform == "darwin":
        # macOS: ~/Library/Application Support/templatehub
        config_dir = Path.home() / "Library" / "Application Support" / "templatehub"
    else:
        # Linux/Unix: ~/.config/templatehub
        config_dir = Path.home() / ".config" / "templatehub"
    return config_dir / "config.yaml"


class ConfigManager:
    """Manages application configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses TEMPLATEHUB_CONFIG_PATH
                        environment variable or defaults to platform-specific config directory
        """
        if config_path is None:
            env_path = os.getenv("TEMPLATEHUB_CONFIG_PATH")
            config_path = Path(env_path).expanduser() if env_path else default_config_path()

        self.config_path = config_path
        self._config: AppConfig | None = None

    def load(self) -> AppConfig:
        """Load configuration from file and apply environment variable overrides.

        Returns:
            Loaded configuration
        """
        config_data: dict[str, Any] = {}

        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}

        config = AppConfig(**config_data)
        return self._apply_env_overrides(config)

    def save(self, config: AppConfig) -> None:
        """Save configuration to YAML file.

        Args:
            config: Configuration to save
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        # mode="json" turns Path objects into strings
        config_dict = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        """Apply environment variable overrides.

        Environment variables use the format: TEMPLATEHUB_<SECTION>_<KEY>
        Examples:
            - TEMPLATEHUB_SERVER_PORT=9000
            - TEMPLATEHUB_DATA_DIR=~/custom/path
            - TEMPLATEHUB_GITHUB_CACHE_TTL=120

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        if port := os.getenv("TEMPLATEHUB_SERVER_PORT"):
            config.server.port = int(port)
        if host := os.getenv("TEMPLATEHUB_SERVER_HOST"):
            config.server.host = host

        if data_dir := os.getenv("TEMPLATEHUB_DATA_DIR"):
            # Dependent paths are recalculated from the new data dir
            config.paths = type(config.paths)(data_dir=Path(data_dir).expanduser())

        if api_url := os.getenv("TEMPLATEHUB_GITHUB_API_URL"):
            config.github.api_url = api_url if api_url.endswith("/") else api_url + "/"
        if ttl := os.getenv("TEMPLATEHUB_GITHUB_CACHE_TTL"):
            config.github.cache_ttl = float(ttl)

        if git_path := os.getenv("TEMPLATEHUB_GIT_PATH"):
            config.tools.git.type = "custom"
            config.tools.git.custom_path = git_path

        if log_level := os.getenv("TEMPLATEHUB_LOG_LEVEL"):
            if log_level.upper() in ("ERROR", "WARNING", "INFO", "DEBUG", "TRACE"):
                config.advanced.log_level = log_level.upper()  # type: ignore

        return config

    def get_config(self) -> AppConfig:
        """Get configuration (singleton pattern).

        Returns:
            Current configuration
        """
        if self._config is None:
            self._config = self.load()
        return self._config

    def reload(self) -> AppConfig:
        """Reload configuration from file.

        Returns:
            Reloaded configuration
        """
        self._config = self.load()
        return self._config


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config() -> AppConfig:
    """Get global application configuration.

    Returns:
        Application configuration
    """
    return _config_manager.get_config()


def reload_config() -> AppConfig:
    """Reload configuration from file.

    Returns:
        Reloaded configuration
    """
    return _config_manager.reload()


def save_config(config: AppConfig) -> None:
    """Save configuration to file.

    Args:
        config: Configuration to save
    """
    _config_manager.save(config)
