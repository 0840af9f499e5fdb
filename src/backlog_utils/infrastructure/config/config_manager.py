"""Configuration manager for loading and validating .backlog.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from backlog_utils.domain.config import AppConfig, BacklogConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".backlog.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "BACKLOG_URL": ("backlog", "url"),
    "BACKLOG_API_KEY": ("backlog", "api_key"),
    "BACKLOG_MAX_RETRY_ATTEMPTS": ("retry", "max_attempts"),
    "BACKLOG_MAX_JITTER_MS": ("retry", "max_jitter_ms"),
    "BACKLOG_TIMEOUT": ("retry", "timeout"),
}


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .backlog.yml and environment variables
    
    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .backlog.yml file (searched from current directory)
    3. Environment variables (BACKLOG_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "backlog": {
            "url": None,
            "api_key": None,
        },
        "retry": {
            "max_attempts": 5,
            "max_jitter_ms": 3000,
            "timeout": 30.0,
        },
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager
        
        Args:
            config_path: Path to .backlog.yml (searches from current dir if None)
            
        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .backlog.yml starting from current directory
        
        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file and validate with Pydantic
        
        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If the file cannot be read or parsed
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config from {self.config_path}: {e}") from e
            if not isinstance(file_config, dict):
                raise ConfigurationError(
                    f"Config file {self.config_path} must contain a mapping"
                )
            config_dict = self._merge_config(config_dict, file_config)
            logger.info(f"Loaded configuration from {self.config_path}")

        config_dict = self._apply_env_overrides(config_dict)
        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply BACKLOG_* environment variable overrides

        Values stay strings; Pydantic coerces them to the field types.
        """
        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            section_config = config.get(section)
            if value and isinstance(section_config, dict):
                section_config[key] = value
        return config

    def get_backlog_config(self) -> BacklogConfig:
        return self.config.backlog

    def get_retry_config(self) -> RetryConfig:
        return self.config.retry

