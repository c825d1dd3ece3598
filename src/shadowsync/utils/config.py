"""
Configuration loader for shadowsync.

This module provides configuration management with:
- Multiple configuration sources (dicts, JSON, YAML, TOML files, env vars)
- Priority-based merging
- Schema validation through pydantic
"""

import os
import json
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
import toml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

from .logging import get_logger
from .errors import ConfigurationError, error_context


logger = get_logger("shadowsync.config")

ENV_PREFIX = "SHADOWSYNC_"
ENV_NESTING = "__"


class ConfigSource(BaseModel):
    """Configuration source definition."""
    path: Optional[Path] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: int = 0
    source_type: str = "dict"

    model_config = ConfigDict(arbitrary_types_allowed=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    json_output: bool = False
    directory: Optional[Path] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()


class TransportConfig(BaseModel):
    """Remote peer transport configuration."""
    base_url: Optional[str] = None
    mime_type: str = "application/json-patch+json"
    timeout: float = 30.0
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class MediatorConfig(BaseModel):
    """Collection mediator configuration."""
    sync: bool = True


class ShadowSyncConfig(BaseModel):
    """Main shadowsync configuration."""
    app_name: str = "shadowsync"
    debug: bool = False

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    mediator: MediatorConfig = Field(default_factory=MediatorConfig)

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True
    )


class ConfigLoader:
    """Configuration loader with multiple source support."""

    def __init__(self, env_prefix: str = ENV_PREFIX):
        self.env_prefix = env_prefix
        self._sources: List[ConfigSource] = []
        self._config: Optional[ShadowSyncConfig] = None

    def add_source(
        self,
        source: Union[str, Path, Dict[str, Any]],
        priority: int = 0,
        source_type: Optional[str] = None
    ) -> None:
        """
        Add configuration source.

        Args:
            source: Configuration source (file path or dict)
            priority: Source priority (higher wins)
            source_type: Source type (auto-detected if None)
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not source_type:
                source_type = self._detect_source_type(path)

            self._sources.append(ConfigSource(
                path=path,
                priority=priority,
                source_type=source_type
            ))
        else:
            self._sources.append(ConfigSource(
                data=source,
                priority=priority,
                source_type="dict"
            ))

        self._sources.sort(key=lambda s: s.priority)

    def _detect_source_type(self, path: Path) -> str:
        """Detect configuration file type."""
        suffix = path.suffix.lower()
        if suffix == ".json":
            return "json"
        elif suffix in (".yaml", ".yml"):
            return "yaml"
        elif suffix == ".toml":
            return "toml"
        else:
            raise ConfigurationError(f"Unknown config file type: {suffix}")

    def load(self) -> ShadowSyncConfig:
        """
        Load configuration from all sources.

        Sources are merged from lowest to highest priority, environment
        variables are applied last.

        Returns:
            Merged configuration
        """
        merged_data: Dict[str, Any] = {}

        for source in self._sources:
            with error_context("config", "load_source", source=str(source.path or "dict")):
                data = self._load_source(source)
            merged_data = self._deep_merge(merged_data, data)

        merged_data = self._deep_merge(merged_data, self._load_env_vars())

        try:
            self._config = ShadowSyncConfig(**merged_data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                errors.append(f"{field}: {error['msg']}")

            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                cause=e
            ) from e

        logger.info("configuration_loaded", sources=len(self._sources))
        return self._config

    def _load_source(self, source: ConfigSource) -> Dict[str, Any]:
        """Load data from a configuration source."""
        if source.path is None:
            return source.data

        if not source.path.exists():
            logger.warning("config_file_not_found", path=str(source.path))
            return {}

        content = source.path.read_text()

        if source.source_type == "json":
            return json.loads(content)
        elif source.source_type == "yaml":
            return yaml.safe_load(content) or {}
        elif source.source_type == "toml":
            return toml.loads(content)
        else:
            raise ConfigurationError(f"Unknown source type: {source.source_type}")

    def _load_env_vars(self) -> Dict[str, Any]:
        """Load configuration from environment variables.

        ``SHADOWSYNC_TRANSPORT__BASE_URL`` maps to ``transport.base_url``.
        """
        result: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if not key.startswith(self.env_prefix):
                continue

            parts = key[len(self.env_prefix):].lower().split(ENV_NESTING)
            current = result

            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = self._convert_value(value)

        return result

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        elif value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get_config(self) -> ShadowSyncConfig:
        """Get current configuration."""
        if self._config is None:
            raise ConfigurationError("Configuration not loaded")
        return self._config


# Global configuration instance
_config_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Get global configuration loader."""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader


def load_config(
    config_paths: Optional[List[Union[str, Path]]] = None,
    extra_config: Optional[Dict[str, Any]] = None
) -> ShadowSyncConfig:
    """
    Load configuration from standard locations.

    Args:
        config_paths: Additional configuration paths
        extra_config: Extra configuration to merge

    Returns:
        Loaded configuration
    """
    loader = get_config_loader()

    default_paths = [
        Path.home() / ".shadowsync" / "config.yaml",
        Path("./shadowsync.yaml"),
        Path("./shadowsync.toml"),
    ]

    for path in default_paths:
        if path.exists():
            loader.add_source(path, priority=10)

    if config_paths:
        for i, path in enumerate(config_paths):
            loader.add_source(path, priority=20 + i)

    if extra_config:
        loader.add_source(extra_config, priority=100)

    return loader.load()


def get_config() -> ShadowSyncConfig:
    """Get current configuration."""
    return get_config_loader().get_config()


__all__ = [
    'ShadowSyncConfig',
    'LoggingConfig',
    'TransportConfig',
    'MediatorConfig',
    'ConfigLoader',
    'get_config_loader',
    'load_config',
    'get_config',
]
