"""Configuration management for the I/O benchmark."""

import os
import yaml
from typing import Dict, Optional, Any, Union
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from ..utils.env import Env

DEFAULT_SIZE = 104857600  # 100 MiB
DEFAULT_ITERATIONS = 300
DEFAULT_PROGRESS_CADENCE = 5


def default_threads() -> int:
    return os.cpu_count() or 1


class RunConfig(BaseModel):
    """Immutable parameters of one benchmark run."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    directory: Path = Field(..., alias="dir", description="Directory to write files into")
    size: int = Field(DEFAULT_SIZE, ge=1, description="Bytes written to each file")
    iterations: int = Field(alias="loops", default=DEFAULT_ITERATIONS, ge=1, description="Number of files")
    threads: int = Field(default_factory=default_threads, ge=1, description="Parallel worker threads")
    progress_cadence: int = Field(alias="progressCadence", default=DEFAULT_PROGRESS_CADENCE, ge=1,
                                  description="Report progress every N completed files")

    @field_validator('directory')
    @classmethod
    def directory_must_exist(cls, v: Path) -> Path:
        if not v.exists() or not v.is_dir():
            raise ValueError(f"Directory path '{v.absolute()}' does not exist or is not a directory")
        return v

    @property
    def expected_bytes(self) -> int:
        """Disk space the write phase occupies at its peak."""
        return self.size * self.iterations


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Rename aliased keys to field names and drop unset values."""
    normalized = {}
    for key, value in data.items():
        if value is None:
            continue
        for name, field in RunConfig.model_fields.items():
            if key == field.alias:
                key = name
                break
        normalized[key] = value
    return normalized


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "").removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages)


class ConfigLoader:
    """Configuration loader utility."""

    @staticmethod
    def build(**values: Any) -> RunConfig:
        """Validate ``values`` into a RunConfig, raising ConfigurationError."""
        try:
            return RunConfig(**_normalize(values))
        except ValidationError as e:
            raise ConfigurationError(_format_validation_error(e)) from e

    @staticmethod
    def load_file(file_path: Union[str, Path]) -> Dict[str, Any]:
        """Read raw run settings from a YAML file."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read config file '{file_path}': {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file '{file_path}' must contain a mapping")
        return _normalize(data)

    @staticmethod
    def load_run(file_path: Union[str, Path]) -> RunConfig:
        """Load a complete run configuration from a YAML file."""
        return ConfigLoader.build(**ConfigLoader.load_file(file_path))

    @staticmethod
    def resolve(overrides: Dict[str, Any], config_file: Optional[Union[str, Path]] = None) -> RunConfig:
        """Merge environment defaults, a config file and explicit overrides, in that order."""
        merged = load_env_config()
        if config_file is not None:
            merged.update(ConfigLoader.load_file(config_file))
        merged.update(_normalize(overrides))
        return ConfigLoader.build(**merged)

    @staticmethod
    def save_config(config: RunConfig, file_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        data = config.model_dump(by_alias=True, exclude_none=True)
        data['dir'] = str(data['dir'])
        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)


def load_env_config() -> Dict[str, Any]:
    """Read run defaults from ``IOBENCH_*`` environment variables."""
    return _normalize({
        'directory': Env.get_str('DIR', None),
        'size': Env.get_int('SIZE', None),
        'iterations': Env.get_int('LOOPS', None),
        'threads': Env.get_int('THREADS', None),
        'progress_cadence': Env.get_int('PROGRESS_EVERY', None),
    })
