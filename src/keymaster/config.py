"""Configuration loading utilities for keymaster."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import DEFAULT_VALIDITY_DAYS, BatchPolicy
from .paths import runtime_config_dir
from .utils.errors import ConfigError

_STORE_ENV = "KEYMASTER_STORE_DIR"
DEFAULT_REGISTRY_NAME = "key_expiry_log.txt"


def _default_store() -> Path:
    value = os.getenv(_STORE_ENV)
    if value:
        return Path(value).expanduser()
    return Path.cwd()


class StorageConfig(BaseModel):
    store_dir: Path = Field(default_factory=_default_store, description="Directory holding keys and registry")
    registry_name: str = Field(default=DEFAULT_REGISTRY_NAME, description="Registry file name inside store_dir")

    @field_validator("registry_name")
    @classmethod
    def _validate_registry_name(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError("registry_name must be a plain file name")
        return value


class GenerationConfig(BaseModel):
    default_validity_days: int = Field(default=DEFAULT_VALIDITY_DAYS, ge=1)
    batch_policy: BatchPolicy = Field(default=BatchPolicy.CONTINUE)
    propagate_key_params: bool = Field(
        default=True,
        description="Forward the requested algorithm and size to the CSR in CA mode",
    )
    certificate_days: Optional[int] = Field(
        default=None,
        ge=1,
        description="Lifetime of CA-signed certificates; defaults to the key's validity",
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")
    json_output: bool = Field(default=False, alias="json", description="Emit JSON lines")

    model_config = {"populate_by_name": True}

    def normalized_level(self) -> str:
        return self.level.upper()


class AppConfig(BaseModel):
    storage: StorageConfig = Field(default_factory=StorageConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
        return
    yield Path.cwd() / ".keymaster" / "config.yaml"
    yield runtime_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None) -> AppConfig:
    if path is not None and not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    for candidate in config_search_paths(path):
        if candidate.is_file():
            try:
                with candidate.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
            except (OSError, yaml.YAMLError) as exc:
                raise ConfigError(f"Cannot read configuration {candidate}: {exc}") from exc
            try:
                return AppConfig.model_validate(data)
            except ValidationError as exc:
                raise ConfigError(f"Invalid configuration in {candidate}: {exc}") from exc
    return AppConfig()


def dump_default_config(target: Path) -> None:
    data = AppConfig().model_dump(mode="json", by_alias=True)
    # store_dir resolves against the working directory at load time
    data["storage"].pop("store_dir", None)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(data, handle, sort_keys=False)
    except OSError as exc:
        raise ConfigError(f"Cannot write configuration {target}: {exc}") from exc


__all__ = [
    "AppConfig",
    "DEFAULT_REGISTRY_NAME",
    "GenerationConfig",
    "LoggingConfig",
    "StorageConfig",
    "config_search_paths",
    "dump_default_config",
    "load_config",
]
