from __future__ import annotations

from .errors import (
    BackendError,
    CAError,
    ConfigError,
    KeymasterError,
    RegistryCorruptError,
    StorageError,
    ValidationError,
)
from .validation import (
    ensure_alias,
    ensure_ca_path,
    ensure_choice,
    ensure_positive_days,
    parse_positive_int,
)

__all__ = [
    "BackendError",
    "CAError",
    "ConfigError",
    "KeymasterError",
    "RegistryCorruptError",
    "StorageError",
    "ValidationError",
    "ensure_alias",
    "ensure_ca_path",
    "ensure_choice",
    "ensure_positive_days",
    "parse_positive_int",
]
