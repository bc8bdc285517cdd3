from __future__ import annotations


class KeymasterError(Exception):
    """Base exception for keymaster"""


class ValidationError(KeymasterError):
    """Raised when operator input is missing or malformed"""


class ConfigError(KeymasterError):
    """Raised when a configuration file cannot be loaded or validated"""


class BackendError(KeymasterError):
    """Raised when the cryptographic toolkit fails to produce key material"""


class CAError(BackendError):
    """Raised when the CA certificate or key is missing, invalid or mismatched"""


class StorageError(KeymasterError):
    """Raised when the registry or a key-material file cannot be read or written"""


class RegistryCorruptError(StorageError):
    """Raised when the registry file exists but cannot be read back"""


__all__ = [
    "KeymasterError",
    "ValidationError",
    "ConfigError",
    "BackendError",
    "CAError",
    "StorageError",
    "RegistryCorruptError",
]
