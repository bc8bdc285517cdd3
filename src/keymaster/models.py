# Value objects passed between the shell, the lifecycle manager and the registry.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

RSA_KEY_SIZES: Tuple[int, ...] = (2048, 3072, 4096)
ECDSA_KEY_SIZES: Tuple[int, ...] = (256, 384, 521)
ECDSA_CURVE = "prime256v1"
DEFAULT_VALIDITY_DAYS = 365


class Algorithm(str, Enum):
    RSA = "RSA"
    ECDSA = "ECDSA"

    @property
    def key_sizes(self) -> Tuple[int, ...]:
        return RSA_KEY_SIZES if self is Algorithm.RSA else ECDSA_KEY_SIZES


class BatchPolicy(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass(frozen=True, slots=True)
class SigningMode:
    """Self-signed when both CA paths are unset, CA-signed otherwise"""
    ca_cert_path: Optional[Path] = None
    ca_key_path: Optional[Path] = None

    @classmethod
    def self_signed(cls) -> "SigningMode":
        return cls()

    @classmethod
    def ca_signed(cls, ca_cert_path: Path | str, ca_key_path: Path | str) -> "SigningMode":
        return cls(Path(ca_cert_path), Path(ca_key_path))

    @property
    def is_ca_signed(self) -> bool:
        return self.ca_cert_path is not None or self.ca_key_path is not None

    def describe(self) -> str:
        return "CA" if self.is_ca_signed else "Self-Signed"


@dataclass(frozen=True, slots=True)
class KeyRequest:
    """One operator intent, discarded once generation finishes"""
    alias: str
    algorithm: Algorithm
    key_size: int
    signing: SigningMode = field(default_factory=SigningMode.self_signed)
    validity_days: int = DEFAULT_VALIDITY_DAYS


@dataclass(slots=True)
class KeyMaterial:
    alias: str
    content: bytes
    created_at: datetime
    companion_key: Optional[bytes] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    alias: str
    expiry_date: date
    size_bytes: int


@dataclass(frozen=True, slots=True)
class GenerationResult:
    alias: str
    expiry_date: date
    size_bytes: int
    path: Path
    replaced: bool = False


@dataclass(frozen=True, slots=True)
class BatchFailure:
    index: int
    alias: Optional[str]
    error: Exception


@dataclass(slots=True)
class BatchReport:
    results: List[GenerationResult] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.failures and not self.aborted


@dataclass(slots=True)
class ConsistencyReport:
    """Registry entries without material, and material the registry does not know"""
    missing_material: List[str] = field(default_factory=list)
    untracked_material: List[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.missing_material and not self.untracked_material


__all__ = [
    "Algorithm",
    "BatchFailure",
    "BatchPolicy",
    "BatchReport",
    "ConsistencyReport",
    "DEFAULT_VALIDITY_DAYS",
    "ECDSA_CURVE",
    "ECDSA_KEY_SIZES",
    "GenerationResult",
    "KeyMaterial",
    "KeyRequest",
    "RSA_KEY_SIZES",
    "RegistryEntry",
    "SigningMode",
]
