# Capability interface for the cryptographic toolkit and its `cryptography` binding.
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm

from ..models import ECDSA_CURVE, Algorithm
from ..utils.errors import BackendError, CAError
from .asymmetric import DEFAULT_RSA_BITS, EcKeyPair, RsaKeyPair
from .certificates import DEFAULT_CERT_DAYS, build_csr, load_ca, sign_csr

SizeOrCurve = Union[int, str, None]


class CryptoBackend:
    """What the lifecycle manager needs from a cryptographic toolkit.

    Every method returns PEM bytes and never touches the key store; writing
    the results is the caller's job.
    """

    def generate_raw_key(self, kind: Algorithm, size_or_curve: SizeOrCurve) -> bytes:
        raise NotImplementedError

    def generate_signing_request(
        self,
        alias: str,
        kind: Optional[Algorithm] = None,
        size_or_curve: SizeOrCurve = None,
    ) -> Tuple[bytes, bytes]:
        """Return ``(csr_pem, private_key_pem)`` for a CSR with CN=alias.

        ``kind``/``size_or_curve`` left as ``None`` select the toolkit
        default, an RSA 2048 key.
        """
        raise NotImplementedError

    def sign_certificate(
        self,
        csr_pem: bytes,
        ca_cert_path: Path,
        ca_key_path: Path,
        *,
        validity_days: Optional[int] = None,
        not_before: Optional[datetime] = None,
    ) -> bytes:
        raise NotImplementedError


class CryptographyBackend(CryptoBackend):
    """Binds CryptoBackend to pyca/cryptography, in-process."""

    def _new_key(self, kind: Algorithm, size_or_curve: SizeOrCurve):
        try:
            if kind is Algorithm.RSA:
                bits = DEFAULT_RSA_BITS if size_or_curve is None else int(size_or_curve)
                return RsaKeyPair.generate(bits)
            if kind is Algorithm.ECDSA:
                return EcKeyPair.generate(ECDSA_CURVE if size_or_curve is None else size_or_curve)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise BackendError(f"{kind.value} key generation failed: {exc}") from exc
        raise BackendError(f"Unsupported algorithm: {kind!r}")

    def generate_raw_key(self, kind: Algorithm, size_or_curve: SizeOrCurve) -> bytes:
        return self._new_key(kind, size_or_curve).private_pem()

    def generate_signing_request(
        self,
        alias: str,
        kind: Optional[Algorithm] = None,
        size_or_curve: SizeOrCurve = None,
    ) -> Tuple[bytes, bytes]:
        pair = self._new_key(kind or Algorithm.RSA, size_or_curve if kind else None)
        try:
            csr_pem = build_csr(alias, pair.private_key)
        except (ValueError, TypeError) as exc:
            raise BackendError(f"Cannot build signing request for {alias!r}: {exc}") from exc
        return csr_pem, pair.private_pem()

    def sign_certificate(
        self,
        csr_pem: bytes,
        ca_cert_path: Path,
        ca_key_path: Path,
        *,
        validity_days: Optional[int] = None,
        not_before: Optional[datetime] = None,
    ) -> bytes:
        ca_cert, ca_key = load_ca(Path(ca_cert_path), Path(ca_key_path))
        try:
            return sign_csr(
                csr_pem,
                ca_cert,
                ca_key,
                days=validity_days or DEFAULT_CERT_DAYS,
                not_before=not_before,
            )
        except (TypeError, UnsupportedAlgorithm) as exc:
            raise CAError(f"CA key {ca_key_path} cannot sign certificates: {exc}") from exc


__all__ = ["CryptoBackend", "CryptographyBackend", "SizeOrCurve"]
