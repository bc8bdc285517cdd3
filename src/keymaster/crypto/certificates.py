"""CSR creation and CA signing on top of ``cryptography.x509``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ed448, ed25519
from cryptography.x509.oid import NameOID

from ..utils.errors import BackendError, CAError

DEFAULT_CERT_DAYS = 30


def _subject(alias: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, alias)])


def _digest_for(key) -> Optional[hashes.HashAlgorithm]:
    if isinstance(key, (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)):
        return None
    return hashes.SHA256()


def build_csr(alias: str, private_key) -> bytes:
    csr = (
        x509.CertificateSigningRequestBuilder()
        .subject_name(_subject(alias))
        .sign(private_key, _digest_for(private_key))
    )
    return csr.public_bytes(serialization.Encoding.PEM)


def load_ca(ca_cert_path: Path, ca_key_path: Path):
    """Load and cross-check a CA certificate and its private key."""
    try:
        cert_pem = Path(ca_cert_path).read_bytes()
    except OSError as exc:
        raise CAError(f"Cannot read CA certificate {ca_cert_path}: {exc}") from exc
    try:
        key_pem = Path(ca_key_path).read_bytes()
    except OSError as exc:
        raise CAError(f"Cannot read CA key {ca_key_path}: {exc}") from exc

    try:
        ca_cert = x509.load_pem_x509_certificate(cert_pem)
    except ValueError as exc:
        raise CAError(f"Invalid CA certificate {ca_cert_path}: {exc}") from exc
    try:
        ca_key = serialization.load_pem_private_key(key_pem, password=None)
    except TypeError as exc:
        raise CAError(f"CA key {ca_key_path} is passphrase protected") from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise CAError(f"Invalid CA key {ca_key_path}: {exc}") from exc

    spki = serialization.PublicFormat.SubjectPublicKeyInfo
    cert_pub = ca_cert.public_key().public_bytes(serialization.Encoding.DER, spki)
    key_pub = ca_key.public_key().public_bytes(serialization.Encoding.DER, spki)
    if cert_pub != key_pub:
        raise CAError(f"CA key {ca_key_path} does not match certificate {ca_cert_path}")
    return ca_cert, ca_key


def sign_csr(
    csr_pem: bytes,
    ca_cert: x509.Certificate,
    ca_key,
    *,
    days: int = DEFAULT_CERT_DAYS,
    not_before: Optional[datetime] = None,
) -> bytes:
    try:
        csr = x509.load_pem_x509_csr(csr_pem)
    except ValueError as exc:
        raise BackendError(f"Malformed certificate signing request: {exc}") from exc
    if not csr.is_signature_valid:
        raise BackendError("Certificate signing request signature is invalid")

    start = not_before or datetime.now(timezone.utc)
    if start.tzinfo is None:
        start = start.astimezone(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(csr.subject)
        .issuer_name(ca_cert.subject)
        .public_key(csr.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(start)
        .not_valid_after(start + timedelta(days=days))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(private_key=ca_key, algorithm=_digest_for(ca_key))
    )
    return cert.public_bytes(serialization.Encoding.PEM)


__all__ = ["DEFAULT_CERT_DAYS", "build_csr", "load_ca", "sign_csr"]
