from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Dict, Set

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from keymaster.crypto.backend import CryptoBackend
from keymaster.services.key_lifecycle import KeyLifecycleManager
from keymaster.storage.paths import PathResolver
from keymaster.utils.errors import BackendError, CAError


class FakeBackend(CryptoBackend):
    """Deterministic backend that records calls and fails on request."""

    def __init__(self) -> None:
        self.calls = []
        self.fail_aliases: Set[str] = set()
        self.counter = 0

    def _blob(self, label: str) -> bytes:
        self.counter += 1
        return f"-----BEGIN {label}-----\n{self.counter:04d}\n-----END {label}-----\n".encode("ascii")

    def generate_raw_key(self, kind, size_or_curve):
        self.calls.append(("raw", kind, size_or_curve))
        return self._blob(f"{kind.value} {size_or_curve}")

    def generate_signing_request(self, alias, kind=None, size_or_curve=None):
        self.calls.append(("csr", alias, kind, size_or_curve))
        if alias in self.fail_aliases:
            raise BackendError(f"toolkit failed for {alias}")
        return alias.encode("utf-8"), self._blob("PRIVATE KEY")

    def sign_certificate(self, csr_pem, ca_cert_path, ca_key_path, *, validity_days=None, not_before=None):
        self.calls.append(("sign", csr_pem, ca_cert_path, ca_key_path, validity_days))
        if not Path(ca_key_path).is_file():
            raise CAError(f"missing CA key {ca_key_path}")
        return self._blob("CERTIFICATE")


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def store(tmp_path: Path) -> Path:
    return tmp_path / "keys"


@pytest.fixture
def paths(store: Path) -> PathResolver:
    return PathResolver(store)


@pytest.fixture
def manager(paths: PathResolver) -> KeyLifecycleManager:
    return KeyLifecycleManager(paths)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def fake_manager(paths: PathResolver, fake_backend: FakeBackend) -> KeyLifecycleManager:
    return KeyLifecycleManager(paths, backend=fake_backend)


@pytest.fixture(scope="session")
def ca_material() -> Dict[str, bytes]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Test Root CA")])
    now = dt.datetime.now(dt.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - dt.timedelta(days=1))
        .not_valid_after(now + dt.timedelta(days=3650))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return {
        "cert": cert.public_bytes(serialization.Encoding.PEM),
        "key": key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    }


@pytest.fixture
def ca_files(tmp_path: Path, ca_material: Dict[str, bytes]):
    ca_dir = tmp_path / "ca"
    ca_dir.mkdir()
    cert_path = ca_dir / "ca_cert.pem"
    key_path = ca_dir / "ca_key.pem"
    cert_path.write_bytes(ca_material["cert"])
    key_path.write_bytes(ca_material["key"])
    return cert_path, key_path


