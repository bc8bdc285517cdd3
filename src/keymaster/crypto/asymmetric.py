"""RSA and EC key-pair wrappers used by the backend.

Serialization follows what the OpenSSL command line tools emit: RSA keys as
PKCS#8 ``PRIVATE KEY`` blocks, EC keys as traditional ``EC PRIVATE KEY``
blocks on a named curve.
"""

from __future__ import annotations

from typing import Dict, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..models import ECDSA_CURVE

PUBLIC_EXPONENT = 65537
DEFAULT_RSA_BITS = 2048

_CURVES: Dict[str, type] = {
    "prime256v1": ec.SECP256R1,
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
}
_CURVE_BY_BITS: Dict[int, str] = {256: "prime256v1", 384: "secp384r1", 521: "secp521r1"}


def curve_for(param: Union[str, int, None]) -> ec.EllipticCurve:
    """Resolve an OpenSSL curve name or a field size in bits to a curve."""
    if param is None:
        param = ECDSA_CURVE
    if isinstance(param, int):
        if param not in _CURVE_BY_BITS:
            raise ValueError(f"Unsupported EC key size: {param}")
        param = _CURVE_BY_BITS[param]
    name = param.lower()
    if name not in _CURVES:
        raise ValueError(f"Unsupported EC curve: {param}")
    return _CURVES[name]()


class RsaKeyPair:
    def __init__(self, private: rsa.RSAPrivateKey):
        self._priv = private

    @staticmethod
    def generate(bits: int = DEFAULT_RSA_BITS) -> "RsaKeyPair":
        priv = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=bits)
        return RsaKeyPair(priv)

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        return self._priv

    def private_pem(self) -> bytes:
        return self._priv.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )


class EcKeyPair:
    def __init__(self, private: ec.EllipticCurvePrivateKey):
        self._priv = private

    @staticmethod
    def generate(curve: Union[str, int, None] = ECDSA_CURVE) -> "EcKeyPair":
        priv = ec.generate_private_key(curve_for(curve))
        return EcKeyPair(priv)

    @property
    def private_key(self) -> ec.EllipticCurvePrivateKey:
        return self._priv

    def private_pem(self) -> bytes:
        return self._priv.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )


__all__ = ["DEFAULT_RSA_BITS", "EcKeyPair", "RsaKeyPair", "curve_for"]
