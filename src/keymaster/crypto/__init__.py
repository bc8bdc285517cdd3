from .backend import CryptoBackend, CryptographyBackend

__all__ = ["CryptoBackend", "CryptographyBackend"]
