"""Interactive key generation with an alias -> expiry/size registry."""

__version__ = "0.1.0"
