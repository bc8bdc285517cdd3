"""Validation helpers for operator-supplied values."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .errors import ValidationError

_RESERVED_ALIAS_CHARS = (":", "\n", "\r", "/", "\\", "\x00")


def ensure_alias(alias: str) -> str:
    """Ensure ``alias`` can name both a registry line and a file.

    Parameters
    ----------
    alias:
        Operator-chosen key alias.

    Returns
    -------
    str
        The alias with surrounding whitespace removed.

    Raises
    ------
    ValidationError
        If the alias is empty, contains the registry delimiter ``:``, a path
        separator or any non-printable character, or is a relative directory
        name.
    """

    if not isinstance(alias, str):
        raise ValidationError("Alias must be a string")
    alias = alias.strip()
    if not alias:
        raise ValidationError("Alias must not be empty")
    for char in _RESERVED_ALIAS_CHARS:
        if char in alias:
            raise ValidationError(f"Alias {alias!r} must not contain {char!r}")
    if not alias.isprintable():
        raise ValidationError(f"Alias {alias!r} must not contain control characters")
    if alias in {".", ".."}:
        raise ValidationError(f"Alias {alias!r} is not a valid file name")
    return alias


def ensure_positive_days(value: object) -> int:
    """Return ``value`` as a positive day count or raise ``ValidationError``."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Validity must be a whole number of days, got {value!r}")
    if value <= 0:
        raise ValidationError(f"Validity must be a positive number of days, got {value}")
    return value


def parse_positive_int(text: str) -> int:
    """Parse operator text as a positive integer (digits only)."""
    text = text.strip()
    if not text.isdigit():
        raise ValidationError(f"{text!r} is not a valid number")
    value = int(text)
    if value <= 0:
        raise ValidationError("Number must be greater than zero")
    return value


def ensure_choice(value: int, allowed: Iterable[int], what: str) -> int:
    allowed = tuple(allowed)
    if value not in allowed:
        options = ", ".join(str(item) for item in allowed)
        raise ValidationError(f"{what} must be one of {options}, got {value}")
    return value


def ensure_ca_path(path: Path | str | None, what: str) -> Path:
    if path is None or not str(path).strip():
        raise ValidationError(f"{what} path is required for CA signing")
    return Path(path).expanduser()


__all__ = [
    "ensure_alias",
    "ensure_ca_path",
    "ensure_choice",
    "ensure_positive_days",
    "parse_positive_int",
]
