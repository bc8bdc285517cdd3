import pytest

from keymaster.utils.errors import ValidationError
from keymaster.utils.validation import ensure_alias, ensure_ca_path, ensure_choice, parse_positive_int


@pytest.mark.parametrize("alias", ["key_1", "svc1", "web-server.prod", "  padded  "])
def test_ensure_alias_accepts_plain_names(alias: str) -> None:
    assert ensure_alias(alias) == alias.strip()


@pytest.mark.parametrize("alias", ["", "   ", "a:b", "line\nbreak", "../escape", "dir/name", ".", ".."])
def test_ensure_alias_rejects_reserved(alias: str) -> None:
    with pytest.raises(ValidationError):
        ensure_alias(alias)


@pytest.mark.parametrize("text,expected", [("1", 1), (" 365 ", 365), ("0042", 42)])
def test_parse_positive_int(text: str, expected: int) -> None:
    assert parse_positive_int(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "-3", "0", "1.5", "3 days"])
def test_parse_positive_int_rejects(text: str) -> None:
    with pytest.raises(ValidationError):
        parse_positive_int(text)


def test_ensure_choice() -> None:
    assert ensure_choice(3072, (2048, 3072, 4096), "RSA key size") == 3072
    with pytest.raises(ValidationError, match="RSA key size"):
        ensure_choice(1024, (2048, 3072, 4096), "RSA key size")


@pytest.mark.parametrize("value", [None, "", "   "])
def test_ensure_ca_path_requires_value(value) -> None:
    with pytest.raises(ValidationError):
        ensure_ca_path(value, "CA key")
