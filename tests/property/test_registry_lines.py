from datetime import date

from hypothesis import given, strategies as st

from keymaster.models import RegistryEntry
from keymaster.storage.registry import format_entry, parse_line

_aliases = st.text(
    alphabet=st.characters(exclude_characters=":/\\\r\n\x00", exclude_categories=("Cs", "Zl", "Zp", "Cc")),
    min_size=1,
    max_size=40,
).map(str.strip).filter(lambda alias: alias not in {"", ".", ".."})


@given(
    _aliases,
    st.dates(min_value=date(1970, 1, 1), max_value=date(9999, 12, 31)),
    st.integers(min_value=0, max_value=2**40),
)
def test_registry_line_parses_back(alias: str, expiry: date, size: int) -> None:
    entry = RegistryEntry(alias=alias, expiry_date=expiry, size_bytes=size)
    assert parse_line(format_entry(entry)) == entry
