from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

import structlog

from ..models import RegistryEntry
from ..utils.errors import RegistryCorruptError, StorageError
from ..utils.validation import ensure_alias
from .file_io import atomic_write_text

_LINE_RE = re.compile(
    r"^(?P<alias>[^:\r\n]+): (?P<expiry>\d{4}-\d{2}-\d{2}) \(Size: (?P<size>\d+) bytes\)$"
)
DATE_FORMAT = "%Y-%m-%d"

logger = structlog.get_logger(__name__)


def format_entry(entry: RegistryEntry) -> str:
    return f"{entry.alias}: {entry.expiry_date.strftime(DATE_FORMAT)} (Size: {entry.size_bytes} bytes)"


def parse_line(line: str) -> Optional[RegistryEntry]:
    """Parse one registry line; ``None`` for lines outside the grammar."""
    match = _LINE_RE.match(line.rstrip("\r\n"))
    if match is None:
        return None
    try:
        expiry = datetime.strptime(match["expiry"], DATE_FORMAT).date()
    except ValueError:
        return None
    return RegistryEntry(alias=match["alias"], expiry_date=expiry, size_bytes=int(match["size"]))


class Registry:
    """Line-oriented alias -> (expiry, size) store.

    Each line reads ``<alias>: <YYYY-MM-DD> (Size: <N> bytes)``. Lines are
    matched by their ``<alias>:`` prefix, so lines written by other tools are
    kept untouched unless they claim an alias being replaced. Every change
    rewrites the file through a temp file and a rename.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    # ----- Raw line helpers -----
    def _read_lines(self) -> List[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as exc:
            raise RegistryCorruptError(f"Registry {self.path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise RegistryCorruptError(f"Cannot read registry {self.path}: {exc}") from exc
        return [line for line in text.splitlines() if line.strip()]

    def _write_lines(self, lines: List[str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create registry directory {self.path.parent}: {exc}") from exc
        body = "".join(f"{line}\n" for line in lines)
        atomic_write_text(self.path, body)

    @staticmethod
    def _claims(line: str, alias: str) -> bool:
        return line.startswith(f"{alias}:")

    # ----- Public API used by KeyLifecycleManager -----
    def exists(self, alias: str) -> bool:
        return any(self._claims(line, alias) for line in self._read_lines())

    def get(self, alias: str) -> Optional[RegistryEntry]:
        found = None
        for line in self._read_lines():
            if self._claims(line, alias):
                entry = parse_line(line)
                if entry is not None and entry.alias == alias:
                    found = entry
        return found

    def entries(self) -> List[RegistryEntry]:
        result: List[RegistryEntry] = []
        for number, line in enumerate(self._read_lines(), start=1):
            entry = parse_line(line)
            if entry is None:
                logger.warning("registry.foreign_line", path=str(self.path), line=number)
                continue
            result.append(entry)
        return result

    def aliases(self) -> List[str]:
        return [entry.alias for entry in self.entries()]

    def upsert(self, alias: str, expiry_date: date, size_bytes: int) -> RegistryEntry:
        alias = ensure_alias(alias)
        if size_bytes < 0:
            raise StorageError(f"Negative size for {alias}: {size_bytes}")
        entry = RegistryEntry(alias=alias, expiry_date=expiry_date, size_bytes=size_bytes)
        lines = [line for line in self._read_lines() if not self._claims(line, alias)]
        lines.append(format_entry(entry))
        self._write_lines(lines)
        logger.debug("registry.upsert", alias=alias, expiry=str(expiry_date), size=size_bytes)
        return entry

    def remove(self, alias: str) -> bool:
        lines = self._read_lines()
        kept = [line for line in lines if not self._claims(line, alias)]
        if len(kept) == len(lines):
            return False
        self._write_lines(kept)
        logger.debug("registry.remove", alias=alias)
        return True


__all__ = ["DATE_FORMAT", "Registry", "format_entry", "parse_line"]
