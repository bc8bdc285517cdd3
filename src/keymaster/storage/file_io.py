from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator

from ..utils.errors import StorageError

PRIVATE_MODE = 0o600


@contextlib.contextmanager
def open_atomic_writer(path: Path, mode: int | None = None) -> Iterator[BinaryIO]:
    """Write to a sibling temp file and rename it over ``path`` on success.

    Readers see either the previous content or the complete new content.
    The temp file is removed if the block raises.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_bytes(path: Path, data: bytes, mode: int | None = None) -> None:
    try:
        with open_atomic_writer(path, mode) as handle:
            handle.write(data)
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}") from exc


def atomic_write_text(path: Path, text: str, mode: int | None = None) -> None:
    atomic_write_bytes(path, text.encode("utf-8"), mode)


def remove_file(path: Path) -> bool:
    """Delete ``path`` if present; return whether something was removed."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise StorageError(f"Cannot remove {path}: {exc}") from exc
    return True


def read_optional_bytes(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"Cannot read {path}: {exc}") from exc


__all__ = [
    "PRIVATE_MODE",
    "atomic_write_bytes",
    "atomic_write_text",
    "open_atomic_writer",
    "read_optional_bytes",
    "remove_file",
]
