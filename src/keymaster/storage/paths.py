# Resolve key-material and registry paths inside the store directory.
from __future__ import annotations
from pathlib import Path
from typing import Iterator
from ..config import DEFAULT_REGISTRY_NAME
from ..utils.errors import StorageError

MATERIAL_SUFFIX = ".pem"
COMPANION_SUFFIX = ".key"


class PathResolver:
  """Compute and ensure paths for key material & registry"""
  def __init__(self, root: Path | str, registry_name: str = DEFAULT_REGISTRY_NAME):
    self.root = Path(root)
    self.registry = self.root / registry_name

  def material(self, alias: str) -> Path:
    return self.root / f"{alias}{MATERIAL_SUFFIX}"

  def companion(self, alias: str) -> Path:
    return self.root / f"{alias}{COMPANION_SUFFIX}"

  def iter_material_aliases(self) -> Iterator[str]:
    if not self.root.is_dir():
      return
    for path in sorted(self.root.glob(f"*{MATERIAL_SUFFIX}")):
      if path.is_file():
        yield path.stem

  def ensure(self) -> None:
    try:
      self.root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
      raise StorageError(f"Cannot create store directory {self.root}: {exc}") from exc
