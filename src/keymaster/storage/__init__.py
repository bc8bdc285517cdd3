from .paths import PathResolver
from .registry import Registry, format_entry, parse_line

__all__ = ["PathResolver", "Registry", "format_entry", "parse_line"]
