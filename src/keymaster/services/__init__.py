from .expiry import capture_base, compute_expiry
from .key_lifecycle import KeyLifecycleManager

__all__ = ["KeyLifecycleManager", "capture_base", "compute_expiry"]
