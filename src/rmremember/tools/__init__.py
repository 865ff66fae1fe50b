"""Developer helpers (timing hooks) that ship with the package."""

from .debug import debug_enabled, time_block

__all__ = ["debug_enabled", "time_block"]
