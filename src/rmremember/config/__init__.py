"""Configuration objects and helpers for rmremember.

Settings are read once from ``settings.yaml`` (see :class:`AppPaths`) into
an immutable :class:`TabletSettings`, with environment overrides for the
tablet address and password.  The table of recognition languages lives in
:mod:`recognition` and is never mutated.
"""

from .app_config import AppPaths, TabletSettings, load_settings, settings_from_mapping
from .recognition import SUPPORTED_LANGUAGES, is_supported_language

__all__ = [
    "AppPaths",
    "TabletSettings",
    "load_settings",
    "settings_from_mapping",
    "SUPPORTED_LANGUAGES",
    "is_supported_language",
]
