"""Configuration package for readlater.

Re-exports the settings symbols so that callers can write::

    from readlater.config import get_settings
"""

from __future__ import annotations

from readlater.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
