"""
Configuration module for Troqueur.
"""

from troqueur.config.settings import (
    Settings,
    get_settings,
    load_config,
    override_settings,
    reset_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "load_config",
    "override_settings",
    "reset_settings",
]
