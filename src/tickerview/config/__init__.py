"""
Config package export.

Keeps import sites clean and stable:
    from tickerview.config import get_settings, Settings
"""

from __future__ import annotations

from .settings import DataSource, Environment, Settings, get_settings

__all__ = ["DataSource", "Environment", "Settings", "get_settings"]
