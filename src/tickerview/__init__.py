# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""Tickerview: paginated historical price bars kept in sync with a candlestick view."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
