"""Configuration management for Bucks2Bar.

This module centralizes all configuration values including paths,
storage keys, quota limits, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in bucks2bar/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUCKS2BAR_DATA_DIR", _PROJECT_ROOT / "data"))

# Key-value database backing the persistence gateway
DB_PATH = Path(
    os.getenv("BUCKS2BAR_DB_PATH", DATA_DIR / "bucks2bar.db")
).resolve()

# Storage keys and payload version
STORAGE_KEY = "bucks2bar_data"
BUDGETS_KEY = "bucks2bar_budgets"
DARK_MODE_KEY = "bucks2bar_dark_mode"
STORAGE_VERSION = "1.0"

# 5MB typical quota, warn past 80% usage
QUOTA_LIMIT = int(os.getenv("BUCKS2BAR_QUOTA_BYTES", 5 * 1024 * 1024))
WARNING_THRESHOLD = 0.8


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
