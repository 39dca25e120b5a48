"""Runtime configuration defaults for persistence, billing and the admin account."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = "data"
DB_FILENAME = "bitewave.db"
BILLS_DIRNAME = "bills"

# Sentinel administrator created on first start.
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"
ADMIN_DISPLAY_NAME = "Administrator"

CURRENCY_SYMBOL = "Rs"
PLACEHOLDER_ITEM_NAME = "Item#{item_id}"

STATEMENT_PREFIX = "bill_order_"
STATEMENT_SUFFIX = ".txt"
STATEMENT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
STATEMENT_WIDTH = 60

_DATA_DIR_ENV = "BITEWAVE_DATA_DIR"


def resolve_data_dir(override: str | Path | None = None) -> Path:
    """
    Resolve the data directory.

    Resolution order:
    1. explicit override argument
    2. BITEWAVE_DATA_DIR (if set)
    3. DATA_DIR
    """
    if override is not None:
        return Path(override)
    env_override = os.environ.get(_DATA_DIR_ENV, "").strip()
    if env_override:
        return Path(env_override)
    return Path(DATA_DIR)
