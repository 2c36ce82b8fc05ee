"""Small helpers shared by the engine, storage and HTTP layers."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def generate_id() -> str:
    return str(uuid.uuid4())


def current_date() -> str:
    """Today's UTC date as ``YYYY-MM-DD``."""
    return datetime.now(timezone.utc).date().isoformat()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_size(num_bytes: int | None) -> str:
    """Human-readable size (``1126 -> "1.1 KB"``). Negative/None is ``0 B``."""
    if not num_bytes or num_bytes <= 0:
        return "0 B"
    k = 1024
    i = min(int(math.floor(math.log(num_bytes, k))), len(_SIZE_UNITS) - 1)
    value = round(num_bytes / (k ** i), 1)
    # Match JS parseFloat(): "1.0 KB" renders as "1 KB".
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"
