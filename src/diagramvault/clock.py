"""Id and timestamp helpers."""

from __future__ import annotations

import time
import uuid


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


def new_id() -> str:
    return str(uuid.uuid4())
