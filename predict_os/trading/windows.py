"""15-minute Up/Down market windows."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

WINDOW_MINUTES = 15
SLUG_PREFIX = "15min-up-down-"


def current_window_start(now: Optional[datetime] = None) -> datetime:
    """Start of the 15-minute window containing ``now`` (UTC)."""
    now = now or datetime.now(timezone.utc)
    minute = (now.minute // WINDOW_MINUTES) * WINDOW_MINUTES
    return now.replace(minute=minute, second=0, microsecond=0)


def next_window_start(now: Optional[datetime] = None) -> datetime:
    return current_window_start(now) + timedelta(minutes=WINDOW_MINUTES)


def window_slug(start: datetime) -> str:
    return f"{SLUG_PREFIX}{start:%Y%m%d-%H%M}"
