from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_timestamp(moment: datetime | None = None) -> str:
    """Directory-safe stamp used to name run folders."""
    return (moment or utc_now()).strftime("%Y%m%d-%H%M%S")


def utc_display(moment: datetime | None = None) -> str:
    return (moment or utc_now()).strftime("%Y-%m-%d %H:%M UTC")
