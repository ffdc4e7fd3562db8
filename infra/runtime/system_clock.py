from __future__ import annotations

from datetime import datetime


class SystemClock:
    """Wall clock in the machine's local time zone; screenshot names use local HHMM."""

    def now(self) -> datetime:
        return datetime.now().astimezone()
