from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock(Clock):
    """Local wall clock, used for trash timestamp suffixes."""

    def now(self) -> datetime:
        return datetime.now()
