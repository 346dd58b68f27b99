from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Time source for cache expiry and validation timestamps."""

    @abstractmethod
    def now(self) -> datetime:
        pass

    def timestamp_millis(self) -> int:
        return int(self.now().timestamp() * 1000)


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = None):
        self._now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        """Move forward by ``timedelta(**kwargs)``."""
        self._now = self._now + timedelta(**kwargs)
