"""Sources of "now" for the command layer.

The store never reads the wall clock; callers ask a Clock and pass the
resulting date and time in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from glt.errors import ConfigError
from glt.worklog.models import Date, Time


class Clock(ABC):
    """Supplies the current date and time of day."""

    @abstractmethod
    def now(self) -> tuple[Date, Time]:
        """Return the current ``(date, time)``."""


class SystemClock(Clock):
    """Wall-clock time, in ``timezone`` or the machine's local zone."""

    def __init__(self, timezone: str = "") -> None:
        self._tz: ZoneInfo | None = None
        if timezone:
            try:
                self._tz = ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ConfigError(f"Unknown timezone: {timezone}") from exc

    def now(self) -> tuple[Date, Time]:
        current = datetime.now(tz=self._tz) if self._tz else datetime.now()
        return Date.from_date(current.date()), Time.from_time(current.time())


class FixedClock(Clock):
    """Always reports the same moment."""

    def __init__(self, moment: datetime) -> None:
        self._date = Date.from_date(moment.date())
        self._time = Time.from_time(moment.time())

    def now(self) -> tuple[Date, Time]:
        return self._date, self._time
