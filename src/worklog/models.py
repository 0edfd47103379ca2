"""Work log domain models as pure Pydantic v2 value types.

A day of work is a DayRecord: it opens with a date and start time,
collects participants while open, and is sealed with an end time and
a closing note. Dates and times persist as compact JSON arrays
(``[2024, 3, 10]``, ``[9, 30]``) so the files stay readable by hand.

No I/O lives here; the store, archiver, and aggregator import these.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    model_serializer,
    model_validator,
)

OPEN_RECORD_FILENAME = "working.json"
DAY_ARCHIVE_DIRNAME = "working"
LOCK_FILENAME = ".glt.lock"

# ---------------------------------------------------------------------------
# Temporal value types
# ---------------------------------------------------------------------------


def _unpack(data: Any, fields: tuple[str, ...], kind: str) -> Any:
    """Turn a positional JSON array into a field dict."""
    if isinstance(data, (list, tuple)):
        if len(data) != len(fields):
            raise ValueError(f"{kind} must have {len(fields)} elements, got {len(data)}")
        return dict(zip(fields, data))
    return data


class Date(BaseModel):
    """Calendar date, persisted as ``[year, month, day]``."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)

    @model_validator(mode="before")
    @classmethod
    def _from_triple(cls, data: Any) -> Any:
        return _unpack(data, ("year", "month", "day"), "date")

    @model_validator(mode="after")
    def _check_calendar(self) -> Date:
        try:
            dt.date(self.year, self.month, self.day)
        except ValueError as exc:
            raise ValueError(f"not a calendar date: {exc}") from exc
        return self

    @model_serializer
    def _to_triple(self) -> list[int]:
        return [self.year, self.month, self.day]

    @classmethod
    def from_date(cls, value: dt.date) -> Date:
        return cls(year=value.year, month=value.month, day=value.day)

    def to_date(self) -> dt.date:
        return dt.date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        return self.to_date().isoformat()


class TimeDiff(BaseModel):
    """Signed span of hours and minutes.

    Both components carry the sign of the span, so ``-90`` minutes is
    ``hours=-1, minutes=-30`` and ``as_hours()`` gives ``-1.5``.
    """

    model_config = ConfigDict(frozen=True)

    hours: int
    minutes: int

    @classmethod
    def from_minutes(cls, total: int) -> TimeDiff:
        sign = -1 if total < 0 else 1
        hours, minutes = divmod(abs(total), 60)
        return cls(hours=sign * hours, minutes=sign * minutes)

    @classmethod
    def from_hours(cls, value: float) -> TimeDiff:
        """Convert fractional hours back to whole hours and minutes.

        Minutes are rounded to the nearest whole minute first; truncating
        ``8.666...`` hours would otherwise give 8h 39m.
        """
        return cls.from_minutes(round(value * 60))

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def as_hours(self) -> float:
        return self.hours + self.minutes / 60


class Time(BaseModel):
    """Wall-clock time of day, persisted as ``[hour, minute]``."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        return _unpack(data, ("hour", "minute"), "time")

    @model_serializer
    def _to_pair(self) -> list[int]:
        return [self.hour, self.minute]

    @classmethod
    def from_time(cls, value: dt.time) -> Time:
        return cls(hour=value.hour, minute=value.minute)

    def to_time(self) -> dt.time:
        return dt.time(self.hour, self.minute)

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute

    def as_hours(self) -> float:
        return self.hour + self.minute / 60

    def __sub__(self, other: Time) -> TimeDiff:
        if not isinstance(other, Time):
            return NotImplemented
        return TimeDiff.from_minutes(self.total_minutes - other.total_minutes)


# ---------------------------------------------------------------------------
# Day records
# ---------------------------------------------------------------------------


class Participant(BaseModel):
    """Someone who attended a work session.

    Two participants are the same person when their names match,
    whatever time they joined.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    joined_at: Time = Field(
        validation_alias=AliasChoices("commit_time", "joined_at"),
        serialization_alias="commit_time",
    )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Participant):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)


class DayRecord(BaseModel):
    """One day's work session, open or sealed.

    ``end_time`` and ``note`` are both absent while the session is open
    and both present once it is sealed. Participant names are unique and
    keep the order they joined in.
    """

    model_config = ConfigDict(frozen=True)

    date: Date
    start_time: Time
    end_time: Time | None = None
    note: str | None = Field(
        default=None,
        validation_alias=AliasChoices("note", "message"),
    )
    participants: tuple[Participant, ...] = ()

    @model_validator(mode="after")
    def _check_invariants(self) -> DayRecord:
        if (self.end_time is None) != (self.note is None):
            raise ValueError("end_time and note must be set together")
        names = [p.name for p in self.participants]
        if len(names) != len(set(names)):
            raise ValueError("participant names must be unique")
        return self

    @property
    def is_sealed(self) -> bool:
        return self.end_time is not None

    @property
    def participant_names(self) -> list[str]:
        return [p.name for p in self.participants]

    def duration(self) -> TimeDiff | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    def with_participants(
        self, names: Iterable[str], at: Time
    ) -> tuple[DayRecord, list[str]]:
        """Add each name not already present, joined at ``at``.

        Returns the new record and the names actually added, in request
        order. Repeats within ``names`` are added once.
        """
        present = {p.name for p in self.participants}
        added: list[str] = []
        for name in names:
            if name in present:
                continue
            present.add(name)
            added.append(name)
        joined = tuple(Participant(name=name, joined_at=at) for name in added)
        return self.model_copy(update={"participants": self.participants + joined}), added

    def without_participants(self, names: Iterable[str]) -> DayRecord:
        drop = set(names)
        kept = tuple(p for p in self.participants if p.name not in drop)
        return self.model_copy(update={"participants": kept})

    def sealed(self, end_time: Time, note: str) -> DayRecord:
        if self.is_sealed:
            raise ValueError("day record is already sealed")
        return self.model_copy(update={"end_time": end_time, "note": note})


# ---------------------------------------------------------------------------
# Storage context and operation results
# ---------------------------------------------------------------------------


class DataRoot(BaseModel):
    """Where one tenant's work log lives on disk.

    Passed explicitly into every store operation.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    open_record: str = OPEN_RECORD_FILENAME
    day_archive_dir: str = DAY_ARCHIVE_DIRNAME

    @property
    def open_record_path(self) -> Path:
        return self.path / self.open_record

    @property
    def day_archive_path(self) -> Path:
        return self.path / self.day_archive_dir

    @property
    def lock_path(self) -> Path:
        return self.path / LOCK_FILENAME

    def month_path(self, year: int, month: int) -> Path:
        return self.path / str(year) / str(month)


class RecordChange(BaseModel):
    """Open record before and after a mutation."""

    before: DayRecord
    after: DayRecord


class ArchivedDay(BaseModel):
    """A sealed record sitting in the day-archive area."""

    path: Path
    record: DayRecord


class ArchiveListing(BaseModel):
    """Readable day-archive entries, oldest first, plus unreadable files."""

    days: list[ArchivedDay] = Field(default_factory=list)
    skipped: list[Path] = Field(default_factory=list)

    @property
    def records(self) -> list[DayRecord]:
        return [d.record for d in self.days]


class MonthArchive(BaseModel):
    """Outcome of moving the day-archive area into permanent storage."""

    year: int
    month: int
    destination: Path
    moved: list[Path] = Field(default_factory=list)
