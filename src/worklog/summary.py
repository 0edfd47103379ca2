"""Roll a month of day records up into totals.

Only sealed records count: an open record has no end time to measure
against. A participant's hours for a day run from when they joined to
when the session ended.
"""

from __future__ import annotations

from collections.abc import Sequence

from glt.errors import EmptyLogError
from glt.worklog.models import DayRecord
from pydantic import BaseModel, Field


class ParticipantTotal(BaseModel):
    """Attendance for one participant across a set of days."""

    days: int = 0
    hours: float = 0.0


class MonthSummary(BaseModel):
    """Aggregate view of the records in the day-archive area."""

    year: int
    month: int
    days: int
    total_hours: float
    participants: dict[str, ParticipantTotal] = Field(default_factory=dict)
    records: list[DayRecord] = Field(default_factory=list)


def _require(records: Sequence[DayRecord]) -> None:
    if not records:
        raise EmptyLogError("No day records to summarize")


def total_hours(records: Sequence[DayRecord]) -> float:
    """Sum of session lengths in fractional hours over sealed records."""
    _require(records)
    total = 0.0
    for record in records:
        duration = record.duration()
        if duration is not None:
            total += duration.as_hours()
    return total


def per_participant(records: Sequence[DayRecord]) -> dict[str, ParticipantTotal]:
    """Days attended and hours worked per participant name.

    Keys are ordered by first appearance. Someone recorded as joining
    after the session ended still gets the day but contributes no hours.
    """
    _require(records)
    totals: dict[str, ParticipantTotal] = {}
    for record in records:
        if record.end_time is None:
            continue
        for participant in record.participants:
            entry = totals.setdefault(participant.name, ParticipantTotal())
            entry.days += 1
            entry.hours += max(0.0, (record.end_time - participant.joined_at).as_hours())
    return totals


def summarize(records: Sequence[DayRecord]) -> MonthSummary:
    """Totals plus the month of the earliest record."""
    _require(records)
    first = min(records, key=lambda r: r.date.to_date())
    return MonthSummary(
        year=first.date.year,
        month=first.date.month,
        days=len(records),
        total_hours=total_hours(records),
        participants=per_participant(records),
        records=list(records),
    )
