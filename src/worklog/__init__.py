"""Work log core: session lifecycle, day archive, and monthly totals.

A data root holds at most one open session, a flat area of sealed
days awaiting month archival, and a permanent ``<year>/<month>/`` tree.
Everything here takes plain data in and returns data or a typed error
from ``glt.errors``; nothing here renders text or talks to the network.
"""

from glt.worklog.archive import DayArchive
from glt.worklog.clock import Clock, FixedClock, SystemClock
from glt.worklog.models import (
    ArchivedDay,
    ArchiveListing,
    DataRoot,
    Date,
    DayRecord,
    MonthArchive,
    Participant,
    RecordChange,
    Time,
    TimeDiff,
)
from glt.worklog.store import SessionStore
from glt.worklog.summary import (
    MonthSummary,
    ParticipantTotal,
    per_participant,
    summarize,
    total_hours,
)

__all__ = [
    "ArchiveListing",
    "ArchivedDay",
    "Clock",
    "DataRoot",
    "Date",
    "DayArchive",
    "DayRecord",
    "FixedClock",
    "MonthArchive",
    "MonthSummary",
    "Participant",
    "ParticipantTotal",
    "RecordChange",
    "SessionStore",
    "SystemClock",
    "Time",
    "TimeDiff",
    "per_participant",
    "summarize",
    "total_hours",
]
