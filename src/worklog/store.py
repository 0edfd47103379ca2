"""File-backed store for the single open work session.

The open session is one JSON file in the data root; its absence means
no session is open. Every public operation holds the root lock for
its whole load-transform-save sequence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from glt.errors import AlreadyOpenError, NoOpenSessionError
from glt.worklog.files import read_record, remove_file, write_record
from glt.worklog.locking import root_lock
from glt.worklog.models import DataRoot, Date, DayRecord, RecordChange, Time


class SessionStore:
    """Begin, read, mutate, and discard the open day record."""

    def __init__(self, root: DataRoot) -> None:
        self._root = root
        self._path = root.open_record_path

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> DayRecord:
        if not self._path.exists():
            raise NoOpenSessionError(f"No open session in {self._root.path}")
        return read_record(self._path)

    def _save(self, record: DayRecord) -> None:
        write_record(self._path, record)

    # ── Lifecycle ────────────────────────────────────────────────

    def exists(self) -> bool:
        """Whether a session is open right now."""
        return self._path.exists()

    def begin(self, date: Date, start_time: Time) -> DayRecord:
        """Open a new session.

        Raises AlreadyOpenError if one is already open.
        """
        with root_lock(self._root):
            if self._path.exists():
                raise AlreadyOpenError(f"A session is already open in {self._root.path}")
            record = DayRecord(date=date, start_time=start_time)
            self._save(record)
        return record

    def read(self) -> DayRecord:
        """Return the open record. Raises NoOpenSessionError if none."""
        with root_lock(self._root):
            return self._load()

    def mutate(self, transform: Callable[[DayRecord], DayRecord]) -> RecordChange:
        """Load the open record, apply ``transform``, save the result.

        Returns both the record as loaded and as saved.
        """
        with root_lock(self._root):
            before = self._load()
            after = transform(before)
            self._save(after)
        return RecordChange(before=before, after=after)

    def discard(self) -> None:
        """Delete the open record without archiving it."""
        with root_lock(self._root):
            if not self._path.exists():
                raise NoOpenSessionError(f"No open session in {self._root.path}")
            remove_file(self._path)

    # ── Participants ─────────────────────────────────────────────

    def add_participants(self, names: Iterable[str], at: Time) -> list[str]:
        """Add participants joining at ``at``; return the names newly added.

        Names already present, and repeats within ``names``, are skipped.
        """
        with root_lock(self._root):
            before = self._load()
            after, added = before.with_participants(names, at)
            if added:
                self._save(after)
        return added

    def remove_participants(self, names: Iterable[str]) -> RecordChange:
        """Remove every participant whose name is in ``names``.

        Names that are not present are ignored.
        """
        names = list(names)
        return self.mutate(lambda record: record.without_participants(names))
