"""Day archiving and month archival.

Sealing a session writes it into the flat day-archive area as
``<day>.json`` (``<day>_1.json`` and so on when the name is taken) and
then removes the open record. Month archival later moves every file
in that area into ``<year>/<month>/``, anchored on the earliest record.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from glt.errors import (
    EmptyArchiveError,
    MalformedRecordError,
    NoOpenSessionError,
    StorageError,
)
from glt.worklog.files import (
    free_record_path,
    list_record_files,
    read_record,
    remove_file,
    write_record,
)
from glt.worklog.locking import root_lock
from glt.worklog.models import (
    ArchivedDay,
    ArchiveListing,
    DataRoot,
    DayRecord,
    MonthArchive,
    Time,
)


class DayArchive:
    """Seals open sessions and moves sealed days into monthly storage."""

    def __init__(self, root: DataRoot) -> None:
        self._root = root
        self._dir = root.day_archive_path

    # ── Sealing ──────────────────────────────────────────────────

    def finalize(self, end_time: Time, note: str) -> DayRecord:
        """Seal the open session and file it in the day-archive area.

        The archive copy is written before the open record is removed.
        A crash between the two leaves both on disk; the stale open
        record then has to be discarded by hand.

        Raises:
            NoOpenSessionError: If no session is open.
            MalformedRecordError: If the open record is unreadable or already sealed.
        """
        open_path = self._root.open_record_path
        with root_lock(self._root):
            if not open_path.exists():
                raise NoOpenSessionError(f"No open session in {self._root.path}")
            record = read_record(open_path)
            if record.is_sealed:
                raise MalformedRecordError(open_path, "open record is already sealed")
            record = record.sealed(end_time, note)
            target = free_record_path(self._dir, str(record.date.day))
            write_record(target, record)
            remove_file(open_path)
        return record

    # ── Listing ──────────────────────────────────────────────────

    def _listing(self, files: list[Path]) -> ArchiveListing:
        listing = ArchiveListing()
        for path in files:
            try:
                record = read_record(path)
            except (MalformedRecordError, StorageError):
                listing.skipped.append(path)
                continue
            listing.days.append(ArchivedDay(path=path, record=record))
        listing.days.sort(
            key=lambda d: (d.record.date.to_date(), d.record.start_time.total_minutes, d.path.name)
        )
        return listing

    def listing(self) -> ArchiveListing:
        """Sealed days waiting for month archival, oldest first.

        Files that cannot be read or decoded are reported in ``skipped``
        rather than failing the whole listing.
        """
        with root_lock(self._root):
            return self._listing(list_record_files(self._dir))

    def records(self) -> list[DayRecord]:
        return self.listing().records

    # ── Month archival ───────────────────────────────────────────

    def archive_month(self) -> MonthArchive:
        """Move every file in the day-archive area to ``<year>/<month>/``.

        The destination comes from the earliest readable record.

        Raises:
            EmptyArchiveError: If there is nothing to move.
            MalformedRecordError: If no file decodes to anchor the month.
            StorageError: If moving fails; already-moved files are put back.
        """
        with root_lock(self._root):
            files = list_record_files(self._dir)
            if not files:
                raise EmptyArchiveError(f"No sealed days in {self._dir}")
            listing = self._listing(files)
            if not listing.days:
                raise MalformedRecordError(files[0], "no readable record to anchor the month")
            anchor = listing.days[0].record
            destination = self._root.month_path(anchor.date.year, anchor.date.month)
            try:
                destination.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError(f"Could not create {destination}: {exc}") from exc
            moves = _plan_moves(files, destination)
            if _same_filesystem(self._dir, destination):
                _rename_all(moves)
            else:
                _copy_then_delete(moves)
        return MonthArchive(
            year=anchor.date.year,
            month=anchor.date.month,
            destination=destination,
            moved=[target for _, target in moves],
        )


def _plan_moves(files: list[Path], destination: Path) -> list[tuple[Path, Path]]:
    """Pair each source with a destination path that clobbers nothing."""
    taken: set[Path] = set()
    moves: list[tuple[Path, Path]] = []
    for source in files:
        target = free_record_path(destination, source.stem, taken)
        taken.add(target)
        moves.append((source, target))
    return moves


def _same_filesystem(a: Path, b: Path) -> bool:
    try:
        return os.stat(a).st_dev == os.stat(b).st_dev
    except OSError as exc:
        raise StorageError(f"Could not stat {a} or {b}: {exc}") from exc


def _rename_all(moves: list[tuple[Path, Path]]) -> None:
    done: list[tuple[Path, Path]] = []
    try:
        for source, target in moves:
            os.replace(source, target)
            done.append((source, target))
    except OSError as exc:
        try:
            for source, target in reversed(done):
                os.replace(target, source)
        except OSError as rollback_exc:
            raise StorageError(
                f"Month archival failed ({exc}) and could not be rolled back: {rollback_exc}"
            ) from rollback_exc
        raise StorageError(f"Month archival failed: {exc}") from exc


def _copy_then_delete(moves: list[tuple[Path, Path]]) -> None:
    """Copy everything, verify, and only then delete the sources."""
    copied: list[Path] = []
    try:
        for source, target in moves:
            shutil.copy2(source, target)
            copied.append(target)
            if target.stat().st_size != source.stat().st_size:
                raise OSError(f"incomplete copy of {source}")
    except OSError as exc:
        for target in copied:
            target.unlink(missing_ok=True)
        raise StorageError(f"Month archival failed: {exc}") from exc
    for source, _ in moves:
        remove_file(source)
