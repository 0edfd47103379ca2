"""Day record file I/O.

Every write goes through a temporary sibling file and ``os.replace``
so readers never see a half-written record.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path

from glt.errors import MalformedRecordError, StorageError
from glt.worklog.models import DayRecord
from pydantic import ValidationError

RECORD_SUFFIX = ".json"


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temp file and rename."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise StorageError(f"Could not write {path}: {exc}") from exc


def encode_record(record: DayRecord) -> str:
    return record.model_dump_json(indent=2, by_alias=True)


def read_record(path: Path) -> DayRecord:
    """Load one day record.

    Raises:
        StorageError: If the file cannot be read.
        MalformedRecordError: If it is not a valid day record.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise StorageError(f"Could not read {path}: {exc}") from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedRecordError(path, f"not UTF-8: {exc}") from exc
    try:
        return DayRecord.model_validate_json(text)
    except ValidationError as exc:
        raise MalformedRecordError(path, str(exc)) from exc


def write_record(path: Path, record: DayRecord) -> None:
    atomic_write(path, encode_record(record))


def remove_file(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        raise StorageError(f"Could not remove {path}: {exc}") from exc


def list_record_files(directory: Path) -> list[Path]:
    """Record files in ``directory`` sorted by name; missing dir is empty."""
    if not directory.is_dir():
        return []
    try:
        return sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix == RECORD_SUFFIX and not p.name.startswith(".")
        )
    except OSError as exc:
        raise StorageError(f"Could not list {directory}: {exc}") from exc


def free_record_path(directory: Path, key: str, taken: set[Path] | None = None) -> Path:
    """First unused ``<key>.json``, ``<key>_1.json``, ... in ``directory``.

    A linear probe over the directory as it is now; ``taken`` holds paths
    already claimed by the caller but not yet written.
    """
    taken = taken or set()
    candidate = directory / f"{key}{RECORD_SUFFIX}"
    counter = 0
    while candidate.exists() or candidate in taken:
        counter += 1
        candidate = directory / f"{key}_{counter}{RECORD_SUFFIX}"
    return candidate
