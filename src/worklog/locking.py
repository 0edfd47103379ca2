"""Single-writer locking per data root.

Two layers: a ``threading.Lock`` per resolved root path serialises
threads in this process (the HTTP server runs handlers in a thread
pool), and an exclusive ``flock`` on the root's lock file serialises
separate processes pointed at the same directory.
"""

from __future__ import annotations

import fcntl
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from glt.errors import StorageError
from glt.worklog.models import DataRoot

_registry_lock = threading.Lock()
_root_locks: dict[Path, threading.Lock] = {}


def _thread_lock(key: Path) -> threading.Lock:
    with _registry_lock:
        lock = _root_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _root_locks[key] = lock
        return lock


@contextmanager
def root_lock(root: DataRoot) -> Iterator[None]:
    """Hold the data root exclusively for the duration of the block."""
    with _thread_lock(root.path.resolve()):
        try:
            handle = open(root.lock_path, "a")
        except OSError as exc:
            raise StorageError(f"Could not open lock file {root.lock_path}: {exc}") from exc
        with handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
