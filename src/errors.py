"""Typed failures raised by glt.

Core operations raise exactly one of these and never retry or log.
Adapters (the Slack dispatcher, the HTTP server, the CLI) decide
which ones become user-facing messages and which propagate.
"""

from __future__ import annotations

from pathlib import Path


class GltError(Exception):
    """Base error for everything glt raises on purpose."""


class AlreadyOpenError(GltError):
    """A session is already open for this data root."""


class NoOpenSessionError(GltError):
    """The operation needs an open session and there is none."""


class EmptyArchiveError(GltError):
    """Month archival was requested with no sealed days waiting."""


class EmptyLogError(GltError):
    """Aggregation was requested over zero day records."""


class StorageError(GltError):
    """An underlying read, write, copy, or delete failed."""


class MalformedRecordError(GltError):
    """A persisted file does not decode to a valid day record."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = path
        self.reason = reason
        message = f"Malformed day record at {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidTokenError(GltError):
    """The slash-command verification token did not match."""


class ConfigError(GltError):
    """Configuration is missing or points at something unusable."""
