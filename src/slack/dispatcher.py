"""Route parsed slash commands into the work log core.

The dispatcher owns the policy the core leaves out: it checks the
verification token, asks the clock for "now", logs, and turns the
expected failures (session already open, nothing open, nothing to
summarise or archive) into chat replies. Anything else propagates to
the transport layer.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable
from typing import Any

from glt.errors import (
    AlreadyOpenError,
    EmptyArchiveError,
    EmptyLogError,
    InvalidTokenError,
    NoOpenSessionError,
)
from glt.slack import formatter
from glt.slack.commands import (
    AddCommand,
    CommitCommand,
    HelpCommand,
    InitCommand,
    LogCommand,
    ParsedCommand,
    PushCommand,
    RemoveCommand,
    ResetCommand,
    StatusCommand,
    UnknownCommand,
    parse_command,
)
from glt.slack.models import SlackResponse, SlashCommandRequest
from glt.worklog.archive import DayArchive
from glt.worklog.clock import Clock
from glt.worklog.models import DataRoot
from glt.worklog.store import SessionStore
from glt.worklog.summary import summarize

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Executes slash commands against one data root."""

    def __init__(self, root: DataRoot, clock: Clock, verification_token: str = "") -> None:
        self._root = root
        self._clock = clock
        self._token = verification_token
        self._store = SessionStore(root)
        self._archive = DayArchive(root)
        self._handlers: dict[type, Callable[[Any], SlackResponse]] = {
            InitCommand: self._init,
            AddCommand: self._add,
            RemoveCommand: self._remove,
            StatusCommand: self._status,
            CommitCommand: self._commit,
            ResetCommand: self._reset,
            LogCommand: self._log,
            PushCommand: self._push,
            HelpCommand: self._help,
            UnknownCommand: self._help,
        }

    @property
    def root(self) -> DataRoot:
        return self._root

    def verify(self, token: str) -> bool:
        """Constant-time token check; an unset token rejects everything."""
        if not self._token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._token.encode("utf-8"))

    def handle_request(self, request: SlashCommandRequest) -> SlackResponse:
        """Verify and execute a slash-command request.

        Raises:
            InvalidTokenError: If the request token does not match.
        """
        if not self.verify(request.token):
            logger.warning(
                "Rejected command from %s (%s): invalid token",
                request.user_name or "unknown user",
                request.team_domain or "unknown team",
            )
            raise InvalidTokenError("Invalid verification token")
        return self.handle_text(request.text, user=request.user_name)

    def handle_text(self, text: str, *, user: str = "") -> SlackResponse:
        """Parse and execute command text without a token check."""
        command = parse_command(text)
        logger.debug("Dispatching %s from %s", command.kind, user or "local")
        return self.dispatch(command)

    def dispatch(self, command: ParsedCommand) -> SlackResponse:
        handler = self._handlers[type(command)]
        try:
            return handler(command)
        except AlreadyOpenError:
            return formatter.already_open()
        except NoOpenSessionError:
            return formatter.no_open_session()
        except EmptyArchiveError:
            return formatter.nothing_to_archive()
        except EmptyLogError:
            return formatter.nothing_to_summarize()

    # ── Handlers ─────────────────────────────────────────────────

    def _init(self, command: InitCommand) -> SlackResponse:
        date, time = self._clock.now()
        record = self._store.begin(date, time)
        logger.info("Opened session for %s in %s", record.date.isoformat(), self._root.path)
        return formatter.session_started(record)

    def _add(self, command: AddCommand) -> SlackResponse:
        if not command.names:
            return formatter.invalid_argument()
        _, time = self._clock.now()
        added = self._store.add_participants(command.names, time)
        return formatter.participants_added(added)

    def _remove(self, command: RemoveCommand) -> SlackResponse:
        if not command.names:
            return formatter.invalid_argument()
        change = self._store.remove_participants(command.names)
        remaining = set(change.after.participant_names)
        removed = [name for name in change.before.participant_names if name not in remaining]
        return formatter.participants_removed(removed)

    def _status(self, command: StatusCommand) -> SlackResponse:
        return formatter.status(self._store.read())

    def _commit(self, command: CommitCommand) -> SlackResponse:
        if not command.note:
            return formatter.invalid_argument()
        _, time = self._clock.now()
        record = self._archive.finalize(time, command.note)
        logger.info("Sealed session for %s in %s", record.date.isoformat(), self._root.path)
        return formatter.committed(record)

    def _reset(self, command: ResetCommand) -> SlackResponse:
        self._store.discard()
        logger.info("Discarded open session in %s", self._root.path)
        return formatter.discarded()

    def _log(self, command: LogCommand) -> SlackResponse:
        listing = self._archive.listing()
        for path in listing.skipped:
            logger.warning("Skipping unreadable day record %s", path)
        return formatter.month_log(summarize(listing.records))

    def _push(self, command: PushCommand) -> SlackResponse:
        result = self._archive.archive_month()
        logger.info(
            "Archived %d day(s) to %s", len(result.moved), result.destination
        )
        return formatter.month_archived(result)

    def _help(self, command: HelpCommand | UnknownCommand) -> SlackResponse:
        if isinstance(command, UnknownCommand):
            logger.debug("Unrecognised command %r", command.word)
        return formatter.help_text()
