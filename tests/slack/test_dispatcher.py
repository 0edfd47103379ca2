"""Tests for CommandDispatcher: slash commands end to end on disk."""

from datetime import datetime
from pathlib import Path

import pytest
from glt.errors import InvalidTokenError, MalformedRecordError
from glt.slack.dispatcher import CommandDispatcher
from glt.slack.models import AttachedMessage, Message, ResponseType, SlashCommandRequest
from glt.worklog.clock import Clock, FixedClock
from glt.worklog.models import DataRoot, Date, Time

TOKEN = "s3cret"


class MovableClock(Clock):
    """Clock the test can move forward."""

    def __init__(self, moment: datetime) -> None:
        self.moment = moment

    def now(self) -> tuple[Date, Time]:
        return FixedClock(self.moment).now()


@pytest.fixture
def root(tmp_path: Path) -> DataRoot:
    return DataRoot(path=tmp_path)


@pytest.fixture
def clock() -> MovableClock:
    return MovableClock(datetime(2024, 3, 10, 9, 0))


@pytest.fixture
def dispatcher(root: DataRoot, clock: MovableClock) -> CommandDispatcher:
    return CommandDispatcher(root, clock, verification_token=TOKEN)


def _text(response) -> str:
    assert isinstance(response, Message)
    return response.text


class TestTokens:
    def test_valid_token(self, dispatcher: CommandDispatcher):
        response = dispatcher.handle_request(SlashCommandRequest(token=TOKEN, text="help"))
        assert "/glt init" in _text(response)

    def test_invalid_token(self, dispatcher: CommandDispatcher):
        with pytest.raises(InvalidTokenError):
            dispatcher.handle_request(SlashCommandRequest(token="wrong", text="init"))

    def test_invalid_token_touches_nothing(self, dispatcher: CommandDispatcher, root: DataRoot):
        with pytest.raises(InvalidTokenError):
            dispatcher.handle_request(SlashCommandRequest(token="wrong", text="init"))
        assert not root.open_record_path.exists()

    def test_unset_token_rejects_everything(self, root: DataRoot, clock: MovableClock):
        open_dispatcher = CommandDispatcher(root, clock)
        assert open_dispatcher.verify("") is False
        assert open_dispatcher.verify("anything") is False


class TestLifecycle:
    def test_full_day(self, dispatcher: CommandDispatcher, clock: MovableClock, root: DataRoot):
        started = dispatcher.handle_text("init")
        assert "2024-03-10" in _text(started)
        assert started.response_type == ResponseType.IN_CHANNEL

        added = dispatcher.handle_text("add Alice Bob")
        assert _text(added) == "Added Alice, Bob to today's session."

        clock.moment = datetime(2024, 3, 10, 13, 0)
        late = dispatcher.handle_text("add Alice Carol")
        assert _text(late) == "Added Carol to today's session."

        status = dispatcher.handle_text("status")
        assert isinstance(status, AttachedMessage)
        participants = status.attachments[0].fields[1].value
        assert participants == "Alice - 9:00\nBob - 9:00\nCarol - 13:00"

        clock.moment = datetime(2024, 3, 10, 18, 30)
        committed = dispatcher.handle_text("commit shipped the release")
        assert isinstance(committed, AttachedMessage)
        fields = {f.title: f.value for f in committed.attachments[0].fields}
        assert fields["Hours"] == "9:00 ~ 18:30 9h 30m"
        assert fields["Note"] == "shipped the release"

        assert (root.day_archive_path / "10.json").exists()
        assert not root.open_record_path.exists()

    def test_init_twice(self, dispatcher: CommandDispatcher):
        dispatcher.handle_text("init")
        assert "already running" in _text(dispatcher.handle_text("init"))

    @pytest.mark.parametrize("text", ["status", "add Alice", "rm Alice", "commit done", "reset"])
    def test_needs_open_session(self, dispatcher: CommandDispatcher, text: str):
        assert "No session is running" in _text(dispatcher.handle_text(text))

    @pytest.mark.parametrize("text", ["add", "rm", "commit", "commit   "])
    def test_missing_arguments(self, dispatcher: CommandDispatcher, text: str):
        dispatcher.handle_text("init")
        assert "invalid arguments" in _text(dispatcher.handle_text(text))

    def test_remove_reports_removed_names(self, dispatcher: CommandDispatcher):
        dispatcher.handle_text("init")
        dispatcher.handle_text("add Alice Bob")
        assert _text(dispatcher.handle_text("rm Alice Zed")) == (
            "Removed Alice from today's session."
        )
        assert "Nobody listed" in _text(dispatcher.handle_text("rm Zed"))

    def test_add_duplicates_only(self, dispatcher: CommandDispatcher):
        dispatcher.handle_text("init")
        dispatcher.handle_text("add Alice")
        assert "already on today's session" in _text(dispatcher.handle_text("add Alice"))

    def test_reset(self, dispatcher: CommandDispatcher, root: DataRoot):
        dispatcher.handle_text("init")
        assert "discarded" in _text(dispatcher.handle_text("reset"))
        assert not root.open_record_path.exists()
        assert not root.day_archive_path.exists()

    def test_unknown_command_shows_help(self, dispatcher: CommandDispatcher):
        assert "/glt push" in _text(dispatcher.handle_text("dance"))


class TestMonth:
    def _work_day(self, dispatcher: CommandDispatcher, clock: MovableClock, day: int) -> None:
        clock.moment = datetime(2024, 3, day, 9, 0)
        dispatcher.handle_text("init")
        dispatcher.handle_text("add Alice")
        clock.moment = datetime(2024, 3, day, 18, 0)
        dispatcher.handle_text(f"commit day {day}")

    def test_log(self, dispatcher: CommandDispatcher, clock: MovableClock):
        self._work_day(dispatcher, clock, 4)
        self._work_day(dispatcher, clock, 5)

        response = dispatcher.handle_text("log")
        assert isinstance(response, AttachedMessage)
        attachment = response.attachments[0]
        assert attachment.title == "2024-03"
        assert attachment.text == "2 day(s), 18h 0m in total"
        titles = [f.title for f in attachment.fields]
        assert titles == ["Day 4", "Day 5", "Totals"]
        assert "Alice - 2 day(s), 18h 0m" in attachment.fields[-1].value

    def test_log_empty(self, dispatcher: CommandDispatcher):
        assert "No finished sessions this month" in _text(dispatcher.handle_text("log"))

    def test_log_skips_unreadable(self, dispatcher: CommandDispatcher, clock, root: DataRoot):
        self._work_day(dispatcher, clock, 4)
        (root.day_archive_path / "junk.json").write_text("garbage")

        response = dispatcher.handle_text("log")
        assert isinstance(response, AttachedMessage)
        assert response.attachments[0].text.startswith("1 day(s)")

    def test_push(self, dispatcher: CommandDispatcher, clock: MovableClock, root: DataRoot):
        self._work_day(dispatcher, clock, 4)
        response = dispatcher.handle_text("push")

        assert "Filed 1 day(s) under 2024-03" in _text(response)
        assert (root.path / "2024" / "3" / "4.json").exists()

    def test_push_empty(self, dispatcher: CommandDispatcher):
        assert "No finished sessions to file away" in _text(dispatcher.handle_text("push"))

    def test_other_errors_propagate(self, dispatcher: CommandDispatcher, root: DataRoot):
        root.open_record_path.write_text("garbage")
        with pytest.raises(MalformedRecordError):
            dispatcher.handle_text("status")
