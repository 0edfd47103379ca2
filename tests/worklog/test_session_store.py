"""Tests for SessionStore, the single open session per data root."""

import json
from pathlib import Path

import pytest
from glt.errors import AlreadyOpenError, MalformedRecordError, NoOpenSessionError
from glt.worklog.models import DataRoot, Date, Time
from glt.worklog.store import SessionStore

DAY = Date(year=2024, month=3, day=10)
NINE = Time(hour=9, minute=0)


@pytest.fixture
def root(tmp_path: Path) -> DataRoot:
    return DataRoot(path=tmp_path)


@pytest.fixture
def store(root: DataRoot) -> SessionStore:
    return SessionStore(root)


class TestBegin:
    def test_creates_open_record(self, store: SessionStore, root: DataRoot):
        record = store.begin(DAY, NINE)

        assert record.date == DAY
        assert record.start_time == NINE
        assert not record.is_sealed
        assert root.open_record_path.exists()

    def test_persists_json(self, store: SessionStore, root: DataRoot):
        store.begin(DAY, NINE)

        data = json.loads(root.open_record_path.read_text(encoding="utf-8"))
        assert data["date"] == [2024, 3, 10]
        assert data["start_time"] == [9, 0]
        assert data["end_time"] is None
        assert data["participants"] == []

    def test_second_begin_fails(self, store: SessionStore):
        store.begin(DAY, NINE)
        with pytest.raises(AlreadyOpenError):
            store.begin(DAY, Time(hour=10, minute=0))

    def test_begin_after_discard(self, store: SessionStore):
        store.begin(DAY, NINE)
        store.discard()
        record = store.begin(DAY, Time(hour=10, minute=0))
        assert record.start_time == Time(hour=10, minute=0)


class TestNoSession:
    def test_read_fails(self, store: SessionStore):
        with pytest.raises(NoOpenSessionError):
            store.read()

    def test_mutate_fails(self, store: SessionStore):
        with pytest.raises(NoOpenSessionError):
            store.mutate(lambda r: r)

    def test_discard_fails(self, store: SessionStore):
        with pytest.raises(NoOpenSessionError):
            store.discard()

    def test_add_fails(self, store: SessionStore):
        with pytest.raises(NoOpenSessionError):
            store.add_participants(["Alice"], NINE)

    def test_depends_only_on_disk_state(self, store: SessionStore, root: DataRoot):
        store.begin(DAY, NINE)
        root.open_record_path.unlink()

        assert store.exists() is False
        with pytest.raises(NoOpenSessionError):
            store.read()

    def test_fresh_store_sees_existing_session(self, store: SessionStore, root: DataRoot):
        store.begin(DAY, NINE)
        assert SessionStore(root).read().date == DAY


class TestParticipants:
    def test_add_returns_new_names(self, store: SessionStore):
        store.begin(DAY, NINE)
        added = store.add_participants(["Alice", "Bob"], Time(hour=9, minute=30))

        assert added == ["Alice", "Bob"]
        assert store.read().participant_names == ["Alice", "Bob"]

    def test_add_same_name_twice_in_one_call(self, store: SessionStore):
        store.begin(DAY, NINE)
        added = store.add_participants(["Alice", "Alice"], NINE)

        assert added == ["Alice"]
        assert store.read().participant_names == ["Alice"]

    def test_add_existing_name_is_skipped(self, store: SessionStore):
        store.begin(DAY, NINE)
        store.add_participants(["Alice"], NINE)
        added = store.add_participants(["Alice", "Carol"], Time(hour=11, minute=0))

        assert added == ["Carol"]
        record = store.read()
        assert record.participant_names == ["Alice", "Carol"]
        assert record.participants[0].joined_at == NINE

    def test_remove(self, store: SessionStore):
        store.begin(DAY, NINE)
        store.add_participants(["Alice", "Bob"], NINE)
        change = store.remove_participants(["Alice"])

        assert change.before.participant_names == ["Alice", "Bob"]
        assert change.after.participant_names == ["Bob"]
        assert store.read().participant_names == ["Bob"]

    def test_remove_missing_name_is_noop(self, store: SessionStore):
        store.begin(DAY, NINE)
        store.add_participants(["Alice"], NINE)
        change = store.remove_participants(["Zed"])

        assert change.after.participant_names == ["Alice"]


class TestMutate:
    def test_returns_before_and_after(self, store: SessionStore):
        store.begin(DAY, NINE)
        change = store.mutate(lambda r: r.with_participants(["Dana"], NINE)[0])

        assert change.before.participants == ()
        assert change.after.participant_names == ["Dana"]
        assert store.read() == change.after


class TestDiscard:
    def test_removes_file(self, store: SessionStore, root: DataRoot):
        store.begin(DAY, NINE)
        store.discard()

        assert not root.open_record_path.exists()
        assert not store.exists()

    def test_no_archive_produced(self, store: SessionStore, root: DataRoot):
        store.begin(DAY, NINE)
        store.discard()
        assert not root.day_archive_path.exists()


class TestCorruptRecord:
    def test_read_raises_malformed(self, store: SessionStore, root: DataRoot):
        root.open_record_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MalformedRecordError) as exc_info:
            store.read()
        assert exc_info.value.path == root.open_record_path

    def test_begin_still_refuses(self, store: SessionStore, root: DataRoot):
        root.open_record_path.write_text("{}", encoding="utf-8")
        with pytest.raises(AlreadyOpenError):
            store.begin(DAY, NINE)

    def test_read_non_utf8_raises_malformed(self, store: SessionStore, root: DataRoot):
        root.open_record_path.write_bytes(b"\xff\xfe{garbage")
        with pytest.raises(MalformedRecordError) as exc_info:
            store.read()
        assert exc_info.value.path == root.open_record_path
