"""Tests for the bounded-wait background load."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from records import ParseError, Record
from store import ErrorKind, RecordStore


def _write_records(path: Path, count: int, start: int = 1) -> None:
    lines = [f"{i},Name{i},{i % 101}.00" for i in range(start, start + count)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def gated_decode(monkeypatch: pytest.MonkeyPatch) -> tuple[threading.Event, list[str]]:
    """Make every decode wait for the returned event."""
    gate = threading.Event()
    seen: list[str] = []
    original = Record.decode

    def slow_decode(line: str) -> Record | ParseError:
        gate.wait(10)
        seen.append(line)
        return original(line)

    monkeypatch.setattr(Record, "decode", staticmethod(slow_decode))
    return gate, seen


def test_wait_for_load_without_load_returns_true(tmp_path: Path) -> None:
    with RecordStore(tmp_path / "records.csv") as store:
        assert store.is_loading is False
        assert store.wait_for_load(0) is True


def test_timeout_releases_caller_and_load_finishes_later(
    tmp_path: Path, gated_decode: tuple[threading.Event, list[str]]
) -> None:
    gate, _ = gated_decode
    path = tmp_path / "records.csv"
    _write_records(path, 20)

    with RecordStore(path, load_timeout_s=0.05) as store:
        result = store.load()

        assert result.success is True
        assert result.value is not None
        assert result.value.completed is False
        assert store.is_loading is True

        gate.set()
        assert store.wait_for_load(10) is True
        assert store.is_loading is False
        assert len(store) == 20


def test_save_refuses_while_load_in_flight(
    tmp_path: Path, gated_decode: tuple[threading.Event, list[str]]
) -> None:
    gate, _ = gated_decode
    path = tmp_path / "records.csv"
    _write_records(path, 5)
    original = path.read_text(encoding="utf-8")

    with RecordStore(path, load_timeout_s=0.05) as store:
        store.load()
        result = store.save()

        assert result.kind is ErrorKind.IO
        assert path.read_text(encoding="utf-8") == original

        gate.set()
        assert store.wait_for_load(10) is True
        assert store.save().value == 5


def test_second_load_rejoins_in_flight_load(
    tmp_path: Path, gated_decode: tuple[threading.Event, list[str]]
) -> None:
    gate, seen = gated_decode
    path = tmp_path / "records.csv"
    _write_records(path, 10)

    with RecordStore(path, load_timeout_s=0.05) as store:
        first = store.load()
        second = store.load()
        assert first.value is not None and first.value.completed is False
        assert second.value is not None and second.value.completed is False

        gate.set()
        assert store.wait_for_load(10) is True
        assert len(seen) == 10
        assert len(store) == 10


def test_close_cancels_in_flight_load(
    tmp_path: Path, gated_decode: tuple[threading.Event, list[str]]
) -> None:
    gate, seen = gated_decode
    path = tmp_path / "records.csv"
    _write_records(path, 50)

    store = RecordStore(path, load_timeout_s=0.05)
    result = store.load()
    assert result.value is not None and result.value.completed is False

    store.close()
    gate.set()

    assert store.wait_for_load(10) is True
    assert len(seen) < 50
    assert len(store) < 50


@pytest.mark.parametrize("run", range(5))
def test_add_during_load_does_not_corrupt_store(tmp_path: Path, run: int) -> None:
    path = tmp_path / f"records_{run}.csv"
    file_count = 2000
    _write_records(path, file_count)

    with RecordStore(path, load_timeout_s=0) as store:
        result = store.load()
        assert result.success is True

        added = 0
        for record_id in range(10_001, 10_501):
            outcome = store.add(Record(id=record_id, name=f"Live{record_id}", score=50.0))
            assert outcome.success is True
            added += 1
        # Ids that also appear in the file may race either way, but never raise.
        for record_id in range(1, 51):
            store.add(Record(id=record_id, name="Racer", score=1.0))
            store.list_all()

        assert store.wait_for_load(10) is True
        assert len(store) == file_count + added
        for record_id in (1, file_count, 10_001, 10_500):
            assert store.find_by_id(record_id).success is True


def test_read_error_after_timeout_keeps_records_added_meanwhile(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    gate = threading.Event()
    original = Record.decode

    def failing_decode(line: str) -> Record | ParseError:
        if line.startswith("2,"):
            gate.wait(10)
            raise OSError("device went away")
        return original(line)

    monkeypatch.setattr(Record, "decode", staticmethod(failing_decode))
    path = tmp_path / "records.csv"
    _write_records(path, 2)

    with RecordStore(path, load_timeout_s=0.05) as store:
        result = store.load()
        assert result.value is not None
        assert result.value.completed is False

        assert store.add(Record(id=100, name="Late", score=50)).success is True
        gate.set()
        assert store.wait_for_load(10) is True

        assert 100 in store
        assert 1 not in store
        assert len(store) == 1
