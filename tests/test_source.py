"""Tests for filesource.source."""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path

import pytest

from filesource import source
from filesource.errors import ExtractionError, PathNotFound, UnsupportedPathType
from filesource.source import (
    Extraction,
    FileSource,
    Operation,
    Origin,
    SourceUpdate,
    extract_from_path,
    new_source_file,
)
from tests._fixtures.declarations import HOST, manifest, pod, write


class ListSink:
    """Collects updates and sets `stop` once `limit` have arrived."""

    def __init__(self, stop: threading.Event | None = None, limit: int = 0) -> None:
        self.items: list[SourceUpdate] = []
        self.stop = stop
        self.limit = limit

    def put(self, item: SourceUpdate) -> None:
        self.items.append(item)
        if self.stop is not None and len(self.items) >= self.limit:
            self.stop.set()


def _names(update: SourceUpdate) -> list[str]:
    return [p.metadata.name for p in update.pods]


def test_missing_path_emits_empty_set_and_reports(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    sink = ListSink()
    missing = str(tmp_path / "nope")

    result = FileSource(missing, 1.0, sink, HOST).run_once()

    assert sink.items == [SourceUpdate(pods=(), op=Operation.SET, source=Origin.FILE)]
    assert isinstance(result.error, PathNotFound)
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "path does not exist" in warnings[0].getMessage()


def test_directory_emits_full_set(tmp_path: Path) -> None:
    write(tmp_path / "a.yaml", manifest("a"))
    write(tmp_path / "b.yaml", pod("b"))

    result = extract_from_path(str(tmp_path), HOST)

    assert result.error is None
    assert result.update.op is Operation.SET
    assert result.update.source is Origin.FILE
    assert _names(result.update) == ["a-node-1", "b-node-1"]


def test_empty_directory_emits_empty_set(tmp_path: Path) -> None:
    result = extract_from_path(str(tmp_path), HOST)
    assert result == Extraction(update=SourceUpdate(pods=()))


def test_each_poll_replaces_the_previous_set(tmp_path: Path) -> None:
    write(tmp_path / "a.yaml", manifest("a"))
    write(tmp_path / "b.yaml", manifest("b"))
    sink = ListSink()
    watcher = FileSource(str(tmp_path), 1.0, sink, HOST)

    watcher.run_once()
    (tmp_path / "a.yaml").unlink()
    write(tmp_path / "c.yaml", manifest("c"))
    watcher.run_once()

    assert [_names(u) for u in sink.items] == [["a-node-1", "b-node-1"], ["b-node-1", "c-node-1"]]


def test_single_file_emits_one_pod_every_poll(tmp_path: Path) -> None:
    path = write(tmp_path / "web.yaml", manifest("web"))
    sink = ListSink()
    watcher = FileSource(str(path), 1.0, sink, HOST)

    for _ in range(3):
        watcher.run_once()

    assert [_names(u) for u in sink.items] == [["web-node-1"]] * 3
    assert sink.items[0] == sink.items[2]


def test_malformed_single_file_emits_nothing(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = write(tmp_path / "web.yaml", "not: [a, pod")
    sink = ListSink()

    result = FileSource(str(path), 1.0, sink, HOST).run_once()

    assert sink.items == []
    assert result.update is None
    assert isinstance(result.error, ExtractionError)
    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Unable to read config path" in errors[0].getMessage()
    assert "web.yaml" in errors[0].getMessage()


def test_other_stat_errors_emit_nothing(tmp_path: Path) -> None:
    blocker = write(tmp_path / "plain.txt", "x")
    result = extract_from_path(str(blocker / "below"), HOST)

    assert result.update is None
    assert type(result.error) is ExtractionError


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs named pipes")
def test_special_file_is_unsupported(tmp_path: Path) -> None:
    fifo = tmp_path / "pipe"
    os.mkfifo(fifo)

    result = extract_from_path(str(fifo), HOST)

    assert result.update is None
    assert isinstance(result.error, UnsupportedPathType)


def test_run_polls_until_stopped(tmp_path: Path) -> None:
    write(tmp_path / "a.yaml", manifest("a"))
    stop = threading.Event()
    sink = ListSink(stop, limit=3)

    FileSource(str(tmp_path), 0.01, sink, HOST).run(stop)

    assert len(sink.items) == 3
    assert all(_names(u) == ["a-node-1"] for u in sink.items)


def test_run_survives_unexpected_failures(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    calls = {"n": 0}

    def flaky(path: str, hostname: str | None = None) -> Extraction:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("disk on fire")
        return Extraction(update=SourceUpdate(pods=()))

    monkeypatch.setattr(source, "extract_from_path", flaky)
    stop = threading.Event()
    sink = ListSink(stop, limit=1)

    FileSource(str(tmp_path), 0.01, sink, HOST).run(stop)

    assert calls["n"] == 2
    assert len(sink.items) == 1
    assert "Unexpected failure polling" in caplog.text


def test_errors_do_not_stop_the_schedule(tmp_path: Path) -> None:
    path = write(tmp_path / "web.yaml", "garbage")
    stop = threading.Event()
    sink = ListSink(stop, limit=1)
    watcher = FileSource(str(path), 0.01, sink, HOST)
    thread = watcher.start(stop)

    staged = write(tmp_path / ".staged", manifest("web"))
    os.replace(staged, path)
    thread.join(timeout=5)

    assert not thread.is_alive()
    assert _names(sink.items[0]) == ["web-node-1"]


def test_first_poll_happens_immediately(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="filesource")
    write(tmp_path / "a.yaml", manifest("a"))
    updates: queue.Queue[SourceUpdate] = queue.Queue(maxsize=1)
    stop = threading.Event()

    new_source_file(str(tmp_path), 3600, updates, hostname=HOST, stop=stop)
    try:
        update = updates.get(timeout=5)
    finally:
        stop.set()

    assert _names(update) == ["a-node-1"]
    assert "Watching path" in caplog.text


def test_period_must_be_positive(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        FileSource(str(tmp_path), 0, ListSink())


def test_one_slot_queue_buffers_a_single_update(tmp_path: Path) -> None:
    write(tmp_path / "a.yaml", manifest("a"))
    updates: queue.Queue[SourceUpdate] = queue.Queue(maxsize=1)

    FileSource(str(tmp_path), 1.0, updates, HOST).run_once()

    assert updates.full()
    assert _names(updates.get_nowait()) == ["a-node-1"]
