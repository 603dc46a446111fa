import logging
import threading
import time
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileOpenedEvent,
)

from beancount_staging import StagingState
from beancount_staging.watcher import FileWatcher, watch_state


class _Counter:
    def __init__(self) -> None:
        self.calls = 0
        self.fired = threading.Event()

    def __call__(self) -> None:
        self.calls += 1
        self.fired.set()


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def test_burst_of_events_fires_once(tmp_path: Path):
    target = tmp_path / "journal.beancount"
    counter = _Counter()
    watcher = FileWatcher([target], counter, debounce=0.05)

    for _ in range(5):
        watcher.handle_event(FileModifiedEvent(str(target)))

    assert counter.fired.wait(timeout=5)
    time.sleep(0.2)
    assert counter.calls == 1


def test_unrelated_events_are_ignored(tmp_path: Path):
    target = tmp_path / "journal.beancount"
    counter = _Counter()
    watcher = FileWatcher([target], counter, debounce=0.01)

    watcher.handle_event(FileModifiedEvent(str(tmp_path / "other.beancount")))
    watcher.handle_event(DirModifiedEvent(str(tmp_path)))
    watcher.handle_event(FileOpenedEvent(str(target)))

    assert not counter.fired.wait(timeout=0.2)


def test_create_and_move_onto_target_count(tmp_path: Path):
    target = tmp_path / "journal.beancount"
    counter = _Counter()
    watcher = FileWatcher([target], counter, debounce=0.01)

    watcher.handle_event(FileCreatedEvent(str(target)))
    assert counter.fired.wait(timeout=5)

    counter.fired.clear()
    watcher.handle_event(FileMovedEvent(str(tmp_path / ".journal.swp"), str(target)))
    assert counter.fired.wait(timeout=5)
    assert counter.calls == 2


def test_callback_failure_is_logged_and_watching_continues(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
):
    # The CLI tests may already have configured the package logger.
    monkeypatch.setattr(logging.getLogger("beancount_staging"), "propagate", True)
    target = tmp_path / "journal.beancount"
    calls: list[int] = []
    done = threading.Event()

    def on_change() -> None:
        calls.append(1)
        if len(calls) == 1:
            raise ValueError("half written")
        done.set()

    watcher = FileWatcher([target], on_change, debounce=0.01)

    watcher.handle_event(FileModifiedEvent(str(target)))
    assert _wait_for(lambda: len(calls) == 1)
    watcher.handle_event(FileModifiedEvent(str(target)))

    assert done.wait(timeout=5)
    assert "reload after file change failed" in caplog.text


def test_rewatch_replaces_paths(tmp_path: Path):
    a, b = tmp_path / "a.beancount", tmp_path / "b.beancount"
    counter = _Counter()
    watcher = FileWatcher([a], counter, debounce=0.01)

    watcher.rewatch([b])

    assert watcher.paths == frozenset({str(b)})
    watcher.handle_event(FileModifiedEvent(str(a)))
    assert not counter.fired.wait(timeout=0.2)
    watcher.handle_event(FileModifiedEvent(str(b)))
    assert counter.fired.wait(timeout=5)


def test_watch_state_reloads_on_real_change(ledger_pair: tuple[Path, Path]):
    _, staging = ledger_pair
    state = StagingState.load(*ledger_pair)
    counts: list[int] = []

    with state.changes.subscribe() as sub:
        watcher = watch_state(state, debounce=0.05, on_reload=counts.append)
        try:
            with staging.open("a", encoding="utf-8") as fh:
                fh.write('\n2024-01-22 * "Third"\n  Assets:Checking  -1.00 USD\n')

            event = sub.get(timeout=10)
        finally:
            watcher.stop()

    assert event is not None
    assert event.pending_count == 3
    assert len(state) == 3
    assert _wait_for(lambda: counts and counts[-1] == 3)
