"""Reload the live state when source files change on disk.

``FileWatcher`` observes the parent directories of a fixed set of files with
``watchdog`` and coalesces bursts of modify/create/delete/move events on those
files into one callback, fired once no further event arrived for the debounce
window. ``watch_state`` wires it to a ``StagingState``: reload, notify
subscribers, then refresh the watched set from the files the reload read.

Callback failures (typically a parse error while a file is half written) are
logged and the watcher keeps running; the next change retries.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable
from os import PathLike
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .logging_setup import get_logger
from .state import StagingState

_logger = get_logger("beancount_staging.watcher")

DEBOUNCE_SECONDS = 0.1

_RELEVANT_EVENTS = frozenset({"modified", "created", "deleted", "moved"})


def _norm(path: str | bytes | PathLike[str]) -> str:
    return os.path.abspath(os.fsdecode(path))


class _Handler(FileSystemEventHandler):
    def __init__(self, watcher: FileWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher.handle_event(event)


class FileWatcher:
    """Debounced change detection for an explicit set of files."""

    def __init__(
        self,
        paths: Iterable[str | PathLike[str]],
        on_change: Callable[[], None],
        *,
        debounce: float = DEBOUNCE_SECONDS,
    ) -> None:
        self._on_change = on_change
        self._debounce = debounce
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending_events = 0
        self._paths: frozenset[str] = frozenset(_norm(p) for p in paths)
        self._observer: Observer | None = None
        self._handler = _Handler(self)

    @property
    def paths(self) -> frozenset[str]:
        return self._paths

    # ---- lifecycle ----------------------------------------------------------

    def start(self) -> FileWatcher:
        observer = Observer()
        self._observer = observer
        self._schedule(observer)
        observer.start()
        return self

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def __enter__(self) -> FileWatcher:
        return self.start()

    def __exit__(self, *exc: object) -> None:
        self.stop()

    def _schedule(self, observer: Observer) -> None:
        for directory in sorted({os.path.dirname(p) for p in self._paths}):
            if not os.path.isdir(directory):
                _logger.warning("not watching missing directory %s", directory)
                continue
            observer.schedule(self._handler, directory, recursive=False)
        for path in sorted(self._paths):
            _logger.info("watching path: %s", path)

    def rewatch(self, paths: Iterable[str | PathLike[str]]) -> None:
        """Replace the watched file set; a no-op when it is unchanged."""

        new_paths = frozenset(_norm(p) for p in paths)
        if new_paths == self._paths:
            return
        self._paths = new_paths
        if self._observer is not None:
            self._observer.unschedule_all()
            self._schedule(self._observer)

    # ---- events -------------------------------------------------------------

    def _is_relevant(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in _RELEVANT_EVENTS:
            return False
        candidates = [event.src_path]
        dest = getattr(event, "dest_path", None)
        if dest:
            candidates.append(dest)
        return any(_norm(c) in self._paths for c in candidates)

    def handle_event(self, event: FileSystemEvent) -> None:
        if not self._is_relevant(event):
            return
        with self._lock:
            self._pending_events += 1
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            count = self._pending_events
            self._pending_events = 0
            self._timer = None
        _logger.info("file modification detected: %d events", count)
        try:
            self._on_change()
        except Exception:
            _logger.exception("reload after file change failed")


def watch_state(
    state: StagingState,
    *,
    debounce: float = DEBOUNCE_SECONDS,
    on_reload: Callable[[int], None] | None = None,
) -> FileWatcher:
    """Start a watcher that keeps ``state`` in sync with its files.

    ``on_reload`` receives the pending count after each successful reload.
    The caller owns the returned watcher and must ``stop()`` it.
    """

    watcher: FileWatcher

    def _reload_and_notify() -> None:
        count = state.reload()
        reached = state.notify()
        _logger.debug("notified %d subscriber(s)", reached)
        watcher.rewatch(state.files)
        if on_reload is not None:
            on_reload(count)

    watcher = FileWatcher(state.files, _reload_and_notify, debounce=debounce)
    return watcher.start()


__all__ = ["DEBOUNCE_SECONDS", "FileWatcher", "watch_state"]
