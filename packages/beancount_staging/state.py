"""Live reconciliation state shared by the watcher and interactive viewers.

``StagingState`` owns the current list of pending staging entries, keyed by
stable identifier, and the set of accounts opened in the journal. Every
operation, reads included, runs under one exclusive lock. ``reload`` rebuilds
everything from disk and swaps it in only once the whole read succeeded, so a
parse error leaves the previous view intact.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

from .broadcast import Broadcaster
from .commit import commit_transaction
from .errors import InvalidAccountError
from .identity import assign_ids
from .logging_setup import get_logger
from .models import FileChangeEvent, OnlyInStaging, PendingItem, ReconcileItem
from .reconcile import ReconcileConfig
from .sources import StagingSource

_logger = get_logger("beancount_staging.state")


class StagingState:
    """Reviewable, addressable view of the entries still only in staging."""

    def __init__(
        self,
        config: ReconcileConfig,
        *,
        changes: Broadcaster[FileChangeEvent] | None = None,
    ) -> None:
        self.config = config
        self.changes: Broadcaster[FileChangeEvent] = changes or Broadcaster()
        self._lock = threading.Lock()
        self._pending: dict[str, PendingItem] = {}
        self._accounts: tuple[str, ...] = ()
        self._files: tuple[Path, ...] = ()
        self._results: list[ReconcileItem] = []

    @classmethod
    def load(
        cls,
        journal_paths: Sequence[str | PathLike[str]],
        staging: StagingSource | Sequence[str | PathLike[str]],
    ) -> StagingState:
        """Build a state for the given sources and read them once."""

        state = cls(ReconcileConfig(journal_paths, staging))
        state.reload()
        return state

    # ---- mutation -----------------------------------------------------------

    def reload(self) -> int:
        """Re-read both sources and replace the pending set; return its size."""

        with self._lock:
            snapshot = self.config.read()
            results = snapshot.reconcile()
            pending = assign_ids(
                item.entry for item in results if isinstance(item, OnlyInStaging)
            )

            self._results = results
            self._pending = pending
            self._accounts = snapshot.accounts
            self._files = snapshot.files
            count = len(pending)

        _logger.info("reloaded: %d pending staging entries", count)
        return count

    def remove(self, item_id: str) -> PendingItem:
        with self._lock:
            return self._pending.pop(item_id)

    def commit(
        self,
        item_id: str,
        account: str,
        *,
        payee: str | None = None,
        narration: str | None = None,
    ) -> int:
        """Commit a pending entry to the journal; return the remaining count.

        Raises ``KeyError`` for an unknown id. Errors from the commit itself
        propagate and leave both the journal and the pending set unchanged.
        """

        with self._lock:
            item = self._pending[item_id]
            try:
                commit_transaction(
                    item.entry,
                    account,
                    self.config.commit_target,
                    payee=payee,
                    narration=narration,
                )
            except InvalidAccountError as e:
                _logger.warning("commit of %s rejected: %s", item_id, e)
                raise
            del self._pending[item_id]
            return len(self._pending)

    def notify(self) -> int:
        """Tell subscribers the view changed; return how many were reached."""

        with self._lock:
            count = len(self._pending)
        return self.changes.publish(FileChangeEvent(pending_count=count))

    # ---- reads --------------------------------------------------------------

    def get(self, item_id: str) -> PendingItem:
        with self._lock:
            return self._pending[item_id]

    def pending(self) -> list[PendingItem]:
        with self._lock:
            return list(self._pending.values())

    def results(self) -> list[ReconcileItem]:
        with self._lock:
            return list(self._results)

    @property
    def accounts(self) -> tuple[str, ...]:
        with self._lock:
            return self._accounts

    @property
    def files(self) -> tuple[Path, ...]:
        with self._lock:
            return self._files

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)


__all__ = ["StagingState"]
