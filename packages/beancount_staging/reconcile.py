"""Reconcile journal entries against a full automatic import.

The pipeline is: read both sources, normalize and bucket them by date, merge
the two date sequences and, for dates present on both sides, pair entries with
the match predicate. What is left over is reported as ``OnlyInJournal`` or
``OnlyInStaging``; matched pairs produce no output.

Every call recomputes from scratch. There is no incremental mode.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from beancount.core import data

from .logging_setup import get_logger
from .matching import journal_matches_staging
from .merge_diff import InBoth, OnlyInFirst, OnlyInSecond, sort_merge_diff
from .models import DateBuckets, Entry, OnlyInJournal, OnlyInStaging, ReconcileItem
from .sorting import bucket_by_date
from .sources import StagingSource, read_ledger_files, read_staging

_logger = get_logger("beancount_staging.reconcile")


# ----------------------------------------------------------------------------
# Matching
# ----------------------------------------------------------------------------


def reconcile_bucket(
    journal: Sequence[Entry], staging: Sequence[Entry]
) -> list[ReconcileItem]:
    """Pair up the entries of a single date.

    Staging entries are taken last-first; each consumes the first remaining
    journal entry that matches it. When several journal entries could match,
    scan order alone decides which one is consumed. Cost is
    O(len(journal) * len(staging)), fine for one day of entries.
    """

    remaining = list(journal)
    pending = list(staging)
    out: list[ReconcileItem] = []

    while pending:
        staging_entry = pending.pop()
        for idx, journal_entry in enumerate(remaining):
            if journal_matches_staging(journal_entry, staging_entry):
                del remaining[idx]
                break
        else:
            out.append(OnlyInStaging(staging_entry))

    out.extend(OnlyInJournal(entry) for entry in remaining)
    return out


def reconcile_buckets(journal: DateBuckets, staging: DateBuckets) -> list[ReconcileItem]:
    """Reconcile two date-bucketed sources into a date-ordered item list."""

    results: list[ReconcileItem] = []
    merged = sort_merge_diff(
        sorted(journal.items()),
        sorted(staging.items()),
        key=lambda kv: kv[0],
    )
    for joined in merged:
        match joined:
            case OnlyInFirst(value=(_, entries)):
                results.extend(OnlyInJournal(e) for e in entries)
            case OnlyInSecond(value=(_, entries)):
                results.extend(OnlyInStaging(e) for e in entries)
            case InBoth(first=(_, journal_entries), second=(_, staging_entries)):
                results.extend(reconcile_bucket(journal_entries, staging_entries))
    return results


def reconcile_entries(
    journal: Iterable[Entry], staging: Iterable[Entry]
) -> list[ReconcileItem]:
    """Convenience wrapper: bucket two flat entry lists and reconcile them."""

    return reconcile_buckets(bucket_by_date(journal), bucket_by_date(staging))


# ----------------------------------------------------------------------------
# Sources -> state
# ----------------------------------------------------------------------------


@dataclass(slots=True)
class ReconcileState:
    """Snapshot of both sources as read from disk at one point in time."""

    journal: DateBuckets = field(default_factory=dict)
    staging: DateBuckets = field(default_factory=dict)
    # Accounts opened in the journal, sorted.
    accounts: tuple[str, ...] = ()
    # Files that contributed entries to either source.
    files: tuple[Path, ...] = ()

    def reconcile(self) -> list[ReconcileItem]:
        return reconcile_buckets(self.journal, self.staging)


def _open_accounts(buckets: Mapping[object, list[Entry]]) -> tuple[str, ...]:
    return tuple(
        sorted(
            {
                entry.account
                for entries in buckets.values()
                for entry in entries
                if isinstance(entry, data.Open)
            }
        )
    )


class ReconcileConfig:
    """Which files make up the journal and where staging entries come from.

    ``journal_paths[0]`` is the file committed entries are appended to.
    """

    def __init__(
        self,
        journal_paths: Sequence[str | PathLike[str]],
        staging: StagingSource | Sequence[str | PathLike[str]],
    ) -> None:
        if not journal_paths:
            raise ValueError("at least one journal file is required")
        self.journal_paths: tuple[Path, ...] = tuple(Path(p) for p in journal_paths)
        if isinstance(staging, StagingSource):
            self.staging = staging
        else:
            self.staging = StagingSource.from_files(staging)

    @property
    def commit_target(self) -> Path:
        return self.journal_paths[0]

    def read(self) -> ReconcileState:
        """Read both sources from disk; raises without partial results."""

        journal_src = read_ledger_files(self.journal_paths)
        staging_src = read_staging(self.staging)
        journal = bucket_by_date(journal_src.entries)
        staging = bucket_by_date(staging_src.entries)

        files: list[Path] = []
        for path in (*journal_src.files, *staging_src.files):
            if path not in files:
                files.append(path)

        _logger.info(
            "read %d journal and %d staging entries",
            len(journal_src.entries),
            len(staging_src.entries),
        )
        return ReconcileState(
            journal=journal,
            staging=staging,
            accounts=_open_accounts(journal),
            files=tuple(files),
        )

    def reconcile(self) -> list[ReconcileItem]:
        return self.read().reconcile()


__all__ = [
    "reconcile_bucket",
    "reconcile_buckets",
    "reconcile_entries",
    "ReconcileState",
    "ReconcileConfig",
]
