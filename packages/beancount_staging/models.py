"""Data models and type aliases for ``beancount_staging``.

Ledger entries themselves are the ``beancount.core.data`` namedtuples produced
by the raw parser; this module only adds the reconciliation output types and
a few helpers for looking at an entry without its positional metadata.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from beancount.core import data

# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

type Entry = data.Directive
"""One parsed ledger directive (``Transaction``, ``Balance``, ``Open`` ...)."""

type DateBuckets = dict[datetime.date, list[Entry]]
"""Entries of one source grouped by date; keys iterate in ascending order."""

# Keys the parser attaches to every ``meta`` dict. They describe where an
# entry was read from, not what it says.
POSITION_META_KEYS: frozenset[str] = frozenset({"filename", "lineno"})

# Provenance keys written on the first posting of a committed transaction when
# the reviewer edits payee or narration.
SOURCE_PAYEE_KEY = "source_payee"
SOURCE_DESC_KEY = "source_desc"

# Flag a transaction carries once a human accepted it.
POSTED_FLAG = "*"


def semantic_meta(meta: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return ``meta`` without parser position keys and internal ``__`` keys."""

    if not meta:
        return {}
    return {
        k: v
        for k, v in meta.items()
        if k not in POSITION_META_KEYS and not str(k).startswith("__")
    }


def entry_content(entry: Entry) -> tuple[Any, ...]:
    """Return every field of ``entry`` except ``meta``, in declaration order."""

    return tuple(getattr(entry, name) for name in entry._fields if name != "meta")


# ---------------------------------------------------------------------------
# Reconciliation output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OnlyInJournal:
    """A journal entry with no staging counterpart."""

    entry: Entry


@dataclass(frozen=True, slots=True)
class OnlyInStaging:
    """A staging entry that is not recorded in the journal yet."""

    entry: Entry


type ReconcileItem = OnlyInJournal | OnlyInStaging


@dataclass(frozen=True, slots=True)
class PendingItem:
    """A staging entry awaiting a decision, addressed by a stable identifier.

    ``id`` is derived from the entry content (see ``identity.stable_id``) and
    stays the same across reloads as long as that content is unchanged.
    Consumers must treat it as opaque.
    """

    id: str
    entry: Entry

    @property
    def date(self) -> datetime.date:
        return self.entry.date


@dataclass(frozen=True, slots=True)
class FileChangeEvent:
    """Notification sent to subscribers after a watcher-triggered reload."""

    pending_count: int


__all__ = [
    "Entry",
    "DateBuckets",
    "POSITION_META_KEYS",
    "SOURCE_PAYEE_KEY",
    "SOURCE_DESC_KEY",
    "POSTED_FLAG",
    "semantic_meta",
    "entry_content",
    "OnlyInJournal",
    "OnlyInStaging",
    "ReconcileItem",
    "PendingItem",
    "FileChangeEvent",
]
