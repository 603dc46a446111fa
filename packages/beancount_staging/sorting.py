"""Canonical ordering of ledger entries and grouping by date.

Both sources are run through ``normalize_entries`` before matching so that two
runs over the same files always compare entries in the same order, and then
grouped with ``bucket_by_date`` for the per-day merge.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable

from beancount.core import data

from .models import DateBuckets, Entry, entry_content, semantic_meta

# Intra-day order. Kinds not listed (note, document, query, custom) go last.
_KIND_PRIORITY: dict[type, int] = {
    data.Open: 0,
    data.Pad: 1,
    data.Commodity: 2,
    data.Transaction: 3,
    data.Balance: 4,
    data.Price: 5,
    data.Close: 6,
    data.Event: 7,
}
_UNKNOWN_PRIORITY = 255


def kind_priority(entry: Entry) -> int:
    return _KIND_PRIORITY.get(type(entry), _UNKNOWN_PRIORITY)


def _sort_key(entry: Entry) -> tuple[datetime.date, int]:
    return entry.date, kind_priority(entry)


def is_identical(a: Entry, b: Entry) -> bool:
    """Return True when ``a`` and ``b`` are interchangeable copies.

    Only balance assertions are ever considered identical: same date, same
    metadata (ignoring where they were read from) and same content.
    """

    if not (isinstance(a, data.Balance) and isinstance(b, data.Balance)):
        return False
    return (
        a.date == b.date
        and semantic_meta(a.meta) == semantic_meta(b.meta)
        and entry_content(a) == entry_content(b)
    )


def normalize_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Sort by (date, kind priority) and drop adjacent identical balances.

    The sort is stable, so entries of the same date and kind keep the order in
    which they were read.
    """

    ordered = sorted(entries, key=_sort_key)
    out: list[Entry] = []
    for entry in ordered:
        if out and is_identical(out[-1], entry):
            continue
        out.append(entry)
    return out


def bucket_by_date(entries: Iterable[Entry]) -> DateBuckets:
    """Group entries by date into an ascending date -> normalized list mapping."""

    buckets: dict[datetime.date, list[Entry]] = {}
    for entry in normalize_entries(entries):
        buckets.setdefault(entry.date, []).append(entry)
    return buckets


__all__ = ["kind_priority", "is_identical", "normalize_entries", "bucket_by_date"]
