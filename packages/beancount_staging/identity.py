"""Stable identifiers for pending staging entries.

Positions in the pending list shift whenever an entry is committed or the
files change, so reviewers address entries by a fingerprint of their content
instead. The fingerprint covers the date, payee, narration and the amount and
currency of every posting; other directive kinds hash all non-metadata fields.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

from beancount.core import data

from .models import Entry, PendingItem, entry_content

# Hex characters kept from the SHA-256 digest.
_ID_LENGTH = 16


def _amount_payload(units: Any) -> list[str | None]:
    number = getattr(units, "number", None)
    currency = getattr(units, "currency", None)
    return [
        str(number) if number is not None else None,
        str(currency) if currency is not None else None,
    ]


def _payload(entry: Entry) -> dict[str, Any]:
    if isinstance(entry, data.Transaction):
        return {
            "kind": "transaction",
            "date": entry.date.isoformat(),
            "payee": entry.payee,
            "narration": entry.narration,
            "postings": [_amount_payload(p.units) for p in entry.postings],
        }
    return {
        "kind": type(entry).__name__.lower(),
        "date": entry.date.isoformat(),
        "content": repr(entry_content(entry)),
    }


def stable_id(entry: Entry) -> str:
    """Return a deterministic, opaque identifier for ``entry``."""

    blob = json.dumps(_payload(entry), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()[:_ID_LENGTH]


def assign_ids(entries: Iterable[Entry]) -> dict[str, PendingItem]:
    """Key ``entries`` by stable id, preserving their order.

    Entries with identical fingerprints get ``-2``, ``-3`` ... suffixes in
    order of appearance, so the n-th copy keeps its id across reloads.
    """

    items: dict[str, PendingItem] = {}
    for entry in entries:
        base = stable_id(entry)
        pid = base
        n = 1
        while pid in items:
            n += 1
            pid = f"{base}-{n}"
        items[pid] = PendingItem(id=pid, entry=entry)
    return items


__all__ = ["stable_id", "assign_ids"]
