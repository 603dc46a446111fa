"""Semantic equivalence between a journal entry and a staging entry.

``journal_matches_staging`` decides whether a staging entry (freshly produced
by an importer) is already recorded in the journal. It must keep answering
"yes" after a reviewer committed the entry, which means it tolerates exactly
what the commit procedure changes:

- the flag (pending ``!`` vs posted ``*``), tags and links are ignored;
- the journal may carry extra postings and extra metadata;
- payee/narration edits are tolerated through the provenance keys
  ``source_payee``/``source_desc`` on the journal's first posting.

Everything else is compared exactly, amounts with ``Decimal`` equality.
"""

from __future__ import annotations

from beancount.core import data

from .models import SOURCE_DESC_KEY, SOURCE_PAYEE_KEY, Entry

# Never compared, on any directive kind.
_IGNORED_FIELDS = frozenset({"meta", "flag", "tags", "links"})


def _compared_fields(entry: Entry) -> tuple[object, ...]:
    return tuple(
        getattr(entry, name) for name in entry._fields if name not in _IGNORED_FIELDS
    )


def _text(value: str | None) -> str:
    # A missing payee and an empty payee read the same in a ledger file.
    return value if value is not None else ""


def transaction_matches(journal: data.Transaction, staging: data.Transaction) -> bool:
    """Match rule for two transactions of the same date."""

    if len(staging.postings) != 1 or not journal.postings:
        return False

    s = staging.postings[0]
    j0 = journal.postings[0]
    if not (
        s.account == j0.account
        and s.units == j0.units
        and s.cost == j0.cost
        and s.price == j0.price
    ):
        return False

    meta = j0.meta or {}
    expected_payee = meta.get(SOURCE_PAYEE_KEY, journal.payee)
    expected_narration = meta.get(SOURCE_DESC_KEY, journal.narration)
    return _text(expected_payee) == _text(staging.payee) and _text(
        expected_narration
    ) == _text(staging.narration)


def journal_matches_staging(journal: Entry, staging: Entry) -> bool:
    """Return True when ``journal`` records the same fact as ``staging``.

    Entries of different kinds never match. Transactions use
    :func:`transaction_matches`; every other kind must agree on all fields
    except metadata, tags and links (notes and documents carry the latter).
    """

    if type(journal) is not type(staging):
        return False

    match journal:
        case data.Transaction():
            return transaction_matches(journal, staging)
        case (
            data.Open()
            | data.Close()
            | data.Commodity()
            | data.Pad()
            | data.Balance()
            | data.Price()
            | data.Event()
            | data.Note()
            | data.Document()
            | data.Query()
            | data.Custom()
        ):
            return _compared_fields(journal) == _compared_fields(staging)
        case _:
            raise TypeError(f"unsupported directive type: {type(journal).__name__}")


__all__ = ["journal_matches_staging", "transaction_matches"]
