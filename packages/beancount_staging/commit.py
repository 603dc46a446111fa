"""Promote a staging transaction into the journal.

Committing marks the transaction as posted, applies optional payee/narration
edits, adds a balancing posting for the chosen account (amount left for the
ledger to infer) and appends the result to the journal file. Before writing,
the committed entry is checked against the original staging entry with the
match predicate; a later reconciliation must recognise it as already
recorded, otherwise the reviewer would see it again as new.
"""

from __future__ import annotations

from os import PathLike

from beancount.core import account as account_lib
from beancount.core import data
from beancount.parser import printer

from .errors import CommitInvariantError, InvalidAccountError
from .logging_setup import get_logger
from .matching import journal_matches_staging
from .models import POSTED_FLAG, SOURCE_DESC_KEY, SOURCE_PAYEE_KEY, Entry

_logger = get_logger("beancount_staging.commit")


def _with_provenance(
    posting: data.Posting, key: str, original: str | None
) -> data.Posting:
    meta = dict(posting.meta or {})
    # Never overwrite: an earlier edit already recorded the importer's value.
    if key not in meta:
        meta[key] = original if original is not None else ""
    return posting._replace(meta=meta)


def _invariant_violation(entry: data.Transaction, reason: str) -> CommitInvariantError:
    _logger.critical(
        "%s (%s %r)",
        reason,
        entry.date,
        entry.narration,
        extra={"error_kind": CommitInvariantError.error_kind},
    )
    return CommitInvariantError(f"{reason}: transaction of {entry.date}")


def build_committed_entry(
    entry: Entry,
    target_account: str,
    *,
    payee: str | None = None,
    narration: str | None = None,
) -> data.Transaction:
    """Return the journal version of ``entry`` without writing anything.

    Raises ``InvalidAccountError`` for a malformed ``target_account`` and
    ``CommitInvariantError`` when the result would not match ``entry``.
    """

    if not isinstance(entry, data.Transaction):
        raise ValueError(f"only transactions can be committed, got {type(entry).__name__}")

    txn = entry._replace(flag=POSTED_FLAG)
    postings = list(txn.postings)

    if payee is not None and payee != entry.payee:
        if not postings:
            raise _invariant_violation(entry, "cannot record source payee without postings")
        postings[0] = _with_provenance(postings[0], SOURCE_PAYEE_KEY, entry.payee)
        txn = txn._replace(payee=payee)
    if narration is not None and narration != entry.narration:
        if not postings:
            raise _invariant_violation(entry, "cannot record source narration without postings")
        postings[0] = _with_provenance(postings[0], SOURCE_DESC_KEY, entry.narration)
        txn = txn._replace(narration=narration)

    if not account_lib.is_valid(target_account):
        raise InvalidAccountError(target_account)
    postings.append(data.Posting(target_account, None, None, None, None, None))
    txn = txn._replace(postings=postings)

    if not journal_matches_staging(txn, entry):
        raise _invariant_violation(entry, "committed entry no longer matches its staging entry")
    return txn


def commit_transaction(
    entry: Entry,
    target_account: str,
    journal_path: str | PathLike[str],
    *,
    payee: str | None = None,
    narration: str | None = None,
) -> data.Transaction:
    """Append the committed version of ``entry`` to ``journal_path``.

    The file is opened in append mode only; existing content is never
    rewritten. Nothing is written when validation fails. Returns the entry
    that was written.
    """

    txn = build_committed_entry(entry, target_account, payee=payee, narration=narration)
    text = printer.format_entry(txn)
    with open(journal_path, "a", encoding="utf-8") as fh:
        fh.write("\n")
        fh.write(text)

    _logger.info("committed %s %r to %s with account %s", txn.date, txn.narration, journal_path, target_account)
    return txn


__all__ = ["build_committed_entry", "commit_transaction"]
