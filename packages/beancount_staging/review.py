"""Interactive review of pending staging entries in the terminal.

``review_pending`` walks the pending items of a ``StagingState`` one at a
time: it shows the entry, asks for the balancing account and, when enabled,
for payee/narration edits, then commits. Items are addressed by their stable
id, so a reload triggered by the watcher while the reviewer is typing never
makes the loop commit the wrong entry; items that vanished are skipped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from beancount.core import data
from beancount.parser import printer
from prompt_toolkit import PromptSession

from .errors import CommitInvariantError, InvalidAccountError
from .logging_setup import get_logger
from .state import StagingState
from .term_ui import prompt_edit_text, select_account

_logger = get_logger("beancount_staging.review")


@dataclass(slots=True)
class ReviewSummary:
    committed: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False


def render_entry(entry: data.Directive) -> str:
    return printer.format_entry(entry).replace("\t", "    ")


def _edited(value: str | None, original: str | None) -> str | None:
    # None (cancelled) and unchanged text both mean "keep the original".
    if value is None or value == (original or ""):
        return None
    return value


def review_pending(
    state: StagingState,
    *,
    session: PromptSession | None = None,
    edit_text: bool = False,
    echo: Callable[[str], None] = print,
) -> ReviewSummary:
    """Review every pending item once and return what happened."""

    summary = ReviewSummary()
    ids = [item.id for item in state.pending()]
    total = len(ids)

    for pos, item_id in enumerate(ids, start=1):
        try:
            item = state.get(item_id)
        except KeyError:
            _logger.info("pending item %s disappeared after a reload", item_id)
            continue

        echo(f"\n[{pos}/{total}]")
        echo(render_entry(item.entry))

        account = select_account(state.accounts, session=session)
        if account is None:
            summary.cancelled = True
            break
        if not account:
            summary.skipped += 1
            continue

        payee = narration = None
        if edit_text and isinstance(item.entry, data.Transaction):
            payee = _edited(
                prompt_edit_text("Payee", initial=item.entry.payee, session=session),
                item.entry.payee,
            )
            narration = _edited(
                prompt_edit_text("Narration", initial=item.entry.narration, session=session),
                item.entry.narration,
            )

        try:
            remaining = state.commit(item_id, account, payee=payee, narration=narration)
        except KeyError:
            echo("Entry changed on disk meanwhile; skipped.")
            summary.skipped += 1
            continue
        except (InvalidAccountError, CommitInvariantError, ValueError, OSError) as e:
            echo(f"Error: commit failed: {e}")
            summary.failed += 1
            continue

        summary.committed += 1
        echo(f"Committed to {account}. {remaining} remaining.")

    return summary


__all__ = ["ReviewSummary", "render_entry", "review_pending"]
