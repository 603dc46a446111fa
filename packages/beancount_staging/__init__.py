"""Public interface for the ``beancount_staging`` package.

Reconciles an authoritative beancount journal against freshly imported
staging entries and keeps a live, reviewable view of what is still pending.
This module only re-exports the stable import surface.
"""

from .commit import build_committed_entry, commit_transaction
from .errors import (
    CommitInvariantError,
    ConfigError,
    InvalidAccountError,
    LedgerParseError,
    StagingCommandError,
    StagingError,
)
from .matching import journal_matches_staging
from .models import (
    SOURCE_DESC_KEY,
    SOURCE_PAYEE_KEY,
    FileChangeEvent,
    OnlyInJournal,
    OnlyInStaging,
    PendingItem,
    ReconcileItem,
)
from .reconcile import ReconcileConfig, ReconcileState, reconcile_entries
from .sources import StagingSource
from .state import StagingState

__all__ = [
    # Reconciliation
    "ReconcileConfig",
    "ReconcileState",
    "StagingSource",
    "reconcile_entries",
    "journal_matches_staging",
    # Live state / commit
    "StagingState",
    "build_committed_entry",
    "commit_transaction",
    # Models
    "ReconcileItem",
    "OnlyInJournal",
    "OnlyInStaging",
    "PendingItem",
    "FileChangeEvent",
    "SOURCE_PAYEE_KEY",
    "SOURCE_DESC_KEY",
    # Errors
    "StagingError",
    "LedgerParseError",
    "StagingCommandError",
    "ConfigError",
    "InvalidAccountError",
    "CommitInvariantError",
]
