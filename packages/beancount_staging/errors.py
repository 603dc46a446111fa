"""Error kinds raised by the reconciliation engine and the commit path.

Each class derives from the builtin the rest of the code base would otherwise
raise (``ValueError`` for bad input, ``RuntimeError`` for failures that are
not the caller's fault) and from the ``StagingError`` marker so callers can
catch everything this package raises in one clause. ``OSError`` from reading
or writing ledger files is never wrapped.
"""

from __future__ import annotations

from collections.abc import Sequence
from os import PathLike


class StagingError(Exception):
    """Marker base class for errors raised by ``beancount_staging``."""


class LedgerParseError(StagingError, ValueError):
    """A ledger source could not be parsed.

    ``source`` is the offending file path, or a short label such as
    ``"<command: bean-extract>"`` for text that did not come from a file.
    ``messages`` holds the parser's error messages in source order.
    """

    def __init__(self, source: str | PathLike[str], messages: Sequence[str]) -> None:
        self.source = str(source)
        self.messages = tuple(messages)
        shown = "; ".join(self.messages[:3])
        more = f" (+{len(self.messages) - 3} more)" if len(self.messages) > 3 else ""
        super().__init__(f"failed to parse {self.source}: {shown}{more}")


class StagingCommandError(StagingError, RuntimeError):
    """The importer command configured as staging source exited non-zero."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"staging command {' '.join(self.command)!r} exited with {returncode}: "
            f"{stderr.strip()[:500]}"
        )


class ConfigError(StagingError, ValueError):
    """A config file exists but cannot be read or validated."""


class InvalidAccountError(StagingError, ValueError):
    """The commit target is not a valid ledger account name."""

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"Invalid account name: {account!r}")


class CommitInvariantError(StagingError, RuntimeError):
    """A committed entry would no longer match the staging entry it came from.

    This signals an internal contract violation between the commit procedure
    and the match predicate, not bad user input. The journal is left
    untouched when it is raised.
    """

    error_kind = "commit_invariant"


__all__ = [
    "StagingError",
    "LedgerParseError",
    "StagingCommandError",
    "ConfigError",
    "InvalidAccountError",
    "CommitInvariantError",
]
