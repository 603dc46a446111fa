"""Reading journal and staging sources into raw ledger entries.

Files are parsed with beancount's raw parser (no booking, no plugins) so that
entries are compared exactly as they were written. ``include`` directives are
followed the way ``beancount.loader`` resolves them: relative to the including
file, with glob patterns expanded in sorted order. Every file read is reported
back so the change watcher knows what to observe.

A staging source may also be an importer command whose standard output is
ledger text.
"""

from __future__ import annotations

import glob
import subprocess
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from beancount.parser import parser

from .errors import LedgerParseError, StagingCommandError
from .logging_setup import get_logger
from .models import Entry

_logger = get_logger("beancount_staging.sources")


@dataclass(frozen=True, slots=True)
class LoadedSource:
    """Entries read from one source plus the files that contributed them."""

    entries: list[Entry]
    files: tuple[Path, ...] = ()


@dataclass(frozen=True, slots=True)
class StagingSource:
    """Where staging entries come from: a list of files or an importer command.

    At most one of ``files`` and ``command`` may be set; with neither, the
    source is empty and contributes no entries. ``cwd`` is the working
    directory the command runs in.
    """

    files: tuple[Path, ...] = ()
    command: tuple[str, ...] = ()
    cwd: Path = field(default_factory=lambda: Path("."))

    def __post_init__(self) -> None:
        if self.files and self.command:
            raise ValueError("staging source cannot have both files and a command")

    @classmethod
    def from_files(cls, paths: Iterable[str | PathLike[str]]) -> StagingSource:
        return cls(files=tuple(Path(p) for p in paths))

    @classmethod
    def from_command(
        cls, command: Sequence[str], *, cwd: str | PathLike[str] = "."
    ) -> StagingSource:
        return cls(command=tuple(command), cwd=Path(cwd))


def _parse_messages(errors: Sequence[object]) -> list[str]:
    return [str(getattr(e, "message", e)) for e in errors]


def _resolve_includes(path: Path, includes: Iterable[str]) -> list[Path]:
    resolved: list[Path] = []
    for pattern in includes:
        full = pattern if Path(pattern).is_absolute() else str(path.parent / pattern)
        matches = sorted(glob.glob(full, recursive=True))
        if not matches:
            # Let the parser report the missing file with its usual OSError.
            matches = [full]
        resolved.extend(Path(m) for m in matches)
    return resolved


def read_ledger_files(paths: Iterable[str | PathLike[str]]) -> LoadedSource:
    """Parse ``paths`` (and everything they include) into one entry list.

    Raises ``LedgerParseError`` for the first file with syntax errors and lets
    ``OSError`` from unreadable files propagate. Files are read at most once
    even when included from several places.
    """

    entries: list[Entry] = []
    seen: set[Path] = set()
    order: list[Path] = []
    queue: list[Path] = [Path(p) for p in paths]

    while queue:
        path = queue.pop(0)
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        order.append(path)

        file_entries, errors, options_map = parser.parse_file(str(path))
        if errors:
            raise LedgerParseError(path, _parse_messages(errors))
        entries.extend(file_entries)
        queue.extend(_resolve_includes(path, options_map.get("include") or ()))

    _logger.debug("read %d entries from %d file(s)", len(entries), len(order))
    return LoadedSource(entries=entries, files=tuple(order))


def run_staging_command(command: Sequence[str], *, cwd: str | PathLike[str]) -> LoadedSource:
    """Run an importer command and parse its standard output."""

    _logger.info("running staging command: %s", " ".join(command))
    proc = subprocess.run(
        list(command),
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if proc.returncode != 0:
        raise StagingCommandError(command, proc.returncode, proc.stderr)

    label = f"<command: {command[0]}>"
    entries, errors, _options = parser.parse_string(proc.stdout, report_filename=label)
    if errors:
        raise LedgerParseError(label, _parse_messages(errors))
    return LoadedSource(entries=list(entries), files=())


def read_staging(source: StagingSource) -> LoadedSource:
    if source.command:
        return run_staging_command(source.command, cwd=source.cwd)
    return read_ledger_files(source.files)


__all__ = [
    "LoadedSource",
    "StagingSource",
    "read_ledger_files",
    "run_staging_command",
    "read_staging",
]
