"""Pytest configuration and shared ledger fixtures.

The package lives under ``packages/``; the workspace root and ``packages/``
are put on ``sys.path`` so the suite runs from a plain checkout as well as
from an editable install, and ``tests.helpers`` resolves.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

from tests.helpers.ledger import JOURNAL_TEXT, STAGING_TEXT, dedent  # noqa: E402


@pytest.fixture
def write_ledger(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a writer of dedented ledger text into the test's tmp dir."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def ledger_pair(write_ledger) -> tuple[Path, Path]:
    """A journal with one recorded transaction and a staging file with three."""

    return (
        write_ledger("journal.beancount", JOURNAL_TEXT),
        write_ledger("staging.beancount", STAGING_TEXT),
    )
