"""Ledger text helpers shared by the test modules."""

from __future__ import annotations

import textwrap

from beancount.parser import parser


def dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


def parse_entries(text: str) -> list:
    """Raw-parse ``text`` exactly like the engine reads files."""

    entries, errors, _ = parser.parse_string(dedent(text))
    assert not errors, errors
    return list(entries)


def parse_single(text: str):
    entries = parse_entries(text)
    assert len(entries) == 1
    return entries[0]


JOURNAL_TEXT = """
    2024-01-01 open Assets:Checking
    2024-01-01 open Expenses:Groceries

    2024-01-15 * "Existing Transaction"
        Assets:Checking  -50.00 USD
        Expenses:Groceries
"""

STAGING_TEXT = """
    2024-01-15 * "Existing Transaction"
        Assets:Checking  -50.00 USD

    2024-01-20 ! "New Transaction"
        Assets:Checking  -25.00 USD

    2024-01-21 * "Another Transaction"
        Assets:Checking  -30.00 USD
"""
