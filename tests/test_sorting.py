from beancount.core import data

from tests.helpers.ledger import parse_entries

from beancount_staging.sorting import bucket_by_date, is_identical, kind_priority, normalize_entries


def _kinds(entries):
    return [type(e).__name__ for e in entries]


def test_sort_by_date_then_kind_priority():
    entries = parse_entries(
        """
        2025-01-02 close Assets:Old
        2025-01-01 price ABC 1.00 EUR
        2025-01-01 balance Assets:Checking  10.00 EUR
        2025-01-01 * "payee" "narration"
            Assets:Checking  -1.00 EUR
        2025-01-01 commodity ABC
        2025-01-01 pad Assets:Checking Equity:Opening
        2025-01-01 open Assets:Checking
        2025-01-01 event "location" "Home"
        2025-01-01 note Assets:Checking "a note"
        """
    )

    ordered = normalize_entries(entries)

    assert _kinds(ordered) == [
        "Open",
        "Pad",
        "Commodity",
        "Transaction",
        "Balance",
        "Price",
        "Event",
        "Note",
        "Close",
    ]
    assert [e.date.day for e in ordered] == [1, 1, 1, 1, 1, 1, 1, 1, 2]


def test_same_kind_keeps_read_order():
    entries = parse_entries(
        """
        2025-01-01 * "first"
            Assets:Checking  -1.00 EUR
        2025-01-01 * "second"
            Assets:Checking  -2.00 EUR
        """
    )
    assert [e.narration for e in normalize_entries(reversed(entries))] == ["second", "first"]


def test_identical_balances_are_deduplicated_even_across_files():
    a = parse_entries("2025-01-01 balance Assets:Checking  10.00 EUR\n")
    b = parse_entries("2025-01-01 balance Assets:Checking  10.00 EUR\n")
    # Different positional metadata must not prevent deduplication.
    b = [b[0]._replace(meta={**b[0].meta, "filename": "other.beancount", "lineno": 99})]

    out = normalize_entries(a + b)

    assert len(out) == 1
    assert isinstance(out[0], data.Balance)


def test_balances_with_different_metadata_are_kept():
    entries = parse_entries(
        """
        2025-01-01 balance Assets:Checking  10.00 EUR
        2025-01-01 balance Assets:Checking  10.00 EUR
          source: "bank"
        """
    )
    assert len(normalize_entries(entries)) == 2


def test_identical_transactions_are_not_deduplicated():
    entries = parse_entries(
        """
        2025-01-01 * "coffee"
            Assets:Checking  -3.00 EUR
        2025-01-01 * "coffee"
            Assets:Checking  -3.00 EUR
        """
    )
    assert not is_identical(entries[0], entries[1])
    assert len(normalize_entries(entries)) == 2


def test_unknown_kinds_sort_last():
    note = parse_entries('2025-01-01 note Assets:Checking "x"\n')[0]
    close = parse_entries("2025-01-01 close Assets:Checking\n")[0]
    assert kind_priority(note) > kind_priority(close)


def test_bucket_by_date_groups_in_ascending_order():
    entries = parse_entries(
        """
        2025-01-03 * "c"
            Assets:Checking  -3.00 EUR
        2025-01-01 * "a"
            Assets:Checking  -1.00 EUR
        2025-01-03 open Assets:New
        """
    )

    buckets = bucket_by_date(entries)

    assert [d.day for d in buckets] == [1, 3]
    assert _kinds(buckets[list(buckets)[1]]) == ["Open", "Transaction"]
