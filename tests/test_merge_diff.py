from beancount_staging.merge_diff import InBoth, OnlyInFirst, OnlyInSecond, sort_merge_diff


def _first(kv):
    return kv[0]


def test_interleaved_keys_in_order():
    first = [(1, "a"), (3, "c"), (5, "e")]
    second = [(1, "x"), (2, "y"), (5, "z"), (6, "w")]

    out = list(sort_merge_diff(first, second, key=_first))

    assert out == [
        InBoth((1, "a"), (1, "x")),
        OnlyInSecond((2, "y")),
        OnlyInFirst((3, "c")),
        InBoth((5, "e"), (5, "z")),
        OnlyInSecond((6, "w")),
    ]


def test_empty_sides():
    assert list(sort_merge_diff([], [], key=_first)) == []
    assert list(sort_merge_diff([(1, "a")], [], key=_first)) == [OnlyInFirst((1, "a"))]
    assert list(sort_merge_diff([], [(1, "a")], key=_first)) == [OnlyInSecond((1, "a"))]


def test_repeated_keys_pair_one_to_one():
    out = list(sort_merge_diff([(1, "a"), (1, "b")], [(1, "x")], key=_first))
    assert out == [InBoth((1, "a"), (1, "x")), OnlyInFirst((1, "b"))]


def test_only_keys_are_compared():
    # Values that cannot be ordered must never be compared.
    class Opaque:
        def __lt__(self, other):  # pragma: no cover - must not be called
            raise AssertionError("values compared")

    a, b = Opaque(), Opaque()
    out = list(sort_merge_diff([(1, a)], [(1, b)], key=_first))
    assert out == [InBoth((1, a), (1, b))]


def test_separate_key_for_second_sequence():
    out = list(sort_merge_diff([1, 2], [{"k": 2}], key=lambda v: v, second_key=lambda d: d["k"]))
    assert out == [OnlyInFirst(1), InBoth(2, {"k": 2})]


def test_consumes_iterators_lazily():
    out = sort_merge_diff(iter([(1, "a")]), iter([(2, "b")]), key=_first)
    assert next(out) == OnlyInFirst((1, "a"))
    assert next(out) == OnlyInSecond((2, "b"))
