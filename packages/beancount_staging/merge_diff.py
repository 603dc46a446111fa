"""Two-way merge of key-ordered sequences.

``sort_merge_diff`` walks two iterables that are each sorted ascending by the
same key and reports, in key order, which values appear only on one side and
which pair up. It knows nothing about ledger entries; callers pick the key.

For keys ``[1, 3]`` against ``[1, 2]`` it yields ``InBoth`` for 1,
``OnlyInSecond`` for 2 and ``OnlyInFirst`` for 3.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

A = TypeVar("A")
B = TypeVar("B")

_END = object()


@dataclass(frozen=True, slots=True)
class OnlyInFirst(Generic[A]):
    value: A


@dataclass(frozen=True, slots=True)
class OnlyInSecond(Generic[B]):
    value: B


@dataclass(frozen=True, slots=True)
class InBoth(Generic[A, B]):
    first: A
    second: B


type JoinResult[A, B] = OnlyInFirst[A] | OnlyInSecond[B] | InBoth[A, B]


def sort_merge_diff(
    first: Iterable[A],
    second: Iterable[B],
    *,
    key: Callable[[Any], Any],
    second_key: Callable[[Any], Any] | None = None,
) -> Iterator[JoinResult[A, B]]:
    """Yield the merge of ``first`` and ``second`` in ascending key order.

    ``key`` extracts the comparison key from items of ``first`` (and of
    ``second`` unless ``second_key`` is given). Only extracted keys are ever
    compared. Equal keys pair one item from each side; repeated keys on one
    side are not collapsed, the surplus is reported as one-sided. Each input
    is consumed once, so the cost is linear in the number of items.
    """

    key_b = second_key or key
    it_a = iter(first)
    it_b = iter(second)
    a = next(it_a, _END)
    b = next(it_b, _END)

    while a is not _END and b is not _END:
        ka = key(a)
        kb = key_b(b)
        if ka < kb:
            yield OnlyInFirst(a)
            a = next(it_a, _END)
        elif kb < ka:
            yield OnlyInSecond(b)
            b = next(it_b, _END)
        else:
            yield InBoth(a, b)
            a = next(it_a, _END)
            b = next(it_b, _END)

    while a is not _END:
        yield OnlyInFirst(a)
        a = next(it_a, _END)
    while b is not _END:
        yield OnlyInSecond(b)
        b = next(it_b, _END)


__all__ = ["OnlyInFirst", "OnlyInSecond", "InBoth", "JoinResult", "sort_merge_diff"]
