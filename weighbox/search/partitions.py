"""
Bounded composition enumeration.

Splits the number of products on one pan across the hypothesis
categories, never drawing more from a category than it holds.
"""

from __future__ import annotations

from typing import Iterator, Sequence


def break_into(total: int, maxima: Sequence[int]) -> Iterator[tuple[int, ...]]:
    """
    Yield every tuple `c` with `sum(c) == total` and `0 <= c[i] <= maxima[i]`.

    Tuples come out in lexicographic order. Each position is fixed in turn,
    from 0 up to the smaller of its maximum and what is left of `total`,
    and the remaining positions are filled recursively. An empty `maxima`
    yields nothing.

    >>> list(break_into(2, [1, 1, 1]))
    [(0, 1, 1), (1, 0, 1), (1, 1, 0)]
    """
    if not maxima:
        return
    yield from _assign(total, maxima, 0, ())


def _assign(
    rest: int,
    maxima: Sequence[int],
    index: int,
    prefix: tuple[int, ...],
) -> Iterator[tuple[int, ...]]:
    if index == len(maxima) - 1:
        if maxima[index] >= rest:
            yield prefix + (rest,)
        return

    for count in range(min(maxima[index], rest) + 1):
        yield from _assign(rest - count, maxima, index + 1, prefix + (count,))
