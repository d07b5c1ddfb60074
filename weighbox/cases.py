"""
Case Space for the weighbox search engine.

A case space is every (product, direction) pair the defective product
could be. The search starts from the full space and only ever narrows it.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .domain import Case, Difference, Product


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Defect directions when nothing is known about the lean
UNKNOWN_DIRECTIONS = (Difference.HEAVIER, Difference.LIGHTER)


# =============================================================================
# ENUMERATION
# =============================================================================

def enumerate_products(n: int) -> list[Product]:
    """Products are numbered 1..n."""
    return list(range(1, n + 1))


def enumerate_cases(
    products: Sequence[Product],
    directions: Sequence[Difference] = UNKNOWN_DIRECTIONS,
) -> tuple[Case, ...]:
    """
    Build one Case per product per allowed direction.

    Ordering is product-major, so `enumerate_cases([1, 2])` gives
    1-heavier, 1-lighter, 2-heavier, 2-lighter.
    """
    return tuple(
        Case(candidate=product, direction=direction)
        for product in products
        for direction in directions
    )


def aggregate_cases(cases: Iterable[Case]) -> dict[Product, Difference]:
    """
    Collapse a case set into one Difference per product.

    A product suspected in both directions maps to NORMAL, otherwise to its
    single suspected direction. Products with no case are absent. Keys keep
    the order in which products first appear.
    """
    aggregate: dict[Product, Difference] = {}
    for case in cases:
        if case.candidate in aggregate:
            aggregate[case.candidate] = Difference.NORMAL
        else:
            aggregate[case.candidate] = case.direction
    return aggregate
