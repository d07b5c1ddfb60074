"""
Input Validation for the weighbox search engine.

The search core trusts its arguments. Everything a caller passes in is
checked here first, and any violation is a hard failure:

1. At least two products (one weighing needs a product on each pan)
2. At least one weighing
3. At least one defect direction
4. Directions are LIGHTER or HEAVIER, never NORMAL
5. Search limits, when given, are positive
"""

from __future__ import annotations

from typing import Iterable, Optional

from .domain import (
    DEFECTIVE_DIFFERENCES,
    Difference,
    InputRule,
    InvalidInputError,
)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

MIN_PRODUCTS = 2
MIN_WEIGHINGS = 1


# =============================================================================
# VALIDATION
# =============================================================================

def validate_count(value: object, minimum: int, rule: InputRule, name: str) -> int:
    """
    Check that `value` is an integer no smaller than `minimum`.

    Raises:
        InvalidInputError: If value is not an int or is too small
    """
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(rule, f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise InvalidInputError(rule, f"{name} must be at least {minimum}, got {value}")
    return value


def validate_directions(directions: Iterable[Difference]) -> tuple[Difference, ...]:
    """
    Check and normalize the allowed defect directions.

    Duplicates are dropped; first-seen order is kept.

    Raises:
        InvalidInputError: If empty (I3) or containing a non-defect value (I4)
    """
    normalized: list[Difference] = []
    for direction in directions:
        if direction not in DEFECTIVE_DIFFERENCES:
            raise InvalidInputError(
                InputRule.INVALID_DIRECTION,
                f"direction must be LIGHTER or HEAVIER, got {direction!r}",
            )
        if direction not in normalized:
            normalized.append(direction)

    if not normalized:
        raise InvalidInputError(
            InputRule.NO_DIRECTIONS,
            "at least one defect direction is required",
        )
    return tuple(normalized)


def validate_search_inputs(
    n: int,
    k: int,
    directions: Iterable[Difference],
) -> tuple[int, int, tuple[Difference, ...]]:
    """
    Validate all search parameters at once.

    Returns:
        (n, k, directions) with directions normalized
    """
    n = validate_count(n, MIN_PRODUCTS, InputRule.N_TOO_SMALL, "n")
    k = validate_count(k, MIN_WEIGHINGS, InputRule.K_TOO_SMALL, "k")
    return n, k, validate_directions(directions)


def validate_budget_limits(
    max_strategies: Optional[int],
    timeout: Optional[float],
) -> None:
    """
    Check optional search limits. None means unbounded.

    Raises:
        InvalidInputError: If a limit is given but not positive (I5)
    """
    if max_strategies is not None:
        validate_count(max_strategies, 1, InputRule.INVALID_BUDGET, "max_strategies")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise InvalidInputError(
                InputRule.INVALID_BUDGET,
                f"timeout must be a number of seconds, got {timeout!r}",
            )
        if not timeout > 0:
            raise InvalidInputError(
                InputRule.INVALID_BUDGET,
                f"timeout must be positive, got {timeout}",
            )
