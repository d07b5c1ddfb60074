"""
Strategy Tree Builder for the weighbox search engine.

A pruned backtracking search over pan assignments. Each call partitions
the live case set by the three possible outcomes of one weighing and
recurses on every outcome with one weighing less.

Pruning rule:
    k weighings distinguish at most 3^k cases. An outcome holding more
    than 3^(k-1) cases after this weighing can never be resolved, so the
    weighing is rejected without recursing.

Everything is lazy. Trees are produced one at a time and the search stops
as soon as the caller stops pulling.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence

from ..cases import UNKNOWN_DIRECTIONS, aggregate_cases, enumerate_cases, enumerate_products
from ..domain import (
    Case,
    ConclusionNode,
    Difference,
    InvariantViolationError,
    Product,
    SearchBudgetExceeded,
    Strategy,
    StrategyNode,
    TreeNode,
    WeighResult,
)
from ..validation import validate_budget_limits, validate_search_inputs
from ..weighing import classify
from .partitions import break_into

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

# Distinct outcomes of one weighing
OUTPUTS_PER_WEIGHING = 3


def greedy_least_k(case_count: int) -> int:
    """
    Fewest weighings that could possibly separate `case_count` cases.

    Integer form of ceil(log3(case_count)).
    """
    weighings = 0
    while OUTPUTS_PER_WEIGHING ** weighings < case_count:
        weighings += 1
    return weighings


# =============================================================================
# SEARCH BUDGET
# =============================================================================

@dataclass
class SearchBudget:
    """
    Limits on how much work one search may do.

    Both limits are optional; an empty budget never trips. Limits that are
    given must be positive.
    `max_strategies` counts candidate weighings examined, `timeout` is in
    seconds of wall-clock time since the search started.
    """
    max_strategies: Optional[int] = None
    timeout: Optional[float] = None
    examined: int = field(default=0, init=False)
    started_at: Optional[float] = field(default=None, init=False)

    def __post_init__(self):
        validate_budget_limits(self.max_strategies, self.timeout)

    def start(self) -> None:
        self.examined = 0
        self.started_at = time.monotonic()

    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def charge(self) -> None:
        """
        Account for one more candidate weighing.

        Raises:
            SearchBudgetExceeded: If either limit has been passed
        """
        self.examined += 1
        if self.max_strategies is not None and self.examined > self.max_strategies:
            self._exceeded(f"strategy limit of {self.max_strategies} reached")
        if self.timeout is not None and self.elapsed() > self.timeout:
            self._exceeded(f"timeout of {self.timeout}s reached")

    def _exceeded(self, reason: str) -> None:
        elapsed = self.elapsed()
        logger.warning("Search stopped: %s", reason)
        raise SearchBudgetExceeded(self.examined, elapsed, reason)


# =============================================================================
# LAZY BRANCH REPLAY
# =============================================================================

class _Replay:
    """
    Memoizing view over an iterator so it can be walked more than once.

    Items are pulled from the source only when a walk first needs them.
    """

    def __init__(self, source: Iterator):
        self._source = source
        self._seen: list = []
        self._exhausted = False

    def _pull(self) -> bool:
        if self._exhausted:
            return False
        try:
            self._seen.append(next(self._source))
        except StopIteration:
            self._exhausted = True
            return False
        return True

    def has_any(self) -> bool:
        return bool(self._seen) or self._pull()

    def __iter__(self):
        index = 0
        while index < len(self._seen) or self._pull():
            yield self._seen[index]
            index += 1


# =============================================================================
# STRATEGY TREE BUILDER
# =============================================================================

class StrategyTreeBuilder:
    """
    Backtracking search for decision trees over a fixed set of products.

    The builder holds no state between calls other than the product list
    and the optional budget; every recursive call works on its own
    immutable case tuple.
    """

    def __init__(self, products: Sequence[Product], budget: Optional[SearchBudget] = None):
        self.products = tuple(products)
        self.budget = budget

    def generate(self, cases: tuple[Case, ...], weighings: int) -> Iterator[TreeNode]:
        """
        Yield decision trees resolving every case in `cases` within
        `weighings` weighings. Yielding nothing means no such tree exists
        under this enumeration.
        """
        if not cases:
            return

        if len(cases) == 1:
            case = cases[0]
            if case.candidate is None or case.direction is None:
                raise InvariantViolationError(f"incomplete case in singleton set: {case!r}")
            yield ConclusionNode(enumerated=case)
            return

        if weighings == 0:
            return
        if len(cases) > OUTPUTS_PER_WEIGHING ** weighings:
            return

        next_weighings = weighings - 1
        max_branch_size = OUTPUTS_PER_WEIGHING ** next_weighings

        for strategy in self._candidate_strategies(self._categorize(cases)):
            if self.budget is not None:
                self.budget.charge()

            branches = split_cases(cases, strategy)
            if any(len(branch) > max_branch_size for branch in branches.values()):
                continue

            yield from self._combine(strategy, cases, branches, next_weighings)

    # -------------------------------------------------------------------------
    # Candidate weighings
    # -------------------------------------------------------------------------

    def _categorize(self, cases: Iterable[Case]) -> tuple[list[Product], ...]:
        """
        Sort every product into one of four categories:
        possible-lighter, possible-heavier, ambiguous (both still
        possible), qualified (known to be normal).
        """
        aggregated = aggregate_cases(cases)
        lighter: list[Product] = []
        heavier: list[Product] = []
        ambiguous: list[Product] = []
        for product, difference in aggregated.items():
            if difference == Difference.LIGHTER:
                lighter.append(product)
            elif difference == Difference.HEAVIER:
                heavier.append(product)
            else:
                ambiguous.append(product)
        qualified = [product for product in self.products if product not in aggregated]
        return lighter, heavier, ambiguous, qualified

    def _candidate_strategies(self, categories: tuple[list[Product], ...]) -> Iterator[Strategy]:
        """
        Enumerate weighings, most products set aside first.

        Within a category products are interchangeable, so only the counts
        drawn from each category are enumerated; the left pan takes a prefix
        of each category and the right pan takes the items that follow.
        """
        n = len(self.products)
        sizes = [len(items) for items in categories]

        # At least one product per pan; an odd one out always sits aside
        for aside in range(n - 2, n % 2 - 1, -2):
            group = (n - aside) // 2
            for left_counts in break_into(group, sizes):
                remainders = [size - used for size, used in zip(sizes, left_counts)]
                for right_counts in break_into(group, remainders):
                    left: list[Product] = []
                    right: list[Product] = []
                    for items, on_left, on_right in zip(categories, left_counts, right_counts):
                        left.extend(items[:on_left])
                        right.extend(items[on_left:on_left + on_right])
                    yield Strategy(left=frozenset(left), right=frozenset(right))

    # -------------------------------------------------------------------------
    # Subtree combination
    # -------------------------------------------------------------------------

    def _branch(self, cases: tuple[Case, ...], weighings: int) -> _Replay:
        if not cases:
            # Outcome cannot happen; stands in as a single empty child
            return _Replay(iter((None,)))
        return _Replay(self.generate(cases, weighings))

    def _combine(
        self,
        strategy: Strategy,
        cases: tuple[Case, ...],
        branches: dict[WeighResult, tuple[Case, ...]],
        weighings: int,
    ) -> Iterator[StrategyNode]:
        lefts = self._branch(branches[WeighResult.LEFT], weighings)
        if not lefts.has_any():
            return
        rights = self._branch(branches[WeighResult.RIGHT], weighings)
        if not rights.has_any():
            return
        balances = self._branch(branches[WeighResult.BALANCE], weighings)
        if not balances.has_any():
            return

        for left in lefts:
            for right in rights:
                for balance in balances:
                    if left is None and right is None and balance is None:
                        continue
                    yield StrategyNode(
                        strategy=strategy,
                        cases=cases,
                        children={
                            WeighResult.LEFT: left,
                            WeighResult.BALANCE: balance,
                            WeighResult.RIGHT: right,
                        },
                    )


def split_cases(cases: Iterable[Case], strategy: Strategy) -> dict[WeighResult, tuple[Case, ...]]:
    """Partition cases by the outcome `strategy` would show for each."""
    buckets: dict[WeighResult, list[Case]] = {
        WeighResult.LEFT: [],
        WeighResult.BALANCE: [],
        WeighResult.RIGHT: [],
    }
    for case in cases:
        buckets[classify(case, strategy)].append(case)
    return {result: tuple(bucket) for result, bucket in buckets.items()}


# =============================================================================
# ENTRY POINT
# =============================================================================

def find_solution(
    n: int,
    k: int,
    directions: Iterable[Difference] = UNKNOWN_DIRECTIONS,
    budget: Optional[SearchBudget] = None,
) -> Iterator[TreeNode]:
    """
    Search for decision trees identifying the defective product among `n`
    within `k` weighings.

    Inputs are validated immediately; the search itself only runs as the
    returned iterator is consumed. Callers normally take the first tree.

    Every subtree built for an outcome of a weighing is kept for as long as
    trees using that weighing are still being drawn, so memory grows with
    the number of trees consumed.

    Raises:
        InvalidInputError: If n, k or directions are invalid
    """
    n, k, directions = validate_search_inputs(n, k, directions)
    products = enumerate_products(n)
    cases = enumerate_cases(products, directions)

    # Budget past the information bound cannot help and only widens the search
    weighings = min(k, greedy_least_k(len(cases)))
    logger.debug(
        "Searching n=%d k=%d directions=%s: %d cases, %d weighings",
        n, k, [d.name for d in directions], len(cases), weighings,
    )

    builder = StrategyTreeBuilder(products, budget)
    return _run(builder, cases, weighings)


def _run(builder: StrategyTreeBuilder, cases: tuple[Case, ...], weighings: int) -> Iterator[TreeNode]:
    if builder.budget is not None:
        builder.budget.start()
    for tree in builder.generate(cases, weighings):
        logger.info("Found decision tree for %d cases", len(cases))
        yield tree
