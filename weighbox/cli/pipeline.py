"""
Solve Orchestrator for the weighbox CLI.

Ties the stages together into a single execution flow:
    1. Validate inputs
    2. Search for the first decision tree
    3. Replay every case against it

The orchestrator is deterministic: the same inputs always produce the
same tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..cases import enumerate_cases, enumerate_products
from ..domain import Case, Difference, InputRule, TreeNode
from ..export import count_conclusions, count_weighings, tree_depth
from ..search.builder import SearchBudget, find_solution, greedy_least_k
from ..validation import MIN_PRODUCTS, validate_count, validate_directions
from ..weighing import validate_solution

logger = logging.getLogger(__name__)


# =============================================================================
# SOLVE RESULT
# =============================================================================

@dataclass
class SolveResult:
    """
    Complete result of one search.

    Exposes the tree (if any), the cases it failed to identify (always
    empty for a sound tree) and search statistics.
    """
    n: int
    k: int
    directions: tuple[Difference, ...]
    tree: Optional[TreeNode]
    failures: list[Case] = field(default_factory=list)

    # Statistics
    case_count: int = 0
    least_k: int = 0
    strategies_examined: int = 0
    elapsed: float = 0.0

    @property
    def found(self) -> bool:
        return self.tree is not None

    @property
    def depth(self) -> int:
        return tree_depth(self.tree) if self.tree is not None else 0

    @property
    def conclusions(self) -> int:
        return count_conclusions(self.tree) if self.tree is not None else 0

    @property
    def weighings(self) -> int:
        return count_weighings(self.tree) if self.tree is not None else 0


# =============================================================================
# EXECUTION
# =============================================================================

def run_solve(
    n: int,
    k: int,
    directions: Iterable[Difference],
    max_strategies: Optional[int] = None,
    timeout: Optional[float] = None,
) -> SolveResult:
    """
    Search for the first tree and verify it against every case.

    Raises:
        InvalidInputError: If inputs fail validation
        SearchBudgetExceeded: If the search runs past its budget
    """
    directions = validate_directions(directions)
    budget = SearchBudget(max_strategies=max_strategies, timeout=timeout)
    solutions = find_solution(n, k, directions, budget=budget)
    cases = enumerate_cases(enumerate_products(n), directions)

    tree = next(solutions, None)
    failures = validate_solution(tree, cases) if tree is not None else []
    if failures:
        logger.error("Tree failed to identify %d of %d cases", len(failures), len(cases))

    return SolveResult(
        n=n,
        k=k,
        directions=directions,
        tree=tree,
        failures=failures,
        case_count=len(cases),
        least_k=greedy_least_k(len(cases)),
        strategies_examined=budget.examined,
        elapsed=budget.elapsed(),
    )


def run_verify(tree: TreeNode, n: int, directions: Iterable[Difference]) -> tuple[int, list[Case]]:
    """
    Replay every case for (n, directions) against a loaded tree.

    Returns:
        (number of cases checked, cases the tree failed to identify)
    """
    n = validate_count(n, MIN_PRODUCTS, InputRule.N_TOO_SMALL, "n")
    cases = enumerate_cases(enumerate_products(n), validate_directions(directions))
    return len(cases), validate_solution(tree, cases)
