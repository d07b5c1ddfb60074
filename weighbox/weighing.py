"""
Weighing Classifier for the weighbox search engine.

Maps a hypothesis and a pan assignment to the outcome the balance would
show, and replays decision trees against known hypotheses.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .domain import (
    Case,
    Difference,
    NodeType,
    Strategy,
    TreeNode,
    WeighResult,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CLASSIFICATION
# =============================================================================

def lean(direction: Difference) -> WeighResult:
    """Result when a product leaning `direction` sits on the left pan."""
    return WeighResult.LEFT if direction == Difference.LIGHTER else WeighResult.RIGHT


def inverse(result: WeighResult) -> WeighResult:
    """Mirror a result as if the pans were exchanged."""
    if result == WeighResult.LEFT:
        return WeighResult.RIGHT
    if result == WeighResult.RIGHT:
        return WeighResult.LEFT
    return WeighResult.BALANCE


def classify(case: Case, strategy: Strategy) -> WeighResult:
    """
    Outcome of weighing with `strategy` if `case` is the truth.

    A lighter candidate on the left pan lifts it (LEFT); on the right pan
    the result is mirrored. A candidate set aside leaves the balance level.
    """
    if case.candidate in strategy.left:
        return lean(case.direction)
    if case.candidate in strategy.right:
        return inverse(lean(case.direction))
    return WeighResult.BALANCE


# =============================================================================
# TREE REPLAY
# =============================================================================

def validate_tree(case: Case, tree: TreeNode) -> bool:
    """
    Follow `tree` as if `case` were the truth and check where it lands.

    Returns False if the walk hits an impossible branch or ends on a
    conclusion other than `case`.
    """
    node = tree
    while node.type == NodeType.STRATEGY:
        result = classify(case, node.strategy)
        next_node = node.children.get(result)
        if next_node is None:
            logger.debug("No conclusion reachable for case %s", case)
            return False
        node = next_node

    if node.enumerated != case:
        logger.debug("Expected %s, tree concluded %s", case, node.enumerated)
        return False
    return True


def validate_solution(tree: TreeNode, cases: Iterable[Case]) -> list[Case]:
    """Replay every case; return those the tree fails to identify."""
    return [case for case in cases if not validate_tree(case, tree)]
