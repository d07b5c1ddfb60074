"""
Core Domain Objects for the weighbox search engine.

Domain Objects:
    Difference   - How a product deviates from a normal one
    WeighResult  - Which pan of the balance goes up
    Case         - One hypothesis: "product X is defective, lighter/heavier"
    Strategy     - The pan assignment of a single weighing
    TreeNode     - StrategyNode | ConclusionNode, discriminated by NodeType

Error types used across the package are also defined here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Difference(Enum):
    """
    Weight of a product relative to a normal one.

    NORMAL is also used when a product is still suspected in both
    directions, i.e. nothing is known about its lean.
    """
    LIGHTER = -1
    NORMAL = 0
    HEAVIER = 1


# Only these two may be attached to a Case.
DEFECTIVE_DIFFERENCES = (Difference.LIGHTER, Difference.HEAVIER)


class WeighResult(Enum):
    """
    Outcome of one weighing.

    LEFT means the left pan is lighter, RIGHT means the right pan is lighter.
    """
    LEFT = -1
    BALANCE = 0
    RIGHT = 1


# Fixed iteration order for children of a strategy node.
WEIGH_RESULTS = (WeighResult.LEFT, WeighResult.BALANCE, WeighResult.RIGHT)


class NodeType(Enum):
    """Tag of the TreeNode union."""
    CONCLUSION = 0
    STRATEGY = 1
    NULL = 2  # Only produced by the tree connector


# =============================================================================
# ERRORS
# =============================================================================

class InputRule(Enum):
    """
    Hard input rules checked before a search starts.

    I1: at least two products
    I2: at least one weighing
    I3: at least one defect direction
    I4: directions must be LIGHTER or HEAVIER
    I5: search limits, when given, must be positive
    """
    N_TOO_SMALL = "n_too_small"
    K_TOO_SMALL = "k_too_small"
    NO_DIRECTIONS = "no_directions"
    INVALID_DIRECTION = "invalid_direction"
    INVALID_BUDGET = "invalid_budget"


class InvalidInputError(ValueError):
    """Raised when search parameters fail validation."""

    def __init__(self, rule: InputRule, reason: str):
        self.rule = rule
        self.reason = reason
        super().__init__(f"[{rule.value}] {reason}")


class InvariantViolationError(RuntimeError):
    """
    Raised when the search reaches a state its own bookkeeping rules out.

    This always indicates a bug, never bad input.
    """
    pass


class StrategyValidationError(ValueError):
    """Raised when a Strategy is built with overlapping or unequal pans."""
    pass


class SearchBudgetExceeded(RuntimeError):
    """Raised when a search runs past its strategy count or time limit."""

    def __init__(self, examined: int, elapsed: float, reason: str):
        self.examined = examined
        self.elapsed = elapsed
        self.reason = reason
        super().__init__(
            f"{reason} (examined {examined} strategies in {elapsed:.2f}s)"
        )


class TreeFormatError(ValueError):
    """Raised when a serialized tree cannot be loaded."""
    pass


# =============================================================================
# CASE & STRATEGY
# =============================================================================

Product = int


@dataclass(frozen=True)
class Case:
    """A hypothesis: `candidate` is the defective product and leans `direction`."""
    candidate: Product
    direction: Difference

    def __str__(self) -> str:
        return f"#{self.candidate} {self.direction.name.lower()}"


@dataclass(frozen=True)
class Strategy:
    """
    Pan assignment of one weighing.

    Products in neither pan sit aside. Pans must be disjoint, of equal
    size, and hold at least one product each.
    """
    left: frozenset[Product]
    right: frozenset[Product]

    def __post_init__(self):
        if not self.left or not self.right:
            raise StrategyValidationError("both pans must hold at least one product")
        if len(self.left) != len(self.right):
            raise StrategyValidationError(
                f"pans must be equal in size, got {len(self.left)} and {len(self.right)}"
            )
        overlap = self.left & self.right
        if overlap:
            raise StrategyValidationError(
                f"products {sorted(overlap)} are on both pans"
            )

    def swapped(self) -> Strategy:
        """Return the same weighing with the pans exchanged."""
        return Strategy(left=self.right, right=self.left)

    def describe(self) -> str:
        left = " ".join(str(p) for p in sorted(self.left))
        right = " ".join(str(p) for p in sorted(self.right))
        return f"[{left}] vs [{right}]"


# =============================================================================
# DECISION TREE
# =============================================================================

@dataclass(frozen=True, eq=False)
class StrategyNode:
    """
    An internal node: weigh with `strategy`, then follow the child for the
    observed result.

    `cases` are the hypotheses still consistent when this node is reached.
    A child is None when its result cannot occur given those cases.
    """
    strategy: Strategy
    cases: tuple[Case, ...]
    children: dict[WeighResult, Optional["TreeNode"]]
    type: NodeType = field(default=NodeType.STRATEGY, init=False)

    def child(self, result: WeighResult) -> Optional["TreeNode"]:
        return self.children.get(result)


@dataclass(frozen=True, eq=False)
class ConclusionNode:
    """A leaf: the defective product and its direction are known."""
    enumerated: Case
    type: NodeType = field(default=NodeType.CONCLUSION, init=False)


TreeNode = Union[StrategyNode, ConclusionNode]
