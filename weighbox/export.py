"""
Tree Export for the weighbox search engine.

Serializes decision trees to plain JSON-compatible dicts and back, and
computes the summary statistics shown by the CLI.

Format:
    strategy:   {"type": "strategy", "strategy": {"left": [...], "right": [...]},
                 "cases": [[product, "lighter"], ...],
                 "children": {"left": node|null, "balance": node|null, "right": node|null}}
    conclusion: {"type": "conclusion", "enumerated": [product, "heavier"]}

Pans are written as sorted lists so output is stable across runs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Optional

from .domain import (
    WEIGH_RESULTS,
    Case,
    ConclusionNode,
    Difference,
    NodeType,
    Strategy,
    StrategyNode,
    StrategyValidationError,
    TreeFormatError,
    TreeNode,
    WeighResult,
)


# =============================================================================
# SERIALIZATION
# =============================================================================

def _case_to_list(case: Case) -> list:
    return [case.candidate, case.direction.name.lower()]


def tree_to_dict(tree: TreeNode) -> dict[str, Any]:
    """Convert a decision tree into JSON-compatible dicts."""
    if tree.type == NodeType.CONCLUSION:
        return {"type": "conclusion", "enumerated": _case_to_list(tree.enumerated)}

    children = {}
    for result in WEIGH_RESULTS:
        child = tree.children.get(result)
        children[result.name.lower()] = None if child is None else tree_to_dict(child)

    return {
        "type": "strategy",
        "strategy": {
            "left": sorted(tree.strategy.left),
            "right": sorted(tree.strategy.right),
        },
        "cases": [_case_to_list(case) for case in tree.cases],
        "children": children,
    }


def _case_from_list(raw: Any) -> Case:
    candidate, direction = raw
    if isinstance(candidate, bool) or not isinstance(candidate, int):
        raise TreeFormatError(f"product must be an integer, got {candidate!r}")
    try:
        difference = Difference[str(direction).upper()]
    except KeyError:
        raise TreeFormatError(f"unknown direction: {direction!r}")
    if difference == Difference.NORMAL:
        raise TreeFormatError("a case cannot have a NORMAL direction")
    return Case(candidate=candidate, direction=difference)


def tree_from_dict(data: dict[str, Any]) -> TreeNode:
    """
    Rebuild a decision tree from `tree_to_dict` output.

    Raises:
        TreeFormatError: If the data does not describe a valid tree
    """
    try:
        node_type = data["type"]
        if node_type == "conclusion":
            return ConclusionNode(enumerated=_case_from_list(data["enumerated"]))
        if node_type != "strategy":
            raise TreeFormatError(f"unknown node type: {node_type!r}")

        strategy = Strategy(
            left=frozenset(data["strategy"]["left"]),
            right=frozenset(data["strategy"]["right"]),
        )
        children: dict[WeighResult, Optional[TreeNode]] = {}
        for result in WEIGH_RESULTS:
            raw_child = data["children"].get(result.name.lower())
            children[result] = None if raw_child is None else tree_from_dict(raw_child)

        return StrategyNode(
            strategy=strategy,
            cases=tuple(_case_from_list(raw) for raw in data["cases"]),
            children=children,
        )
    except TreeFormatError:
        raise
    except StrategyValidationError as e:
        raise TreeFormatError(f"invalid strategy: {e}") from e
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise TreeFormatError(f"malformed tree node: {e!r}") from e


# =============================================================================
# FILES
# =============================================================================

def output_filename(n: int, k: int, directions: Iterable[Difference]) -> str:
    """Default file name for a saved tree, e.g. `12-3-heavier_lighter.output.json`."""
    suffix = "_".join(d.name.lower() for d in directions)
    return f"{n}-{k}-{suffix}.output.json"


def write_tree(tree: TreeNode, path: Path) -> None:
    path.write_text(json.dumps(tree_to_dict(tree), indent=2), encoding="utf-8")


def read_tree(path: Path) -> TreeNode:
    """
    Load a tree saved with `write_tree`.

    Raises:
        TreeFormatError: If the file is not UTF-8 JSON or not a valid tree
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise TreeFormatError(f"{path} is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise TreeFormatError(f"{path} is not valid JSON: {e}") from e
    except RecursionError as e:
        raise TreeFormatError(f"{path} is nested too deeply") from e
    if not isinstance(data, dict):
        raise TreeFormatError(f"{path} does not contain a tree object")
    try:
        return tree_from_dict(data)
    except RecursionError as e:
        raise TreeFormatError(f"{path} is nested too deeply") from e


# =============================================================================
# STATISTICS
# =============================================================================

def tree_depth(tree: TreeNode) -> int:
    """Most weighings on any path from the root to a conclusion."""
    if tree.type == NodeType.CONCLUSION:
        return 0
    child_depths = [
        tree_depth(child) for child in tree.children.values() if child is not None
    ]
    return 1 + max(child_depths, default=0)


def count_conclusions(tree: TreeNode) -> int:
    if tree.type == NodeType.CONCLUSION:
        return 1
    return sum(
        count_conclusions(child) for child in tree.children.values() if child is not None
    )


def count_weighings(tree: TreeNode) -> int:
    """Number of strategy nodes, i.e. distinct weighings the tree may ask for."""
    if tree.type == NodeType.CONCLUSION:
        return 0
    return 1 + sum(
        count_weighings(child) for child in tree.children.values() if child is not None
    )
