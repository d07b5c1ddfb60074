"""
Tree Connector for the weighbox search engine.

Turns a finished decision tree into a navigable one: every node learns its
parent, and every impossible branch becomes an explicit NULL node so a
consumer can step into it and still walk back up.

Nodes live in an arena and refer to each other by index, so the upward
links never form owning cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .domain import (
    WEIGH_RESULTS,
    Case,
    InvariantViolationError,
    NodeType,
    Strategy,
    TreeNode,
    WeighResult,
)


@dataclass
class ConnectedNode:
    """
    One node of a ConnectedTree.

    `source` is the original TreeNode, or None for a NULL node.
    `children` is empty until the connector has built them.
    """
    index: int
    type: NodeType
    source: Optional[TreeNode]
    parent: Optional[int]
    children: dict[WeighResult, int] = field(default_factory=dict)

    @property
    def strategy(self) -> Optional[Strategy]:
        if self.type != NodeType.STRATEGY:
            return None
        return self.source.strategy

    @property
    def cases(self) -> tuple[Case, ...]:
        if self.type != NodeType.STRATEGY:
            return ()
        return self.source.cases

    @property
    def enumerated(self) -> Optional[Case]:
        if self.type != NodeType.CONCLUSION:
            return None
        return self.source.enumerated


@dataclass
class ConnectedTree:
    """Arena of connected nodes; index 0 is the root."""
    nodes: list[ConnectedNode] = field(default_factory=list)

    @property
    def root(self) -> ConnectedNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def parent(self, node: ConnectedNode) -> Optional[ConnectedNode]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def child(self, node: ConnectedNode, result: WeighResult) -> ConnectedNode:
        if node.type != NodeType.STRATEGY:
            raise ValueError(f"{node.type.name} node #{node.index} has no children")
        return self.nodes[node.children[result]]

    def path_to_root(self, node: ConnectedNode) -> list[tuple[ConnectedNode, WeighResult]]:
        """
        Reconstruct the weighings that led to `node`.

        Returns (strategy node, observed result) pairs ordered from the
        root downwards. The root itself yields an empty history.
        """
        history: list[tuple[ConnectedNode, WeighResult]] = []
        current = node
        while current.parent is not None:
            parent = self.nodes[current.parent]
            history.append((parent, _result_leading_to(parent, current)))
            current = parent
        history.reverse()
        return history

    def _append(self, node_type: NodeType, source: Optional[TreeNode], parent: Optional[int]) -> ConnectedNode:
        node = ConnectedNode(index=len(self.nodes), type=node_type, source=source, parent=parent)
        self.nodes.append(node)
        return node


def _result_leading_to(parent: ConnectedNode, child: ConnectedNode) -> WeighResult:
    for result, index in parent.children.items():
        if index == child.index:
            return result
    raise InvariantViolationError(
        f"node #{child.index} is not a child of its parent #{parent.index}"
    )


def connect_parent(tree: TreeNode) -> ConnectedTree:
    """
    Build the connected, NULL-materialized counterpart of `tree`.

    Pre-order: a node is placed in the arena, with its parent already
    known, before any of its children are built.
    """
    connected = ConnectedTree()
    _connect(connected, tree, None)
    return connected


def _connect(connected: ConnectedTree, node: TreeNode, parent: Optional[int]) -> ConnectedNode:
    if node.type == NodeType.CONCLUSION:
        return connected._append(NodeType.CONCLUSION, node, parent)

    built = connected._append(NodeType.STRATEGY, node, parent)
    for result in WEIGH_RESULTS:
        child = node.children.get(result)
        if child is None:
            attached = connected._append(NodeType.NULL, None, built.index)
        else:
            attached = _connect(connected, child, built.index)
        built.children[result] = attached.index
    return built
