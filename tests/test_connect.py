"""
Tests for weighbox - Tree Connector.

These tests verify:
1. The connected tree mirrors the source tree
2. Every impossible branch becomes an explicit NULL node
3. Every node can walk back to the root
4. The reconstructed history replays to the right outcomes
"""

import pytest

from weighbox.connect import ConnectedTree, connect_parent
from weighbox.domain import WEIGH_RESULTS, Difference, NodeType, WeighResult
from weighbox.export import count_conclusions, count_weighings, tree_depth
from weighbox.search.builder import find_solution
from weighbox.weighing import classify


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture(scope="module")
def twelve_tree():
    return next(find_solution(12, 3))


@pytest.fixture(scope="module")
def three_tree():
    return next(find_solution(3, 1, [Difference.LIGHTER]))


def count_none_children(tree) -> int:
    if tree.type == NodeType.CONCLUSION:
        return 0
    return sum(
        1 if child is None else count_none_children(child)
        for child in tree.children.values()
    )


def nodes_of_type(connected: ConnectedTree, node_type: NodeType):
    return [node for node in connected.nodes if node.type == node_type]


# =============================================================================
# STRUCTURE
# =============================================================================

class TestConnectStructure:
    """Test the shape of a connected tree."""

    def test_small_tree(self, three_tree):
        connected = connect_parent(three_tree)

        assert len(connected) == 4
        assert connected.root.type == NodeType.STRATEGY
        assert connected.root.parent is None
        assert not nodes_of_type(connected, NodeType.NULL)

    def test_node_counts_match_source(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        assert len(nodes_of_type(connected, NodeType.STRATEGY)) == count_weighings(twelve_tree)
        assert len(nodes_of_type(connected, NodeType.CONCLUSION)) == count_conclusions(twelve_tree)
        assert len(nodes_of_type(connected, NodeType.NULL)) == count_none_children(twelve_tree)

    def test_strategy_nodes_have_all_children(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        for node in nodes_of_type(connected, NodeType.STRATEGY):
            assert set(node.children) == set(WEIGH_RESULTS)

    def test_indices_are_positions(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        for position, node in enumerate(connected.nodes):
            assert node.index == position

    def test_preorder_parents_come_first(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        for node in connected.nodes[1:]:
            assert node.parent < node.index

    def test_payload_is_source(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        assert connected.root.source is twelve_tree
        assert connected.root.strategy == twelve_tree.strategy
        assert connected.root.cases == twelve_tree.cases
        assert connected.root.enumerated is None


# =============================================================================
# NAVIGATION
# =============================================================================

class TestNavigation:
    """Test walking down into and back up out of a connected tree."""

    def test_child_and_parent_round_trip(self, twelve_tree):
        connected = connect_parent(twelve_tree)
        root = connected.root

        for result in WEIGH_RESULTS:
            child = connected.child(root, result)
            assert connected.parent(child) is root

    def test_null_nodes_know_their_parent(self, twelve_tree):
        connected = connect_parent(twelve_tree)
        nulls = nodes_of_type(connected, NodeType.NULL)

        assert nulls
        for null in nulls:
            parent = connected.parent(null)
            assert parent.type == NodeType.STRATEGY
            assert null.index in parent.children.values()
            assert null.source is None
            assert null.strategy is None

    def test_root_has_no_parent(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        assert connected.parent(connected.root) is None
        assert connected.path_to_root(connected.root) == []

    def test_leaf_has_no_children(self, three_tree):
        connected = connect_parent(three_tree)
        leaf = connected.child(connected.root, WeighResult.LEFT)

        with pytest.raises(ValueError, match="has no children"):
            connected.child(leaf, WeighResult.LEFT)

    def test_history_replays_to_conclusion(self, twelve_tree):
        connected = connect_parent(twelve_tree)

        for leaf in nodes_of_type(connected, NodeType.CONCLUSION):
            history = connected.path_to_root(leaf)

            assert history[0][0] is connected.root
            assert len(history) <= tree_depth(twelve_tree)
            for strategy_node, result in history:
                assert classify(leaf.enumerated, strategy_node.strategy) == result

    def test_history_of_null_node(self, twelve_tree):
        connected = connect_parent(twelve_tree)
        null = nodes_of_type(connected, NodeType.NULL)[0]

        history = connected.path_to_root(null)
        last_node, last_result = history[-1]

        assert last_node is connected.parent(null)
        assert last_node.children[last_result] == null.index
