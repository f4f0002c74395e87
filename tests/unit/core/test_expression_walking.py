import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pyarrow

from plover.expression import NodeType
from plover.expression import collect_references
from plover.expression import contains_node
from plover.expression import get_all_nodes_of_type
from plover.models import Node


def identifier(name, identity=None):
    return Node(
        NodeType.IDENTIFIER, value=name, identity=identity or name.upper(), type=pyarrow.int64()
    )


def literal(value):
    return Node(NodeType.LITERAL, value=value, type=pyarrow.int64())


def test_nodes_are_in_reading_order():
    # (a + 1) = COALESCE(b, a)
    a = identifier("a")
    one = literal(1)
    plus = Node(NodeType.BINARY_OPERATOR, value="Plus", left=a, right=one)
    b = identifier("b")
    a_again = identifier("a")
    coalesce = Node(NodeType.FUNCTION, value="COALESCE", parameters=[b, a_again])
    root = Node(NodeType.COMPARISON_OPERATOR, value="Eq", left=plus, right=coalesce)

    everything = get_all_nodes_of_type(root, ("*",))
    assert everything == [root, plus, a, one, coalesce, b, a_again]

    identifiers = get_all_nodes_of_type(root, (NodeType.IDENTIFIER,))
    assert identifiers == [a, b, a_again]


def test_get_all_nodes_of_type_handles_lists_and_none():
    a = identifier("a")
    b = identifier("b")
    assert get_all_nodes_of_type(None, ("*",)) == []
    assert get_all_nodes_of_type([a, b], (NodeType.IDENTIFIER,)) == [a, b]


def test_contains_node():
    subquery = Node(NodeType.SUBQUERY)
    root = Node(NodeType.AND, left=identifier("a"), right=Node(NodeType.NOT, centre=subquery))
    assert contains_node(root, lambda node: node.node_type == NodeType.SUBQUERY)
    assert not contains_node(root, lambda node: node.node_type == NodeType.AGGREGATOR)
    # the root itself is considered
    assert contains_node(subquery, lambda node: node.node_type == NodeType.SUBQUERY)


def test_collect_references():
    first = identifier("x", "t.x")
    second = identifier("y", "t.y")
    repeat = identifier("x", "t.x")
    shadow = identifier("x", "u.x")
    root = Node(
        NodeType.FUNCTION, value="CONCAT", parameters=[first, second, repeat, shadow]
    )

    assert collect_references(root) == [first, second, shadow]
    assert collect_references(root, unique=False) == [first, second, repeat, shadow]


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
