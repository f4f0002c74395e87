import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pyarrow
import pytest

from plover.expression import NodeType
from plover.expression import format_expression
from plover.models import Node


def identifier(name):
    return Node(NodeType.IDENTIFIER, value=name, identity=name.upper(), type=pyarrow.int64())


def literal(value, data_type=pyarrow.int64()):
    return Node(NodeType.LITERAL, value=value, type=data_type)


A = identifier("a")
B = identifier("b")

# fmt:off
FORMATTED = [
    (literal(1), "1"),
    (literal(None), "null"),
    (literal(True, pyarrow.bool_()), "TRUE"),
    (literal("O'Brien", pyarrow.string()), "'O''Brien'"),
    (literal([1, None], pyarrow.list_(pyarrow.int64())), "(1, null)"),
    (literal(5, None), "5"),
    (literal("it's", None), "'it''s'"),
    (literal(None, None), "null"),
    (A, "a"),
    (Node(NodeType.BINARY_OPERATOR, value="Plus", left=A, right=literal(1)), "a + 1"),
    (Node(NodeType.BINARY_OPERATOR, value="StringConcat", left=A, right=B), "a || b"),
    (Node(NodeType.COMPARISON_OPERATOR, value="GtEq", left=A, right=B), "a >= b"),
    (Node(NodeType.COMPARISON_OPERATOR, value="NotLike", left=A, right=literal("x%", pyarrow.string())), "a NOT LIKE 'x%'"),
    (Node(NodeType.COMPARISON_OPERATOR, value="InList", left=A, parameters=[literal(1), literal(2)]), "a IN (1, 2)"),
    (Node(NodeType.UNARY_OPERATOR, value="IsNull", centre=A), "a IS NULL"),
    (Node(NodeType.UNARY_OPERATOR, value="Negative", centre=A), "-a"),
    (Node(NodeType.NOT, centre=A), "NOT a"),
    (Node(NodeType.AND, left=A, right=B), "a AND b"),
    (Node(NodeType.XOR, left=A, right=B), "a XOR b"),
    (Node(NodeType.NESTED, centre=A), "(a)"),
    (Node(NodeType.FUNCTION, value="upper", parameters=[A]), "UPPER(a)"),
    (Node(NodeType.FUNCTION, value="CAST", parameters=[A], type=pyarrow.float64()), "CAST(a AS double)"),
    (Node(NodeType.FUNCTION, value="CASE", parameters=[A, literal(1), literal(2)]), "CASE WHEN a THEN 1 ELSE 2 END"),
    (Node(NodeType.FUNCTION, value="CASE", parameters=[A, literal(1)]), "CASE WHEN a THEN 1 END"),
    (Node(NodeType.AGGREGATOR, value="COUNT", parameters=[]), "COUNT()"),
    (Node(NodeType.BOUND_PARAMETER, index=3), "$3"),
    (Node(NodeType.NATIVE, wrapped=None), "<native>"),
    (Node(NodeType.SUBQUERY), "<SUBQUERY>"),
]
# fmt:on


@pytest.mark.parametrize("node, expected", FORMATTED)
def test_format_expression(node, expected):
    assert format_expression(node) == expected, format_expression(node)


def test_format_none():
    assert format_expression(None) == "null"


def test_format_list():
    assert format_expression([A, B]) == ["a", "b"]


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
