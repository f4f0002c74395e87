import os
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import pyarrow
import pytest

from plover.config import LoweringConfig
from plover.exceptions import FallbackPackagingError
from plover.exceptions import UnsupportedAggregateError
from plover.exceptions import UnsupportedTypeError
from plover.expression import NodeType
from plover.ir import types
from plover.ir.nodes import AggregateCall
from plover.ir.nodes import AggregateFunction
from plover.ir.nodes import BinaryExpr
from plover.ir.nodes import BinaryOperator
from plover.ir.nodes import Case
from plover.ir.nodes import Column
from plover.ir.nodes import IsNull
from plover.ir.nodes import Literal
from plover.ir.nodes import OpaqueFallbackCall
from plover.ir.values import ScalarValue
from plover.lowering import lower_aggregate
from plover.lowering import lower_expression
from plover.lowering.aggregates import BRICKHOUSE_COLLECT_CLASS
from plover.lowering.aggregates import BRICKHOUSE_COMBINE_UNIQUE_CLASS
from plover.models import Node

CONFIG = LoweringConfig()
NO_BRICKHOUSE = LoweringConfig(brickhouse_udfs=False)

INT64 = pyarrow.int64()


def identifier(name, data_type=INT64, nullable=True):
    return Node(
        NodeType.IDENTIFIER, value=name, identity=name.upper(), type=data_type, nullable=nullable
    )


def aggregate(name, *parameters, data_type=INT64, **attributes):
    return Node(
        NodeType.AGGREGATOR, value=name, parameters=list(parameters), type=data_type, **attributes
    )


# fmt:off
SIMPLE_AGGREGATES = [
    ("MAX", pyarrow.string(), AggregateFunction.MAX),
    ("MIN", pyarrow.date32(), AggregateFunction.MIN),
    ("SUM", INT64, AggregateFunction.SUM),
    ("SUM", pyarrow.decimal128(20, 2), AggregateFunction.SUM),
    ("AVG", pyarrow.float64(), AggregateFunction.AVG),
    ("COLLECT_LIST", pyarrow.list_(INT64), AggregateFunction.COLLECT_LIST),
    ("COLLECT_SET", pyarrow.list_(INT64), AggregateFunction.COLLECT_SET),
]

REJECTED = [
    aggregate("SUM", identifier("s", pyarrow.string()), data_type=pyarrow.string()),
    aggregate("AVG", identifier("a"), data_type=pyarrow.uint64()),
    aggregate("COLLECT_LIST", identifier("l", pyarrow.list_(INT64)), data_type=pyarrow.list_(pyarrow.list_(INT64))),
    aggregate("COLLECT_SET", identifier("u", pyarrow.uint8()), data_type=pyarrow.list_(pyarrow.uint8())),
    aggregate("MEDIAN", identifier("a")),
    aggregate("MAX", identifier("a"), identifier("b")),
    aggregate("MAX"),
    Node(NodeType.FUNCTION, value="MAX", parameters=[identifier("a")], type=INT64),
]
# fmt:on


@pytest.mark.parametrize("name, data_type, expected", SIMPLE_AGGREGATES)
def test_simple_aggregates(name, data_type, expected):
    node = aggregate(name, identifier("a"), data_type=data_type)
    assert lower_aggregate(node, CONFIG) == AggregateCall(expected, (Column("#A"),))


@pytest.mark.parametrize("node", REJECTED)
def test_rejected_aggregates(node):
    with pytest.raises(UnsupportedAggregateError):
        lower_aggregate(node, CONFIG)


def test_aggregate_with_filter_is_rejected():
    node = aggregate("SUM", identifier("a"), filter=identifier("keep", pyarrow.bool_()))
    with pytest.raises(UnsupportedAggregateError) as err:
        lower_aggregate(node, CONFIG)
    assert "FILTER" in str(err.value)


def test_count_of_non_nullable_operands_counts_rows():
    node = aggregate(
        "COUNT", identifier("a", nullable=False), identifier("b", nullable=False)
    )
    assert lower_aggregate(node, CONFIG) == AggregateCall(
        AggregateFunction.COUNT, (Literal(ScalarValue(types.INT32, 1)),)
    )


def test_count_star_counts_rows():
    assert lower_aggregate(aggregate("COUNT"), CONFIG) == AggregateCall(
        AggregateFunction.COUNT, (Literal(ScalarValue(types.INT32, 1)),)
    )


def test_count_of_nullable_operand():
    node = aggregate("COUNT", identifier("a"))
    assert lower_aggregate(node, CONFIG) == AggregateCall(AggregateFunction.COUNT, (Column("#A"),))


def test_count_of_several_nullable_operands():
    node = aggregate(
        "COUNT", identifier("a"), identifier("b", nullable=False), identifier("c")
    )
    assert lower_aggregate(node, CONFIG) == AggregateCall(
        AggregateFunction.COUNT,
        (
            Case(
                when_then=(
                    (
                        BinaryExpr(BinaryOperator.OR, IsNull(Column("#A")), IsNull(Column("#C"))),
                        Literal(ScalarValue(types.INT32)),
                    ),
                ),
                else_expr=Literal(ScalarValue(types.INT32, 1)),
            ),
        ),
    )


def test_first_respects_ignore_nulls():
    respecting = aggregate("FIRST", identifier("a"))
    ignoring = aggregate("FIRST", identifier("a"), ignore_nulls=True)
    assert lower_aggregate(respecting, CONFIG).function == AggregateFunction.FIRST
    assert lower_aggregate(ignoring, CONFIG).function == AggregateFunction.FIRST_IGNORES_NULL


def test_aggregate_operands_can_be_host_evaluated():
    operand = Node(
        NodeType.FUNCTION, value="MYSTERY", parameters=[identifier("a")], type=INT64
    )
    lowered = lower_aggregate(aggregate("SUM", operand), CONFIG)
    assert lowered.function == AggregateFunction.SUM
    assert isinstance(lowered.children[0], OpaqueFallbackCall)
    assert lowered.children[0].parameters == (Column("#A"),)


def test_brickhouse_collect():
    list_type = pyarrow.list_(INT64)
    node = aggregate(
        "collect", identifier("l", list_type), data_type=list_type, udf=BRICKHOUSE_COLLECT_CLASS
    )
    assert lower_aggregate(node, CONFIG) == AggregateCall(
        AggregateFunction.BRICKHOUSE_COLLECT, (Column("#L"),)
    )
    with pytest.raises(UnsupportedAggregateError):
        lower_aggregate(node, NO_BRICKHOUSE)


def test_brickhouse_collect_needs_a_list():
    node = aggregate("collect", identifier("a"), udf=BRICKHOUSE_COLLECT_CLASS)
    with pytest.raises(UnsupportedAggregateError):
        lower_aggregate(node, CONFIG)


def test_brickhouse_combine_unique():
    list_type = pyarrow.list_(INT64)
    node = aggregate(
        "combine_unique",
        identifier("l", list_type),
        data_type=list_type,
        udf=BRICKHOUSE_COMBINE_UNIQUE_CLASS,
    )
    assert lower_aggregate(node, CONFIG) == AggregateCall(
        AggregateFunction.BRICKHOUSE_COMBINE_UNIQUE, (Column("#L"),)
    )
    with pytest.raises(UnsupportedAggregateError):
        lower_aggregate(node, NO_BRICKHOUSE)


def test_unknown_user_aggregate_is_rejected():
    node = aggregate("my_udaf", identifier("a"), udf="com.example.MyUDAF")
    with pytest.raises(UnsupportedAggregateError):
        lower_aggregate(node, CONFIG)


def test_unsupported_operand_type_is_an_aggregate_error():
    # the operand has to go to the host, but uint32 has no native form
    operand = Node(
        NodeType.FUNCTION, value="MYSTERY", parameters=[identifier("a")], type=pyarrow.uint32()
    )
    node = aggregate("MAX", operand, data_type=pyarrow.uint32())
    with pytest.raises(UnsupportedAggregateError) as err:
        lower_aggregate(node, CONFIG)
    assert isinstance(err.value.__cause__, UnsupportedTypeError)


def test_unpackageable_operand_is_an_aggregate_error():
    operand = Node(NodeType.FUNCTION, value="MYSTERY", parameters=[identifier("a")])
    with pytest.raises(UnsupportedAggregateError) as err:
        lower_aggregate(aggregate("MAX", operand), CONFIG)
    assert isinstance(err.value.__cause__, FallbackPackagingError)


def test_expression_lowering_dispatches_aggregates():
    node = aggregate("SUM", identifier("x"))
    assert lower_expression(node, CONFIG) == AggregateCall(AggregateFunction.SUM, (Column("#X"),))


def test_expression_lowering_rejects_unsupported_aggregates():
    with pytest.raises(UnsupportedAggregateError):
        lower_expression(aggregate("MEDIAN", identifier("x")), CONFIG)


def test_aggregate_under_a_scalar_expression():
    # SUM(a) + 1
    node = Node(
        NodeType.BINARY_OPERATOR,
        value="Plus",
        left=aggregate("SUM", identifier("a")),
        right=Node(NodeType.LITERAL, value=1, type=INT64, nullable=False),
        type=INT64,
    )
    assert lower_expression(node, CONFIG) == BinaryExpr(
        BinaryOperator.PLUS,
        AggregateCall(AggregateFunction.SUM, (Column("#A"),)),
        Literal(ScalarValue(types.INT64, 1)),
    )


def test_aggregates_are_never_handed_to_the_host():
    node = Node(
        NodeType.FUNCTION,
        value="MYSTERY",
        parameters=[aggregate("SUM", identifier("a"))],
        type=INT64,
    )
    with pytest.raises(UnsupportedAggregateError):
        lower_expression(node, CONFIG)


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
