"""
The wire encoding must reproduce every IR object exactly, including the
values JSON can't hold natively (bytes, enums, non-finite floats, tuples).
"""

import os
import string
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import hypothesis.strategies as st
import orjson
import pytest
from hypothesis import given
from hypothesis import settings

from plover.exceptions import UnsupportedTypeError
from plover.ir import dumps
from plover.ir import loads
from plover.ir import types
from plover.ir.nodes import AggregateCall
from plover.ir.nodes import AggregateFunction
from plover.ir.nodes import BinaryExpr
from plover.ir.nodes import BinaryOperator
from plover.ir.nodes import BoundReference
from plover.ir.nodes import Case
from plover.ir.nodes import Column
from plover.ir.nodes import ColumnIndex
from plover.ir.nodes import InList
from plover.ir.nodes import JoinFilter
from plover.ir.nodes import JoinSide
from plover.ir.nodes import Literal
from plover.ir.nodes import OpaqueFallbackCall
from plover.ir.nodes import RowNumber
from plover.ir.nodes import ScalarFunction
from plover.ir.nodes import ScalarFunctionCall
from plover.ir.nodes import TryCast
from plover.ir.serialization import WIRE_VERSION
from plover.ir.serialization import to_dict
from plover.ir.types import DecimalType
from plover.ir.types import Field
from plover.ir.types import ListType
from plover.ir.types import MapType
from plover.ir.types import Schema
from plover.ir.types import StructType
from plover.ir.values import ScalarValue

TEST_ITERATIONS = int(os.environ.get("TEST_ITERATIONS", 100))

PRIMITIVES = [
    types.NULL, types.BOOL, types.INT8, types.INT16, types.INT32, types.INT64,
    types.FLOAT32, types.FLOAT64, types.UTF8, types.BINARY, types.DATE32,
    types.TIMESTAMP_MICROSECOND,
]  # fmt:skip

primitive_descriptors = st.sampled_from(PRIMITIVES)
decimal_descriptors = st.integers(min_value=1, max_value=38).flatmap(
    lambda precision: st.builds(
        DecimalType, st.just(precision), st.integers(min_value=0, max_value=precision)
    )
)
field_names = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=6)


def _nested(children):
    return st.one_of(
        st.builds(ListType, children, st.booleans()),
        st.builds(MapType, primitive_descriptors, children, st.booleans()),
        st.builds(
            StructType,
            st.lists(st.builds(Field, field_names, children, st.booleans()), max_size=4).map(tuple),
        ),
    )


descriptors = st.recursive(
    st.one_of(primitive_descriptors, decimal_descriptors), _nested, max_leaves=8
)


def test_round_trip_expression_tree():
    tree = Case(
        when_then=(
            (
                BinaryExpr(
                    BinaryOperator.GT,
                    Column("#1"),
                    Literal(ScalarValue(types.FLOAT64, float("inf"))),
                ),
                Literal(ScalarValue(types.BINARY, b"\x00\xff")),
            ),
        ),
        else_expr=TryCast(Literal(ScalarValue(types.NULL)), ListType(types.INT32)),
    )
    assert loads(dumps(tree)) == tree


def test_round_trip_fallback_call():
    call = OpaqueFallbackCall(
        serialized=b"opaque bytes",
        parameters=(
            BoundReference(0, types.INT64, False),
            ScalarFunctionCall(ScalarFunction.EXTENSION, "NullIfZero", (Column("#2"),), types.INT64),
        ),
        return_type=DecimalType(10, 2),
        return_nullable=True,
    )
    assert loads(dumps(call)) == call


def test_round_trip_nested_values():
    map_type = MapType(types.UTF8, types.INT32)
    value = ScalarValue(
        map_type,
        (
            (ScalarValue(types.UTF8, "a"), ScalarValue(types.INT32, 1)),
            (ScalarValue(types.UTF8, "b"), ScalarValue(types.INT32)),
        ),
    )
    literal = Literal(value)
    assert loads(dumps(literal)) == literal

    in_list = InList(Column("x"), (Literal(ScalarValue(types.BOOL, True)),), negated=True)
    assert loads(dumps(in_list)) == in_list


def test_round_trip_join_filter():
    join_filter = JoinFilter(
        expression=BinaryExpr(BinaryOperator.EQ, Column("#a"), Column("#c")),
        schema=Schema((Field("#a", types.INT64, False), Field("#c", types.INT64))),
        column_indices=(ColumnIndex(JoinSide.LEFT, 0), ColumnIndex(JoinSide.RIGHT, 0)),
    )
    assert loads(dumps(join_filter)) == join_filter


def test_round_trip_payloadless_nodes():
    for node in (RowNumber(), AggregateCall(AggregateFunction.COUNT, ())):
        assert loads(dumps(node)) == node


def test_primitive_kind_is_not_confused_with_class_tag():
    encoded = to_dict(types.INT32)
    assert encoded["@kind"] == "PrimitiveType"
    assert encoded["kind"] == {"enum": "PrimitiveKind", "value": "INT32"}


def test_envelope_is_versioned():
    envelope = orjson.loads(dumps(Column("a")))
    assert envelope["version"] == WIRE_VERSION


def test_unknown_version_is_rejected():
    serialized = orjson.dumps({"version": WIRE_VERSION + 1, "payload": None})
    with pytest.raises(UnsupportedTypeError):
        loads(serialized)


def test_unknown_kind_is_rejected():
    serialized = orjson.dumps({"version": WIRE_VERSION, "payload": {"@kind": "Teleport"}})
    with pytest.raises(UnsupportedTypeError):
        loads(serialized)


def test_only_ir_objects_are_encoded():
    with pytest.raises(UnsupportedTypeError):
        dumps(object())


@settings(deadline=None, max_examples=TEST_ITERATIONS)
@given(descriptor=descriptors)
def test_round_trip_type_descriptors(descriptor):
    assert loads(dumps(descriptor)) == descriptor


@settings(deadline=None, max_examples=TEST_ITERATIONS)
@given(
    value=st.one_of(
        st.integers(min_value=-(2**63), max_value=2**63 - 1).map(
            lambda v: ScalarValue(types.INT64, v)
        ),
        st.text().map(lambda v: ScalarValue(types.UTF8, v)),
        st.binary().map(lambda v: ScalarValue(types.BINARY, v)),
        st.floats(allow_nan=False).map(lambda v: ScalarValue(types.FLOAT64, v)),
        st.booleans().map(lambda v: ScalarValue(types.BOOL, v)),
    )
)
def test_round_trip_scalar_values(value):
    assert loads(dumps(Literal(value))) == Literal(value)


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
