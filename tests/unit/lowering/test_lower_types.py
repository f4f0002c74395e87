import os
import string
import sys

sys.path.insert(1, os.path.join(sys.path[0], "../../.."))

import hypothesis.strategies as st
import pyarrow
import pytest
from hypothesis import given
from hypothesis import settings

from plover.exceptions import UnsupportedTypeError
from plover.ir import types
from plover.ir.types import DecimalType
from plover.ir.types import Field
from plover.ir.types import ListType
from plover.ir.types import MapType
from plover.ir.types import Schema
from plover.ir.types import StructType
from plover.lowering.types import is_numeric
from plover.lowering.types import is_primitive
from plover.lowering.types import lower_schema
from plover.lowering.types import lower_type
from plover.lowering.types import to_arrow_schema
from plover.lowering.types import to_arrow_type

TEST_ITERATIONS = int(os.environ.get("TEST_ITERATIONS", 100))

# fmt:off
SUPPORTED = [
    (pyarrow.null(), types.NULL),
    (pyarrow.bool_(), types.BOOL),
    (pyarrow.int8(), types.INT8),
    (pyarrow.int16(), types.INT16),
    (pyarrow.int32(), types.INT32),
    (pyarrow.int64(), types.INT64),
    (pyarrow.float32(), types.FLOAT32),
    (pyarrow.float64(), types.FLOAT64),
    (pyarrow.string(), types.UTF8),
    (pyarrow.binary(), types.BINARY),
    (pyarrow.date32(), types.DATE32),
    (pyarrow.timestamp("us"), types.TIMESTAMP_MICROSECOND),
    (pyarrow.timestamp("us", tz="UTC"), types.TIMESTAMP_MICROSECOND),
    (pyarrow.timestamp("us", tz="Europe/London"), types.TIMESTAMP_MICROSECOND),
    (pyarrow.decimal128(10, 2), DecimalType(10, 2)),
    (pyarrow.list_(pyarrow.int32()), ListType(types.INT32, True)),
    (pyarrow.list_(pyarrow.field("item", pyarrow.string(), False)), ListType(types.UTF8, False)),
    (pyarrow.map_(pyarrow.string(), pyarrow.float64()), MapType(types.UTF8, types.FLOAT64, True)),
    (
        pyarrow.struct([pyarrow.field("b", pyarrow.int64(), False), pyarrow.field("a", pyarrow.string())]),
        StructType((Field("b", types.INT64, False), Field("a", types.UTF8, True))),
    ),
    (
        pyarrow.list_(pyarrow.struct([pyarrow.field("x", pyarrow.list_(pyarrow.date32()))])),
        ListType(StructType((Field("x", ListType(types.DATE32)),))),
    ),
]

UNSUPPORTED = [
    pyarrow.uint8(),
    pyarrow.uint64(),
    pyarrow.float16(),
    pyarrow.large_string(),
    pyarrow.large_binary(),
    pyarrow.date64(),
    pyarrow.timestamp("ms"),
    pyarrow.timestamp("ns", tz="UTC"),
    pyarrow.duration("s"),
    pyarrow.month_day_nano_interval(),
    pyarrow.dictionary(pyarrow.int32(), pyarrow.string()),
    pyarrow.list_(pyarrow.uint32()),
    pyarrow.struct([pyarrow.field("a", pyarrow.large_string())]),
    None,
    "INTEGER",
]
# fmt:on

ARROW_PRIMITIVES = [
    pyarrow.bool_(), pyarrow.int8(), pyarrow.int16(), pyarrow.int32(), pyarrow.int64(),
    pyarrow.float32(), pyarrow.float64(), pyarrow.string(), pyarrow.binary(),
    pyarrow.date32(), pyarrow.timestamp("us"),
]  # fmt:skip

arrow_primitives = st.sampled_from(ARROW_PRIMITIVES)
arrow_decimals = st.integers(min_value=1, max_value=38).flatmap(
    lambda precision: st.integers(min_value=0, max_value=precision).map(
        lambda scale: pyarrow.decimal128(precision, scale)
    )
)
field_names = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=6)


def _nested_arrow(children):
    return st.one_of(
        st.builds(
            lambda child, nullable: pyarrow.list_(pyarrow.field("item", child, nullable)),
            children,
            st.booleans(),
        ),
        st.builds(
            lambda key, item, nullable: pyarrow.map_(
                pyarrow.field("key", key, False), pyarrow.field("value", item, nullable)
            ),
            st.sampled_from([pyarrow.int32(), pyarrow.int64(), pyarrow.string()]),
            children,
            st.booleans(),
        ),
        st.lists(
            st.tuples(field_names, children, st.booleans()),
            min_size=1,
            max_size=4,
            unique_by=lambda entry: entry[0],
        ).map(lambda entries: pyarrow.struct([pyarrow.field(*entry) for entry in entries])),
    )


arrow_types = st.recursive(st.one_of(arrow_primitives, arrow_decimals), _nested_arrow, max_leaves=8)


@pytest.mark.parametrize("arrow_type, expected", SUPPORTED)
def test_lower_supported_types(arrow_type, expected):
    assert lower_type(arrow_type) == expected


@pytest.mark.parametrize("arrow_type", UNSUPPORTED)
def test_lower_unsupported_types(arrow_type):
    with pytest.raises(UnsupportedTypeError):
        lower_type(arrow_type)


def test_struct_field_order_is_kept():
    struct = pyarrow.struct([pyarrow.field(name, pyarrow.int8()) for name in "zyxw"])
    assert [field.name for field in lower_type(struct).fields] == ["z", "y", "x", "w"]


def test_timestamps_come_back_without_timezone():
    lowered = lower_type(pyarrow.timestamp("us", tz="America/New_York"))
    assert to_arrow_type(lowered) == pyarrow.timestamp("us")


def test_lower_schema():
    schema = pyarrow.schema(
        [pyarrow.field("id", pyarrow.int64(), False), pyarrow.field("name", pyarrow.string())]
    )
    lowered = lower_schema(schema)
    assert lowered == Schema((Field("id", types.INT64, False), Field("name", types.UTF8, True)))
    assert len(lowered) == 2
    assert to_arrow_schema(lowered) == schema


def test_numeric_and_primitive_checks():
    assert is_numeric(pyarrow.int16())
    assert is_numeric(pyarrow.decimal128(5, 1))
    assert not is_numeric(pyarrow.float16())
    assert not is_numeric(pyarrow.uint8())
    assert not is_numeric(pyarrow.string())

    assert is_primitive(pyarrow.string())
    assert is_primitive(pyarrow.timestamp("us", tz="UTC"))
    assert not is_primitive(pyarrow.list_(pyarrow.int8()))
    assert not is_primitive(pyarrow.uint8())


@settings(deadline=None, max_examples=TEST_ITERATIONS)
@given(arrow_type=arrow_types)
def test_type_round_trip(arrow_type):
    lowered = lower_type(arrow_type)
    rebuilt = to_arrow_type(lowered)
    assert lower_type(rebuilt) == lowered
    assert rebuilt.num_fields == arrow_type.num_fields
    assert str(rebuilt) == str(arrow_type), f"{rebuilt} != {arrow_type}"


if __name__ == "__main__":  # pragma: no cover
    from tests.tools import run_tests

    run_tests()
