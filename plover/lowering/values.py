# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Value Encoder

Encodes host literal values as native scalar values. The accepted host values
are the python objects pyarrow produces from `as_py()` for the matching type,
pyarrow scalars themselves, and numpy scalars.
"""

import datetime
import decimal
from typing import Any

import numpy
import pyarrow

from plover.exceptions import IncorrectTypeError
from plover.exceptions import NumericOverflowError
from plover.ir.types import DecimalType
from plover.ir.types import ListType
from plover.ir.types import MapType
from plover.ir.types import PrimitiveKind
from plover.ir.types import PrimitiveType
from plover.ir.types import StructType
from plover.ir.types import TypeDescriptor
from plover.ir.values import ScalarValue
from plover.lowering.types import lower_type

EPOCH_DATE = datetime.date(1970, 1, 1)
EPOCH_DATETIME = datetime.datetime(1970, 1, 1)
EPOCH_DATETIME_UTC = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

# the native engine holds decimal values in a signed 64 bit integer
DECIMAL_UNSCALED_MIN: int = -(2**63)
DECIMAL_UNSCALED_MAX: int = 2**63 - 1

INTEGER_RANGES = {
    PrimitiveKind.INT8: (-(2**7), 2**7 - 1),
    PrimitiveKind.INT16: (-(2**15), 2**15 - 1),
    PrimitiveKind.INT32: (-(2**31), 2**31 - 1),
    PrimitiveKind.INT64: (-(2**63), 2**63 - 1),
}


def lower_value(value: Any, data_type: pyarrow.DataType) -> ScalarValue:
    """
    Encode a literal value of a host type as a native scalar value.

    Parameters:
        value: Any
            The value, None is the null of `data_type`.
        data_type: pyarrow.DataType
            The host type of the value.

    Returns:
        ScalarValue: The encoded value, always carrying the lowered type.

    Raises:
        UnsupportedTypeError: The type has no native equivalent.
        NumericOverflowError: The value does not fit the native width.
        IncorrectTypeError: The value is not a value of `data_type`.
    """
    return _encode(value, data_type, lower_type(data_type))


def _unwrap(value: Any) -> Any:
    if isinstance(value, pyarrow.Scalar):
        return value.as_py()
    if isinstance(value, numpy.generic):
        if isinstance(value, numpy.datetime64):
            return value.astype("datetime64[us]").item()
        return value.item()
    return value


def _encode(value: Any, data_type: pyarrow.DataType, descriptor: TypeDescriptor) -> ScalarValue:
    value = _unwrap(value)
    if value is None:
        return ScalarValue(descriptor)

    if isinstance(descriptor, PrimitiveType):
        return ScalarValue(descriptor, _encode_primitive(value, descriptor))
    if isinstance(descriptor, DecimalType):
        return ScalarValue(descriptor, _encode_decimal(value, descriptor))
    if isinstance(descriptor, ListType):
        if not isinstance(value, (list, tuple, numpy.ndarray)):
            raise IncorrectTypeError(f"Expected a list value for '{data_type}', got '{value!r}'.")
        element_type = data_type.value_type
        return ScalarValue(
            descriptor,
            tuple(_encode(item, element_type, descriptor.element_type) for item in value),
        )
    if isinstance(descriptor, MapType):
        pairs = value.items() if isinstance(value, dict) else value
        return ScalarValue(
            descriptor,
            tuple(
                (
                    _encode(key, data_type.key_type, descriptor.key_type),
                    _encode(item, data_type.item_type, descriptor.value_type),
                )
                for key, item in pairs
            ),
        )
    if isinstance(descriptor, StructType):
        if not isinstance(value, dict):
            raise IncorrectTypeError(f"Expected a struct value for '{data_type}', got '{value!r}'.")
        children = []
        for index, field in enumerate(descriptor.fields):
            arrow_field = data_type.field(index)
            children.append(_encode(value.get(field.name), arrow_field.type, field.data_type))
        return ScalarValue(descriptor, tuple(children))

    raise IncorrectTypeError(f"Unable to encode '{value!r}' as '{data_type}'.")


def _encode_primitive(value: Any, descriptor: PrimitiveType) -> Any:
    kind = descriptor.kind

    if kind == PrimitiveKind.BOOL:
        if not isinstance(value, bool):
            raise IncorrectTypeError(f"Expected a boolean value, got '{value!r}'.")
        return value
    if kind in INTEGER_RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise IncorrectTypeError(f"Expected an integer value, got '{value!r}'.")
        low, high = INTEGER_RANGES[kind]
        if not low <= value <= high:
            raise NumericOverflowError(value, kind.value)
        return value
    if kind in (PrimitiveKind.FLOAT32, PrimitiveKind.FLOAT64):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise IncorrectTypeError(f"Expected a floating point value, got '{value!r}'.")
        return float(value)
    if kind == PrimitiveKind.UTF8:
        if not isinstance(value, str):
            raise IncorrectTypeError(f"Expected a string value, got '{value!r}'.")
        return value
    if kind == PrimitiveKind.BINARY:
        if isinstance(value, str):
            return value.encode()
        if not isinstance(value, (bytes, bytearray)):
            raise IncorrectTypeError(f"Expected a binary value, got '{value!r}'.")
        return bytes(value)
    if kind == PrimitiveKind.DATE32:
        if isinstance(value, datetime.datetime):
            value = value.date()
        if not isinstance(value, datetime.date):
            raise IncorrectTypeError(f"Expected a date value, got '{value!r}'.")
        return (value - EPOCH_DATE).days
    if kind == PrimitiveKind.TIMESTAMP_MICROSECOND:
        if isinstance(value, datetime.datetime):
            epoch = EPOCH_DATETIME if value.tzinfo is None else EPOCH_DATETIME_UTC
            return (value - epoch) // datetime.timedelta(microseconds=1)
        if isinstance(value, datetime.date):
            return (value - EPOCH_DATE).days * 86_400_000_000
        raise IncorrectTypeError(f"Expected a timestamp value, got '{value!r}'.")
    if kind == PrimitiveKind.NULL:
        raise IncorrectTypeError(f"Only null can be encoded as a null type, got '{value!r}'.")

    raise IncorrectTypeError(f"Unable to encode '{value!r}' as '{kind.value}'.")


def _encode_decimal(value: Any, descriptor: DecimalType) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, decimal.Decimal)):
        raise IncorrectTypeError(f"Expected a decimal value, got '{value!r}'.")
    if not isinstance(value, decimal.Decimal):
        value = decimal.Decimal(str(value))
    if not value.is_finite():
        raise IncorrectTypeError(f"Decimal values must be finite, got '{value}'.")
    with decimal.localcontext() as context:
        context.prec = 80
        unscaled = int(value.scaleb(descriptor.scale).to_integral_value(decimal.ROUND_HALF_UP))
    if not DECIMAL_UNSCALED_MIN <= unscaled <= DECIMAL_UNSCALED_MAX:
        raise NumericOverflowError(value, f"DECIMAL({descriptor.precision},{descriptor.scale})")
    return unscaled
