# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Type Bridge

Maps pyarrow types, as used by the host engine, to the type descriptors the
native engine understands, and back again.

Only the types the native engine can hold are mapped, anything else (unsigned
integers, large strings, intervals, non-microsecond timestamps and so on)
raises an UnsupportedTypeError.
"""

from typing import Dict
from typing import Iterable

import pyarrow

from plover.exceptions import UnsupportedTypeError
from plover.ir import types
from plover.ir.types import DecimalType
from plover.ir.types import Field
from plover.ir.types import ListType
from plover.ir.types import MapType
from plover.ir.types import PrimitiveKind
from plover.ir.types import PrimitiveType
from plover.ir.types import Schema
from plover.ir.types import StructType
from plover.ir.types import TypeDescriptor

_PRIMITIVES: Dict[pyarrow.DataType, PrimitiveType] = {
    pyarrow.null(): types.NULL,
    pyarrow.bool_(): types.BOOL,
    pyarrow.int8(): types.INT8,
    pyarrow.int16(): types.INT16,
    pyarrow.int32(): types.INT32,
    pyarrow.int64(): types.INT64,
    pyarrow.float32(): types.FLOAT32,
    pyarrow.float64(): types.FLOAT64,
    pyarrow.string(): types.UTF8,
    pyarrow.binary(): types.BINARY,
    pyarrow.date32(): types.DATE32,
}

_ARROW_PRIMITIVES: Dict[PrimitiveKind, pyarrow.DataType] = {
    descriptor.kind: arrow_type for arrow_type, descriptor in _PRIMITIVES.items()
}
_ARROW_PRIMITIVES[PrimitiveKind.TIMESTAMP_MICROSECOND] = pyarrow.timestamp("us")


def lower_type(data_type: pyarrow.DataType) -> TypeDescriptor:
    """
    Lower a pyarrow type to a native type descriptor.

    Parameters:
        data_type: pyarrow.DataType
            The host type.

    Returns:
        TypeDescriptor: The equivalent native type.

    Raises:
        UnsupportedTypeError: There is no native equivalent.
    """
    if not isinstance(data_type, pyarrow.DataType):
        raise UnsupportedTypeError(data_type)

    primitive = _PRIMITIVES.get(data_type)
    if primitive is not None:
        return primitive

    # the wire is timezone agnostic, values are always UTC microseconds
    if pyarrow.types.is_timestamp(data_type) and data_type.unit == "us":
        return types.TIMESTAMP_MICROSECOND
    if pyarrow.types.is_decimal128(data_type):
        return DecimalType(precision=max(data_type.precision, 1), scale=data_type.scale)
    if pyarrow.types.is_map(data_type):
        return MapType(
            key_type=lower_type(data_type.key_type),
            value_type=lower_type(data_type.item_type),
            value_nullable=data_type.item_field.nullable,
        )
    if pyarrow.types.is_list(data_type):
        return ListType(
            element_type=lower_type(data_type.value_type),
            element_nullable=data_type.value_field.nullable,
        )
    if pyarrow.types.is_struct(data_type):
        return StructType(
            fields=tuple(lower_field(data_type.field(i)) for i in range(data_type.num_fields))
        )

    raise UnsupportedTypeError(data_type)


def lower_field(field: pyarrow.Field) -> Field:
    return Field(name=field.name, data_type=lower_type(field.type), nullable=field.nullable)


def lower_schema(schema: Iterable[pyarrow.Field]) -> Schema:
    """Lower a pyarrow schema, or any sequence of pyarrow fields, keeping the field order."""
    return Schema(fields=tuple(lower_field(field) for field in schema))


def to_arrow_type(descriptor: TypeDescriptor) -> pyarrow.DataType:
    """
    Rebuild the pyarrow type for a native type descriptor.

    Timestamps come back without a timezone, the native engine does not carry one.
    """
    if isinstance(descriptor, PrimitiveType):
        return _ARROW_PRIMITIVES[descriptor.kind]
    if isinstance(descriptor, DecimalType):
        return pyarrow.decimal128(descriptor.precision, descriptor.scale)
    if isinstance(descriptor, ListType):
        return pyarrow.list_(
            pyarrow.field("item", to_arrow_type(descriptor.element_type), descriptor.element_nullable)
        )
    if isinstance(descriptor, MapType):
        return pyarrow.map_(
            pyarrow.field("key", to_arrow_type(descriptor.key_type), False),
            pyarrow.field("value", to_arrow_type(descriptor.value_type), descriptor.value_nullable),
        )
    if isinstance(descriptor, StructType):
        return pyarrow.struct([to_arrow_field(field) for field in descriptor.fields])
    raise UnsupportedTypeError(descriptor)


def to_arrow_field(field: Field) -> pyarrow.Field:
    return pyarrow.field(field.name, to_arrow_type(field.data_type), field.nullable)


def to_arrow_schema(schema: Schema) -> pyarrow.Schema:
    return pyarrow.schema([to_arrow_field(field) for field in schema.fields])


def is_numeric(data_type: pyarrow.DataType) -> bool:
    return (
        pyarrow.types.is_signed_integer(data_type)
        or pyarrow.types.is_floating(data_type)
        or pyarrow.types.is_decimal128(data_type)
    ) and not pyarrow.types.is_float16(data_type)


def is_primitive(data_type: pyarrow.DataType) -> bool:
    """Can values of this type be lowered without nesting?"""
    return not pyarrow.types.is_nested(data_type) and _is_lowerable(data_type)


def _is_lowerable(data_type: pyarrow.DataType) -> bool:
    try:
        lower_type(data_type)
    except UnsupportedTypeError:
        return False
    return True
