# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Type descriptors understood by the native engine.

Descriptors are immutable and compare structurally, a descriptor built twice
from the same host type is equal (and hashes equal) to the first.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
from typing import Union


class PrimitiveKind(str, Enum):
    NULL = "NULL"
    BOOL = "BOOL"
    INT8 = "INT8"
    INT16 = "INT16"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT32 = "FLOAT32"
    FLOAT64 = "FLOAT64"
    UTF8 = "UTF8"
    BINARY = "BINARY"
    DATE32 = "DATE32"
    TIMESTAMP_MICROSECOND = "TIMESTAMP_MICROSECOND"


INTEGER_KINDS = (PrimitiveKind.INT8, PrimitiveKind.INT16, PrimitiveKind.INT32, PrimitiveKind.INT64)
FLOAT_KINDS = (PrimitiveKind.FLOAT32, PrimitiveKind.FLOAT64)


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind


@dataclass(frozen=True)
class DecimalType:
    precision: int
    scale: int


@dataclass(frozen=True)
class ListType:
    element_type: "TypeDescriptor"
    element_nullable: bool = True


@dataclass(frozen=True)
class MapType:
    key_type: "TypeDescriptor"
    value_type: "TypeDescriptor"
    value_nullable: bool = True


@dataclass(frozen=True)
class Field:
    name: str
    data_type: "TypeDescriptor"
    nullable: bool = True


@dataclass(frozen=True)
class StructType:
    # order is significant, it must match the host column order
    fields: Tuple[Field, ...] = ()


@dataclass(frozen=True)
class Schema:
    fields: Tuple[Field, ...] = ()

    def __len__(self) -> int:
        return len(self.fields)


TypeDescriptor = Union[PrimitiveType, DecimalType, ListType, MapType, StructType]

NULL = PrimitiveType(PrimitiveKind.NULL)
BOOL = PrimitiveType(PrimitiveKind.BOOL)
INT8 = PrimitiveType(PrimitiveKind.INT8)
INT16 = PrimitiveType(PrimitiveKind.INT16)
INT32 = PrimitiveType(PrimitiveKind.INT32)
INT64 = PrimitiveType(PrimitiveKind.INT64)
FLOAT32 = PrimitiveType(PrimitiveKind.FLOAT32)
FLOAT64 = PrimitiveType(PrimitiveKind.FLOAT64)
UTF8 = PrimitiveType(PrimitiveKind.UTF8)
BINARY = PrimitiveType(PrimitiveKind.BINARY)
DATE32 = PrimitiveType(PrimitiveKind.DATE32)
TIMESTAMP_MICROSECOND = PrimitiveType(PrimitiveKind.TIMESTAMP_MICROSECOND)
