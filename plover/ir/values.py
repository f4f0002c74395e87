# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from dataclasses import dataclass
from typing import Any

from plover.ir.types import TypeDescriptor


@dataclass(frozen=True)
class ScalarValue:
    """
    A constant value and the descriptor of its type.

    A value of None is the null state, the descriptor is always present so the
    native engine can allocate a correctly typed null.

    Encodings of `value` by descriptor:
        - integers, floats, booleans, strings and bytes as themselves
        - DATE32 as days since the unix epoch
        - TIMESTAMP_MICROSECOND as microseconds since the unix epoch
        - DecimalType as the unscaled integer
        - ListType and StructType as a tuple of child ScalarValues
        - MapType as a tuple of (key, value) ScalarValue pairs
    """

    data_type: TypeDescriptor
    value: Any = None

    @property
    def is_null(self) -> bool:
        return self.value is None
