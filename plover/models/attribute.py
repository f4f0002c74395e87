# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

from dataclasses import dataclass

import pyarrow


def resolved_column_name(identity) -> str:
    """The wire name of a column, derived from its unique identifier."""
    return f"#{identity}"


@dataclass(frozen=True)
class Attribute:
    """
    An output column of a relation, as seen by the host engine.

    Parameters:
        name: str
            The display name of the column, this is not unique.
        identity: str
            The unique identifier of the column, this is what references bind to.
        type: pyarrow.DataType
            The type of the values in the column.
        nullable: bool
            Whether the column can hold nulls.
    """

    name: str
    identity: str
    type: pyarrow.DataType
    nullable: bool = True

    @property
    def resolved_name(self) -> str:
        return resolved_column_name(self.identity)
