# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Join Filter Resolution

A join filter is evaluated against a row built from just the columns the
filter refers to, so the native engine is told which side of the join, and
which position on that side, each of those columns comes from.
"""

import logging
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from plover.config import LoweringConfig
from plover.exceptions import UnsupportedExpressionError
from plover.expression import collect_references
from plover.ir.nodes import UNRESOLVED_COLUMN_INDEX
from plover.ir.nodes import ColumnIndex
from plover.ir.nodes import JoinFilter
from plover.ir.nodes import JoinSide
from plover.ir.nodes import JoinType
from plover.ir.types import Field
from plover.ir.types import Schema
from plover.lowering.expressions import lower_expression
from plover.lowering.types import lower_type
from plover.models import Attribute
from plover.models import Node
from plover.models import resolved_column_name

logger = logging.getLogger(__name__)

# fmt:off
JOIN_TYPES: Dict[str, JoinType] = {
    "INNER": JoinType.INNER,
    "LEFT OUTER": JoinType.LEFT,
    "RIGHT OUTER": JoinType.RIGHT,
    "FULL OUTER": JoinType.FULL,
    "LEFT SEMI": JoinType.SEMI,
    "LEFT ANTI": JoinType.ANTI,
    "EXISTENCE": JoinType.EXISTENCE,
}
# fmt:on


def lower_join_type(join_type: str) -> JoinType:
    """Map a host join type, such as "LEFT OUTER", to the native join type."""
    native = JOIN_TYPES.get(join_type.upper())
    if native is None:
        raise UnsupportedExpressionError(message=f"Unsupported join type: {join_type}")
    return native


def _position(identity: str, attributes: Sequence[Attribute]) -> Optional[int]:
    for index, attribute in enumerate(attributes):
        if attribute.identity == identity:
            return index
    return None


def resolve_column_index(
    identity: str, left: Sequence[Attribute], right: Sequence[Attribute]
) -> ColumnIndex:
    """
    Find the side of the join, and the position on that side, of a column.

    Columns on neither side are not an error here, they are reported with an
    unresolved index and left to the host's own analysis to reject.
    """
    index = _position(identity, left)
    if index is not None:
        return ColumnIndex(JoinSide.LEFT, index)
    index = _position(identity, right)
    if index is not None:
        return ColumnIndex(JoinSide.RIGHT, index)
    logger.debug("Join filter column '%s' is on neither side of the join", identity)
    return ColumnIndex(JoinSide.UNRESOLVED, UNRESOLVED_COLUMN_INDEX)


def resolve_join_filter(
    predicate: Node,
    left: Sequence[Attribute],
    right: Sequence[Attribute],
    config: Optional[LoweringConfig] = None,
) -> JoinFilter:
    """
    Lower a join filter, and describe where each column it refers to comes from.

    Parameters:
        predicate: Node
            The filter, a boolean expression.
        left: Sequence[Attribute]
            The output columns of the left side of the join.
        right: Sequence[Attribute]
            The output columns of the right side of the join.
        config: LoweringConfig, optional
            Feature flags, read from the environment when not provided.

    Returns:
        JoinFilter: The lowered filter, the schema of the columns it refers to
            (in the order they are referred to) and the position of each of
            those columns.
    """
    references = collect_references(predicate)

    fields: List[Field] = []
    indices: List[ColumnIndex] = []
    for reference in references:
        fields.append(
            Field(
                name=resolved_column_name(reference.identity),
                data_type=lower_type(reference.type),
                nullable=reference.is_nullable,
            )
        )
        indices.append(resolve_column_index(reference.identity, left, right))

    return JoinFilter(
        expression=lower_expression(predicate, config),
        schema=Schema(fields=tuple(fields)),
        column_indices=tuple(indices),
    )
