# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Aggregate Lowering

The native engine's aggregation framework has no way to call back into the
host, so unlike scalar expressions an aggregate either lowers completely or
not at all. The operands of an aggregate are scalar expressions and are
lowered as such, host fallbacks included.
"""

import logging
from functools import reduce
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

import pyarrow

from plover.config import LoweringConfig
from plover.exceptions import FallbackPackagingError
from plover.exceptions import UnsupportedAggregateError
from plover.exceptions import UnsupportedExpressionError
from plover.exceptions import UnsupportedTypeError
from plover.expression import NodeType
from plover.expression import format_expression
from plover.ir.nodes import AggregateCall
from plover.ir.nodes import AggregateFunction
from plover.lowering.expressions import lower_expression
from plover.lowering.rules import literal_node
from plover.lowering.types import is_numeric
from plover.lowering.types import is_primitive
from plover.models import Node

logger = logging.getLogger(__name__)

BRICKHOUSE_COLLECT_CLASS: str = "brickhouse.udf.collect.CollectUDAF"
BRICKHOUSE_COMBINE_UNIQUE_CLASS: str = "brickhouse.udf.collect.CombineUniqueUDAF"


def _single_operand(node: Node) -> Optional[Node]:
    parameters = node.parameters or []
    if len(parameters) != 1:
        return None
    return parameters[0]


def _simple(
    function: AggregateFunction, accepts: Optional[Callable[[Node], bool]] = None
) -> Callable:
    def _lower(node: Node, config: LoweringConfig) -> Optional[AggregateCall]:
        operand = _single_operand(node)
        if operand is None or (accepts is not None and not accepts(node)):
            return None
        return AggregateCall(function, (lower_expression(operand, config),))

    return _lower


def _returns_numeric(node: Node) -> bool:
    return isinstance(node.type, pyarrow.DataType) and is_numeric(node.type)


def _operand_is_primitive(node: Node) -> bool:
    operand = node.parameters[0]
    return isinstance(operand.type, pyarrow.DataType) and is_primitive(operand.type)


def _count_expression(operands: List[Node]) -> Node:
    """
    The value counted for a multi-operand COUNT, null when any operand is null,
    otherwise 1.
    """
    nullable = [operand for operand in operands if operand.is_nullable]
    any_null = reduce(
        lambda left, right: Node(
            NodeType.OR, left=left, right=right, type=pyarrow.bool_(), nullable=False
        ),
        [
            Node(
                NodeType.UNARY_OPERATOR,
                value="IsNull",
                centre=operand,
                type=pyarrow.bool_(),
                nullable=False,
            )
            for operand in nullable
        ],
    )
    return Node(
        NodeType.FUNCTION,
        value="IF",
        parameters=[any_null, literal_node(None, pyarrow.int32()), literal_node(1, pyarrow.int32())],
        type=pyarrow.int32(),
        nullable=True,
    )


def _lower_count(node: Node, config: LoweringConfig) -> AggregateCall:
    operands = node.parameters or []
    if not any(operand.is_nullable for operand in operands):
        # nothing to skip, every row is counted
        counted = literal_node(1, pyarrow.int32())
    elif len(operands) == 1:
        counted = operands[0]
    else:
        counted = _count_expression(operands)
    return AggregateCall(AggregateFunction.COUNT, (lower_expression(counted, config),))


def _lower_first(node: Node, config: LoweringConfig) -> Optional[AggregateCall]:
    operand = _single_operand(node)
    if operand is None:
        return None
    function = AggregateFunction.FIRST_IGNORES_NULL if node.ignore_nulls else AggregateFunction.FIRST
    return AggregateCall(function, (lower_expression(operand, config),))


def _lower_brickhouse_collect(node: Node, config: LoweringConfig) -> Optional[AggregateCall]:
    if not config.brickhouse_udfs:
        return None
    operand = _single_operand(node)
    if operand is None or not isinstance(operand.type, pyarrow.DataType):
        return None
    if not pyarrow.types.is_list(operand.type):
        return None
    return AggregateCall(AggregateFunction.BRICKHOUSE_COLLECT, (lower_expression(operand, config),))


def _lower_brickhouse_combine_unique(node: Node, config: LoweringConfig) -> Optional[AggregateCall]:
    if not config.brickhouse_udfs or not node.parameters:
        return None
    operand = node.parameters[0]
    return AggregateCall(
        AggregateFunction.BRICKHOUSE_COMBINE_UNIQUE, (lower_expression(operand, config),)
    )


# fmt:off
AGGREGATE_RULES: Dict[str, Callable] = {
    "MAX": _simple(AggregateFunction.MAX),
    "MIN": _simple(AggregateFunction.MIN),
    "SUM": _simple(AggregateFunction.SUM, _returns_numeric),
    "AVG": _simple(AggregateFunction.AVG, _returns_numeric),
    "COUNT": _lower_count,
    "FIRST": _lower_first,
    "COLLECT_LIST": _simple(AggregateFunction.COLLECT_LIST, _operand_is_primitive),
    "COLLECT_SET": _simple(AggregateFunction.COLLECT_SET, _operand_is_primitive),
}

UDAF_RULES: Dict[str, Callable] = {
    BRICKHOUSE_COLLECT_CLASS: _lower_brickhouse_collect,
    BRICKHOUSE_COMBINE_UNIQUE_CLASS: _lower_brickhouse_combine_unique,
}
# fmt:on


def lower_aggregate(node: Node, config: Optional[LoweringConfig] = None) -> AggregateCall:
    """
    Lower an aggregate function call.

    Parameters:
        node: Node
            An AGGREGATOR node.
        config: LoweringConfig, optional
            Feature flags, read from the environment when not provided.

    Returns:
        AggregateCall: The native aggregate.

    Raises:
        UnsupportedAggregateError: The aggregate, or the type of its operand, is
            not supported by the native engine.
    """
    if config is None:
        config = LoweringConfig.from_environment()

    if node.node_type != NodeType.AGGREGATOR:
        raise UnsupportedAggregateError(format_expression(node))
    if node.filter is not None:
        raise UnsupportedAggregateError(
            message=f"Aggregates with a FILTER clause are not supported natively - {format_expression(node)}"
        )

    rule = UDAF_RULES.get(node.udf) if node.udf else AGGREGATE_RULES.get(node.value)
    try:
        lowered = rule(node, config) if rule is not None else None
    except (UnsupportedTypeError, UnsupportedExpressionError, FallbackPackagingError) as err:
        # the operand has no native form and can't be handed to the host either
        raise UnsupportedAggregateError(
            aggregate=format_expression(node),
            message=f"Unable to lower the operands of aggregate '{format_expression(node)}' - {err}",
        ) from err
    if lowered is None:
        raise UnsupportedAggregateError(format_expression(node))

    logger.debug("Lowered aggregate '%s' to %s", format_expression(node), lowered.function.value)
    return lowered
