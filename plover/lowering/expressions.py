# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Expression Lowering

Lowers host expression trees to the native IR, carving out the parts the
native engine can't evaluate so they can be evaluated by the host.

The approach is to keep as much of the expression native as possible:

- if every child of a node lowers, try to lower the node itself
- if exactly one child doesn't lower, lower that child on its own (which may
  mean handing it to the host), pre-lower its siblings, and try the node again
  with those results standing in for its children
- otherwise hand the node to the host, but bind every sub-expression that does
  lower as a parameter, so the host only sees the part it has to evaluate

Only the last step produces an OpaqueFallbackCall, so an unsupported leaf deep
in a tree is wrapped on its own and its ancestors stay native.
"""

import logging
from dataclasses import dataclass
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

import pyarrow

from plover.config import LoweringConfig
from plover.exceptions import UnsupportedAggregateError
from plover.exceptions import UnsupportedExpressionError
from plover.exceptions import UnsupportedTypeError
from plover.expression import NodeType
from plover.expression import format_expression
from plover.expression import get_all_nodes_of_type
from plover.ir.nodes import UNSUPPORTED_PRUNING_COLUMN_INDEX
from plover.ir.nodes import UNSUPPORTED_PRUNING_COLUMN_NAME
from plover.ir.nodes import Column
from plover.ir.nodes import Expr
from plover.ir.nodes import OpaqueFallbackCall
from plover.lowering.fallback import package
from plover.lowering.rules import LoweringContext
from plover.lowering.types import lower_type
from plover.models import Node

logger = logging.getLogger(__name__)

__all__ = ("Unsupported", "lower_expression", "lower_pruning_expression", "try_lower")


@dataclass(frozen=True)
class Unsupported:
    """The result of lowering a node which has no native equivalent."""

    node: Node
    reason: str


Lowered = Union[Expr, Unsupported]


def try_lower(node: Node, config: LoweringConfig, pruning: bool = False) -> Lowered:
    """
    Lower a node and all of its descendants with the rule table, without
    falling back to the host for any of it.
    """
    context = LoweringContext(config, pruning=pruning)
    try:
        return context.lower(node)
    except (UnsupportedExpressionError, UnsupportedTypeError) as err:
        return Unsupported(node, str(err))


def lower_expression(node: Node, config: Optional[LoweringConfig] = None) -> Expr:
    """
    Lower a host expression for native evaluation, handing the parts the native
    engine can't evaluate to the host.

    Parameters:
        node: Node
            The root of the host expression.
        config: LoweringConfig, optional
            Feature flags, read from the environment when not provided.

    Returns:
        Expr: The IR for the expression.

    Raises:
        FallbackPackagingError: Part of the expression can't be handed to the host either.
        UnsupportedTypeError: The type of the expression has no native equivalent.
        NumericOverflowError: A literal doesn't fit the native numeric width.
        UnsupportedAggregateError: An aggregate in the expression can't be lowered.
    """
    if config is None:
        config = LoweringConfig.from_environment()

    if node.node_type == NodeType.AGGREGATOR:
        # circular imports
        from plover.lowering.aggregates import lower_aggregate

        return lower_aggregate(node, config)

    lowered = _extract(node, config)
    if isinstance(lowered, Unsupported):
        logger.warning(
            "Expression '%s' will be evaluated by the host - %s",
            format_expression(node),
            lowered.reason,
        )
        return _lower_as_fallback(node, config)
    return lowered


def lower_pruning_expression(node: Node, config: Optional[LoweringConfig] = None) -> Expr:
    """
    Lower a predicate for evaluation against file and partition statistics.

    Columns are referenced by name and anything that can't be lowered is
    replaced with a column the pruning evaluator treats as unknown, so the
    predicate never fails to lower, it just selects less.
    """
    if config is None:
        config = LoweringConfig.from_environment()

    def _unknown(unsupported: Node) -> Expr:
        logger.debug("Pruning predicate '%s' is not supported", format_expression(unsupported))
        return Column(UNSUPPORTED_PRUNING_COLUMN_NAME, UNSUPPORTED_PRUNING_COLUMN_INDEX)

    context = LoweringContext(config, pruning=True, on_unsupported=_unknown)
    return context.lower(node)


def native_leaf(lowered: Expr, node: Node) -> Node:
    """A stand-in for a node which has already been lowered."""
    return Node(NodeType.NATIVE, wrapped=lowered, type=node.type, nullable=node.is_nullable)


def _extract(node: Node, config: LoweringConfig) -> Lowered:
    children = node.children
    attempts = [try_lower(child, config) for child in children]
    failures = sum(isinstance(attempt, Unsupported) for attempt in attempts)

    if failures == 0:
        return try_lower(node, config)
    if failures > 1:
        return Unsupported(node, f"{failures} of its inputs can't be evaluated natively")

    substituted: List[Node] = []
    for child, attempt in zip(children, attempts):
        if isinstance(attempt, Unsupported):
            try:
                attempt = lower_expression(child, config)
            except (UnsupportedExpressionError, UnsupportedTypeError) as err:
                return Unsupported(node, str(err))
        elif child.node_type == NodeType.LITERAL:
            # rules match on literal operands, leave them visible
            substituted.append(child)
            continue
        substituted.append(native_leaf(attempt, child))

    lowered = try_lower(node.with_children(substituted), config)
    if isinstance(lowered, Unsupported):
        return Unsupported(node, lowered.reason)
    return lowered


def _lower_as_fallback(node: Node, config: LoweringConfig) -> Expr:
    """
    Hand a node to the host, binding every sub-expression which can be lowered
    as a parameter of the call.

    Sub-expressions are bound top down, so the largest lowerable sub-trees are
    bound, and identical sub-trees share a parameter.
    """
    # the native aggregation framework has no way to call the host
    aggregates = get_all_nodes_of_type(node, (NodeType.AGGREGATOR,))
    if aggregates:
        raise UnsupportedAggregateError(
            message=f"Aggregate '{format_expression(aggregates[0])}' can't be evaluated by the host - {format_expression(node)}"
        )

    parameters: Dict[Expr, Node] = {}

    def _bind(candidate: Node) -> Node:
        if candidate.node_type == NodeType.LITERAL:
            return candidate
        # without a type there is nothing to describe the parameter with
        lowered = try_lower(candidate, config) if candidate.type is not None else None
        if lowered is None or isinstance(lowered, Unsupported):
            return candidate.with_children([_bind(child) for child in candidate.children])
        placeholder = parameters.get(lowered)
        if placeholder is None:
            placeholder = Node(
                NodeType.BOUND_PARAMETER,
                index=len(parameters),
                type=candidate.type,
                nullable=candidate.is_nullable,
            )
            parameters[lowered] = placeholder
        return placeholder

    fragment = node.with_children([_bind(child) for child in node.children])
    parameter_schema = pyarrow.schema(
        [
            pyarrow.field(f"_{placeholder.index}", placeholder.type, placeholder.is_nullable)
            for placeholder in parameters.values()
        ]
    )
    serialized = package(fragment, parameter_schema)

    return OpaqueFallbackCall(
        serialized=serialized,
        parameters=tuple(parameters.keys()),
        return_type=lower_type(node.type),
        return_nullable=node.is_nullable,
    )
