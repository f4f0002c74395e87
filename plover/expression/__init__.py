# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Expressions describe a calculation or evaluation of some sort.

It is defined as an expression tree of binary and unary operators, and functions.

Expression trees are produced by the host engine, this package only walks and
describes them, evaluation is the job of the native engine (or the host, for
the fragments handed back to it).
"""

from enum import Enum
from typing import Callable
from typing import List
from typing import Optional

from plover.models import Node

from .formatter import format_expression

# These are bit-masks
LOGICAL_TYPE: int = int("00010000", 2)
INTERNAL_TYPE: int = int("00100000", 2)

__all__ = (
    "NodeType",
    "collect_references",
    "contains_node",
    "format_expression",
    "get_all_nodes_of_type",
)


class NodeType(int, Enum):
    """
    The types of Nodes we will see.

    The second nibble (4 bits) is a category marker, the first nibble is just an
    enumeration of the values in that category.

    This allows us to use bitmasks to add a category to the enumerations.
    """

    # fmt:off

    # 00000000
    UNKNOWN = 0

    # LOGICAL OPERATORS
    # 0001 nnnn
    AND = 17  # 0001 0001
    OR = 18  # 0001 0010
    XOR = 19  # 0001 0011
    NOT = 20  # 0001 0100

    # INTERAL IDENTIFIERS
    # 0010 nnnn
    COMPARISON_OPERATOR = 34  # 0010 0010
    BINARY_OPERATOR = 35  # 0010 0011
    UNARY_OPERATOR = 36  # 0010 0100
    FUNCTION = 37  # 0010 0101
    IDENTIFIER = 38  # 0010 0110
    SUBQUERY = 39  # 0010 0111
    NESTED = 40  # 0010 1000
    AGGREGATOR = 41  # 0010 1001
    LITERAL = 42  # 0010 1010
    NATIVE = 44  # 0010 1100 - already lowered, carries its IR
    BOUND_PARAMETER = 45  # 0010 1101 - placeholder in host fallback fragments

    # fmt:on


def get_all_nodes_of_type(root, select_nodes: tuple) -> list:
    """
    Walk an expression tree collecting all nodes of a specified type.

    Nodes are returned in the order they are met reading the expression from
    left to right, parents before their children.
    """
    if root is None:
        return []
    if not isinstance(root, (set, tuple, list)):
        root = [root]

    # Prepare to collect all nodes if select_nodes is ('*',), else convert to a set
    collect_all = "*" in select_nodes
    select_nodes_set = set(select_nodes) if not collect_all else set()

    identifiers = []
    stack = list(reversed(root))
    appender = stack.append

    while stack:
        node = stack.pop()

        # Check whether to collect the node
        if collect_all or node.node_type in select_nodes_set:
            identifiers.append(node)

        # Append parameters if they are valid nodes
        if node.parameters:
            stack.extend([param for param in reversed(node.parameters) if isinstance(param, Node)])

        # Append child nodes
        child = node.right
        if child:
            appender(child)
        child = node.centre
        if child:
            appender(child)
        child = node.left
        if child:
            appender(child)

    return identifiers


def contains_node(root: Node, predicate: Callable[[Node], bool]) -> bool:
    """Does any node in the tree, including the root, satisfy `predicate`?"""
    return any(predicate(node) for node in get_all_nodes_of_type(root, ("*",)))


def collect_references(root: Node, *, unique: bool = True) -> List[Node]:
    """
    The column references in an expression, in encounter order.

    When `unique` is set only the first reference to each column identity is kept.
    """
    references = get_all_nodes_of_type(root, (NodeType.IDENTIFIER,))
    if not unique:
        return references
    seen: set = set()
    result = []
    for reference in references:
        key: Optional[str] = reference.identity or reference.value
        if key not in seen:
            seen.add(key)
            result.append(reference)
    return result
