# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

import pyarrow


def _format_literal(root) -> str:
    literal_type = root.type
    value = root.value
    if value is None:
        return "null"
    if not isinstance(literal_type, pyarrow.DataType):
        if isinstance(value, str):
            return "'" + value.replace("'", "''") + "'"
        return str(value)
    if pyarrow.types.is_null(literal_type):
        return "null"
    if pyarrow.types.is_string(literal_type):
        return "'" + value.replace("'", "''") + "'"
    if pyarrow.types.is_timestamp(literal_type) or pyarrow.types.is_date(literal_type):
        return "'" + str(value) + "'"
    if pyarrow.types.is_boolean(literal_type):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (list, tuple)):
        return "(" + ", ".join("null" if v is None else repr(v) for v in value) + ")"
    return str(value)


def format_expression(root) -> str:
    # circular imports
    from . import INTERNAL_TYPE
    from . import NodeType

    if root is None:
        return "null"

    if isinstance(root, list):
        return [format_expression(item) for item in root]

    node_type = root.node_type
    _map: dict = {}

    # LITERAL TYPES
    if node_type == NodeType.LITERAL:
        return _format_literal(root)
    # INTERAL IDENTIFIERS
    if node_type & INTERNAL_TYPE == INTERNAL_TYPE:
        if node_type in (NodeType.FUNCTION, NodeType.AGGREGATOR):
            name = root.udf or root.value
            if root.value == "CASE":
                params = [format_expression(a) for a in root.parameters]
                pairs = zip(params[0::2], params[1::2])
                otherwise = f"ELSE {params[-1]} " if len(params) % 2 else ""
                return "CASE " + "".join([f"WHEN {c} THEN {v} " for c, v in pairs]) + otherwise + "END"
            if root.value in ("CAST", "TRY_CAST"):
                return f"{root.value}({format_expression(root.parameters[0])} AS {root.type})"
            return f"{name.upper()}({', '.join([format_expression(e) for e in root.parameters or []])})"
        if node_type == NodeType.BINARY_OPERATOR:
            _map = {
                "StringConcat": "||",
                "Plus": "+",
                "Minus": "-",
                "Multiply": "*",
                "Divide": "/",
                "Modulo": "%",
                "BitwiseOr": "|",
                "BitwiseAnd": "&",
                "ShiftLeft": "<<",
                "ShiftRight": ">>",
            }
            return f"{format_expression(root.left)} {_map.get(root.value, root.value).upper()} {format_expression(root.right)}"
        if node_type == NodeType.SUBQUERY:
            return "<SUBQUERY>"
        if node_type == NodeType.NATIVE:
            return "<native>"
        if node_type == NodeType.BOUND_PARAMETER:
            return f"${root.index}"
    if node_type == NodeType.COMPARISON_OPERATOR:
        _map = {
            "Eq": "=",
            "Lt": "<",
            "Gt": ">",
            "NotEq": "!=",
            "LtEq": "<=",
            "GtEq": ">=",
            "Like": "LIKE",
            "NotLike": "NOT LIKE",
            "ILike": "ILIKE",
            "NotILike": "NOT ILIKE",
            "InList": "IN",
            "NotInList": "NOT IN",
        }
        if root.value in ("InList", "NotInList") and root.right is None:
            items = ", ".join(format_expression(item) for item in root.parameters or [])
            return f"{format_expression(root.left)} {_map[root.value]} ({items})"
        return f"{format_expression(root.left)} {_map.get(root.value, root.value).upper()} {format_expression(root.right)}"
    if node_type == NodeType.UNARY_OPERATOR:
        _map = {"IsNull": "%s IS NULL", "IsNotNull": "%s IS NOT NULL", "Negative": "-%s"}
        return _map.get(root.value, root.value + "(%s)").replace(
            "%s", format_expression(root.centre)
        )
    if node_type == NodeType.NOT:
        return f"NOT {format_expression(root.centre)}"
    if node_type in (NodeType.AND, NodeType.OR, NodeType.XOR):
        _map = {
            NodeType.AND: "AND",
            NodeType.OR: "OR",
            NodeType.XOR: "XOR",
        }  # type:ignore
        return f"{format_expression(root.left)} {_map[node_type]} {format_expression(root.right)}"
    if node_type == NodeType.NESTED:
        return f"({format_expression(root.centre)})"
    if node_type == NodeType.IDENTIFIER:
        return root.value
    return str(root.value)
