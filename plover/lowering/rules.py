# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The per-node lowering rules.

Each rule takes a host node and a LoweringContext and returns the IR for the
node, or None when the node is not in a shape the native engine can evaluate.
Rules lower their children through the context, so a child with no rule is
handed to the context's unsupported-node handler, which either raises (normal
lowering) or substitutes a placeholder (pruning).

Rules are chosen by node type; FUNCTION nodes are chosen by function name, or
by the implementing class for user-defined functions.
"""

import dataclasses
import decimal
import logging
import numbers
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

import pyarrow

from plover.config import LoweringConfig
from plover.exceptions import UnsupportedExpressionError
from plover.exceptions import UnsupportedTypeError
from plover.expression import NodeType
from plover.expression import contains_node
from plover.expression import format_expression
from plover.ir import types as ir_types
from plover.ir.nodes import BinaryExpr
from plover.ir.nodes import BinaryOperator
from plover.ir.nodes import BoundReference
from plover.ir.nodes import Case
from plover.ir.nodes import Cast
from plover.ir.nodes import Column
from plover.ir.nodes import Expr
from plover.ir.nodes import GetIndexedField
from plover.ir.nodes import GetMapValue
from plover.ir.nodes import InList
from plover.ir.nodes import IsNotNull
from plover.ir.nodes import IsNull
from plover.ir.nodes import Like
from plover.ir.nodes import Literal
from plover.ir.nodes import NamedStruct
from plover.ir.nodes import OpaqueFallbackCall
from plover.ir.nodes import Not
from plover.ir.nodes import RowNumber
from plover.ir.nodes import ScalarFunction
from plover.ir.nodes import ScalarFunctionCall
from plover.ir.nodes import ScalarSubqueryWrapper
from plover.ir.nodes import ShortCircuitAnd
from plover.ir.nodes import ShortCircuitOr
from plover.ir.nodes import StringContains
from plover.ir.nodes import StringEndsWith
from plover.ir.nodes import StringStartsWith
from plover.ir.nodes import TryCast
from plover.ir.nodes import UnaryExpr
from plover.ir.nodes import UnaryOperator
from plover.ir.values import ScalarValue
from plover.lowering.fallback import package_subquery
from plover.lowering.types import lower_type
from plover.lowering.values import lower_value
from plover.models import Node
from plover.models import resolved_column_name

logger = logging.getLogger(__name__)

UDF_JSON_CLASS: str = "org.apache.hadoop.hive.ql.udf.UDFJson"
BRICKHOUSE_ARRAY_UNION_CLASS: str = "brickhouse.udf.collect.ArrayUnionUDF"
# hash functions are only lowered when they use the native engine's seed
NATIVE_HASH_SEED: int = 42
LIKE_ESCAPE_CHARACTER: str = "\\"


def _raise_unsupported(node: Node) -> Expr:
    raise UnsupportedExpressionError(format_expression(node))


class LoweringContext:
    """
    The settings for a single lowering pass.

    Parameters:
        config: LoweringConfig
            Feature flags for the optional native functions.
        pruning: bool
            Resolve columns by their declared name, for evaluating predicates
            against file and partition statistics.
        on_unsupported: Callable
            Called with a node no rule can lower, returns the IR to use in its
            place. The default raises UnsupportedExpressionError.
    """

    __slots__ = ("config", "pruning", "on_unsupported")

    def __init__(
        self,
        config: LoweringConfig,
        pruning: bool = False,
        on_unsupported: Callable[[Node], Expr] = _raise_unsupported,
    ):
        self.config = config
        self.pruning = pruning
        self.on_unsupported = on_unsupported

    def lower(self, node: Node) -> Expr:
        return convert_with_fallback(node, self)

    def lower_all(self, nodes: List[Node]) -> tuple:
        return tuple(self.lower(node) for node in nodes or [])


def convert_with_fallback(node: Node, context: LoweringContext) -> Expr:
    """
    Lower a node with the rule table, nodes with no rule are handed to the
    context's unsupported-node handler.
    """
    rule = find_rule(node)
    lowered = None
    if rule is not None:
        try:
            lowered = rule(node, context)
        except UnsupportedTypeError as err:
            logger.debug("Unable to lower '%s' - %s", format_expression(node), err)
            lowered = None
    if lowered is None:
        return context.on_unsupported(node)
    return lowered


def find_rule(node: Node) -> Optional[Callable]:
    if node.node_type == NodeType.FUNCTION:
        if node.udf:
            return UDF_RULES.get(node.udf)
        return FUNCTION_RULES.get(node.value)
    if node.node_type in (NodeType.COMPARISON_OPERATOR, NodeType.BINARY_OPERATOR):
        return OPERATOR_RULES.get(node.value)
    if node.node_type == NodeType.UNARY_OPERATOR:
        return UNARY_RULES.get(node.value)
    return NODE_RULES.get(node.node_type)


# ======================== Helpers ========================


def is_literal(node: Optional[Node]) -> bool:
    return node is not None and node.node_type == NodeType.LITERAL


def parameters_of(node: Node, count: int) -> Optional[List[Node]]:
    """The parameters of a function node, or None when there are not exactly `count`."""
    parameters = node.parameters or []
    if len(parameters) != count:
        return None
    return parameters


def _is_type(data_type, check) -> bool:
    return isinstance(data_type, pyarrow.DataType) and check(data_type)


def _is_decimal(data_type) -> bool:
    return _is_type(data_type, pyarrow.types.is_decimal128)


def _is_timestamp(data_type) -> bool:
    return _is_type(data_type, pyarrow.types.is_timestamp)


def _is_string(data_type) -> bool:
    return _is_type(data_type, pyarrow.types.is_string)


def literal_node(value, data_type: pyarrow.DataType) -> Node:
    return Node(NodeType.LITERAL, value=value, type=data_type, nullable=value is None)


def cast_node(node: Node, data_type: pyarrow.DataType) -> Node:
    return Node(
        NodeType.FUNCTION,
        value="CAST",
        parameters=[node],
        type=data_type,
        nullable=node.is_nullable,
    )


def cast_if_necessary(node: Node, data_type: pyarrow.DataType) -> Node:
    if node.type == data_type:
        return node
    return cast_node(node, data_type)


def unpack_binary_cast(node: Node) -> Node:
    if node.node_type == NodeType.FUNCTION and node.value == "CAST" and node.udf is None:
        if _is_type(node.type, pyarrow.types.is_binary):
            return node.parameters[0]
    return node


def build_binary(context, op: BinaryOperator, left: Node, right: Node) -> BinaryExpr:
    return BinaryExpr(op, context.lower(left), context.lower(right))


def build_function(context, function: ScalarFunction, args, data_type) -> ScalarFunctionCall:
    return ScalarFunctionCall(
        function=function,
        name=function.value,
        args=context.lower_all(args),
        return_type=lower_type(data_type),
    )


def build_ext_function(context, name: str, args, data_type) -> ScalarFunctionCall:
    """Call one of the native engine's extension functions, these are resolved by name."""
    return ScalarFunctionCall(
        function=ScalarFunction.EXTENSION,
        name=name,
        args=context.lower_all(args),
        return_type=lower_type(data_type),
    )


# ======================== Leaves ========================


def _lower_literal(node: Node, context: LoweringContext) -> Expr:
    if node.value is None and _is_type(node.type, pyarrow.types.is_list):
        # the native engine can't build a typed null list, cast a plain null instead
        return TryCast(Literal(ScalarValue(ir_types.NULL)), lower_type(node.type))
    return Literal(lower_value(node.value, node.type))


def _lower_identifier(node: Node, context: LoweringContext) -> Optional[Expr]:
    if context.pruning:
        return Column(node.value)
    if node.identity is None:
        return None
    return Column(resolved_column_name(node.identity))


def _lower_bound_parameter(node: Node, context: LoweringContext) -> Expr:
    return BoundReference(index=node.index, data_type=lower_type(node.type), nullable=node.is_nullable)


def _lower_native(node: Node, context: LoweringContext) -> Expr:
    return node.wrapped


def _lower_nested(node: Node, context: LoweringContext) -> Expr:
    return context.lower(node.centre)


def _lower_subquery(node: Node, context: LoweringContext) -> Expr:
    return ScalarSubqueryWrapper(
        serialized=package_subquery(node),
        return_type=lower_type(node.type),
        return_nullable=node.is_nullable,
    )


# ======================== Logical Operators ========================


def _calls_host(expr) -> bool:
    """Does already-lowered IR call back into the host anywhere?"""
    if isinstance(expr, OpaqueFallbackCall):
        return True
    if isinstance(expr, tuple):
        return any(_calls_host(item) for item in expr)
    if isinstance(expr, Expr) and dataclasses.is_dataclass(expr):
        return any(_calls_host(getattr(expr, field.name)) for field in dataclasses.fields(expr))
    return False


def _needs_short_circuit(node: Node) -> bool:
    # user functions, host calls and bloom filter lookups are too expensive to evaluate eagerly
    return contains_node(
        node,
        lambda n: (
            n.node_type == NodeType.FUNCTION
            and (n.udf is not None or n.value == "BLOOM_FILTER_MIGHT_CONTAIN")
        )
        or (n.node_type == NodeType.NATIVE and _calls_host(n.wrapped)),
    )


def _lower_and(node: Node, context: LoweringContext) -> Expr:
    if _needs_short_circuit(node.right):
        return ShortCircuitAnd(context.lower(node.left), context.lower(node.right))
    return build_binary(context, BinaryOperator.AND, node.left, node.right)


def _lower_or(node: Node, context: LoweringContext) -> Expr:
    if _needs_short_circuit(node.right):
        return ShortCircuitOr(context.lower(node.left), context.lower(node.right))
    return build_binary(context, BinaryOperator.OR, node.left, node.right)


def _lower_not(node: Node, context: LoweringContext) -> Expr:
    child = node.centre
    if child.node_type == NodeType.COMPARISON_OPERATOR and child.value == "Eq":
        return build_binary(context, BinaryOperator.NOT_EQ, child.left, child.right)
    return Not(context.lower(child))


# ======================== Comparisons ========================


def _comparison(op: BinaryOperator) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Expr:
        return build_binary(context, op, node.left, node.right)

    return _lower


def _like(negated: bool, case_insensitive: bool) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        if (node.escape or LIKE_ESCAPE_CHARACTER) != LIKE_ESCAPE_CHARACTER:
            return None
        return Like(
            expr=context.lower(node.left),
            pattern=context.lower(node.right),
            negated=negated,
            case_insensitive=case_insensitive,
        )

    return _lower


def _in_list(negated: bool) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        candidates = node.right
        if is_literal(candidates) and _is_type(candidates.type, pyarrow.types.is_list):
            # a pre-materialized set of values
            element_type = candidates.type.value_type
            items = tuple(Literal(lower_value(v, element_type)) for v in candidates.value or [])
        elif candidates is None and all(is_literal(item) for item in node.parameters or []):
            items = context.lower_all(node.parameters or [])
        else:
            return None
        return InList(expr=context.lower(node.left), items=items, negated=negated)

    return _lower


# ======================== Arithmetic ========================


def _decimal_aware(op: BinaryOperator) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Expr:
        left, right = node.left, node.right
        if not (_is_decimal(left.type) or _is_decimal(right.type)):
            return build_binary(context, op, left, right)
        # decimal arithmetic must not depend on the native engine's own promotion
        result_type = node.type
        return Cast(
            build_binary(
                context,
                op,
                cast_if_necessary(left, result_type),
                cast_if_necessary(right, result_type),
            ),
            lower_type(result_type),
        )

    return _lower


def _null_if_zero(context, node: Node) -> Expr:
    return build_ext_function(context, "NullIfZero", [node], node.type)


def _lower_divide(node: Node, context: LoweringContext) -> Expr:
    left, right = node.left, node.right
    result_type = node.type
    if _is_decimal(left.type) or _is_decimal(right.type):
        division = BinaryExpr(
            BinaryOperator.DIVIDE,
            context.lower(cast_if_necessary(left, result_type)),
            _null_if_zero(context, right),
        )
        return Cast(division, lower_type(result_type))
    return BinaryExpr(
        BinaryOperator.DIVIDE,
        context.lower(cast_if_necessary(left, result_type)),
        _null_if_zero(context, cast_if_necessary(right, result_type)),
    )


def _is_zero(value) -> bool:
    return (
        value is not None
        and not isinstance(value, bool)
        and isinstance(value, (int, float, decimal.Decimal))
        and value == 0
    )


def _lower_modulo(node: Node, context: LoweringContext) -> Expr:
    left, right = node.left, node.right
    result_type = node.type
    if is_literal(right):
        if _is_zero(right.value):
            return Literal(lower_value(None, result_type))
        return build_binary(context, BinaryOperator.MODULO, left, right)
    return BinaryExpr(
        BinaryOperator.MODULO,
        context.lower(cast_if_necessary(left, result_type)),
        _null_if_zero(context, cast_if_necessary(right, result_type)),
    )


def _bitwise(op: BinaryOperator) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Expr:
        return build_binary(context, op, node.left, cast_if_necessary(node.right, node.left.type))

    return _lower


def _lower_string_concat_operator(node: Node, context: LoweringContext) -> Optional[Expr]:
    if _is_string(node.left.type) and _is_string(node.right.type):
        return build_ext_function(context, "StringConcat", [node.left, node.right], node.type)
    return None


# ======================== Unary Operators ========================


def _lower_is_null(node: Node, context: LoweringContext) -> Expr:
    return IsNull(context.lower(node.centre))


def _lower_is_not_null(node: Node, context: LoweringContext) -> Expr:
    return IsNotNull(context.lower(node.centre))


def _lower_negative(node: Node, context: LoweringContext) -> Expr:
    return UnaryExpr(UnaryOperator.NEGATIVE, context.lower(node.centre))


# ======================== Functions ========================


def _function(function: ScalarFunction) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Expr:
        return build_function(context, function, node.parameters or [], node.type)

    return _lower


def _ext_function(name: str) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Expr:
        return build_ext_function(context, name, node.parameters or [], node.type)

    return _lower


def _lower_cast(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 1)
    if parameters is None:
        return None
    child = parameters[0]
    # timestamp semantics differ too much between the engines to cast natively
    if _is_timestamp(node.type) or _is_timestamp(child.type):
        return None
    return TryCast(context.lower(child), lower_type(node.type))


def _rounding(function: ScalarFunction) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        if _is_decimal(node.type):
            return None
        call = build_function(context, function, node.parameters, node.type)
        return TryCast(call, lower_type(node.type))

    return _lower


def _lower_abs(node: Node, context: LoweringContext) -> Optional[Expr]:
    if _is_type(node.type, pyarrow.types.is_floating):
        return build_function(context, ScalarFunction.ABS, node.parameters, node.type)
    return None


def _lower_length(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 1)
    if parameters is not None and _is_string(parameters[0].type):
        return build_function(
            context, ScalarFunction.CHARACTER_LENGTH, node.parameters, pyarrow.int32()
        )
    return None


def _case_convert(name: str) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        if not context.config.case_convert_functions:
            return None
        return build_ext_function(context, name, node.parameters, node.type)

    return _lower


def _lower_md5(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 1)
    if parameters is None:
        return None
    return build_function(
        context, ScalarFunction.MD5, [unpack_binary_cast(parameters[0])], pyarrow.string()
    )


SHA2_FUNCTIONS: Dict[int, ScalarFunction] = {
    0: ScalarFunction.SHA256,
    224: ScalarFunction.SHA224,
    256: ScalarFunction.SHA256,
    384: ScalarFunction.SHA384,
    512: ScalarFunction.SHA512,
}


def _lower_sha2(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    value, bit_length = parameters
    if not is_literal(bit_length) or bit_length.value not in SHA2_FUNCTIONS:
        return None
    function = SHA2_FUNCTIONS[bit_length.value]
    return build_function(context, function, [unpack_binary_cast(value)], pyarrow.string())


def _seeded_hash(name: str, data_type: pyarrow.DataType) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        if node.seed != NATIVE_HASH_SEED:
            return None
        return build_ext_function(context, name, node.parameters, data_type)

    return _lower


def _string_literal(node: Node) -> Optional[str]:
    if is_literal(node) and _is_string(node.type) and node.value is not None:
        return node.value
    return None


def _lower_starts_with(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    expr, prefix = parameters
    prefix_value = _string_literal(prefix)
    if prefix_value is None:
        return None
    if context.pruning:
        # pruning evaluators don't all understand the dedicated node
        return ScalarFunctionCall(
            function=ScalarFunction.STARTS_WITH,
            name="starts_with",
            args=(context.lower(expr), context.lower(prefix)),
            return_type=ir_types.BOOL,
        )
    return StringStartsWith(context.lower(expr), prefix_value)


def _lower_ends_with(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    expr, suffix = parameters
    suffix_value = _string_literal(suffix)
    if suffix_value is None:
        return None
    return StringEndsWith(context.lower(expr), suffix_value)


def _lower_contains(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    expr, infix = parameters
    infix_value = _string_literal(infix)
    if infix_value is None:
        return None
    return StringContains(context.lower(expr), infix_value)


def _int32_literal(node: Node) -> Optional[int]:
    if is_literal(node) and node.type == pyarrow.int32() and node.value is not None:
        return node.value
    return None


def _lower_substring(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 3)
    if parameters is None:
        return None
    string, position, length = parameters
    position_value = _int32_literal(position)
    length_value = _int32_literal(length)
    if position_value is None or length_value is None:
        return None
    if position_value <= 0 or length_value < 0:
        return None
    args = [
        string,
        literal_node(position_value, pyarrow.int64()),
        literal_node(length_value, pyarrow.int64()),
    ]
    return build_function(context, ScalarFunction.SUBSTR, args, pyarrow.string())


def _lower_space(node: Node, context: LoweringContext) -> Expr:
    return build_ext_function(context, "StringSpace", node.parameters, pyarrow.string())


def _lower_repeat(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    string, count = parameters
    if _int32_literal(count) is None:
        return None
    return build_ext_function(context, "StringRepeat", [string, count], pyarrow.string())


def _lower_concat(node: Node, context: LoweringContext) -> Optional[Expr]:
    if not all(_is_string(param.type) for param in node.parameters or []):
        return None
    return build_ext_function(context, "StringConcat", node.parameters, node.type)


def _is_string_or_string_list(data_type) -> bool:
    if _is_string(data_type):
        return True
    return _is_type(data_type, pyarrow.types.is_list) and _is_string(data_type.value_type)


def _lower_concat_ws(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = node.parameters or []
    if not parameters or not is_literal(parameters[0]):
        return None
    if not all(_is_string_or_string_list(param.type) for param in parameters):
        return None
    return build_ext_function(context, "StringConcatWs", parameters, node.type)


def _lower_if(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 3)
    if parameters is None:
        return None
    case = Node(
        NodeType.FUNCTION,
        value="CASE",
        parameters=list(parameters),
        type=node.type,
        nullable=node.is_nullable,
    )
    return context.lower(case)


def _lower_case(node: Node, context: LoweringContext) -> Expr:
    """CASE parameters are flattened WHEN, THEN pairs with an optional trailing ELSE."""
    parameters = node.parameters or []
    lowered = context.lower_all(parameters)
    pairs = len(parameters) // 2
    when_then = tuple((lowered[i * 2], lowered[i * 2 + 1]) for i in range(pairs))
    else_expr = lowered[-1] if len(parameters) % 2 else None
    return Case(when_then=when_then, else_expr=else_expr)


def _lower_unscaled_value(node: Node, context: LoweringContext) -> Expr:
    return build_ext_function(context, "UnscaledValue", node.parameters, pyarrow.int64())


def _decimal_builder(name: str) -> Callable:
    def _lower(node: Node, context: LoweringContext) -> Optional[Expr]:
        parameters = parameters_of(node, 1)
        if parameters is None or not _is_decimal(node.type):
            return None
        args = [
            parameters[0],
            literal_node(node.type.precision, pyarrow.int32()),
            literal_node(node.type.scale, pyarrow.int32()),
        ]
        return build_ext_function(context, name, args, node.type)

    return _lower


def _lower_named_struct(node: Node, context: LoweringContext) -> Expr:
    return NamedStruct(values=context.lower_all(node.parameters), return_type=lower_type(node.type))


def _lower_array_item(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    container, ordinal = parameters
    if not is_literal(ordinal) or isinstance(ordinal.value, bool):
        return None
    if not isinstance(ordinal.value, (numbers.Real, decimal.Decimal)):
        return None
    try:
        # fractional ordinals truncate
        index = int(ordinal.value)
    except (ValueError, OverflowError):
        return None
    # the native engine indexes lists from 1
    key = lower_value(index + 1, pyarrow.int64())
    return GetIndexedField(context.lower(container), key)


def _lower_struct_field(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 1)
    if parameters is None or node.ordinal is None:
        return None
    return GetIndexedField(
        context.lower(parameters[0]), lower_value(node.ordinal, pyarrow.int32())
    )


def _lower_map_value(node: Node, context: LoweringContext) -> Optional[Expr]:
    parameters = parameters_of(node, 2)
    if parameters is None:
        return None
    container, key = parameters
    if not is_literal(key):
        return None
    return GetMapValue(context.lower(container), lower_value(key.value, key.type))


def _lower_row_number(node: Node, context: LoweringContext) -> Expr:
    return RowNumber()


def _lower_bloom_filter(node: Node, context: LoweringContext) -> Expr:
    return build_ext_function(
        context, "BloomFilterMightContain", node.parameters, pyarrow.bool_()
    )


def _lower_json_object(node: Node, context: LoweringContext) -> Optional[Expr]:
    if not context.config.udf_json:
        return None
    parameters = node.parameters or []
    if len(parameters) != 2 or not all(_is_string(param.type) for param in parameters):
        return None
    document, path = parameters
    if not is_literal(path):
        return None
    # parse once so the parsed document can be shared by other lookups
    parsed = Node(
        NodeType.NATIVE,
        wrapped=build_ext_function(context, "ParseJson", [document], pyarrow.binary()),
        type=pyarrow.binary(),
        nullable=False,
    )
    return build_ext_function(context, "GetParsedJsonObject", [parsed, path], pyarrow.string())


def _lower_brickhouse_array_union(node: Node, context: LoweringContext) -> Optional[Expr]:
    if not context.config.brickhouse_udfs:
        return None
    return build_ext_function(context, "BrickhouseArrayUnion", node.parameters, node.type)


# ======================== Rule Tables ========================

# fmt:off
NODE_RULES: Dict[NodeType, Callable] = {
    NodeType.LITERAL: _lower_literal,
    NodeType.IDENTIFIER: _lower_identifier,
    NodeType.BOUND_PARAMETER: _lower_bound_parameter,
    NodeType.NATIVE: _lower_native,
    NodeType.NESTED: _lower_nested,
    NodeType.SUBQUERY: _lower_subquery,
    NodeType.AND: _lower_and,
    NodeType.OR: _lower_or,
    NodeType.NOT: _lower_not,
}

OPERATOR_RULES: Dict[str, Callable] = {
    "Eq": _comparison(BinaryOperator.EQ),
    "NotEq": _comparison(BinaryOperator.NOT_EQ),
    "Gt": _comparison(BinaryOperator.GT),
    "GtEq": _comparison(BinaryOperator.GT_EQ),
    "Lt": _comparison(BinaryOperator.LT),
    "LtEq": _comparison(BinaryOperator.LT_EQ),
    "Like": _like(negated=False, case_insensitive=False),
    "NotLike": _like(negated=True, case_insensitive=False),
    "ILike": _like(negated=False, case_insensitive=True),
    "NotILike": _like(negated=True, case_insensitive=True),
    "InList": _in_list(negated=False),
    "NotInList": _in_list(negated=True),
    "Plus": _decimal_aware(BinaryOperator.PLUS),
    "Minus": _decimal_aware(BinaryOperator.MINUS),
    "Multiply": _decimal_aware(BinaryOperator.MULTIPLY),
    "Divide": _lower_divide,
    "Modulo": _lower_modulo,
    "BitwiseAnd": _bitwise(BinaryOperator.BITWISE_AND),
    "BitwiseOr": _bitwise(BinaryOperator.BITWISE_OR),
    "ShiftLeft": _bitwise(BinaryOperator.BITWISE_SHIFT_LEFT),
    "ShiftRight": _bitwise(BinaryOperator.BITWISE_SHIFT_RIGHT),
    "StringConcat": _lower_string_concat_operator,
}

UNARY_RULES: Dict[str, Callable] = {
    "IsNull": _lower_is_null,
    "IsNotNull": _lower_is_not_null,
    "Negative": _lower_negative,
}

FUNCTION_RULES: Dict[str, Callable] = {
    "CAST": _lower_cast,
    "TRY_CAST": _lower_cast,
    "IF": _lower_if,
    "CASE": _lower_case,
    "COALESCE": _function(ScalarFunction.COALESCE),
    "NULLIF": _ext_function("NullIf"),
    "SQRT": _function(ScalarFunction.SQRT),
    "SIN": _function(ScalarFunction.SIN),
    "COS": _function(ScalarFunction.COS),
    "TAN": _function(ScalarFunction.TAN),
    "ASIN": _function(ScalarFunction.ASIN),
    "ACOS": _function(ScalarFunction.ACOS),
    "ATAN": _function(ScalarFunction.ATAN),
    "EXP": _function(ScalarFunction.EXP),
    "LN": _function(ScalarFunction.LN),
    "LOG2": _function(ScalarFunction.LOG2),
    "LOG10": _function(ScalarFunction.LOG10),
    "FLOOR": _rounding(ScalarFunction.FLOOR),
    "CEIL": _rounding(ScalarFunction.CEIL),
    "SIGNUM": _function(ScalarFunction.SIGNUM),
    "ABS": _lower_abs,
    "OCTET_LENGTH": _function(ScalarFunction.OCTET_LENGTH),
    "LENGTH": _lower_length,
    "LOWER": _case_convert("StringLower"),
    "UPPER": _case_convert("StringUpper"),
    "TRIM": _function(ScalarFunction.TRIM),
    "LTRIM": _function(ScalarFunction.LTRIM),
    "RTRIM": _function(ScalarFunction.RTRIM),
    "DATE_TRUNC": _function(ScalarFunction.DATE_TRUNC),
    "MD5": _lower_md5,
    "SHA2": _lower_sha2,
    "MURMUR3_HASH": _seeded_hash("Murmur3Hash", pyarrow.int32()),
    "XXHASH64": _seeded_hash("XxHash64", pyarrow.int64()),
    "STARTS_WITH": _lower_starts_with,
    "ENDS_WITH": _lower_ends_with,
    "CONTAINS": _lower_contains,
    "SUBSTRING": _lower_substring,
    "SPACE": _lower_space,
    "REPEAT": _lower_repeat,
    "CONCAT": _lower_concat,
    "CONCAT_WS": _lower_concat_ws,
    "UNSCALED_VALUE": _lower_unscaled_value,
    "MAKE_DECIMAL": _decimal_builder("MakeDecimal"),
    "CHECK_OVERFLOW": _decimal_builder("CheckOverflow"),
    "ARRAY": _ext_function("MakeArray"),
    "NAMED_STRUCT": _lower_named_struct,
    "ARRAY_ITEM": _lower_array_item,
    "STRUCT_FIELD": _lower_struct_field,
    "MAP_VALUE": _lower_map_value,
    "ROW_NUMBER": _lower_row_number,
    "GET_JSON_OBJECT": _lower_json_object,
    "BLOOM_FILTER_MIGHT_CONTAIN": _lower_bloom_filter,
}

UDF_RULES: Dict[str, Callable] = {
    UDF_JSON_CLASS: _lower_json_object,
    BRICKHOUSE_ARRAY_UNION_CLASS: _lower_brickhouse_array_union,
}
# fmt:on
