# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Expression nodes of the native engine IR.

This is the wire contract with the native engine, every class here has an
entry in the serialization registry and nodes are built once and never
mutated. Nodes are frozen dataclasses so two separately built but identical
sub-trees are equal and hash equal, which is what the fallback path relies
on to share a single parameter slot between repeated sub-expressions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from typing import Tuple

from plover.ir.types import Schema
from plover.ir.types import TypeDescriptor
from plover.ir.values import ScalarValue

# reserved column index for predicates a pruning evaluator can't understand
UNSUPPORTED_PRUNING_COLUMN_INDEX: int = 2**31 - 1
UNSUPPORTED_PRUNING_COLUMN_NAME: str = "!__unsupported_pruning_expr__"
# column index of join filter references found on neither side of the join
UNRESOLVED_COLUMN_INDEX: int = -1


class BinaryOperator(str, Enum):
    EQ = "Eq"
    NOT_EQ = "NotEq"
    LT = "Lt"
    LT_EQ = "LtEq"
    GT = "Gt"
    GT_EQ = "GtEq"
    PLUS = "Plus"
    MINUS = "Minus"
    MULTIPLY = "Multiply"
    DIVIDE = "Divide"
    MODULO = "Modulo"
    AND = "And"
    OR = "Or"
    BITWISE_AND = "BitwiseAnd"
    BITWISE_OR = "BitwiseOr"
    BITWISE_SHIFT_LEFT = "BitwiseShiftLeft"
    BITWISE_SHIFT_RIGHT = "BitwiseShiftRight"


class UnaryOperator(str, Enum):
    NEGATIVE = "Negative"


class ScalarFunction(str, Enum):
    """Built-in native scalar functions, EXTENSION calls are resolved by name."""

    ABS = "Abs"
    ACOS = "Acos"
    ASIN = "Asin"
    ATAN = "Atan"
    CEIL = "Ceil"
    CHARACTER_LENGTH = "CharacterLength"
    COALESCE = "Coalesce"
    COS = "Cos"
    DATE_TRUNC = "DateTrunc"
    EXP = "Exp"
    FLOOR = "Floor"
    LN = "Ln"
    LOG10 = "Log10"
    LOG2 = "Log2"
    LTRIM = "Ltrim"
    MD5 = "MD5"
    OCTET_LENGTH = "OctetLength"
    RTRIM = "Rtrim"
    SHA224 = "SHA224"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    SIGNUM = "Signum"
    SIN = "Sin"
    SQRT = "Sqrt"
    STARTS_WITH = "StartsWith"
    SUBSTR = "Substr"
    TAN = "Tan"
    TRIM = "Trim"
    EXTENSION = "Extension"


class AggregateFunction(str, Enum):
    MAX = "MAX"
    MIN = "MIN"
    SUM = "SUM"
    AVG = "AVG"
    COUNT = "COUNT"
    FIRST = "FIRST"
    FIRST_IGNORES_NULL = "FIRST_IGNORES_NULL"
    COLLECT_LIST = "COLLECT_LIST"
    COLLECT_SET = "COLLECT_SET"
    BRICKHOUSE_COLLECT = "BRICKHOUSE_COLLECT"
    BRICKHOUSE_COMBINE_UNIQUE = "BRICKHOUSE_COMBINE_UNIQUE"


class JoinSide(str, Enum):
    LEFT = "LEFT_SIDE"
    RIGHT = "RIGHT_SIDE"
    UNRESOLVED = "UNRESOLVED"


class JoinType(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"
    SEMI = "SEMI"
    ANTI = "ANTI"
    EXISTENCE = "EXISTENCE"


class Expr:
    """Base class of all IR expression nodes."""


@dataclass(frozen=True)
class Literal(Expr):
    value: ScalarValue


@dataclass(frozen=True)
class BoundReference(Expr):
    index: int
    data_type: TypeDescriptor
    nullable: bool = True


@dataclass(frozen=True)
class Column(Expr):
    name: str
    index: Optional[int] = None


@dataclass(frozen=True)
class UnaryExpr(Expr):
    op: UnaryOperator
    expr: Expr


@dataclass(frozen=True)
class BinaryExpr(Expr):
    op: BinaryOperator
    left: Expr
    right: Expr


@dataclass(frozen=True)
class ShortCircuitAnd(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class ShortCircuitOr(Expr):
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Not(Expr):
    expr: Expr


@dataclass(frozen=True)
class IsNull(Expr):
    expr: Expr


@dataclass(frozen=True)
class IsNotNull(Expr):
    expr: Expr


@dataclass(frozen=True)
class Cast(Expr):
    expr: Expr
    data_type: TypeDescriptor


@dataclass(frozen=True)
class TryCast(Expr):
    expr: Expr
    data_type: TypeDescriptor


@dataclass(frozen=True)
class InList(Expr):
    expr: Expr
    items: Tuple[Expr, ...]
    negated: bool = False


@dataclass(frozen=True)
class Like(Expr):
    expr: Expr
    pattern: Expr
    negated: bool = False
    case_insensitive: bool = False


@dataclass(frozen=True)
class StringStartsWith(Expr):
    expr: Expr
    prefix: str


@dataclass(frozen=True)
class StringEndsWith(Expr):
    expr: Expr
    suffix: str


@dataclass(frozen=True)
class StringContains(Expr):
    expr: Expr
    infix: str


@dataclass(frozen=True)
class ScalarFunctionCall(Expr):
    function: ScalarFunction
    name: str
    args: Tuple[Expr, ...]
    return_type: TypeDescriptor


@dataclass(frozen=True)
class AggregateCall(Expr):
    function: AggregateFunction
    children: Tuple[Expr, ...]


@dataclass(frozen=True)
class Case(Expr):
    when_then: Tuple[Tuple[Expr, Expr], ...]
    else_expr: Optional[Expr] = None


@dataclass(frozen=True)
class NamedStruct(Expr):
    values: Tuple[Expr, ...]
    return_type: TypeDescriptor


@dataclass(frozen=True)
class GetIndexedField(Expr):
    expr: Expr
    key: ScalarValue


@dataclass(frozen=True)
class GetMapValue(Expr):
    expr: Expr
    key: ScalarValue


@dataclass(frozen=True)
class RowNumber(Expr):
    pass


@dataclass(frozen=True)
class OpaqueFallbackCall(Expr):
    """
    Delegates evaluation of `serialized` to the host, `parameters` are evaluated
    natively and handed over positionally.
    """

    serialized: bytes
    parameters: Tuple[Expr, ...]
    return_type: TypeDescriptor
    return_nullable: bool = True


@dataclass(frozen=True)
class ScalarSubqueryWrapper(Expr):
    serialized: bytes
    return_type: TypeDescriptor
    return_nullable: bool = True


@dataclass(frozen=True)
class ColumnIndex:
    side: JoinSide
    index: int


@dataclass(frozen=True)
class JoinFilter:
    expression: Expr
    schema: Schema
    column_indices: Tuple[ColumnIndex, ...]
