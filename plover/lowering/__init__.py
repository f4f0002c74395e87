# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Lowering translates host expressions into the native engine's IR.

- types: pyarrow types to native type descriptors
- values: literal values to native scalar values
- rules: the rule for each kind of node
- expressions: lowering whole expressions, handing what can't be lowered to the host
- aggregates: aggregate function calls
- join_filter: join filters and join types
- fallback: packaging expressions for the host to evaluate
"""

from plover.lowering.aggregates import lower_aggregate
from plover.lowering.expressions import lower_expression
from plover.lowering.expressions import lower_pruning_expression
from plover.lowering.fallback import FallbackPayload
from plover.lowering.fallback import package
from plover.lowering.fallback import unpackage
from plover.lowering.join_filter import lower_join_type
from plover.lowering.join_filter import resolve_join_filter
from plover.lowering.types import lower_schema
from plover.lowering.types import lower_type
from plover.lowering.values import lower_value

__all__ = (
    "FallbackPayload",
    "lower_aggregate",
    "lower_expression",
    "lower_join_type",
    "lower_pruning_expression",
    "lower_schema",
    "lower_type",
    "lower_value",
    "package",
    "resolve_join_filter",
    "unpackage",
)
