# isort: skip_file
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Plover lowers query engine expressions to a native execution engine's IR.

To get started:
    import plover
    ir = plover.lower_expression(expression)

Expressions, or parts of expressions, the native engine can't evaluate are
packaged for the host engine to evaluate, so lowering a scalar expression
never fails just because part of it isn't supported.
"""

from plover.__version__ import __build__
from plover.__version__ import __version__

import logging

from plover import config

# in debug mode every lowering decision is logged, including which rule was used
if config.PLOVER_DEBUG:
    logging.getLogger(__name__).setLevel(logging.DEBUG)

from plover.config import LoweringConfig
from plover.lowering import lower_aggregate
from plover.lowering import lower_expression
from plover.lowering import lower_join_type
from plover.lowering import lower_pruning_expression
from plover.lowering import lower_schema
from plover.lowering import lower_type
from plover.lowering import lower_value
from plover.lowering import resolve_join_filter

__all__ = (
    "LoweringConfig",
    "__build__",
    "__version__",
    "lower_aggregate",
    "lower_expression",
    "lower_join_type",
    "lower_pruning_expression",
    "lower_schema",
    "lower_type",
    "lower_value",
    "resolve_join_filter",
)
