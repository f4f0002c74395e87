# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Bespoke error types for Plover.

Exception Hierarchy:

Exception
 └── Error
     └── LoweringError
         ├── FallbackPackagingError
         ├── IncorrectTypeError
         ├── InvalidConfigurationError
         ├── NumericOverflowError
         ├── UnsupportedAggregateError
         ├── UnsupportedExpressionError
         └── UnsupportedTypeError

UnsupportedExpressionError and UnsupportedTypeError raised while lowering a
sub-expression are recovered by carving the sub-expression out into a host
fallback call. The others are hard failures, the caller should not attempt
native execution of the expression.
"""

from typing import Any
from typing import Optional


# ======================== Begin Plover Superclasses ========================
# These should not be thrown directly
class Error(Exception):
    """Base class of all Plover errors."""


class LoweringError(Error):
    """Superclass for errors raised while translating expressions to the IR."""


# ======================== End Plover Superclasses ==========================


# ======================== Begin Lowering Exceptions ========================
class UnsupportedTypeError(LoweringError):
    """Exception raised when a host type has no IR equivalent."""

    def __init__(self, data_type: Any = None, message: Optional[str] = None):
        self.data_type = data_type
        if message is None:
            message = f"Data type conversion not implemented for '{data_type}'."
        super().__init__(message)


class UnsupportedExpressionError(LoweringError):
    """Exception raised when no lowering rule matches an expression node."""

    def __init__(self, expression: Optional[str] = None, message: Optional[str] = None):
        self.expression = expression
        if message is None:
            message = f"Unsupported expression: {expression}"
        super().__init__(message)


class UnsupportedAggregateError(LoweringError):
    """
    Exception raised when an aggregate cannot be lowered.

    Aggregates have no host fallback, so this always surfaces to the caller.
    """

    def __init__(self, aggregate: Optional[str] = None, message: Optional[str] = None):
        self.aggregate = aggregate
        if message is None:
            message = f"Unsupported aggregate expression: {aggregate}"
        super().__init__(message)


class NumericOverflowError(LoweringError):
    """Exception raised when a literal does not fit the native numeric width."""

    def __init__(self, value: Any, data_type: Any):
        self.value = value
        self.data_type = data_type
        message = f"Value '{value}' cannot be represented natively as '{data_type}'."
        super().__init__(message)


class IncorrectTypeError(LoweringError):
    """Exception raised when a literal value does not match its declared type."""


class FallbackPackagingError(LoweringError):
    """
    Exception raised when an expression fragment cannot be packaged for host
    evaluation; there is nothing further to fall back to.
    """


# ======================== End Lowering Exceptions ==========================


# ======================== Begin Configuration Errors ========================
class InvalidConfigurationError(LoweringError):
    """Exception raised for invalid configuration."""

    def __init__(
        self, *, config_item: str, provided_value: str, valid_value_description: str = None
    ):
        DISPLAY_LIMIT: int = 32

        self.config_item = config_item
        self.provided_value = provided_value
        self.valid_value_description = valid_value_description

        provided_value = str(provided_value)
        message = f"Value of '{provided_value[:DISPLAY_LIMIT]}{'...' if len(provided_value) > DISPLAY_LIMIT else ''}' for '{config_item}' is not valid."
        if valid_value_description:
            message += f" Value should be {valid_value_description}"
        super().__init__(message)


# ======================== End Configuration Errors ==========================
