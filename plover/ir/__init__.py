# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
The intermediate representation consumed by the native execution engine.

- types: type descriptors
- values: scalar values
- nodes: expression nodes and join filter structures
- serialization: the versioned wire encoding
"""

from plover.ir.serialization import dumps
from plover.ir.serialization import loads

__all__ = ("dumps", "loads")
