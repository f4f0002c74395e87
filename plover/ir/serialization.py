# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Wire encoding of the IR.

IR objects are written as JSON (via orjson) inside a versioned envelope:

    {"version": 1, "payload": <encoded>}

Dataclasses are written as objects with an "@kind" member naming the class,
enums, bytes and non-finite floats are written as tagged objects so they
survive the trip, and every sequence is read back as a tuple.
"""

import base64
import math
from dataclasses import fields
from dataclasses import is_dataclass
from enum import Enum
from typing import Any
from typing import Dict

import orjson

from plover.exceptions import UnsupportedTypeError
from plover.ir import nodes
from plover.ir import types
from plover.ir import values

WIRE_VERSION: int = 1
CLASS_TAG: str = "@kind"

_CLASSES: Dict[str, type] = {
    cls.__name__: cls
    for module in (types, values, nodes)
    for cls in vars(module).values()
    if isinstance(cls, type) and is_dataclass(cls) and cls.__module__ == module.__name__
}

_ENUMS: Dict[str, type] = {
    cls.__name__: cls
    for module in (types, nodes)
    for cls in vars(module).values()
    if isinstance(cls, type)
    and issubclass(cls, Enum)
    and cls is not Enum
    and cls.__module__ == module.__name__
}


def to_dict(obj: Any) -> Any:
    """Convert an IR object into plain JSON-compatible structures."""
    if isinstance(obj, Enum):
        return {"enum": type(obj).__name__, "value": obj.value}
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, float):
        if math.isfinite(obj):
            return obj
        return {"float": repr(obj)}
    if isinstance(obj, (bytes, bytearray)):
        return {"bytes": base64.b64encode(obj).decode()}
    if isinstance(obj, (tuple, list)):
        return [to_dict(item) for item in obj]
    if is_dataclass(obj) and type(obj).__name__ in _CLASSES:
        encoded = {CLASS_TAG: type(obj).__name__}
        for field in fields(obj):
            encoded[field.name] = to_dict(getattr(obj, field.name))
        return encoded
    raise UnsupportedTypeError(message=f"Unable to encode '{type(obj).__name__}' for the wire.")


def from_dict(data: Any) -> Any:
    """Rebuild IR objects from the structures produced by `to_dict`."""
    if isinstance(data, list):
        return tuple(from_dict(item) for item in data)
    if not isinstance(data, dict):
        return data
    if CLASS_TAG in data:
        cls = _CLASSES.get(data[CLASS_TAG])
        if cls is None:
            raise UnsupportedTypeError(message=f"Unknown IR kind '{data[CLASS_TAG]}'.")
        return cls(**{key: from_dict(value) for key, value in data.items() if key != CLASS_TAG})
    if "enum" in data:
        return _ENUMS[data["enum"]](data["value"])
    if "bytes" in data:
        return base64.b64decode(data["bytes"])
    if "float" in data:
        return float(data["float"])
    raise UnsupportedTypeError(message=f"Unable to decode wire object with keys {sorted(data)}.")


def dumps(obj: Any) -> bytes:
    return orjson.dumps({"version": WIRE_VERSION, "payload": to_dict(obj)})


def loads(serialized: bytes) -> Any:
    envelope = orjson.loads(serialized)
    version = envelope.get("version")
    if version != WIRE_VERSION:
        raise UnsupportedTypeError(message=f"Unsupported IR wire version '{version}'.")
    return from_dict(envelope["payload"])
