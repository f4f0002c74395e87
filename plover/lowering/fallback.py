# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Fallback Packaging

Expression fragments the native engine can't evaluate are handed back to the
host as opaque payloads. A payload is an Arrow IPC stream:

- the stream schema metadata carries the fragment (as an orjson document),
  the parameter schema, the return field and the payload version
- a single one-row batch carries the values of the literals in the fragment,
  one column per literal, so every literal keeps its exact Arrow type

The fragment refers to its inputs with BOUND_PARAMETER placeholders, the
parameter schema describes the row of values the host will be given, in
placeholder index order.
"""

import base64
import io
from dataclasses import dataclass
from typing import Any
from typing import List

import orjson
import pyarrow
from pyarrow import ipc

from plover.exceptions import FallbackPackagingError
from plover.expression import NodeType
from plover.ir.nodes import Expr
from plover.ir.serialization import from_dict
from plover.ir.serialization import to_dict
from plover.models import Node

PAYLOAD_VERSION: int = 1

VERSION_KEY: bytes = b"plover.version"
FRAGMENT_KEY: bytes = b"plover.fragment"
PARAMETERS_KEY: bytes = b"plover.parameters"
RETURN_KEY: bytes = b"plover.return"

_PACKAGING_ERRORS = (pyarrow.ArrowException, TypeError, ValueError, OverflowError)


def _encode_schema(schema: pyarrow.Schema) -> str:
    return base64.b64encode(schema.serialize().to_pybytes()).decode()


def _decode_schema(encoded) -> pyarrow.Schema:
    return ipc.read_schema(pyarrow.py_buffer(base64.b64decode(encoded)))


class _FragmentWriter:
    def __init__(self):
        self.literals: List[pyarrow.Array] = []

    def encode(self, value: Any) -> Any:
        if isinstance(value, Node):
            return self.encode_node(value)
        if isinstance(value, pyarrow.DataType):
            return {"$type": _encode_schema(pyarrow.schema([pyarrow.field("type", value)]))}
        if isinstance(value, Expr):
            return {"$ir": to_dict(value)}
        if isinstance(value, (list, tuple)):
            return [self.encode(item) for item in value]
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        raise FallbackPackagingError(
            f"Unable to package attribute value of type '{type(value).__name__}'."
        )

    def encode_node(self, node: Node) -> dict:
        node_type = NodeType(node.node_type)
        attributes = {}
        for key, value in node.properties.items():
            if node_type == NodeType.LITERAL and key == "value":
                attributes[key] = {"$literal": self.add_literal(value, node.type)}
            else:
                attributes[key] = self.encode(value)
        return {"$node": node_type.name, "attributes": attributes}

    def add_literal(self, value: Any, data_type: pyarrow.DataType) -> int:
        try:
            self.literals.append(pyarrow.array([value], type=data_type))
        except _PACKAGING_ERRORS as err:
            raise FallbackPackagingError(
                f"Unable to package literal '{value!r}' as '{data_type}' - {err}"
            ) from err
        return len(self.literals) - 1


class _FragmentReader:
    def __init__(self, literals: pyarrow.Table):
        self.literals = literals

    def decode(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self.decode(item) for item in value]
        if not isinstance(value, dict):
            return value
        if "$node" in value:
            attributes = {key: self.decode(item) for key, item in value["attributes"].items()}
            return Node(NodeType[value["$node"]], **attributes)
        if "$literal" in value:
            return self.literals.column(value["$literal"])[0].as_py()
        if "$type" in value:
            return _decode_schema(value["$type"]).field(0).type
        if "$ir" in value:
            return from_dict(value["$ir"])
        raise FallbackPackagingError(f"Unrecognized fragment entry {sorted(value)}.")


@dataclass(frozen=True)
class FallbackPayload:
    """
    An expression fragment for the host to evaluate, and its calling contract.

    Parameters:
        fragment: Node
            The host expression, inputs are BOUND_PARAMETER placeholders.
        parameter_schema: pyarrow.Schema
            One field per placeholder, in placeholder index order.
        return_type: pyarrow.DataType
            The type of the value the fragment evaluates to.
        return_nullable: bool
            Whether the fragment can evaluate to null.
    """

    fragment: Node
    parameter_schema: pyarrow.Schema
    return_type: pyarrow.DataType
    return_nullable: bool = True

    def serialize(self) -> bytes:
        writer = _FragmentWriter()
        encoded_fragment = writer.encode(self.fragment)

        names = [f"s{index}" for index in range(len(writer.literals))]
        metadata = {
            VERSION_KEY: str(PAYLOAD_VERSION).encode(),
            FRAGMENT_KEY: orjson.dumps(encoded_fragment),
            PARAMETERS_KEY: _encode_schema(self.parameter_schema).encode(),
            RETURN_KEY: _encode_schema(
                pyarrow.schema([pyarrow.field("return", self.return_type, self.return_nullable)])
            ).encode(),
        }
        fields = [pyarrow.field(name, array.type) for name, array in zip(names, writer.literals)]
        schema = pyarrow.schema(fields, metadata=metadata)
        try:
            batch = pyarrow.RecordBatch.from_arrays(writer.literals, schema=schema)
            sink = pyarrow.BufferOutputStream()
            with ipc.new_stream(sink, schema) as stream:
                stream.write_batch(batch)
        except _PACKAGING_ERRORS as err:
            raise FallbackPackagingError(f"Unable to write fallback payload - {err}") from err
        return sink.getvalue().to_pybytes()

    @classmethod
    def deserialize(cls, serialized: bytes) -> "FallbackPayload":
        try:
            reader = ipc.open_stream(io.BytesIO(serialized))
            literals = reader.read_all()
        except _PACKAGING_ERRORS as err:
            raise FallbackPackagingError(f"Unable to read fallback payload - {err}") from err

        metadata = reader.schema.metadata or {}
        version = metadata.get(VERSION_KEY, b"").decode()
        if version != str(PAYLOAD_VERSION):
            raise FallbackPackagingError(f"Unsupported fallback payload version '{version}'.")

        fragment = _FragmentReader(literals).decode(orjson.loads(metadata[FRAGMENT_KEY]))
        return_field = _decode_schema(metadata[RETURN_KEY]).field(0)
        return cls(
            fragment=fragment,
            parameter_schema=_decode_schema(metadata[PARAMETERS_KEY]),
            return_type=return_field.type,
            return_nullable=return_field.nullable,
        )


def package(fragment: Node, parameter_schema: pyarrow.Schema) -> bytes:
    """
    Serialize a host fragment and the schema of its parameters.

    The fragment's own `type` and `nullable` attributes are its return contract.
    """
    if fragment.type is None:
        raise FallbackPackagingError(
            f"Unable to package a fragment without a return type - {fragment!r}"
        )
    payload = FallbackPayload(
        fragment=fragment,
        parameter_schema=parameter_schema,
        return_type=fragment.type,
        return_nullable=fragment.is_nullable,
    )
    return payload.serialize()


def unpackage(serialized: bytes) -> FallbackPayload:
    return FallbackPayload.deserialize(serialized)


def package_subquery(node: Node) -> bytes:
    """Scalar subqueries are evaluated by the host in full, so take no parameters."""
    return package(node, pyarrow.schema([]))
