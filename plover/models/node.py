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
Node Module

This module contains the Node class, the host engine's expression tree node.

Noteworthy features and design choices:

1. Dynamic Attributes: The Node class allows you to set and get attributes dynamically, storing them in an internal dictionary.
2. Attribute Validation: Attributes starting with an underscore are not allowed.
3. Attribute Defaults: When attempting to access an attribute that doesn't exist, the `__getattr__` method will return None.
4. Ordered Children: Children live in the `left`, `centre` and `right` slots and the `parameters` list, `children` presents them in that order.
5. Rebuilding: `with_children` creates a new Node with the children substituted, the original is never changed.
6. JSON Representation: The `__str__` method returns a JSON representation of the internal attributes, which can be helpful for debugging.

"""

from typing import Any
from typing import Dict
from typing import List
from typing import Sequence
from typing import Union

CHILD_SLOTS = ("left", "centre", "right")


class Node:

    __slots__ = ("_internal", "node_type")

    def __init__(self, node_type: Union[str, int, None] = None, **kwargs: Any):
        """
        Initialize a Node with attributes.

        Parameters:
            node_type: NodeType, optional
                The type of the node.
            **kwargs: Any
                Dynamic attributes for the node.
        """
        for key in kwargs:
            if key.startswith("_"):
                raise AttributeError(f"Node attributes cannot start with an underscore - '{key}'")
        object.__setattr__(self, "_internal", {k: v for k, v in kwargs.items() if v is not None})
        object.__setattr__(self, "node_type", node_type)

    @property
    def properties(self) -> Dict[str, Any]:
        """
        Get the internal properties of the Node.

        Returns:
            Dict[str, Any]: The internal properties.
        """
        return self._internal

    @property
    def is_nullable(self) -> bool:
        """Nodes are nullable unless they have been explicitly marked otherwise."""
        return self._internal.get("nullable", True)

    @property
    def children(self) -> List["Node"]:
        """
        The child expressions of this node, `left`, `centre`, `right` then `parameters`.
        """
        children = [self._internal[slot] for slot in CHILD_SLOTS if slot in self._internal]
        children.extend(self._internal.get("parameters", []))
        return children

    def with_children(self, children: Sequence["Node"]) -> "Node":
        """
        Create a new Node with the same attributes and the children replaced.

        Parameters:
            children: Sequence[Node]
                Replacement children, in the same order as `children`.

        Returns:
            Node: The new node.
        """
        replacements = iter(children)
        attributes = dict(self._internal)
        for slot in CHILD_SLOTS:
            if slot in attributes:
                attributes[slot] = next(replacements)
        if "parameters" in attributes:
            attributes["parameters"] = [next(replacements) for _ in attributes["parameters"]]
        return Node(self.node_type, **attributes)

    def __getattr__(self, name: str) -> Any:
        """
        Retrieve attribute from the internal dictionary.

        Parameters:
            name: str
                The name of the attribute to retrieve.

        Returns:
            Any: The attribute value.
        """
        if name.startswith("__"):
            raise AttributeError(name)
        return self._internal.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        """
        Set attribute in the internal dictionary.

        Parameters:
            name: str
                The name of the attribute.
            value: Any
                The value to set.
        """
        if name.startswith("_"):
            raise AttributeError(f"Node attributes cannot start with an underscore - '{name}'")
        if name == "node_type":
            object.__setattr__(self, name, value)
        elif value is None:
            self._internal.pop(name, None)
        else:
            self._internal[name] = value

    def __str__(self) -> str:
        """
        Return a string representation of the Node using JSON serialization.

        Returns:
            str: The JSON string representation.
        """
        import orjson

        return orjson.dumps(self._internal, default=str).decode()

    def __repr__(self) -> str:
        """
        Provide a detailed representation for debugging.

        Returns:
            str: A string representation useful for debugging.
        """
        node_type = str(self.node_type)
        if node_type.startswith("NodeType."):
            node_type = node_type[9:]
        return f"<Node type={node_type}>"
