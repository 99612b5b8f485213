"""
Comment-preserving document tree.

Decoding with [loads_node][hjsonkit.loads_node] wraps every scalar, array
element and object member in a [Node][hjsonkit.node.Node]. Arrays then hold
`list[Node]` and objects hold `OrderedMap[Node]`.

The editing methods below keep the comments of untouched siblings: replacing
a value keeps the comments of its Node, deleting a member drops them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import NodeTypeError
from .orderedmap import OrderedMap


@dataclass
class Comments:
    """
    Raw whitespace and comment text attached to a [Node][hjsonkit.node.Node].

    Every slot holds the text verbatim, comment markers included.
    """

    before: str = ""
    """Text preceding the key, the array element or the root value."""
    key: str = ""
    """Text between the `:` of a member and its value."""
    inside: str = ""
    """Interior of an empty container, or the text after the last child of a non-empty one."""
    after: str = ""
    """Text following the value on the same line, or the trailing text of the document."""


def _unwrap_one(value: Any) -> Any:
    return value.value if isinstance(value, Node) else value


@dataclass
class Node:
    """A value together with its [Comments][hjsonkit.node.Comments]."""

    value: Any = None
    comments: Comments = field(default_factory=Comments)

    def __bool__(self) -> bool:
        return True

    def __len__(self) -> int:
        if isinstance(self.value, (str, list, OrderedMap)):
            return len(self.value)
        return 0

    @classmethod
    def wrap(cls, value: Any) -> Node:
        """
        Converts a plain value tree into a Node tree.

        Existing Nodes are kept as they are.
        """
        if isinstance(value, Node):
            return value
        if isinstance(value, (list, tuple)):
            return cls([cls.wrap(v) for v in value])
        if isinstance(value, Mapping):
            return cls(OrderedMap((str(k), cls.wrap(v)) for k, v in value.items()))
        return cls(value)

    def unwrap(self) -> Any:
        """Returns the plain value tree, without any comments."""
        return _unwrap_deep(self.value)

    # Read access

    def at_index(self, index: int) -> tuple[str | None, Any]:
        """
        Returns the element at `index` of an array, or the key and value of
        the member at `index` of an object.
        """
        if isinstance(self.value, list):
            return None, _unwrap_one(self.value[index])
        if isinstance(self.value, OrderedMap):
            return self.value.key_at(index), _unwrap_one(self.value.at_index(index))
        raise NodeTypeError("at_index", self.value)

    def at_key(self, key: str) -> tuple[Any, bool]:
        if not isinstance(self.value, OrderedMap):
            raise NodeTypeError("at_key", self.value)
        child, found = self.value.at_key(key)
        return _unwrap_one(child), found

    def ni(self, index: int) -> Node | None:
        """The child Node at `index`, None if absent or not a container."""
        if isinstance(self.value, list):
            if 0 <= index < len(self.value):
                return self._child(self.value, index)
        elif isinstance(self.value, OrderedMap):
            if 0 <= index < len(self.value):
                return self._child(self.value, self.value.key_at(index))
        return None

    def nk(self, key: str) -> Node | None:
        """The child Node at `key`, None if absent or not an object."""
        if isinstance(self.value, OrderedMap) and key in self.value:
            return self._child(self.value, key)
        return None

    def nkc(self, key: str) -> Node | None:
        """
        Like [nk][hjsonkit.node.Node.nk] but creates the object and the
        member when they are missing.

        Returns None when the Node holds a value that is not an object.
        """
        if self.value is None:
            self.value = OrderedMap()
        if not isinstance(self.value, OrderedMap):
            return None
        if key not in self.value:
            self.value.set(key, Node())
        return self._child(self.value, key)

    @staticmethod
    def _child(container: Any, index: Any) -> Node:
        child = container[index]
        if not isinstance(child, Node):
            child = Node.wrap(child)
            container[index] = child
        return child

    # Edition

    def _replace(self, container: Any, index: Any, value: Any) -> Any:
        old = container[index]
        if isinstance(value, Node):
            container[index] = value
        elif isinstance(old, Node):
            old = old.value
            container[index].value = Node.wrap(value).value
        else:
            container[index] = Node.wrap(value)
        return _unwrap_one(old)

    def set_index(self, index: int, value: Any) -> tuple[str | None, Any]:
        """
        Replaces the element (array) or member value (object) at `index`.

        :returns: The key (None for arrays) and the previous value.
        """
        if isinstance(self.value, list):
            if not -len(self.value) <= index < len(self.value):
                raise IndexError(f"index {index} out of range")
            return None, self._replace(self.value, index, value)
        if isinstance(self.value, OrderedMap):
            key = self.value.key_at(index)
            return key, self._replace(self.value, key, value)
        raise NodeTypeError("set_index", self.value)

    def set_key(self, key: str, value: Any) -> tuple[Any, bool]:
        """
        Sets the value of member `key`, appending it when missing.

        :returns: The previous value and whether the key existed.
        """
        if self.value is None:
            self.value = OrderedMap()
        if not isinstance(self.value, OrderedMap):
            raise NodeTypeError("set_key", self.value)
        if key in self.value:
            return self._replace(self.value, key, value), True
        self.value.set(key, Node.wrap(value))
        return None, False

    def insert(self, index: int, key: str, value: Any) -> tuple[Any, bool]:
        """
        Inserts member `key` at `index`. An existing member keeps its
        position and has its value replaced.
        """
        if self.value is None:
            self.value = OrderedMap()
        if not isinstance(self.value, OrderedMap):
            raise NodeTypeError("insert", self.value)
        if key in self.value:
            return self._replace(self.value, key, value), True
        self.value.insert(index, key, Node.wrap(value))
        return None, False

    def append(self, value: Any) -> None:
        if self.value is None:
            self.value = []
        if not isinstance(self.value, list):
            raise NodeTypeError("append", self.value)
        self.value.append(Node.wrap(value))

    def delete_index(self, index: int) -> tuple[str | None, Any]:
        """Removes the child at `index` together with its comments."""
        if isinstance(self.value, list):
            return None, _unwrap_one(self.value.pop(index))
        if isinstance(self.value, OrderedMap):
            key, old = self.value.delete_index(index)
            return key, _unwrap_one(old)
        raise NodeTypeError("delete_index", self.value)

    def delete_key(self, key: str) -> tuple[Any, bool]:
        if not isinstance(self.value, OrderedMap):
            raise NodeTypeError("delete_key", self.value)
        old, found = self.value.delete_key(key)
        return _unwrap_one(old), found


def _unwrap_deep(value: Any) -> Any:
    value = _unwrap_one(value)
    if isinstance(value, list):
        return [_unwrap_deep(v) for v in value]
    if isinstance(value, OrderedMap):
        return OrderedMap((k, _unwrap_deep(v)) for k, v in value.items())
    return value
