"""
Exceptions raised while decoding, editing, encoding and binding Hjson.
"""

from __future__ import annotations


class HjsonError(Exception):
    """Base class of every error raised by hjsonkit."""


class DecodeError(HjsonError, ValueError):
    """
    A syntax error in the decoded text.

    Carries the position of the offending character together with its
    1-based line and column and a short snippet of the line it is on.
    """

    def __init__(self, msg: str, doc: str = "", pos: int = 0) -> None:
        self.msg = msg
        self.doc = doc
        self.pos = pos

        line_start = doc.rfind("\n", 0, pos) + 1
        self.lineno = doc.count("\n", 0, pos) + 1
        self.colno = pos - line_start + 1
        self.snippet = doc[line_start : line_start + 20]

        super().__init__(f"{msg} at line {self.lineno},{self.colno} >>> {self.snippet}")

    def __reduce__(self):
        return self.__class__, (self.msg, self.doc, self.pos)


class DuplicateKeyError(DecodeError):
    """A key is repeated inside one object while duplicates are disallowed."""


class NodeTypeError(HjsonError, TypeError):
    """A [Node][hjsonkit.node.Node] holds a value of the wrong kind for the operation."""

    def __init__(self, operation: str, value: object) -> None:
        self.operation = operation
        self.value = value
        super().__init__(
            f"Unexpected value kind {type(value).__name__!r} for Node.{operation}()"
        )


class EncodeError(HjsonError, ValueError):
    """The value cannot be encoded."""


class CircularReferenceError(EncodeError):
    """The value contains itself."""


class UnsupportedValueError(EncodeError, TypeError):
    """The value is of a type that Hjson cannot represent."""


class BindError(HjsonError, ValueError):
    """Decoded data cannot be bound to the requested record type."""


class UnknownFieldError(BindError):
    """An object key does not match any field of the record it is bound to."""

    def __init__(self, cls: type, keys: list[str]) -> None:
        self.cls = cls
        self.keys = keys
        super().__init__(
            f"Unknown field(s) {', '.join(map(repr, keys))} for {cls.__qualname__}"
        )
