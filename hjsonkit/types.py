"""
This modules contains the shared value types.

Most of the time you won't have to instantiate them manually.
"""

from __future__ import annotations

from typing_extensions import TypeAlias


class Number(str):
    """
    A numeric token kept as its exact source text.

    Returned instead of `int`/`float` when decoding with `use_number`,
    and written back verbatim by the encoder.
    """

    def __repr__(self) -> str:
        return f"Number({super().__repr__()})"

    def is_integer(self) -> bool:
        return not any(c in self for c in ".eE")

    def to_python(self) -> int | float:
        """The `int` (integral token) or `float` value of this token."""
        return int(self) if self.is_integer() else float(self)

    def __int__(self) -> int:
        return int(str(self)) if self.is_integer() else int(float(self))

    def __float__(self) -> float:
        return float(str(self))


class WhiteSpace(str):
    """Stores a sequence of whitespaces"""

    def __repr__(self) -> str:
        return f"WhiteSpace({super().__repr__()})"


class Comment(str):
    """Store a comment"""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({super().__repr__()})"


WSC: TypeAlias = "WhiteSpace | Comment"
"""A whitespace or a comment"""


class BlockStyleComment(Comment):
    """Stores a block-style comment (ie. starting with `/*` and ending with `*/`)"""


class LineStyleComment(Comment):
    """Stores a line-style comment (ie. starting with `//` and ending at the end of the current line)"""


class HashStyleComment(LineStyleComment):
    """Stores a hash-style comment (ie. starting with `#` and ending at the end of the current line)"""
