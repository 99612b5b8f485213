from __future__ import annotations

import codecs

from .errors import DecodeError

EOF = ""
"""Sentinel character returned past either end of the text."""


def to_text(src: str | bytes | bytearray) -> str:
    if isinstance(src, (bytes, bytearray)):
        src = bytes(src)
        if src.startswith(codecs.BOM_UTF8):
            src = src[len(codecs.BOM_UTF8) :]
        return src.decode("utf-8")
    if not isinstance(src, str):
        raise TypeError(f"Expected str or bytes, got {type(src).__name__}")
    return src


class Cursor:
    """
    A position-tracking iterator over the text being decoded.

    `ch` is the current character and `at` the offset of the next one,
    so the current character sits at `at - 1`.
    """

    def __init__(self, src: str | bytes | bytearray) -> None:
        self.text: str = to_text(src)
        self.length: int = len(self.text)
        self.at: int = 0
        self.ch: str = EOF
        self.reset()

    @property
    def pos(self) -> int:
        """Offset of the current character."""
        return self.at - 1

    def reset(self) -> None:
        """Rewinds to the first character."""
        self.at = 0
        self.advance()

    def advance(self) -> bool:
        """Moves to the next character, returns False at the end of the text."""
        if self.at < self.length:
            self.ch = self.text[self.at]
            self.at += 1
            return True
        self.ch = EOF
        self.at = self.length + 1
        return False

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character `offset` places after the current one
        (`peek(0)` is the next character) without moving.
        """
        pos = self.at + offset
        if 0 <= pos < self.length:
            return self.text[pos]
        return EOF

    def seek(self, pos: int) -> None:
        """Makes the character at `pos` the current one."""
        self.at = pos
        self.advance()

    def error_at(self, message: str, pos: int | None = None) -> DecodeError:
        return self.error(DecodeError, message, pos)

    def error(
        self, cls: type[DecodeError], message: str, pos: int | None = None
    ) -> DecodeError:
        if pos is None:
            pos = self.pos
        return cls(message, self.text, max(0, min(pos, self.length)))
