"""
This module handles whitespaces and comments
"""

from __future__ import annotations

from functools import lru_cache

from lark.exceptions import UnexpectedInput
from lark.lark import Lark
from lark.lexer import Token
from lark.visitors import Transformer

from .types import (
    WSC,
    BlockStyleComment,
    HashStyleComment,
    LineStyleComment,
    WhiteSpace,
)


class WSCTransformer(Transformer):
    """
    A [Transformer][lark.visitors.Transformer] handling whitespaces and comments.
    """

    def WS(self, token: Token) -> WhiteSpace:
        return WhiteSpace(token.value)

    def HASH_COMMENT(self, token: Token) -> HashStyleComment:
        return HashStyleComment(token.value[1:])

    def CPP_COMMENT(self, token: Token) -> LineStyleComment:
        return LineStyleComment(token.value[2:])

    def C_COMMENT(self, token: Token) -> BlockStyleComment:
        return BlockStyleComment(token.value[2:-2])

    def wscs(self, wscs: list[WSC]) -> list[WSC]:
        return wscs


transformer = WSCTransformer()


parser = Lark.open(
    "grammar/wsc.lark",
    rel_to=__file__,
    lexer="basic",
    parser="lalr",
    start="wscs",
    maybe_placeholders=False,
    regex=True,
)


@lru_cache(maxsize=256)
def parse_wsc(text: str) -> tuple[WSC, ...]:
    """
    Split text made of whitespaces and comments into its items.

    :param text: The text to split.
    :raises ValueError: if the text contains anything else.
    """
    try:
        tree = parser.parse(text)
    except UnexpectedInput as e:
        raise ValueError(
            f"{text!r} is not made of whitespaces and comments only"
        ) from e
    return tuple(transformer.transform(tree))


def ends_with_line_comment(text: str) -> bool:
    """Whether the next token written after `text` would be commented out."""
    items = parse_wsc(text)
    return bool(items) and isinstance(items[-1], LineStyleComment)
