"""
Character classes, escape tables and number recognition shared by the
parser and the encoder.
"""

from __future__ import annotations

import math

import regex

from .types import Number

ESCAPEE = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}
"""Characters following a backslash in a quoted string and what they stand for."""

META = {
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}
"""Table of character substitutions used when escaping."""

PUNCTUATORS = frozenset("{}[],:")

KEYWORDS = {"true": True, "false": False, "null": None}

# Characters that are invisible, deprecated or reserved for formatting and
# must never appear unescaped in the output.
COMMON_RANGE = (
    r"\x7f-\x9f\u00ad\u0600-\u0604\u070f\u17b4\u17b5\u200c-\u200f"
    r"\u2028-\u202f\u2060-\u206f\ufeff\ufff0-\uffff"
)

# the string cannot be written without escapes
NEEDS_ESCAPE = regex.compile(r'[\\"\x00-\x1f' + COMMON_RANGE + r"]")

# the string cannot be written as a quoteless string
NEEDS_QUOTES = regex.compile(
    r"""^\s|^"|^'|^#|^/\*|^//|^\{|^\}|^\[|^\]|^:|^,|\s$|[\x00-\x1f"""
    + COMMON_RANGE
    + r"]"
)

# the string cannot be written as a multiline string (like NEEDS_ESCAPE but
# \n, \t, \\ and \" are allowed)
NEEDS_ESCAPE_ML = regex.compile(r"'''|^\s+$|[\x00-\x08\x0b-\x1f" + COMMON_RANGE + r"]")

# starts with a keyword and is optionally followed by a comment or a punctuator
STARTS_WITH_KEYWORD = regex.compile(r"^(true|false|null)\s*((,|\]|\}|#|//|/\*).*)?$")

# the key cannot be written without quotes
NEEDS_ESCAPE_NAME = regex.compile(r"""[,\{\[\}\]\s:#"']|//|/\*""")

NUMBER = regex.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?")


def is_white(ch: str) -> bool:
    return bool(ch) and ch <= " "


def is_punctuator(ch: str) -> bool:
    return ch in PUNCTUATORS and ch != ""


def is_number_start(ch: str) -> bool:
    return ch == "-" or "0" <= ch <= "9"


def parse_number(text: str, use_number: bool = False) -> int | float | Number | None:
    """
    Parses a complete numeric token.

    Returns None when the text is not exactly one finite number, so the
    caller can fall back to a string.
    """
    if not NUMBER.fullmatch(text):
        return None
    integral = not any(c in text for c in ".eE")
    try:
        value: int | float = int(text) if integral else float(text)
    except ValueError:
        # more digits than int() accepts
        return None
    if not integral and not math.isfinite(value):
        return None
    return Number(text) if use_number else value


def starts_with_number(text: str) -> bool:
    """
    Whether a quoteless reading of `text` would yield a number, i.e. it is
    a number optionally followed by a punctuator or a comment.
    """
    match = NUMBER.match(text)
    if match is None or parse_number(match.group()) is None:
        return False
    rest = text[match.end() :].lstrip("".join(map(chr, range(0x21))))
    return not rest or rest.startswith((",", "}", "]", "#", "//", "/*"))


def quote_replace(text: str) -> str:
    """Escapes every character of `text` that cannot appear in a quoted string."""
    return NEEDS_ESCAPE.sub(
        lambda m: META.get(m.group()) or f"\\u{ord(m.group()):04x}", text
    )
