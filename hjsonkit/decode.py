"""
The Hjson parser.

A single recursive descent over a [Cursor][hjsonkit.cursor.Cursor]. When
comments are kept, the whitespace and comments skipped between tokens are
attributed to the comment slots of the surrounding
[Node][hjsonkit.node.Node]s instead of being dropped.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from .cursor import EOF, Cursor
from .errors import DecodeError, DuplicateKeyError
from .lexical import (
    ESCAPEE,
    KEYWORDS,
    is_number_start,
    is_punctuator,
    is_white,
    parse_number,
)
from .node import Comments, Node
from .options import DecoderOptions
from .orderedmap import OrderedMap

HEXDIGITS = frozenset("0123456789abcdefABCDEF")

_MISSING = object()


def line_end(text: str) -> int:
    """
    Offset of the first line break of a whitespace and comment run that is
    not part of a comment, -1 if there is none.

    A `\\r\\n` pair counts as a line break starting at the `\\r`.
    """
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c == "\n":
            return i - 1 if i > 0 and text[i - 1] == "\r" else i
        if c == "#" or text.startswith("//", i):
            i = text.find("\n", i)
            if i < 0:
                return -1
        elif text.startswith("/*", i):
            i = text.index("*/", i + 2) + 2
        else:
            i += 1
    return -1


class Parser(Cursor):
    """
    Parses one Hjson document.

    :param src: The document.
    :param options: Decoding options.
    :param keep_comments: Produce a [Node][hjsonkit.node.Node] tree holding
        every comment instead of plain values.
    """

    def __init__(
        self,
        src: str | bytes | bytearray,
        options: DecoderOptions | None = None,
        keep_comments: bool = False,
    ) -> None:
        self.options = options or DecoderOptions()
        self.keep_comments = keep_comments
        self.depth = 0
        super().__init__(src)

    def reset(self) -> None:
        super().reset()
        self.depth = 0

    # Comment capture

    def slot(self, text: str, newlines: int) -> str:
        """
        Returns `text` if it has to be kept in a comment slot.

        Whitespace only text is kept when it holds more line breaks than
        the `newlines` the encoder puts at that place.
        """
        if not self.keep_comments or not text:
            return ""
        if "#" in text or "/" in text:
            return text
        if self.options.whitespace_as_comments and text.count("\n") > newlines:
            return text
        return ""

    def wrap(self, value: Any, inside: str = "") -> Any:
        if not self.keep_comments:
            return value
        return Node(value, Comments(inside=inside))

    def white(self) -> str:
        """Skips whitespace and comments, returns the skipped text."""
        start = self.pos
        while self.ch:
            while is_white(self.ch):
                self.advance()
            if self.ch == "#" or self.ch == "/" and self.peek() == "/":
                while self.ch and self.ch != "\n":
                    self.advance()
            elif self.ch == "/" and self.peek() == "*":
                comment = self.pos
                self.advance()
                self.advance()
                while self.ch and not (self.ch == "*" and self.peek() == "/"):
                    self.advance()
                if not self.ch:
                    raise self.error_at("Unterminated block comment", comment)
                self.advance()
                self.advance()
            else:
                break
        return self.text[start : self.pos]

    def trailing(self) -> tuple[str, str]:
        """
        Skips the text after a value, including an optional comma.

        :returns: The part on the value's line and the remainder.
        """
        first = self.white()
        second = ""
        if self.ch == ",":
            self.advance()
            second = self.white()
        if not self.keep_comments:
            return "", ""
        if (i := line_end(first)) >= 0:
            return first[:i], first[i:] + second
        if (i := line_end(second)) >= 0:
            return first + second[:i], second[i:]
        return first + second, ""

    # Strings

    def read_hex(self) -> int:
        digits = ""
        for _ in range(4):
            self.advance()
            if self.ch not in HEXDIGITS:
                raise self.error_at(f"Bad \\u char {self.ch}")
            digits += self.ch
        return int(digits, 16)

    def read_string(self, allow_ml: bool) -> str:
        """
        Reads a string quoted with the current character.

        `'''` right after the opening quote starts a multiline string.
        """
        exit_ch = self.ch
        chars: list[str] = []
        while self.advance():
            if self.ch == exit_ch:
                self.advance()
                if allow_ml and exit_ch == "'" and self.ch == "'" and not chars:
                    self.advance()
                    return self.read_ml_string()
                return "".join(chars)
            if self.ch == "\\":
                self.advance()
                if self.ch == "u":
                    code = self.read_hex()
                    if 0xDC00 <= code <= 0xDFFF and chars and "\ud800" <= chars[-1] <= "\udbff":
                        # surrogate pair
                        high = ord(chars[-1]) - 0xD800
                        chars[-1] = chr(0x10000 + (high << 10) + (code - 0xDC00))
                    else:
                        chars.append(chr(code))
                elif self.ch and self.ch in ESCAPEE:
                    chars.append(ESCAPEE[self.ch])
                else:
                    raise self.error_at(f"Bad escape \\{self.ch}")
            elif self.ch == "\n" or self.ch == "\r":
                raise self.error_at("Bad string containing newline")
            else:
                chars.append(self.ch)
        raise self.error_at("Bad string")

    def read_ml_string(self) -> str:
        # the current character follows the opening '''
        indent = 0
        while (c := self.peek(-indent - 5)) != EOF and c != "\n":
            indent += 1

        def skip_indent() -> None:
            skip = indent
            while is_white(self.ch) and self.ch != "\n" and skip > 0:
                skip -= 1
                self.advance()

        # skip white/to newline
        while is_white(self.ch) and self.ch != "\n":
            self.advance()
        if self.ch == "\n":
            self.advance()
            skip_indent()

        chars: list[str] = []
        triple = 0
        last_lf = False
        while True:
            if not self.ch:
                raise self.error_at("Bad multiline string")
            if self.ch == "'":
                triple += 1
                self.advance()
                if triple == 3:
                    if last_lf:
                        chars.pop()
                    return "".join(chars)
                continue
            while triple > 0:
                chars.append("'")
                triple -= 1
                last_lf = False
            if self.ch == "\n":
                chars.append("\n")
                last_lf = True
                self.advance()
                skip_indent()
            else:
                if self.ch != "\r":
                    chars.append(self.ch)
                    last_lf = False
                self.advance()

    def read_keyname(self) -> str:
        # quotes for keys are optional unless they include {}[],: or whitespace
        if self.ch == '"' or self.ch == "'":
            return self.read_string(False)

        start = self.pos
        chars: list[str] = []
        space = -1
        while True:
            if self.ch == ":":
                if not chars:
                    raise self.error_at(
                        "Found ':' but no key name (for an empty key name use quotes)"
                    )
                if space >= 0 and space != len(chars):
                    raise self.error_at(
                        "Found whitespace in your key name (use quotes to include)",
                        start + space,
                    )
                return "".join(chars)
            if self.ch <= " ":
                if not self.ch:
                    raise self.error_at(
                        "Found EOF while looking for a key name (check your syntax)"
                    )
                if space < 0:
                    space = len(chars)
            elif is_punctuator(self.ch):
                raise self.error_at(
                    f"Found '{self.ch}' where a key name was expected "
                    "(check your syntax or use quotes if the key name includes {}[],: or whitespace)"
                )
            else:
                chars.append(self.ch)
            self.advance()

    # Values

    def literal(self, text: str) -> Any:
        if text in KEYWORDS:
            return KEYWORDS[text]
        if text and is_number_start(text[0]):
            number = parse_number(text, self.options.use_number)
            if number is not None:
                return number
        return _MISSING

    def read_tfnns(self) -> Any:
        """
        Reads a quoteless value: `true`, `false`, `null`, a number or a string.

        Keywords and numbers end at a punctuator or a comment, strings run to
        the end of the line.
        """
        if is_punctuator(self.ch):
            raise self.error_at(
                f"Found a punctuator character '{self.ch}' when expecting "
                "a quoteless string (check your syntax)"
            )
        start = self.pos
        while True:
            self.advance()
            eol = self.ch == "\r" or self.ch == "\n" or not self.ch
            if (
                eol
                or self.ch in (",", "}", "]", "#")
                or self.ch == "/" and self.peek() in ("/", "*")
            ):
                raw = self.text[start : self.pos]
                value = self.literal(raw.strip())
                if value is not _MISSING:
                    # trailing whitespace belongs to the comment after the value
                    self.seek(start + len(raw.rstrip()))
                    return value
                if eol:
                    return raw.strip()

    def enter(self) -> None:
        self.depth += 1
        if self.depth > self.options.max_depth:
            raise self.error_at(
                f"Nesting too deep (more than {self.options.max_depth} levels)"
            )

    def read_array(self) -> Any:
        self.enter()
        array: list[Any] = []

        self.advance()
        before = self.white()
        if self.ch == "]":
            self.advance()
            self.depth -= 1
            return self.wrap(array, self.slot(before, 0))

        while self.ch:
            value = self.read_value()
            array.append(value)
            after, rest = self.trailing()
            if self.keep_comments:
                value.comments.before = self.slot(before, 1)
                value.comments.after = self.slot(after, 0)
            before = rest
            # in Hjson the comma is optional and trailing commas are allowed
            if self.ch == "]":
                self.advance()
                self.depth -= 1
                return self.wrap(array, self.slot(before, 1))

        raise self.error_at(
            "End of input while parsing an array (did you forget a closing ']'?)"
        )

    def add_member(self, obj: OrderedMap, key: str, value: Any, pos: int) -> None:
        if key in obj:
            if self.options.disallow_duplicate_keys:
                raise self.error(
                    DuplicateKeyError, f"Found duplicate values for the key '{key}'", pos
                )
            logger.debug(f"Duplicate key {key!r} overwrites the previous value")
        obj.set(key, value)

    def read_object(self, without_braces: bool = False) -> Any:
        self.enter()
        obj: OrderedMap[Any] = OrderedMap()

        if not without_braces:
            self.advance()
        before = self.white()
        if self.ch == "}" and not without_braces:
            self.advance()
            self.depth -= 1
            return self.wrap(obj, self.slot(before, 0))

        first = True
        while self.ch:
            pos = self.pos
            key = self.read_keyname()
            self.white()
            if self.ch != ":":
                raise self.error_at(f"Expected ':' instead of '{self.ch}'")
            self.advance()
            key_text = self.white()
            value = self.read_value()
            self.add_member(obj, key, value, pos)
            after, rest = self.trailing()
            if self.keep_comments:
                value.comments.before = self.slot(
                    before, 0 if first and without_braces else 1
                )
                if "#" in key_text or "/" in key_text:
                    value.comments.key = key_text
                value.comments.after = self.slot(after, 0)
            before = rest
            first = False
            if self.ch == "}" and not without_braces:
                self.advance()
                self.depth -= 1
                return self.wrap(obj, self.slot(before, 1))

        if without_braces:
            self.depth -= 1
            return self.wrap(obj, self.slot(before, 0))
        raise self.error_at(
            "End of input while parsing an object (did you forget a closing '}'?)"
        )

    def read_value(self) -> Any:
        """Reads the value starting at the current character."""
        if self.ch == "{":
            return self.read_object()
        if self.ch == "[":
            return self.read_array()
        if self.ch == '"' or self.ch == "'":
            return self.wrap(self.read_string(True))
        if not self.ch:
            raise self.error_at("Found EOF while looking for a value")
        return self.wrap(self.read_tfnns())

    def finish(self, root: Any, before: str) -> Any:
        after = self.white()
        if self.ch:
            raise self.error_at("Syntax error, found trailing characters")
        if self.keep_comments:
            root.comments.before = self.slot(before, 0)
            root.comments.after = self.slot(after, 0)
        return root

    def parse(self) -> Any:
        """
        Parses the whole document.

        Braces of a root object are optional: anything that is neither an
        object nor an array is first read as an object without braces, then
        as a single value.
        """
        before = self.white()
        if self.ch == "{" or self.ch == "[":
            return self.finish(self.read_value(), before)

        self.reset()
        try:
            return self.finish(self.read_object(without_braces=True), "")
        except DecodeError as e:
            error = e

        logger.debug(
            f"Root is not an object without braces ({error.msg}), reading a single value"
        )
        self.reset()
        try:
            before = self.white()
            return self.finish(self.read_value(), before)
        except DecodeError:
            raise error from None
