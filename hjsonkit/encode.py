from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping, TextIO

from loguru import logger

from . import wsc
from .bind import is_record, to_node
from .errors import CircularReferenceError, EncodeError, UnsupportedValueError
from .lexical import (
    NEEDS_ESCAPE,
    NEEDS_ESCAPE_ML,
    NEEDS_ESCAPE_NAME,
    NEEDS_QUOTES,
    STARTS_WITH_KEYWORD,
    is_white,
    parse_number,
    quote_replace,
    starts_with_number,
)
from .node import Comments, Node
from .options import EncoderOptions
from .types import Number

HjsonEncoderMethod = Callable[[Any, str, bool, bool], None]
"""An encoder method for a specific type: `(obj, separator, no_indent, is_root)`."""


def format_decimal(value: Decimal) -> str:
    """
    Returns the shorter of the fixed-point and the exponential notation of a
    finite non-zero number, fixed-point on a tie.
    """
    sign, digits, exponent = value.as_tuple()
    assert isinstance(exponent, int)
    digits = list(digits)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    text = "".join(map(str, digits))
    point = len(text) + exponent

    if exponent >= 0:
        fixed = text + "0" * exponent
    elif point > 0:
        fixed = f"{text[:point]}.{text[point:]}"
    else:
        fixed = "0." + "0" * -point + text

    mantissa = f"{text[0]}.{text[1:]}" if len(text) > 1 else text
    exp = point - 1
    scientific = f"{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"

    out = scientific if len(scientific) < len(fixed) else fixed
    return f"-{out}" if sign else out


def format_float(value: float) -> str:
    if not math.isfinite(value):
        return "null"
    if value == 0:
        return "0"
    return format_decimal(Decimal(repr(value)))


def quote_name(name: str) -> str:
    if not name:
        return '""'
    if NEEDS_ESCAPE_NAME.search(name) or NEEDS_ESCAPE.search(name):
        return f'"{quote_replace(name)}"'
    return name


def ml_safe(value: str, inline: bool) -> bool:
    """Whether `value` survives being written as a multiline string."""
    if NEEDS_ESCAPE_ML.search(value):
        return False
    if inline:
        # the parser skips whitespace after the opening ''' and a trailing '
        # would merge with the closing '''
        return not is_white(value[0]) and not value.endswith("'")
    return True


class Encoder:
    """
    Writes a value tree, a [Node][hjsonkit.node.Node] tree or a record as Hjson.

    Encoding methods share the signature `(obj, separator, no_indent, is_root)`:
    `separator` is written right before the value (a space after a key,
    nothing after an array bullet), `no_indent` keeps an opening bracket on the
    current line and `is_root` marks the document root.
    """

    def __init__(self, fp: TextIO, options: EncoderOptions | None = None):
        self.encode_func: dict[tuple[type, ...], HjsonEncoderMethod] = {
            (Node,): self.encode_node,
            (Enum,): self.encode_enum,
            (bool, type(None)): self.encode_bool_like,
            (Number, int, float, Decimal): self.encode_number,
            (str,): self.encode_string,
            (Mapping,): self.encode_mapping,
            (list, tuple): self.encode_iterable,
        }
        self.fp = fp
        self.options = options or EncoderOptions()
        self.indent = 0
        self.depth = 0
        self.parents: set[int] = set()

    # Layout helpers

    def indentation(self, level: int) -> str:
        return self.options.base_indentation + self.options.indent_by * level

    def newline(self, level: int) -> str:
        return self.options.eol + self.indentation(level)

    def write_indent(self, level: int) -> None:
        self.fp.write(self.newline(level))

    def check_comment(self, text: str) -> None:
        try:
            wsc.parse_wsc(text)
        except ValueError as e:
            raise EncodeError(
                f"Comment text must only contain whitespaces and comments: {text!r}"
            ) from e

    def write_comments(
        self,
        text: str,
        lead: str,
        indent: str,
        trail: str,
        empty: str | None = None,
        first: bool = False,
    ) -> None:
        """
        Writes comment text placed before a token.

        Text captured by the parser starts with a line break (or with
        whitespace right after an opening bracket) and is written verbatim.
        Other text is written after `lead`, its lines indented with `indent`,
        and followed by `trail` so the next token starts on a fresh line.

        :param empty: Written instead when there is no text, defaults to `lead`.
        """
        if not text:
            self.fp.write(lead if empty is None else empty)
            return
        self.check_comment(text)
        eol = self.options.eol

        if text[0] in "\r\n" or first and text[0] in " \t":
            self.fp.write(text)
            if wsc.ends_with_line_comment(text):
                self.fp.write(trail)
            return

        lines = text.replace("\r\n", "\n").split("\n")
        out = [lines[0]]
        for line in lines[1:]:
            out.append(indent + line if line[:1] not in ("", " ", "\t") else line)
        if len(lines) > 1 and not lines[-1].strip():
            out[-1] = trail[len(eol) :]
            self.fp.write(lead + eol.join(out))
        else:
            self.fp.write(lead + eol.join(out) + trail)

    def write_after(self, text: str) -> None:
        self.check_comment(text)
        self.fp.write(text if is_white(text[0]) else f" {text}")

    def key_separator(self, text: str) -> str:
        self.check_comment(text)
        if not is_white(text[0]):
            text = f" {text}"
        if wsc.ends_with_line_comment(text):
            text += self.newline(self.indent + 1)
        return text

    # Entry points

    def encode_root(self, obj: Any) -> None:
        """Writes a whole document."""
        if isinstance(obj, Node) and self.options.comments and obj.comments.before:
            before = obj.comments.before
            base = self.options.base_indentation
            self.check_comment(before)
            # the root value follows on the same line unless a line comment ends the text
            trail = self.options.eol if wsc.ends_with_line_comment(before) else ""
            self.write_comments(before, base, base, trail, empty="", first=True)
        self.encode(obj, self.options.base_indentation, True, True)

    def encode(
        self, obj: Any, separator: str = "", no_indent: bool = True, is_root: bool = False
    ) -> None:
        ident = id(obj)
        tracked = isinstance(obj, (Node, Mapping, list, tuple)) or is_record(obj)
        if tracked:
            self.depth += 1
            if self.depth > self.options.cycle_depth:
                if not self.parents:
                    logger.debug(
                        f"Nesting deeper than {self.options.cycle_depth} levels, "
                        "checking for circular references"
                    )
                if ident in self.parents:
                    raise CircularReferenceError(
                        f"Circular reference found, object of type {type(obj).__name__}"
                    )
                self.parents.add(ident)
        try:
            if is_record(obj):
                obj = to_node(obj)
            for typ_tuple, func in self.encode_func.items():
                if isinstance(obj, typ_tuple):
                    func(obj, separator, no_indent, is_root)
                    return
            raise UnsupportedValueError(f"Unsupported type: {type(obj).__name__}")
        finally:
            if tracked:
                self.parents.discard(ident)
                self.depth -= 1

    # Values

    def encode_node(self, obj: Node, separator: str, no_indent: bool, is_root: bool) -> None:
        comments = obj.comments if self.options.comments else Comments()
        value = obj.value
        if isinstance(value, Mapping):
            self.encode_mapping(value, separator, no_indent, is_root, comments.inside)
        elif isinstance(value, (list, tuple)):
            self.encode_iterable(value, separator, no_indent, is_root, comments.inside)
        elif isinstance(value, str) and not isinstance(value, Number):
            # a comment after a quoteless string would be read as part of it
            self.quote(value, separator, is_root, force=bool(comments.after))
        else:
            self.encode(value, separator, no_indent, is_root)
        if comments.after:
            self.write_after(comments.after)

    def encode_enum(self, obj: Enum, separator: str, no_indent: bool, is_root: bool) -> None:
        self.encode(obj.value, separator, no_indent, is_root)

    def encode_bool_like(
        self, obj: bool | None, separator: str, no_indent: bool, is_root: bool
    ) -> None:
        self.fp.write(separator + {True: "true", False: "false", None: "null"}[obj])

    def encode_number(
        self,
        obj: Number | int | float | Decimal,
        separator: str,
        no_indent: bool,
        is_root: bool,
    ) -> None:
        if isinstance(obj, Number):
            if parse_number(obj) is None:
                raise EncodeError(f"Invalid number literal: {str(obj)!r}")
            text = str(obj)
        elif isinstance(obj, int):
            text = str(int(obj))
        elif isinstance(obj, Decimal):
            if not obj.is_finite():
                text = "null"
            elif obj.is_zero():
                text = "0"
            else:
                text = format_decimal(obj)
        else:
            text = format_float(obj)
        self.fp.write(separator + text)

    def encode_string(self, obj: str, separator: str, no_indent: bool, is_root: bool) -> None:
        self.quote(obj, separator, is_root)

    def quote(self, value: str, separator: str, is_root: bool, force: bool = False) -> None:
        """
        Writes a string, quoteless when it reads back unchanged, otherwise
        quoted, as a multiline string, or quoted with escapes.
        """
        options = self.options
        if not value:
            self.fp.write(f'{separator}""')
        elif (
            force
            or options.quote_always
            or NEEDS_QUOTES.search(value)
            # a root string with a colon would read back as an object without braces
            or is_root
            and ":" in value
            or options.quote_ambiguous_strings
            and (starts_with_number(value) or STARTS_WITH_KEYWORD.match(value))
        ):
            if not NEEDS_ESCAPE.search(value):
                self.fp.write(f'{separator}"{value}"')
            elif not is_root and ml_safe(value, "\n" not in value):
                self.ml_string(value, separator)
            else:
                self.fp.write(f'{separator}"{quote_replace(value)}"')
        else:
            self.fp.write(separator + value)

    def ml_string(self, value: str, separator: str) -> None:
        lines = value.split("\n")
        if len(lines) == 1:
            # single line, still avoids escaping backslashes
            self.fp.write(f"{separator}'''{value}'''")
            return

        if separator:
            # after a key: the block starts on its own line one level deeper
            level = self.indent + 1
            self.fp.write(separator.rstrip())
            self.write_indent(level)
        else:
            # array element: the bullet line is already indented
            level = self.indent
        self.fp.write("'''")
        for line in lines:
            self.write_indent(level if line else 0)
            self.fp.write(line)
        self.write_indent(level)
        self.fp.write("'''")

    # Containers

    def open_bracket(self, bracket: str, separator: str, no_indent: bool) -> None:
        if not no_indent and not self.options.braces_same_line:
            self.write_indent(self.indent)
        else:
            self.fp.write(separator)
        self.fp.write(bracket)

    def write_empty(self, brackets: str, separator: str, inside: str) -> None:
        self.fp.write(separator + brackets[0])
        if inside:
            self.write_comments(
                inside,
                self.newline(self.indent + 1),
                self.indentation(self.indent + 1),
                self.newline(self.indent),
                empty="",
                first=True,
            )
        self.fp.write(brackets[1])

    def child_comments(self, child: Any) -> Comments:
        if isinstance(child, Node) and self.options.comments:
            return child.comments
        return Comments()

    def write_tail(self, inside: str, level: int) -> None:
        self.write_comments(
            inside,
            self.newline(level + 1),
            self.indentation(level + 1),
            self.newline(level),
            empty=self.newline(level),
        )

    def encode_iterable(
        self,
        obj: list | tuple,
        separator: str,
        no_indent: bool,
        is_root: bool,
        inside: str = "",
    ) -> None:
        if not obj:
            self.write_empty("[]", separator, inside)
            return

        indent1 = self.indent
        self.open_bracket("[", separator, no_indent)
        self.indent += 1
        line = self.newline(self.indent)
        for i, item in enumerate(obj):
            self.write_comments(
                self.child_comments(item).before,
                line,
                self.indentation(self.indent),
                line,
                first=i == 0,
            )
            self.encode(item, "", True, False)
        self.indent = indent1
        self.write_tail(inside, indent1)
        self.fp.write("]")

    def encode_mapping(
        self,
        obj: Mapping,
        separator: str,
        no_indent: bool,
        is_root: bool,
        inside: str = "",
    ) -> None:
        braces = not is_root or self.options.emit_root_braces
        if not obj:
            self.write_empty("{}", separator, inside)
            return

        indent1 = self.indent
        if braces:
            self.open_bracket("{", separator, no_indent)
            self.indent += 1
        line = self.newline(self.indent)
        for i, (key, item) in enumerate(obj.items()):
            if not isinstance(key, str):
                raise UnsupportedValueError(
                    f"Object keys must be strings, got {type(key).__name__}"
                )
            comments = self.child_comments(item)
            if i == 0 and not braces:
                # members of a root without braces start at the base indentation
                base = self.options.base_indentation
                self.write_comments(comments.before, base, base, line)
            else:
                self.write_comments(
                    comments.before,
                    line,
                    self.indentation(self.indent),
                    line,
                    first=i == 0,
                )
            self.fp.write(quote_name(key) + ":")
            if comments.key:
                self.encode(item, self.key_separator(comments.key), True, False)
            else:
                self.encode(item, " ", False, False)

        self.indent = indent1
        if braces:
            self.write_tail(inside, indent1)
            self.fp.write("}")
        elif inside:
            self.write_comments(inside, line, self.indentation(indent1), "", empty="")
