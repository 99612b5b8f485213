"""
Decoding and encoding options.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class DecoderOptions:
    use_number: bool = False
    """Keep numbers as [Number][hjsonkit.types.Number] tokens instead of `int`/`float`."""
    disallow_duplicate_keys: bool = False
    """Raise [DuplicateKeyError][hjsonkit.errors.DuplicateKeyError] on a repeated key."""
    whitespace_as_comments: bool = True
    """Keep blank lines as comments when decoding into a Node tree."""
    disallow_unknown_fields: bool = False
    """Reject object keys matching no field when binding to a record."""
    max_depth: int = 256
    """Maximum nesting depth of arrays and objects."""

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")


@dataclass
class EncoderOptions:
    eol: str = "\n"
    """End of line, either `\\n` or `\\r\\n`."""
    braces_same_line: bool = True
    """Place opening braces on the same line as the key or bullet."""
    emit_root_braces: bool = True
    """Emit braces for the root object."""
    quote_always: bool = False
    """Always place strings in quotes."""
    quote_ambiguous_strings: bool = True
    """Place strings in quotes if they could otherwise be read as a number, boolean or null."""
    indent_by: str = "  "
    """Indentation unit."""
    base_indentation: str = ""
    """Prefix of every line, for output embedded in indented text."""
    comments: bool = True
    """Write the comments of Node input."""
    cycle_depth: int = 64
    """Nesting depth after which containers are checked for circular references."""

    def __post_init__(self) -> None:
        if self.eol not in ("\n", "\r\n"):
            raise ValueError(f"eol must be '\\n' or '\\r\\n', got {self.eol!r}")
        for name in ("indent_by", "base_indentation"):
            if getattr(self, name).strip(" \t"):
                raise ValueError(f"{name} must only contain spaces and tabs")
