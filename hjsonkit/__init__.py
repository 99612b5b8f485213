"""Lossless Hjson decoding and encoding, with comment preservation."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, TextIO

from .decode import Parser
from .encode import Encoder as Encoder
from .errors import BindError as BindError
from .errors import CircularReferenceError as CircularReferenceError
from .errors import DecodeError as DecodeError
from .errors import DuplicateKeyError as DuplicateKeyError
from .errors import EncodeError as EncodeError
from .errors import HjsonError as HjsonError
from .errors import NodeTypeError as NodeTypeError
from .errors import UnknownFieldError as UnknownFieldError
from .errors import UnsupportedValueError as UnsupportedValueError
from .node import Comments as Comments
from .node import Node as Node
from .options import DecoderOptions as DecoderOptions
from .options import EncoderOptions as EncoderOptions
from .orderedmap import OrderedMap as OrderedMap
from .types import Number as Number


def loads(src: str | bytes | bytearray, options: DecoderOptions | None = None) -> Any:
    """
    Parse Hjson from a string.

    Objects decode to [OrderedMap][hjsonkit.orderedmap.OrderedMap], arrays to
    `list`, numbers to `int`/`float` (or [Number][hjsonkit.types.Number]
    with `use_number`).
    """
    return Parser(src, options).parse()


def loads_node(src: str | bytes | bytearray, options: DecoderOptions | None = None) -> Node:
    """
    Parse Hjson from a string into a [Node][hjsonkit.node.Node] tree keeping
    every comment.
    """
    return Parser(src, options, keep_comments=True).parse()


def _read(file: TextIO | Path) -> str:
    return file.read_text(encoding="utf-8") if isinstance(file, Path) else file.read()


def load(file: TextIO | Path, options: DecoderOptions | None = None) -> Any:
    """
    Parse Hjson from a file-like object
    """
    return loads(_read(file), options)


def load_node(file: TextIO | Path, options: DecoderOptions | None = None) -> Node:
    return loads_node(_read(file), options)


def dumps(obj: Any, options: EncoderOptions | None = None, endline: bool = False) -> str:
    """
    Serialize Hjson to a string
    """
    fp = io.StringIO()
    dump(obj, fp, options, endline)
    return fp.getvalue()


def dump(
    obj: Any,
    out: TextIO | Path,
    options: EncoderOptions | None = None,
    endline: bool = False,
) -> None:
    """
    Serialize Hjson to a file-like object
    """
    if isinstance(out, Path):
        with out.open("w", encoding="utf-8", newline="") as fp:
            dump(obj, fp, options, endline)
        return
    options = options or EncoderOptions()
    Encoder(out, options).encode_root(obj)
    if endline:
        out.write(options.eol)
