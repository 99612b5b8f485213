"""
Binding between Hjson documents and typed records.

Records are dataclasses, built through [dacite](https://github.com/konradhalas/dacite),
and pydantic models. Dataclass fields are configured through their metadata:

```py
@dataclass
class Server:
    host: str = field(metadata={"comment": "Listening address"})
    port: int = field(default=80, metadata={"name": "listen_port"})
    tags: list[str] = field(default_factory=list, metadata={"omitempty": True})
    secret: str = field(default="", metadata={"name": "-"})
```

`name` renames the field in the document (`"-"` leaves it out), `comment` is
written as `#` comments before the key and `omitempty` leaves out empty values.
A docstring right below a field works as its comment too. Pydantic models use
field aliases and `Field(description=...)` instead.
"""

from __future__ import annotations

import ast
import dataclasses
import enum
import inspect
import re
import types
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from functools import lru_cache
from typing import Any, NamedTuple, TypeVar, Union, cast

import typing_extensions
from dacite.config import Config
from dacite.core import from_dict as _from_dict
from dacite.exceptions import DaciteError
from loguru import logger
from pydantic import BaseModel, ValidationError

from .decode import Parser
from .errors import BindError, CircularReferenceError, UnknownFieldError
from .node import Comments, Node
from .options import DecoderOptions
from .orderedmap import OrderedMap
from .types import Number

T = TypeVar("T")

Unions = {Union, types.UnionType}

NoneType = type(None)


class FieldInfo(NamedTuple):
    attr: str
    """Attribute name on the record."""
    name: str
    """Key in the document."""
    type: Any
    comment: str | None
    omitempty: bool


def is_class(tp: Any) -> bool:
    # parametrized generics such as list[int] pass isinstance(tp, type) on 3.10
    return isinstance(tp, type) and typing_extensions.get_origin(tp) is None


def is_record_type(tp: Any) -> bool:
    return (
        is_class(tp)
        and not issubclass(tp, (Node, Comments))
        and (dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel))
    )


def is_record(obj: Any) -> bool:
    """
    Whether `obj` is a dataclass instance or a pydantic model instance.

    Document nodes are dataclasses too but are never records.
    """
    if isinstance(obj, (Node, Comments)):
        return False
    return isinstance(obj, BaseModel) or (
        dataclasses.is_dataclass(obj) and not isinstance(obj, type)
    )


def cleanup_src(src: str) -> str:
    lines = src.expandtabs().split("\n")
    margin = len(lines[0]) - len(lines[0].lstrip())
    for i in range(len(lines)):
        lines[i] = lines[i][margin:]
    return "\n".join(lines)


def extract_field_docs(cls: type) -> dict[str, str]:
    """
    Collects the docstrings written right below the field definitions of a class.

    Classes without retrievable source yield no docstrings.
    """
    try:
        src = inspect.getsource(cls)
    except (OSError, TypeError):
        return {}
    node = cast(ast.ClassDef, ast.parse(cleanup_src(src)).body[0])
    doc_store: dict[str, str] = {}
    for i, stmt in enumerate(node.body):
        name: str | None = None
        if (
            isinstance(stmt, ast.Assign)
            and len(stmt.targets) == 1
            and isinstance(stmt.targets[0], ast.Name)
        ):
            name = stmt.targets[0].id
        elif isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
            name = stmt.target.id
        if (
            name is not None
            and i + 1 < len(node.body)
            and isinstance((doc_expr := node.body[i + 1]), ast.Expr)
            and isinstance((doc_const := doc_expr.value), ast.Constant)
            and isinstance(doc_string := doc_const.value, str)
        ):
            doc_store[name] = inspect.cleandoc(doc_string)
    return doc_store


@lru_cache(maxsize=None)
def record_fields(cls: type) -> tuple[FieldInfo, ...]:
    """The fields of a record class, in declaration order."""
    docs = extract_field_docs(cls)
    infos: list[FieldInfo] = []
    if issubclass(cls, BaseModel):
        for attr, info in cls.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            infos.append(
                FieldInfo(
                    attr,
                    info.alias or attr,
                    info.annotation,
                    info.description or docs.get(attr),
                    bool(extra.get("omitempty", False)),
                )
            )
    else:
        hints = typing_extensions.get_type_hints(cls)
        for f in dataclasses.fields(cls):
            name = f.metadata.get("name", f.name)
            if name == "-":
                continue
            infos.append(
                FieldInfo(
                    f.name,
                    name,
                    hints.get(f.name, Any),
                    f.metadata.get("comment") or docs.get(f.name),
                    bool(f.metadata.get("omitempty", False)),
                )
            )

    seen: dict[str, str] = {}
    result: list[FieldInfo] = []
    for info in infos:
        if info.name in seen:
            logger.warning(
                f"{cls.__qualname__}.{info.attr} and {cls.__qualname__}.{seen[info.name]} "
                f"both map to {info.name!r}, skipping {info.attr}"
            )
            continue
        seen[info.name] = info.attr
        result.append(info)
    return tuple(result)


def is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, (bool, Number)):
        return value == 0
    if isinstance(value, (str, bytes, list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


def _leaf(value: Any) -> Any:
    if isinstance(value, re.Pattern):
        return value.pattern
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    return value


def _members(record: Any) -> list[tuple[FieldInfo, Any]]:
    members = []
    for info in record_fields(type(record)):
        value = getattr(record, info.attr)
        if info.omitempty and is_empty(value):
            continue
        members.append((info, value))
    return members


def to_node(record: Any) -> Node:
    """
    Converts a record into an object [Node][hjsonkit.node.Node] whose members
    carry the field comments.

    Nested records are left as they are; the encoder converts them when it
    reaches them.
    """
    obj: OrderedMap[Node] = OrderedMap()
    for info, value in _members(record):
        if isinstance(value, (list, tuple)):
            value = [_leaf(v) for v in value]
        else:
            value = _leaf(value)
        before = ""
        if info.comment:
            before = "\n".join(f"# {line}" for line in info.comment.split("\n"))
        obj.set(info.name, Node(value, Comments(before=before)))
    return Node(obj)


def to_value(record: Any) -> Any:
    """Converts a record, and the records it holds, into plain values."""
    parents: set[int] = set()

    def convert(value: Any) -> Any:
        if isinstance(value, Node):
            value = value.value
        if isinstance(value, enum.Enum):
            return convert(value.value)
        if not (is_record(value) or isinstance(value, (list, tuple, Mapping))):
            return _leaf(value)
        if id(value) in parents:
            raise CircularReferenceError(
                f"Circular reference found, object of type {type(value).__name__}"
            )
        parents.add(id(value))
        try:
            if is_record(value):
                return OrderedMap((i.name, convert(v)) for i, v in _members(value))
            if isinstance(value, Mapping):
                return OrderedMap((k, convert(v)) for k, v in value.items())
            return [convert(v) for v in value]
        finally:
            parents.discard(id(value))

    return convert(record)


# Decoding


def _plain(value: Any, options: DecoderOptions) -> Any:
    if isinstance(value, Number):
        return value if options.use_number else value.to_python()
    if isinstance(value, Mapping):
        return {k: _plain(v, options) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v, options) for v in value]
    return value


def coerce(tp: Any, value: Any, options: DecoderOptions) -> Any:
    """
    Prepares decoded data for the construction of `tp`.

    Keys are mapped to attribute names, numbers converted to the expected
    kind and quoteless keywords and numbers bound to a string keep their
    source text.
    """
    origin = typing_extensions.get_origin(tp)
    args = typing_extensions.get_args(tp)

    if tp is Any or tp is object:
        return _plain(value, options)

    if origin in Unions:
        members = [a for a in args if a is not NoneType]
        if value is None and len(members) < len(args):
            return None
        if len(members) == 1:
            return coerce(members[0], value, options)
        return _plain(value, options)

    if origin is typing_extensions.Annotated:
        return coerce(args[0], value, options)

    if is_class(tp) and issubclass(tp, str):
        # a quoteless keyword or number bound to a string keeps its text
        if isinstance(value, str):
            return str(value)
        if isinstance(value, bool) or value is None:
            return {True: "true", False: "false", None: "null"}[value]
        return value

    if is_record_type(tp):
        if not isinstance(value, Mapping):
            return _plain(value, options)
        fields = record_fields(tp)
        names = {f.name for f in fields}
        unknown = [k for k in value if k not in names]
        if unknown and options.disallow_unknown_fields:
            raise UnknownFieldError(tp, unknown)
        key = (lambda f: f.name) if issubclass(tp, BaseModel) else (lambda f: f.attr)
        return {
            key(f): coerce(f.type, value[f.name], options)
            for f in fields
            if f.name in value
        }

    if origin in (list, set, frozenset) and isinstance(value, list):
        item = args[0] if args else Any
        return origin(coerce(item, v, options) for v in value)

    if origin is tuple and isinstance(value, list):
        if not args or len(args) == 2 and args[1] is Ellipsis:
            item = args[0] if args else Any
            return tuple(coerce(item, v, options) for v in value)
        return tuple(coerce(a, v, options) for a, v in zip(args, value))

    if origin in (dict, Mapping) and isinstance(value, Mapping):
        item = args[1] if args else Any
        return {k: coerce(item, v, options) for k, v in value.items()}

    if isinstance(value, Number):
        if tp is float:
            return float(value)
        if tp is Decimal:
            return Decimal(value)
        if tp is Number:
            return value
        return value.to_python()

    return _plain(value, options)


TYPE_HOOKS: dict[Any, Any] = {
    datetime: lambda v: datetime.fromisoformat(v) if isinstance(v, str) else v,
    date: lambda v: date.fromisoformat(v) if isinstance(v, str) else v,
    time: lambda v: time.fromisoformat(v) if isinstance(v, str) else v,
    re.Pattern: lambda v: re.compile(v) if isinstance(v, str) else v,
}


def from_data(cls: type[T], data: Any, options: DecoderOptions | None = None) -> T:
    """Builds `cls` from plain decoded data."""
    options = options or DecoderOptions()
    prepared = coerce(cls, data, options)
    try:
        if is_class(cls) and issubclass(cls, BaseModel):
            return cast(T, cls.model_validate(prepared))
        if is_record_type(cls):
            return _from_dict(
                cls,
                prepared,
                Config(
                    type_hooks=TYPE_HOOKS,
                    cast=[enum.Enum],
                    strict=options.disallow_unknown_fields,
                ),
            )
    except (DaciteError, ValidationError, TypeError, ValueError) as e:
        raise BindError(f"Cannot bind data to {getattr(cls, '__qualname__', cls)}: {e}") from e
    return cast(T, prepared)


def loads_into(
    src: str | bytes | bytearray, cls: type[T], options: DecoderOptions | None = None
) -> T:
    """
    Decodes a document into an instance of `cls`.

    :param cls: A dataclass, a pydantic model or a type such as `list[int]`.
    """
    options = options or DecoderOptions()
    data = Parser(src, dataclasses.replace(options, use_number=True)).parse()
    return from_data(cls, data, options)
