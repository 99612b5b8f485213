import io
from decimal import Decimal
from enum import Enum
from pathlib import Path

import pytest

from hjsonkit import (
    CircularReferenceError,
    EncodeError,
    EncoderOptions,
    Node,
    Number,
    UnsupportedValueError,
    dump,
    dumps,
    load,
    loads,
)


class Color(Enum):
    RED = "red"
    BLUE = 2


def test_dump_keywords():
    assert dumps(None) == "null"
    assert dumps(True) == "true"
    assert dumps(False) == "false"


def test_dump_numbers():
    assert dumps(123) == "123"
    assert dumps(-7) == "-7"
    assert dumps(-0.0) == "0"
    assert dumps(0.5) == "0.5"
    assert dumps(1.0) == "1"
    assert dumps(100.0) == "100"
    assert dumps(1000000000.0) == "1e+09"
    assert dumps(1e-7) == "1e-07"
    assert dumps(123.456) == "123.456"
    assert dumps(-2.5e-3) == "-0.0025"
    assert dumps(float("nan")) == "null"
    assert dumps(float("inf")) == "null"
    assert dumps(Decimal("1.50")) == "1.5"
    assert dumps(Number("1.50")) == "1.50"


def test_dump_strings():
    assert dumps("") == '""'
    assert dumps("plain text") == "plain text"
    assert dumps("12 apples") == "12 apples"
    assert dumps('say "hi"') == 'say "hi"'
    assert dumps("true") == '"true"'
    assert dumps("123") == '"123"'
    assert dumps("1 # x") == '"1 # x"'
    assert dumps(" padded") == '" padded"'
    assert dumps("# hash") == '"# hash"'
    assert dumps("a: b") == '"a: b"'
    assert dumps('"quoted"') == '"\\"quoted\\""'
    assert dumps("tab\there") == '"tab\\there"'
    assert dumps("a\u2028b") == '"a\\u2028b"'


def test_quoting_options():
    assert dumps("x", EncoderOptions(quote_always=True)) == '"x"'
    assert dumps("true", EncoderOptions(quote_ambiguous_strings=False)) == "true"
    assert dumps({"a": "1"}, EncoderOptions(quote_ambiguous_strings=False)) == "{\n  a: 1\n}"


def test_multiline_strings():
    assert dumps({"a": "line1\nline2"}) == "{\n  a:\n    '''\n    line1\n    line2\n    '''\n}"
    assert dumps(["x\ny"]) == "[\n  '''\n  x\n  y\n  '''\n]"
    assert dumps({"re": '"c" \\d'}) == "{\n  re: '''\"c\" \\d'''\n}"
    # never at the root
    assert dumps("line1\nline2") == '"line1\\nline2"'
    # not representable as a multiline string
    assert dumps({"a": "x\n'''"}) == '{\n  a: "x\\n\'\'\'"\n}'


def test_multiline_string_blank_lines():
    assert dumps({"a": "x\n\ny"}) == "{\n  a:\n    '''\n    x\n\n    y\n    '''\n}"
    assert loads(dumps({"a": "x\n\ny"})) == {"a": "x\n\ny"}


@pytest.mark.parametrize(
    "text",
    [
        "",
        "true",
        "null,",
        "1e5",
        "-",
        "0x10",
        " lead",
        "trail ",
        "a\nb",
        "'''",
        "a'''b",
        "\\",
        '"',
        "'",
        "#",
        "//",
        "/*",
        "{",
        "a: b",
        "\x00\x1f\x7f",
        "\u2028",
        "é",
        "x\ty",
        "  \n  ",
        "a\n\n b\n",
        "ends with '",
        "\r\n",
    ],
)
def test_string_round_trip(text):
    assert loads(dumps({"v": text}))["v"] == text
    assert loads(dumps([text]))[0] == text
    assert loads(dumps(text)) == text


@pytest.mark.parametrize(
    "key", ["", "a b", "a:b", "#", "//x", "{", "'", '"', "a\x01", "é", "plain"]
)
def test_key_round_trip(key):
    assert list(loads(dumps({key: 1}))) == [key]


def test_dump_containers():
    assert dumps({}) == "{}"
    assert dumps([]) == "[]"
    assert (
        dumps({"a": 1, "b": [1, 2], "c": {}, "d": (3,)})
        == "{\n  a: 1\n  b: [\n    1\n    2\n  ]\n  c: {}\n  d: [\n    3\n  ]\n}"
    )
    assert dumps([{"a": None}]) == "[\n  {\n    a: null\n  }\n]"


def test_member_order_is_kept():
    assert dumps({"z": 1, "a": 2}) == "{\n  z: 1\n  a: 2\n}"


def test_braces_on_own_line():
    options = EncoderOptions(braces_same_line=False)
    assert dumps({"a": {"b": 1}}, options) == "{\n  a:\n  {\n    b: 1\n  }\n}"
    assert dumps({"a": [1]}, options) == "{\n  a:\n  [\n    1\n  ]\n}"


def test_root_without_braces():
    options = EncoderOptions(emit_root_braces=False)
    assert dumps({"a": 1, "b": {"c": 2}}, options) == "a: 1\nb: {\n  c: 2\n}"
    assert loads(dumps({"a": 1, "b": {"c": 2}}, options)) == {"a": 1, "b": {"c": 2}}


def test_layout_options():
    options = EncoderOptions(eol="\r\n", indent_by="    ", base_indentation="  ")
    assert dumps({"a": [1]}, options) == "  {\r\n      a: [\r\n          1\r\n      ]\r\n  }"
    assert dumps({"a": 1}, EncoderOptions(indent_by="\t")) == "{\n\ta: 1\n}"


def test_invalid_options():
    with pytest.raises(ValueError):
        EncoderOptions(eol="\r")
    with pytest.raises(ValueError):
        EncoderOptions(indent_by="x")
    with pytest.raises(ValueError):
        EncoderOptions(base_indentation="-")


def test_enums():
    assert dumps(Color.RED) == "red"
    assert dumps({"c": Color.BLUE}) == "{\n  c: 2\n}"


def test_unsupported_values():
    with pytest.raises(UnsupportedValueError):
        dumps(b"bytes")
    with pytest.raises(UnsupportedValueError):
        dumps({1, 2})
    with pytest.raises(UnsupportedValueError):
        dumps(object())
    with pytest.raises(UnsupportedValueError, match="keys must be strings"):
        dumps({1: "a"})
    with pytest.raises(TypeError):
        dumps([1j])
    with pytest.raises(EncodeError):
        dumps(Number("abc"))


def test_circular_reference():
    looped: list = []
    looped.append(looped)
    with pytest.raises(CircularReferenceError):
        dumps(looped)

    mapping: dict = {}
    mapping["self"] = mapping
    with pytest.raises(CircularReferenceError):
        dumps(mapping)

    shared = [1]
    assert loads(dumps([shared, shared])) == [[1], [1]]


def test_deep_nesting_without_cycle():
    value: list = [0]
    for _ in range(100):
        value = [value]
    assert dumps(value).count("[") == 101


def test_dump_to_file(tmp_path: Path):
    fp = io.StringIO()
    dump({"a": 1}, fp, endline=True)
    assert fp.getvalue() == "{\n  a: 1\n}\n"

    path = tmp_path / "out.hjson"
    dump({"a": 1}, path, EncoderOptions(eol="\r\n"), endline=True)
    assert path.read_bytes() == b"{\r\n  a: 1\r\n}\r\n"
    assert load(path) == {"a": 1}
    with path.open(encoding="utf-8") as f:
        assert load(f) == {"a": 1}


def test_node_comments_can_be_disabled():
    node = Node.wrap({"a": 1})
    node.nk("a").comments.before = "# note"
    assert dumps(node, EncoderOptions(comments=False)) == "{\n  a: 1\n}"


def test_hand_written_comments():
    node = Node.wrap({"a": 1, "b": [2]})
    node.nk("a").comments.before = "# first line\n# second line"
    node.nk("a").comments.after = "// after"
    node.nk("b").ni(0).comments.before = "/* two */"
    assert dumps(node) == (
        "{\n  # first line\n  # second line\n  a: 1 // after\n"
        "  b: [\n    /* two */\n    2\n  ]\n}"
    )
    assert loads(dumps(node)) == {"a": 1, "b": [2]}


def test_comment_after_quoteless_string_forces_quotes():
    node = Node.wrap({"s": "text"})
    node.nk("s").comments.after = " # note"
    assert dumps(node) == '{\n  s: "text" # note\n}'
    assert loads(dumps(node)) == {"s": "text"}


def test_line_comment_in_key_slot():
    node = Node.wrap({"a": 1})
    node.nk("a").comments.key = "# why"
    assert dumps(node) == "{\n  a: # why\n    1\n}"
    assert loads(dumps(node)) == {"a": 1}


def test_invalid_comment_text():
    node = Node.wrap({"a": 1})
    node.nk("a").comments.before = "not a comment"
    with pytest.raises(EncodeError):
        dumps(node)


def test_invisible_characters_are_escaped():
    value = "x" + chr(0xFEFF)
    text = dumps({"a": value, "b": chr(0x200E)})
    assert text == '{\n  a: "x\\ufeff"\n  b: "\\u200e"\n}'
    assert loads(text) == {"a": value, "b": chr(0x200E)}
