import pytest
from loguru import logger

from hjsonkit import (
    DecodeError,
    DecoderOptions,
    DuplicateKeyError,
    Number,
    OrderedMap,
    loads,
)


def test_scalars():
    assert loads("true") is True
    assert loads("false") is False
    assert loads("null") is None
    assert loads("42") == 42
    assert loads("-0.5") == -0.5
    assert loads('"text"') == "text"
    assert loads("hello world") == "hello world"
    assert loads("  12  ") == 12


def test_empty_document():
    assert loads("") == {}
    assert loads("  # only a comment\n") == {}


def test_braced_root():
    doc = loads("{\n  a: 1\n  b: [1, 2]\n}")
    assert isinstance(doc, OrderedMap)
    assert doc == {"a": 1, "b": [1, 2]}
    assert loads("[1, 2]\n") == [1, 2]
    assert loads("{}") == {}
    assert loads("[]") == []


def test_braceless_root():
    doc = loads("a: 1\nb: two\n")
    assert isinstance(doc, OrderedMap)
    assert list(doc.items()) == [("a", 1), ("b", "two")]


def test_member_order_is_kept():
    doc = loads("z: 1\na: 2\nm: 3")
    assert list(doc) == ["z", "a", "m"]


def test_optional_commas():
    assert loads("[1, 2,]") == [1, 2]
    assert loads("[\n  1\n  2\n]") == [1, 2]
    assert loads("{a: 1, b: 2,}") == {"a": 1, "b": 2}


def test_quoteless_strings_run_to_end_of_line():
    doc = loads("a: hello, world # not a comment\nb: 3 # comment\n")
    assert doc["a"] == "hello, world # not a comment"
    assert doc["b"] == 3


def test_quoteless_strings_are_trimmed():
    assert loads("a:    spaced out   \n")["a"] == "spaced out"


def test_numbers_falling_back_to_strings():
    doc = loads(
        """\
{
  a: 1x
  b: 01
  c: 1e999
  d: -
  e: 1.5e3
  f: 0x10
  g: 1 2
}"""
    )
    assert doc == {
        "a": "1x",
        "b": "01",
        "c": "1e999",
        "d": "-",
        "e": 1500.0,
        "f": "0x10",
        "g": "1 2",
    }


def test_keywords_followed_by_text_are_strings():
    doc = loads("a: true story\nb: null # nothing\nc: [true, false]\nd: nullable")
    assert doc == {"a": "true story", "b": None, "c": [True, False], "d": "nullable"}


def test_use_number():
    doc = loads("a: 1.50\nb: 10\nc: text", DecoderOptions(use_number=True))
    assert doc["a"] == "1.50"
    assert isinstance(doc["a"], Number)
    assert doc["b"].to_python() == 10
    assert not isinstance(doc["c"], Number)


def test_quoted_strings():
    assert loads(r'"a\"b\\c\/d\b\f\n\r\t"') == 'a"b\\c/d\b\f\n\r\t'
    assert loads(r"'it\'s'") == "it's"
    assert loads(r'"\u00e9\ud83d\ude00"') == "é😀"
    assert loads("a: 'single # quoted'")["a"] == "single # quoted"


def test_quoted_keys():
    doc = loads('{"a b": 1, \'c:d\': 2, "": 3}')
    assert doc == {"a b": 1, "c:d": 2, "": 3}


def test_multiline_string():
    doc = loads("a:\n  '''\n  line1\n  line2\n  '''\n")
    assert doc["a"] == "line1\nline2"


def test_multiline_string_on_key_line():
    doc = loads("{\n  text: '''first\n        second'''\n}")
    assert doc["text"] == "first\nsecond"


def test_multiline_string_keeps_relative_indentation():
    doc = loads("a:\n  '''\n  top\n    nested\n  '''")
    assert doc["a"] == "top\n  nested"


def test_comments_are_skipped():
    doc = loads(
        """\
// header
{
  # hash
  a: 1 // trailing
  /* block
     comment */
  b: [1, /* inline */ 2]
}
"""
    )
    assert doc == {"a": 1, "b": [1, 2]}


def test_bytes_input():
    assert loads(b"\xef\xbb\xbfa: 1") == {"a": 1}


def test_duplicate_keys():
    doc = loads("a: 1\nb: 2\na: 3")
    assert list(doc.items()) == [("a", 3), ("b", 2)]
    with pytest.raises(DuplicateKeyError) as exc_info:
        loads("a: 1\na: 2", DecoderOptions(disallow_duplicate_keys=True))
    assert exc_info.value.msg == "Found duplicate values for the key 'a'"
    assert exc_info.value.lineno == 2


@pytest.mark.parametrize(
    "doc, message",
    [
        ('"abc', "Bad string"),
        ('a: "x\ny"', "Bad string containing newline"),
        (r'"\x"', "Bad escape \\x"),
        (r'"\u12g4"', "Bad \\u char g"),
        ("{a: 1", "End of input while parsing an object (did you forget a closing '}'?)"),
        ("[1, 2", "End of input while parsing an array (did you forget a closing ']'?)"),
        ("{a b: 1}", "Found whitespace in your key name (use quotes to include)"),
        ("{: 1}", "Found ':' but no key name (for an empty key name use quotes)"),
        ("{a: 1} x", "Syntax error, found trailing characters"),
        ("{a: 1 /* x", "Unterminated block comment"),
        ("{a:", "Found EOF while looking for a value"),
    ],
)
def test_syntax_errors(doc, message):
    with pytest.raises(DecodeError) as exc_info:
        loads(doc)
    assert exc_info.value.msg == message


def test_error_location():
    with pytest.raises(DecodeError) as exc_info:
        loads("{\n  a: 1\n  b c: 2\n}")
    err = exc_info.value
    assert err.lineno == 3
    assert err.colno == 4
    assert err.snippet == "  b c: 2\n}"
    assert str(err).startswith("Found whitespace in your key name")


def test_max_depth():
    assert loads("[[[1]]]", DecoderOptions(max_depth=3)) == [[[1]]]
    with pytest.raises(DecodeError, match="Nesting too deep"):
        loads("[[[[1]]]]", DecoderOptions(max_depth=3))
    with pytest.raises(DecodeError, match="Nesting too deep"):
        loads("[" * 300 + "]" * 300)


def test_invalid_options():
    with pytest.raises(ValueError):
        DecoderOptions(max_depth=0)


def test_root_fallback_is_logged():
    messages = []
    handler = logger.add(messages.append, level="DEBUG")
    try:
        assert loads("42") == 42
    finally:
        logger.remove(handler)
    assert any("reading a single value" in m for m in messages)
