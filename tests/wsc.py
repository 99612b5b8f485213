import pytest

from hjsonkit.types import (
    BlockStyleComment,
    HashStyleComment,
    LineStyleComment,
    WhiteSpace,
)
from hjsonkit.wsc import ends_with_line_comment, parse_wsc

mixed = """\
  # hash
/* block
   */// line
"""


def test_parse_wsc():
    items = parse_wsc(mixed)
    assert [type(i) for i in items] == [
        WhiteSpace,
        HashStyleComment,
        WhiteSpace,
        BlockStyleComment,
        LineStyleComment,
        WhiteSpace,
    ]
    assert items[1] == " hash"
    assert items[3] == " block\n   "
    assert items[4] == " line"


def test_parse_wsc_rejects_text():
    with pytest.raises(ValueError):
        parse_wsc("  value")
    with pytest.raises(ValueError):
        parse_wsc("/* open")


def test_ends_with_line_comment():
    assert ends_with_line_comment(" # x")
    assert ends_with_line_comment("// x")
    assert not ends_with_line_comment("/* x */")
    assert not ends_with_line_comment("# x\n")
    assert not ends_with_line_comment("")
