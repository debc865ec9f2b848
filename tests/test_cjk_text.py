"""
Tests for script-aware string helpers (lingovault.text).
"""
import pytest

from lingovault.text import (
    contains_cjk,
    first_cjk_index,
    is_cjk_character,
    split_at_first_cjk,
    split_tag_segment,
    strip_leading_separators,
    strip_trailing_punctuation,
)


@pytest.mark.parametrize("ch,expected", [
    ("猫", True),
    ("\u4e00", True),
    ("\u9fff", True),
    ("\u3400", False),
    ("a", False),
    ("の", False),
    ("。", False),
    ("猫猫", False),
    ("", False),
])
def test_is_cjk_character(ch, expected):
    assert is_cjk_character(ch) is expected


def test_contains_cjk():
    assert contains_cjk("abc猫") is True
    assert contains_cjk("abc") is False
    assert contains_cjk("") is False


def test_first_cjk_index():
    assert first_cjk_index("adj. 快乐的") == 5
    assert first_cjk_index("hello") == -1
    assert first_cjk_index("") == -1


def test_split_at_first_cjk():
    assert split_at_first_cjk("n. 苹果") == ("n. ", "苹果")
    assert split_at_first_cjk("noun") == ("noun", None)


class TestPunctuation:
    def test_trailing_full_stops_are_removed(self):
        assert strip_trailing_punctuation(" adj. ") == "adj"
        assert strip_trailing_punctuation("n.。．") == "n"

    def test_inner_periods_survive(self):
        assert strip_trailing_punctuation("e.g.") == "e.g"

    def test_leading_separators(self):
        assert strip_leading_separators(": ：. 跑") == "跑"
        assert strip_leading_separators("跑步") == "跑步"


class TestSplitTagSegment:
    def test_mixed_separators(self):
        assert split_tag_segment("n./v., adj。") == ["n", "v", "adj"]

    def test_cjk_separators(self):
        assert split_tag_segment("动词、名词，形容词") == ["动词", "名词", "形容词"]

    def test_empty(self):
        assert split_tag_segment("") == []
        assert split_tag_segment(" . ") == []
