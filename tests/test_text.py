from __future__ import annotations

from food_diary.report.text import wrap_text


def test_wraps_on_word_boundaries() -> None:
    assert wrap_text("aaa bbb ccc", 7, len) == ["aaa bbb", "ccc"]


def test_keeps_embedded_newlines() -> None:
    assert wrap_text("one\ntwo three", 20, len) == ["one", "two three"]


def test_breaks_words_wider_than_the_column() -> None:
    lines = wrap_text("ab abcdefghij cd", 4, len)
    assert lines == ["ab", "abcd", "efgh", "ij", "cd"]
    assert all(len(line) <= 4 for line in lines)


def test_empty_text_is_one_blank_line() -> None:
    assert wrap_text("", 10, len) == [""]
    assert wrap_text(None, 10, len) == [""]
