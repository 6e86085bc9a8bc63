from __future__ import annotations

from vue_i18n_it.masking import (
    blank,
    mask_attribute_values,
    mask_markup_comments,
    mask_script_chunk,
    mask_script_comments,
    mask_template,
)


def _shape(text: str) -> list[int]:
    return [len(line) for line in text.split("\n")]


def test_blank_keeps_whitespace_and_length() -> None:
    assert blank("a\tb\nc") == " \t \n "


def test_mask_template_preserves_line_count_and_lengths() -> None:
    text = '<div title="提示">文本<!-- 注释\n多行 -->\n  <span class="x">你好</span>\n</div>'

    masked = mask_template(text)

    assert _shape(masked) == _shape(text)
    assert "注释" not in masked
    assert "多行" not in masked
    assert "提示" not in masked
    assert "文本" in masked
    assert "你好" in masked


def test_mask_attribute_values_keeps_names_and_quotes() -> None:
    assert mask_attribute_values('<a title="你好">') == '<a title="  ">'
    assert mask_attribute_values("<a title='你好'>") == "<a title='  '>"


def test_unterminated_markup_comment_is_masked_to_the_end() -> None:
    text = "<p>可见</p><!-- 未闭合\n注释"

    masked = mask_markup_comments(text)

    assert masked.startswith("<p>可见</p>")
    assert "未闭合" not in masked
    assert _shape(masked) == _shape(text)


def test_mask_script_comments_blanks_comments_only() -> None:
    text = "const a = '你好' // 注释\n/* 块\n注释 */ const b = \"http://x\"\n<!-- 标记 -->"

    masked = mask_script_comments(text)

    assert _shape(masked) == _shape(text)
    assert "'你好'" in masked
    assert '"http://x"' in masked
    assert "注释" not in masked
    assert "块" not in masked
    assert "标记" not in masked


def test_mask_script_comments_can_leave_markup_comments() -> None:
    masked = mask_script_comments("a <!-- 标记 --> b", include_markup_comments=False)

    assert "标记" in masked


def test_unclosed_single_quote_ends_at_line_break() -> None:
    text = "const a = 'it\n// 注释"

    masked = mask_script_comments(text)

    assert "注释" not in masked


def test_script_chunk_reports_open_comment() -> None:
    masked, still_open = mask_script_chunk("a = '你好' /* 开始")
    assert "'你好'" in masked
    assert still_open == "block"

    masked, still_open = mask_script_chunk("'不是' */ b = '再见'", open_comment=still_open)
    assert "不是" not in masked
    assert "'再见'" in masked
    assert still_open == ""

    _, still_open = mask_script_chunk("x <!-- 标记")
    assert still_open == "markup"
