from __future__ import annotations

from pathlib import Path

from vue_i18n_it.document import MemoryHighlighter, TextDocument
from vue_i18n_it.models import Position, TextRange
from vue_i18n_it.registry import Registry
from vue_i18n_it.rewriter import nearest_occurrence, rewrite_document
from vue_i18n_it.scanner import scan_document

COMPONENT = """<template>
  <div class="box" title="提示信息">
    <span>你好，世界</span>
    <p>
      第一行
      第二行
    </p>
    <el-input placeholder="请输入" />
    <!-- 注释 -->
  </div>
</template>
<script>
export default {
  data() {
    return { msg: '加载中', other: "你好，世界" } // 备注
  }
}
</script>
"""

REWRITTEN = """<template>
  <div class="box" :title="`${$t('tip')}`">
    <span>{{$t('hello')}}</span>
    <p>
      {{$t('lines')}}
    </p>
    <el-input :placeholder="`${$t('input')}`" />
    <!-- 注释 -->
  </div>
</template>
<script>
export default {
  data() {
    return { msg: $t('loading'), other: $t('hello') } // 备注
  }
}
</script>
"""


def _load(text: str, name: str = "Demo.vue") -> tuple[TextDocument, Registry, MemoryHighlighter]:
    document = TextDocument(text, path=Path(name))
    highlighter = MemoryHighlighter()
    registry = Registry(highlighter)
    scan_document(document, registry)
    return document, registry, highlighter


def test_single_edit_leaves_later_text_resolvable() -> None:
    document, registry, _ = _load("<template><div>你好{{ name }}世界</div></template>\n")
    registry.assign_keys({"你好": "greeting"})

    rewrite_document(document, registry)

    assert document.text == "<template><div>{{$t('greeting')}}{{ name }}世界</div></template>\n"


def test_two_edits_on_one_line() -> None:
    document, registry, _ = _load("<template><div>你好{{ name }}世界</div></template>\n")
    registry.assign_keys({"你好": "greeting", "世界": "world"})

    report = rewrite_document(document, registry)

    assert document.text == (
        "<template><div>{{$t('greeting')}}{{ name }}{{$t('world')}}</div></template>\n"
    )
    assert [outcome.original for outcome in report.applied] == ["你好", "世界"]


def test_tag_text_closed_on_the_next_line() -> None:
    document, registry, _ = _load(
        '<template>\n  <el-button type="primary">保存\n  </el-button>\n</template>\n'
    )
    registry.assign_keys({"保存": "save"})

    report = rewrite_document(document, registry)

    assert document.line_text(1) == "  <el-button type=\"primary\">{{$t('save')}}"
    assert document.line_text(2) == "  </el-button>"
    assert [outcome.shape for outcome in report.applied] == ["tag"]
    assert not report.uncertain


def test_wrapped_text_node_after_interpolation() -> None:
    document, registry, _ = _load(
        "<template>\n  <p>\n    {{ n }} 条记录\n  </p>\n  <span>你好</span>\n</template>\n"
    )
    registry.assign_keys({"条记录": "records", "你好": "hello"})

    report = rewrite_document(document, registry)

    assert document.text == (
        "<template>\n  <p>\n    {{ n }} {{$t('records')}}\n  </p>\n"
        "  <span>{{$t('hello')}}</span>\n</template>\n"
    )
    assert [outcome.shape for outcome in report.applied] == ["tag", "tag"]


def test_static_attribute_becomes_bound() -> None:
    document, registry, _ = _load('<template>\n  <div title="你好"></div>\n</template>\n')
    registry.assign_keys({"你好": "hello"})

    rewrite_document(document, registry)

    assert document.line_text(1) == "  <div :title=\"`${$t('hello')}`\"></div>"


def test_component_with_mixed_deltas() -> None:
    document, registry, highlighter = _load(COMPONENT)
    registry.assign_keys(
        {
            "提示信息": "tip",
            "你好，世界": "hello",
            "第一行\n      第二行": "lines",
            "请输入": "input",
            "加载中": "loading",
        }
    )

    report = rewrite_document(document, registry)

    assert document.text == REWRITTEN
    assert [outcome.shape for outcome in report.applied] == [
        "attr",
        "tag",
        "text",
        "attr",
        "value",
        "value",
    ]
    assert [outcome.original for outcome in report.applied] == [
        'title="提示信息"',
        "你好，世界",
        "第一行\n      第二行",
        'placeholder="请输入"',
        "'加载中'",
        '"你好，世界"',
    ]
    assert report.skipped == []
    assert report.uncertain == []
    assert highlighter.active == {}


def test_many_edits_on_one_script_line() -> None:
    document, registry, _ = _load("const a = ['一', '二', '三']\n", name="list.ts")
    registry.assign_keys({"一": "one", "二": "two", "三": "three"})

    rewrite_document(document, registry)

    assert document.text == "const a = [$t('one'), $t('two'), $t('three')]\n"


def test_unkeyed_entries_are_left_alone() -> None:
    document, registry, highlighter = _load("const a = ['一', '二']\n", name="list.ts")
    registry.assign_keys({"二": "two"})

    rewrite_document(document, registry)

    assert document.text == "const a = ['一', $t('two')]\n"
    assert len(highlighter.active) == 1


def test_overlapping_span_is_skipped() -> None:
    document, registry, _ = _load("const a = '你好世界'\n", name="a.ts")
    registry.add_selection(document, TextRange(Position(0, 13), Position(0, 15)))
    registry.assign_keys({"你好世界": "all", "世界": "world"})

    report = rewrite_document(document, registry)

    assert document.text == "const a = $t('all')\n"
    assert len(report.skipped) == 1
    assert report.skipped[0].skipped == "overlap"


def test_updated_value_is_found_near_its_span() -> None:
    document, registry, _ = _load("const a = '你好世界'\n", name="a.ts")
    entry = registry.find("你好世界")
    registry.update(entry.id, "greet", "你好")

    rewrite_document(document, registry)

    assert document.text == "const a = `${$t('greet')}世界`\n"


def test_unknown_context_inserts_bare_call() -> None:
    document, registry, _ = _load("// 你好\nlet x = 1\n", name="a.ts")
    registry.add_selection(document, TextRange(Position(0, 3), Position(0, 5)))
    registry.assign_keys({"你好": "hello"})

    report = rewrite_document(document, registry)

    assert document.text == "// $t('hello')\nlet x = 1\n"
    assert len(report.uncertain) == 1
    assert report.uncertain[0].confident is False


def test_custom_spans_are_replayed_in_source_order() -> None:
    document, registry, _ = _load("/* 说明 */ const a = '标题'\n", name="a.ts")
    registry.add_selection(document, TextRange(Position(0, 3), Position(0, 5)))
    registry.assign_keys({"标题": "title", "说明": "note"})

    report = rewrite_document(document, registry)

    assert document.text == "/* $t('note') */ const a = $t('title')\n"
    assert [outcome.key for outcome in report.applied] == ["note", "title"]


def test_nearest_occurrence() -> None:
    assert nearest_occurrence("你好 x 你好", "你好", 4) == 5
    assert nearest_occurrence("abc", "你好", 0) == -1
