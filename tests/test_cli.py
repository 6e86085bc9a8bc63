from __future__ import annotations

from pathlib import Path

import pytest

from vue_i18n_it.cli import main
from vue_i18n_it.export import module_name

SOURCE = "<template>\n  <p>你好</p>\n  <input placeholder=\"请输入\" />\n</template>\n"


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for name in ("VUE_I18N_AUTO_TRANSLATE", "VUE_I18N_LANGUAGES", "BAIDU_TRANSLATE_APP_ID", "BAIDU_TRANSLATE_APP_KEY"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path


def _write_source(root: Path) -> Path:
    path = root / "Demo.vue"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_scan_writes_key_file(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_source(workspace)

    assert main(["scan", str(source)]) == 0

    key_file = workspace / "Demo.vue.i18n.todo.md"
    text = key_file.read_text(encoding="utf-8")
    assert "- [ ] `Demo.vue:2` 你好" in text
    assert "- [ ] `Demo.vue:3` 请输入" in text
    assert "Found 2 text(s) in 2 place(s)" in capsys.readouterr().out


def test_apply_rewrites_and_exports(workspace: Path) -> None:
    source = _write_source(workspace)
    keys = workspace / "keys.md"
    keys.write_text(
        "- [x] `Demo.vue:2` [key:`hello`] 你好\n- [ ] `Demo.vue:3` 请输入\n",
        encoding="utf-8",
    )

    assert main(["apply", str(source), "--keys", str(keys), "--no-translate"]) == 0

    assert source.read_text(encoding="utf-8") == (
        "<template>\n  <p>{{$t('hello')}}</p>\n  <input placeholder=\"请输入\" />\n</template>\n"
    )
    module = workspace / "i18n" / "zh" / f"{module_name(source)}.ts"
    assert module.read_text(encoding="utf-8") == (
        "export default {\n  hello: '你好',\n  // (no key): '请输入',\n};\n"
    )
    assert (workspace / "i18n" / "i18n.md").is_file()
    assert (workspace / "i18n" / "i18n.json").is_file()


def test_apply_keeps_crlf_line_endings(workspace: Path) -> None:
    source = workspace / "Demo.vue"
    source.write_bytes(SOURCE.replace("\n", "\r\n").encode("utf-8"))
    keys = workspace / "keys.md"
    keys.write_text("- [x] `Demo.vue:2` [key:`hello`] 你好\n", encoding="utf-8")

    assert main(["apply", str(source), "--keys", str(keys), "--no-translate"]) == 0

    assert source.read_bytes() == (
        "<template>\r\n  <p>{{$t('hello')}}</p>\r\n  <input placeholder=\"请输入\" />\r\n</template>\r\n"
    ).encode("utf-8")


def test_apply_dry_run_leaves_file(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_source(workspace)
    keys = workspace / "keys.json"
    keys.write_text('[{"value": "请输入", "key": "input"}]', encoding="utf-8")

    assert main(["apply", str(source), "--keys", str(keys), "--dry-run", "--function", "t"]) == 0

    out = capsys.readouterr().out
    assert ":placeholder=\"`${t('input')}`\"" in out
    assert source.read_text(encoding="utf-8") == SOURCE
    assert not (workspace / "i18n").exists()


def test_bad_key_file_stops_before_editing(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = _write_source(workspace)
    keys = workspace / "keys.md"
    keys.write_text("- [x] broken line\n", encoding="utf-8")

    assert main(["apply", str(source), "--keys", str(keys)]) == 2

    assert source.read_text(encoding="utf-8") == SOURCE
    assert "malformed" in capsys.readouterr().err


def test_translation_without_credentials_is_skipped(
    workspace: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    source = _write_source(workspace)
    keys = workspace / "keys.md"
    keys.write_text("- [x] `Demo.vue:2` [key:`hello`] 你好\n", encoding="utf-8")

    code = main(["apply", str(source), "--keys", str(keys), "--translate", "--languages", "en"])

    assert code == 0
    assert "Skipping translation" in capsys.readouterr().out
    assert (workspace / "i18n" / "zh").is_dir()
    assert not (workspace / "i18n" / "en").exists()


def test_missing_source_file(workspace: Path) -> None:
    keys = workspace / "keys.md"
    keys.write_text("", encoding="utf-8")

    with pytest.raises(FileNotFoundError):
        main(["apply", str(workspace / "nope.vue"), "--keys", str(keys)])
