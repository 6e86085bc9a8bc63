"""Write per-language locale modules and a combined report."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from .config import language_name
from .models import Entry

logger = logging.getLogger(__name__)

IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def module_name(document_path: Path) -> str:
    """``views/home/index.vue`` -> ``home``; ``views/home/list.vue`` -> ``home_list``."""
    parent = document_path.resolve().parent.name
    if document_path.stem == "index":
        return parent
    return f"{parent}_{document_path.stem}"


def quote_key(key: str) -> str:
    if IDENTIFIER_RE.match(key):
        return key
    return "'" + key.replace("\\", "\\\\").replace("'", "\\'") + "'"


def escape_value(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\r", "")
        .replace("\n", "\\n")
    )


def render_module(entries: Iterable[Entry], language: str | None = None) -> str:
    """``export default { key: 'text', };`` for the source text or one language."""
    lines = ["export default {"]
    for entry in entries:
        text = entry.value if language is None else entry.translations.get(language, "")
        if not entry.key:
            lines.append(f"  // (no key): '{escape_value(text)}',")
            continue
        lines.append(f"  {quote_key(entry.key)}: '{escape_value(text)}',")
    lines.append("};")
    return "\n".join(lines) + "\n"


def escape_md(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("|", "\\|")
        .replace("\n", "<br>")
        .replace("\r", "")
        .strip()
    )


def render_report(entries: Sequence[Entry], source_language: str, languages: Sequence[str]) -> str:
    header = ["key", language_name(source_language), *(language_name(lang) for lang in languages)]
    lines = [
        "# i18n",
        "",
        f"- Total entries: `{len(entries)}`",
        f"- Keyed entries: `{sum(1 for entry in entries if entry.key)}`",
        "",
        "| " + " | ".join(header) + " |",
        "|" + "---|" * len(header),
    ]
    for entry in entries:
        cells = [
            f"`{entry.key}`" if entry.key else "",
            escape_md(entry.value),
            *(escape_md(entry.translations.get(lang, "")) for lang in languages),
        ]
        lines.append("| " + " | ".join(cells) + " |")
    lines.append("")
    return "\n".join(lines)


def report_json(entries: Iterable[Entry]) -> list[dict[str, object]]:
    return [
        {"key": entry.key, "value": entry.value, "translations": dict(entry.translations)}
        for entry in entries
    ]


def export_entries(
    entries: Sequence[Entry],
    document_path: Path,
    out_dir: Path,
    *,
    source_language: str = "zh",
    languages: Sequence[str] = (),
) -> list[Path]:
    """Write ``i18n/<lang>/<module>.ts`` files plus ``i18n.md`` and ``i18n.json``.

    A language module is written only when at least one entry carries a
    translation for it.
    """
    name = module_name(document_path)
    root = out_dir / "i18n"
    written: list[Path] = []

    def write(path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        written.append(path)

    write(root / source_language / f"{name}.ts", render_module(entries))
    for lang in languages:
        if lang == source_language:
            continue
        if not any(lang in entry.translations for entry in entries):
            logger.debug("no %s translations to export", lang)
            continue
        write(root / lang / f"{name}.ts", render_module(entries, lang))

    report_languages = [lang for lang in languages if lang != source_language]
    write(root / "i18n.md", render_report(entries, source_language, report_languages))
    write(
        root / "i18n.json",
        json.dumps(report_json(entries), ensure_ascii=False, indent=2) + "\n",
    )
    return written
