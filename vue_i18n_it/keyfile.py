"""Editable key file: a TODO checklist (or JSON list) of discovered texts.

Markdown lines follow the checklist format::

    - [ ] `src/views/home/index.vue:12` [key:`greeting`] 你好

The operator fills in ``[key:`...`]`` for every text that should be replaced.
Texts are matched back to entries by value, with ``\\n`` and ``\\\\`` escapes.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from .errors import KeyFileError
from .models import Entry

TODO_LINE_RE = re.compile(
    r"^- \[(?P<mark>[ xX])\] `(?P<location>[^`]+)`(?:\s+\[key:`(?P<key>[^`]*)`\])?\s*(?P<snippet>.*)$"
)


def encode_value(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\r", "").replace("\n", "\\n")


def decode_value(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: "\n" if m.group(1) == "n" else m.group(1), text)


def locations(entry: Entry, rel_path: str) -> list[str]:
    return [f"{rel_path}:{span.start.line + 1}" for span in entry.spans]


def to_markdown(entries: Iterable[Entry], rel_path: str) -> str:
    entries = list(entries)
    now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")
    lines: list[str] = [
        "# i18n TODO",
        "",
        f"- Generated at (UTC): `{now}`",
        f"- File: `{rel_path}`",
        f"- Total entries: `{len(entries)}`",
        f"- Total occurrences: `{sum(len(entry.spans) for entry in entries)}`",
        "",
        "> Fill in [key:`...`] for each text to replace. Lines without a key are left as-is.",
        "",
    ]
    if not entries:
        lines.append("No Chinese hardcoded text candidates found.")
        lines.append("")
        return "\n".join(lines)

    lines.append(f"## `{rel_path}`")
    for entry in entries:
        mark = "x" if entry.key else " "
        location = locations(entry, rel_path)[0]
        key = f" [key:`{entry.key}`]" if entry.key else ""
        count = f" <!-- x{len(entry.spans)} -->" if len(entry.spans) > 1 else ""
        lines.append(f"- [{mark}] `{location}`{key} {encode_value(entry.value)}{count}")
    lines.append("")
    return "\n".join(lines)


def to_json(entries: Iterable[Entry], rel_path: str) -> list[dict[str, object]]:
    return [
        {
            "id": entry.id,
            "key": entry.key,
            "value": entry.value,
            "locations": locations(entry, rel_path),
        }
        for entry in entries
    ]


def write_keyfile(path: Path, entries: Iterable[Entry], rel_path: str) -> Path:
    if path.suffix.lower() == ".json":
        text = json.dumps(to_json(entries, rel_path), ensure_ascii=False, indent=2) + "\n"
    else:
        text = to_markdown(entries, rel_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def add_key(keys: dict[str, str], value: str, key: str, path: Path, line: int | None) -> None:
    if not key:
        return
    previous = keys.get(value)
    if previous is not None and previous != key:
        raise KeyFileError(
            str(path), f"conflicting keys {previous!r} and {key!r} for {value!r}", line
        )
    keys[value] = key


def parse_markdown(path: Path, text: str) -> dict[str, str]:
    keys: dict[str, str] = {}
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.startswith("- ["):
            continue
        match = TODO_LINE_RE.match(line)
        if not match:
            raise KeyFileError(str(path), "malformed checklist line", line_no)
        snippet = re.sub(r"\s*<!-- x\d+ -->\s*$", "", match.group("snippet"))
        value = decode_value(snippet)
        if not value:
            raise KeyFileError(str(path), "checklist line has no text", line_no)
        add_key(keys, value, (match.group("key") or "").strip(), path, line_no)
    return keys


def parse_json(path: Path, text: str) -> dict[str, str]:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise KeyFileError(str(path), f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise KeyFileError(str(path), "expected a JSON list of entries")

    keys: dict[str, str] = {}
    for index, item in enumerate(data):
        if not isinstance(item, dict) or not isinstance(item.get("value"), str):
            raise KeyFileError(str(path), f"entry {index} has no text value")
        key = item.get("key") or ""
        if not isinstance(key, str):
            raise KeyFileError(str(path), f"entry {index} has a non-string key")
        add_key(keys, item["value"], key.strip(), path, None)
    return keys


def read_keys(path: Path) -> dict[str, str]:
    """Map each text to its assigned key. Texts without a key are omitted."""
    if not path.is_file():
        raise FileNotFoundError(f"Key file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return parse_json(path, text)
    return parse_markdown(path, text)
