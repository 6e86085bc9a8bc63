"""Document and highlight collaborators.

The core only talks to these through the two protocols below. ``TextDocument``
is the file-backed implementation used by the command line and the tests.
"""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Any, Protocol

from .models import EditResult, TextRange

SCRIPT_SUFFIXES = {".ts", ".js", ".mjs", ".cjs", ".mts", ".cts"}


class Document(Protocol):
    def line_count(self) -> int: ...

    def line_text(self, line: int) -> str: ...

    def apply_edit(self, target: TextRange, new_text: str) -> EditResult: ...


class HighlightSink(Protocol):
    def highlight(self, target: TextRange) -> Any: ...

    def clear(self, handle: Any) -> None: ...


class TextDocument:
    def __init__(self, text: str, path: Path | None = None) -> None:
        self.path = path
        self.newline = "\r\n" if "\r\n" in text else "\n"
        self._lines = text.split(self.newline)

    @classmethod
    def from_path(cls, path: Path) -> TextDocument:
        # Bytes, so CRLF files are not folded to LF on the way in or out.
        return cls(path.read_bytes().decode("utf-8"), path=path)

    @property
    def text(self) -> str:
        return self.newline.join(self._lines)

    def line_count(self) -> int:
        return len(self._lines)

    def line_text(self, line: int) -> str:
        return self._lines[line]

    def apply_edit(self, target: TextRange, new_text: str) -> EditResult:
        start, end = target.start, target.end
        if end < start:
            raise ValueError(f"Edit range is reversed: {target}")
        if start.line < 0 or end.line >= len(self._lines):
            raise ValueError(f"Edit range is outside the document: {target}")
        if start.character > len(self._lines[start.line]) or end.character > len(
            self._lines[end.line]
        ):
            raise ValueError(f"Edit range is past the end of a line: {target}")

        head = self._lines[start.line][: start.character]
        tail = self._lines[end.line][end.character :]
        new_lines = f"{head}{new_text}{tail}".split("\n")
        self._lines[start.line : end.line + 1] = new_lines

        line_delta = (len(new_lines) - 1) - (end.line - start.line)
        new_end_character = len(new_lines[-1]) - len(tail)
        return EditResult(
            line_delta=line_delta,
            char_delta=new_end_character - end.character,
        )

    def save(self, path: Path | None = None) -> Path:
        target = path or self.path
        if target is None:
            raise ValueError("Document has no path to save to")
        target.write_bytes(self.text.encode("utf-8"))
        return target


class NullHighlighter:
    def highlight(self, target: TextRange) -> None:
        return None

    def clear(self, handle: Any) -> None:
        return None


class MemoryHighlighter:
    """Hands out integer handles and remembers which ones are still live."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.active: dict[int, TextRange] = {}

    def highlight(self, target: TextRange) -> int:
        handle = next(self._ids)
        self.active[handle] = target
        return handle

    def clear(self, handle: Any) -> None:
        self.active.pop(handle, None)


def is_script_only(document: object) -> bool:
    path = getattr(document, "path", None)
    if path is None:
        return False
    return Path(path).suffix.lower() in SCRIPT_SUFFIXES


def text_in_range(document: Document, target: TextRange) -> str:
    start, end = target.start, target.end
    if start.line == end.line:
        return document.line_text(start.line)[start.character : end.character]
    parts = [document.line_text(start.line)[start.character :]]
    for line in range(start.line + 1, end.line):
        parts.append(document.line_text(line))
    parts.append(document.line_text(end.line)[: end.character])
    return "\n".join(parts)
