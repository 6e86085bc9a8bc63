"""Positions, spans and entries shared by the scanner, registry and rewriter."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

SpanKind = Literal["tag", "attribute", "script", "custom"]


class ScanMode(str, Enum):
    OUTSIDE = "outside"
    TEMPLATE = "template"
    SCRIPT = "script"


@dataclass(frozen=True, order=True)
class Position:
    line: int
    character: int

    def to_json(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class TextRange:
    start: Position
    end: Position

    def contains(self, point: Position) -> bool:
        return self.start <= point <= self.end


@dataclass
class Span:
    start: Position
    end: Position
    kind: SpanKind
    highlight: Any = None

    @property
    def range(self) -> TextRange:
        return TextRange(self.start, self.end)

    def contains(self, point: Position) -> bool:
        return self.range.contains(point)

    def same_range(self, other: Span) -> bool:
        return self.start == other.start and self.end == other.end

    def to_json(self) -> dict[str, Any]:
        return {
            "start": self.start.to_json(),
            "end": self.end.to_json(),
            "kind": self.kind,
        }


@dataclass
class Entry:
    id: int
    value: str
    spans: list[Span]
    key: str = ""
    translations: dict[str, str] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "value": self.value,
            "spans": [span.to_json() for span in self.spans],
            "translations": dict(self.translations),
        }


@dataclass(frozen=True)
class EditResult:
    """What the document reports back after one edit.

    ``char_delta`` is the new end character minus the old end character of
    the edited range, measured on the line that now holds the edit's tail.
    """

    line_delta: int
    char_delta: int


@dataclass
class OffsetState:
    """Running coordinate shift of one rewrite pass."""

    line_shift: int = 0
    char_shifts: dict[int, int] = field(default_factory=dict)

    def translate(self, position: Position) -> Position:
        line = position.line + self.line_shift
        return Position(line, position.character + self.char_shifts.get(line, 0))

    def fold(self, current_end_line: int, result: EditResult) -> None:
        base = self.char_shifts.get(current_end_line, 0)
        self.line_shift += result.line_delta
        self.char_shifts[current_end_line + result.line_delta] = base + result.char_delta
