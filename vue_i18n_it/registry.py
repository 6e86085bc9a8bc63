"""Deduplicating store of discovered fragments for one document."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator, Mapping
from typing import Any

from .document import Document, HighlightSink, NullHighlighter, text_in_range
from .models import Entry, Position, Span, TextRange

logger = logging.getLogger(__name__)


class Registry:
    """Entries keyed by their exact text, each holding every place it occurs.

    Values are unique across entries and an entry always has at least one
    span. Highlight handles of removed spans are released through the sink.
    """

    def __init__(self, highlighter: HighlightSink | None = None) -> None:
        self.highlighter: HighlightSink = highlighter or NullHighlighter()
        self.entries: list[Entry] = []
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def get(self, entry_id: int) -> Entry | None:
        return next((e for e in self.entries if e.id == entry_id), None)

    def find(self, value: str) -> Entry | None:
        return next((e for e in self.entries if e.value == value), None)

    def add(self, value: str, span: Span) -> Entry | None:
        """Record one occurrence of ``value``.

        Returns the entry the span joined, or ``None`` when an identical
        script span is already recorded for that value.
        """
        entry = self.find(value)
        if entry is None:
            entry = Entry(id=next(self._ids), value=value, spans=[span])
            self.entries.append(entry)
            return entry

        # Only script spans are checked for exact duplicates.
        if span.kind == "script" and any(span.same_range(p) for p in entry.spans):
            self.release(span)
            return None
        entry.spans.append(span)
        return entry

    def add_selection(self, document: Document, target: TextRange) -> Entry | None:
        value = text_in_range(document, target)
        if not value:
            return None
        handle = self.highlighter.highlight(target)
        span = Span(start=target.start, end=target.end, kind="custom", highlight=handle)
        return self.add(value, span)

    def contains_point(self, point: Position) -> bool:
        return any(span.contains(point) for entry in self.entries for span in entry.spans)

    def remove_at_point(self, point: Position) -> Span | None:
        for index, entry in enumerate(self.entries):
            for span_index, span in enumerate(entry.spans):
                if not span.contains(point):
                    continue
                del entry.spans[span_index]
                self.release(span)
                if not entry.spans:
                    del self.entries[index]
                return span
        logger.debug("no span at %s", point)
        return None

    def update(self, entry_id: int, key: str, value: str) -> bool:
        entry = self.get(entry_id)
        if entry is None:
            return False
        entry.key = key
        entry.value = value
        return True

    def remove_entry(self, entry_id: int) -> Entry | None:
        entry = self.get(entry_id)
        if entry is None:
            return None
        self.entries.remove(entry)
        for span in entry.spans:
            self.release(span)
        return entry

    def assign_keys(self, keys: Mapping[str, str]) -> int:
        """Set keys from a ``value -> key`` mapping; returns how many matched."""
        assigned = 0
        for entry in self.entries:
            key = keys.get(entry.value, "").strip()
            if key:
                entry.key = key
                assigned += 1
        return assigned

    def keyed_entries(self) -> list[Entry]:
        return [entry for entry in self.entries if entry.key]

    def release(self, span: Span) -> None:
        if span.highlight is None:
            return
        self.highlighter.clear(span.highlight)
        span.highlight = None

    def clear(self) -> None:
        for entry in self.entries:
            for span in entry.spans:
                self.release(span)
        self.entries.clear()

    def to_json(self) -> list[dict[str, Any]]:
        return [entry.to_json() for entry in self.entries]
