"""Replace keyed fragments with i18n calls, one edit at a time.

Span coordinates stay in pre-edit space. Every edit reports how it moved the
text after it and that movement is folded into an ``OffsetState`` which maps
the next span onto the current document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .classifier import Classification, call_expression, classify
from .document import Document, is_script_only, text_in_range
from .models import Entry, OffsetState, Position, Span, TextRange
from .registry import Registry
from .scanner import offset_to_position

logger = logging.getLogger(__name__)


@dataclass
class RewriteOutcome:
    entry_id: int
    key: str
    span: Span
    shape: str
    original: str = ""
    replacement: str = ""
    confident: bool = True
    skipped: str = ""

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.entry_id,
            "key": self.key,
            "span": self.span.to_json(),
            "shape": self.shape,
            "original": self.original,
            "replacement": self.replacement,
            "confident": self.confident,
            "skipped": self.skipped,
        }


@dataclass
class RewriteReport:
    outcomes: list[RewriteOutcome] = field(default_factory=list)

    @property
    def applied(self) -> list[RewriteOutcome]:
        return [o for o in self.outcomes if not o.skipped]

    @property
    def skipped(self) -> list[RewriteOutcome]:
        return [o for o in self.outcomes if o.skipped]

    @property
    def uncertain(self) -> list[RewriteOutcome]:
        return [o for o in self.applied if not o.confident]

    def to_json(self) -> list[dict[str, Any]]:
        return [o.to_json() for o in self.outcomes]


def nearest_occurrence(content: str, value: str, offset: int) -> int:
    """Offset of the occurrence of ``value`` closest to ``offset``, or -1."""
    best = -1
    index = content.find(value)
    while index >= 0:
        if best < 0 or abs(index - offset) < abs(best - offset):
            best = index
        index = content.find(value, index + 1)
    return best


class Rewriter:
    def __init__(
        self,
        document: Document,
        registry: Registry,
        *,
        function: str = "$t",
        script_only: bool = False,
    ) -> None:
        self.document = document
        self.registry = registry
        self.function = function
        self.script_only = script_only

    def pending(self) -> list[tuple[Entry, Span]]:
        work = [(entry, span) for entry in self.registry.keyed_entries() for span in entry.spans]
        work.sort(key=lambda item: (item[1].start, item[1].end))
        return work

    def run(self) -> RewriteReport:
        report = RewriteReport()
        state = OffsetState()
        boundary: Position | None = None

        for entry, span in self.pending():
            start = state.translate(span.start)
            end = state.translate(span.end)
            if boundary is not None and start < boundary:
                logger.warning(
                    "skipping %r at %d:%d, it overlaps an earlier edit",
                    entry.value,
                    span.start.line,
                    span.start.character,
                )
                report.outcomes.append(
                    RewriteOutcome(entry.id, entry.key, span, "skipped", skipped="overlap")
                )
                continue

            outcome, applied = self._rewrite(entry, span, start, end, state)
            report.outcomes.append(outcome)
            boundary = applied
            self.registry.release(span)

        logger.info(
            "rewrote %d span(s), %d skipped, %d uncertain",
            len(report.applied),
            len(report.skipped),
            len(report.uncertain),
        )
        return report

    def _rewrite(
        self,
        entry: Entry,
        span: Span,
        start: Position,
        end: Position,
        state: OffsetState,
    ) -> tuple[RewriteOutcome, Position]:
        content = "\n".join(
            self.document.line_text(line) for line in range(start.line, end.line + 1)
        )
        offset = start.character
        value = entry.value

        if text_in_range(self.document, TextRange(start, end)) != value:
            found = nearest_occurrence(content, value, offset)
            if found >= 0:
                offset = found
            else:
                logger.warning(
                    "text at %d:%d no longer reads %r; replacing the recorded range",
                    span.start.line,
                    span.start.character,
                    value,
                )
                value = text_in_range(self.document, TextRange(start, end))

        if value == entry.value:
            script_context = self.script_only or span.kind == "script"
            result = classify(
                content, value, offset, entry.key, self.function, script_context, span.kind
            )
        else:
            result = Classification("unknown", call_expression(self.function, entry.key))

        if not result.confident:
            logger.warning(
                "unrecognised context for %r at %d:%d; inserting a bare call",
                entry.value,
                span.start.line,
                span.start.character,
            )

        first = max(offset - result.before, 0)
        last = min(offset + len(value) + result.after, len(content))
        target = TextRange(
            offset_to_position(content, first, start.line),
            offset_to_position(content, last, start.line),
        )
        edit = self.document.apply_edit(target, result.replacement)
        state.fold(target.end.line, edit)
        logger.debug(
            "%s %r -> %r (%+d lines, %+d chars)",
            result.shape,
            content[first:last],
            result.replacement,
            edit.line_delta,
            edit.char_delta,
        )

        applied_end = Position(
            target.end.line + edit.line_delta,
            target.end.character + edit.char_delta,
        )
        outcome = RewriteOutcome(
            entry_id=entry.id,
            key=entry.key,
            span=span,
            shape=result.shape,
            original=content[first:last],
            replacement=result.replacement,
            confident=result.confident,
        )
        return outcome, applied_end


def rewrite_document(
    document: Document,
    registry: Registry,
    *,
    function: str = "$t",
    script_only: bool | None = None,
) -> RewriteReport:
    if script_only is None:
        script_only = is_script_only(document)
    return Rewriter(document, registry, function=function, script_only=script_only).run()
