"""Mode-aware scanner for CJK text in Vue single-file components and scripts.

The document is walked line by line. Lines that produce no fragment are
carried over in a buffer and retried together with the next line, so text
wrapped over several source lines is captured as one span. Coordinates are
computed against the buffered text and the line the buffer started on.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from .document import Document, is_script_only
from .masking import (
    ATTR_VALUE_RE,
    blank,
    mask_markup_comments,
    mask_script_chunk,
    mask_template,
)
from .models import Position, ScanMode, Span, SpanKind, TextRange
from .registry import Registry

logger = logging.getLogger(__name__)

IDEOGRAPHS = "\u3400-\u4DBF\u4E00-\u9FFF\uF900-\uFAFF"
FULLWIDTH_PUNCT = "\u3000-\u303F\uFF00-\uFFEF"
RUN_BOUNDARY = IDEOGRAPHS + FULLWIDTH_PUNCT + "\u00B7\u2014\u2018\u2019\u201C\u201D\u2026"

FRAGMENT_CHAR_RE = re.compile(f"[{IDEOGRAPHS}{FULLWIDTH_PUNCT}]")
SCRIPT_RUN_RE = re.compile(
    f"[{RUN_BOUNDARY}]" + r"(?:[^${}`\"':]*" + f"[{RUN_BOUNDARY}])?"
)
ATTR_FRAGMENT_RE = re.compile(
    f"[{IDEOGRAPHS}{FULLWIDTH_PUNCT}](?:.*[{IDEOGRAPHS}{FULLWIDTH_PUNCT}])?",
    re.DOTALL,
)
STRING_LITERAL_RE = re.compile(
    r"'(?:\\.|[^'\\\n])*'|\"(?:\\.|[^\"\\\n])*\"|`(?:\\.|[^`\\])*`",
    re.DOTALL,
)
TAG_TEXT_RE = re.compile(r"(</?[A-Za-z][\w\-]*)([^>]*?)>(?P<text>[^<]+)(?=<)", re.ASCII)
MUSTACHE_RE = re.compile(r"\{\{.*?(?:\}\}|\Z)", re.DOTALL)
LEADING_TRIM_RE = re.compile(r"[\s\d]*")
TRAILING_TRIM_RE = re.compile(r"[\s\d]*\Z")
BOUND_ATTR_PREFIXES = (":", "@", "#", "v-")

TEMPLATE_OPEN = "<template>"
SCRIPT_OPEN = "<script"
SCRIPT_CLOSE = "</script>"


@dataclass(frozen=True)
class Fragment:
    start: int
    end: int
    kind: SpanKind


@dataclass
class ScanState:
    mode: ScanMode
    buffer: str = ""
    baseline: int = 0
    previous: ScanMode = ScanMode.OUTSIDE
    entered_template: bool = False
    # Script comment still open where the buffer was last cut.
    open_comment: str = ""

    def reset(self, baseline: int, open_comment: str = "") -> None:
        self.buffer = ""
        self.baseline = baseline
        self.open_comment = open_comment


def has_fragment_char(text: str) -> bool:
    return bool(FRAGMENT_CHAR_RE.search(text))


def offset_to_position(text: str, offset: int, baseline: int) -> Position:
    line_breaks = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(baseline + line_breaks, offset - line_start)


def literal_fragments(text: str, start: int, end: int) -> Iterator[tuple[int, int]]:
    """CJK runs inside the string literals found between ``start`` and ``end``."""
    for literal in STRING_LITERAL_RE.finditer(text, start, end):
        body_start = literal.start() + 1
        body_end = literal.end() - 1
        for run in SCRIPT_RUN_RE.finditer(text, body_start, body_end):
            yield run.start(), run.end()


def trimmed_text_run(text: str, start: int, end: int) -> tuple[int, int] | None:
    lead = LEADING_TRIM_RE.match(text, start, end)
    if lead:
        start = lead.end()
    trail = TRAILING_TRIM_RE.search(text, start, end)
    if trail:
        end = trail.start()
    if start >= end or not has_fragment_char(text[start:end]):
        return None
    return start, end


def tag_fragments(masked: str) -> list[Fragment]:
    """Text nodes after a tag boundary, split around ``{{ }}`` interpolations.

    String literals inside an interpolation are reported as script fragments.
    """
    found: list[Fragment] = []
    for match in TAG_TEXT_RE.finditer(masked):
        node_start, node_end = match.span("text")
        cursor = node_start
        for expr in MUSTACHE_RE.finditer(masked, node_start, node_end):
            run = trimmed_text_run(masked, cursor, expr.start())
            if run:
                found.append(Fragment(run[0], run[1], "tag"))
            for start, end in literal_fragments(masked, expr.start(), expr.end()):
                found.append(Fragment(start, end, "script"))
            cursor = expr.end()
        run = trimmed_text_run(masked, cursor, node_end)
        if run:
            found.append(Fragment(run[0], run[1], "tag"))
    return found


def attribute_fragments(masked: str) -> list[Fragment]:
    found: list[Fragment] = []
    for match in ATTR_VALUE_RE.finditer(masked):
        group = "dq" if match.group("dq") is not None else "sq"
        value_start, value_end = match.span(group)
        name = match.group(0).partition("=")[0]
        if name.startswith(BOUND_ATTR_PREFIXES):
            # Bound values are expressions: only their string literals count.
            for start, end in literal_fragments(masked, value_start, value_end):
                found.append(Fragment(start, end, "attribute"))
            continue
        run = ATTR_FRAGMENT_RE.search(masked, value_start, value_end)
        if run:
            found.append(Fragment(run.start(), run.end(), "attribute"))
    return found


def script_fragments(masked: str) -> list[Fragment]:
    return [
        Fragment(start, end, "script")
        for start, end in literal_fragments(masked, 0, len(masked))
    ]


class Scanner:
    """One scan pass over a document, feeding discovered spans to a registry."""

    def __init__(
        self,
        document: Document,
        registry: Registry,
        *,
        script_only: bool = False,
    ) -> None:
        self.document = document
        self.registry = registry
        self.script_only = script_only
        self.discovered: list[tuple[str, Span]] = []

    def scan(self) -> list[tuple[str, Span]]:
        initial = ScanMode.SCRIPT if self.script_only else ScanMode.OUTSIDE
        state = ScanState(mode=initial)

        for index in range(self.document.line_count()):
            line = self.document.line_text(index)

            if state.mode is not ScanMode.SCRIPT and SCRIPT_OPEN in line:
                if state.mode is ScanMode.TEMPLATE and state.buffer:
                    self._flush_attributes(state)
                state.previous = state.mode
                state.mode = ScanMode.SCRIPT
                state.reset(index + 1)
                if SCRIPT_CLOSE in line:
                    state.mode = state.previous
                continue

            if state.mode is ScanMode.SCRIPT and SCRIPT_CLOSE in line and not self.script_only:
                state.mode = state.previous
                state.reset(index + 1)
                continue

            text = state.buffer + line
            if (
                state.mode is ScanMode.OUTSIDE
                and not state.entered_template
                and TEMPLATE_OPEN in text
            ):
                marker_start = text.index(TEMPLATE_OPEN)
                state.mode = ScanMode.TEMPLATE
                state.entered_template = True
                state.reset(index)
                text = blank(text[:marker_start]) + text[marker_start:]

            if state.mode is ScanMode.OUTSIDE:
                state.reset(index + 1)
                continue

            still_open = ""
            if state.mode is ScanMode.SCRIPT:
                masked, still_open = mask_script_chunk(text, open_comment=state.open_comment)
                fragments = script_fragments(masked)
            else:
                fragments = tag_fragments(mask_template(text))
                if fragments:
                    fragments.extend(attribute_fragments(mask_markup_comments(text)))

            if not fragments:
                state.buffer = text + "\n"
                continue

            self._emit(text, state.baseline, fragments)
            state.reset(index + 1, still_open)

        if state.mode is ScanMode.TEMPLATE and state.buffer:
            self._flush_attributes(state)

        logger.debug(
            "scan finished: %d span(s), %d entr(y/ies)",
            len(self.discovered),
            len(self.registry),
        )
        return self.discovered

    def _flush_attributes(self, state: ScanState) -> None:
        text = state.buffer[:-1] if state.buffer.endswith("\n") else state.buffer
        fragments = attribute_fragments(mask_markup_comments(text))
        if fragments:
            self._emit(text, state.baseline, fragments)

    def _emit(self, text: str, baseline: int, fragments: list[Fragment]) -> None:
        for fragment in sorted(fragments, key=lambda f: (f.start, f.end)):
            value = text[fragment.start : fragment.end]
            start = offset_to_position(text, fragment.start, baseline)
            end = offset_to_position(text, fragment.end, baseline)
            handle = self.registry.highlighter.highlight(TextRange(start, end))
            span = Span(start=start, end=end, kind=fragment.kind, highlight=handle)
            if self.registry.add(value, span) is not None:
                self.discovered.append((value, span))


def scan_document(
    document: Document,
    registry: Registry,
    *,
    script_only: bool | None = None,
) -> list[tuple[str, Span]]:
    """Scan ``document`` into ``registry`` and return the spans it accepted.

    ``script_only`` defaults to what the document's file name says.
    """
    if script_only is None:
        script_only = is_script_only(document)
    return Scanner(document, registry, script_only=script_only).scan()
