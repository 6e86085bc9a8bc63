"""Decide how one occurrence must be rewritten from the text around it.

Each probe looks at the text before the fragment (matched up to its end) and
the text after it (matched from its start), so the occurrence being rewritten
is the one at the recorded offset and never an earlier copy of the same
value on the line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

SHAPES = ("tag", "key", "keyRaw", "command", "event", "attr", "value", "raw", "text")

TAG_BEFORE_RE = re.compile(r"(?:>|\}\})[^<>{}]*\Z")
TAG_AFTER_RE = re.compile(r"[^<>{}]*(?:<|\{\{)")
KEY_BEFORE_RE = re.compile(
    r"(?:^|[{,])[ \t]*(?P<quote>['\"]?)(?P<pre>[^'\"`\s:{},\[\]]*)\Z", re.MULTILINE
)
KEY_AFTER_RE = re.compile(r"(?P<post>[^'\"`\s:{},\[\]]*)(?P<quote>['\"]?)[ \t]*:(?:\s|\Z)")
KEY_RAW_BEFORE_RE = re.compile(r"\[`[^`]*\Z")
KEY_RAW_AFTER_RE = re.compile(r"[^`]*`\][ \t]*:")
ATTR_BEFORE_RE = re.compile(
    r"(?<![\w:.@#\-])(?P<name>[:@#]?[A-Za-z_][\w:.\-]*)=(?:\"(?P<dq>[^\"]*)|'(?P<sq>[^']*))\Z",
    re.ASCII,
)
TEXT_BEFORE_RE = re.compile(r"(?:\A|\n)[^<>{}\n]*\Z")

LITERAL_QUOTES = "'\"`"


@dataclass(frozen=True)
class Classification:
    shape: str
    replacement: str
    before: int = 0
    after: int = 0

    @property
    def confident(self) -> bool:
        return self.shape != "unknown"


@dataclass(frozen=True)
class Literal:
    quote: str
    pre: str
    post: str


def call_expression(function: str, key: str) -> str:
    quoted = key.replace("\\", "\\\\").replace("'", "\\'")
    return f"{function}('{quoted}')"


def escape_template_text(text: str) -> str:
    return text.replace("`", "\\`").replace("${", "\\${")


def template_literal(pre: str, call: str, post: str) -> str:
    return f"`{escape_template_text(pre)}${{{call}}}{escape_template_text(post)}`"


def open_literal(before: str, after: str, quotes: str = LITERAL_QUOTES) -> Literal | None:
    """The innermost string literal enclosing the point between the two texts."""
    best: tuple[int, Literal] | None = None
    for quote in quotes:
        q = re.escape(quote)
        newline = "" if quote == "`" else "\\n"
        body = f"(?:\\\\.|[^{q}\\\\{newline}])*"
        head = re.search(f"{q}({body})\\Z", before, re.DOTALL)
        if head is None:
            continue
        tail = re.match(f"({body}){q}", after, re.DOTALL)
        if tail is None:
            continue
        if best is None or head.start() > best[0]:
            best = (head.start(), Literal(quote, head.group(1), tail.group(1)))
    return best[1] if best else None


def rewrite_literal(literal: Literal, call: str) -> Classification:
    if literal.quote == "`":
        return Classification("raw", f"${{{call}}}")
    if not literal.pre and not literal.post:
        replacement = call
    else:
        replacement = template_literal(literal.pre, call, literal.post)
    return Classification(
        "value",
        replacement,
        before=len(literal.pre) + 1,
        after=len(literal.post) + 1,
    )


def probe_tag(before: str, after: str, open_end: bool = False) -> bool:
    """Text node content. With ``open_end`` the node may close on a later line."""
    if not TAG_BEFORE_RE.search(before):
        return False
    return bool(TAG_AFTER_RE.match(after) or (open_end and not after.strip()))


def probe_key(before: str, after: str, call: str, script_context: bool) -> Classification | None:
    head = KEY_BEFORE_RE.search(before)
    if head is None:
        return None
    tail = KEY_AFTER_RE.match(after)
    if tail is None or tail.group("quote") != head.group("quote"):
        return None
    quote = head.group("quote")
    if not quote and not script_context:
        return None
    pre, post = head.group("pre"), tail.group("post")
    if pre or post:
        replacement = f"[{template_literal(pre, call, post)}]"
    else:
        replacement = f"[{call}]"
    return Classification(
        "key",
        replacement,
        before=len(quote) + len(pre),
        after=len(post) + len(quote),
    )


def probe_attribute(before: str, after: str, call: str) -> Classification | None:
    head = ATTR_BEFORE_RE.search(before)
    if head is None:
        return None
    quote, pre = ('"', head.group("dq")) if head.group("dq") is not None else ("'", head.group("sq"))
    end = after.find(quote)
    if end < 0:
        return None
    name, post = head.group("name"), after[:end]

    if name.startswith("v-"):
        shape = "command"
    elif name.startswith("@"):
        shape = "event"
    else:
        shape = "attr"

    if shape != "attr" or name.startswith(":") or name.startswith("#"):
        literal = open_literal(pre, post, LITERAL_QUOTES.replace(quote, ""))
        if literal is None:
            return Classification(shape, call)
        inner = rewrite_literal(literal, call)
        return Classification(shape, inner.replacement, inner.before, inner.after)

    # Static attribute: promote the whole declaration to a bound one.
    replacement = f":{name}={quote}{template_literal(pre, call, post)}{quote}"
    return Classification(
        "attr",
        replacement,
        before=len(name) + 2 + len(pre),
        after=len(post) + 1,
    )


def classify(
    content: str,
    value: str,
    offset: int,
    key: str,
    function: str = "$t",
    script_context: bool = False,
    kind: str = "",
) -> Classification:
    """Classify the occurrence of ``value`` at ``offset`` in ``content``.

    ``content`` holds the current text of every line the occurrence covers,
    joined with ``\\n``. Markup shapes are not tried for script code. ``kind``
    is the span kind the scanner recorded; a ``tag`` span is text node content
    even when the rest of the node sits on later lines.
    """
    before = content[:offset]
    after = content[offset + len(value) :]
    call = call_expression(function, key)

    if not script_context and probe_tag(before, after, open_end=kind == "tag"):
        return Classification("tag", f"{{{{{call}}}}}")

    keyed = probe_key(before, after, call, script_context)
    if keyed:
        return keyed

    if KEY_RAW_BEFORE_RE.search(before) and KEY_RAW_AFTER_RE.match(after):
        return Classification("keyRaw", f"${{{call}}}")

    if not script_context:
        attribute = probe_attribute(before, after, call)
        if attribute:
            return attribute

    literal = open_literal(before, after)
    if literal:
        return rewrite_literal(literal, call)

    if not script_context and TEXT_BEFORE_RE.search(before):
        return Classification("text", f"{{{{{call}}}}}")

    return Classification("unknown", call)
