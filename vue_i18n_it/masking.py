"""Length-preserving masks applied before fragment matching.

Every non-whitespace character inside a masked region becomes a single space,
so masked text keeps the exact line count and per-line length of its input
and offsets found in it are valid offsets into the original text.
"""

from __future__ import annotations

import re

MARKUP_COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
ATTR_VALUE_RE = re.compile(
    r"(?<=\s)[:@#]?[A-Za-z_][\w:.\-]*=(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)')",
    re.ASCII,
)


def blank(text: str) -> str:
    return "".join(ch if ch.isspace() else " " for ch in text)


def mask_markup_comments(text: str) -> str:
    return MARKUP_COMMENT_RE.sub(lambda m: blank(m.group(0)), text)


def mask_attribute_values(text: str) -> str:
    def repl(match: re.Match[str]) -> str:
        group = "dq" if match.group("dq") is not None else "sq"
        start = match.start(group) - match.start()
        end = match.end(group) - match.start()
        whole = match.group(0)
        return f"{whole[:start]}{blank(whole[start:end])}{whole[end:]}"

    return ATTR_VALUE_RE.sub(repl, text)


def mask_template(text: str) -> str:
    """Mask markup comments and quoted attribute values for the tag-text pass."""
    return mask_attribute_values(mask_markup_comments(text))


def mask_script_comments(
    text: str,
    include_markup_comments: bool = True,
    open_comment: str = "",
) -> str:
    """Mask block, line and markup comments outside of string literals."""
    return mask_script_chunk(text, include_markup_comments, open_comment)[0]


def mask_script_chunk(
    text: str,
    include_markup_comments: bool = True,
    open_comment: str = "",
) -> tuple[str, str]:
    """Mask one chunk of script and report the comment still open at its end.

    ``open_comment`` is ``"block"``, ``"markup"`` or empty, and lets a chunk
    start inside a comment opened by the previous one.
    """
    normal = 0
    line_comment = 1
    block_comment = 2
    single_quote = 3
    double_quote = 4
    template_quote = 5
    markup_comment = 6

    state = {"block": block_comment, "markup": markup_comment}.get(open_comment, normal)
    out: list[str] = []
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if state == normal:
            if include_markup_comments and text.startswith("<!--", i):
                out.append(" " * 4)
                i += 4
                state = markup_comment
                continue
            if ch == "/" and nxt == "/":
                out.append("  ")
                i += 2
                state = line_comment
                continue
            if ch == "/" and nxt == "*":
                out.append("  ")
                i += 2
                state = block_comment
                continue
            if ch == "'":
                state = single_quote
            elif ch == '"':
                state = double_quote
            elif ch == "`":
                state = template_quote
            out.append(ch)
            i += 1
            continue

        if state == line_comment:
            if ch in "\r\n":
                out.append(ch)
                state = normal
            else:
                out.append(ch if ch.isspace() else " ")
            i += 1
            continue

        if state == block_comment:
            if ch == "*" and nxt == "/":
                out.append("  ")
                i += 2
                state = normal
            else:
                out.append(ch if ch.isspace() else " ")
                i += 1
            continue

        if state == markup_comment:
            if text.startswith("-->", i):
                out.append(" " * 3)
                i += 3
                state = normal
            else:
                out.append(ch if ch.isspace() else " ")
                i += 1
            continue

        # Inside a string literal.
        if ch == "\\" and i + 1 < n:
            out.append(ch)
            out.append(text[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
        if state == single_quote and ch in "'\n":
            state = normal
        elif state == double_quote and ch in '"\n':
            state = normal
        elif state == template_quote and ch == "`":
            state = normal

    still_open = {block_comment: "block", markup_comment: "markup"}.get(state, "")
    return "".join(out), still_open
