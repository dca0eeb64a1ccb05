"""
Markdown preprocessing for strict component-aware renderers (MDX).

Such renderers read ``<``, ``{`` and ``}`` as syntax, so prose like
``I <3 it``, ``x <= 10`` or ``{ }`` breaks them. The functions here escape
those characters line by line while leaving fenced code, math and inline
code untouched. This is a heuristic over text lines, not a parser.
"""

import enum
import re
from typing import Callable, List, Optional, Tuple

# Module scope regex variables

INLINE_CODE_RE = re.compile(r"`[^`]+`")
# $...$ but not $$...$$
INLINE_MATH_RE = re.compile(r"(?<!\$)\$(?!\$)([^$]+)\$(?!\$)")
BLOCK_MATH_INLINE_RE = re.compile(r"\$\$([^$]*)\$\$")
HTML_COMMENT_RE = re.compile(r"<!--([\s\S]*?)-->")

# Tag names must start with a letter, so <3, <= and <> are not tags
LT_NON_TAG_RE = re.compile(r"<(?![a-zA-Z_/])")
# Tables are stricter: keep <strong>, <br/>, </em>, <a href=...> only
LT_NON_TAG_TABLE_RE = re.compile(r"<(?![a-zA-Z][a-zA-Z0-9]*[\s>/]|/[a-zA-Z])")
# Braces that do not open an expression, an MDX comment or an import
LBRACE_STANDALONE_RE = re.compile(r"\{(?![a-zA-Z_$/*])")
RBRACE_STANDALONE_RE = re.compile(r"(?<![a-zA-Z0-9_$*/])\}")

TABLE_SEPARATOR_RE = re.compile(r"\|[\s-]+\|")
FENCE_RE = re.compile(r"^(`{3,}|~{3,})")

LT_ENTITY = "&lt;"
LBRACE_ENTITY = "&#123;"
RBRACE_ENTITY = "&#125;"


class LineState(enum.Enum):
    NORMAL = "normal"
    CODE_BLOCK = "code_block"
    BLOCK_MATH = "block_math"
    TABLE = "table"


# ==================== Span protection ====================


class _Protector:
    """Swaps spans for opaque placeholders and restores them verbatim."""

    def __init__(self, tag: str):
        self.tag = tag
        self.segments: List[str] = []

    def protect(self, pattern: re.Pattern, text: str) -> str:
        def stash(match: re.Match) -> str:
            self.segments.append(match.group(0))
            return f"__{self.tag}_{len(self.segments) - 1}__"

        return pattern.sub(stash, text)

    def restore(self, text: str) -> str:
        # Newest first, so a span captured around an older placeholder
        # brings that placeholder back before it is resolved.
        for index in range(len(self.segments) - 1, -1, -1):
            text = text.replace(f"__{self.tag}_{index}__", self.segments[index], 1)
        return text


def _stash_comments(text: str) -> Tuple[str, List[str]]:
    # Comments are pulled out before escaping because their delimiters
    # contain angle brackets.
    comments: List[str] = []

    def stash(match: re.Match) -> str:
        comments.append(match.group(1))
        return f"__HTML_COMMENT_{len(comments) - 1}__"

    return HTML_COMMENT_RE.sub(stash, text), comments


def _restore_comments(text: str, comments: List[str]) -> str:
    for index, body in enumerate(comments):
        text = text.replace(f"__HTML_COMMENT_{index}__", f"{{/* {body} */}}", 1)
    return text


# ==================== Line escaping ====================


def escape_jsx_in_table(text: str) -> str:
    """
    Escape one table line.

    Only ``<`` that opens a complete tag name (or a closing tag) survives.
    Braces become numeric entities because backslash escapes are not safe
    inside table cells. Inline code and math are left alone and HTML
    comments become ``{/* ... */}``.
    """
    protector = _Protector("CODE_SEGMENT")
    processed = protector.protect(INLINE_CODE_RE, text)
    processed = protector.protect(INLINE_MATH_RE, processed)
    processed = protector.protect(BLOCK_MATH_INLINE_RE, processed)
    processed, comments = _stash_comments(processed)

    processed = LT_NON_TAG_TABLE_RE.sub(LT_ENTITY, processed)
    processed = processed.replace("{", LBRACE_ENTITY).replace("}", RBRACE_ENTITY)

    processed = _restore_comments(processed, comments)
    return protector.restore(processed)


def escape_jsx_in_non_code_text(text: str) -> str:
    """
    Escape one line of prose.

    Protects inline code, inline math and same-line block math, turns HTML
    comments into ``{/* ... */}``, and escapes ``<`` that cannot start a tag
    plus braces that cannot start or end an expression.
    """
    protector = _Protector("PROTECTED")
    processed = protector.protect(INLINE_CODE_RE, text)
    processed = protector.protect(INLINE_MATH_RE, processed)
    processed = protector.protect(BLOCK_MATH_INLINE_RE, processed)

    processed, comments = _stash_comments(processed)

    processed = LT_NON_TAG_RE.sub(LT_ENTITY, processed)
    processed = LBRACE_STANDALONE_RE.sub(LBRACE_ENTITY, processed)
    processed = RBRACE_STANDALONE_RE.sub(RBRACE_ENTITY, processed)

    processed = _restore_comments(processed, comments)
    return protector.restore(processed)


# ==================== Document pass ====================


def _is_table_line(line: str) -> bool:
    return line.strip().startswith("|") or TABLE_SEPARATOR_RE.search(line) is not None


def process_lines(
    content: str,
    escape_line: Callable[[str], str],
    escape_table_line: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Run the line state machine over ``content``.

    Lines inside fenced code or ``$$`` blocks pass through unmodified. When
    ``escape_table_line`` is given, a line opening a table switches to the
    table state, and every line until the next blank one is escaped with
    it; otherwise tables are treated as prose.
    """
    state = LineState.NORMAL
    fence = ""
    result: List[str] = []

    for line in content.split("\n"):
        stripped = line.strip()

        if state is LineState.CODE_BLOCK:
            if stripped.startswith(fence):
                state = LineState.NORMAL
            result.append(line)
            continue

        fence_match = FENCE_RE.match(stripped)
        if fence_match:
            state = LineState.CODE_BLOCK
            fence = fence_match.group(1)[0] * 3
            result.append(line)
            continue

        if stripped == "$$":
            state = LineState.NORMAL if state is LineState.BLOCK_MATH else LineState.BLOCK_MATH
            result.append(line)
            continue

        if state is LineState.BLOCK_MATH:
            result.append(line)
            continue

        if escape_table_line is not None:
            if state is LineState.TABLE and not stripped:
                state = LineState.NORMAL
            elif state is LineState.NORMAL and _is_table_line(line):
                state = LineState.TABLE

            if state is LineState.TABLE:
                result.append(escape_table_line(line))
                continue

        result.append(escape_line(line))

    return "\n".join(result)


def preprocess_markdown(content: str) -> str:
    """Make markdown safe for an MDX-style renderer.

    Code fences and block math are kept byte-for-byte; table lines get the
    strict table escaping; everything else gets prose escaping.
    """
    return process_lines(content, escape_jsx_in_non_code_text, escape_jsx_in_table)
