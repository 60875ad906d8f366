"""Markdown to HTML conversion.

`parse` runs a fixed pipeline over the whole document:

1. normalize line endings;
2. protect code, math, and raw HTML behind placeholder tokens;
3. escape the remaining prose;
4. block transforms;
5. inline transforms;
6. restore protected spans as finished HTML;
7. trim.

The phases are order-dependent. Escaping must never see protected content,
and inline rules must run after block structure exists.
"""

from __future__ import annotations

import logging
import re

from .blocks import apply_block_transforms
from .constants import (
    BLOCK_HTML_PATTERN,
    DISPLAY_MATH_PATTERN,
    ESCAPED_DOLLAR_PATTERN,
    FENCED_CODE_PATTERN,
    INLINE_CODE_PATTERN,
    INLINE_HTML_PATTERN,
    INLINE_MATH_PATTERN,
    PLACEHOLDER_PATTERN,
    SENTINEL,
    SENTINEL_REPLACEMENT,
    UNSAFE_HTML_TAGS,
    UNSAFE_TAG_PATTERN,
)
from .escaping import escape_html
from .inline import apply_inline_transforms
from .models import ParseContext, ParseOptions, ProtectedSpan, SpanKind

logger = logging.getLogger(__name__)

_KIND_PATTERNS = {
    kind: re.compile(rf"{SENTINEL}{kind.value}(\d+){SENTINEL}") for kind in SpanKind
}


def parse(markdown: str, options: ParseOptions | None = None) -> str:
    """Convert Markdown text to an HTML fragment.

    Never raises for string input: malformed tables, unterminated emphasis, and
    unterminated fences degrade into literal text or partial structures. The
    result is not sanitized; raw HTML written by the author passes through and
    must be cleaned downstream before it reaches a DOM.

    Args:
        markdown: Markdown source. Empty input yields an empty string.
        options: Render options, most importantly the image-path resolver.
            Defaults to `ParseOptions()`.

    Returns:
        str: HTML fragment.

    Examples:
        parse("# Title")  # "<h1>Title</h1>"
        parse("![a](x.png)", ParseOptions(resolve_image_path=lambda p: "/files/" + p))
    """
    if not markdown:
        return ""

    options = options or ParseOptions()
    ctx = ParseContext()

    text = normalize(markdown)
    text = protect_spans(ctx, text)
    text = escape_html(text)
    text = apply_block_transforms(text)
    text = apply_inline_transforms(ctx, text, options)
    html = restore_spans(ctx, text, options)

    logger.debug(
        "Rendered %d characters of Markdown with %d protected spans",
        len(markdown),
        ctx.span_count,
    )
    return html.strip()


def normalize(markdown: str) -> str:
    """Normalize line endings and neutralize the placeholder sentinel.

    Examples:
        normalize("a\\r\\nb")  # "a\\nb"
    """
    return markdown.replace("\r\n", "\n").replace(SENTINEL, SENTINEL_REPLACEMENT)


def protect_spans(ctx: ParseContext, text: str) -> str:
    """Replace content that must survive escaping with placeholder tokens.

    Extraction order is fixed so later patterns cannot corrupt earlier
    placeholders: fenced code, inline code, escaped dollars, display math,
    inline math, block HTML, inline HTML.
    """
    text = _protect_fenced_code(ctx, text)
    text = _protect_simple(ctx, text, INLINE_CODE_PATTERN, SpanKind.INLINE_CODE)
    text = ESCAPED_DOLLAR_PATTERN.sub(
        lambda _match: ctx.protect(SpanKind.ESCAPED_DOLLAR, "$"), text
    )
    text = _protect_simple(ctx, text, DISPLAY_MATH_PATTERN, SpanKind.DISPLAY_MATH)
    text = _protect_simple(ctx, text, INLINE_MATH_PATTERN, SpanKind.INLINE_MATH)
    text = _protect_block_html(ctx, text)
    return _protect_inline_html(ctx, text)


def _protect_fenced_code(ctx: ParseContext, text: str) -> str:
    def replace(match: re.Match) -> str:
        token = ctx.protect(
            SpanKind.FENCED_CODE, match.group("code").rstrip(), language=match.group("lang")
        )
        return f"\n\n{token}\n\n"

    return FENCED_CODE_PATTERN.sub(replace, text)


def _protect_simple(ctx: ParseContext, text: str, pattern: re.Pattern, kind: SpanKind) -> str:
    return pattern.sub(lambda match: ctx.protect(kind, match.group(1)), text)


def _protect_block_html(ctx: ParseContext, text: str) -> str:
    def replace(match: re.Match) -> str:
        # Script-like tags inside a block run are escaped, never passed through.
        raw = UNSAFE_TAG_PATTERN.sub(
            lambda tag: escape_html(tag.group(0)), match.group(0).strip()
        )
        token = ctx.protect(SpanKind.BLOCK_HTML, raw)
        return f"\n\n{token}\n\n"

    return BLOCK_HTML_PATTERN.sub(replace, text)


def _protect_inline_html(ctx: ParseContext, text: str) -> str:
    def replace(match: re.Match) -> str:
        name = (match.group("name") or match.group("close") or "").lower()
        if name in UNSAFE_HTML_TAGS:
            return match.group(0)
        return ctx.protect(SpanKind.INLINE_HTML, match.group(0))

    return INLINE_HTML_PATTERN.sub(replace, text)


def restore_spans(ctx: ParseContext, text: str, options: ParseOptions) -> str:
    """Substitute every placeholder with its finished HTML.

    Kinds are restored in `SpanKind` order. A restored span may itself contain
    tokens extracted before it (inline code inside block HTML, for example),
    so passes repeat until no token is left. Extraction order rules out
    cycles, so the number of passes is bounded by the number of kinds.
    """
    for _ in range(len(SpanKind)):
        if not PLACEHOLDER_PATTERN.search(text):
            break
        for kind, pattern in _KIND_PATTERNS.items():
            text = pattern.sub(
                lambda match, kind=kind: _render_token(ctx, kind, match, options), text
            )
    return text


def _render_token(ctx: ParseContext, kind: SpanKind, match: re.Match, options: ParseOptions) -> str:
    span = ctx.lookup(kind.value, int(match.group(1)))
    if span is None:
        return ""
    return render_span(span, options)


def render_span(span: ProtectedSpan, options: ParseOptions) -> str:
    """Render one protected span as final HTML.

    Examples:
        render_span(ProtectedSpan(SpanKind.INLINE_MATH, "x^2"), ParseOptions())
        # '<span class="math-inline">\\(x^2\\)</span>'
    """
    kind = span.kind
    if kind in (SpanKind.MARKUP, SpanKind.INLINE_HTML, SpanKind.BLOCK_HTML):
        return span.raw
    if kind is SpanKind.INLINE_CODE:
        return f"<code>{escape_html(span.raw)}</code>"
    if kind is SpanKind.FENCED_CODE:
        return _render_fenced_code(span, options)
    if kind is SpanKind.DISPLAY_MATH:
        return f'<div class="math-display">\\[{_math_source(span.raw)}\\]</div>'
    if kind is SpanKind.INLINE_MATH:
        return f'<span class="math-inline">\\({_math_source(span.raw)}\\)</span>'
    return "$"


def _render_fenced_code(span: ProtectedSpan, options: ParseOptions) -> str:
    language = span.language
    diagram_language = options.diagram_language.lower()
    if language and language.lower() == diagram_language:
        # Diagram renderers read the raw source from the element's text.
        return f'<div class="{diagram_language}">{span.raw}</div>'
    class_attr = f' class="language-{language}"' if language else ""
    return f"<pre><code{class_attr}>{escape_html(span.raw)}</code></pre>"


def _math_source(raw: str) -> str:
    # An escaped dollar inside math stays a TeX escape.
    raw = _KIND_PATTERNS[SpanKind.ESCAPED_DOLLAR].sub(r"\\$", raw)
    return escape_html(raw)
