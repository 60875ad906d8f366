"""Inline Markdown transforms applied after block structure exists."""

from __future__ import annotations

import re

from .escaping import escape_html, unescape_html
from .models import ParseContext, ParseOptions, SpanKind

IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
STRIKETHROUGH_PATTERN = re.compile(r"~~(.+?)~~")
LINE_BREAK_PATTERN = re.compile(r"(?<! ) {2,}\n|\\\n")

# Composite markers run first so `***x***` is not split into overlapping
# bold and italic matches. Mixed markers such as `*word_` are not paired.
EMPHASIS_RULES = (
    (re.compile(r"\*\*\*(.+?)\*\*\*"), r"<strong><em>\1</em></strong>"),
    (re.compile(r"___(.+?)___"), r"<strong><em>\1</em></strong>"),
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"__(.+?)__"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"_(.+?)_"), r"<em>\1</em>"),
)


def apply_inline_transforms(ctx: ParseContext, text: str, options: ParseOptions) -> str:
    """Run every inline transform in order."""
    text = parse_images(ctx, text, options)
    text = parse_links(ctx, text, options)
    text = parse_emphasis(text)
    text = parse_strikethrough(text)
    return parse_line_breaks(text)


def parse_images(ctx: ParseContext, text: str, options: ParseOptions) -> str:
    """Convert ``![alt](src)`` to ``<img>`` tags.

    Placeholder tokens inside the source and alt text are expanded back to
    the text the author wrote. The source is then unescaped, handed to the
    image resolver, and escaped again for the attribute. The finished tag is
    protected so later emphasis rules never touch underscores or asterisks in
    the URL.
    """
    resolve = options.resolve_image_path

    def replace(match: re.Match) -> str:
        src = unescape_html(ctx.expand(match.group(2).strip()))
        if resolve is not None:
            src = resolve(src)
        loading = ' loading="lazy"' if options.lazy_images else ""
        alt = ctx.expand(match.group(1))
        tag = f'<img src="{escape_html(src)}" alt="{alt}"{loading}>'
        return ctx.protect(SpanKind.MARKUP, tag)

    return IMAGE_PATTERN.sub(replace, text)


def parse_links(ctx: ParseContext, text: str, options: ParseOptions) -> str:
    """Convert ``[text](href)`` to anchors.

    Only the opening tag is protected; the link text still receives emphasis.
    The href gets the same token expansion and re-escaping as image sources.
    """
    target = ' target="_blank" rel="noopener noreferrer"' if options.open_links_in_new_tab else ""

    def replace(match: re.Match) -> str:
        href = escape_html(unescape_html(ctx.expand(match.group(2).strip())))
        opening = ctx.protect(SpanKind.MARKUP, f'<a href="{href}"{target}>')
        return f"{opening}{match.group(1)}</a>"

    return LINK_PATTERN.sub(replace, text)


def parse_emphasis(text: str) -> str:
    for pattern, replacement in EMPHASIS_RULES:
        text = pattern.sub(replacement, text)
    return text


def parse_strikethrough(text: str) -> str:
    return STRIKETHROUGH_PATTERN.sub(r"<del>\1</del>", text)


def parse_line_breaks(text: str) -> str:
    """Two or more trailing spaces, or a trailing backslash, force a ``<br>``."""
    return LINE_BREAK_PATTERN.sub("<br>\n", text)
