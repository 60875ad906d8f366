"""Data models for md-preview."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .constants import DEFAULT_DIAGRAM_LANGUAGE, PLACEHOLDER_PATTERN, SENTINEL
from .escaping import escape_html


class SpanKind(Enum):
    """Kinds of protected spans, valued by their placeholder tag.

    Members are listed in restoration order: generated markup first, the
    escaped dollar last.
    """

    MARKUP = "MARKUP"
    INLINE_HTML = "HTMLI"
    BLOCK_HTML = "HTMLB"
    INLINE_CODE = "CODE"
    FENCED_CODE = "FENCE"
    DISPLAY_MATH = "MATHB"
    INLINE_MATH = "MATHI"
    ESCAPED_DOLLAR = "DOLLAR"

    @property
    def is_block(self) -> bool:
        return self in (SpanKind.FENCED_CODE, SpanKind.DISPLAY_MATH, SpanKind.BLOCK_HTML)


@dataclass(frozen=True)
class ProtectedSpan:
    """Raw content stashed away while the rest of the document is processed.

    Attributes:
        kind: What the span holds.
        raw: Original source text (or finished markup for ``MARKUP`` spans).
        language: Info-string language for fenced code blocks.
    """

    kind: SpanKind
    raw: str
    language: str = ""


# Delimiters that surrounded a span in the source, for `ParseContext.expand`.
_SOURCE_DELIMITERS = {
    SpanKind.INLINE_CODE: "`",
    SpanKind.DISPLAY_MATH: "$$",
    SpanKind.INLINE_MATH: "$",
}


@dataclass
class ParseContext:
    """Per-call storage for protected spans.

    Each `parse()` call builds its own context, so no state is shared between
    calls.
    """

    spans: dict[SpanKind, list[ProtectedSpan]] = field(
        default_factory=lambda: {kind: [] for kind in SpanKind}
    )

    def protect(self, kind: SpanKind, raw: str, language: str = "") -> str:
        """Store a span and return the placeholder token that stands in for it."""
        bucket = self.spans[kind]
        bucket.append(ProtectedSpan(kind=kind, raw=raw, language=language))
        return f"{SENTINEL}{kind.value}{len(bucket) - 1}{SENTINEL}"

    def lookup(self, tag: str, index: int) -> ProtectedSpan | None:
        try:
            bucket = self.spans[SpanKind(tag)]
        except ValueError:
            return None
        if index >= len(bucket):
            return None
        return bucket[index]

    def expand(self, text: str) -> str:
        """Replace placeholder tokens in `text` with the escaped source they stand for.

        Used where restored HTML would be wrong, such as inside attribute
        values. Tokens nested in a span's source (an escaped dollar inside
        math) are expanded too.

        Examples:
            ctx.expand("img_\\x00MATHI0\\x00.png")  # "img_$1$.png"
        """
        for _ in range(len(SpanKind)):
            expanded = PLACEHOLDER_PATTERN.sub(self._source_for, text)
            if expanded == text:
                break
            text = expanded
        return text

    def _source_for(self, match: re.Match) -> str:
        span = self.lookup(match.group(1), int(match.group(2)))
        if span is None:
            return ""
        if span.kind is SpanKind.ESCAPED_DOLLAR:
            return "$"
        delimiter = _SOURCE_DELIMITERS.get(span.kind, "")
        return escape_html(f"{delimiter}{span.raw}{delimiter}")

    @property
    def span_count(self) -> int:
        return sum(len(bucket) for bucket in self.spans.values())


@dataclass(frozen=True)
class ParseOptions:
    """Caller-supplied knobs for a single render.

    Attributes:
        resolve_image_path: Maps an image source as written to a loadable
            path. Identity when omitted.
        diagram_language: Fence language rendered as a diagram block.
        open_links_in_new_tab: Whether links open in a new browsing context.
        lazy_images: Whether images are marked for lazy loading.
    """

    resolve_image_path: Callable[[str], str] | None = None
    diagram_language: str = DEFAULT_DIAGRAM_LANGUAGE
    open_links_in_new_tab: bool = True
    lazy_images: bool = True


class ListType(Enum):
    """HTML list element emitted for a run of list items."""

    ORDERED = "ol"
    UNORDERED = "ul"


@dataclass(frozen=True)
class ListItem:
    """A single scanned list line.

    Attributes:
        indent: Column width of the leading whitespace.
        list_type: Ordered or unordered.
        content: Item text, already HTML-escaped.
        checked: Checkbox state for task items, None for plain items.
    """

    indent: int
    list_type: ListType
    content: str
    checked: bool | None = None


@dataclass
class ListLevel:
    """One open list on the nesting stack."""

    indent: int
    list_type: ListType
    item_open: bool = False
