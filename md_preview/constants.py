"""Constants used across the md-preview package."""

from __future__ import annotations

import re

# Placeholder tokens look like "\x00FENCE0\x00". Kind tags are upper-case
# letters only so emphasis rules (`*`, `_`) can never match inside a token.
SENTINEL = "\x00"
SENTINEL_REPLACEMENT = "\ufffd"
PLACEHOLDER_PATTERN = re.compile(r"\x00([A-Z]+)(\d+)\x00")

# Extraction patterns, applied in this order
FENCED_CODE_PATTERN = re.compile(
    r"^ {0,3}```[ \t]*(?P<lang>[\w+#.-]*)[^\n]*\n(?P<code>.*?)(?:^ {0,3}```[ \t]*$|\Z)",
    re.MULTILINE | re.DOTALL,
)
INLINE_CODE_PATTERN = re.compile(r"`([^`\n]+)`")
ESCAPED_DOLLAR_PATTERN = re.compile(r"\\\$")
DISPLAY_MATH_PATTERN = re.compile(r"\$\$(.+?)\$\$", re.DOTALL)
INLINE_MATH_PATTERN = re.compile(r"\$([^\n$]+)\$")

BLOCK_HTML_TAGS = (
    "address",
    "article",
    "aside",
    "blockquote",
    "center",
    "details",
    "dialog",
    "dd",
    "div",
    "dl",
    "dt",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "summary",
    "table",
    "tbody",
    "td",
    "tfoot",
    "th",
    "thead",
    "tr",
    "ul",
)
# Never passed through as raw HTML; escaped like ordinary prose.
UNSAFE_HTML_TAGS = frozenset({"script", "iframe", "object", "embed"})
UNSAFE_TAG_PATTERN = re.compile(
    rf"</?(?:{'|'.join(sorted(UNSAFE_HTML_TAGS))})\b[^<>]*>?", re.IGNORECASE
)

BLOCK_HTML_PATTERN = re.compile(
    rf"^ {{0,3}}</?(?:{'|'.join(BLOCK_HTML_TAGS)})(?=[\s/>]|$)[^\n]*(?:\n(?![ \t]*$)[^\n]*)*",
    re.MULTILINE | re.IGNORECASE,
)
_ATTRIBUTE = r"""\s+[A-Za-z_:][\w.:-]*(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'=<>`]+))?"""
INLINE_HTML_PATTERN = re.compile(
    rf"<!--.*?-->|<(?P<name>[A-Za-z][A-Za-z0-9-]*)(?:{_ATTRIBUTE})*\s*/?>|</(?P<close>[A-Za-z][A-Za-z0-9-]*)\s*>",
    re.DOTALL,
)

# Block-level tags that keep a text run from being wrapped in <p>
PARAGRAPH_EXEMPT_PATTERN = re.compile(
    r"^<(?:h[1-6]|ul|ol|li|blockquote|pre|table|thead|tbody|tr|th|td|hr|div|p)[\s>]",
    re.IGNORECASE,
)

DEFAULT_DIAGRAM_LANGUAGE = "mermaid"
# Deeper `>` markers are left as literal text.
MAX_BLOCKQUOTE_DEPTH = 32
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg")
EXTERNAL_URL_PATTERN = re.compile(r"^(?:https?://|data:)", re.IGNORECASE)
