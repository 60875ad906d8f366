"""Rendering Markdown files and exporting standalone HTML documents."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .config import PreviewConfig, build_parse_options, validate_config
from .escaping import escape_html
from .filesystem import effective_max_file_size, read_markdown
from .parser import parse
from .pathutils import make_image_resolver

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r"^#{1,6}[ \t]+(\S.*)$")

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
{stylesheet}</head>
<body>
<article class="markdown-body">
{body}
</article>
</body>
</html>
"""


class RenderFileError(Exception):
    """Raised when rendering a Markdown file fails."""


def extract_title(markdown: str, fallback: str = "Untitled") -> str:
    """Return the text of the first ATX heading, or `fallback`.

    Headings inside fenced code blocks are skipped.

    Examples:
        extract_title("intro\\n\\n## Usage ##\\n")  # "Usage"
        extract_title("no headings", "notes")  # "notes"
    """
    in_fence = False
    for line in markdown.splitlines():
        if line.lstrip(" ").startswith("```"):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = TITLE_PATTERN.match(line)
        if match:
            return _strip_closing_sequence(match.group(1))
    return fallback


def _strip_closing_sequence(text: str) -> str:
    # "Usage ##" -> "Usage"; a "#" glued to the text ("C#") is kept.
    text = text.rstrip(" \t")
    stripped = text.rstrip("#")
    if stripped != text and stripped[-1:] in (" ", "\t"):
        text = stripped.rstrip(" \t")
    return text


def wrap_document(body: str, title: str, stylesheet: str | None = None) -> str:
    """Wrap an HTML fragment in a standalone HTML5 page.

    Examples:
        wrap_document("<p>hi</p>", "Notes", stylesheet="style.css")
    """
    stylesheet_tag = (
        f'<link rel="stylesheet" href="{escape_html(stylesheet)}">\n' if stylesheet else ""
    )
    return DOCUMENT_TEMPLATE.format(
        title=escape_html(title), stylesheet=stylesheet_tag, body=body
    )


def render_file(
    filepath: Path,
    config: PreviewConfig | None = None,
    base_dir: Path | None = None,
    title: str | None = None,
) -> str:
    """Render a Markdown file to HTML.

    Images are resolved relative to the file's location inside `base_dir`
    (the workspace root). When the configuration asks for a standalone page,
    the fragment is wrapped with `wrap_document`.

    Args:
        filepath: Path to the Markdown file.
        config: Rendering configuration; defaults to `PreviewConfig()`.
        base_dir: Workspace root used to build virtual asset paths; defaults to
            the file's parent directory.
        title: Title for standalone output; defaults to the first heading,
            then the file name.

    Returns:
        str: Rendered HTML.

    Raises:
        RenderFileError: If the configuration is invalid or the file is too
            large, unreadable, or not valid UTF-8.

    Examples:
        html = render_file(Path("docs/notes.md"), PreviewConfig(standalone=True))
    """
    config = config or PreviewConfig()
    try:
        validate_config(config)
        content = read_markdown(filepath, effective_max_file_size(config.max_file_size))
    except (ValueError, OSError) as error:
        raise RenderFileError(str(error)) from error

    root = base_dir or filepath.parent
    try:
        document_path = "/" + filepath.relative_to(root).as_posix()
    except ValueError:
        document_path = "/" + filepath.name

    resolver = make_image_resolver(document_path, config.asset_base)
    body = parse(content, build_parse_options(config, resolver))

    logger.debug("Rendered %s (standalone=%s)", filepath, config.standalone)
    if not config.standalone:
        return body
    return wrap_document(body, title or extract_title(content, filepath.stem), config.stylesheet)
