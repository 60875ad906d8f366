"""Block-level Markdown transforms.

Each transform takes the whole working string (prose already HTML-escaped,
protected spans replaced by placeholder tokens) and returns it with one kind
of block structure converted to HTML. Order matters: later transforms assume
earlier ones already consumed their lines.
"""

from __future__ import annotations

import re

from .constants import MAX_BLOCKQUOTE_DEPTH, PARAGRAPH_EXEMPT_PATTERN, SENTINEL
from .models import ListItem, ListLevel, ListType, SpanKind

BLOCKQUOTE_LINE_PATTERN = re.compile(r"^&gt;[ \t]?(.*)$")
TABLE_ROW_PATTERN = re.compile(r"^\|(.+)\|$")
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|(?:[ \t]*:?-+:?[ \t]*\|)+$")
HORIZONTAL_RULE_PATTERN = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE)
HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]+(\S.*)$", re.MULTILINE)
CHECKBOX_ITEM_PATTERN = re.compile(r"^([ \t]*)[-*+][ \t]+\[([ xX])\][ \t]+(.*)$")
UNORDERED_ITEM_PATTERN = re.compile(r"^([ \t]*)[-*+][ \t]+(.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^([ \t]*)\d+\.[ \t]+(.*)$")
PARAGRAPH_SPLIT_PATTERN = re.compile(r"\n[ \t]*\n")
BLOCK_PLACEHOLDER_PATTERN = re.compile(
    rf"({SENTINEL}(?:{'|'.join(kind.value for kind in SpanKind if kind.is_block)})\d+{SENTINEL})"
)


def apply_block_transforms(text: str, depth: int = 0) -> str:
    """Run every block transform in order.

    `depth` counts enclosing blockquotes; past `MAX_BLOCKQUOTE_DEPTH` quote
    markers are no longer recognized.
    """
    if depth < MAX_BLOCKQUOTE_DEPTH:
        text = parse_blockquotes(text, depth)
    text = parse_tables(text)
    text = parse_horizontal_rules(text)
    text = parse_headings(text)
    text = parse_lists(text)
    return parse_paragraphs(text)


def parse_blockquotes(text: str, depth: int = 0) -> str:
    """Collapse runs of ``>``-prefixed lines into ``<blockquote>`` elements.

    The quoted text is run through the full block pipeline, so a single run of
    prose becomes ``<blockquote><p>...</p></blockquote>`` and quoted lists,
    headings, or nested quotes keep their structure.
    """
    result: list[str] = []
    quoted: list[str] = []

    for line in text.split("\n"):
        match = BLOCKQUOTE_LINE_PATTERN.match(line)
        if match:
            quoted.append(match.group(1))
            continue
        if quoted:
            result.append(_render_blockquote(quoted, depth))
            quoted = []
        result.append(line)

    if quoted:
        result.append(_render_blockquote(quoted, depth))

    return "\n".join(result)


def _render_blockquote(lines: list[str], depth: int) -> str:
    inner = apply_block_transforms("\n".join(lines), depth + 1)
    return f"<blockquote>{inner}</blockquote>"


def split_table_row(line: str) -> list[str]:
    """Split a pipe-delimited row into trimmed cells.

    Examples:
        split_table_row("| a | b |")  # ["a", "b"]
    """
    row = line.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|"):
        row = row[:-1]
    return [cell.strip() for cell in row.split("|")]


def parse_table_alignments(line: str) -> list[str]:
    """Derive per-column alignment from a separator row.

    Returns ``"center"``, ``"right"``, ``"left"`` or ``""`` for each column.

    Examples:
        parse_table_alignments("|:--:|--:|:--|---|")  # ["center", "right", "left", ""]
    """
    alignments = []
    for cell in split_table_row(line):
        if cell.startswith(":") and cell.endswith(":") and len(cell) > 1:
            alignments.append("center")
        elif cell.endswith(":"):
            alignments.append("right")
        elif cell.startswith(":"):
            alignments.append("left")
        else:
            alignments.append("")
    return alignments


def is_table_start(header: str, separator: str) -> bool:
    """A header row only starts a table when a valid separator row follows it."""
    return bool(
        TABLE_ROW_PATTERN.match(header.strip())
        and TABLE_SEPARATOR_PATTERN.match(separator.strip())
    )


def _render_cells(tag: str, cells: list[str], alignments: list[str]) -> str:
    rendered = []
    for index, cell in enumerate(cells):
        align = alignments[index] if index < len(alignments) else ""
        style = f' style="text-align:{align}"' if align else ""
        rendered.append(f"<{tag}{style}>{cell}</{tag}>")
    return f"<tr>{''.join(rendered)}</tr>"


def render_table(header: list[str], alignments: list[str], rows: list[list[str]]) -> str:
    body = "".join(_render_cells("td", row, alignments) for row in rows)
    return (
        f"<table><thead>{_render_cells('th', header, alignments)}</thead>"
        f"<tbody>{body}</tbody></table>"
    )


def parse_tables(text: str) -> str:
    """Convert pipe tables to ``<table>`` markup.

    Contiguous pipe-delimited rows after the separator become the body; the
    first line that is not a row ends the table.
    """
    lines = text.split("\n")
    result: list[str] = []
    i = 0

    while i < len(lines):
        if i + 1 < len(lines) and is_table_start(lines[i], lines[i + 1]):
            header = split_table_row(lines[i])
            alignments = parse_table_alignments(lines[i + 1])
            rows = []
            i += 2
            while i < len(lines) and TABLE_ROW_PATTERN.match(lines[i].strip()):
                rows.append(split_table_row(lines[i]))
                i += 1
            result.append(render_table(header, alignments, rows))
        else:
            result.append(lines[i])
            i += 1

    return "\n".join(result)


def parse_horizontal_rules(text: str) -> str:
    return HORIZONTAL_RULE_PATTERN.sub("<hr>", text)


def parse_headings(text: str) -> str:
    """Convert ATX headings (``#`` through ``######``) to ``<h1>``..``<h6>``."""

    def replace(match: re.Match) -> str:
        level = len(match.group(1))
        content = match.group(2).rstrip(" \t")
        return f"<h{level}>{content}</h{level}>"

    return HEADING_PATTERN.sub(replace, text)


def leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns.

    Examples:
        leading_whitespace_columns("    text")  # 4
        leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def match_list_item(line: str) -> ListItem | None:
    """Recognize a task, unordered, or ordered list line.

    Examples:
        match_list_item("  - [x] done")  # ListItem(2, UNORDERED, "done", True)
        match_list_item("plain text")  # None
    """
    match = CHECKBOX_ITEM_PATTERN.match(line)
    if match:
        return ListItem(
            indent=leading_whitespace_columns(match.group(1)),
            list_type=ListType.UNORDERED,
            content=match.group(3),
            checked=match.group(2) in "xX",
        )

    match = UNORDERED_ITEM_PATTERN.match(line)
    if match:
        return ListItem(
            indent=leading_whitespace_columns(match.group(1)),
            list_type=ListType.UNORDERED,
            content=match.group(2),
        )

    match = ORDERED_ITEM_PATTERN.match(line)
    if match:
        return ListItem(
            indent=leading_whitespace_columns(match.group(1)),
            list_type=ListType.ORDERED,
            content=match.group(2),
        )

    return None


def _close_level(level: ListLevel) -> str:
    closing = "</li>" if level.item_open else ""
    return f"{closing}</{level.list_type.value}>"


def render_list(items: list[ListItem]) -> str:
    """Turn a run of scanned list items into nested ``<ul>``/``<ol>`` markup.

    Nesting is derived from indentation alone with an explicit stack of open
    lists. A deeper item opens a new list inside the current ``<li>``; a
    shallower item closes every deeper list; an item at the same indent but of
    a different type closes the current list and opens one of the new type.

    Args:
        items: Consecutive list lines in document order.

    Returns:
        str: Single-line HTML with every opened tag closed.

    Examples:
        render_list([ListItem(0, ListType.UNORDERED, "a"), ListItem(2, ListType.UNORDERED, "b")])
        # "<ul><li>a<ul><li>b</li></ul></li></ul>"
    """
    html: list[str] = []
    stack: list[ListLevel] = []

    for item in items:
        while stack and stack[-1].indent > item.indent:
            html.append(_close_level(stack.pop()))

        if not stack or stack[-1].indent < item.indent:
            stack.append(ListLevel(indent=item.indent, list_type=item.list_type))
            html.append(f"<{item.list_type.value}>")
        elif stack[-1].list_type is not item.list_type:
            html.append(_close_level(stack.pop()))
            stack.append(ListLevel(indent=item.indent, list_type=item.list_type))
            html.append(f"<{item.list_type.value}>")
        elif stack[-1].item_open:
            html.append("</li>")

        if item.checked is None:
            html.append(f"<li>{item.content}")
        else:
            checked_attr = " checked disabled" if item.checked else " disabled"
            html.append(f'<li><input type="checkbox"{checked_attr}> {item.content}')
        stack[-1].item_open = True

    while stack:
        html.append(_close_level(stack.pop()))

    return "".join(html)


def parse_lists(text: str) -> str:
    """Replace each contiguous run of list lines with rendered list markup."""
    result: list[str] = []
    items: list[ListItem] = []

    for line in text.split("\n"):
        item = match_list_item(line)
        if item is not None:
            items.append(item)
            continue
        if items:
            result.append(render_list(items))
            items = []
        result.append(line)

    if items:
        result.append(render_list(items))

    return "\n".join(result)


def parse_paragraphs(text: str) -> str:
    """Wrap blank-line-separated text runs in ``<p>``.

    Runs that already start with a block tag are left unwrapped. Block
    placeholders (fences, display math, block HTML) split the run they sit in,
    so their HTML never ends up inside a ``<p>``.
    """
    blocks = []
    for block in PARAGRAPH_SPLIT_PATTERN.split(text):
        block = block.strip()
        if not block:
            continue
        if PARAGRAPH_EXEMPT_PATTERN.match(block):
            blocks.append(block)
            continue
        for piece in BLOCK_PLACEHOLDER_PATTERN.split(block):
            piece = piece.strip()
            if not piece:
                continue
            if BLOCK_PLACEHOLDER_PATTERN.fullmatch(piece):
                blocks.append(piece)
            else:
                blocks.append(f"<p>{piece}</p>")
    return "\n".join(blocks)
