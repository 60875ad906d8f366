from __future__ import annotations

import time

import pytest

from md_preview import ParseOptions, parse


def test_empty_input_returns_empty_string():
    assert parse("") == ""


@pytest.mark.parametrize(
    "markdown, expected",
    [
        ("# Title", "<h1>Title</h1>"),
        ("## Section", "<h2>Section</h2>"),
        ("###### Six", "<h6>Six</h6>"),
        ("####### Seven", "<p>####### Seven</p>"),
        ("#NoSpace", "<p>#NoSpace</p>"),
    ],
)
def test_headings(markdown: str, expected: str):
    assert parse(markdown) == expected


def test_paragraphs_are_split_on_blank_lines():
    assert parse("first line\nsecond line\n\nnext") == "<p>first line\nsecond line</p>\n<p>next</p>"


def test_crlf_line_endings_are_normalized():
    assert parse("a\r\n\r\nb") == "<p>a</p>\n<p>b</p>"


def test_fenced_code_with_language():
    assert parse("```js\nconst a = 1;\n```") == (
        '<pre><code class="language-js">const a = 1;</code></pre>'
    )


def test_fenced_code_is_escaped_and_not_processed():
    html = parse("```\n<b>&</b>\n# not a heading\n*x*\n```")

    assert html == "<pre><code>&lt;b&gt;&amp;&lt;/b&gt;\n# not a heading\n*x*</code></pre>"


def test_fenced_code_trims_trailing_blank_lines():
    assert parse("```\ncode\n\n\n```") == "<pre><code>code</code></pre>"


def test_unterminated_fence_consumes_rest_of_document():
    html = parse("```python\nprint(1)\n\n# still code")

    assert html == '<pre><code class="language-python">print(1)\n\n# still code</code></pre>'


def test_diagram_fence_is_emitted_raw():
    html = parse("```mermaid\ngraph TD;\nA-->B;\n```")

    assert html == '<div class="mermaid">graph TD;\nA-->B;</div>'


def test_diagram_language_is_configurable():
    options = ParseOptions(diagram_language="graphviz")

    assert parse("```graphviz\ndigraph {}\n```", options) == '<div class="graphviz">digraph {}</div>'
    assert parse("```mermaid\nx\n```", options) == '<pre><code class="language-mermaid">x</code></pre>'


def test_fenced_code_between_paragraphs():
    html = parse("before\n```\ncode\n```\nafter")

    assert html == "<p>before</p>\n<pre><code>code</code></pre>\n<p>after</p>"


def test_inline_code_is_escaped():
    assert parse("Use `a < b` here") == "<p>Use <code>a &lt; b</code> here</p>"


def test_inline_code_is_not_emphasized():
    assert parse("`*x*` and `_y_`") == "<p><code>*x*</code> and <code>_y_</code></p>"


def test_plain_text_html_characters_are_escaped():
    assert parse('say "hi" & <wave') == "<p>say &quot;hi&quot; &amp; &lt;wave</p>"


def test_script_tags_are_never_passed_through():
    html = parse("<script>alert(1)</script>")

    assert html == "<p>&lt;script&gt;alert(1)&lt;/script&gt;</p>"
    assert "<script" not in html


@pytest.mark.parametrize(
    "markdown, expected",
    [
        (
            "<div>\n<script>alert(1)</script>\n</div>",
            "<div>\n&lt;script&gt;alert(1)&lt;/script&gt;\n</div>",
        ),
        (
            "<p><iframe src=x></iframe></p>",
            "<p>&lt;iframe src=x&gt;&lt;/iframe&gt;</p>",
        ),
        (
            '<section>\n<OBJECT data="x"></object><embed src="y">\n</section>',
            "<section>\n&lt;OBJECT data=&quot;x&quot;&gt;&lt;/object&gt;"
            "&lt;embed src=&quot;y&quot;&gt;\n</section>",
        ),
    ],
)
def test_script_tags_inside_block_html_are_escaped(markdown: str, expected: str):
    assert parse(markdown) == expected


def test_inline_raw_html_passes_through():
    assert parse("Press <kbd>Ctrl</kbd> now") == "<p>Press <kbd>Ctrl</kbd> now</p>"


def test_inline_html_comment_passes_through():
    assert parse("text <!-- note --> more") == "<p>text <!-- note --> more</p>"


def test_block_raw_html_is_not_processed():
    markdown = '<div class="note">\n*not emphasis*\n</div>'

    assert parse(markdown) == markdown


def test_block_raw_html_ends_at_blank_line():
    html = parse("<details>\n<summary>More</summary>\n</details>\n\nText")

    assert html == "<details>\n<summary>More</summary>\n</details>\n<p>Text</p>"


def test_inline_code_inside_block_html_is_restored():
    assert parse("<div>\n`a<b`\n</div>") == "<div>\n<code>a&lt;b</code>\n</div>"


def test_blockquote():
    assert parse("> quoted\n> text") == "<blockquote><p>quoted\ntext</p></blockquote>"


def test_blockquote_keeps_nested_structure():
    assert parse("> - a\n> - b") == "<blockquote><ul><li>a</li><li>b</li></ul></blockquote>"


def test_blockquote_with_blank_quoted_line():
    html = parse("> one\n>\n> two")

    assert html == "<blockquote><p>one</p>\n<p>two</p></blockquote>"


def test_horizontal_rules():
    assert parse("a\n\n---\n\nb") == "<p>a</p>\n<hr>\n<p>b</p>"
    assert parse("***") == "<hr>"
    assert parse("___") == "<hr>"


def test_table_with_alignment():
    html = parse("| A | B |\n|:--|--:|\n| 1 | 2 |")

    assert html == (
        '<table><thead><tr><th style="text-align:left">A</th>'
        '<th style="text-align:right">B</th></tr></thead>'
        '<tbody><tr><td style="text-align:left">1</td>'
        '<td style="text-align:right">2</td></tr></tbody></table>'
    )


def test_table_requires_valid_separator():
    html = parse("|A|B|\n|no|\n|1|2|")

    assert "<table" not in html
    assert html == "<p>|A|B|\n|no|\n|1|2|</p>"


def test_table_ends_at_first_non_row_line():
    html = parse("|A|\n|---|\n|1|\ntext")

    assert html == (
        "<table><thead><tr><th>A</th></tr></thead>"
        "<tbody><tr><td>1</td></tr></tbody></table>\ntext"
    )


def test_nested_unordered_list():
    html = parse("- a\n  - b\n- c")

    assert html == "<ul><li>a<ul><li>b</li></ul></li><li>c</li></ul>"
    assert html.startswith("<ul>") and html.endswith("</ul>")
    assert html.count("<ul>") == html.count("</ul>") == 2


def test_ordered_list():
    assert parse("1. one\n2. two") == "<ol><li>one</li><li>two</li></ol>"


def test_list_type_change_at_same_indent():
    assert parse("- a\n1. b") == "<ul><li>a</li></ul><ol><li>b</li></ol>"


def test_list_dedent_to_intermediate_level():
    html = parse("- a\n    - b\n  - c\n- d")

    assert html == "<ul><li>a<ul><li>b</li></ul><ul><li>c</li></ul></li><li>d</li></ul>"


def test_task_list():
    html = parse("- [x] done\n- [ ] todo")

    assert html == (
        '<ul><li><input type="checkbox" checked disabled> done</li>'
        '<li><input type="checkbox" disabled> todo</li></ul>'
    )


def test_list_followed_by_paragraph():
    assert parse("- *a*\n\ntext") == "<ul><li><em>a</em></li></ul>\n<p>text</p>"


def test_link_opens_in_new_tab():
    assert parse("[site](https://example.com)") == (
        '<p><a href="https://example.com" target="_blank" rel="noopener noreferrer">site</a></p>'
    )


def test_link_in_same_tab_when_configured():
    options = ParseOptions(open_links_in_new_tab=False)

    assert parse("[t](x)", options) == '<p><a href="x">t</a></p>'


def test_link_href_with_underscores_is_not_emphasized():
    html = parse("[a_b](https://example.com/some_path_here)")

    assert 'href="https://example.com/some_path_here"' in html
    assert ">a_b</a>" in html


def test_link_href_keeps_math_and_code_as_written():
    assert parse("[x](http://a/$b$)") == (
        '<p><a href="http://a/$b$" target="_blank" rel="noopener noreferrer">x</a></p>'
    )

    html = parse('[x](a`"`b)', ParseOptions(open_links_in_new_tab=False))

    assert html == '<p><a href="a`&quot;`b">x</a></p>'


def test_link_href_with_escaped_dollar():
    assert parse("[x](a\\$b)", ParseOptions(open_links_in_new_tab=False)) == (
        '<p><a href="a$b">x</a></p>'
    )


def test_image_uses_resolver():
    options = ParseOptions(resolve_image_path=lambda path: "RESOLVED:" + path)

    html = parse("![alt](foo.png)", options)

    assert 'src="RESOLVED:foo.png"' in html
    assert html == '<p><img src="RESOLVED:foo.png" alt="alt" loading="lazy"></p>'


def test_image_without_resolver_passes_path_through():
    assert parse("![a](my_image_file.png)") == (
        '<p><img src="my_image_file.png" alt="a" loading="lazy"></p>'
    )


def test_image_resolver_receives_unescaped_path():
    seen: list[str] = []

    def resolve(path: str) -> str:
        seen.append(path)
        return path

    html = parse("![a](a&b.png)", ParseOptions(resolve_image_path=resolve))

    assert seen == ["a&b.png"]
    assert 'src="a&amp;b.png"' in html


def test_image_src_cannot_break_out_of_attribute():
    html = parse('![a](x" onerror="y)')

    assert 'onerror="' not in html
    assert 'src="x&quot; onerror=&quot;y"' in html


def test_image_resolver_receives_source_as_written():
    seen: list[str] = []

    def resolve(path: str) -> str:
        seen.append(path)
        return "/assets/" + path

    html = parse("![$x$](img_$1$.png)", ParseOptions(resolve_image_path=resolve))

    assert seen == ["img_$1$.png"]
    assert html == '<p><img src="/assets/img_$1$.png" alt="$x$" loading="lazy"></p>'


def test_image_without_lazy_loading():
    html = parse("![a](b.png)", ParseOptions(lazy_images=False))

    assert html == '<p><img src="b.png" alt="a"></p>'


def test_linked_image():
    html = parse("[![logo](logo.png)](https://example.com)")

    assert html.startswith('<p><a href="https://example.com"')
    assert '<img src="logo.png" alt="logo" loading="lazy"></a>' in html


def test_emphasis_variants():
    html = parse("***x*** **b** *i* __u__ _e_ ~~s~~")

    assert html == (
        "<p><strong><em>x</em></strong> <strong>b</strong> <em>i</em> "
        "<strong>u</strong> <em>e</em> <del>s</del></p>"
    )


def test_mixed_emphasis_markers_are_not_paired():
    assert parse("*word_") == "<p>*word_</p>"


def test_unterminated_emphasis_is_literal():
    assert parse("**bold") == "<p>**bold</p>"


@pytest.mark.parametrize("markdown", ["a  \nb", "a\\\nb"])
def test_hard_line_breaks(markdown: str):
    assert parse(markdown) == "<p>a<br>\nb</p>"


def test_inline_math():
    assert parse("$x^2$") == '<p><span class="math-inline">\\(x^2\\)</span></p>'


def test_display_math():
    assert parse("$$x^2$$") == '<div class="math-display">\\[x^2\\]</div>'


def test_multiline_display_math():
    assert parse("$$\na+b\n$$") == '<div class="math-display">\\[\na+b\n\\]</div>'


def test_escaped_dollar_is_literal():
    html = parse("\\$5")

    assert html == "<p>$5</p>"
    assert "math" not in html


def test_escaped_dollar_inside_math_stays_escaped():
    assert parse("$$\\$x$$") == '<div class="math-display">\\[\\$x\\]</div>'


def test_math_source_is_escaped_but_not_emphasized():
    html = parse("$a_1 < b_2$")

    assert '<span class="math-inline">\\(a_1 &lt; b_2\\)</span>' in html
    assert "<em>" not in html


def test_inline_math_does_not_span_lines():
    assert parse("$a\nb$") == "<p>$a\nb$</p>"


def test_inline_code_protects_dollars():
    assert parse("`$x$`") == "<p><code>$x$</code></p>"


def test_display_math_inside_a_paragraph_splits_it():
    assert parse("text\n$$\nx\n$$\nmore") == (
        '<p>text</p>\n<div class="math-display">\\[\nx\n\\]</div>\n<p>more</p>'
    )


def test_inline_raw_html_at_start_of_paragraph_is_wrapped():
    assert parse("<span>hi</span> there") == "<p><span>hi</span> there</p>"


def test_sentinel_characters_in_input_cannot_forge_placeholders():
    html = parse("a\x00CODE0\x00b")

    assert "\x00" not in html
    assert html == "<p>a\ufffdCODE0\ufffdb</p>"


@pytest.mark.parametrize(
    "markdown",
    [
        "*" * 1000,
        "[" * 500 + "](",
        "|" * 300,
        "<a" + " b" * 500,
        "```" * 200,
        "$" * 501,
        "> " * 200,
        "  " * 50 + "- x\n" * 50,
    ],
)
def test_degenerate_inputs_do_not_raise(markdown: str):
    assert isinstance(parse(markdown), str)


@pytest.mark.parametrize(
    "markdown, expected",
    [
        ("a" + " " * 40000 + "b", "<p>a" + " " * 40000 + "b</p>"),
        ("a" + " " * 40000 + "\nb", "<p>a<br>\nb</p>"),
        ("# a" + " " * 40000 + "b", "<h1>a" + " " * 40000 + "b</h1>"),
        ("# a" + "\t" * 40000, "<h1>a</h1>"),
    ],
)
def test_long_whitespace_runs_render_in_linear_time(markdown: str, expected: str):
    started = time.perf_counter()
    html = parse(markdown)
    elapsed = time.perf_counter() - started

    assert html == expected
    assert elapsed < 2.0


def test_deeply_nested_blockquotes_do_not_recurse_forever():
    html = parse("> " * 2000 + "deep")

    assert html.startswith("<blockquote>")
    assert html.count("<blockquote>") == 32
