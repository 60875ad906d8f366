"""
Renders a Markdown file to HTML.
Prints the fragment (or a standalone page) to stdout, or writes it to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from .config import ConfigError, build_config
from .document import RenderFileError, render_file
from .exceptions import UnsafePathError
from .filesystem import resolve_source, write_output

__all__ = ["cli"]

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@click.command()
@click.version_option(package_name="md-preview")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write HTML to this file instead of stdout",
)
@click.option("--standalone/--fragment", default=None, help="Emit a full HTML document")
@click.option("--title", help="Document title for standalone output")
@click.option("--stylesheet", help="Stylesheet URL linked from standalone output")
@click.option("--asset-base", help="Base URL under which workspace images are served")
@click.option("--diagram-language", help="Fence language rendered as a diagram block")
@click.option("--new-tab/--same-tab", "open_links_in_new_tab", default=None, help="Link target")
@click.option("-v", "--verbose", is_flag=True, help="Log debugging information to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    output: str | None = None,
    standalone: bool | None = None,
    title: str | None = None,
    stylesheet: str | None = None,
    asset_base: str | None = None,
    diagram_language: str | None = None,
    open_links_in_new_tab: bool | None = None,
    verbose: bool = False,
):
    """
    Entry point for rendering a Markdown file to HTML.

    Args:
        filepath: Path to the Markdown file to render.
        output: Destination file; stdout when omitted.
        standalone: Override for wrapping the fragment in a full document.
        title: Title for standalone output; defaults to the first heading.
        stylesheet: Stylesheet URL for standalone output.
        asset_base: Base URL prefixed to resolved workspace image paths.
        diagram_language: Fence language rendered as a diagram block.
        open_links_in_new_tab: Override for link targets.
        verbose: Enable debug logging.

    Raises:
        click.BadParameter: If the path is unsafe or configuration values are
            invalid.
        click.ClickException: If rendering or writing fails.

    Examples:
        md-preview notes.md --standalone -o notes.html
    """
    configure_logging(verbose)

    base_dir = Path.cwd().resolve()
    try:
        source = resolve_source(filepath, base_dir)
    except UnsafePathError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(
            source.parent,
            standalone=standalone,
            stylesheet=stylesheet,
            asset_base=asset_base,
            diagram_language=diagram_language,
            open_links_in_new_tab=open_links_in_new_tab,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    try:
        html = render_file(source, config, base_dir=base_dir, title=title)
    except RenderFileError as error:
        raise click.ClickException(str(error)) from error

    if output is None:
        click.echo(html, nl=not html.endswith("\n"))
        return

    destination = Path(output).expanduser().resolve()
    if destination == source:
        raise click.BadParameter("Output file must differ from the input file.")
    try:
        write_output(destination, html if html.endswith("\n") else f"{html}\n")
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
