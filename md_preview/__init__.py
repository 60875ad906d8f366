"""
md-preview: Markdown to HTML rendering for live previews.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    md-preview notes.md --standalone -o notes.html

Library Usage:
    from md_preview import ParseOptions, parse

    html = parse("# Title\\n\\nSome *text*.")
    html = parse("![logo](logo.png)", ParseOptions(resolve_image_path=lambda p: "/assets/" + p))

The output is not sanitized: raw HTML written by the author passes through
and must be cleaned before it is inserted into a live DOM.
"""

from .config import ConfigError, PreviewConfig, build_config, build_parse_options
from .document import RenderFileError, extract_title, render_file, wrap_document
from .exceptions import FileTooLargeError, RenderError, UnsafePathError
from .models import ParseOptions
from .parser import parse
from .pathutils import (
    compute_relative_path,
    is_image_file,
    make_image_resolver,
    resolve_relative_asset_path,
)

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "parse",
    "render_file",
    "wrap_document",
    "extract_title",
    # Data models
    "ParseOptions",
    "PreviewConfig",
    # Utilities
    "build_config",
    "build_parse_options",
    "compute_relative_path",
    "is_image_file",
    "make_image_resolver",
    "resolve_relative_asset_path",
    # Exceptions
    "ConfigError",
    "FileTooLargeError",
    "RenderError",
    "RenderFileError",
    "UnsafePathError",
    # Version
    "__version__",
]
