"""Filesystem access for md-preview: locating, reading, and writing documents."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from .constants import MARKDOWN_EXTENSIONS
from .exceptions import FileTooLargeError, RenderError, UnsafePathError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_ENV_VAR = "MD_PREVIEW_MAX_FILE_SIZE"


def effective_max_file_size(configured: int) -> int:
    """Return the size limit for a render.

    `MD_PREVIEW_MAX_FILE_SIZE`, when set, takes precedence over the
    configured value.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        effective_max_file_size(PreviewConfig().max_file_size)
    """
    raw = os.environ.get(MAX_FILE_SIZE_ENV_VAR, "").strip()
    if not raw:
        return configured
    if not (raw.isascii() and raw.isdigit()) or int(raw) == 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw!r}.")
    return int(raw)


def resolve_source(raw_path: str, base_dir: Path) -> Path:
    """Resolve the Markdown document a user asked to render.

    Only regular Markdown files under `base_dir` (the workspace root) are
    accepted, and no component of the given path may be a symlink.

    Returns:
        Path: Absolute path to the document.

    Raises:
        UnsafePathError: If any of those conditions does not hold, or the
            file does not exist.

    Examples:
        resolve_source("docs/notes.md", Path.cwd().resolve())
    """
    path = Path(raw_path).expanduser()

    if path.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise UnsafePathError(
            f"{path} is not a Markdown file.\n"
            f"Supported extensions are: {', '.join(MARKDOWN_EXTENSIONS)}"
        )
    if any(part.is_symlink() for part in (path, *path.parents)):
        raise UnsafePathError(f"Symlinks are not supported for security reasons: {path}")
    if not path.exists():
        raise UnsafePathError(f"{path} does not exist.")

    resolved = path.resolve()
    if not resolved.is_relative_to(base_dir):
        raise UnsafePathError(f"{resolved} is outside of the working directory {base_dir}.")
    if not resolved.is_file():
        raise UnsafePathError(f"{resolved} is not a regular file.")
    return resolved


def read_markdown(filepath: Path, max_size: int) -> str:
    """Read a document as UTF-8 after checking its type and size.

    The check uses `lstat`, so a path swapped for a symlink after
    `resolve_source` is still refused.

    Raises:
        UnsafePathError: If the path is not a regular file.
        FileTooLargeError: If the file is larger than `max_size` bytes.
        RenderError: If the content is not valid UTF-8.
        OSError: If the file cannot be accessed.
    """
    info = filepath.lstat()
    if not stat.S_ISREG(info.st_mode):
        raise UnsafePathError(f"{filepath} is not a regular file.")
    if info.st_size > max_size:
        raise FileTooLargeError(filepath, max_size)

    try:
        content = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError as error:
        raise RenderError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error

    logger.debug("Read %d characters from %s", len(content), filepath)
    return content


def write_output(filepath: Path, content: str):
    """Write rendered output atomically.

    Content goes to a temporary file in the destination directory, which then
    replaces the target with `os.replace`.

    Raises:
        IOError: If the destination is a symlink or cannot be written.

    Examples:
        write_output(Path("README.html"), "<h1>Title</h1>\\n")
    """
    if filepath.is_symlink():
        raise IOError(f"Refusing to write through a symlink: {filepath}")

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", delete=False, dir=filepath.parent, suffix=".tmp"
        ) as tmp_file:
            temp_path = Path(tmp_file.name)
            tmp_file.write(content)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())

        os.chmod(temp_path, 0o644)
        os.replace(temp_path, filepath)
        logger.info("Wrote %d characters to %s", len(content), filepath)
    except OSError as error:
        raise IOError(f"Error writing {filepath}: {error}") from error
    finally:
        if temp_path is not None:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                pass
