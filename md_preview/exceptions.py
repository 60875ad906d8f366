"""Package-specific exception types."""

from __future__ import annotations


class RenderError(ValueError):
    """Base class for errors raised around rendering.

    The Markdown engine itself never raises; these errors come from the file,
    path, and configuration layers that feed it.
    """


class UnsafePathError(RenderError):
    """Raised when a path is rejected before it is read.

    Covers missing files, symlinks, paths outside the working directory, and
    files without a Markdown extension.
    """


class FileTooLargeError(RenderError):
    """Raised when a file exceeds the configured maximum size.

    Args:
        filepath: Path of the offending file.
        max_size: Maximum allowed size in bytes.
    """

    def __init__(self, filepath: object, max_size: int):
        self.filepath = filepath
        self.max_size = max_size
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"{self.filepath} exceeds the maximum allowed size of {self.max_size} bytes."
