"""Path resolution for assets referenced from Markdown documents.

Paths are virtual, forward-slash paths rooted at the workspace (for example
``/docs/notes.md``), independent of the host filesystem.
"""

from __future__ import annotations

from collections.abc import Callable

from .constants import EXTERNAL_URL_PATTERN, IMAGE_EXTENSIONS


def is_image_file(name: str) -> bool:
    """Check whether a file name has an image extension.

    Examples:
        is_image_file("photo.PNG")  # True
        is_image_file("notes.md")  # False
    """
    if not name or "." not in name:
        return False
    return name.rsplit(".", 1)[-1].lower() in IMAGE_EXTENSIONS


def is_external_url(src: str) -> bool:
    """True for ``http(s)://`` and ``data:`` sources, which are never rewritten."""
    return bool(EXTERNAL_URL_PATTERN.match(src))


def _dirname(file_path: str) -> str:
    index = file_path.rfind("/")
    return file_path[:index] if index > 0 else ""


def normalize_path(path: str) -> str:
    """Resolve ``.`` and ``..`` segments and collapse repeated slashes.

    Returns an absolute virtual path, or ``""`` for the workspace root.

    Examples:
        normalize_path("/docs/../images//a.png")  # "/images/a.png"
        normalize_path("/..")  # ""
    """
    resolved: list[str] = []
    for part in path.replace("\\", "/").split("/"):
        if part in (".", ""):
            continue
        if part == "..":
            if resolved:
                resolved.pop()
            continue
        resolved.append(part)
    return "/" + "/".join(resolved) if resolved else ""


def resolve_relative_asset_path(current_md_path: str, target_path: str) -> str:
    """Resolve an asset path as written in a document against that document.

    Args:
        current_md_path: Absolute virtual path of the active Markdown file.
        target_path: Path as written in the Markdown source.

    Returns:
        str: Absolute virtual path of the asset.

    Examples:
        resolve_relative_asset_path("/docs/notes.md", "../images/photo.png")  # "/images/photo.png"
        resolve_relative_asset_path("/docs/notes.md", "/logo.svg")  # "/logo.svg"
    """
    if not target_path:
        return target_path

    if target_path.startswith("/"):
        return normalize_path(target_path)

    return normalize_path(f"{_dirname(current_md_path or '/')}/{target_path}")


def compute_relative_path(from_file_path: str, to_file_path: str) -> str:
    """Compute the relative path from one file's directory to another file.

    Examples:
        compute_relative_path("/docs/notes.md", "/images/photo.png")  # "../images/photo.png"
        compute_relative_path("/docs/notes.md", "/docs/a.png")  # "./a.png"
    """
    if not from_file_path or not to_file_path:
        return to_file_path or ""

    from_dir = [part for part in _dirname(from_file_path).split("/") if part]
    to_parts = [part for part in to_file_path.split("/") if part]

    # The last part of `to_parts` is the file name and never counts as shared.
    common = 0
    while (
        common < len(from_dir)
        and common < len(to_parts) - 1
        and from_dir[common] == to_parts[common]
    ):
        common += 1

    ups = len(from_dir) - common
    remaining = to_parts[common:]

    if ups == 0 and remaining:
        return "./" + "/".join(remaining)

    return "/".join([".."] * ups + remaining)


def make_image_resolver(
    document_path: str, asset_base: str | None = None
) -> Callable[[str], str]:
    """Build the image-path resolver handed to `parse`.

    External URLs always pass through. Without an asset base the source is
    returned unchanged; with one, the source is resolved against the document
    and served from under the base URL.

    Examples:
        resolve = make_image_resolver("/docs/notes.md", "https://cdn.example.com/ws")
        resolve("img/a.png")  # "https://cdn.example.com/ws/docs/img/a.png"
    """
    base = asset_base.rstrip("/") if asset_base else None

    def resolve(src: str) -> str:
        if not src or is_external_url(src) or base is None:
            return src
        return f"{base}{resolve_relative_asset_path(document_path, src)}"

    return resolve
