"""Configuration loading and management."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_DIAGRAM_LANGUAGE, DEFAULT_MAX_FILE_SIZE
from .models import ParseOptions

logger = logging.getLogger(__name__)


@dataclass
class PreviewConfig:
    """Configuration for rendering Markdown previews.

    Attributes:
        diagram_language: Fence language rendered as a diagram block.
        open_links_in_new_tab: Whether links carry ``target="_blank"``.
        lazy_images: Whether images carry ``loading="lazy"``.
        standalone: Wrap the rendered fragment in a full HTML document.
        stylesheet: Stylesheet URL linked from standalone documents.
        asset_base: Base URL under which workspace images are served.
        max_file_size: Maximum file size in bytes that will be rendered.

    Examples:
        PreviewConfig(diagram_language="mermaid", standalone=True)
    """

    # Rendering
    diagram_language: str = DEFAULT_DIAGRAM_LANGUAGE
    open_links_in_new_tab: bool = True
    lazy_images: bool = True

    # Output
    standalone: bool = False
    stylesheet: str | None = None
    asset_base: str | None = None

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`max_file_size` must be a positive integer")
    """


def load_config(search_path: Path) -> PreviewConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.md-preview]`` table from `pyproject.toml` and the
    ``[md-preview]`` or ``[tool.md-preview]`` table from `.md-preview.toml`
    when present. TOML files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        PreviewConfig: Loaded configuration, or defaults when nothing is found.

    Raises:
        ConfigError: If a matching table is not a mapping or contains unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "md-preview")]
        )
        if pyproject_config is not None:
            return pyproject_config

        dotfile_config = _load_from_file(
            current / ".md-preview.toml",
            table_paths=[("md-preview",), ("tool", "md-preview")],
        )
        if dotfile_config is not None:
            return dotfile_config

        parent = current.parent
        if parent == current:
            break
        current = parent

    return PreviewConfig()


_MISSING = object()


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> PreviewConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError) as error:
        logger.warning("Skipping unreadable config file %s: %s", config_file, error)
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        logger.debug("Loaded configuration from %s", config_file)
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> PreviewConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return PreviewConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    # TOML keys use dashes, dataclass fields use underscores.
    options = {key.replace("-", "_"): value for key, value in raw_config.items()}
    try:
        return PreviewConfig(**options)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: PreviewConfig) -> None:
    """Validate a `PreviewConfig` instance.

    Raises:
        ConfigError: If the diagram language is empty or not a simple word,
            boolean flags are not booleans, optional URLs are not strings, or
            the size limit is not a positive integer.

    Examples:
        validate_config(PreviewConfig(max_file_size=1024))
    """
    if not isinstance(config.diagram_language, str) or not config.diagram_language:
        raise ConfigError("`diagram_language` must not be empty")
    if not config.diagram_language.replace("-", "").replace("_", "").isalnum():
        raise ConfigError("`diagram_language` must contain only letters, digits, - or _")

    for key in ("open_links_in_new_tab", "lazy_images", "standalone"):
        if not isinstance(getattr(config, key), bool):
            raise ConfigError(f"`{key}` must be a boolean")

    for key in ("stylesheet", "asset_base"):
        value = getattr(config, key)
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"`{key}` must be a string")

    if isinstance(config.max_file_size, bool) or not isinstance(config.max_file_size, int):
        raise ConfigError("`max_file_size` must be an integer")
    if config.max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")


def apply_overrides(config: PreviewConfig, **overrides: object) -> PreviewConfig:
    """Apply override values to a `PreviewConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        PreviewConfig: New configuration with the overrides applied, or the
        original configuration when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `PreviewConfig`.

    Examples:
        updated = apply_overrides(config, standalone=True, stylesheet=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> PreviewConfig:
    """Load, override, and validate configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), standalone=True)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def build_parse_options(
    config: PreviewConfig, resolve_image_path: Callable[[str], str] | None = None
) -> ParseOptions:
    """Derive the per-render `ParseOptions` from a configuration."""
    return ParseOptions(
        resolve_image_path=resolve_image_path,
        diagram_language=config.diagram_language,
        open_links_in_new_tab=config.open_links_in_new_tab,
        lazy_images=config.lazy_images,
    )
