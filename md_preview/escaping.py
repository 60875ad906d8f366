"""HTML escaping helpers shared by the parsing phases."""

from __future__ import annotations

_ESCAPES = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;"))


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for use in text or attribute values.

    Examples:
        escape_html('<a href="x">')  # '&lt;a href=&quot;x&quot;&gt;'
    """
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def unescape_html(text: str) -> str:
    """Reverse `escape_html`.

    ``&amp;`` is decoded last so ``&amp;lt;`` round-trips to ``&lt;`` rather
    than ``<``.
    """
    for char, entity in reversed(_ESCAPES):
        text = text.replace(entity, char)
    return text
