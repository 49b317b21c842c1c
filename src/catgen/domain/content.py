"""Catalog document format: YAML front matter followed by markdown.

A resource document is a single field map. On disk the ``markdown``
field becomes the body below the front matter; every other field is a
front matter key. Pure parsing/rendering lives here so the dependency
direction stays infrastructure -> domain.
"""

from __future__ import annotations

from collections.abc import Mapping
from io import StringIO
from typing import Any

from ruamel.yaml import YAML

# ---------------------------------------------------------------------------
# YAML parser (round-trip preserves comments and quote styles)
# ---------------------------------------------------------------------------


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML parser.

    ruamel.yaml's YAML object is stateful and a failed dump can leave a
    shared instance broken, so every call gets its own.
    """
    y = YAML()
    y.preserve_quotes = True
    y.default_flow_style = False
    y.width = 4096
    return y


# ---------------------------------------------------------------------------
# Canonical front matter key ordering
# ---------------------------------------------------------------------------

CANONICAL_KEY_ORDER: list[str] = [
    "id",
    "name",
    "version",
    "summary",
    "owners",
    "badges",
    "sends",
    "receives",
    "services",
    "schemaPath",
    "specifications",
    "sidebar",
    "styles",
    "attachments",
]

MARKDOWN_KEY = "markdown"

_FRONTMATTER_DELIMITER = "---"


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter and body from document text.

    The text must start with ``---``; the next ``---`` line closes the
    YAML block and everything after it is the body. ``\\r\\n`` line
    endings are normalized.

    Returns:
        ``(frontmatter, body)``. Without valid delimiters, or when the
        YAML block is not a mapping, the result is ``({}, content)``.
    """
    normalized = content.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _FRONTMATTER_DELIMITER:
        return {}, content

    end_idx: int | None = None
    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == _FRONTMATTER_DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return {}, content

    yaml_block = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1 :])
    if body.startswith("\n"):
        body = body[1:]

    loaded = _new_yaml().load(yaml_block)
    if loaded is None:
        return {}, body
    if not isinstance(loaded, Mapping):
        return {}, content
    fm: dict[str, Any] = loaded
    return fm, body


def order_frontmatter(fm: dict[str, Any]) -> dict[str, Any]:
    """Return *fm* with keys in canonical order.

    Known keys come first in :data:`CANONICAL_KEY_ORDER`, remaining keys
    follow alphabetically. ``None`` values are dropped.
    """
    ordered: dict[str, Any] = {}
    for key in CANONICAL_KEY_ORDER:
        if key in fm and fm[key] is not None:
            ordered[key] = fm[key]

    for key in sorted(fm.keys()):
        if key not in ordered and fm[key] is not None:
            ordered[key] = fm[key]

    return ordered


def render_frontmatter(frontmatter: dict[str, Any], body: str) -> str:
    """Render a front matter dict and body text into a document."""
    ordered = order_frontmatter(frontmatter)
    buf = StringIO()
    _new_yaml().dump(ordered, buf)
    yaml_text = buf.getvalue()

    parts = [_FRONTMATTER_DELIMITER, "\n", yaml_text, _FRONTMATTER_DELIMITER, "\n"]
    if body:
        # One blank line after the closing delimiter; parsing strips it.
        parts.extend(["\n", body])
    return "".join(parts)


def split_document(document: dict[str, Any]) -> tuple[dict[str, Any], str]:
    """Split a resource document into ``(frontmatter, markdown body)``."""
    fm = {k: v for k, v in document.items() if k != MARKDOWN_KEY}
    body = document.get(MARKDOWN_KEY) or ""
    return fm, str(body)


def join_document(frontmatter: dict[str, Any], body: str) -> dict[str, Any]:
    """Inverse of :func:`split_document`."""
    document = dict(frontmatter)
    document[MARKDOWN_KEY] = body
    return document


def render_document(document: dict[str, Any]) -> str:
    """Render a full resource document (front matter + markdown)."""
    fm, body = split_document(document)
    return render_frontmatter(fm, body)
