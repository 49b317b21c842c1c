"""Merge policy: which fields survive when a resource is rewritten.

Identity fields describe the source system and always come from the
freshly discovered resource. Narrative fields are hand-authored in the
catalog and always come from the existing latest resource when it has
them. Everything else is a field-wise union.

INVARIANT: A field missing from (or ``None`` in) the discovered resource
never erases a value inherited from the existing one.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

IDENTITY_FIELDS: frozenset[str] = frozenset(
    {"id", "name", "version", "sends", "receives", "schemaPath"}
)

NARRATIVE_FIELDS: frozenset[str] = frozenset(
    {
        "markdown",
        "summary",
        "badges",
        "owners",
        "attachments",
        "sidebar",
        "styles",
        "specifications",
    }
)


def _present(value: Any) -> bool:
    return value is not None


def _has_narrative(value: Any) -> bool:
    """Narrative counts as present unless it is missing or blank."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def merge(
    existing: Mapping[str, Any] | None,
    discovered: Mapping[str, Any],
    *,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge a discovered document onto the existing latest document.

    Args:
        existing: Current latest document, or None when the resource is new.
            When its version differs from *discovered*, its narrative is
            still carried forward (the caller archives it afterwards).
        discovered: Document built from the source system.
        defaults: Templated narrative used only for fields neither side has.

    Returns:
        A new document dict; inputs are not modified.
    """
    previous = existing or {}
    merged: dict[str, Any] = {}

    # Union: previous values first, discovered non-None values override.
    for key, value in previous.items():
        merged[key] = value
    for key, value in discovered.items():
        if key in NARRATIVE_FIELDS:
            continue
        if _present(value):
            merged[key] = value

    for key in NARRATIVE_FIELDS:
        if _has_narrative(previous.get(key)):
            merged[key] = previous[key]
        elif _has_narrative(discovered.get(key)):
            merged[key] = discovered[key]
        elif defaults is not None and _has_narrative(defaults.get(key)):
            merged[key] = defaults[key]

    # Identity fields supplied by discovery always win, even over defaults.
    for key in IDENTITY_FIELDS:
        if key in discovered and _present(discovered[key]):
            merged[key] = discovered[key]

    if not _present(merged.get("name")) and _present(merged.get("id")):
        merged["name"] = merged["id"]

    return merged

