"""Resource kinds and their catalog collections.

Every kind maps to a collection directory name. The collection names
are part of the persisted catalog layout and must not change.
"""

from __future__ import annotations

from enum import StrEnum


class ResourceKind(StrEnum):
    """Kinds of resources stored in the catalog."""

    DOMAIN = "domain"
    SERVICE = "service"
    EVENT = "event"
    COMMAND = "command"
    QUERY = "query"

    @property
    def collection(self) -> str:
        """Directory name holding resources of this kind."""
        return COLLECTIONS[self]

    @property
    def is_message(self) -> bool:
        return self in MESSAGE_KINDS


COLLECTIONS: dict[ResourceKind, str] = {
    ResourceKind.DOMAIN: "domains",
    ResourceKind.SERVICE: "services",
    ResourceKind.EVENT: "events",
    ResourceKind.COMMAND: "commands",
    ResourceKind.QUERY: "queries",
}

MESSAGE_KINDS = frozenset({ResourceKind.EVENT, ResourceKind.COMMAND, ResourceKind.QUERY})

# Directory holding archived versions inside a resource directory.
VERSIONED_DIR = "versioned"

# Version token that addresses the current latest resource.
LATEST = "latest"


class Direction(StrEnum):
    """Which side of a message a service is on."""

    SENDS = "sends"
    RECEIVES = "receives"


def message_kind(value: str | None, *, default: ResourceKind = ResourceKind.EVENT) -> ResourceKind:
    """Resolve a message type string to a message :class:`ResourceKind`.

    Unknown or empty values fall back to *default*.
    """
    if not value:
        return default
    try:
        kind = ResourceKind(str(value).lower())
    except ValueError:
        return default
    return kind if kind.is_message else default
