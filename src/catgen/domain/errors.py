"""Exception hierarchy for catalog reconciliation.

Not-found on reads is never an exception: repositories return ``None``.
"""

from __future__ import annotations

from pathlib import Path


class CatalogError(Exception):
    """Base class for all catgen errors."""


class ConfigurationError(CatalogError):
    """Missing or invalid generator/batch parameters.

    Raised before any catalog mutation happens.
    """


class StorageError(CatalogError):
    """A write, archive, or attach operation failed on disk.

    Fatal for the current run. Writes committed earlier in the run stay
    on disk; there is no rollback.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: str,
        resource_id: str,
        version: str | None = None,
        path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.resource_id = resource_id
        self.version = version
        self.path = path

    def to_detail(self) -> dict[str, str | None]:
        """Context needed to locate the failing record."""
        return {
            "kind": self.kind,
            "id": self.resource_id,
            "version": self.version,
            "path": str(self.path) if self.path is not None else None,
        }


class ResourceNotFoundError(CatalogError):
    """A mutation targeted a resource that does not exist."""

    def __init__(self, kind: str, resource_id: str, version: str | None = None) -> None:
        label = f"{kind} {resource_id!r}"
        if version:
            label += f" (v{version})"
        super().__init__(f"No {label} found in catalog")
        self.kind = kind
        self.resource_id = resource_id
        self.version = version


class ArchivedResourceError(StorageError):
    """A mutation targeted an archived snapshot; snapshots are immutable."""
