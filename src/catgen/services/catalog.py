"""CatalogService: read and archive individual resources."""

from __future__ import annotations

from typing import Any

from catgen.domain.errors import StorageError
from catgen.domain.models import Resource
from catgen.domain.types import LATEST, ResourceKind
from catgen.services.base import BaseService
from catgen.services.result import ServiceError, ServiceResult


def _plain(value: Any) -> Any:
    """Strip ruamel.yaml container and scalar subclasses for serialization."""
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bool):
        return bool(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    return value


def _resource_data(resource: Resource) -> dict[str, Any]:
    frontmatter = {k: _plain(v) for k, v in resource.document.items() if k != "markdown"}
    return {
        "kind": str(resource.kind),
        "id": resource.id,
        "version": _plain(resource.version),
        "archived": resource.archived,
        "path": str(resource.path) if resource.path is not None else None,
        "frontmatter": frontmatter,
        "markdown": resource.markdown,
    }


def _parse_kind(kind: str, op: str) -> ResourceKind | ServiceResult:
    try:
        return ResourceKind(kind.lower())
    except ValueError:
        valid = ", ".join(k.value for k in ResourceKind)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="INVALID_KIND",
                message=f"Unknown resource kind {kind!r} (expected one of: {valid})",
            ),
        )


class CatalogService(BaseService):
    """Single-resource operations exposed on the CLI."""

    def show(self, kind: str, resource_id: str, *, version: str | None = None) -> ServiceResult:
        """Fetch one resource (latest unless *version* names another)."""
        op = "show"
        resolved = _parse_kind(kind, op)
        if isinstance(resolved, ServiceResult):
            return resolved

        resource = self._catalog.repository(resolved).get(resource_id, version)
        if resource is None:
            label = f"{resolved} {resource_id!r}"
            if version and version != LATEST:
                label += f" (v{version})"
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="NOT_FOUND", message=f"No {label} in catalog"),
            )
        return ServiceResult(ok=True, op=op, data=_resource_data(resource))

    def versions(self, kind: str, resource_id: str) -> ServiceResult:
        """List known versions of a resource, latest first."""
        op = "versions"
        resolved = _parse_kind(kind, op)
        if isinstance(resolved, ServiceResult):
            return resolved

        repo = self._catalog.repository(resolved)
        found = repo.versions(resource_id)
        latest = repo.get(resource_id)
        if not found:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND", message=f"No {resolved} {resource_id!r} in catalog"
                ),
            )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "kind": str(resolved),
                "id": resource_id,
                "latest": latest.version if latest is not None else None,
                "versions": found,
            },
        )

    def archive(self, kind: str, resource_id: str) -> ServiceResult:
        """Move the latest version of a resource into its archive."""
        op = "archive"
        resolved = _parse_kind(kind, op)
        if isinstance(resolved, ServiceResult):
            return resolved

        warnings: list[str] = []
        try:
            snapshot = self._catalog.repository(resolved).archive(resource_id)
        except StorageError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="STORAGE_ERROR", message=str(exc), detail=exc.to_detail()),
            )
        if snapshot is None:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="NOT_FOUND", message=f"No latest {resolved} {resource_id!r} to archive"
                ),
            )

        self._dispatch_event(
            "post_archive",
            {
                "kind": str(resolved),
                "resource_id": snapshot.id,
                "version": snapshot.version,
                "path": str(snapshot.path),
            },
            warnings,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "kind": str(resolved),
                "id": snapshot.id,
                "version": snapshot.version,
                "path": str(snapshot.path),
            },
            warnings=warnings,
        )
