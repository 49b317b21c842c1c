"""Version store: one repository per resource kind over the catalog tree.

Each ``(kind, id)`` has at most one latest document. Superseded versions
live in ``versioned/{version}/`` inside the resource directory, together
with the attachments they had.

INVARIANT: Archived snapshots are never rewritten. A write whose version
differs from the latest archives the latest first, unless the archive
already holds that version.

INVARIANT: ``get`` never raises. Missing or unreadable resources are
``None``. Every mutation wraps ``OSError`` in :class:`StorageError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from ruamel.yaml.error import YAMLError

from catgen.domain.content import render_document
from catgen.domain.errors import ArchivedResourceError, ResourceNotFoundError, StorageError
from catgen.domain.models import Resource, ResourceRef, WriteAction, WriteOutcome
from catgen.domain.types import LATEST, VERSIONED_DIR, ResourceKind
from catgen.infrastructure.filesystem import (
    archive_directory,
    commit_staged,
    document_in,
    iter_documents,
    read_document,
    resolve_resource_dir,
    safe_join,
    stage_document,
    write_attachment,
    write_document,
)

if TYPE_CHECKING:
    from catgen.infrastructure.catalog import Catalog

logger = logging.getLogger(__name__)

Attachments = Mapping[str, bytes | str]


class ResourceRepository(ABC):
    """CRUD and versioning for one resource kind.

    Subclasses pin :attr:`kind`, the membership lists the kind owns, and
    where new resources are placed by default.
    """

    kind: ClassVar[ResourceKind]
    membership_fields: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    @property
    def root(self) -> Path:
        return self._catalog.root

    @abstractmethod
    def default_location(self, resource_id: str) -> Path:
        """Catalog-relative directory for a new resource without a path."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, resource_id: str, version: str | None = None) -> Resource | None:
        """Return the resource at *version* (latest when None or ``"latest"``).

        A version equal to the latest's version returns the latest.
        """
        latest = self._find_latest(resource_id)
        if version is None or version == LATEST:
            return latest
        if latest is not None and latest.version == str(version):
            return latest
        return self._find_archived(resource_id, str(version))

    def versions(self, resource_id: str) -> list[str]:
        """All known versions: latest first, then archived in path order."""
        found: list[str] = []
        latest = self._find_latest(resource_id)
        if latest is not None and latest.version is not None:
            found.append(latest.version)
        for resource in self._iter_resources(archived=True):
            if resource.id == resource_id and resource.version not in (None, *found):
                found.append(str(resource.version))
        return found

    def list_latest(self) -> list[Resource]:
        """Every latest resource of this kind in the catalog."""
        return list(self._iter_resources(archived=False))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def write(
        self,
        document: Mapping[str, Any],
        *,
        path: str | Path | None = None,
        attachments: Attachments | None = None,
        override: bool = False,
    ) -> WriteOutcome:
        """Install *document* as the latest version of its resource.

        - No latest yet: created at the existing resource directory, at
          *path* (catalog-relative), or at :meth:`default_location`.
        - Latest with the same version: document overwritten in place,
          skipped when the rendered text is identical.
        - Latest with another version: the new document is staged, the
          latest is archived, then the staged document is swapped in, so
          there is never a moment without a latest document.
        - Latest whose version is already archived (a version rollback):
          the snapshot is kept as is and the latest is replaced in place.

        *override* only concerns *attachments*: when False, attachment
        files that already exist are left untouched.
        """
        doc = dict(document)
        resource_id = str(doc["id"])
        version = doc.get("version")
        if version is None:
            msg = f"{self.kind} {resource_id!r} has no version"
            raise ValueError(msg)
        version = str(version)
        doc["version"] = version

        current = self._find_latest(resource_id)
        if current is not None and current.path is not None:
            target = current.path
        else:
            directory = self._resolve_dir(resource_id, path or self.default_location(resource_id))
            target = document_in(directory) or directory / self._catalog.document_name

        archived: Resource | None = None
        try:
            if current is None:
                write_document(target, doc)
                action = WriteAction.CREATED
            elif current.version == version:
                if target.read_text(encoding="utf-8") == render_document(doc):
                    action = WriteAction.UNCHANGED
                else:
                    write_document(target, doc)
                    action = WriteAction.UPDATED
            elif self._snapshot_exists(current):
                # The archive already holds this version; leave it and
                # replace the latest, attachments included.
                write_document(target, doc)
                override = True
                action = WriteAction.VERSIONED
                logger.info(
                    "%s %s v%s already archived; replacing latest with v%s",
                    self.kind,
                    resource_id,
                    current.version,
                    version,
                )
            else:
                staged = stage_document(target, doc)
                try:
                    archived = self._archive_resource(current)
                except StorageError:
                    staged.unlink(missing_ok=True)
                    raise
                commit_staged(staged, target)
                action = WriteAction.VERSIONED

            if attachments:
                self._write_attachments(resource_id, target.parent, attachments, override=override)
        except OSError as exc:
            raise self._storage_error("write", resource_id, version, target, exc) from exc

        logger.debug("%s %s %s (v%s) at %s", action, self.kind, resource_id, version, target)
        resource = Resource(kind=self.kind, document=doc, path=target)
        return WriteOutcome(action=action, resource=resource, archived=archived)

    def archive(self, resource_id: str) -> Resource | None:
        """Move the latest into ``versioned/{its version}``.

        Returns the archived snapshot, or None when there is no latest.
        """
        current = self._find_latest(resource_id)
        if current is None:
            return None
        return self._archive_resource(current)

    def attach_file(
        self,
        resource_id: str,
        file_name: str,
        content: bytes | str,
        *,
        version: str | None = None,
    ) -> Path:
        """Store or overwrite a named file next to the resource's document.

        *version* may address an archived snapshot; the default is the
        latest.

        Raises:
            ResourceNotFoundError: If the resource/version does not exist.
            StorageError: On I/O failure.
        """
        resource = self.get(resource_id, version)
        if resource is None or resource.directory is None:
            raise ResourceNotFoundError(self.kind, resource_id, version)

        target = self._attachment_path(resource_id, resource.directory, file_name)
        try:
            write_attachment(target, content)
        except OSError as exc:
            raise self._storage_error(
                "attach file to", resource_id, resource.version, target, exc
            ) from exc
        logger.debug("Attached %s to %s %s (v%s)", file_name, self.kind, resource_id, resource.version)
        return target

    def add_to_parent(
        self,
        parent_id: str,
        field: str,
        child: ResourceRef,
        *,
        parent_version: str | None = None,
    ) -> bool:
        """Append *child* to the parent's *field* membership list.

        Deduplicates on the full ``(id, version)`` pair. Returns True if
        the list changed.

        Raises:
            ValueError: If this kind does not own *field*.
            ResourceNotFoundError: If the parent does not exist.
            ArchivedResourceError: If *parent_version* is archived.
        """
        if field not in self.membership_fields:
            msg = f"{self.kind} resources have no {field!r} membership list"
            raise ValueError(msg)

        parent = self.get(parent_id, parent_version)
        if parent is None or parent.path is None:
            raise ResourceNotFoundError(self.kind, parent_id, parent_version)
        if parent.archived:
            msg = f"Archived {self.kind} {parent_id!r} (v{parent.version}) is immutable"
            raise ArchivedResourceError(
                msg,
                kind=str(self.kind),
                resource_id=parent_id,
                version=parent.version,
                path=parent.path,
            )

        if any(ref.id == child.id and ref.version == child.version for ref in parent.refs(field)):
            return False

        existing = parent.document.get(field)
        entries = list(existing) if isinstance(existing, list) else []
        entries.append(child.to_frontmatter())
        doc = dict(parent.document)
        doc[field] = entries
        try:
            write_document(parent.path, doc)
        except OSError as exc:
            raise self._storage_error(
                "update", parent_id, parent.version, parent.path, exc
            ) from exc
        logger.debug(
            "Added %s (v%s) to %s of %s %s", child.id, child.version, field, self.kind, parent_id
        )
        return True

    def write_archived(
        self,
        document: Mapping[str, Any],
        *,
        path: str | Path | None = None,
        attachments: Attachments | None = None,
    ) -> Resource | None:
        """Create a historical snapshot without touching the latest.

        Returns None (and writes nothing) when the version is already the
        latest or already archived.
        """
        doc = dict(document)
        resource_id = str(doc["id"])
        version = str(doc["version"])
        doc["version"] = version

        latest = self._find_latest(resource_id)
        if latest is not None and latest.version == version:
            return None
        if self._find_archived(resource_id, version) is not None:
            return None

        if latest is not None and latest.directory is not None:
            directory = latest.directory
        else:
            directory = self._resolve_dir(resource_id, path or self.default_location(resource_id))

        target: Path | None = None
        try:
            snapshot_dir = safe_join(directory / VERSIONED_DIR, version)
            target = snapshot_dir / self._catalog.document_name
            write_document(target, doc)
            if attachments:
                self._write_attachments(resource_id, snapshot_dir, attachments, override=True)
        except (OSError, ValueError) as exc:
            raise self._storage_error("archive", resource_id, version, target, exc) from exc

        logger.debug("Wrote archived %s %s (v%s)", self.kind, resource_id, version)
        return Resource(kind=self.kind, document=doc, path=target, archived=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot_exists(self, current: Resource) -> bool:
        if current.version is None or current.directory is None:
            return False
        return document_in(current.directory / VERSIONED_DIR / current.version) is not None

    def _archive_resource(self, current: Resource) -> Resource:
        version = current.version
        directory = current.directory
        if version is None or directory is None or current.path is None:
            msg = f"Cannot archive {self.kind} {current.id!r} without a version"
            raise StorageError(msg, kind=str(self.kind), resource_id=current.id)
        try:
            snapshot_dir = archive_directory(directory, version)
        except (OSError, ValueError) as exc:
            raise self._storage_error("archive", current.id, version, directory, exc) from exc

        logger.debug("Archived %s %s (v%s) to %s", self.kind, current.id, version, snapshot_dir)
        return Resource(
            kind=self.kind,
            document=current.document,
            path=snapshot_dir / current.path.name,
            archived=True,
        )

    def _write_attachments(
        self, resource_id: str, directory: Path, attachments: Attachments, *, override: bool
    ) -> None:
        for file_name, content in attachments.items():
            target = self._attachment_path(resource_id, directory, file_name)
            if target.exists() and not override:
                continue
            write_attachment(target, content)

    def _attachment_path(self, resource_id: str, directory: Path, file_name: str) -> Path:
        if Path(file_name).name != file_name or file_name in ("", ".", ".."):
            msg = f"Invalid attachment name for {self.kind}: {file_name!r}"
            raise StorageError(
                msg, kind=str(self.kind), resource_id=resource_id, path=directory / file_name
            )
        return directory / file_name

    def _resolve_dir(self, resource_id: str, relative: str | Path) -> Path:
        try:
            return resolve_resource_dir(self.root, relative)
        except ValueError as exc:
            raise StorageError(
                str(exc), kind=str(self.kind), resource_id=resource_id, path=self.root / relative
            ) from exc

    def _iter_resources(self, *, archived: bool) -> list[Resource]:
        resources: list[Resource] = []
        for path in iter_documents(self.root, self.kind.collection, archived=archived):
            try:
                document = read_document(path)
            except (OSError, UnicodeDecodeError, YAMLError):
                logger.warning("Skipping unreadable %s document: %s", self.kind, path)
                continue
            if not document.get("id"):
                continue
            resources.append(
                Resource(kind=self.kind, document=document, path=path, archived=archived)
            )
        return resources

    def _find_latest(self, resource_id: str) -> Resource | None:
        matches = [r for r in self._iter_resources(archived=False) if r.id == resource_id]
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "%s %r has %d latest documents; using %s",
                self.kind,
                resource_id,
                len(matches),
                matches[0].path,
            )
        return matches[0]

    def _find_archived(self, resource_id: str, version: str) -> Resource | None:
        for resource in self._iter_resources(archived=True):
            if resource.id == resource_id and resource.version == version:
                return resource
        return None

    def _storage_error(
        self,
        action: str,
        resource_id: str,
        version: str | None,
        path: Path | None,
        exc: Exception,
    ) -> StorageError:
        msg = f"Failed to {action} {self.kind} {resource_id!r} (v{version}): {exc}"
        return StorageError(
            msg, kind=str(self.kind), resource_id=resource_id, version=version, path=path
        )


# ---------------------------------------------------------------------------
# Concrete repositories
# ---------------------------------------------------------------------------


class DomainRepository(ResourceRepository):
    """Domains own an ordered ``services`` membership list."""

    kind = ResourceKind.DOMAIN
    membership_fields = frozenset({"services"})

    def default_location(self, resource_id: str) -> Path:
        return Path(self.kind.collection) / resource_id


class ServiceRepository(ResourceRepository):
    """Services own ``sends`` and ``receives`` message lists."""

    kind = ResourceKind.SERVICE
    membership_fields = frozenset({"sends", "receives"})

    def default_location(self, resource_id: str) -> Path:
        return Path(self.kind.collection) / resource_id

    def location_in_domain(self, domain: Resource, resource_id: str) -> Path:
        """Catalog-relative directory for a service nested in *domain*."""
        assert domain.directory is not None
        return domain.directory.relative_to(self.root) / self.kind.collection / resource_id


class MessageRepository(ResourceRepository):
    """Shared placement rules for events, commands, and queries."""

    def default_location(self, resource_id: str) -> Path:
        return Path(self.kind.collection) / resource_id

    def location_in_service(self, service: Resource, resource_id: str) -> Path:
        """Catalog-relative directory for a message owned by *service*."""
        assert service.directory is not None
        return service.directory.relative_to(self.root) / self.kind.collection / resource_id


class EventRepository(MessageRepository):
    kind = ResourceKind.EVENT


class CommandRepository(MessageRepository):
    kind = ResourceKind.COMMAND


class QueryRepository(MessageRepository):
    kind = ResourceKind.QUERY


_REPOSITORIES: dict[ResourceKind, type[ResourceRepository]] = {
    ResourceKind.DOMAIN: DomainRepository,
    ResourceKind.SERVICE: ServiceRepository,
    ResourceKind.EVENT: EventRepository,
    ResourceKind.COMMAND: CommandRepository,
    ResourceKind.QUERY: QueryRepository,
}


def repository_for(kind: ResourceKind, catalog: Catalog) -> ResourceRepository:
    """Instantiate the repository class for *kind*."""
    return _REPOSITORIES[kind](catalog)
