"""ReconcileService: write one discovery batch into the catalog.

Pipeline: VALIDATE -> DOMAIN -> SERVICES -> MESSAGES -> DROP -> RESPOND

- Validation runs before any mutation; a bad batch never touches disk.
- Services are classified against the full candidate set, written with
  their ``sends``/``receives`` refs, then linked into the domain.
- Each resolved message is written under its owning service, gets its
  schema attached, and is linked back into the service.
- Candidates no service claims and nobody listed explicitly are dropped.

INVARIANT: Phase order is fixed and in-phase order follows the batch.
A storage error aborts the run; everything committed before it stays on
disk and is reported in ``data``.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from catgen.domain.errors import ConfigurationError, ResourceNotFoundError, StorageError
from catgen.domain.filters import Classification, FilterMatch, classify
from catgen.domain.merge import merge
from catgen.domain.models import (
    DiscoveryBatch,
    DomainDescriptor,
    MessageCandidate,
    Resource,
    ServiceDescriptor,
    WriteAction,
    WriteOutcome,
)
from catgen.domain.types import Direction, ResourceKind, message_kind
from catgen.infrastructure.repositories import MessageRepository
from catgen.infrastructure.templates import render_default_markdown
from catgen.services.base import BaseService
from catgen.services.result import ServiceError, ServiceResult

log = structlog.get_logger(__name__)

OP = "reconcile"


@dataclass
class _RunLog:
    """Everything a run committed, in order."""

    written: list[dict[str, Any]] = field(default_factory=list)
    archived: list[dict[str, Any]] = field(default_factory=list)
    unchanged: list[dict[str, Any]] = field(default_factory=list)
    skipped: list[dict[str, Any]] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    messages: dict[str, Resource] = field(default_factory=dict)

    def as_data(self) -> dict[str, Any]:
        return {
            "written": self.written,
            "archived": self.archived,
            "unchanged": self.unchanged,
            "dropped": self.dropped,
            "skipped": self.skipped,
        }

    def stats(self) -> dict[str, int]:
        return {key: len(value) for key, value in self.as_data().items()}


def _ref(kind: ResourceKind, resource_id: str, version: str | None) -> dict[str, Any]:
    return {"kind": str(kind), "id": resource_id, "version": version}


class ReconcileService(BaseService):
    """Applies a :class:`DiscoveryBatch` to the catalog."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, batch: DiscoveryBatch) -> ServiceResult:
        """Reconcile *batch* into the catalog.

        Returns:
            ``ServiceResult(op="reconcile")`` whose ``data`` lists
            ``written``, ``archived``, ``unchanged``, ``dropped`` and
            ``skipped`` records. Failures carry ``CONFIG_ERROR``,
            ``NOT_FOUND`` or ``STORAGE_ERROR``.
        """
        warnings: list[str] = []
        run = _RunLog()
        bound = log.bind(generator=batch.generator)

        try:
            self.validate(batch)
        except ConfigurationError as exc:
            bound.warning("reconcile_rejected", reason=str(exc))
            return ServiceResult(
                ok=False,
                op=OP,
                error=ServiceError(code="CONFIG_ERROR", message=str(exc)),
            )

        bound.info(
            "reconcile_started",
            services=len(batch.services),
            candidates=len(batch.candidates),
        )
        try:
            self._reconcile(batch, run, warnings)
        except StorageError as exc:
            bound.error("reconcile_failed", error=str(exc), **exc.to_detail())
            return ServiceResult(
                ok=False,
                op=OP,
                data=run.as_data(),
                warnings=warnings,
                error=ServiceError(code="STORAGE_ERROR", message=str(exc), detail=exc.to_detail()),
            )
        except ResourceNotFoundError as exc:
            bound.error("reconcile_failed", error=str(exc))
            return ServiceResult(
                ok=False,
                op=OP,
                data=run.as_data(),
                warnings=warnings,
                error=ServiceError(
                    code="NOT_FOUND",
                    message=str(exc),
                    detail={"kind": str(exc.kind), "id": exc.resource_id, "version": exc.version},
                ),
            )

        stats = run.stats()
        self._dispatch_event(
            "post_reconcile", {"generator": batch.generator, "stats": stats}, warnings
        )
        bound.info("reconcile_finished", **stats)
        return ServiceResult(
            ok=True,
            op=OP,
            data=run.as_data(),
            warnings=warnings,
            meta={"generator": batch.generator, "counts": stats},
        )

    @staticmethod
    def validate(batch: DiscoveryBatch) -> None:
        """Reject batches that cannot be reconciled.

        Raises:
            ConfigurationError: On a blank domain/service/candidate
                identity, a schema file name with a directory part,
                duplicate service ids, a message name with zero or several
                latest candidates, or explicit messages with no candidate.
        """
        if batch.domain is not None:
            _require(batch.domain.id, "Domain id must not be empty")
            _require(batch.domain.version, f"Domain {batch.domain.id!r} has no version")

        service_ids = Counter(service.id for service in batch.services)
        duplicates = sorted(sid for sid, count in service_ids.items() if count > 1)
        if duplicates:
            msg = f"Duplicate service ids: {', '.join(duplicates)}"
            raise ConfigurationError(msg)
        for service in batch.services:
            _require(service.id, "Service id must not be empty")
            _require(service.version, f"Service {service.id!r} has no version")

        latest_versions: Counter[str] = Counter()
        for candidate in batch.candidates:
            _require(candidate.name, "Message candidate without a name")
            _require(candidate.version, f"Message {candidate.name!r} has no version")
            _require(candidate.file_name, f"Message {candidate.name!r} has no schema file name")
            name_only = Path(candidate.file_name).name
            if name_only != candidate.file_name or name_only == "..":
                msg = (
                    f"Message {candidate.name!r} schema file name must not contain a directory: "
                    f"{candidate.file_name!r}"
                )
                raise ConfigurationError(msg)
            if candidate.latest:
                latest_versions[candidate.name] += 1
        ambiguous = sorted(name for name, count in latest_versions.items() if count > 1)
        if ambiguous:
            msg = f"More than one latest candidate for: {', '.join(ambiguous)}"
            raise ConfigurationError(msg)
        archive_only = [name for name in batch.candidate_names() if name not in latest_versions]
        if archive_only:
            msg = f"No latest candidate for: {', '.join(archive_only)}"
            raise ConfigurationError(msg)

        known = set(batch.candidate_names())
        unknown = [name for name in batch.messages if name not in known]
        if unknown:
            msg = f"Explicit messages without a discovered schema: {', '.join(unknown)}"
            raise ConfigurationError(msg)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _reconcile(self, batch: DiscoveryBatch, run: _RunLog, warnings: list[str]) -> None:
        domain: Resource | None = None
        if batch.domain is not None:
            log.info("phase_started", phase="domain")
            domain = self._reconcile_domain(batch.domain, run, warnings)

        names = batch.candidate_names()
        claimed: set[str] = set()
        resolved: list[tuple[ServiceDescriptor, Classification]] = []
        for descriptor in batch.services:
            classification = classify(names, sends=descriptor.sends, receives=descriptor.receives)
            claimed.update(classification.send_names)
            claimed.update(classification.receive_names)
            resolved.append((descriptor, classification))

        if resolved:
            log.info("phase_started", phase="services")
        services: list[tuple[Resource, Classification]] = []
        for descriptor, classification in resolved:
            service = self._reconcile_service(
                descriptor, classification, batch, domain=domain, run=run, warnings=warnings
            )
            services.append((service, classification))

        log.info("phase_started", phase="messages")
        for service, classification in services:
            for direction, found in (
                (Direction.SENDS, classification.sends),
                (Direction.RECEIVES, classification.receives),
            ):
                for match in found:
                    message = self._reconcile_message(
                        batch, match, service=service, run=run, warnings=warnings
                    )
                    self._link(service, direction, message)

        standalone = batch.messages if batch.services else names
        for name in standalone:
            if name in run.messages:
                continue
            self._reconcile_message(
                batch, FilterMatch(name=name), service=None, run=run, warnings=warnings
            )
            claimed.add(name)

        run.dropped.extend(name for name in names if name not in claimed)
        for name in run.dropped:
            log.info("message_dropped", id=name)

    def _reconcile_domain(
        self, descriptor: DomainDescriptor, run: _RunLog, warnings: list[str]
    ) -> Resource:
        repo = self._catalog.repository(ResourceKind.DOMAIN)
        existing = repo.get(descriptor.id)
        discovered = {
            "id": descriptor.id,
            "name": descriptor.name,
            "version": descriptor.version,
            "summary": descriptor.summary,
            "owners": descriptor.owners or None,
        }
        defaults = None
        if existing is None:
            defaults = {"markdown": self._default_markdown(ResourceKind.DOMAIN)}
        document = merge(existing.document if existing else None, discovered, defaults=defaults)
        outcome = repo.write(document)
        self._record(outcome, run, warnings)
        return outcome.resource

    def _reconcile_service(
        self,
        descriptor: ServiceDescriptor,
        classification: Classification,
        batch: DiscoveryBatch,
        *,
        domain: Resource | None,
        run: _RunLog,
        warnings: list[str],
    ) -> Resource:
        repo = self._catalog.repository(ResourceKind.SERVICE)
        existing = repo.get(descriptor.id)
        discovered = {
            "id": descriptor.id,
            "name": descriptor.name,
            "version": descriptor.version,
            "summary": descriptor.summary,
            "owners": descriptor.owners or None,
            "sends": [self._membership_entry(batch, m) for m in classification.sends],
            "receives": [self._membership_entry(batch, m) for m in classification.receives],
        }
        defaults = None
        if existing is None:
            defaults = {
                "markdown": self._default_markdown(ResourceKind.SERVICE, source=batch.generator)
            }
        document = merge(existing.document if existing else None, discovered, defaults=defaults)

        path = None
        if domain is not None:
            path = repo.location_in_domain(domain, descriptor.id)
        outcome = repo.write(document, path=path)
        self._record(outcome, run, warnings)

        if domain is not None:
            domains = self._catalog.repository(ResourceKind.DOMAIN)
            if domains.add_to_parent(domain.id, "services", outcome.resource.ref()):
                log.info(
                    "service_linked",
                    domain=domain.id,
                    id=outcome.resource.id,
                    version=outcome.resource.version,
                )
        return outcome.resource

    def _reconcile_message(
        self,
        batch: DiscoveryBatch,
        match: FilterMatch,
        *,
        service: Resource | None,
        run: _RunLog,
        warnings: list[str],
    ) -> Resource:
        already = run.messages.get(match.name)
        if already is not None:
            return already

        candidate = batch.latest_candidate(match.name)
        assert candidate is not None

        kind = message_kind(
            match.message_type or candidate.message_type,
            default=self._catalog.default_message_kind,
        )
        repo = self._catalog.repository(kind)
        path = None
        if service is not None and isinstance(repo, MessageRepository):
            path = repo.location_in_service(service, candidate.name)

        existing = repo.get(candidate.name)
        defaults = None
        if existing is None:
            defaults = {"markdown": self._default_markdown(kind, schema_path=candidate.file_name)}
        document = merge(
            existing.document if existing else None,
            self._message_document(candidate),
            defaults=defaults,
        )
        outcome = repo.write(document, path=path)
        self._record(outcome, run, warnings)

        repo.attach_file(candidate.name, candidate.file_name, candidate.schema_bytes)
        log.info(
            "schema_attached",
            kind=str(kind),
            id=candidate.name,
            version=candidate.version,
            file=candidate.file_name,
        )

        for historical in batch.historical_candidates(candidate.name):
            self._archive_historical(historical, kind, path=path, run=run)

        run.messages[candidate.name] = outcome.resource
        return outcome.resource

    def _archive_historical(
        self,
        candidate: MessageCandidate,
        kind: ResourceKind,
        *,
        path: Path | None,
        run: _RunLog,
    ) -> None:
        repo = self._catalog.repository(kind)
        document = merge(
            None,
            self._message_document(candidate),
            defaults={"markdown": self._default_markdown(kind, schema_path=candidate.file_name)},
        )
        snapshot = repo.write_archived(
            document, path=path, attachments={candidate.file_name: candidate.schema_bytes}
        )
        ref = _ref(kind, candidate.name, candidate.version)
        if snapshot is None:
            run.skipped.append(ref)
            log.info("historical_skipped", kind=str(kind), id=candidate.name, version=candidate.version)
            return
        run.archived.append(ref)
        log.info("historical_archived", kind=str(kind), id=candidate.name, version=candidate.version)

    def _link(self, service: Resource, direction: Direction, message: Resource) -> None:
        services = self._catalog.repository(ResourceKind.SERVICE)
        if services.add_to_parent(service.id, str(direction), message.ref()):
            log.info(
                "message_linked",
                service=service.id,
                direction=str(direction),
                id=message.id,
                version=message.version,
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, outcome: WriteOutcome, run: _RunLog, warnings: list[str]) -> None:
        resource = outcome.resource
        ref = _ref(resource.kind, resource.id, resource.version)

        if outcome.archived is not None:
            archived = outcome.archived
            run.archived.append(_ref(archived.kind, archived.id, archived.version))
            log.info(
                "resource_archived",
                kind=str(archived.kind),
                id=archived.id,
                version=archived.version,
            )
            self._dispatch_event(
                "post_archive",
                {
                    "kind": str(archived.kind),
                    "resource_id": archived.id,
                    "version": archived.version,
                    "path": str(archived.path),
                },
                warnings,
            )

        if outcome.action == WriteAction.UNCHANGED:
            run.unchanged.append(ref)
            log.info("resource_unchanged", **ref)
            return

        run.written.append({**ref, "action": str(outcome.action)})
        log.info("resource_written", action=str(outcome.action), **ref)
        self._dispatch_event(
            "post_write",
            {
                "kind": str(resource.kind),
                "resource_id": resource.id,
                "version": resource.version,
                "path": str(resource.path),
                "action": str(outcome.action),
            },
            warnings,
        )

    @staticmethod
    def _membership_entry(batch: DiscoveryBatch, match: FilterMatch) -> dict[str, Any]:
        """``{id, version}`` of the latest candidate, plus the rule's topic."""
        candidate = batch.latest_candidate(match.name)
        entry: dict[str, Any] = {"id": match.name}
        if candidate is not None:
            entry["version"] = candidate.version
        if match.topic is not None:
            entry["topic"] = match.topic
        return entry

    @staticmethod
    def _message_document(candidate: MessageCandidate) -> dict[str, Any]:
        return {
            "id": candidate.name,
            "version": candidate.version,
            "summary": candidate.summary,
            "schemaPath": candidate.file_name,
        }

    def _default_markdown(self, kind: ResourceKind, **context: Any) -> str:
        return render_default_markdown(kind, catalog_root=self._catalog.root, **context)


def _require(value: Any, message: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigurationError(message)
