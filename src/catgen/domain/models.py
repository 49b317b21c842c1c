"""Resource and discovery models.

``Resource`` is what the catalog stores; the descriptor models are what
generators hand to the reconciliation service. All models are frozen.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from catgen.domain.content import MARKDOWN_KEY
from catgen.domain.types import ResourceKind


def _as_version(value: Any) -> Any:
    """Versions are opaque strings; YAML/TOML may hand us numbers."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


# ---------------------------------------------------------------------------
# Stored resources
# ---------------------------------------------------------------------------


class ResourceRef(BaseModel):
    """``{id, version}`` pair stored in membership lists."""

    model_config = {"frozen": True}

    id: str
    version: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)

    def to_frontmatter(self) -> dict[str, str]:
        ref = {"id": self.id}
        if self.version is not None:
            ref["version"] = self.version
        return ref

    @classmethod
    def from_value(cls, value: Any) -> ResourceRef | None:
        """Parse a membership entry read from disk; ``None`` if malformed."""
        if isinstance(value, str):
            return cls(id=value)
        if isinstance(value, dict) and value.get("id"):
            return cls(id=str(value["id"]), version=_as_version(value.get("version")))
        return None


class Resource(BaseModel):
    """A catalog entity at one version.

    Attributes:
        kind: Resource kind.
        document: Field map (front matter keys plus ``markdown``).
        path: Document file on disk, when loaded from the catalog.
        archived: True when loaded from a ``versioned/`` snapshot.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    kind: ResourceKind
    document: dict[str, Any]
    path: Path | None = None
    archived: bool = False

    @property
    def id(self) -> str:
        return str(self.document["id"])

    @property
    def version(self) -> str | None:
        return _as_version(self.document.get("version"))

    @property
    def name(self) -> str:
        return str(self.document.get("name") or self.id)

    @property
    def markdown(self) -> str:
        return str(self.document.get(MARKDOWN_KEY) or "")

    @property
    def directory(self) -> Path | None:
        return self.path.parent if self.path is not None else None

    def refs(self, field: str) -> list[ResourceRef]:
        """Membership list *field* parsed into refs (malformed entries skipped)."""
        raw = self.document.get(field) or []
        if not isinstance(raw, list):
            return []
        refs = [ResourceRef.from_value(item) for item in raw]
        return [ref for ref in refs if ref is not None]

    def ref(self) -> ResourceRef:
        return ResourceRef(id=self.id, version=self.version)


class WriteAction(StrEnum):
    """What a repository write did."""

    CREATED = "created"
    UPDATED = "updated"
    VERSIONED = "versioned"
    UNCHANGED = "unchanged"


class WriteOutcome(BaseModel):
    """Result of :meth:`ResourceRepository.write`."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    action: WriteAction
    resource: Resource
    archived: Resource | None = None


# ---------------------------------------------------------------------------
# Discovery input (produced by generators)
# ---------------------------------------------------------------------------


class DomainDescriptor(BaseModel):
    """Domain the run's services belong to."""

    model_config = {"frozen": True}

    id: str
    name: str | None = None
    version: str
    summary: str | None = None
    owners: list[str] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)


class ServiceDescriptor(BaseModel):
    """Service with filter rules routing candidates into sends/receives.

    An explicit message list is expressed with exact-name rules
    (a plain string or a list of strings).
    """

    model_config = {"frozen": True}

    id: str
    version: str
    name: str | None = None
    summary: str | None = None
    owners: list[str] = Field(default_factory=list)
    sends: list[Any] = Field(default_factory=list)
    receives: list[Any] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)


class MessageCandidate(BaseModel):
    """A discovered message with its raw schema payload."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str
    file_name: str
    schema_bytes: bytes = Field(alias="schema")
    version: str
    message_type: str | None = None
    latest: bool = True
    summary: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _as_version(value)


class DiscoveryBatch(BaseModel):
    """Everything one generator run discovered, fully materialized."""

    model_config = {"frozen": True}

    generator: str = "unknown"
    domain: DomainDescriptor | None = None
    services: list[ServiceDescriptor] = Field(default_factory=list)
    candidates: list[MessageCandidate] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)

    def candidate_names(self) -> list[str]:
        """Distinct candidate names in emission order."""
        seen: dict[str, None] = {}
        for candidate in self.candidates:
            seen.setdefault(candidate.name, None)
        return list(seen)

    def latest_candidate(self, name: str) -> MessageCandidate | None:
        """The candidate installed as latest for *name*.

        Only candidates flagged ``latest`` qualify; a name with nothing but
        archive-only candidates has none.
        """
        flagged = [c for c in self.candidates if c.name == name and c.latest]
        return flagged[-1] if flagged else None

    def historical_candidates(self, name: str) -> list[MessageCandidate]:
        """Candidates for *name* that are archive-only versions."""
        return [c for c in self.candidates if c.name == name and not c.latest]
