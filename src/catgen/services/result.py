"""ServiceResult and ServiceError: the contract every service returns.

INVARIANT: All service-layer methods return ServiceResult. The CLI and
any embedding caller consume this type; exceptions stop at the service.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"reconcile"``).
        data: Operation payload. On failure it still carries whatever
            was committed before the error.
        warnings: Non-fatal issues (plugin failures, skipped records).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (counts, generator name).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
