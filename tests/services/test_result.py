"""Tests for ServiceResult and ServiceError."""

import json

import pytest

from catgen.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="reconcile", data={"written": []})
        assert result.ok is True
        assert result.op == "reconcile"
        assert result.data == {"written": []}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="NOT_FOUND", message="No event 'x' in catalog")
        result = ServiceResult(ok=False, op="show", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="reconcile",
            data={"written": [{"kind": "event", "id": "a", "version": "1"}]},
            meta={"generator": "manifest"},
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["written"][0]["id"] == "a"
        assert parsed["meta"]["generator"] == "manifest"

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(Exception):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(
            code="STORAGE_ERROR",
            message="Failed to archive",
            detail={"kind": "event", "id": "a", "version": "1", "path": None},
        )
        assert error.detail["kind"] == "event"
