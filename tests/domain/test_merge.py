"""Tests for the merge policy."""

from __future__ import annotations

from catgen.domain.merge import merge


class TestIdentityFields:
    def test_discovered_identity_wins(self) -> None:
        existing = {"id": "svc", "name": "Old", "version": "1.0.0", "sends": [{"id": "a"}]}
        discovered = {"id": "svc", "name": "New", "version": "2.0.0", "sends": [{"id": "b"}]}
        merged = merge(existing, discovered)
        assert merged["name"] == "New"
        assert merged["version"] == "2.0.0"
        assert merged["sends"] == [{"id": "b"}]

    def test_none_identity_keeps_existing(self) -> None:
        merged = merge({"id": "svc", "name": "Kept", "version": "1"}, {"id": "svc", "name": None, "version": "1"})
        assert merged["name"] == "Kept"

    def test_name_defaults_to_id(self) -> None:
        merged = merge(None, {"id": "order-created", "version": "1"})
        assert merged["name"] == "order-created"


class TestNarrativeFields:
    def test_existing_narrative_survives(self) -> None:
        existing = {"id": "e", "version": "1", "markdown": "Hand written", "summary": "Mine"}
        discovered = {"id": "e", "version": "1", "summary": "From source"}
        merged = merge(existing, discovered, defaults={"markdown": "Template"})
        assert merged["markdown"] == "Hand written"
        assert merged["summary"] == "Mine"

    def test_discovered_narrative_when_existing_missing(self) -> None:
        merged = merge({"id": "e", "version": "1"}, {"id": "e", "version": "1", "summary": "From source"})
        assert merged["summary"] == "From source"

    def test_defaults_fill_gaps(self) -> None:
        merged = merge(None, {"id": "e", "version": "1"}, defaults={"markdown": "Template"})
        assert merged["markdown"] == "Template"

    def test_blank_existing_markdown_is_missing(self) -> None:
        merged = merge({"id": "e", "markdown": "  \n"}, {"id": "e", "version": "1"}, defaults={"markdown": "T"})
        assert merged["markdown"] == "T"

    def test_narrative_carried_across_versions(self) -> None:
        existing = {"id": "e", "version": "1.0.0", "markdown": "Notes", "owners": ["team-a"]}
        merged = merge(existing, {"id": "e", "version": "2.0.0"})
        assert merged["version"] == "2.0.0"
        assert merged["markdown"] == "Notes"
        assert merged["owners"] == ["team-a"]


class TestUnion:
    def test_unknown_fields_union(self) -> None:
        existing = {"id": "d", "version": "1", "services": [{"id": "s", "version": "1"}], "custom": 1}
        discovered = {"id": "d", "version": "1", "extra": "x"}
        merged = merge(existing, discovered)
        assert merged["services"] == [{"id": "s", "version": "1"}]
        assert merged["custom"] == 1
        assert merged["extra"] == "x"

    def test_inputs_not_mutated(self) -> None:
        existing = {"id": "d", "version": "1"}
        discovered = {"id": "d", "version": "2"}
        merge(existing, discovered)
        assert existing == {"id": "d", "version": "1"}
        assert discovered == {"id": "d", "version": "2"}
