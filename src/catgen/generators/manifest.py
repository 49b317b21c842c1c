"""Manifest generator: discover messages from schema files on disk.

The manifest is a YAML file listing the domain, the services with their
filter rules, and the messages with the schema file each one documents::

    domain:
      id: orders
      version: 0.0.1
    services:
      - id: orders-service
        name: Orders Service
        version: 1.0.0
        sends:
          - prefix: order-
    messages:
      - id: order-created
        version: 1.0.0
        type: event
        schemaPath: events/order-created.json
        previous_versions:
          - version: 0.9.0
            schemaPath: events/order-created-0.9.json
    standalone:
      - inventory-updated

Options:
    source: Manifest path (relative paths resolve against the catalog).
    directory: Base for ``schemaPath`` entries (default: the manifest's
        directory; relative paths resolve against it).
    include_all_versions: Also archive ``previous_versions``.

Quote version strings such as ``"1.10"``; YAML reads them as numbers
otherwise.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from catgen.domain.errors import ConfigurationError
from catgen.domain.models import (
    DiscoveryBatch,
    DomainDescriptor,
    MessageCandidate,
    ServiceDescriptor,
)
from catgen.generators.base import Generator

logger = logging.getLogger(__name__)


def _new_yaml() -> YAML:
    return YAML(typ="safe")


class ManifestGenerator(Generator):
    """Reads a local YAML manifest and the schema files it references."""

    name = "manifest"
    description = "Messages and services described by a local YAML manifest"

    def discover(self, options: Mapping[str, Any], *, catalog_root: Path) -> DiscoveryBatch:
        source = Path(str(self.require_option(options, "source")))
        manifest_path = self._resolve(source, catalog_root)
        if not manifest_path.is_file():
            msg = f"Manifest not found: {manifest_path}"
            raise ConfigurationError(msg)

        manifest = self._load(manifest_path)
        directory = options.get("directory")
        schema_root = (
            self._resolve(Path(str(directory)), manifest_path.parent)
            if directory
            else manifest_path.parent
        )
        include_all = self.flag_option(options, "include_all_versions")

        standalone = manifest.get("standalone") or []
        if not isinstance(standalone, list):
            msg = f"{manifest_path}: 'standalone' must be a list of message ids"
            raise ConfigurationError(msg)

        try:
            candidates: list[MessageCandidate] = []
            for entry in self._entries(manifest, "messages"):
                candidates.extend(self._candidates(entry, schema_root, include_all=include_all))
            domain = manifest.get("domain")
            batch = DiscoveryBatch(
                generator=self.name,
                domain=DomainDescriptor.model_validate(domain) if domain else None,
                services=[
                    ServiceDescriptor.model_validate(s)
                    for s in self._entries(manifest, "services")
                ],
                candidates=candidates,
                messages=[str(name) for name in standalone],
            )
        except ValidationError as exc:
            msg = f"Invalid manifest {manifest_path}: {exc}"
            raise ConfigurationError(msg) from exc

        logger.info(
            "Manifest %s: %d services, %d message candidates",
            manifest_path,
            len(batch.services),
            len(batch.candidates),
        )
        return batch

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve(path: Path, base: Path) -> Path:
        return path if path.is_absolute() else base / path

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        try:
            data = _new_yaml().load(path.read_text(encoding="utf-8"))
        except (OSError, YAMLError) as exc:
            msg = f"Cannot read manifest {path}: {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Manifest {path} must be a mapping"
            raise ConfigurationError(msg)
        return data

    @staticmethod
    def _entries(manifest: dict[str, Any], key: str) -> list[dict[str, Any]]:
        entries = manifest.get(key) or []
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            msg = f"Manifest {key!r} must be a list of mappings"
            raise ConfigurationError(msg)
        return entries

    def _candidates(
        self, entry: dict[str, Any], schema_root: Path, *, include_all: bool
    ) -> list[MessageCandidate]:
        message_id = entry.get("id")
        if not message_id:
            msg = f"Manifest message without an id: {entry!r}"
            raise ConfigurationError(msg)

        found = [
            self._candidate(
                str(message_id), entry, schema_root, message_type=entry.get("type"), latest=True
            )
        ]
        if include_all:
            for previous in entry.get("previous_versions") or []:
                if not isinstance(previous, dict):
                    msg = f"Message {message_id!r}: previous_versions entries must be mappings"
                    raise ConfigurationError(msg)
                found.append(
                    self._candidate(
                        str(message_id),
                        previous,
                        schema_root,
                        message_type=entry.get("type"),
                        latest=False,
                    )
                )
        return found

    @staticmethod
    def _candidate(
        message_id: str,
        entry: dict[str, Any],
        schema_root: Path,
        *,
        message_type: str | None,
        latest: bool,
    ) -> MessageCandidate:
        schema_path = entry.get("schemaPath")
        version = entry.get("version")
        if not schema_path or version is None:
            msg = f"Message {message_id!r} needs both 'version' and 'schemaPath'"
            raise ConfigurationError(msg)

        schema_file = schema_root / str(schema_path)
        try:
            payload = schema_file.read_bytes()
        except OSError as exc:
            msg = f"Schema for {message_id!r} (v{version}) not readable: {schema_file}"
            raise ConfigurationError(msg) from exc

        return MessageCandidate(
            name=message_id,
            file_name=schema_file.name,
            schema=payload,
            version=version,
            message_type=message_type,
            latest=latest,
            summary=entry.get("summary"),
        )
