"""Filesystem operations for the catalog tree.

INVARIANT: Files are truth. There is no index besides the directory
layout and the front matter of each ``index.mdx``.

Layout::

    {root}/{collection}/{resource}/index.mdx
    {root}/{collection}/{resource}/versioned/{version}/index.mdx
    {root}/domains/{domain}/services/{service}/events/{event}/index.mdx

Pure parsing/rendering lives in :mod:`catgen.domain.content`; this
module does the I/O, path resolution, and discovery.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from catgen.domain.content import join_document, parse_frontmatter, render_document
from catgen.domain.types import COLLECTIONS, VERSIONED_DIR

DOCUMENT_NAMES: tuple[str, ...] = ("index.mdx", "index.md")

COLLECTION_NAMES = frozenset(COLLECTIONS.values())

# Directories never descended into when discovering documents.
_SKIP_DIRS = frozenset({".catgen", ".git", "node_modules", "dist", ".eventcatalog-core"})

# Suffix of a document staged next to the live one before archival.
STAGED_SUFFIX = ".staged"


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_document(path: Path) -> dict[str, Any]:
    """Read a document file into a field map (front matter + ``markdown``)."""
    content = path.read_text(encoding="utf-8")
    fm, body = parse_frontmatter(content)
    return join_document(fm, body)


def write_document(path: Path, document: dict[str, Any]) -> None:
    """Render and write *document*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_document(document), encoding="utf-8")


def write_attachment(path: Path, content: bytes | str) -> None:
    """Write an attachment file verbatim."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)


def stage_document(path: Path, document: dict[str, Any]) -> Path:
    """Write *document* to a hidden sibling of *path* and return it.

    The staged file is swapped in with :func:`commit_staged`.
    """
    staged = path.with_name(f".{path.name}{STAGED_SUFFIX}")
    write_document(staged, document)
    return staged


def commit_staged(staged: Path, path: Path) -> None:
    """Atomically replace *path* with the *staged* document."""
    os.replace(staged, path)


def archive_directory(directory: Path, version: str) -> Path:
    """Move a resource's document and attachments into ``versioned/{version}``.

    Child collections (for example ``events/`` under a service), the
    ``versioned/`` directory itself, and staged documents stay in place.

    Raises:
        FileExistsError: If the archive already holds *version*.
        ValueError: If *version* would escape the resource directory.
    """
    target = safe_join(directory / VERSIONED_DIR, version)
    if target.exists():
        msg = f"Archive already holds version {version!r}: {target}"
        raise FileExistsError(msg)
    target.mkdir(parents=True)

    for entry in sorted(directory.iterdir()):
        if entry.name == VERSIONED_DIR:
            continue
        if entry.is_dir() and entry.name in COLLECTION_NAMES:
            continue
        if entry.name.endswith(STAGED_SUFFIX):
            continue
        shutil.move(str(entry), str(target / entry.name))
    return target


# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------


def safe_join(base: Path, *parts: str) -> Path:
    """Join *parts* onto *base*, refusing results outside *base*."""
    result = base.joinpath(*parts)
    if not result.resolve().is_relative_to(base.resolve()):
        msg = f"Path escapes {base}: {result}"
        raise ValueError(msg)
    return result


def resolve_resource_dir(catalog_root: Path, relative: str | Path) -> Path:
    """Resolve a catalog-relative resource directory.

    Leading separators are ignored so ``/services/x`` and ``services/x``
    name the same directory.
    """
    parts = [p for p in Path(relative).parts if p not in ("/", "\\")]
    return safe_join(catalog_root, *parts)


def document_in(directory: Path) -> Path | None:
    """Return the existing document file inside *directory*, if any."""
    for name in DOCUMENT_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def is_archived_document(path: Path) -> bool:
    """True for ``.../{resource}/versioned/{version}/index.mdx``."""
    parents = path.parents
    return len(parents) > 2 and parents[1].name == VERSIONED_DIR


def collection_of(path: Path) -> str | None:
    """Collection directory a document belongs to, or None if misplaced."""
    parents = path.parents
    index = 3 if is_archived_document(path) else 1
    if len(parents) <= index:
        return None
    name = parents[index].name
    return name if name in COLLECTION_NAMES else None


def iter_documents(
    catalog_root: Path,
    collection: str,
    *,
    archived: bool = False,
) -> Iterator[Path]:
    """Yield document files of *collection* anywhere in the catalog.

    Latest documents by default; archived snapshots with
    ``archived=True``. Results are sorted for deterministic lookups.
    """
    if not catalog_root.is_dir():
        return

    found: list[Path] = []
    for name in DOCUMENT_NAMES:
        for path in catalog_root.rglob(name):
            relative_parts = path.relative_to(catalog_root).parts
            if any(part in _SKIP_DIRS for part in relative_parts):
                continue
            if is_archived_document(path) != archived:
                continue
            if collection_of(path) != collection:
                continue
            found.append(path)
    yield from sorted(found)
