"""Jinja2 loading for default narratives, with per-catalog overrides."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import BaseLoader, ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from catgen.domain.types import ResourceKind

TEMPLATE_GROUP = "markdown"


def build_template_environment(group: str, *, catalog_root: Path | None = None) -> Environment:
    """Build an environment that prefers catalog overrides over packaged defaults.

    Overrides live in ``.catgen/templates/`` inside the catalog, either
    namespaced by group (``.catgen/templates/markdown/``) or flat.
    """
    loaders: list[BaseLoader] = []
    if catalog_root is not None:
        template_root = catalog_root / ".catgen" / "templates"
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("catgen", f"templates/{group}"))
    return Environment(loader=ChoiceLoader(loaders), keep_trailing_newline=True)


def template_name_for(kind: ResourceKind) -> str:
    """Template file rendering the default narrative for *kind*."""
    if kind.is_message:
        return "message.md.j2"
    return f"{kind.value}.md.j2"


def render_default_markdown(
    kind: ResourceKind,
    *,
    catalog_root: Path | None = None,
    **context: Any,
) -> str:
    """Render the default markdown body for a new resource of *kind*."""
    env = build_template_environment(TEMPLATE_GROUP, catalog_root=catalog_root)
    template = env.get_template(template_name_for(kind))
    return template.render(kind=kind.value, **context)
