"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; :func:`render_result`
dispatches on ``result.op`` and unknown ops fall back to a generic
key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from catgen.output.console import create_console, get_output, style_for_kind

if TYPE_CHECKING:
    from rich.console import Console

    from catgen.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items if isinstance(item, dict))
    if "written" in result.data:
        counts = ", ".join(f"{key}={len(result.data.get(key, []))}" for key in _RECONCILE_KEYS)
        return f"OK: {result.op} ({counts})"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────

_RECONCILE_KEYS = ("written", "archived", "unchanged", "dropped", "skipped")


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="cat.ok")
    op = Text(f"  {result.op}", style="cat.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="cat.key")
    if key == "id":
        v = Text(str(value), style="cat.id")
    elif key == "path":
        v = Text(str(value), style="cat.path")
    elif key == "version":
        v = Text(str(value), style="cat.version")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "cat.error"), (f"  {result.op}", "cat.op"), f": {msg}"))

    if err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")

    # Storage failures keep what was committed before the error.
    if verbose and any(result.data.get(key) for key in _RECONCILE_KEYS):
        _render_changes(result, console)


# ── Reconcile ─────────────────────────────────────────────────────────


def _change_table(result: ServiceResult) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Change")
    table.add_column("Kind")
    table.add_column("ID", style="cat.id", no_wrap=True)
    table.add_column("Version", style="cat.version")

    for entry in result.data.get("written", []):
        kind = str(entry.get("kind", ""))
        table.add_row(
            str(entry.get("action", "written")),
            Text(kind, style=style_for_kind(kind)),
            str(entry.get("id", "")),
            str(entry.get("version", "")),
        )
    for key in ("archived", "unchanged", "skipped"):
        for entry in result.data.get(key, []):
            kind = str(entry.get("kind", ""))
            table.add_row(
                key,
                Text(kind, style=style_for_kind(kind)),
                str(entry.get("id", "")),
                str(entry.get("version", "")),
            )
    return table


def _render_changes(result: ServiceResult, console: Console) -> None:
    console.print(_change_table(result))
    dropped = result.data.get("dropped", [])
    if dropped:
        console.print(Text("  dropped:", style="cat.warning"), ", ".join(dropped))


def _render_reconcile(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in _RECONCILE_KEYS:
        _field(console, key, len(result.data.get(key, [])))
    if verbose or result.data.get("written") or result.data.get("archived"):
        console.print()
        _render_changes(result, console)
    if verbose:
        _render_meta(console, result)


# ── Resources ─────────────────────────────────────────────────────────


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    lines: list[str] = []
    for key, value in (d.get("frontmatter") or {}).items():
        if key in ("id", "version"):
            continue
        if isinstance(value, (dict, list)):
            value = _json.dumps(value, separators=(",", ":"))
        lines.append(f"{key}: {value}")
    if verbose and d.get("path"):
        lines.append(f"path: {d['path']}")

    content = "\n".join(lines)
    markdown = d.get("markdown") or ""
    if markdown.strip():
        content += f"\n\n{markdown.strip()}"

    title = f"{d.get('kind', '?')} {d.get('id', '?')} v{d.get('version', '?')}"
    if d.get("archived"):
        title += " (archived)"
    style = style_for_kind(str(d.get("kind", "")))
    console.print(Panel(Text(content), title=title, border_style=style or "dim", expand=False))


def _render_versions(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "id", result.data.get("id", ""))
    versions = result.data.get("versions", [])
    for version in versions:
        marker = "latest" if version == result.data.get("latest") else "archived"
        console.print(Text(f"  {version}", style="cat.version"), Text(f"  {marker}", style="dim"))


def _render_archive(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("kind", "id", "version", "path"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_generators(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Name", style="cat.id", no_wrap=True)
    table.add_column("Description")
    for item in result.data.get("items", []):
        table.add_row(str(item.get("name", "")), str(item.get("description", "")))
    console.print(table)
    console.print(f"\n{result.data.get('count', 0)} generators")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "reconcile": _render_reconcile,
    "generate": _render_reconcile,
    "show": _render_show,
    "versions": _render_versions,
    "archive": _render_archive,
    "list_generators": _render_generators,
}
