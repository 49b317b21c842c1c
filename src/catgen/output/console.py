"""Rich Console factory and theme for catgen output.

Consoles render to a StringIO buffer so every renderer keeps the
``render_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich disables color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CATGEN_THEME = Theme(
    {
        "cat.ok": "bold green",
        "cat.error": "bold red",
        "cat.warning": "bold yellow",
        "cat.op": "bold cyan",
        "cat.key": "dim",
        "cat.id": "bold blue",
        "cat.path": "dim",
        "cat.version": "magenta",
        "cat.kind.domain": "bold",
        "cat.kind.service": "cyan",
        "cat.kind.event": "green",
        "cat.kind.command": "yellow",
        "cat.kind.query": "blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=CATGEN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Rich style name for a resource kind (empty if unknown)."""
    style = f"cat.kind.{kind}"
    return style if kind in ("domain", "service", "event", "command", "query") else ""
