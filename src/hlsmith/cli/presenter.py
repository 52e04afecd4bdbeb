"""Rich-aware presenters for CLI output and diagnostics."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from rich import box
from rich.table import Table

from .state import CLIState


def _format_path(path: Path | str) -> str:
    """Format a path relative to the current working directory for display."""
    resolved = Path(path).resolve()
    try:
        return str(resolved.relative_to(Path.cwd()))
    except ValueError:
        return str(resolved)


def _build_table(*, title: str | None, columns: Sequence[str]) -> Table:
    """Create a Rich table with the house style."""
    table = Table(
        title=title or None,
        box=box.SQUARE,
        show_edge=True,
        header_style="bold cyan",
    )
    for column in columns:
        table.add_column(column)
    return table


def present_patch_summary(
    state: CLIState,
    *,
    missing: set[str],
    failures: Sequence[tuple[Path, BaseException]] = (),
) -> None:
    """Summarise a patch run: documents touched, missing languages, failures."""
    patched = state.consume_events("document_patched")
    console = state.console

    highlighted = sum(int(entry.get("highlighted") or 0) for entry in patched)
    console.print(
        f"Patched {len(patched)} document{'s' if len(patched) != 1 else ''}, "
        f"highlighted {highlighted} block{'s' if highlighted != 1 else ''}.",
        highlight=False,
    )

    if missing:
        table = _build_table(title="Missing Languages", columns=("Language", "Documents"))
        for key in sorted(missing):
            documents = _documents_missing(patched, key)
            table.add_row(key, ", ".join(documents) if documents else "-")
        console.print(table)

    if failures:
        table = _build_table(title="Failed Documents", columns=("Document", "Error"))
        for path, exc in failures:
            table.add_row(_format_path(path), _first_line(exc))
        state.err_console.print(table)


def _documents_missing(patched: Sequence[Mapping[str, Any]], key: str) -> list[str]:
    documents: list[str] = []
    for entry in patched:
        if key in (entry.get("missing") or ()):
            documents.append(_format_path(entry.get("path") or ""))
    return documents


def _first_line(exc: BaseException) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


__all__ = ["present_patch_summary"]
