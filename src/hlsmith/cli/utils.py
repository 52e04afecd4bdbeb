"""Utility helpers shared across CLI commands."""

from __future__ import annotations

from pathlib import Path


def write_output_file(target: Path, content: str) -> None:
    """Persist generated content to disk, creating parent directories as needed."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - filesystem errors
        raise OSError(f"Failed to write output to '{target}': {exc}") from exc


__all__ = ["write_output_file"]
