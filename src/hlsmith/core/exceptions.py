"""Custom exception hierarchy for the highlighting pipeline."""

from __future__ import annotations

from pathlib import Path


class HighlightingError(RuntimeError):
    """Base exception for highlighting failures."""


class GrammarLoadError(HighlightingError):
    """Raised when a grammar definition is missing or malformed."""


class ThemeLoadError(HighlightingError):
    """Raised when a theme name or path cannot be resolved."""


class ConfigError(HighlightingError):
    """Raised when a configuration file cannot be loaded or validated."""


class ParseError(HighlightingError):
    """Raised when an HTML document cannot be parsed."""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column

    @property
    def location(self) -> tuple[int, int] | None:
        """Return ``(line, column)`` when the parser reported one."""
        if self.line is None:
            return None
        return self.line, self.column or 0


class SerializationError(HighlightingError):
    """Raised when a patched document cannot be serialised or written."""


class DocumentProcessingError(HighlightingError):
    """Raised when a document fails anywhere between parsing and writing."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConfigError",
    "DocumentProcessingError",
    "GrammarLoadError",
    "HighlightingError",
    "ParseError",
    "SerializationError",
    "ThemeLoadError",
    "exception_hint",
    "exception_messages",
]
