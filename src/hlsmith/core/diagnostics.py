"""Diagnostic abstractions shared across the highlighting pipeline."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import Any, NoReturn, Protocol, runtime_checkable

from .exceptions import DocumentProcessingError


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def ensure_emitter(emitter: DiagnosticEmitter | None) -> DiagnosticEmitter:
    """Return a usable emitter, defaulting to the logging implementation."""
    return emitter if emitter is not None else LoggingEmitter()


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "document_patched":
        path = data.get("path") or "<unknown>"
        highlighted = int(data.get("highlighted") or 0)
        missing = sorted(data.get("missing") or ())
        details: list[str] = [f"{highlighted} block{'s' if highlighted != 1 else ''}"]
        if missing:
            details.append(f"missing: {', '.join(missing)}")
        return f"Patched {path} ({'; '.join(details)})"

    if name == "document_failed":
        path = data.get("path") or "<unknown>"
        return f"Failed to patch {path}"

    return None


def raise_processing_error(
    emitter: DiagnosticEmitter | None,
    message: str,
    exc: Exception,
    *,
    path: Path | None = None,
) -> NoReturn:
    """Emit an error diagnostic before raising a document processing failure."""
    ensure_emitter(emitter).error(message, exc)
    error = DocumentProcessingError(message, path=path)
    error._hlsmith_logged = True  # type: ignore[attr-defined]  # noqa: SLF001
    raise error from exc


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "ensure_emitter",
    "format_event_message",
    "raise_processing_error",
]
