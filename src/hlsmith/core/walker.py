"""Recursive directory traversal applying the document patcher."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
from pathlib import Path

from .diagnostics import DiagnosticEmitter
from .dispatch import GrammarDispatcher
from .exceptions import DocumentProcessingError
from .patcher import PatchOptions, patch_file


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".html",)

ErrorHandler = Callable[[Path, DocumentProcessingError], None]


def walk_tree(
    root: Path,
    dispatcher: GrammarDispatcher,
    options: PatchOptions | None = None,
    *,
    recursive: bool = True,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    emitter: DiagnosticEmitter | None = None,
    on_error: ErrorHandler | None = None,
    write: bool = True,
) -> set[str]:
    """Patch every HTML file below ``root`` and return the missing languages.

    A failing document stops the walk unless ``on_error`` is given, in which
    case the handler receives the failure and the walk moves on. Files patched
    before a failure keep their changes.
    """
    suffixes = _normalise_extensions(extensions)
    missing = _walk(
        Path(root),
        dispatcher,
        options or PatchOptions(),
        recursive=recursive,
        suffixes=suffixes,
        emitter=emitter,
        on_error=on_error,
        write=write,
        visited=set(),
    )
    missing.discard("")
    return missing


def patch_path(
    path: Path,
    dispatcher: GrammarDispatcher,
    options: PatchOptions | None = None,
    *,
    recursive: bool = True,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    emitter: DiagnosticEmitter | None = None,
    on_error: ErrorHandler | None = None,
    write: bool = True,
) -> set[str]:
    """Patch a single file or walk a directory."""
    path = Path(path)
    if path.is_dir():
        return walk_tree(
            path,
            dispatcher,
            options,
            recursive=recursive,
            extensions=extensions,
            emitter=emitter,
            on_error=on_error,
            write=write,
        )
    try:
        report = patch_file(path, dispatcher, options, emitter=emitter, write=write)
    except DocumentProcessingError as exc:
        if on_error is None:
            raise
        on_error(path, exc)
        return set()
    return {key for key in report.missing if key}


def _walk(
    directory: Path,
    dispatcher: GrammarDispatcher,
    options: PatchOptions,
    *,
    recursive: bool,
    suffixes: frozenset[str],
    emitter: DiagnosticEmitter | None,
    on_error: ErrorHandler | None,
    write: bool,
    visited: set[Path],
) -> set[str]:
    missing: set[str] = set()
    # Symlinked directories may point back up the tree.
    visited.add(directory.resolve())
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            if recursive and entry.resolve() not in visited:
                missing |= _walk(
                    entry,
                    dispatcher,
                    options,
                    recursive=recursive,
                    suffixes=suffixes,
                    emitter=emitter,
                    on_error=on_error,
                    write=write,
                    visited=visited,
                )
            continue
        if entry.suffix.lower() not in suffixes:
            continue
        try:
            report = patch_file(entry, dispatcher, options, emitter=emitter, write=write)
        except DocumentProcessingError as exc:
            if on_error is None:
                raise
            on_error(entry, exc)
            continue
        missing |= report.missing
    logger.debug("Visited %s (%d missing so far)", directory, len(missing))
    return missing


def _normalise_extensions(extensions: Iterable[str]) -> frozenset[str]:
    normalised = set()
    for extension in extensions:
        value = extension.strip().lower()
        if not value:
            continue
        normalised.add(value if value.startswith(".") else f".{value}")
    return frozenset(normalised)


__all__ = ["DEFAULT_EXTENSIONS", "ErrorHandler", "patch_path", "walk_tree"]
