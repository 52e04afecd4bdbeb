"""Patch code blocks of one HTML document in place."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import tempfile

from bs4 import BeautifulSoup
from bs4.element import Tag

from hlsmith.adapters.html import (
    DEFAULT_PARSER,
    class_attribute,
    first_child,
    parse_document,
    parse_fragment,
    serialize,
)

from .diagnostics import DiagnosticEmitter, ensure_emitter, raise_processing_error
from .dispatch import GrammarDispatcher, Unresolved
from .exceptions import ParseError, SerializationError


logger = logging.getLogger(__name__)

EXCERPT_CONTEXT = 1


@dataclass(frozen=True, slots=True)
class PatchOptions:
    """Options controlling how documents are parsed and scanned."""

    block_tag: str = "pre"
    parser: str = DEFAULT_PARSER
    strict: bool = False


@dataclass(slots=True)
class PatchReport:
    """Outcome of patching one document."""

    path: Path | None = None
    highlighted: int = 0
    skipped: int = 0
    unclassified: int = 0
    missing: set[str] = field(default_factory=set)


def collect_candidates(document: BeautifulSoup, block_tag: str) -> list[Tag]:
    """Return block elements in document order without descending into them."""
    candidates: list[Tag] = []
    stack: list[Tag] = [document]
    while stack:
        node = stack.pop()
        if node is not document and node.name == block_tag:
            candidates.append(node)
            continue
        children = [child for child in node.contents if isinstance(child, Tag)]
        stack.extend(reversed(children))
    return candidates


def patch_markup(
    content: str,
    dispatcher: GrammarDispatcher,
    options: PatchOptions | None = None,
) -> tuple[str, PatchReport]:
    """Highlight every eligible code block of ``content``.

    Candidates are collected in a read-only pass before any replacement so
    that substituted fragments are never visited again.
    """
    options = options or PatchOptions()
    report = PatchReport()
    document = parse_document(content, parser=options.parser, strict=options.strict)

    eligible: list[tuple[Tag, Tag]] = []
    for candidate in collect_candidates(document, options.block_tag):
        code = first_child(candidate)
        if not isinstance(code, Tag):
            report.skipped += 1
            continue
        eligible.append((candidate, code))

    for candidate, code in eligible:
        outcome = dispatcher.dispatch(class_attribute(candidate))
        if isinstance(outcome, Unresolved):
            if outcome.reportable and outcome.key:
                report.missing.add(outcome.key)
            else:
                report.unclassified += 1
            continue

        markup = outcome.highlight(code.get_text())
        nodes = parse_fragment(markup)
        if nodes:
            candidate.replace_with(*nodes)
        else:
            candidate.extract()
        report.highlighted += 1

    return serialize(document), report


def patch_file(
    path: Path,
    dispatcher: GrammarDispatcher,
    options: PatchOptions | None = None,
    *,
    emitter: DiagnosticEmitter | None = None,
    write: bool = True,
) -> PatchReport:
    """Patch ``path`` in place and return its report.

    Every failure is logged with its location and re-raised as
    :class:`~hlsmith.core.exceptions.DocumentProcessingError`.
    """
    emitter = ensure_emitter(emitter)
    content: str | None = None
    try:
        content = path.read_text(encoding="utf-8")
        patched, report = patch_markup(content, dispatcher, options)
        if write:
            write_atomic(path, patched)
    except Exception as exc:
        emitter.event("document_failed", {"path": str(path)})
        raise_processing_error(emitter, describe_failure(path, exc, content), exc, path=path)

    report.path = path
    logger.debug("Patched %s: %d highlighted, %d skipped", path, report.highlighted, report.skipped)
    emitter.event(
        "document_patched",
        {"path": str(path), "highlighted": report.highlighted, "missing": sorted(report.missing)},
    )
    return report


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without leaving a partial file behind."""
    try:
        data = content.encode("utf-8")
    except UnicodeError as exc:
        raise SerializationError(f"Unable to encode '{path}': {exc}") from exc

    descriptor, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(descriptor, "wb") as handle:
            handle.write(data)
        if path.exists():
            os.chmod(temp_name, path.stat().st_mode & 0o7777)
        os.replace(temp_name, path)
    except OSError as exc:
        Path(temp_name).unlink(missing_ok=True)
        raise SerializationError(f"Unable to write '{path}': {exc}") from exc


def describe_failure(path: Path, exc: BaseException, content: str | None) -> str:
    """Return a diagnostic naming the file, location, and surrounding text."""
    location = exc.location if isinstance(exc, ParseError) else None
    if location is None:
        return f"{path}: {type(exc).__name__}: {exc}"

    line, column = location
    message = f"{path}:{line}:{column}: {type(exc).__name__}: {exc}"
    excerpt = format_excerpt(content, line, column) if content is not None else ""
    return f"{message}\n{excerpt}" if excerpt else message


def format_excerpt(content: str, line: int, column: int, *, context: int = EXCERPT_CONTEXT) -> str:
    """Return the lines around ``line`` with a caret under ``column``."""
    lines = content.splitlines()
    if not 1 <= line <= len(lines):
        return ""
    start = max(1, line - context)
    end = min(len(lines), line + context)
    width = len(str(end))
    rendered: list[str] = []
    for number in range(start, end + 1):
        rendered.append(f"{number:>{width}} | {lines[number - 1]}")
        if number == line:
            rendered.append(f"{'':>{width}} | {' ' * max(column - 1, 0)}^")
    return "\n".join(rendered)


__all__ = [
    "PatchOptions",
    "PatchReport",
    "collect_candidates",
    "describe_failure",
    "format_excerpt",
    "patch_file",
    "patch_markup",
    "write_atomic",
]
