"""BeautifulSoup helpers for parsing and serialising HTML documents."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Any, cast

from bs4 import BeautifulSoup, FeatureNotFound, ParserRejectedMarkup
from bs4.element import PageElement, Tag
from lxml import etree

from hlsmith.core.exceptions import ParseError, SerializationError


logger = logging.getLogger(__name__)

DEFAULT_PARSER = "html.parser"
FALLBACK_PARSER = "html.parser"
SUPPORTED_PARSERS = ("html.parser", "lxml", "lxml-xml", "xml", "html5lib")


def parse_document(content: str, *, parser: str = DEFAULT_PARSER, strict: bool = False) -> BeautifulSoup:
    """Parse a full document, validating well-formedness first in strict mode."""
    if strict:
        check_well_formed(content)
    try:
        return BeautifulSoup(content, parser)
    except FeatureNotFound:
        logger.warning(
            "HTML parser backend '%s' is unavailable, falling back to '%s'.",
            parser,
            FALLBACK_PARSER,
        )
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise _parse_error(exc) from exc

    try:
        return BeautifulSoup(content, FALLBACK_PARSER)
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise _parse_error(exc) from exc


def parse_fragment(markup: str) -> list[PageElement]:
    """Parse a markup fragment and return its top-level nodes, detached."""
    try:
        fragment = BeautifulSoup(markup.strip(), FALLBACK_PARSER)
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise _parse_error(exc) from exc
    return [node.extract() for node in list(fragment.contents)]


def serialize(document: BeautifulSoup) -> str:
    """Serialise a document tree back to text."""
    try:
        return str(document)
    except (RecursionError, ValueError, TypeError, UnicodeError) as exc:
        raise SerializationError(f"Unable to serialise document: {exc}") from exc


def check_well_formed(content: str) -> None:
    """Raise :class:`ParseError` with a location when ``content`` is not well-formed."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
    try:
        etree.fromstring(content.encode("utf-8"), parser)
    except etree.XMLSyntaxError as exc:
        line, column = exc.position if exc.position else (exc.lineno, 0)
        raise ParseError(str(exc.msg or exc), line=line, column=column) from exc


def _parse_error(exc: BaseException) -> ParseError:
    line = getattr(exc, "lineno", None)
    column = getattr(exc, "offset", None)
    position = getattr(exc, "position", None)
    if line is None and isinstance(position, tuple) and len(position) == 2:
        line, column = position
    return ParseError(f"Unable to parse document: {exc}", line=line, column=column)


def class_attribute(element: Tag) -> str:
    """Return the raw ``class`` attribute of ``element`` as a string."""
    return " ".join(gather_classes(element.get("class")))


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return value.split()
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def first_child(element: Tag) -> PageElement | None:
    """Return the first node below ``element`` whatever its type."""
    return element.contents[0] if element.contents else None


__all__ = [
    "DEFAULT_PARSER",
    "SUPPORTED_PARSERS",
    "check_well_formed",
    "class_attribute",
    "first_child",
    "gather_classes",
    "parse_document",
    "parse_fragment",
    "serialize",
]
