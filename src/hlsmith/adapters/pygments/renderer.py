"""Render token streams to HTML and themes to CSS with Pygments."""

from __future__ import annotations

from pygments import highlight
from pygments.formatters import HtmlFormatter

from .grammar import Grammar
from .theme import Theme


DEFAULT_CSS_CLASS = "highlight"


def render(
    grammar: Grammar,
    source: str | bytes,
    theme: Theme,
    *,
    css_class: str = DEFAULT_CSS_CLASS,
    inline_styles: bool = False,
) -> str:
    """Return the highlighted HTML fragment for ``source``.

    The fragment has a single ``<div>`` root wrapping ``<pre><code>``.
    """
    if isinstance(source, bytes):
        source = source.decode("utf-8")
    formatter = HtmlFormatter(
        style=theme.style,
        cssclass=css_class,
        noclasses=inline_styles,
        wrapcode=True,
    )
    return highlight(source, grammar.lexer(), formatter).strip()


def generate_stylesheet(theme: Theme, selector: str | None = None) -> str:
    """Return the CSS rules for ``theme`` scoped under ``selector``."""
    formatter = HtmlFormatter(style=theme.style)
    scope = selector if selector is not None else f".{DEFAULT_CSS_CLASS}"
    return formatter.get_style_defs(scope)


__all__ = ["DEFAULT_CSS_CLASS", "generate_stylesheet", "render"]
