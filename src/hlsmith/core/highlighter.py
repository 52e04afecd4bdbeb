"""Highlighter binding one grammar and one theme."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from hlsmith.adapters.pygments import (
    DEFAULT_CSS_CLASS,
    Grammar,
    Theme,
    generate_stylesheet,
    load_grammar,
    load_theme,
    render,
)


@runtime_checkable
class SupportsHighlight(Protocol):
    """Anything able to turn raw source text into highlighted markup."""

    def highlight(self, text: str) -> str: ...


class Highlighter:
    """Reusable renderer for one language.

    Instances are immutable. A highlighter built without a grammar can only
    produce CSS through :meth:`css_text`.
    """

    __slots__ = ("_css_class", "_grammar", "_inline_styles", "_theme")

    def __init__(
        self,
        theme: Theme,
        grammar: Grammar | None = None,
        *,
        css_class: str = DEFAULT_CSS_CLASS,
        inline_styles: bool = False,
    ) -> None:
        self._theme = theme
        self._grammar = grammar
        self._css_class = css_class
        self._inline_styles = inline_styles

    @classmethod
    def load(
        cls,
        grammar: str | Path | None,
        theme: str | Path | Theme,
        *,
        css_class: str = DEFAULT_CSS_CLASS,
        inline_styles: bool = False,
    ) -> Highlighter:
        """Load the grammar and resolve the theme, then bind them together.

        Raises :class:`~hlsmith.core.exceptions.GrammarLoadError` or
        :class:`~hlsmith.core.exceptions.ThemeLoadError` when either cannot
        be loaded.
        """
        loaded_grammar = load_grammar(grammar) if grammar is not None else None
        loaded_theme = theme if isinstance(theme, Theme) else load_theme(theme)
        return cls(
            loaded_theme,
            loaded_grammar,
            css_class=css_class,
            inline_styles=inline_styles,
        )

    @property
    def grammar(self) -> Grammar | None:
        return self._grammar

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def css_class(self) -> str:
        return self._css_class

    def highlight(self, text: str) -> str:
        """Return highlighted markup for ``text``."""
        if self._grammar is None:
            raise TypeError("This highlighter was built without a grammar and only serves CSS.")
        return render(
            self._grammar,
            text,
            self._theme,
            css_class=self._css_class,
            inline_styles=self._inline_styles,
        )

    def css_text(self, selector: str | None = None) -> str:
        """Return the stylesheet for the bound theme."""
        return generate_stylesheet(self._theme, selector or f".{self._css_class}")

    def __repr__(self) -> str:
        grammar = self._grammar.name if self._grammar is not None else None
        return f"Highlighter(grammar={grammar!r}, theme={self._theme.name!r})"


__all__ = ["Highlighter", "SupportsHighlight"]
