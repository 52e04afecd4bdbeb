"""Pygments-backed grammar, theme, and rendering adapters."""

from __future__ import annotations

from .grammar import PYGMENTS_PREFIX, Grammar, compile_textmate_grammar, load_grammar
from .renderer import DEFAULT_CSS_CLASS, generate_stylesheet, render
from .scopes import scope_to_token
from .theme import THEME_SUFFIXES, Theme, load_theme, theme_from_mapping


__all__ = [
    "DEFAULT_CSS_CLASS",
    "PYGMENTS_PREFIX",
    "THEME_SUFFIXES",
    "Grammar",
    "Theme",
    "compile_textmate_grammar",
    "generate_stylesheet",
    "load_grammar",
    "load_theme",
    "render",
    "scope_to_token",
    "theme_from_mapping",
]
