"""Build-time syntax highlighting for static HTML documents."""

from __future__ import annotations

from hlsmith.adapters.pygments import (
    Grammar,
    Theme,
    compile_textmate_grammar,
    generate_stylesheet,
    load_grammar,
    load_theme,
    render,
)
from hlsmith.core.classify import (
    UNCLASSIFIED,
    Classification,
    Classifier,
    PrefixClassifier,
    Resolved,
    Unclassified,
    string_classifier,
)
from hlsmith.core.config import HighlightConfig, LanguageConfig, load_config
from hlsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from hlsmith.core.dispatch import GrammarDispatcher, Unresolved
from hlsmith.core.exceptions import (
    ConfigError,
    DocumentProcessingError,
    GrammarLoadError,
    HighlightingError,
    ParseError,
    SerializationError,
    ThemeLoadError,
)
from hlsmith.core.highlighter import Highlighter, SupportsHighlight
from hlsmith.core.patcher import PatchOptions, PatchReport, patch_file, patch_markup
from hlsmith.core.walker import patch_path, walk_tree
from hlsmith.version import get_version


__version__ = get_version()

__all__ = [
    "UNCLASSIFIED",
    "Classification",
    "Classifier",
    "ConfigError",
    "DiagnosticEmitter",
    "DocumentProcessingError",
    "Grammar",
    "GrammarDispatcher",
    "GrammarLoadError",
    "HighlightConfig",
    "HighlightingError",
    "Highlighter",
    "LanguageConfig",
    "LoggingEmitter",
    "NullEmitter",
    "ParseError",
    "PatchOptions",
    "PatchReport",
    "PrefixClassifier",
    "Resolved",
    "SerializationError",
    "SupportsHighlight",
    "Theme",
    "ThemeLoadError",
    "Unclassified",
    "Unresolved",
    "__version__",
    "compile_textmate_grammar",
    "generate_stylesheet",
    "get_version",
    "load_config",
    "load_grammar",
    "load_theme",
    "patch_file",
    "patch_markup",
    "patch_path",
    "render",
    "string_classifier",
    "walk_tree",
]
