"""Configuration models for highlighting runs.

HighlightConfig

`theme` (`str`)
: Default theme applied to every language. Either a Pygments style name
  (`monokai`, `friendly`, ...) or a path to a TextMate, VS Code, or plain
  style file.

`css_class` (`str`)
: Class set on the `<div>` wrapping each highlighted block. The generated
  stylesheet is scoped to it.

`inline_styles` (`bool`)
: Emit `style` attributes instead of classes so no stylesheet is needed.

`parser` (`str`)
: BeautifulSoup backend used to parse documents (`html.parser`, `lxml`,
  `lxml-xml`, `html5lib`).

`strict` (`bool`)
: Reject documents that are not well-formed XML before patching them.

`block_tag` (`str`)
: Element holding a code sample. Its first child must be an element for the
  block to be highlighted.

`recursive` (`bool`)
: Descend into subdirectories.

`extensions` (`list[str]`)
: File suffixes treated as HTML documents.

`class_prefixes` (`list[str]`)
: Class prefixes naming a language, e.g. `language-python`.

`languages` (`dict[str, LanguageConfig]`)
: Registered languages keyed by language identifier.

LanguageConfig

`grammar` (`str`)
: Grammar source: `pygments:<alias>`, a lexer module (`lexer.py[:Class]`), or
  a TextMate grammar file. Relative paths resolve against the configuration
  file directory.

`theme` (`str | None`)
: Theme override for this language.

`aliases` (`list[str]`)
: Additional class suffixes mapped to this language.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from hlsmith.adapters.html import SUPPORTED_PARSERS
from hlsmith.adapters.pygments import DEFAULT_CSS_CLASS, PYGMENTS_PREFIX, THEME_SUFFIXES, Theme, load_theme

from .classify import DEFAULT_CLASS_PREFIXES, PrefixClassifier, alias_table
from .dispatch import GrammarDispatcher
from .exceptions import ConfigError
from .highlighter import Highlighter
from .patcher import PatchOptions
from .walker import DEFAULT_EXTENSIONS


class LanguageConfig(BaseModel):
    """Grammar binding for one language key."""

    model_config = ConfigDict(extra="forbid")

    grammar: str
    theme: str | None = None
    aliases: list[str] = Field(default_factory=list)


class HighlightConfig(BaseModel):
    """Settings for a highlighting run."""

    model_config = ConfigDict(extra="forbid")

    theme: str = "default"
    css_class: str = DEFAULT_CSS_CLASS
    inline_styles: bool = False
    parser: str = "html.parser"
    strict: bool = False
    block_tag: str = "pre"
    recursive: bool = True
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    class_prefixes: list[str] = Field(default_factory=lambda: list(DEFAULT_CLASS_PREFIXES))
    languages: dict[str, LanguageConfig] = Field(default_factory=dict)
    base_dir: Path | None = Field(default=None, exclude=True)

    @field_validator("parser")
    @classmethod
    def _known_parser(cls, value: str) -> str:
        if value not in SUPPORTED_PARSERS:
            raise ValueError(f"unknown parser '{value}', expected one of {', '.join(SUPPORTED_PARSERS)}")
        return value

    @field_validator("languages")
    @classmethod
    def _non_empty_keys(cls, value: dict[str, LanguageConfig]) -> dict[str, LanguageConfig]:
        for key in value:
            if not key.strip():
                raise ValueError("language keys must not be empty")
        return value

    def resolve_source(self, value: str) -> str:
        """Resolve a grammar or theme path relative to :attr:`base_dir`."""
        if value.startswith(PYGMENTS_PREFIX) or self.base_dir is None:
            return value
        candidate = Path(value)
        if candidate.is_absolute():
            return value
        resolved = self.base_dir / candidate
        if resolved.exists() or candidate.suffix:
            return str(resolved)
        return value

    def patch_options(self) -> PatchOptions:
        return PatchOptions(block_tag=self.block_tag, parser=self.parser, strict=self.strict)

    def build_classifier(self) -> PrefixClassifier:
        try:
            aliases = alias_table({key: lang.aliases for key, lang in self.languages.items()})
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return PrefixClassifier(prefixes=tuple(self.class_prefixes), aliases=aliases)

    def build_registry(self) -> dict[str, Highlighter]:
        """Load one highlighter per configured language.

        Each highlighter receives its own theme value; the default theme is
        loaded once and shared read-only.
        """
        default_theme = self.load_default_theme()
        registry: dict[str, Highlighter] = {}
        for key, language in self.languages.items():
            theme: Theme | str = default_theme
            if language.theme:
                theme = self._theme_spec(language.theme)
            registry[key] = Highlighter.load(
                self.resolve_source(language.grammar),
                theme,
                css_class=self.css_class,
                inline_styles=self.inline_styles,
            )
        return registry

    def build_dispatcher(self) -> GrammarDispatcher:
        return GrammarDispatcher(self.build_registry(), self.build_classifier())

    def load_default_theme(self) -> Theme:
        return load_theme(self._theme_spec(self.theme))

    def _theme_spec(self, value: str) -> str:
        if Path(value).suffix.lower() in THEME_SUFFIXES:
            return self.resolve_source(value)
        return value


def load_config(path: Path) -> HighlightConfig:
    """Load and validate a YAML configuration file."""
    try:
        raw = path.read_text(encoding="utf-8")
        payload: Any = yaml.safe_load(raw) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Unable to read configuration '{path}': {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Configuration '{path}' must contain a mapping.")
    try:
        config = HighlightConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration '{path}':\n{exc}") from exc
    config.base_dir = path.resolve().parent
    return config


__all__ = ["HighlightConfig", "LanguageConfig", "load_config"]
