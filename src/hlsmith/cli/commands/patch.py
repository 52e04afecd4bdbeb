"""Implementation of the `hlsmith patch` command."""

from __future__ import annotations

from pathlib import Path

import typer

from hlsmith.adapters.pygments import PYGMENTS_PREFIX, THEME_SUFFIXES, generate_stylesheet
from hlsmith.core.config import HighlightConfig, LanguageConfig, load_config
from hlsmith.core.exceptions import (
    ConfigError,
    DocumentProcessingError,
    GrammarLoadError,
    ThemeLoadError,
)
from hlsmith.core.walker import patch_path

from .._options import (
    ConfigOption,
    CssClassOption,
    CssOutputOption,
    DryRunOption,
    ExtensionOption,
    GrammarOption,
    KeepGoingOption,
    ParserOption,
    PrefixOption,
    RecursiveOption,
    RootArgument,
    StrictOption,
    ThemeOption,
)
from ..presenter import present_patch_summary
from ..state import CliEmitter, emit_error, emit_warning, get_cli_state
from ..utils import write_output_file


def parse_grammar_bindings(values: list[str]) -> dict[str, str]:
    """Parse ``KEY=GRAMMAR`` pairs given on the command line."""
    bindings: dict[str, str] = {}
    for value in values:
        key, sep, grammar = value.partition("=")
        key, grammar = key.strip(), grammar.strip()
        if not sep or not key or not grammar:
            raise typer.BadParameter(
                f"Expected KEY=GRAMMAR, got '{value}'.", param_hint="--grammar"
            )
        bindings[key] = grammar
    return bindings


def _from_cwd(value: str) -> str:
    # Command-line paths are relative to where hlsmith runs, not to --config.
    if value.startswith(PYGMENTS_PREFIX) or Path(value).is_absolute():
        return value
    return str(Path.cwd() / value)


def build_config(
    config_path: Path | None,
    *,
    grammars: list[str],
    theme: str | None,
    css_class: str | None,
    prefixes: list[str],
    parser: str | None,
    strict: bool,
    recursive: bool | None,
    extensions: list[str],
) -> HighlightConfig:
    """Merge the configuration file with command-line overrides."""
    config = load_config(config_path) if config_path is not None else HighlightConfig()

    updates: dict[str, object] = {}
    if theme is not None:
        is_file = Path(theme).suffix.lower() in THEME_SUFFIXES
        updates["theme"] = _from_cwd(theme) if is_file else theme
    if css_class is not None:
        updates["css_class"] = css_class
    if prefixes:
        updates["class_prefixes"] = prefixes
    if parser is not None:
        updates["parser"] = parser
    if strict:
        updates["strict"] = True
    if recursive is not None:
        updates["recursive"] = recursive
    if extensions:
        updates["extensions"] = extensions
    if grammars:
        languages = dict(config.languages)
        for key, grammar in parse_grammar_bindings(grammars).items():
            aliases = languages[key].aliases if key in languages else []
            languages[key] = LanguageConfig(grammar=_from_cwd(grammar), aliases=aliases)
        updates["languages"] = languages

    if not updates:
        return config
    merged = HighlightConfig.model_validate({**config.model_dump(), **updates})
    merged.base_dir = config.base_dir
    return merged


def patch(
    root: RootArgument,
    config_path: ConfigOption = None,
    grammar: GrammarOption = None,
    theme: ThemeOption = None,
    css_class: CssClassOption = None,
    prefix: PrefixOption = None,
    parser: ParserOption = None,
    strict: StrictOption = False,
    recursive: RecursiveOption = None,
    ext: ExtensionOption = None,
    keep_going: KeepGoingOption = False,
    dry_run: DryRunOption = False,
    css: CssOutputOption = None,
) -> None:
    """Highlight <pre><code> blocks of HTML documents in place."""
    state = get_cli_state()

    try:
        config = build_config(
            config_path,
            grammars=list(grammar or []),
            theme=theme,
            css_class=css_class,
            prefixes=list(prefix or []),
            parser=parser,
            strict=strict,
            recursive=recursive,
            extensions=list(ext or []),
        )
        dispatcher = config.build_dispatcher()
        css_theme = config.load_default_theme() if css is not None else None
    except (ConfigError, GrammarLoadError, ThemeLoadError) as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        emit_error(f"Invalid option: {exc}", exception=exc)
        raise typer.Exit(code=1) from exc

    if not config.languages:
        emit_warning("No languages registered; every tagged block will be reported as missing.")

    failures: list[tuple[Path, DocumentProcessingError]] = []

    def _record_failure(path: Path, exc: DocumentProcessingError) -> None:
        failures.append((path, exc))

    emitter = CliEmitter(state)
    try:
        missing = patch_path(
            root,
            dispatcher,
            config.patch_options(),
            recursive=config.recursive,
            extensions=config.extensions,
            emitter=emitter,
            on_error=_record_failure if keep_going else None,
            write=not dry_run,
        )
    except DocumentProcessingError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    present_patch_summary(state, missing=missing, failures=failures)

    if css_theme is not None and css is not None:
        write_output_file(css, generate_stylesheet(css_theme, f".{config.css_class}"))

    if failures:
        raise typer.Exit(code=1)


__all__ = ["build_config", "parse_grammar_bindings", "patch"]
