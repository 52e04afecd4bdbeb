"""Implementation of the `hlsmith css` command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from hlsmith.adapters.pygments import load_theme
from hlsmith.core.config import HighlightConfig, load_config
from hlsmith.core.exceptions import ConfigError, ThemeLoadError
from hlsmith.core.highlighter import Highlighter

from .._options import ConfigOption, CssClassOption, ThemeOption
from ..state import emit_error, get_cli_state
from ..utils import write_output_file


def css(
    config_path: ConfigOption = None,
    theme: ThemeOption = None,
    css_class: CssClassOption = None,
    selector: Annotated[
        str | None,
        typer.Option(
            "--selector",
            help="CSS selector scoping the rules (defaults to '.<css-class>').",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the stylesheet to this file instead of stdout.",
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
) -> None:
    """Print the stylesheet matching a theme."""
    try:
        config = load_config(config_path) if config_path is not None else HighlightConfig()
        loaded = load_theme(theme) if theme is not None else config.load_default_theme()
        highlighter = Highlighter(
            loaded,
            css_class=css_class or config.css_class,
        )
    except (ConfigError, ThemeLoadError) as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    stylesheet = highlighter.css_text(selector)
    if output is None:
        typer.echo(stylesheet)
        return

    write_output_file(output, stylesheet)
    get_cli_state().console.print(f"Wrote stylesheet to {output}", highlight=False)


__all__ = ["css"]
