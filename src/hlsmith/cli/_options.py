"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
GRAMMAR_PANEL = "Grammars"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"

RootArgument = Annotated[
    Path,
    typer.Argument(
        metavar="ROOT",
        help="Directory of HTML documents to patch in place, or a single HTML file.",
        exists=True,
        file_okay=True,
        dir_okay=True,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML configuration declaring languages, grammars, and themes.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

GrammarOption = Annotated[
    list[str] | None,
    typer.Option(
        "--grammar",
        "-g",
        metavar="KEY=GRAMMAR",
        help=(
            "Register a language. GRAMMAR is a TextMate grammar file, a Pygments lexer "
            "module, or pygments:<alias>. Repeat for several languages."
        ),
        rich_help_panel=GRAMMAR_PANEL,
    ),
]

PrefixOption = Annotated[
    list[str] | None,
    typer.Option(
        "--prefix",
        help="Class prefix naming a language (defaults to 'language-' and 'lang-').",
        rich_help_panel=GRAMMAR_PANEL,
    ),
]

ThemeOption = Annotated[
    str | None,
    typer.Option(
        "--theme",
        "-t",
        help="Pygments style name or theme file (TextMate, VS Code, or YAML styles).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

CssClassOption = Annotated[
    str | None,
    typer.Option(
        "--css-class",
        help="Class of the element wrapping highlighted blocks.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

ParserOption = Annotated[
    str | None,
    typer.Option(
        "--parser",
        help="BeautifulSoup parser backend (html.parser, lxml, lxml-xml, html5lib).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

StrictOption = Annotated[
    bool,
    typer.Option(
        "--strict",
        help="Reject documents that are not well-formed XML.",
        rich_help_panel=INPUTS_PANEL,
    ),
]

RecursiveOption = Annotated[
    bool | None,
    typer.Option(
        "--recursive/--no-recursive",
        help="Descend into subdirectories.",
        show_default=False,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ExtensionOption = Annotated[
    list[str] | None,
    typer.Option(
        "--ext",
        help="File suffix treated as HTML (repeatable, defaults to .html).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

KeepGoingOption = Annotated[
    bool,
    typer.Option(
        "--keep-going",
        help="Report failing documents and continue with the remaining files.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="Process documents without writing them back.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CssOutputOption = Annotated[
    Path | None,
    typer.Option(
        "--css",
        help="Write the theme stylesheet to this file.",
        dir_okay=False,
        resolve_path=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]
