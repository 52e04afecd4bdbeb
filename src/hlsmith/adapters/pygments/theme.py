"""Theme loading backed by Pygments styles."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
import json
from pathlib import Path
import plistlib
import re
from typing import Any

from pygments.style import Style
from pygments.styles import get_style_by_name
from pygments.token import Text, _TokenType
from pygments.util import ClassNotFound
import yaml

from hlsmith.core.exceptions import ThemeLoadError

from .scopes import scope_to_token, split_scopes


THEME_SUFFIXES = {".json", ".yml", ".yaml", ".tmtheme", ".plist"}

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FONT_STYLES = {"bold", "italic", "underline"}


@dataclass(frozen=True, slots=True)
class Theme:
    """Loaded theme handle."""

    name: str
    style: type[Style]
    source: Path | None = None

    @property
    def background(self) -> str | None:
        return self.style.background_color


def load_theme(spec: str | Path) -> Theme:
    """Resolve a theme from a Pygments style name or a theme file."""
    path = Path(spec)
    if path.suffix.lower() in THEME_SUFFIXES or isinstance(spec, Path):
        if not path.is_file():
            raise ThemeLoadError(f"Theme file '{path}' does not exist.")
        return theme_from_mapping(_read_theme_file(path), source=path)

    name = str(spec).strip()
    try:
        style = get_style_by_name(name)
    except ClassNotFound as exc:
        raise ThemeLoadError(f"Unknown theme '{name}'.") from exc
    return Theme(name=name, style=style)


def _read_theme_file(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    try:
        if suffix in {".tmtheme", ".plist"}:
            with path.open("rb") as handle:
                payload = plistlib.load(handle)
        else:
            raw = path.read_text(encoding="utf-8")
            payload = json.loads(raw) if suffix == ".json" else yaml.safe_load(raw)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
        raise ThemeLoadError(f"Malformed theme file '{path}': {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ThemeLoadError(f"Theme file '{path}' must contain a mapping.")
    return payload


def theme_from_mapping(data: Mapping[str, Any], *, source: Path | None = None) -> Theme:
    """Build a theme from a TextMate, VS Code, or plain style mapping."""
    name = str(data.get("name") or (source.stem if source else "custom"))
    label = str(source or name)

    background: str | None = None
    highlight: str | None = None
    styles: dict[_TokenType, str] = {}

    if "settings" in data or "tokenColors" in data:
        rules = data.get("tokenColors") or data.get("settings") or []
        if not isinstance(rules, Sequence) or isinstance(rules, (str, bytes)):
            raise ThemeLoadError(f"Theme '{label}' has a malformed rule list.")
        colors = data.get("colors") if isinstance(data.get("colors"), Mapping) else {}
        background = _color(colors.get("editor.background"), label) if colors else None
        for rule in rules:
            if not isinstance(rule, Mapping):
                raise ThemeLoadError(f"Theme '{label}' contains a non-mapping rule.")
            settings = rule.get("settings") or {}
            scopes = split_scopes(rule.get("scope"))
            if not scopes:
                background = _color(settings.get("background"), label) or background
                highlight = _color(settings.get("lineHighlight"), label) or highlight
                foreground = _color(settings.get("foreground"), label)
                if foreground:
                    styles[Text] = foreground
                continue
            definition = _style_definition(settings, label)
            for scope in scopes:
                styles[scope_to_token(scope)] = definition
    elif "styles" in data:
        raw_styles = data.get("styles")
        if not isinstance(raw_styles, Mapping):
            raise ThemeLoadError(f"Theme '{label}' has a malformed 'styles' mapping.")
        background = _color(data.get("background"), label)
        highlight = _color(data.get("highlight"), label)
        for scope, definition in raw_styles.items():
            styles[scope_to_token(str(scope))] = str(definition)
    else:
        raise ThemeLoadError(
            f"Theme '{label}' defines neither 'settings', 'tokenColors' nor 'styles'."
        )

    attributes: dict[str, Any] = {"name": name, "styles": styles}
    if background:
        attributes["background_color"] = background
    if highlight:
        attributes["highlight_color"] = highlight
    class_name = re.sub(r"\W+", "", name.title()) or "Custom"
    try:
        style = type(f"{class_name}Style", (Style,), attributes)
    except (AssertionError, ValueError, KeyError) as exc:
        raise ThemeLoadError(f"Theme '{label}' contains an invalid style: {exc}") from exc
    return Theme(name=name, style=style, source=source)


def _style_definition(settings: Mapping[str, Any], label: str) -> str:
    parts: list[str] = []
    font_style = str(settings.get("fontStyle") or "")
    parts.extend(word for word in font_style.split() if word in _FONT_STYLES)
    foreground = _color(settings.get("foreground"), label)
    if foreground:
        parts.append(foreground)
    background = _color(settings.get("background"), label)
    if background:
        parts.append(f"bg:{background}")
    return " ".join(parts)


def _color(value: Any, label: str) -> str | None:
    if value in (None, ""):
        return None
    text = str(value).strip()
    if not _HEX_COLOR.match(text):
        raise ThemeLoadError(f"Theme '{label}' uses unsupported colour {text!r}.")
    digits = text[1:]
    if len(digits) == 4:
        digits = digits[:3]
    elif len(digits) == 8:
        digits = digits[:6]
    return f"#{digits.lower()}"


__all__ = ["THEME_SUFFIXES", "Theme", "load_theme", "theme_from_mapping"]
