"""Grammar loading backed by Pygments lexers.

Three grammar sources are understood:

``pygments:<alias>``
: A lexer shipped with Pygments, looked up by alias.

``path/to/lexer.py`` or ``path/to/lexer.py:ClassName``
: A custom Pygments lexer module, loaded with
  :func:`pygments.lexers.load_lexer_from_file`.

``path/to/grammar.tmLanguage.json`` (also ``.yml``, ``.yaml``, ``.tmLanguage``, ``.plist``)
: A TextMate grammar compiled into a :class:`pygments.lexer.RegexLexer`
  subclass. ``match`` rules become single regex rules, ``begin``/``end`` rules
  become pushed states, repository entries become includable states.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
import json
import logging
from pathlib import Path
import plistlib
import re
import string
from typing import Any

from pygments.lexer import Lexer, RegexLexer, include
from pygments.lexers import get_lexer_by_name, load_lexer_from_file
from pygments.token import Text, Whitespace, _TokenType
from pygments.util import ClassNotFound
import yaml

from hlsmith.core.exceptions import GrammarLoadError

from .scopes import scope_to_token


logger = logging.getLogger(__name__)

PYGMENTS_PREFIX = "pygments:"
TEXTMATE_SUFFIXES = {".json", ".yml", ".yaml", ".tmlanguage", ".plist"}

_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")
_BACKREFERENCE = re.compile(r"(?<!\\)(?:\\\\)*\\(?:[1-9]|k<)")
_SELF_STATE = "grammar"
_EMPTY_SAMPLE = string.printable


@dataclass(frozen=True, slots=True)
class Grammar:
    """Loaded grammar handle."""

    name: str
    lexer_class: type[Lexer]
    scope_name: str | None = None
    source: Path | None = None

    def lexer(self) -> Lexer:
        """Return a fresh lexer that keeps the input text intact."""
        return self.lexer_class(stripnl=False, ensurenl=False)


def load_grammar(spec: str | Path) -> Grammar:
    """Load a grammar from a Pygments alias, a lexer module, or a TextMate file."""
    if isinstance(spec, str) and spec.startswith(PYGMENTS_PREFIX):
        return _load_builtin(spec[len(PYGMENTS_PREFIX) :])

    path, class_name = _split_lexer_spec(spec)
    if not path.is_file():
        raise GrammarLoadError(f"Grammar file '{path}' does not exist.")

    if path.suffix.lower() == ".py":
        return _load_lexer_module(path, class_name)
    if path.suffix.lower() in TEXTMATE_SUFFIXES:
        definition = _read_definition(path)
        return compile_textmate_grammar(definition, source=path)
    raise GrammarLoadError(
        f"Unsupported grammar format '{path.suffix or path.name}' for '{path}'."
    )


def _load_builtin(alias: str) -> Grammar:
    alias = alias.strip()
    try:
        lexer = get_lexer_by_name(alias)
    except ClassNotFound as exc:
        raise GrammarLoadError(f"Pygments has no lexer named '{alias}'.") from exc
    return Grammar(name=lexer.name, lexer_class=type(lexer))


def _split_lexer_spec(spec: str | Path) -> tuple[Path, str | None]:
    if isinstance(spec, Path):
        return spec, None
    head, sep, tail = spec.rpartition(":")
    if sep and head.lower().endswith(".py") and tail.isidentifier():
        return Path(head), tail
    return Path(spec), None


def _load_lexer_module(path: Path, class_name: str | None) -> Grammar:
    try:
        lexer = load_lexer_from_file(str(path), class_name or "CustomLexer")
    except ClassNotFound as exc:
        raise GrammarLoadError(f"Unable to load lexer from '{path}': {exc}") from exc
    return Grammar(name=lexer.name, lexer_class=type(lexer), source=path)


def _read_definition(path: Path) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    try:
        if suffix in {".tmlanguage", ".plist"}:
            with path.open("rb") as handle:
                payload = plistlib.load(handle)
        else:
            raw = path.read_text(encoding="utf-8")
            payload = json.loads(raw) if suffix == ".json" else yaml.safe_load(raw)
    except (OSError, UnicodeDecodeError, ValueError, yaml.YAMLError) as exc:
        # json.JSONDecodeError and plistlib.InvalidFileException are ValueErrors.
        raise GrammarLoadError(f"Malformed grammar file '{path}': {exc}") from exc
    if not isinstance(payload, Mapping):
        raise GrammarLoadError(f"Grammar file '{path}' must contain a mapping.")
    return payload


def compile_textmate_grammar(
    definition: Mapping[str, Any],
    *,
    source: Path | None = None,
) -> Grammar:
    """Compile a TextMate grammar mapping into a Pygments lexer class."""
    patterns = definition.get("patterns")
    if not isinstance(patterns, Sequence) or isinstance(patterns, (str, bytes)):
        label = source or definition.get("name") or "<grammar>"
        raise GrammarLoadError(f"Grammar '{label}' has no top-level 'patterns' list.")

    name = str(definition.get("name") or (source.stem if source else "TextMate"))
    scope_name = definition.get("scopeName")
    compiler = _TextMateCompiler(definition, label=name)
    tokens = compiler.compile()

    file_types = [str(item) for item in definition.get("fileTypes") or []]
    class_name = re.sub(r"\W+", "", name.title()) or "TextMate"
    lexer_class = type(
        f"{class_name}Lexer",
        (RegexLexer,),
        {
            "name": name,
            "aliases": [name.lower()],
            "filenames": [f"*.{ext.lstrip('.')}" for ext in file_types],
            "flags": re.MULTILINE,
            "tokens": tokens,
        },
    )
    try:
        # RegexLexer compiles its state table on first instantiation.
        lexer_class()
    except (ValueError, AssertionError, re.error) as exc:
        raise GrammarLoadError(f"Grammar '{name}' failed to compile: {exc}") from exc

    return Grammar(
        name=name,
        lexer_class=lexer_class,
        scope_name=str(scope_name) if scope_name else None,
        source=source,
    )


def translate_regex(pattern: str) -> str:
    """Translate the Oniguruma constructs most grammars rely on to Python ``re``."""
    translated = _NAMED_GROUP.sub("(?P<", pattern)
    translated = translated.replace(r"\h", "[0-9A-Fa-f]").replace(r"\z", r"\Z")
    if translated.startswith(r"\G"):
        # RegexLexer already anchors every match at the current position.
        translated = translated[2:]
    return translated


class _SkipRule(Exception):
    """Internal signal for rules the compiler cannot express."""


class _TextMateCompiler:
    """Translate TextMate rules into a Pygments state table."""

    def __init__(self, definition: Mapping[str, Any], *, label: str) -> None:
        self.label = label
        repository = definition.get("repository") or {}
        self.repository: Mapping[str, Any] = repository if isinstance(repository, Mapping) else {}
        self.patterns: Sequence[Any] = definition.get("patterns") or []
        self.tokens: dict[str, list[Any]] = {}
        self._pending: list[str] = []
        self._blocks = 0

    def compile(self) -> dict[str, list[Any]]:
        self.tokens[_SELF_STATE] = list(self._rules(self.patterns, state=_SELF_STATE))
        self.tokens["root"] = [include(_SELF_STATE), *_fallback_rules(Text)]
        while self._pending:
            key = self._pending.pop()
            state = _repository_state(key)
            entry = self.repository[key]
            self.tokens[state] = list(self._rules(self._entry_patterns(entry), state=state))
        return self.tokens

    def _entry_patterns(self, entry: Any) -> Sequence[Any]:
        if isinstance(entry, Mapping) and not _is_rule(entry) and "patterns" in entry:
            return entry.get("patterns") or []
        return [entry]

    def _rules(self, patterns: Sequence[Any], *, state: str) -> Iterator[Any]:
        for rule in patterns:
            if not isinstance(rule, Mapping):
                self._skip("pattern entries must be mappings")
                continue
            try:
                yield from self._rule(rule, state=state)
            except _SkipRule as exc:
                self._skip(str(exc))

    def _rule(self, rule: Mapping[str, Any], *, state: str) -> Iterator[Any]:
        if "include" in rule:
            target = self._include_target(str(rule["include"]))
            if target != state:
                yield include(target)
            return

        if "match" in rule:
            regex = self._regex(rule["match"])
            if _matches_empty(regex):
                raise _SkipRule(f"match rule {rule['match']!r} can match the empty string")
            yield (
                regex.pattern,
                _action(rule.get("captures"), rule.get("name")),
            )
            return

        if "begin" in rule:
            yield self._block(rule)
            return

        if "while" in rule:
            raise _SkipRule("'while' rules are not supported")

        if "patterns" in rule:
            yield from self._rules(rule.get("patterns") or [], state=state)
            return

        raise _SkipRule("rule has neither 'match', 'begin', 'include' nor 'patterns'")

    def _block(self, rule: Mapping[str, Any]) -> tuple[str, Any, str]:
        if "end" not in rule:
            raise _SkipRule(f"begin rule {rule['begin']!r} has no 'end'")
        end_source = str(rule["end"])
        if _BACKREFERENCE.search(end_source):
            raise _SkipRule(f"end pattern {end_source!r} refers back to begin captures")

        begin = self._regex(rule["begin"])
        end = self._regex(end_source)
        if _matches_empty(begin):
            raise _SkipRule(f"begin pattern {rule['begin']!r} can match the empty string")

        name = rule.get("name")
        content_token = scope_to_token(rule.get("contentName") or name)
        shared_captures = rule.get("captures")

        self._blocks += 1
        state = f"block-{self._blocks}"
        self.tokens[state] = []
        end_rule = (end.pattern, _action(rule.get("endCaptures") or shared_captures, name), "#pop")
        inner = list(self._rules(rule.get("patterns") or [], state=state))
        if rule.get("applyEndPatternLast"):
            body = [*inner, end_rule]
        else:
            body = [end_rule, *inner]
        self.tokens[state] = [*body, *_fallback_rules(content_token)]

        return (
            begin.pattern,
            _action(rule.get("beginCaptures") or shared_captures, name),
            state,
        )

    def _include_target(self, reference: str) -> str:
        if reference in {"$self", "$base"}:
            return _SELF_STATE
        if reference.startswith("#"):
            key = reference[1:]
            if key not in self.repository:
                raise _SkipRule(f"include of unknown repository entry '{key}'")
            state = _repository_state(key)
            if state not in self.tokens and key not in self._pending:
                self.tokens[state] = []
                self._pending.append(key)
            return state
        raise _SkipRule(f"external include '{reference}' is not supported")

    def _regex(self, value: Any) -> re.Pattern[str]:
        pattern = translate_regex(str(value))
        try:
            return re.compile(pattern, re.MULTILINE)
        except re.error as exc:
            raise _SkipRule(f"pattern {value!r} is not supported by Python re: {exc}") from exc

    def _skip(self, reason: str) -> None:
        logger.warning("Skipped rule in grammar '%s': %s", self.label, reason)


def _repository_state(key: str) -> str:
    return f"repository/{key}"


def _matches_empty(regex: re.Pattern[str]) -> bool:
    # Zero-width matches stall RegexLexer: it never advances past them.
    if regex.match("") is not None:
        return True
    return any(match.start() == match.end() for match in regex.finditer(_EMPTY_SAMPLE))


def _is_rule(entry: Mapping[str, Any]) -> bool:
    return any(key in entry for key in ("match", "begin", "include", "while"))


def _fallback_rules(token: _TokenType) -> list[tuple[str, _TokenType]]:
    # A newline must always be consumed inside a state, otherwise RegexLexer
    # resets the state stack to root.
    return [(r"\n", Whitespace if token is Text else token), (r".", token)]


def _action(captures: Any, name: Any) -> Any:
    default = scope_to_token(name)
    if not isinstance(captures, Mapping) or not captures:
        return default

    groups: dict[int, _TokenType] = {}
    for key, value in captures.items():
        try:
            index = int(key)
        except (TypeError, ValueError):
            continue
        scope = value.get("name") if isinstance(value, Mapping) else None
        if scope:
            groups[index] = scope_to_token(scope)

    whole = groups.pop(0, default)
    if not groups:
        return whole
    return _captures_callback(groups, whole)


def _captures_callback(groups: Mapping[int, _TokenType], default: _TokenType):
    def callback(lexer: Lexer, match: re.Match[str]) -> Iterator[tuple[int, _TokenType, str]]:
        spans = sorted(
            (match.start(index), match.end(index), token)
            for index, token in groups.items()
            if index <= match.re.groups and match.start(index) < match.end(index)
        )
        text = match.string
        cursor = match.start()
        for start, end, token in spans:
            if start < cursor:
                continue
            if start > cursor:
                yield cursor, default, text[cursor:start]
            yield start, token, text[start:end]
            cursor = end
        if cursor < match.end():
            yield cursor, default, text[cursor : match.end()]

    return callback


__all__ = [
    "PYGMENTS_PREFIX",
    "Grammar",
    "compile_textmate_grammar",
    "load_grammar",
    "translate_regex",
]
