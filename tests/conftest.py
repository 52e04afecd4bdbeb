from __future__ import annotations

import html
import json
from pathlib import Path

import pytest


FOO_GRAMMAR = {
    "name": "Foo",
    "scopeName": "source.foo",
    "fileTypes": ["foo"],
    "patterns": [
        {"include": "#comments"},
        {"include": "#strings"},
        {"match": r"\b(if|else|return)\b", "name": "keyword.control.foo"},
        {"match": r"\b\d+\b", "name": "constant.numeric.foo"},
        {
            "match": r"(def)\s+(\w+)",
            "captures": {
                "1": {"name": "storage.type.function.foo"},
                "2": {"name": "entity.name.function.foo"},
            },
        },
    ],
    "repository": {
        "comments": {
            "patterns": [{"match": "#.*$", "name": "comment.line.number-sign.foo"}],
        },
        "strings": {
            "begin": '"',
            "end": '"',
            "name": "string.quoted.double.foo",
            "patterns": [{"match": r"\\.", "name": "constant.character.escape.foo"}],
        },
    },
}


class UpperHighlighter:
    """Highlighter double that records its input and upper-cases it."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def highlight(self, text: str) -> str:
        self.calls.append(text)
        return f'<div class="hl">{html.escape(text.upper(), quote=False)}</div>'


class FailingHighlighter:
    def highlight(self, text: str) -> str:
        raise RuntimeError(f"tokenizer exploded on {text!r}")


@pytest.fixture
def foo_grammar(tmp_path: Path) -> Path:
    path = tmp_path / "grammars" / "foo.tmLanguage.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(FOO_GRAMMAR), encoding="utf-8")
    return path


@pytest.fixture
def upper() -> UpperHighlighter:
    return UpperHighlighter()


@pytest.fixture
def failing() -> FailingHighlighter:
    return FailingHighlighter()
