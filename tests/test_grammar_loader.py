import json
import logging
from pathlib import Path

from pygments.token import Comment, Keyword, Name, Number, String, Text, Whitespace
import pytest
import yaml

from hlsmith.adapters.pygments import compile_textmate_grammar, load_grammar, scope_to_token
from hlsmith.adapters.pygments.grammar import translate_regex
from hlsmith.core.exceptions import GrammarLoadError

from conftest import FOO_GRAMMAR


def _tokens(grammar, text: str) -> list[tuple[object, str]]:
    return [(token, value) for token, value in grammar.lexer().get_tokens(text) if value]


def test_textmate_json_grammar_loads(foo_grammar: Path) -> None:
    grammar = load_grammar(foo_grammar)

    assert grammar.name == "Foo"
    assert grammar.scope_name == "source.foo"
    assert grammar.source == foo_grammar
    assert grammar.lexer_class.filenames == ["*.foo"]


def test_match_rules_map_scopes_to_tokens(foo_grammar: Path) -> None:
    tokens = _tokens(load_grammar(foo_grammar), "if 42 # note\nreturn")

    assert (Keyword, "if") in tokens
    assert (Number, "42") in tokens
    assert (Comment.Single, "# note") in tokens
    assert (Whitespace, "\n") in tokens
    assert (Keyword, "return") in tokens


def test_begin_end_rules_push_a_state(foo_grammar: Path) -> None:
    tokens = _tokens(load_grammar(foo_grammar), 'x = "a\\"b" if')

    assert (String.Double, '"') in tokens
    assert (String.Escape, '\\"') in tokens
    assert (String.Double, "b") in tokens
    assert tokens[-1] == (Keyword, "if")


def test_captures_split_a_match(foo_grammar: Path) -> None:
    tokens = _tokens(load_grammar(foo_grammar), "def main")

    assert tokens[:3] == [(Keyword.Type, "def"), (Text, " "), (Name.Function, "main")]


def test_lexer_keeps_input_text_intact(foo_grammar: Path) -> None:
    source = '\n\nif "unterminated\nelse ~ 3\n'
    text = "".join(value for _, value in load_grammar(foo_grammar).lexer().get_tokens(source))

    assert text == source


def test_yaml_grammar_loads(tmp_path: Path) -> None:
    path = tmp_path / "foo.tmLanguage.yaml"
    path.write_text(yaml.safe_dump(FOO_GRAMMAR), encoding="utf-8")

    grammar = load_grammar(str(path))

    assert grammar.name == "Foo"
    assert (Keyword, "else") in _tokens(grammar, "else")


def test_pygments_alias_grammar() -> None:
    grammar = load_grammar("pygments:python")

    assert grammar.name == "Python"
    assert grammar.source is None


def test_unknown_pygments_alias() -> None:
    with pytest.raises(GrammarLoadError, match="no lexer named"):
        load_grammar("pygments:definitely-not-a-language")


def test_lexer_module_grammar(tmp_path: Path) -> None:
    path = tmp_path / "tiny.py"
    path.write_text(
        "from pygments.lexer import RegexLexer\n"
        "from pygments.token import Keyword, Text\n"
        "\n"
        "class CustomLexer(RegexLexer):\n"
        "    name = 'Tiny'\n"
        "    tokens = {'root': [(r'tiny', Keyword), (r'.|\\n', Text)]}\n"
        "\n"
        "class LoudLexer(CustomLexer):\n"
        "    name = 'Loud'\n",
        encoding="utf-8",
    )

    assert load_grammar(str(path)).name == "Tiny"
    assert load_grammar(f"{path}:LoudLexer").name == "Loud"
    with pytest.raises(GrammarLoadError):
        load_grammar(f"{path}:MissingLexer")


def test_missing_grammar_file(tmp_path: Path) -> None:
    with pytest.raises(GrammarLoadError, match="does not exist"):
        load_grammar(tmp_path / "nope.tmLanguage.json")


def test_malformed_grammar_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(GrammarLoadError, match="Malformed grammar"):
        load_grammar(path)


def test_unsupported_grammar_format(tmp_path: Path) -> None:
    path = tmp_path / "grammar.txt"
    path.write_text("patterns: []", encoding="utf-8")

    with pytest.raises(GrammarLoadError, match="Unsupported grammar format"):
        load_grammar(path)


def test_grammar_without_patterns() -> None:
    with pytest.raises(GrammarLoadError, match="patterns"):
        compile_textmate_grammar({"name": "Empty"})


def test_patterns_python_re_rejects_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    definition = {
        "name": "Oniguruma",
        "patterns": [
            {"match": "(", "name": "keyword"},
            {"match": "\\p{Lu}\\w*", "name": "entity.name.type"},
            {"match": "\\bend\\b", "name": "keyword"},
        ],
    }

    with caplog.at_level(logging.WARNING):
        grammar = compile_textmate_grammar(definition)

    assert caplog.text.count("not supported by Python re") == 2
    assert (Keyword, "end") in _tokens(grammar, "Foo end")


def test_leading_anchor_is_dropped() -> None:
    grammar = compile_textmate_grammar(
        {"name": "G", "patterns": [{"match": "\\G\\s*\\w+", "name": "keyword"}]}
    )

    assert (Keyword, "word") in _tokens(grammar, "word")


def test_escaped_backslash_is_not_a_backreference() -> None:
    grammar = compile_textmate_grammar(
        {
            "name": "Esc",
            "patterns": [{"begin": "<", "end": "\\\\1", "name": "string.quoted.other"}],
        }
    )

    assert (String, "<") in _tokens(grammar, "<a\\1")


def test_unsupported_rules_are_skipped_with_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    definition = {
        "name": "Partial",
        "patterns": [
            {"include": "source.other"},
            {"include": "#undefined"},
            {"begin": "^>", "while": "^>", "name": "markup.quote"},
            {"match": "a*", "name": "keyword"},
            {"begin": "x*", "end": "y*"},
            {"begin": "<", "end": "\\1"},
            {"begin": "(?=\\S)", "end": ";", "patterns": [{"include": "$self"}]},
            {"match": "ok", "name": "keyword"},
        ],
    }

    with caplog.at_level(logging.WARNING):
        grammar = compile_textmate_grammar(definition)

    skipped = [record for record in caplog.records if "Skipped rule" in record.getMessage()]
    assert len(skipped) == 7
    assert (Keyword, "ok") in _tokens(grammar, "ok; aa")


def test_self_include_and_content_name() -> None:
    grammar = compile_textmate_grammar(
        {
            "name": "Nest",
            "patterns": [
                {
                    "begin": "\\(",
                    "end": "\\)",
                    "name": "punctuation.section",
                    "contentName": "string.unquoted",
                    "patterns": [{"include": "$self"}],
                },
                {"match": "\\bk\\b", "name": "keyword"},
            ],
        }
    )

    tokens = _tokens(grammar, "(a (k))")

    assert (String, "a") in tokens
    assert (Keyword, "k") in tokens
    assert tokens[-1][1] == ")"


def test_json_grammar_with_named_groups(tmp_path: Path) -> None:
    path = tmp_path / "named.json"
    path.write_text(
        json.dumps({"name": "Named", "patterns": [{"match": "(?<word>\\h+)", "name": "constant.numeric"}]}),
        encoding="utf-8",
    )

    assert (Number, "ff") in _tokens(load_grammar(path), "ff")


def test_translate_regex() -> None:
    assert translate_regex("(?<name>\\w+)") == "(?P<name>\\w+)"
    assert translate_regex("(?<=a)b(?<!c)") == "(?<=a)b(?<!c)"
    assert translate_regex("\\h\\z") == "[0-9A-Fa-f]\\Z"
    assert translate_regex("\\G\\w+") == "\\w+"
    assert translate_regex("a\\G") == "a\\G"


@pytest.mark.parametrize(
    ("scope", "expected"),
    [
        ("keyword.control.foo", Keyword),
        ("constant.numeric.integer.decimal.c", Number.Integer),
        ("meta.tag string.quoted.double.html", String.Double),
        ("comment.line.double-slash, comment.block", Comment.Single),
        ("something.unknown", Text),
        (None, Text),
        ("", Text),
    ],
)
def test_scope_to_token(scope, expected) -> None:
    assert scope_to_token(scope) is expected
