"""Mapping between TextMate scope names and Pygments token types."""

from __future__ import annotations

from functools import lru_cache

from pygments.token import (
    Comment,
    Error,
    Generic,
    Keyword,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
    Text,
    _TokenType,
)


# Longest matching prefix wins. Keys are dotted TextMate scope prefixes.
_SCOPE_TOKENS: dict[str, _TokenType] = {
    "comment": Comment,
    "comment.line": Comment.Single,
    "comment.block": Comment.Multiline,
    "comment.block.documentation": String.Doc,
    "constant": Name.Constant,
    "constant.numeric": Number,
    "constant.numeric.integer": Number.Integer,
    "constant.numeric.float": Number.Float,
    "constant.numeric.hex": Number.Hex,
    "constant.character": String.Char,
    "constant.character.escape": String.Escape,
    "constant.language": Keyword.Constant,
    "constant.other": Name.Constant,
    "entity": Name,
    "entity.name": Name,
    "entity.name.function": Name.Function,
    "entity.name.type": Name.Class,
    "entity.name.class": Name.Class,
    "entity.name.namespace": Name.Namespace,
    "entity.name.tag": Name.Tag,
    "entity.name.section": Generic.Heading,
    "entity.other.attribute-name": Name.Attribute,
    "entity.other.inherited-class": Name.Class,
    "invalid": Error,
    "keyword": Keyword,
    "keyword.control": Keyword,
    "keyword.control.import": Keyword.Namespace,
    "keyword.operator": Operator,
    "keyword.operator.word": Operator.Word,
    "keyword.other": Keyword,
    "markup.bold": Generic.Strong,
    "markup.italic": Generic.Emph,
    "markup.heading": Generic.Heading,
    "markup.inserted": Generic.Inserted,
    "markup.deleted": Generic.Deleted,
    "markup.changed": Generic.Subheading,
    "markup.quote": Generic.Output,
    "markup.raw": String.Backtick,
    "markup.underline": Generic.Emph,
    "punctuation": Punctuation,
    "punctuation.definition.comment": Comment,
    "punctuation.definition.string": String,
    "storage": Keyword.Declaration,
    "storage.type": Keyword.Type,
    "storage.modifier": Keyword.Declaration,
    "string": String,
    "string.quoted.single": String.Single,
    "string.quoted.double": String.Double,
    "string.quoted.triple": String.Doc,
    "string.interpolated": String.Interpol,
    "string.regexp": String.Regex,
    "string.unquoted": String,
    "support": Name.Builtin,
    "support.function": Name.Builtin,
    "support.class": Name.Builtin,
    "support.type": Name.Builtin,
    "support.constant": Name.Constant,
    "support.variable": Name.Variable,
    "variable": Name.Variable,
    "variable.parameter": Name.Variable,
    "variable.language": Name.Builtin.Pseudo,
    "variable.other": Name.Variable,
    "meta": Text,
    "source": Text,
    "text": Text,
}


@lru_cache(maxsize=512)
def scope_to_token(scope: str | None) -> _TokenType:
    """Return the Pygments token type for a TextMate scope name.

    Only the last element of a space-separated scope selector is considered, so
    ``"meta.tag string.quoted"`` maps like ``"string.quoted"``.
    """
    if not scope:
        return Text
    selector = scope.split(",")[0].split()
    if not selector:
        return Text
    parts = selector[-1].strip().lower().split(".")
    while parts:
        token = _SCOPE_TOKENS.get(".".join(parts))
        if token is not None:
            return token
        parts.pop()
    return Text


def split_scopes(value: str | list[str] | None) -> list[str]:
    """Normalise a theme ``scope`` entry into a list of selectors."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


__all__ = ["scope_to_token", "split_scopes"]
