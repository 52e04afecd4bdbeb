"""Classification of code block class attributes into language keys.

A classifier is a pure function taking the raw ``class`` attribute of a code
block (the empty string when the attribute is absent) and returning one of two
outcomes:

`Resolved(key)`
: The block names a language. Whether a highlighter is registered for ``key``
  is decided later by the dispatcher.

`Unclassified`
: The block carries no usable language hint. Such blocks are never reported
  as missing languages.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class Resolved:
    """Classification naming a language key."""

    key: str

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("Resolved classifications require a non-empty language key.")


@dataclass(frozen=True, slots=True)
class Unclassified:
    """Classification for blocks without a recognisable language hint."""


UNCLASSIFIED = Unclassified()

Classification = Resolved | Unclassified
Classifier = Callable[[str], Classification]

DEFAULT_CLASS_PREFIXES: tuple[str, ...] = ("language-", "lang-")


@dataclass(frozen=True, slots=True)
class PrefixClassifier:
    """Classify ``language-<key>`` style class tokens.

    The first class token starting with one of ``prefixes`` wins. The suffix is
    mapped through ``aliases`` so several spellings can share one highlighter.
    When ``fallback_to_class`` is enabled, a class list without any prefixed
    token resolves to its first token instead of being unclassified.
    """

    prefixes: tuple[str, ...] = DEFAULT_CLASS_PREFIXES
    aliases: Mapping[str, str] = field(default_factory=dict)
    fallback_to_class: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "prefixes", tuple(self.prefixes))
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))

    def __call__(self, class_attr: str) -> Classification:
        tokens = class_attr.split()
        if not tokens:
            return UNCLASSIFIED

        for token in tokens:
            for prefix in self.prefixes:
                if token.startswith(prefix) and len(token) > len(prefix):
                    return Resolved(self._canonical(token[len(prefix) :]))

        if self.fallback_to_class:
            return Resolved(self._canonical(tokens[0]))
        return UNCLASSIFIED

    def _canonical(self, name: str) -> str:
        return self.aliases.get(name, name)

    def with_aliases(self, aliases: Mapping[str, str]) -> PrefixClassifier:
        """Return a copy extended with additional aliases."""
        merged = dict(self.aliases)
        merged.update(aliases)
        return PrefixClassifier(
            prefixes=self.prefixes,
            aliases=merged,
            fallback_to_class=self.fallback_to_class,
        )


def string_classifier(func: Callable[[str], str]) -> Classifier:
    """Adapt a classifier returning plain strings, where ``""`` means no match."""

    def classify(class_attr: str) -> Classification:
        key = func(class_attr)
        return Resolved(key) if key else UNCLASSIFIED

    classify.__name__ = getattr(func, "__name__", "classify")
    classify.__doc__ = getattr(func, "__doc__", None)
    return classify


def alias_table(languages: Mapping[str, Iterable[str]]) -> dict[str, str]:
    """Flatten ``{key: [alias, ...]}`` into an alias-to-key lookup."""
    table: dict[str, str] = {}
    for key, aliases in languages.items():
        for alias in aliases:
            if alias in table and table[alias] != key:
                raise ValueError(
                    f"Alias '{alias}' is claimed by both '{table[alias]}' and '{key}'."
                )
            table[alias] = key
    return table


__all__ = [
    "DEFAULT_CLASS_PREFIXES",
    "UNCLASSIFIED",
    "Classification",
    "Classifier",
    "PrefixClassifier",
    "Resolved",
    "Unclassified",
    "alias_table",
    "string_classifier",
]
