"""Resolve code blocks to registered highlighters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .classify import Classification, Classifier, PrefixClassifier, Resolved
from .highlighter import SupportsHighlight


@dataclass(frozen=True, slots=True)
class Unresolved:
    """Dispatch outcome for a block without a registered highlighter."""

    classification: Classification

    @property
    def key(self) -> str | None:
        if isinstance(self.classification, Resolved):
            return self.classification.key
        return None

    @property
    def reportable(self) -> bool:
        """Whether the block named a language that should be reported as missing."""
        return isinstance(self.classification, Resolved)


class GrammarDispatcher:
    """Map class attributes to highlighters through a classifier."""

    def __init__(
        self,
        registry: Mapping[str, SupportsHighlight],
        classifier: Classifier | None = None,
    ) -> None:
        self._registry = MappingProxyType(dict(registry))
        self._classifier: Classifier = classifier or PrefixClassifier()

    @property
    def registry(self) -> Mapping[str, SupportsHighlight]:
        return self._registry

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    def classify(self, class_attr: str | None) -> Classification:
        return self._classifier(class_attr or "")

    def dispatch(self, class_attr: str | None) -> SupportsHighlight | Unresolved:
        """Return the highlighter for ``class_attr`` or an :class:`Unresolved` outcome."""
        classification = self.classify(class_attr)
        if isinstance(classification, Resolved):
            highlighter = self._registry.get(classification.key)
            if highlighter is not None:
                return highlighter
        return Unresolved(classification)


__all__ = ["GrammarDispatcher", "Unresolved"]
