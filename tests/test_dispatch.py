from hlsmith.core.classify import UNCLASSIFIED, PrefixClassifier, Resolved, string_classifier
from hlsmith.core.dispatch import GrammarDispatcher, Unresolved


def test_registered_language_returns_its_highlighter(upper) -> None:
    dispatcher = GrammarDispatcher({"foo": upper})

    assert dispatcher.dispatch("lang-foo") is upper


def test_unregistered_language_is_reportable(upper) -> None:
    dispatcher = GrammarDispatcher({"foo": upper})

    outcome = dispatcher.dispatch("language-bar")

    assert isinstance(outcome, Unresolved)
    assert outcome.classification == Resolved("bar")
    assert outcome.key == "bar"
    assert outcome.reportable


def test_missing_class_is_not_reportable(upper) -> None:
    dispatcher = GrammarDispatcher({"foo": upper})

    for value in ("", None):
        outcome = dispatcher.dispatch(value)
        assert isinstance(outcome, Unresolved)
        assert outcome.classification == UNCLASSIFIED
        assert outcome.key is None
        assert not outcome.reportable


def test_custom_classifier_is_used(upper) -> None:
    dispatcher = GrammarDispatcher(
        {"sql": upper},
        string_classifier(lambda value: "sql" if "query" in value else ""),
    )

    assert dispatcher.dispatch("my-query") is upper
    assert dispatcher.dispatch("other") == Unresolved(UNCLASSIFIED)


def test_registry_is_a_read_only_snapshot(upper) -> None:
    registry = {"foo": upper}
    dispatcher = GrammarDispatcher(registry)
    registry["bar"] = upper

    assert "bar" not in dispatcher.registry
    assert isinstance(dispatcher.dispatch("lang-bar"), Unresolved)


def test_default_classifier_is_prefix_classifier(upper) -> None:
    dispatcher = GrammarDispatcher({"foo": upper})

    assert isinstance(dispatcher.classifier, PrefixClassifier)
    assert dispatcher.classify("lang-foo") == Resolved("foo")
