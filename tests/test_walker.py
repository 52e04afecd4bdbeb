from pathlib import Path

import pytest

from hlsmith.core.diagnostics import NullEmitter
from hlsmith.core.dispatch import GrammarDispatcher
from hlsmith.core.exceptions import DocumentProcessingError
from hlsmith.core.walker import patch_path, walk_tree


def _block(language: str, code: str = "x") -> str:
    return f'<pre class="lang-{language}"><code>{code}</code></pre>'


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "guide" / "deep").mkdir(parents=True)
    (root / "index.html").write_text(_block("foo", "home") + _block("bar"), encoding="utf-8")
    (root / "guide" / "intro.html").write_text(_block("foo", "intro"), encoding="utf-8")
    (root / "guide" / "deep" / "more.HTML").write_text(_block("baz"), encoding="utf-8")
    (root / "guide" / "notes.txt").write_text(_block("foo", "notes"), encoding="utf-8")
    (root / "guide" / "legacy.htm").write_text(_block("foo", "legacy"), encoding="utf-8")
    return root


def test_walk_patches_html_files_recursively(site: Path, upper) -> None:
    missing = walk_tree(site, GrammarDispatcher({"foo": upper}), emitter=NullEmitter())

    assert missing == {"bar", "baz"}
    assert sorted(upper.calls) == ["home", "intro"]
    assert "HOME" in (site / "index.html").read_text(encoding="utf-8")
    assert "INTRO" in (site / "guide" / "intro.html").read_text(encoding="utf-8")
    assert (site / "guide" / "notes.txt").read_text(encoding="utf-8") == _block("foo", "notes")


def test_walk_without_recursion(site: Path, upper) -> None:
    missing = walk_tree(
        site, GrammarDispatcher({"foo": upper}), recursive=False, emitter=NullEmitter()
    )

    assert missing == {"bar"}
    assert upper.calls == ["home"]


def test_walk_with_custom_extensions(site: Path, upper) -> None:
    walk_tree(
        site,
        GrammarDispatcher({"foo": upper}),
        extensions=["htm", ".HTML"],
        emitter=NullEmitter(),
    )

    assert sorted(upper.calls) == ["home", "intro", "legacy"]


def test_walk_visits_entries_in_sorted_order(tmp_path: Path, upper) -> None:
    for name in ("b.html", "a.html", "c.html"):
        (tmp_path / name).write_text(_block("foo", name[0]), encoding="utf-8")

    walk_tree(tmp_path, GrammarDispatcher({"foo": upper}), emitter=NullEmitter())

    assert upper.calls == ["a", "b", "c"]


def test_walk_does_not_follow_symlinks_back_up_the_tree(site: Path, upper) -> None:
    (site / "guide" / "deep" / "up").symlink_to(site, target_is_directory=True)

    missing = walk_tree(site, GrammarDispatcher({"foo": upper}), emitter=NullEmitter())

    assert missing == {"bar", "baz"}
    assert sorted(upper.calls) == ["home", "intro"]


def test_first_failure_stops_the_walk(tmp_path: Path, upper, failing) -> None:
    (tmp_path / "a.html").write_text(_block("foo", "a"), encoding="utf-8")
    (tmp_path / "b.html").write_text(_block("bad"), encoding="utf-8")
    (tmp_path / "c.html").write_text(_block("foo", "c"), encoding="utf-8")
    dispatcher = GrammarDispatcher({"foo": upper, "bad": failing})

    with pytest.raises(DocumentProcessingError) as info:
        walk_tree(tmp_path, dispatcher, emitter=NullEmitter())

    assert info.value.path == tmp_path / "b.html"
    assert "A" in (tmp_path / "a.html").read_text(encoding="utf-8")
    assert (tmp_path / "b.html").read_text(encoding="utf-8") == _block("bad")
    assert (tmp_path / "c.html").read_text(encoding="utf-8") == _block("foo", "c")


def test_error_handler_keeps_walking(tmp_path: Path, upper, failing) -> None:
    (tmp_path / "a.html").write_text(_block("bad"), encoding="utf-8")
    (tmp_path / "b.html").write_text(_block("foo", "b") + _block("go"), encoding="utf-8")
    failures: list[Path] = []

    missing = walk_tree(
        tmp_path,
        GrammarDispatcher({"foo": upper, "bad": failing}),
        emitter=NullEmitter(),
        on_error=lambda path, exc: failures.append(path),
    )

    assert failures == [tmp_path / "a.html"]
    assert missing == {"go"}
    assert upper.calls == ["b"]


def test_empty_directory(tmp_path: Path, upper) -> None:
    assert walk_tree(tmp_path, GrammarDispatcher({"foo": upper}), emitter=NullEmitter()) == set()


def test_patch_path_accepts_a_single_file(site: Path, upper) -> None:
    missing = patch_path(site / "index.html", GrammarDispatcher({"foo": upper}), emitter=NullEmitter())

    assert missing == {"bar"}
    assert upper.calls == ["home"]


def test_patch_path_single_file_error_handler(tmp_path: Path, failing) -> None:
    path = tmp_path / "one.html"
    path.write_text(_block("bad"), encoding="utf-8")
    seen: list[Path] = []

    missing = patch_path(
        path,
        GrammarDispatcher({"bad": failing}),
        emitter=NullEmitter(),
        on_error=lambda failed, exc: seen.append(failed),
    )

    assert missing == set()
    assert seen == [path]


def test_dry_run_walk_reports_without_writing(site: Path, upper) -> None:
    before = (site / "index.html").read_text(encoding="utf-8")

    missing = walk_tree(site, GrammarDispatcher({"foo": upper}), emitter=NullEmitter(), write=False)

    assert missing == {"bar", "baz"}
    assert (site / "index.html").read_text(encoding="utf-8") == before
