"""Tests for result rendering."""

from __future__ import annotations

import json

from javadep.models import TraversalResult
from javadep.report import RENDERERS, render_json, render_text


def _result(**overrides) -> TraversalResult:
    values = dict(
        classes=frozenset({"b.Second", "a.First"}),
        archives=frozenset({"file:///z.jar", "file:///a.jar"}),
        unresolved=frozenset({"b.Second"}),
        origins={"a.First": "file:///a.jar", "b.Second": None},
    )
    values.update(overrides)
    return TraversalResult(**values)


def test_render_text_sorts_both_blocks() -> None:
    assert render_text(_result()) == (
        "Classes:\n"
        "    a.First\n"
        "    b.Second\n"
        "Required JARs:\n"
        "    file:///a.jar\n"
        "    file:///z.jar\n"
    )


def test_render_text_omits_empty_archive_block() -> None:
    assert render_text(_result(archives=frozenset())) == "Classes:\n    a.First\n    b.Second\n"


def test_render_text_is_empty_for_empty_result() -> None:
    assert render_text(TraversalResult(classes=frozenset(), archives=frozenset())) == ""


def test_render_json_lists_everything_sorted() -> None:
    payload = json.loads(render_json(_result(failed=frozenset({"a.First"}))))

    assert payload == {
        "classes": ["a.First", "b.Second"],
        "archives": ["file:///a.jar", "file:///z.jar"],
        "unresolved": ["b.Second"],
        "failed": ["a.First"],
        "origins": {"a.First": "file:///a.jar", "b.Second": None},
    }


def test_renderers_registry() -> None:
    assert RENDERERS["text"] is render_text
    assert RENDERERS["json"] is render_json
