"""Unit tests for the linear undo/redo history."""

from __future__ import annotations

import pytest

from workflow_studio.studio.history import CanvasHistorySnapshot, EditorHistory
from workflow_studio.studio.model.steps import LogStep, Trigger


def _snap(*ids: str) -> CanvasHistorySnapshot:
    return CanvasHistorySnapshot(
        trigger=Trigger(),
        steps=tuple(LogStep(id=i) for i in ids),
        selected_step_id=None,
        inspector_node="trigger",
    )


def test_undo_redo_walks_snapshots() -> None:
    history = EditorHistory(_snap())
    history.push(_snap("a"))
    history.push(_snap("a", "b"))

    assert history.undo() == _snap("a")
    assert history.undo() == _snap()
    assert history.undo() is None
    assert history.redo() == _snap("a")
    assert history.current == _snap("a")


def test_push_truncates_redo_history() -> None:
    history = EditorHistory(_snap())
    history.push(_snap("a"))
    history.push(_snap("a", "b"))
    history.undo()

    history.push(_snap("a", "c"))

    assert not history.can_redo
    assert history.redo() is None
    assert history.undo() == _snap("a")


def test_limit_drops_oldest_snapshots() -> None:
    history = EditorHistory(_snap(), limit=2)
    for ids in (("a",), ("a", "b"), ("a", "b", "c")):
        history.push(_snap(*ids))

    assert history.undo_depth == 2
    history.undo()
    history.undo()
    assert history.current == _snap("a")
    assert not history.can_undo


def test_replace_current_is_not_an_undo_step() -> None:
    history = EditorHistory(_snap())
    history.replace_current(_snap("x"))
    assert history.current == _snap("x")
    assert not history.can_undo


def test_limit_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EditorHistory(_snap(), limit=0)
