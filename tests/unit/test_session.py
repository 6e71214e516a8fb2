"""Unit tests for the stateful editor session."""

from __future__ import annotations

from dataclasses import replace

import pytest

from workflow_studio.studio.model.steps import (
    ConditionStep,
    LogStep,
    Trigger,
    TriggerType,
    WorkflowDefinition,
)
from workflow_studio.studio.session import EditorSession
from workflow_studio.studio.templates import UnknownTemplateError


@pytest.fixture
def session(branching_definition: WorkflowDefinition, create_id) -> EditorSession:
    return EditorSession(branching_definition, create_id=create_id)


def test_select_step_and_trigger(session: EditorSession) -> None:
    assert session.select_step("t1")
    assert session.selected_step_id == "t1"
    assert session.inspector_node == "step"
    assert not session.select_step("gone")

    session.select_trigger()
    assert session.selected_step_id is None
    assert session.inspector_node == "trigger"
    assert not session.can_undo


def test_insert_after_selected(session: EditorSession) -> None:
    session.select_step("a")
    assert session.insert_step(LogStep(id="n", message="hi"))

    assert [s.id for s in session.steps] == ["a", "n", "c", "b"]
    assert session.selected_step_id == "n"


def test_insert_into_selected_condition_branch(session: EditorSession) -> None:
    session.select_step("c")
    session.insert_step(LogStep(id="n", message="hi"), "else_selected")

    condition = session.steps[1]
    assert isinstance(condition, ConditionStep)
    assert [s.id for s in condition.else_steps] == ["e1", "n"]


def test_branch_insert_without_condition_selected_appends_to_root(
    session: EditorSession,
) -> None:
    session.select_step("a")
    session.insert_step(LogStep(id="n", message="hi"), "then_selected")
    assert session.steps[-1].id == "n"


def test_edits_are_undoable(session: EditorSession) -> None:
    original = session.definition
    session.update_step("a", lambda s: replace(s, message="changed"))
    session.remove_step("b")

    assert session.undo()
    assert session.undo()
    assert session.definition == original
    assert not session.undo()
    assert session.redo()
    assert session.steps[0] == LogStep(id="a", message="changed")


def test_failed_edits_leave_history_untouched(session: EditorSession) -> None:
    assert not session.update_step("gone", lambda s: s)
    assert not session.remove_step("gone")
    assert not session.duplicate_step("gone")
    assert not session.move_step("c", "t1", "after")
    assert not session.set_trigger(session.trigger)
    assert not session.can_undo


def test_remove_selected_step_clears_selection(session: EditorSession) -> None:
    session.select_step("t1")
    session.remove_step("c")

    assert session.selected_step_id is None
    assert session.inspector_node == "trigger"
    session.undo()
    assert session.selected_step_id == "t1"


def test_duplicate_selects_clone(session: EditorSession) -> None:
    assert session.duplicate_step("a")
    assert session.selected_step_id == "new_1"
    assert [s.id for s in session.steps] == ["a", "new_1", "c", "b"]


def test_move_step(session: EditorSession) -> None:
    assert session.move_step("b", "a", "before")
    assert [s.id for s in session.steps] == ["b", "a", "c"]


def test_insert_template_step_and_trigger(session: EditorSession) -> None:
    session.select_step("a")
    assert session.insert_template("log_warning")
    assert session.steps[1] == LogStep(id="new_1", message="[WARN] requires attention")

    assert session.insert_template("schedule_hourly_trigger")
    assert session.trigger == Trigger(TriggerType.SCHEDULE_TICK, "hourly")
    assert session.selected_step_id is None

    with pytest.raises(UnknownTemplateError):
        session.insert_template("teleport")


def test_history_limit_bounds_undo(create_id) -> None:
    session = EditorSession(create_id=create_id, history_limit=2)
    for _ in range(4):
        session.add_draft_step("log_message")

    assert session.undo()
    assert session.undo()
    assert not session.undo()
    assert len(session.steps) == 2


def test_view_reflects_current_tree(session: EditorSession) -> None:
    session.select_step("b")
    view = session.view(["email"])

    assert view.issues == []
    assert view.path_index.path_of("e1") == "1.else.0"
    assert view.layout.positions["b"].y == 400
    assert "{{steps.e1.output}}" in [t.token for t in view.tokens]
    assert "{{trigger.payload.email}}" in [t.token for t in view.tokens]
    assert [n.id for n in view.graph.nodes][1:] == ["a", "c", "t1", "e1", "b"]
