"""Unit tests for interpolation token discovery."""

from __future__ import annotations

from workflow_studio.studio.model.steps import CreateRecordStep, LogStep
from workflow_studio.studio.tokens import BASE_TOKENS, dynamic_tokens_for_step


def _tokens(tokens) -> list[str]:
    return [t.token for t in tokens]


def test_no_selection_returns_base_set(branching_steps) -> None:
    assert dynamic_tokens_for_step(branching_steps, None) == list(BASE_TOKENS)


def test_unknown_selection_returns_base_set(branching_steps) -> None:
    assert dynamic_tokens_for_step(branching_steps, "gone") == list(BASE_TOKENS)


def test_first_step_sees_only_base_set(branching_steps) -> None:
    assert dynamic_tokens_for_step(branching_steps, "a") == list(BASE_TOKENS)


def test_steps_before_selection_in_visit_order(branching_steps) -> None:
    tokens = dynamic_tokens_for_step(branching_steps, "b")
    step_tokens = [t for t in tokens if t.source == "step"]

    assert _tokens(step_tokens) == [
        "{{steps.a.output}}",
        "{{steps.c.output}}",
        "{{steps.t1.output}}",
        "{{steps.e1.output}}",
    ]
    assert [t.label for t in step_tokens] == [
        "Log step (a) output",
        "Condition (c) output",
        "Log step (t1) output",
        "Log step (e1) output",
    ]


def test_sibling_branch_steps_are_offered(branching_steps) -> None:
    tokens = _tokens(dynamic_tokens_for_step(branching_steps, "e1"))
    assert "{{steps.t1.output}}" in tokens
    assert "{{steps.e1.output}}" not in tokens
    assert "{{steps.b.output}}" not in tokens


def test_payload_field_paths_are_deduplicated() -> None:
    tokens = dynamic_tokens_for_step(
        (LogStep(id="x"),), None, ["id", "email", "email"]
    )
    assert _tokens(tokens) == [
        *_tokens(BASE_TOKENS),
        "{{trigger.payload.email}}",
    ]


def test_record_label_prefers_entity_name() -> None:
    steps = (
        CreateRecordStep(id="r1", entity_logical_name="task"),
        CreateRecordStep(id="r2"),
        LogStep(id="end"),
    )
    labels = [t.label for t in dynamic_tokens_for_step(steps, "end") if t.source == "step"]
    assert labels == ["Create record (task) output", "Create record (r2) output"]
