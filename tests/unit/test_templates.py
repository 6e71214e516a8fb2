"""Unit tests for the step library and flow template catalog."""

from __future__ import annotations

import pytest

from workflow_studio.studio.model.ids import counter_id_generator
from workflow_studio.studio.model.steps import (
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    TriggerType,
    WorkflowDefinition,
    iter_steps,
)
from workflow_studio.studio.templates import (
    FLOW_TEMPLATES,
    STEP_LIBRARY,
    TriggerTemplateConfig,
    UnknownTemplateError,
    create_draft_step,
    create_template_step,
    instantiate_template,
    resolve_template_list,
    trigger_template_config,
)
from workflow_studio.studio.validation import collect_workflow_validation_issues


def test_catalog_shape() -> None:
    assert len(FLOW_TEMPLATES) == 27
    assert len({t.id for t in FLOW_TEMPLATES}) == 27
    assert [entry.type for entry in STEP_LIBRARY] == [
        "log_message",
        "create_runtime_record",
        "condition",
    ]
    assert sum(1 for t in FLOW_TEMPLATES if t.target == "trigger") == 8


@pytest.mark.parametrize(
    "template_id", [t.id for t in FLOW_TEMPLATES if t.target == "step"]
)
def test_step_templates_produce_valid_steps(template_id: str) -> None:
    step = create_template_step(template_id, counter_id_generator("tpl_"))

    assert step.id == "tpl_1"
    assert collect_workflow_validation_issues(WorkflowDefinition(steps=(step,))) == []


def test_condition_exists_template() -> None:
    step = create_template_step("condition_exists", counter_id_generator("s"))

    assert isinstance(step, ConditionStep)
    assert step.operator is ConditionOperator.EXISTS
    assert (step.then_label, step.else_label) == ("Found", "Missing")
    assert [s.id for s in iter_steps((step,))] == ["s1", "s2", "s3"]
    assert isinstance(step.else_steps[0], CreateRecordStep)


def test_trigger_template_step_is_placeholder_log() -> None:
    step = create_template_step("webhook_trigger", counter_id_generator())
    assert step == LogStep(id="flow_step_1", message="trigger template applied")


def test_instantiate_trigger_template_returns_config() -> None:
    created = instantiate_template("schedule_daily_trigger", counter_id_generator())

    assert isinstance(created, TriggerTemplateConfig)
    assert created.trigger.type is TriggerType.SCHEDULE_TICK
    assert created.trigger.entity_logical_name == "daily"
    assert created.status_label == "Daily Schedule"


def test_trigger_config_is_none_for_step_templates() -> None:
    assert trigger_template_config("log_info") is None


def test_unknown_template_raises() -> None:
    with pytest.raises(UnknownTemplateError):
        instantiate_template("teleport", counter_id_generator())
    with pytest.raises(KeyError):
        trigger_template_config("teleport")


def test_draft_steps() -> None:
    create_id = counter_id_generator("d")

    assert create_draft_step("log_message", create_id) == LogStep(id="d1", message="workflow fired")
    record = create_draft_step("create_runtime_record", create_id)
    assert isinstance(record, CreateRecordStep)
    assert record.entity_logical_name == "task"
    condition = create_draft_step("condition", create_id)
    assert isinstance(condition, ConditionStep)
    assert [s.id for s in iter_steps((condition,))] == ["d3", "d4", "d5"]


def test_empty_query_lists_category_by_label() -> None:
    results = resolve_template_list("", "logic")
    assert [t.label for t in results] == ["If Equals", "If Exists"]

    everything = resolve_template_list("  ")
    assert len(everything) == 27
    assert [t.label for t in everything] == sorted(t.label for t in FLOW_TEMPLATES)


def test_synonyms_find_conditions() -> None:
    results = resolve_template_list("if")
    assert {t.id for t in results[:2]} == {"condition_equals", "condition_exists"}


def test_exact_keyword_ranks_first() -> None:
    assert resolve_template_list("slack")[0].id == "send_slack_notification"


def test_query_is_case_insensitive() -> None:
    assert resolve_template_list("SLACK") == resolve_template_list("slack")


def test_zero_score_templates_are_dropped() -> None:
    assert resolve_template_list("zzz") == []


def test_category_filter_applies_to_search() -> None:
    results = resolve_template_list("record", "trigger")
    assert results
    assert all(t.category == "trigger" for t in results)
