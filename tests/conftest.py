"""Test configuration and fixtures."""

from pathlib import Path

import pytest

from workflow_studio.studio.model.ids import IdGenerator, counter_id_generator
from workflow_studio.studio.model.json_text import format_json
from workflow_studio.studio.model.steps import (
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    Trigger,
    TriggerType,
    WorkflowDefinition,
)


@pytest.fixture
def create_id() -> IdGenerator:
    """Provide a deterministic id generator (new_1, new_2, ...)."""
    return counter_id_generator("new_")


@pytest.fixture
def branching_steps() -> tuple[Step, ...]:
    """Provide a root log, a condition with one step per branch, and a trailing record step."""
    return (
        LogStep(id="a", message="start"),
        ConditionStep(
            id="c",
            field_path="status",
            value_json='"open"',
            then_steps=(LogStep(id="t1", message="status is open"),),
            else_steps=(LogStep(id="e1", message="status is not open"),),
        ),
        CreateRecordStep(
            id="b", entity_logical_name="task", data_json=format_json({"title": "Follow-up"})
        ),
    )


@pytest.fixture
def branching_definition(branching_steps: tuple[Step, ...]) -> WorkflowDefinition:
    """Provide a valid definition triggered by contact creation."""
    return WorkflowDefinition(
        trigger=Trigger(type=TriggerType.RECORD_CREATED, entity_logical_name="contact"),
        steps=branching_steps,
    )


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no WORKFLOW_STUDIO_* variables set."""
    for name in [
        "WORKFLOW_STUDIO_LOG_LEVEL",
        "WORKFLOW_STUDIO_ID_PREFIX",
        "WORKFLOW_STUDIO_HISTORY_LIMIT",
        "WORKFLOW_STUDIO_LANE_WIDTH",
        "WORKFLOW_STUDIO_ROW_HEIGHT",
        "WORKFLOW_STUDIO_ORIGIN_X",
        "WORKFLOW_STUDIO_ORIGIN_Y",
        "WORKFLOW_STUDIO_CORS_ORIGINS",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
