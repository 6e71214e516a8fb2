"""Compile an edited definition into the persistence hand-off payload."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field, JsonValue

from workflow_studio.studio.model.steps import TriggerType, WorkflowDefinition
from workflow_studio.studio.model.transport import (
    ConditionStepDto,
    CreateRuntimeRecordStepDto,
    LogMessageStepDto,
    StepContentError,
    WorkflowStepDto,
    step_to_dto,
)
from workflow_studio.studio.validation import collect_workflow_validation_issues

logger = logging.getLogger(__name__)


class FirstAction(BaseModel):
    action_type: str
    action_entity_logical_name: str | None = None
    action_payload: dict[str, JsonValue] = Field(default_factory=dict)


class SaveWorkflowRequest(BaseModel):
    logical_name: str
    display_name: str
    description: str | None = None
    trigger_type: TriggerType
    trigger_entity_logical_name: str | None = None
    action_type: str
    action_entity_logical_name: str | None = None
    action_payload: dict[str, JsonValue] = Field(default_factory=dict)
    steps: list[WorkflowStepDto]
    max_attempts: int = 3
    is_enabled: bool = True


def first_action_from_steps(steps: Sequence[WorkflowStepDto]) -> FirstAction | None:
    """First executable action depth-first (then before else).

    Consumers that only understand a single action read this instead of the
    step tree.
    """

    for step in steps:
        if isinstance(step, LogMessageStepDto):
            return FirstAction(action_type="log_message", action_payload={"message": step.message})
        if isinstance(step, CreateRuntimeRecordStepDto):
            payload = step.data if isinstance(step.data, dict) else {}
            return FirstAction(
                action_type="create_runtime_record",
                action_entity_logical_name=step.entity_logical_name,
                action_payload=payload,
            )
        if isinstance(step, ConditionStepDto):
            found = first_action_from_steps(step.then_steps) or first_action_from_steps(
                step.else_steps
            )
            if found is not None:
                return found
    return None


def compile_save_request(
    definition: WorkflowDefinition,
    *,
    logical_name: str,
    display_name: str,
    description: str | None = None,
    max_attempts: int = 3,
    is_enabled: bool = True,
) -> SaveWorkflowRequest:
    """Build the save payload for ``definition``.

    Raises:
        StepContentError: the definition has blocking validation errors, no
            steps, no executable action, or ``max_attempts`` is below 1.
    """

    if max_attempts < 1:
        raise StepContentError("Max attempts must be at least 1.")

    blocking = [
        issue for issue in collect_workflow_validation_issues(definition) if issue.level == "error"
    ]
    if blocking:
        first = blocking[0]
        logger.info(
            "Refusing to compile workflow with validation errors",
            extra={"logical_name": logical_name, "error_count": len(blocking)},
        )
        raise StepContentError(first.message, step_id=first.step_id)

    steps = [step_to_dto(step) for step in definition.steps]
    if not steps:
        raise StepContentError("Flow canvas requires at least one step.")

    first_action = first_action_from_steps(steps)
    if first_action is None:
        raise StepContentError("Flow canvas must contain at least one executable action step.")

    trigger = definition.trigger
    entity = trigger.entity_logical_name.strip()
    return SaveWorkflowRequest(
        logical_name=logical_name,
        display_name=display_name,
        description=description if description and description.strip() else None,
        trigger_type=trigger.type,
        trigger_entity_logical_name=entity if trigger.requires_entity and entity else None,
        action_type=first_action.action_type,
        action_entity_logical_name=first_action.action_entity_logical_name,
        action_payload=first_action.action_payload,
        steps=steps,
        max_attempts=max_attempts,
        is_enabled=is_enabled,
    )


def save_request_to_json(request: SaveWorkflowRequest) -> dict[str, Any]:
    return request.model_dump(mode="json")
