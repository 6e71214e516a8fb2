"""Transport (wire) shapes for workflow definitions.

The wire format uses snake_case fields and a ``type`` tag per step. Step
payloads (``data``, ``value``) travel as structured JSON; in the editor model
they are JSON text.

Malformed input fails fast with :class:`StructuralError`: a corrupted
definition cannot be repaired by the editor.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal, assert_never

from pydantic import BaseModel, Field, JsonValue, ValidationError

from .ids import IdGenerator
from .json_text import InvalidJsonText, format_json, parse_json_object, parse_json_value
from .steps import (
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    Trigger,
    TriggerType,
    WorkflowDefinition,
    find_duplicate_ids,
)

logger = logging.getLogger(__name__)

DEFAULT_THEN_LABEL = "Yes"
DEFAULT_ELSE_LABEL = "No"


class StructuralError(ValueError):
    """Transport input does not describe a well-formed step tree."""


class StepContentError(ValueError):
    """A step's authored content cannot be compiled for the wire."""

    def __init__(self, message: str, *, step_id: str | None = None) -> None:
        super().__init__(message)
        self.step_id = step_id


class LogMessageStepDto(BaseModel):
    type: Literal["log_message"]
    id: str | None = None
    message: str


class CreateRuntimeRecordStepDto(BaseModel):
    type: Literal["create_runtime_record"]
    id: str | None = None
    entity_logical_name: str
    data: JsonValue


class ConditionStepDto(BaseModel):
    type: Literal["condition"]
    id: str | None = None
    field_path: str
    operator: ConditionOperator
    value: JsonValue = None
    then_label: str | None = None
    else_label: str | None = None
    then_steps: list[WorkflowStepDto]
    else_steps: list[WorkflowStepDto]


WorkflowStepDto = Annotated[
    LogMessageStepDto | CreateRuntimeRecordStepDto | ConditionStepDto,
    Field(discriminator="type"),
]

ConditionStepDto.model_rebuild()


class WorkflowTriggerDto(BaseModel):
    type: TriggerType = TriggerType.MANUAL
    entity_logical_name: str | None = None


class WorkflowDefinitionDto(BaseModel):
    trigger: WorkflowTriggerDto = Field(default_factory=WorkflowTriggerDto)
    steps: list[WorkflowStepDto]


def _resolve_id(dto_id: str | None, create_id: IdGenerator | None) -> str:
    if dto_id is not None and dto_id.strip():
        return dto_id
    if create_id is None:
        raise StructuralError("Step is missing an id and no id generator was supplied")
    return create_id()


def step_from_dto(
    dto: LogMessageStepDto | CreateRuntimeRecordStepDto | ConditionStepDto,
    create_id: IdGenerator | None = None,
) -> Step:
    step_id = _resolve_id(dto.id, create_id)
    if isinstance(dto, LogMessageStepDto):
        return LogStep(id=step_id, message=dto.message)
    if isinstance(dto, CreateRuntimeRecordStepDto):
        return CreateRecordStep(
            id=step_id,
            entity_logical_name=dto.entity_logical_name,
            data_json=format_json(dto.data),
        )
    if isinstance(dto, ConditionStepDto):
        return ConditionStep(
            id=step_id,
            field_path=dto.field_path,
            operator=dto.operator,
            value_json=(
                "null" if dto.operator is ConditionOperator.EXISTS else format_json(dto.value)
            ),
            then_label=dto.then_label or DEFAULT_THEN_LABEL,
            else_label=dto.else_label or DEFAULT_ELSE_LABEL,
            then_steps=tuple(step_from_dto(s, create_id) for s in dto.then_steps),
            else_steps=tuple(step_from_dto(s, create_id) for s in dto.else_steps),
        )
    assert_never(dto)


def step_to_dto(step: Step) -> LogMessageStepDto | CreateRuntimeRecordStepDto | ConditionStepDto:
    """Compile an editor step to its wire shape.

    Raises:
        StepContentError: when authored JSON text does not parse.
    """

    if isinstance(step, LogStep):
        return LogMessageStepDto(type="log_message", id=step.id, message=step.message)
    if isinstance(step, CreateRecordStep):
        try:
            data = parse_json_object(step.data_json, "Create record step data")
        except InvalidJsonText as e:
            raise StepContentError(str(e), step_id=step.id) from e
        return CreateRuntimeRecordStepDto(
            type="create_runtime_record",
            id=step.id,
            entity_logical_name=step.entity_logical_name,
            data=data,
        )
    if isinstance(step, ConditionStep):
        value: JsonValue = None
        if step.operator is not ConditionOperator.EXISTS:
            try:
                value = parse_json_value(step.value_json, "Condition value")
            except InvalidJsonText as e:
                raise StepContentError(str(e), step_id=step.id) from e
        return ConditionStepDto(
            type="condition",
            id=step.id,
            field_path=step.field_path,
            operator=step.operator,
            value=value,
            then_label=step.then_label.strip() or None,
            else_label=step.else_label.strip() or None,
            then_steps=[step_to_dto(s) for s in step.then_steps],
            else_steps=[step_to_dto(s) for s in step.else_steps],
        )
    assert_never(step)


def trigger_from_dto(dto: WorkflowTriggerDto) -> Trigger:
    return Trigger(type=dto.type, entity_logical_name=dto.entity_logical_name or "")


def trigger_to_dto(trigger: Trigger) -> WorkflowTriggerDto:
    return WorkflowTriggerDto(
        type=trigger.type, entity_logical_name=trigger.entity_logical_name or None
    )


def definition_from_transport(
    payload: Mapping[str, Any], create_id: IdGenerator | None = None
) -> WorkflowDefinition:
    """Parse a wire payload into an editor definition.

    Steps without an ``id`` get one from ``create_id``. Duplicate ids are
    rejected here so the editor never starts from an ambiguous tree.
    """

    try:
        dto = WorkflowDefinitionDto.model_validate(payload)
    except ValidationError as e:
        logger.warning("Rejected malformed workflow definition", extra={"errors": e.error_count()})
        raise StructuralError(f"Malformed workflow definition: {e}") from e

    definition = WorkflowDefinition(
        trigger=trigger_from_dto(dto.trigger),
        steps=tuple(step_from_dto(s, create_id) for s in dto.steps),
    )

    duplicates = find_duplicate_ids(definition.steps)
    if duplicates:
        raise StructuralError(f"Duplicate step ids: {', '.join(duplicates)}")
    return definition


def definition_to_transport(definition: WorkflowDefinition) -> dict[str, Any]:
    dto = WorkflowDefinitionDto(
        trigger=trigger_to_dto(definition.trigger),
        steps=[step_to_dto(s) for s in definition.steps],
    )
    return dto.model_dump(mode="json")


def steps_from_transport(
    payload: Sequence[Mapping[str, Any]], create_id: IdGenerator | None = None
) -> tuple[Step, ...]:
    return definition_from_transport({"steps": list(payload)}, create_id).steps


def steps_to_transport(steps: Sequence[Step]) -> list[dict[str, Any]]:
    return [step_to_dto(s).model_dump(mode="json") for s in steps]
