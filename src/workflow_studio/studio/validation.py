"""Static validation of a workflow definition.

Findings are data, never exceptions: an incomplete flow is a normal state
while editing. The list is ordered (definition-level issues first, then steps
in canonical visit order) and deterministic for a given tree.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, assert_never

from workflow_studio.studio.model.json_text import InvalidJsonText, parse_json_value
from workflow_studio.studio.model.steps import (
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    TriggerType,
    WorkflowDefinition,
    find_duplicate_ids,
    iter_steps,
)

IssueLevel = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class WorkflowValidationIssue:
    id: str
    step_id: str | None
    level: IssueLevel
    message: str

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "step_id": self.step_id,
            "level": self.level,
            "message": self.message,
        }


class _IssueCollector:
    def __init__(self) -> None:
        self.issues: list[WorkflowValidationIssue] = []

    def add(self, step_id: str | None, level: IssueLevel, message: str) -> None:
        self.issues.append(
            WorkflowValidationIssue(
                id=f"workflow_issue_{len(self.issues) + 1}",
                step_id=step_id,
                level=level,
                message=message,
            )
        )

    def error(self, step_id: str | None, message: str) -> None:
        self.add(step_id, "error", message)

    def warning(self, step_id: str | None, message: str) -> None:
        self.add(step_id, "warning", message)


def _validate_step(step: Step, issues: _IssueCollector) -> None:
    if isinstance(step, LogStep):
        if not step.message.strip():
            issues.error(step.id, "Log message step is empty.")
        return

    if isinstance(step, CreateRecordStep):
        if not step.entity_logical_name.strip():
            issues.error(step.id, "Create record step is missing an entity logical name.")
        try:
            data = parse_json_value(step.data_json, "Create record step data")
        except InvalidJsonText:
            issues.error(step.id, "Create record step data contains invalid JSON.")
        else:
            if not isinstance(data, dict):
                issues.error(step.id, "Create record step data must be a JSON object.")
        return

    if isinstance(step, ConditionStep):
        if not step.field_path.strip():
            issues.error(step.id, "Condition step requires a payload field path.")
        if step.operator is not ConditionOperator.EXISTS:
            try:
                parse_json_value(step.value_json, "Condition value")
            except InvalidJsonText:
                issues.error(
                    step.id, "Condition value must be valid JSON for non-exists operators."
                )
        if not step.then_steps and not step.else_steps:
            issues.error(step.id, "Condition step must include at least one action in a branch.")
        if not step.then_label.strip() or not step.else_label.strip():
            issues.warning(step.id, "Condition branch label is blank; Yes/No will be used.")
        return

    assert_never(step)


def collect_workflow_validation_issues(
    definition: WorkflowDefinition,
) -> list[WorkflowValidationIssue]:
    issues = _IssueCollector()
    trigger = definition.trigger

    if not definition.steps:
        issues.error(None, "Flow canvas requires at least one step.")

    if trigger.requires_entity and not trigger.entity_logical_name.strip():
        if trigger.type is TriggerType.SCHEDULE_TICK:
            issues.error(None, "Schedule tick trigger requires a schedule key.")
        else:
            issues.error(None, "Runtime record trigger requires an entity logical name.")

    for duplicate in find_duplicate_ids(definition.steps):
        issues.error(duplicate, f"Step id '{duplicate}' is used by more than one step.")

    for step in iter_steps(definition.steps):
        _validate_step(step, issues)
    return issues.issues


def has_blocking_issues(issues: Sequence[WorkflowValidationIssue]) -> bool:
    return any(issue.level == "error" for issue in issues)
