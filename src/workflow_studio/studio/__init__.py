"""Workflow editing engine: model, tree edits, layout, validation and tokens."""

from workflow_studio.studio.model import (
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    StepContentError,
    StructuralError,
    Trigger,
    TriggerType,
    WorkflowDefinition,
    definition_from_transport,
    definition_to_transport,
)
from workflow_studio.studio.session import EditorSession, StudioView

__all__ = [
    "ConditionOperator",
    "ConditionStep",
    "CreateRecordStep",
    "EditorSession",
    "LogStep",
    "Step",
    "StepContentError",
    "StructuralError",
    "StudioView",
    "Trigger",
    "TriggerType",
    "WorkflowDefinition",
    "definition_from_transport",
    "definition_to_transport",
]
