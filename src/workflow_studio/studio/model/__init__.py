"""Workflow step tree model and its wire format."""

from workflow_studio.studio.model.ids import IdGenerator, counter_id_generator, uuid_id_generator
from workflow_studio.studio.model.steps import (
    BRANCHES,
    Branch,
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    StepType,
    Trigger,
    TriggerType,
    VisitedStep,
    WorkflowDefinition,
    branches_of,
    find_duplicate_ids,
    iter_steps,
    summarize_step,
    visit_steps,
)
from workflow_studio.studio.model.transport import (
    StepContentError,
    StructuralError,
    definition_from_transport,
    definition_to_transport,
    steps_from_transport,
    steps_to_transport,
)

__all__ = [
    "BRANCHES",
    "Branch",
    "ConditionOperator",
    "ConditionStep",
    "CreateRecordStep",
    "IdGenerator",
    "LogStep",
    "Step",
    "StepContentError",
    "StepType",
    "StructuralError",
    "Trigger",
    "TriggerType",
    "VisitedStep",
    "WorkflowDefinition",
    "branches_of",
    "counter_id_generator",
    "definition_from_transport",
    "definition_to_transport",
    "find_duplicate_ids",
    "iter_steps",
    "steps_from_transport",
    "steps_to_transport",
    "summarize_step",
    "uuid_id_generator",
    "visit_steps",
]
