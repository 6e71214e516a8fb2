"""Step tree data model.

A workflow definition is a trigger plus a root sequence of steps. Only
condition steps introduce further sequences (``then_steps`` / ``else_steps``),
so the whole structure is a forest of ordered sequences, never a graph.

All types are frozen and branch sequences are tuples: an edit always produces a
new tree, which keeps undo snapshots valid.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal, TypeAlias, assert_never


class TriggerType(str, Enum):
    MANUAL = "manual"
    RECORD_CREATED = "runtime_record_created"
    RECORD_UPDATED = "runtime_record_updated"
    RECORD_DELETED = "runtime_record_deleted"
    SCHEDULE_TICK = "schedule_tick"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    EXISTS = "exists"


Branch = Literal["then", "else"]
BRANCHES: tuple[Branch, Branch] = ("then", "else")


@dataclass(frozen=True, slots=True)
class Trigger:
    """What starts a workflow.

    ``entity_logical_name`` holds the schedule key for ``schedule_tick`` and is
    ignored for ``manual``.
    """

    type: TriggerType = TriggerType.MANUAL
    entity_logical_name: str = ""

    @property
    def requires_entity(self) -> bool:
        return self.type is not TriggerType.MANUAL


@dataclass(frozen=True, slots=True)
class LogStep:
    id: str
    message: str = ""

    type: Literal["log_message"] = field(default="log_message", init=False)


@dataclass(frozen=True, slots=True)
class CreateRecordStep:
    """Create a runtime record.

    ``data_json`` is the authored JSON text; it is parsed at the save boundary.
    """

    id: str
    entity_logical_name: str = ""
    data_json: str = "{}"

    type: Literal["create_runtime_record"] = field(default="create_runtime_record", init=False)


@dataclass(frozen=True, slots=True)
class ConditionStep:
    id: str
    field_path: str = ""
    operator: ConditionOperator = ConditionOperator.EQUALS
    value_json: str = "null"
    then_label: str = "Yes"
    else_label: str = "No"
    then_steps: tuple[Step, ...] = ()
    else_steps: tuple[Step, ...] = ()

    type: Literal["condition"] = field(default="condition", init=False)

    def branch(self, name: Branch) -> tuple[Step, ...]:
        if name == "then":
            return self.then_steps
        return self.else_steps

    def with_branch(self, name: Branch, steps: Sequence[Step]) -> ConditionStep:
        if name == "then":
            return replace(self, then_steps=tuple(steps))
        return replace(self, else_steps=tuple(steps))

    def with_branches(
        self, then_steps: Sequence[Step], else_steps: Sequence[Step]
    ) -> ConditionStep:
        return self.with_branch("then", then_steps).with_branch("else", else_steps)


Step: TypeAlias = LogStep | CreateRecordStep | ConditionStep
StepType = Literal["log_message", "create_runtime_record", "condition"]


@dataclass(frozen=True, slots=True)
class WorkflowDefinition:
    trigger: Trigger = field(default_factory=Trigger)
    steps: tuple[Step, ...] = ()

    def with_steps(self, steps: Sequence[Step]) -> WorkflowDefinition:
        return WorkflowDefinition(trigger=self.trigger, steps=tuple(steps))

    def with_trigger(self, trigger: Trigger) -> WorkflowDefinition:
        return WorkflowDefinition(trigger=trigger, steps=self.steps)


@dataclass(frozen=True, slots=True)
class VisitedStep:
    """A step as seen by the canonical visit, with its derived position."""

    step: Step
    path: str
    depth: int


def branches_of(step: Step) -> Iterator[tuple[Branch, tuple[Step, ...]]]:
    """Yield a step's child sequences in canonical order (then before else)."""

    if isinstance(step, ConditionStep):
        for name in BRANCHES:
            yield name, step.branch(name)


def visit_steps(steps: Sequence[Step], prefix: str = "", depth: int = 0) -> Iterator[VisitedStep]:
    """Canonical visit: each step in order, a condition's branches before its next sibling.

    Layout, validation, path indexing and token visibility all rely on this
    order.
    """

    for index, step in enumerate(steps):
        path = f"{index}" if not prefix else f"{prefix}.{index}"
        yield VisitedStep(step=step, path=path, depth=depth)
        for name, branch_steps in branches_of(step):
            yield from visit_steps(branch_steps, f"{path}.{name}", depth + 1)


def iter_steps(steps: Sequence[Step]) -> Iterator[Step]:
    for visited in visit_steps(steps):
        yield visited.step


def summarize_step(step: Step) -> str:
    """One-line label used by outlines and canvas nodes."""

    if isinstance(step, LogStep):
        return f"Log: {step.message}" if step.message.strip() else "Log message"
    if isinstance(step, CreateRecordStep):
        if step.entity_logical_name.strip():
            return f"Create: {step.entity_logical_name}"
        return "Create runtime record"
    if isinstance(step, ConditionStep):
        return f"{step.field_path or '[field path]'} {step.operator.value}"
    assert_never(step)


def find_duplicate_ids(steps: Sequence[Step]) -> list[str]:
    """Ids that occur more than once anywhere in the tree, in visit order."""

    seen: set[str] = set()
    duplicates: list[str] = []
    for step in iter_steps(steps):
        if step.id in seen and step.id not in duplicates:
            duplicates.append(step.id)
        seen.add(step.id)
    return duplicates
