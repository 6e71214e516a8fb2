"""Canvas layout: a deterministic 2-D position for every node.

Single depth-first pass with row reservation:

- a step at nesting depth ``d`` sits in lane ``d`` (``x = base + d * lane_width``)
- each lane remembers which rows are taken; a step takes the first free row at
  or below its sequence's cursor
- a condition lays out its ``then`` branch one lane right, starting one row
  above itself, then its ``else`` branch starting below both itself and the
  ``then`` branch; the next sibling starts below everything either branch used

No relaxation or iteration: the same tree always gives the same layout, which
keeps canvas diffs and tests stable.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from workflow_studio.studio.model.steps import (
    ConditionStep,
    Step,
    TriggerType,
    WorkflowDefinition,
    branches_of,
    summarize_step,
)

TRIGGER_NODE_ID = "trigger"

TRIGGER_LABELS: dict[TriggerType, str] = {
    TriggerType.MANUAL: "Manual trigger",
    TriggerType.RECORD_CREATED: "Record created",
    TriggerType.RECORD_UPDATED: "Record updated",
    TriggerType.RECORD_DELETED: "Record deleted",
    TriggerType.SCHEDULE_TICK: "Schedule tick",
}

STEP_TYPE_LABELS: dict[str, str] = {
    "log_message": "Log message",
    "create_runtime_record": "Create record",
    "condition": "Condition",
}


@dataclass(frozen=True, slots=True)
class LayoutOptions:
    origin_x: int = 40
    origin_y: int = 40
    lane_width: int = 280
    row_height: int = 120

    @property
    def base_offset(self) -> int:
        """x of the root lane; the trigger sits one lane to its left."""

        return self.origin_x + self.lane_width


@dataclass(frozen=True, slots=True)
class CanvasPosition:
    x: int
    y: int


@dataclass(frozen=True, slots=True)
class CanvasLayout:
    positions: dict[str, CanvasPosition]
    lane_count: int
    row_count: int

    def to_json(self) -> dict[str, object]:
        return {
            "positions": {
                node_id: {"x": pos.x, "y": pos.y} for node_id, pos in self.positions.items()
            },
            "lane_count": self.lane_count,
            "row_count": self.row_count,
        }


class _RowReservations:
    """Taken rows per lane plus the overall high-water mark."""

    def __init__(self) -> None:
        self._taken: dict[int, set[int]] = {}
        self.high_water = 0

    def reserve(self, lane: int, preferred_row: int) -> int:
        taken = self._taken.setdefault(lane, set())
        row = max(preferred_row, 0)
        while row in taken:
            row += 1
        taken.add(row)
        self.high_water = max(self.high_water, row + 1)
        return row

    @property
    def lane_count(self) -> int:
        return len(self._taken)


def compute_canvas_layout(
    steps: Sequence[Step], options: LayoutOptions | None = None
) -> CanvasLayout:
    opts = options or LayoutOptions()
    rows = _RowReservations()
    positions: dict[str, CanvasPosition] = {
        TRIGGER_NODE_ID: CanvasPosition(x=opts.origin_x, y=opts.origin_y)
    }

    def place(sequence: Sequence[Step], depth: int, start_row: int) -> int:
        """Lay out one sequence; return the first row free below it."""

        cursor = start_row
        for step in sequence:
            row = rows.reserve(depth, cursor)
            positions[step.id] = CanvasPosition(
                x=opts.base_offset + depth * opts.lane_width,
                y=opts.origin_y + row * opts.row_height,
            )
            next_row = row + 1
            branch_end: int | None = None
            for _name, branch_steps in branches_of(step):
                # then: prefer the row above; else: below the condition and the then branch.
                preferred = row - 1 if branch_end is None else max(row + 1, branch_end)
                branch_end = place(branch_steps, depth + 1, preferred)
                next_row = max(next_row, branch_end)
            cursor = next_row
        return cursor

    place(steps, 0, 0)
    return CanvasLayout(
        positions=positions,
        lane_count=rows.lane_count,
        row_count=max(rows.high_water, 1),
    )


NodeKind = Literal["trigger", "step"]
NodeTone = Literal["trigger", "condition", "action"]


@dataclass(frozen=True, slots=True)
class CanvasNode:
    id: str
    kind: NodeKind
    title: str
    subtitle: str
    tone: NodeTone


@dataclass(frozen=True, slots=True)
class CanvasEdge:
    id: str
    source: str
    target: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class CanvasGraph:
    nodes: list[CanvasNode] = field(default_factory=list)
    edges: list[CanvasEdge] = field(default_factory=list)

    def to_json(self) -> dict[str, object]:
        return {
            "nodes": [
                {
                    "id": n.id,
                    "kind": n.kind,
                    "title": n.title,
                    "subtitle": n.subtitle,
                    "tone": n.tone,
                }
                for n in self.nodes
            ],
            "edges": [
                {"id": e.id, "source": e.source, "target": e.target, "label": e.label}
                for e in self.edges
            ],
        }


def build_canvas_graph(definition: WorkflowDefinition) -> CanvasGraph:
    """Nodes and connectors for the canvas, in canonical visit order."""

    trigger = definition.trigger
    graph = CanvasGraph(
        nodes=[
            CanvasNode(
                id=TRIGGER_NODE_ID,
                kind="trigger",
                title=TRIGGER_LABELS[trigger.type],
                subtitle=trigger.entity_logical_name if trigger.requires_entity else "",
                tone="trigger",
            )
        ]
    )

    def connect(source: str, target: str, label: str | None = None) -> None:
        graph.edges.append(
            CanvasEdge(id=f"{source}->{target}", source=source, target=target, label=label)
        )

    def add_sequence(sequence: Sequence[Step]) -> None:
        previous: Step | None = None
        for step in sequence:
            graph.nodes.append(
                CanvasNode(
                    id=step.id,
                    kind="step",
                    title=summarize_step(step),
                    subtitle=STEP_TYPE_LABELS[step.type],
                    tone="condition" if isinstance(step, ConditionStep) else "action",
                )
            )
            if previous is not None:
                connect(previous.id, step.id)
            if isinstance(step, ConditionStep):
                for name, branch_steps in branches_of(step):
                    if branch_steps:
                        label = step.then_label if name == "then" else step.else_label
                        connect(step.id, branch_steps[0].id, label.strip() or None)
                    add_sequence(branch_steps)
            previous = step

    if definition.steps:
        connect(TRIGGER_NODE_ID, definition.steps[0].id)
    add_sequence(definition.steps)
    return graph
