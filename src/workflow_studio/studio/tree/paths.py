"""Step paths: positional addresses shared with the execution runtime.

Path grammar::

    path    := index ( "." branch "." index )*
    branch  := "then" | "else"

Root steps are ``0``, ``1``, ...; the first step of the ``then`` branch of
root step 1 is ``1.then.0``. The runtime reports per-step outcomes keyed by
this exact format, so it is a wire contract: change it only together with the
runtime.

Paths are derived from tree shape on every call; the step ``id`` is the only
durable identity.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from workflow_studio.studio.model.steps import Step, visit_steps

_PATH_RE = re.compile(r"[0-9]+(\.(then|else)\.[0-9]+)*")
_BRANCH_RANK = {"then": 0, "else": 1}


@dataclass(frozen=True, slots=True)
class StepPathIndex:
    by_step_id: dict[str, str]
    by_path: dict[str, Step]

    def path_of(self, step_id: str) -> str | None:
        return self.by_step_id.get(step_id)

    def step_at(self, path: str) -> Step | None:
        return self.by_path.get(path)


def build_step_path_index(steps: Sequence[Step]) -> StepPathIndex:
    by_step_id: dict[str, str] = {}
    by_path: dict[str, Step] = {}
    for visited in visit_steps(steps):
        by_step_id[visited.step.id] = visited.path
        by_path[visited.path] = visited.step
    return StepPathIndex(by_step_id=by_step_id, by_path=by_path)


def parse_step_path(path: str) -> tuple[int | str, ...]:
    """Split a path into its segments (indices as ints, branch names as str)."""

    if not _PATH_RE.fullmatch(path):
        raise ValueError(f"Invalid step path: {path!r}")
    return tuple(int(part) if part.isdigit() else part for part in path.split("."))


def path_sort_key(path: str) -> tuple[int, ...]:
    """Key under which sorted paths follow canonical visit order.

    Indices compare numerically, ``then`` sorts before ``else`` and an
    ancestor sorts before its descendants.
    """

    return tuple(
        segment if isinstance(segment, int) else _BRANCH_RANK[segment]
        for segment in parse_step_path(path)
    )


@dataclass(frozen=True, slots=True)
class StepTrace:
    """One step outcome as reported by the execution runtime."""

    step_path: str
    step_type: str
    status: str
    input_payload: dict[str, Any] = field(default_factory=dict)
    output_payload: dict[str, Any] = field(default_factory=dict)
    error_message: str | None = None
    duration_ms: int | None = None

    @staticmethod
    def from_json(obj: dict[str, Any]) -> StepTrace:
        def _dict(v: object) -> dict[str, Any]:
            return v if isinstance(v, dict) else {}

        duration = obj.get("duration_ms")
        error = obj.get("error_message")
        return StepTrace(
            step_path=str(obj["step_path"]),
            step_type=str(obj.get("step_type", "")),
            status=str(obj.get("status", "")),
            input_payload=_dict(obj.get("input_payload")),
            output_payload=_dict(obj.get("output_payload")),
            error_message=error if isinstance(error, str) else None,
            duration_ms=duration if isinstance(duration, int) else None,
        )


def step_trace_map_by_path(traces: Iterable[StepTrace] | None) -> dict[str, StepTrace]:
    """Index runtime traces by step path; a later trace for the same path wins."""

    if not traces:
        return {}
    return {trace.step_path: trace for trace in traces}


def traces_by_step_id(
    index: StepPathIndex, traces: Iterable[StepTrace] | None
) -> dict[str, StepTrace]:
    """Join traces onto the current definition's step ids.

    Traces whose path no longer exists in the tree are dropped.
    """

    by_path = step_trace_map_by_path(traces)
    return {
        step.id: by_path[path] for path, step in index.by_path.items() if path in by_path
    }
