"""Interpolation tokens visible from a selected step.

A step may reference the trigger, the run, and the output of any step that
comes strictly before it in canonical visit order. Because a branch is always
visited after its owning condition, "earlier in visit order" is a safe
forward-only rule without building a dependency graph.

Steps from a sibling branch that will not run are still offered: which branch
runs is only known at execution time.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from workflow_studio.studio.model.steps import (
    CreateRecordStep,
    LogStep,
    Step,
    iter_steps,
)

TokenSource = Literal["trigger", "step", "runtime"]


@dataclass(frozen=True, slots=True)
class DynamicToken:
    token: str
    label: str
    source: TokenSource

    def to_json(self) -> dict[str, str]:
        return {"token": self.token, "label": self.label, "source": self.source}


BASE_TOKENS: tuple[DynamicToken, ...] = (
    DynamicToken("{{trigger.type}}", "Trigger type", "trigger"),
    DynamicToken("{{trigger.entity}}", "Trigger entity", "trigger"),
    DynamicToken("{{trigger.payload.id}}", "Trigger payload id", "trigger"),
    DynamicToken("{{trigger.payload.status}}", "Trigger payload status", "trigger"),
    DynamicToken("{{run.id}}", "Run id", "runtime"),
    DynamicToken("{{run.attempt}}", "Run attempt", "runtime"),
    DynamicToken("{{now.iso}}", "Current time (ISO)", "runtime"),
)


def step_output_token(step_id: str) -> str:
    return f"{{{{steps.{step_id}.output}}}}"


def _step_token_label(step: Step) -> str:
    if isinstance(step, LogStep):
        return f"Log step ({step.id})"
    if isinstance(step, CreateRecordStep):
        return f"Create record ({step.entity_logical_name or step.id})"
    return f"Condition ({step.id})"


def _dedupe(tokens: Iterable[DynamicToken]) -> list[DynamicToken]:
    seen: set[str] = set()
    out: list[DynamicToken] = []
    for token in tokens:
        if token.token in seen:
            continue
        seen.add(token.token)
        out.append(token)
    return out


def dynamic_tokens_for_step(
    steps: Sequence[Step],
    selected_step_id: str | None,
    trigger_payload_field_paths: Iterable[str] = (),
) -> list[DynamicToken]:
    """Tokens legally referenceable from ``selected_step_id``.

    Without a selection (or with an id not in the tree) only the trigger and
    runtime tokens are returned.
    """

    base = [
        *BASE_TOKENS,
        *(
            DynamicToken(
                f"{{{{trigger.payload.{path}}}}}", f"Trigger payload {path}", "trigger"
            )
            for path in trigger_payload_field_paths
        ),
    ]
    if selected_step_id is None:
        return _dedupe(base)

    previous: list[Step] = []
    for step in iter_steps(steps):
        if step.id == selected_step_id:
            break
        previous.append(step)
    else:
        return _dedupe(base)

    step_tokens = (
        DynamicToken(step_output_token(step.id), f"{_step_token_label(step)} output", "step")
        for step in previous
    )
    return _dedupe([*base, *step_tokens])
