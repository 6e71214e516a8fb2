"""Immutable edits over a step tree.

Every operation takes a step sequence and returns a new tuple; the input is
never mutated. Ancestors of an edited node are copied, untouched siblings are
shared with the previous tree.

Operations are total. A target id that is not in the tree (UI selection can
lag behind the tree) yields a no-op plus a ``None``/``False`` signal instead of
an exception.

Ids are assumed unique; where that does not hold, operations act on the first
match in canonical visit order.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from typing import Literal, assert_never, cast

from workflow_studio.studio.model.ids import IdGenerator
from workflow_studio.studio.model.steps import (
    Branch,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    branches_of,
    find_duplicate_ids,
    iter_steps,
)

InsertMode = Literal["before", "after", "then", "else"]

__all__ = [
    "DuplicateResult",
    "ExtractResult",
    "InsertMode",
    "InsertResult",
    "append_step_to_branch",
    "duplicate_step_by_id",
    "duplicate_step_with_new_ids",
    "extract_step_by_id",
    "find_duplicate_ids",
    "find_step_by_id",
    "insert_step_relative_to_target",
    "move_step_by_id",
    "remove_step_by_id",
    "step_contains_id",
    "update_step_by_id",
]


@dataclass(frozen=True, slots=True)
class InsertResult:
    steps: tuple[Step, ...]
    inserted: bool


@dataclass(frozen=True, slots=True)
class ExtractResult:
    steps: tuple[Step, ...]
    extracted: Step | None


@dataclass(frozen=True, slots=True)
class DuplicateResult:
    steps: tuple[Step, ...]
    duplicated_step_id: str | None


@dataclass(frozen=True, slots=True)
class _Location:
    """Where a step sits: the (index, branch) hops from the root, then its index."""

    ancestors: tuple[tuple[int, Branch], ...]
    index: int


def _locate(
    steps: Sequence[Step], step_id: str, ancestors: tuple[tuple[int, Branch], ...] = ()
) -> _Location | None:
    for index, step in enumerate(steps):
        if step.id == step_id:
            return _Location(ancestors=ancestors, index=index)
        for name, branch_steps in branches_of(step):
            found = _locate(branch_steps, step_id, (*ancestors, (index, name)))
            if found is not None:
                return found
    return None


def _rebuild(
    steps: Sequence[Step],
    ancestors: tuple[tuple[int, Branch], ...],
    edit: Callable[[tuple[Step, ...]], tuple[Step, ...]],
) -> tuple[Step, ...]:
    """Apply ``edit`` to the sequence reached through ``ancestors``, copying the path."""

    if not ancestors:
        return edit(tuple(steps))

    (index, name), rest = ancestors[0], ancestors[1:]
    condition = steps[index]
    if not isinstance(condition, ConditionStep):
        raise TypeError(f"Step {condition.id} has no branches")
    edited = _rebuild(condition.branch(name), rest, edit)
    return (*steps[:index], condition.with_branch(name, edited), *steps[index + 1 :])


def find_step_by_id(steps: Sequence[Step], step_id: str) -> Step | None:
    for step in iter_steps(steps):
        if step.id == step_id:
            return step
    return None


def step_contains_id(step: Step, step_id: str) -> bool:
    """True when ``step_id`` is this step or any step nested in its branches."""

    if step.id == step_id:
        return True
    return any(
        step_contains_id(nested, step_id)
        for _name, branch_steps in branches_of(step)
        for nested in branch_steps
    )


def update_step_by_id(
    steps: Sequence[Step], step_id: str, updater: Callable[[Step], Step]
) -> tuple[Step, ...]:
    """Replace the first matching step with ``updater(step)``.

    The replacement always keeps the original id. Returns an equal tree when
    the id is absent.
    """

    location = _locate(steps, step_id)
    if location is None:
        return tuple(steps)

    index = location.index

    def edit(seq: tuple[Step, ...]) -> tuple[Step, ...]:
        original = seq[index]
        replaced = updater(original)
        if replaced.id != original.id:
            replaced = replace(replaced, id=original.id)
        return (*seq[:index], replaced, *seq[index + 1 :])

    return _rebuild(steps, location.ancestors, edit)


def remove_step_by_id(steps: Sequence[Step], step_id: str) -> tuple[Step, ...]:
    """Delete every step with ``step_id``; a removed condition takes its branches along."""

    if not any(step_contains_id(step, step_id) for step in steps):
        return tuple(steps)

    kept: list[Step] = []
    for step in steps:
        if step.id == step_id:
            continue
        if isinstance(step, ConditionStep) and step_contains_id(step, step_id):
            step = step.with_branches(
                remove_step_by_id(step.then_steps, step_id),
                remove_step_by_id(step.else_steps, step_id),
            )
        kept.append(step)
    return tuple(kept)


def extract_step_by_id(steps: Sequence[Step], step_id: str) -> ExtractResult:
    """Remove the first matching step and hand it back for re-insertion."""

    location = _locate(steps, step_id)
    if location is None:
        return ExtractResult(steps=tuple(steps), extracted=None)

    index = location.index
    extracted: list[Step] = []

    def edit(seq: tuple[Step, ...]) -> tuple[Step, ...]:
        extracted.append(seq[index])
        return (*seq[:index], *seq[index + 1 :])

    next_steps = _rebuild(steps, location.ancestors, edit)
    return ExtractResult(steps=next_steps, extracted=extracted[0])


def insert_step_relative_to_target(
    steps: Sequence[Step], target_id: str, mode: InsertMode, step_to_insert: Step
) -> InsertResult:
    """Insert ``step_to_insert`` next to, or inside, the target step.

    ``before``/``after`` splice into the sequence holding the target.
    ``then``/``else`` append to the end of that branch and require the target to
    be a condition.
    """

    location = _locate(steps, target_id)
    if location is None:
        return InsertResult(steps=tuple(steps), inserted=False)

    index = location.index

    if mode == "before" or mode == "after":
        offset = 0 if mode == "before" else 1

        def splice(seq: tuple[Step, ...]) -> tuple[Step, ...]:
            at = index + offset
            return (*seq[:at], step_to_insert, *seq[at:])

        return InsertResult(steps=_rebuild(steps, location.ancestors, splice), inserted=True)

    if mode == "then" or mode == "else":
        branch: Branch = mode
        target = find_step_by_id(steps, target_id)
        if not isinstance(target, ConditionStep):
            return InsertResult(steps=tuple(steps), inserted=False)

        def append(seq: tuple[Step, ...]) -> tuple[Step, ...]:
            condition = cast(ConditionStep, seq[index])
            grown = condition.with_branch(branch, (*condition.branch(branch), step_to_insert))
            return (*seq[:index], grown, *seq[index + 1 :])

        return InsertResult(steps=_rebuild(steps, location.ancestors, append), inserted=True)

    assert_never(mode)


def append_step_to_branch(
    steps: Sequence[Step], condition_step_id: str, branch: Branch, step: Step
) -> InsertResult:
    return insert_step_relative_to_target(steps, condition_step_id, branch, step)


def duplicate_step_with_new_ids(step: Step, create_id: IdGenerator) -> Step:
    """Deep-copy a subtree, giving every node in the copy a fresh id."""

    if isinstance(step, LogStep | CreateRecordStep):
        return replace(step, id=create_id())
    if isinstance(step, ConditionStep):
        copied = replace(step, id=create_id())
        return copied.with_branches(
            [duplicate_step_with_new_ids(nested, create_id) for nested in step.then_steps],
            [duplicate_step_with_new_ids(nested, create_id) for nested in step.else_steps],
        )
    assert_never(step)


def duplicate_step_by_id(
    steps: Sequence[Step], step_id: str, create_id: IdGenerator
) -> DuplicateResult:
    """Clone the subtree rooted at ``step_id`` and place the clone right after it."""

    location = _locate(steps, step_id)
    if location is None:
        return DuplicateResult(steps=tuple(steps), duplicated_step_id=None)

    index = location.index
    clones: list[Step] = []

    def edit(seq: tuple[Step, ...]) -> tuple[Step, ...]:
        clone = duplicate_step_with_new_ids(seq[index], create_id)
        clones.append(clone)
        return (*seq[: index + 1], clone, *seq[index + 1 :])

    next_steps = _rebuild(steps, location.ancestors, edit)
    return DuplicateResult(steps=next_steps, duplicated_step_id=clones[0].id)


def move_step_by_id(
    steps: Sequence[Step], step_id: str, target_id: str, mode: InsertMode
) -> InsertResult:
    """Move a step (with its branches) relative to another step.

    Refuses to move a step next to or into itself or one of its descendants.
    On any failure the original tree is returned unchanged.
    """

    original = tuple(steps)
    moving = find_step_by_id(original, step_id)
    if moving is None or step_contains_id(moving, target_id):
        return InsertResult(steps=original, inserted=False)

    extracted = extract_step_by_id(original, step_id)
    if extracted.extracted is None:
        return InsertResult(steps=original, inserted=False)
    result = insert_step_relative_to_target(extracted.steps, target_id, mode, extracted.extracted)
    if not result.inserted:
        return InsertResult(steps=original, inserted=False)
    return result
