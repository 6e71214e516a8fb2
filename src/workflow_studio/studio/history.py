"""Linear undo/redo history of whole-editor snapshots.

Snapshots hold the immutable tree directly; since edits never mutate a tree
in place, storing references is enough.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from workflow_studio.studio.model.steps import Step, Trigger, WorkflowDefinition

InspectorNode = Literal["trigger", "step"]


@dataclass(frozen=True, slots=True)
class CanvasHistorySnapshot:
    trigger: Trigger
    steps: tuple[Step, ...]
    selected_step_id: str | None
    inspector_node: InspectorNode

    @property
    def definition(self) -> WorkflowDefinition:
        return WorkflowDefinition(trigger=self.trigger, steps=self.steps)


class EditorHistory:
    """Snapshots with a cursor on the current one.

    ``limit`` is the number of undo steps kept; older snapshots are dropped.
    Pushing after an undo discards the redo tail.
    """

    def __init__(self, initial: CanvasHistorySnapshot, limit: int = 100) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._limit = limit
        self._entries: list[CanvasHistorySnapshot] = [initial]
        self._cursor = 0

    @property
    def current(self) -> CanvasHistorySnapshot:
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    @property
    def undo_depth(self) -> int:
        return self._cursor

    @property
    def redo_depth(self) -> int:
        return len(self._entries) - 1 - self._cursor

    def push(self, snapshot: CanvasHistorySnapshot) -> None:
        del self._entries[self._cursor + 1 :]
        self._entries.append(snapshot)
        overflow = len(self._entries) - (self._limit + 1)
        if overflow > 0:
            del self._entries[:overflow]
        self._cursor = len(self._entries) - 1

    def replace_current(self, snapshot: CanvasHistorySnapshot) -> None:
        """Swap the current snapshot without creating an undo step (selection changes)."""

        self._entries[self._cursor] = snapshot

    def undo(self) -> CanvasHistorySnapshot | None:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self.current

    def redo(self) -> CanvasHistorySnapshot | None:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self.current
