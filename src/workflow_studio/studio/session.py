"""Editor session: one definition being edited, with selection and undo.

The session is a thin stateful shell over the pure tree operations. Every
successful edit pushes one history snapshot; a failed edit returns ``False``
and leaves both the tree and the history untouched. Selection changes are
not undo steps.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import Any, Literal

from workflow_studio.studio.history import CanvasHistorySnapshot, EditorHistory, InspectorNode
from workflow_studio.studio.layout import (
    CanvasGraph,
    CanvasLayout,
    LayoutOptions,
    build_canvas_graph,
    compute_canvas_layout,
)
from workflow_studio.studio.model.ids import IdGenerator, counter_id_generator
from workflow_studio.studio.model.steps import (
    Branch,
    ConditionStep,
    Step,
    StepType,
    Trigger,
    WorkflowDefinition,
)
from workflow_studio.studio.templates import (
    create_draft_step,
    create_template_step,
    trigger_template_config,
)
from workflow_studio.studio.tokens import DynamicToken, dynamic_tokens_for_step
from workflow_studio.studio.tree.operations import (
    InsertMode,
    append_step_to_branch,
    duplicate_step_by_id,
    find_step_by_id,
    insert_step_relative_to_target,
    move_step_by_id,
    remove_step_by_id,
    update_step_by_id,
)
from workflow_studio.studio.tree.paths import StepPathIndex, build_step_path_index
from workflow_studio.studio.validation import (
    WorkflowValidationIssue,
    collect_workflow_validation_issues,
)

logger = logging.getLogger(__name__)

CatalogInsertMode = Literal["after_selected", "root", "then_selected", "else_selected"]


@dataclass(frozen=True, slots=True)
class StudioView:
    """Everything the editor surface derives from the current tree."""

    layout: CanvasLayout
    graph: CanvasGraph
    issues: list[WorkflowValidationIssue]
    tokens: list[DynamicToken]
    path_index: StepPathIndex


class EditorSession:
    def __init__(
        self,
        definition: WorkflowDefinition | None = None,
        *,
        create_id: IdGenerator | None = None,
        history_limit: int = 100,
        layout_options: LayoutOptions | None = None,
    ) -> None:
        start = definition or WorkflowDefinition()
        self._create_id = create_id or counter_id_generator()
        self._layout_options = layout_options or LayoutOptions()
        self._history = EditorHistory(
            CanvasHistorySnapshot(
                trigger=start.trigger,
                steps=start.steps,
                selected_step_id=None,
                inspector_node="trigger",
            ),
            limit=history_limit,
        )

    @property
    def definition(self) -> WorkflowDefinition:
        return self._history.current.definition

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._history.current.steps

    @property
    def trigger(self) -> Trigger:
        return self._history.current.trigger

    @property
    def selected_step_id(self) -> str | None:
        return self._history.current.selected_step_id

    @property
    def inspector_node(self) -> InspectorNode:
        return self._history.current.inspector_node

    @property
    def selected_step(self) -> Step | None:
        if self.selected_step_id is None:
            return None
        return find_step_by_id(self.steps, self.selected_step_id)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    # Selection

    def select_step(self, step_id: str) -> bool:
        if find_step_by_id(self.steps, step_id) is None:
            return False
        self._history.replace_current(
            replace(self._history.current, selected_step_id=step_id, inspector_node="step")
        )
        return True

    def select_trigger(self) -> None:
        self._history.replace_current(
            replace(self._history.current, selected_step_id=None, inspector_node="trigger")
        )

    # Edits

    def _commit(self, action: str, **changes: Any) -> bool:
        """Push the current snapshot with ``changes`` applied as one undo step."""

        snapshot = replace(self._history.current, **changes)
        self._history.push(snapshot)
        logger.debug(
            "Applied editor action",
            extra={"action": action, "step_count": len(snapshot.steps)},
        )
        return True

    def set_trigger(self, trigger: Trigger) -> bool:
        if trigger == self.trigger:
            return False
        return self._commit("set_trigger", trigger=trigger)

    def update_step(self, step_id: str, updater: Callable[[Step], Step]) -> bool:
        if find_step_by_id(self.steps, step_id) is None:
            return False
        return self._commit("update_step", steps=update_step_by_id(self.steps, step_id, updater))

    def insert_step(self, step: Step, mode: CatalogInsertMode = "after_selected") -> bool:
        """Insert ``step`` relative to the selection and select it.

        Without a usable selection (nothing selected, selection gone, or a
        branch mode on a non-condition) the step is appended to the root.
        """

        steps = self.steps
        selected_id = self.selected_step_id
        next_steps: tuple[Step, ...] | None = None

        if mode != "root" and selected_id is not None:
            if mode == "after_selected":
                result = insert_step_relative_to_target(steps, selected_id, "after", step)
                if result.inserted:
                    next_steps = result.steps
            elif isinstance(find_step_by_id(steps, selected_id), ConditionStep):
                branch: Branch = "then" if mode == "then_selected" else "else"
                next_steps = append_step_to_branch(steps, selected_id, branch, step).steps

        if next_steps is None:
            next_steps = (*steps, step)
        return self._commit(
            "insert_step", steps=next_steps, selected_step_id=step.id, inspector_node="step"
        )

    def add_draft_step(self, step_type: StepType, mode: CatalogInsertMode = "root") -> str:
        step = create_draft_step(step_type, self._create_id)
        self.insert_step(step, mode)
        return step.id

    def insert_template(
        self, template_id: str, mode: CatalogInsertMode = "after_selected"
    ) -> bool:
        """Apply a catalog template: trigger templates reconfigure the trigger,
        step templates insert a new step.

        Raises:
            UnknownTemplateError: ``template_id`` is not in the catalog.
        """

        config = trigger_template_config(template_id)
        if config is not None:
            if config.trigger == self.trigger:
                return False
            return self._commit(
                "apply_trigger_template",
                trigger=config.trigger,
                selected_step_id=None,
                inspector_node="trigger",
            )
        return self.insert_step(create_template_step(template_id, self._create_id), mode)

    def remove_step(self, step_id: str) -> bool:
        if find_step_by_id(self.steps, step_id) is None:
            return False
        next_steps = remove_step_by_id(self.steps, step_id)
        selected_id = self.selected_step_id
        if selected_id is not None and find_step_by_id(next_steps, selected_id) is None:
            return self._commit(
                "remove_step", steps=next_steps, selected_step_id=None, inspector_node="trigger"
            )
        return self._commit("remove_step", steps=next_steps)

    def duplicate_step(self, step_id: str) -> bool:
        result = duplicate_step_by_id(self.steps, step_id, self._create_id)
        if result.duplicated_step_id is None:
            return False
        return self._commit(
            "duplicate_step",
            steps=result.steps,
            selected_step_id=result.duplicated_step_id,
            inspector_node="step",
        )

    def move_step(self, step_id: str, target_id: str, mode: InsertMode) -> bool:
        result = move_step_by_id(self.steps, step_id, target_id, mode)
        if not result.inserted:
            return False
        return self._commit("move_step", steps=result.steps)

    # History

    def undo(self) -> bool:
        return self._history.undo() is not None

    def redo(self) -> bool:
        return self._history.redo() is not None

    # Derived state

    def view(self, trigger_payload_field_paths: Iterable[str] = ()) -> StudioView:
        definition = self.definition
        return StudioView(
            layout=compute_canvas_layout(definition.steps, self._layout_options),
            graph=build_canvas_graph(definition),
            issues=collect_workflow_validation_issues(definition),
            tokens=dynamic_tokens_for_step(
                definition.steps, self.selected_step_id, trigger_payload_field_paths
            ),
            path_index=build_step_path_index(definition.steps),
        )
