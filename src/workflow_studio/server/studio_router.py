"""Workflow studio REST API.

Stateless: every request carries the definition in its wire shape and gets
the derived editor state back. All routes are mounted under `/api`.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Request

from workflow_studio.server.config import ServerSettings
from workflow_studio.server.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    CompileRequest,
    InstantiateResponse,
)
from workflow_studio.studio.layout import build_canvas_graph, compute_canvas_layout
from workflow_studio.studio.model.ids import counter_id_generator
from workflow_studio.studio.model.steps import WorkflowDefinition
from workflow_studio.studio.model.transport import (
    StepContentError,
    StructuralError,
    definition_from_transport,
    step_to_dto,
)
from workflow_studio.studio.save import compile_save_request, save_request_to_json
from workflow_studio.studio.templates import (
    TriggerTemplateConfig,
    UnknownTemplateError,
    instantiate_template,
    resolve_template_list,
)
from workflow_studio.studio.tokens import dynamic_tokens_for_step
from workflow_studio.studio.tree.paths import build_step_path_index
from workflow_studio.studio.validation import collect_workflow_validation_issues

logger = logging.getLogger(__name__)

router = APIRouter()

CategoryFilter = Literal["all", "trigger", "logic", "integration", "data", "operations"]


def _settings(request: Request) -> ServerSettings:
    settings = getattr(request.app.state, "settings", None)
    if not isinstance(settings, ServerSettings):
        raise HTTPException(status_code=500, detail="Server settings not configured")
    return settings


def _parse_definition(request: Request, payload: dict[str, Any]) -> WorkflowDefinition:
    settings = _settings(request)
    try:
        return definition_from_transport(payload, counter_id_generator(settings.studio.id_prefix))
    except StructuralError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/templates")
def list_templates(query: str = "", category: CategoryFilter = "all") -> list[dict[str, object]]:
    return [t.to_json() for t in resolve_template_list(query, category)]


@router.post("/templates/{template_id}/instantiate")
def instantiate(request: Request, template_id: str) -> InstantiateResponse:
    settings = _settings(request)
    try:
        created = instantiate_template(template_id, counter_id_generator(settings.studio.id_prefix))
    except UnknownTemplateError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    if isinstance(created, TriggerTemplateConfig):
        return InstantiateResponse(trigger=created.to_json())
    return InstantiateResponse(step=step_to_dto(created).model_dump(mode="json"))


@router.post("/workflows/analyze")
def analyze(request: Request, payload: AnalyzeRequest) -> AnalyzeResponse:
    settings = _settings(request)
    definition = _parse_definition(request, payload.definition)
    index = build_step_path_index(definition.steps)
    tokens = dynamic_tokens_for_step(
        definition.steps, payload.selected_step_id, payload.trigger_payload_field_paths
    )
    return AnalyzeResponse(
        issues=[issue.to_json() for issue in collect_workflow_validation_issues(definition)],
        layout=compute_canvas_layout(definition.steps, settings.studio.layout_options()).to_json(),
        paths=index.by_step_id,
        tokens=[token.to_json() for token in tokens],
        graph=build_canvas_graph(definition).to_json(),
    )


@router.post("/workflows/compile")
def compile_workflow(request: Request, payload: CompileRequest) -> dict[str, Any]:
    definition = _parse_definition(request, payload.definition)
    try:
        save_request = compile_save_request(
            definition,
            logical_name=payload.logical_name,
            display_name=payload.display_name,
            description=payload.description,
            max_attempts=payload.max_attempts,
            is_enabled=payload.is_enabled,
        )
    except StepContentError as e:
        raise HTTPException(
            status_code=422, detail={"message": str(e), "step_id": e.step_id}
        ) from e
    logger.info("Compiled workflow", extra={"logical_name": payload.logical_name})
    return save_request_to_json(save_request)
