"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    definition: dict[str, Any]
    selected_step_id: str | None = None
    trigger_payload_field_paths: list[str] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
    issues: list[dict[str, Any]]
    layout: dict[str, Any]
    paths: dict[str, str]
    tokens: list[dict[str, str]]
    graph: dict[str, Any]


class CompileRequest(BaseModel):
    definition: dict[str, Any]
    logical_name: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    description: str | None = None
    max_attempts: int = 3
    is_enabled: bool = True


class InstantiateResponse(BaseModel):
    step: dict[str, Any] | None = None
    trigger: dict[str, Any] | None = None
