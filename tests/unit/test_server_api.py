"""Unit tests for the REST adapter."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from workflow_studio.server.app import create_app
from workflow_studio.studio.model.transport import definition_to_transport


@pytest.fixture
def client(clean_env: Path) -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def definition_payload(branching_definition) -> dict[str, object]:
    return definition_to_transport(branching_definition)


def test_health(client: TestClient) -> None:
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_list_templates(client: TestClient) -> None:
    r = client.get("/api/templates", params={"query": "if", "category": "logic"})
    assert r.status_code == 200
    assert {t["id"] for t in r.json()} == {"condition_equals", "condition_exists"}

    assert client.get("/api/templates", params={"category": "nope"}).status_code == 422


def test_instantiate_template(client: TestClient) -> None:
    r = client.post("/api/templates/create_task/instantiate")
    assert r.status_code == 200
    body = r.json()
    assert body["trigger"] is None
    assert body["step"]["type"] == "create_runtime_record"
    assert body["step"]["data"] == {"title": "Follow-up", "priority": "normal"}


def test_instantiate_unknown_template_404(client: TestClient) -> None:
    assert client.post("/api/templates/teleport/instantiate").status_code == 404


def test_analyze(client: TestClient, definition_payload: dict[str, object]) -> None:
    r = client.post(
        "/api/workflows/analyze",
        json={
            "definition": definition_payload,
            "selected_step_id": "b",
            "trigger_payload_field_paths": ["email"],
        },
    )

    assert r.status_code == 200
    body = r.json()
    assert body["issues"] == []
    assert body["paths"]["e1"] == "1.else.0"
    assert body["layout"]["positions"]["b"] == {"x": 320, "y": 400}
    tokens = [t["token"] for t in body["tokens"]]
    assert "{{steps.t1.output}}" in tokens
    assert "{{trigger.payload.email}}" in tokens
    assert len(body["graph"]["edges"]) == 5


def test_analyze_assigns_missing_ids(client: TestClient) -> None:
    r = client.post(
        "/api/workflows/analyze",
        json={"definition": {"steps": [{"type": "log_message", "message": ""}]}},
    )
    assert r.status_code == 200
    issues = r.json()["issues"]
    assert issues[0]["step_id"] == "flow_step_1"
    assert issues[0]["message"] == "Log message step is empty."


def test_analyze_malformed_definition_422(client: TestClient) -> None:
    r = client.post(
        "/api/workflows/analyze",
        json={"definition": {"steps": [{"type": "send_fax", "id": "x"}]}},
    )
    assert r.status_code == 422


def test_compile(client: TestClient, definition_payload: dict[str, object]) -> None:
    r = client.post(
        "/api/workflows/compile",
        json={
            "definition": definition_payload,
            "logical_name": "contact_followup",
            "display_name": "Contact follow-up",
            "max_attempts": 5,
        },
    )

    assert r.status_code == 200
    body = r.json()
    assert body["action_type"] == "log_message"
    assert body["trigger_entity_logical_name"] == "contact"
    assert body["max_attempts"] == 5


def test_compile_invalid_content_422(client: TestClient) -> None:
    r = client.post(
        "/api/workflows/compile",
        json={
            "definition": {
                "steps": [
                    {
                        "type": "create_runtime_record",
                        "id": "r",
                        "entity_logical_name": "",
                        "data": {},
                    }
                ]
            },
            "logical_name": "x",
            "display_name": "X",
        },
    )

    assert r.status_code == 422
    assert r.json()["detail"]["step_id"] == "r"
