"""Unit tests for the workflow-studio CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from workflow_studio.studio.main import main
from workflow_studio.studio.model.transport import definition_to_transport


@pytest.fixture
def definition_file(clean_env: Path, branching_definition) -> Path:
    path = clean_env / "flow.json"
    path.write_text(json.dumps(definition_to_transport(branching_definition)), encoding="utf-8")
    return path


def _write_json(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_validate_clean_definition(definition_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate", str(definition_file)]) == 0
    assert json.loads(capsys.readouterr().out) == []


def test_validate_blocking_issues_exit_3(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_json(
        clean_env / "bad.json",
        {"steps": [{"type": "log_message", "id": "l", "message": " "}]},
    )

    assert main(["validate", str(path)]) == 3
    issues = json.loads(capsys.readouterr().out)
    assert [i["step_id"] for i in issues] == ["l"]


def test_structural_error_exit_2(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write_json(clean_env / "odd.json", {"steps": [{"type": "send_fax", "id": "x"}]})

    assert main(["validate", str(path)]) == 2
    assert "Malformed workflow definition" in capsys.readouterr().err


def test_unreadable_input_exit_2(clean_env: Path) -> None:
    (clean_env / "broken.json").write_text("{", encoding="utf-8")

    assert main(["layout", str(clean_env / "broken.json")]) == 2
    assert main(["layout", str(clean_env / "missing.json")]) == 2


def test_layout(definition_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["layout", str(definition_file)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["positions"]["e1"] == {"x": 600, "y": 280}
    assert out["row_count"] == 4


def test_paths_in_visit_order(definition_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["paths", str(definition_file)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert list(out.items()) == [
        ("a", "0"),
        ("c", "1"),
        ("t1", "1.then.0"),
        ("e1", "1.else.0"),
        ("b", "2"),
    ]


def test_tokens(definition_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["tokens", str(definition_file), "--step", "c", "--field", "email"]) == 0
    tokens = [t["token"] for t in json.loads(capsys.readouterr().out)]
    assert "{{trigger.payload.email}}" in tokens
    assert tokens[-1] == "{{steps.a.output}}"


def test_templates_search(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["templates", "--query", "slack"]) == 0
    assert json.loads(capsys.readouterr().out)[0]["id"] == "send_slack_notification"


def test_templates_category(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["templates", "--category", "logic"]) == 0
    assert [t["id"] for t in json.loads(capsys.readouterr().out)] == [
        "condition_equals",
        "condition_exists",
    ]


def test_new_step(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["new-step", "condition_equals"]) == 0
    step = json.loads(capsys.readouterr().out)["step"]
    assert step["id"] == "flow_step_1"
    assert step["then_label"] == "Open"
    assert step["then_steps"][0]["id"] == "flow_step_2"


def test_new_trigger(clean_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["new-step", "inbound_email_trigger"]) == 0
    assert json.loads(capsys.readouterr().out)["trigger"] == {
        "trigger_type": "runtime_record_created",
        "trigger_entity_logical_name": "inbound_email",
        "status_label": "Inbound Email",
    }


def test_unknown_template_exit_2(clean_env: Path) -> None:
    assert main(["new-step", "teleport"]) == 2


def test_configuration_error_exit_2(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKFLOW_STUDIO_HISTORY_LIMIT", "many")
    assert main(["templates"]) == 2
