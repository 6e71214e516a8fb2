"""CLI entrypoint for the workflow studio.

Each command reads a workflow definition in its wire shape (JSON) and prints
the derived editor state as JSON on stdout.

Exit codes:
- 0: success
- 1: unexpected failure
- 2: configuration error or malformed input
- 3: the definition has blocking validation errors (``validate`` only)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from workflow_studio import __version__
from workflow_studio.studio.config import StudioSettings
from workflow_studio.studio.layout import compute_canvas_layout
from workflow_studio.studio.logging import configure_logging
from workflow_studio.studio.model.ids import counter_id_generator
from workflow_studio.studio.model.steps import WorkflowDefinition
from workflow_studio.studio.model.transport import (
    StructuralError,
    definition_from_transport,
    step_to_dto,
)
from workflow_studio.studio.templates import (
    CATEGORIES,
    TriggerTemplateConfig,
    UnknownTemplateError,
    instantiate_template,
    resolve_template_list,
)
from workflow_studio.studio.tokens import dynamic_tokens_for_step
from workflow_studio.studio.tree.paths import build_step_path_index, path_sort_key
from workflow_studio.studio.validation import (
    collect_workflow_validation_issues,
    has_blocking_issues,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2
EXIT_BLOCKING_ISSUES = 3


class InputError(Exception):
    """The definition file could not be read or parsed."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-studio",
        description="Inspect and validate workflow definitions",
    )
    parser.add_argument("--version", action="version", version=f"workflow-studio {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="List validation issues")
    validate.add_argument("file", type=Path, help="Workflow definition JSON file")

    layout = subparsers.add_parser("layout", help="Compute canvas positions")
    layout.add_argument("file", type=Path, help="Workflow definition JSON file")

    paths = subparsers.add_parser("paths", help="Print the step id to step path map")
    paths.add_argument("file", type=Path, help="Workflow definition JSON file")

    tokens = subparsers.add_parser(
        "tokens", help="List interpolation tokens visible from a step"
    )
    tokens.add_argument("file", type=Path, help="Workflow definition JSON file")
    tokens.add_argument("--step", default=None, help="Selected step id")
    tokens.add_argument(
        "--field",
        action="append",
        default=[],
        help="Trigger payload field path (repeatable)",
    )

    templates = subparsers.add_parser("templates", help="Search the flow template catalog")
    templates.add_argument("--query", default="", help="Search text")
    templates.add_argument(
        "--category",
        default="all",
        choices=["all", *CATEGORIES],
        help="Restrict results to one category",
    )

    new_step = subparsers.add_parser("new-step", help="Instantiate a flow template")
    new_step.add_argument("template_id", help="Template id, e.g. 'condition_equals'")

    return parser


def _load_definition(path: Path, settings: StudioSettings) -> WorkflowDefinition:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise InputError(f"{path} must contain a JSON object")
    return definition_from_transport(payload, counter_id_generator(settings.id_prefix))


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _run(args: argparse.Namespace, settings: StudioSettings) -> int:
    if args.command == "templates":
        matches = resolve_template_list(args.query, args.category)
        _print_json([t.to_json() for t in matches])
        return EXIT_OK

    if args.command == "new-step":
        created = instantiate_template(args.template_id, counter_id_generator(settings.id_prefix))
        if isinstance(created, TriggerTemplateConfig):
            _print_json({"trigger": created.to_json()})
        else:
            _print_json({"step": step_to_dto(created).model_dump(mode="json")})
        return EXIT_OK

    definition = _load_definition(args.file, settings)

    if args.command == "validate":
        issues = collect_workflow_validation_issues(definition)
        _print_json([issue.to_json() for issue in issues])
        if has_blocking_issues(issues):
            logger.info(
                "Workflow has blocking issues",
                extra={"path": str(args.file), "issue_count": len(issues)},
            )
            return EXIT_BLOCKING_ISSUES
        return EXIT_OK

    if args.command == "layout":
        layout = compute_canvas_layout(definition.steps, settings.layout_options())
        _print_json(layout.to_json())
        return EXIT_OK

    if args.command == "paths":
        index = build_step_path_index(definition.steps)
        ordered = sorted(index.by_step_id.items(), key=lambda item: path_sort_key(item[1]))
        _print_json(dict(ordered))
        return EXIT_OK

    if args.command == "tokens":
        tokens = dynamic_tokens_for_step(definition.steps, args.step, args.field)
        _print_json([token.to_json() for token in tokens])
        return EXIT_OK

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = StudioSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_INPUT_ERROR

    configure_logging(settings.log_level)

    try:
        return _run(args, settings)
    except (InputError, StructuralError, UnknownTemplateError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
