#!/usr/bin/env python3
"""Programmatic editing example.

This demonstrates driving the studio engine directly:

* start an editor session from settings loaded from `.env`
* add steps from the template catalog and edit them
* print validation issues, canvas positions and the save payload

The output file (optional) receives the definition in its wire shape.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from workflow_studio.studio.config import StudioSettings
from workflow_studio.studio.logging import configure_logging
from workflow_studio.studio.model.ids import counter_id_generator
from workflow_studio.studio.model.transport import StepContentError, definition_to_transport
from workflow_studio.studio.save import compile_save_request, save_request_to_json
from workflow_studio.studio.session import EditorSession


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a small workflow (programmatic example).")
    parser.add_argument("--output", type=Path, default=None, help="Write the definition JSON here")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = StudioSettings()
    configure_logging(settings.log_level)

    session = EditorSession(
        create_id=counter_id_generator(settings.id_prefix),
        history_limit=settings.history_limit,
        layout_options=settings.layout_options(),
    )

    session.insert_template("record_created_trigger")
    session.insert_template("condition_exists", "root")
    condition_id = session.selected_step_id
    session.insert_template("send_slack_notification", "then_selected")
    if condition_id is not None:
        session.select_step(condition_id)
    session.insert_template("create_audit_entry", "after_selected")
    session.update_step(
        session.steps[0].id, lambda step: replace(step, field_path="contact.phone")
    )

    view = session.view(["email", "phone"])
    print("Issues:", [issue.message for issue in view.issues] or "none")
    for node_id, position in view.layout.positions.items():
        print(f"  {node_id:<16} x={position.x:<5} y={position.y}")

    try:
        request = compile_save_request(
            session.definition, logical_name="contact_phone_check", display_name="Phone check"
        )
    except StepContentError as exc:
        print(f"Cannot save: {exc} (step {exc.step_id})")
        return 1

    print(json.dumps(save_request_to_json(request), indent=2))

    if args.output is not None:
        args.output.write_text(
            json.dumps(definition_to_transport(session.definition), indent=2), encoding="utf-8"
        )
        print(f"Wrote {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
