"""Step library and flow template catalog.

Templates either seed a step (a log, a record to create, a condition with
both branches populated) or reconfigure the trigger. Search is a small
token scorer with synonym expansion; it is intentionally forgiving since it
drives a type-ahead palette.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from pydantic import JsonValue

from workflow_studio.studio.model.ids import IdGenerator
from workflow_studio.studio.model.json_text import format_json
from workflow_studio.studio.model.steps import (
    ConditionOperator,
    ConditionStep,
    CreateRecordStep,
    LogStep,
    Step,
    StepType,
    Trigger,
    TriggerType,
)

logger = logging.getLogger(__name__)

TemplateCategory = Literal["trigger", "logic", "integration", "data", "operations"]
TemplateTarget = Literal["step", "trigger"]
CATEGORIES: tuple[TemplateCategory, ...] = ("trigger", "logic", "integration", "data", "operations")


class UnknownTemplateError(KeyError):
    def __init__(self, template_id: str) -> None:
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Unknown flow template: {self.template_id}"


@dataclass(frozen=True, slots=True)
class StepLibraryEntry:
    type: StepType
    label: str
    description: str


@dataclass(frozen=True, slots=True)
class FlowTemplate:
    id: str
    label: str
    description: str
    category: TemplateCategory
    keywords: tuple[str, ...]
    target: TemplateTarget

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "keywords": list(self.keywords),
            "target": self.target,
        }


@dataclass(frozen=True, slots=True)
class TriggerTemplateConfig:
    trigger: Trigger
    status_label: str

    def to_json(self) -> dict[str, object]:
        return {
            "trigger_type": self.trigger.type.value,
            "trigger_entity_logical_name": self.trigger.entity_logical_name,
            "status_label": self.status_label,
        }


STEP_LIBRARY: tuple[StepLibraryEntry, ...] = (
    StepLibraryEntry("log_message", "Log message", "Add a diagnostics log step."),
    StepLibraryEntry("create_runtime_record", "Create record", "Create a new runtime record."),
    StepLibraryEntry("condition", "Condition", "Branch into Yes/No step paths."),
)


def _template(
    id: str,
    label: str,
    description: str,
    category: TemplateCategory,
    keywords: str,
    target: TemplateTarget = "step",
) -> FlowTemplate:
    return FlowTemplate(id, label, description, category, tuple(keywords.split()), target)


FLOW_TEMPLATES: tuple[FlowTemplate, ...] = (
    # Triggers
    _template(
        "manual_trigger",
        "Manual Trigger",
        "Starts this flow from manual run in the canvas toolbar.",
        "trigger",
        "trigger manual start",
        "trigger",
    ),
    _template(
        "record_created_trigger",
        "Record Created Trigger",
        "Starts when a runtime record is created in the selected entity.",
        "trigger",
        "trigger record created event start",
        "trigger",
    ),
    _template(
        "webhook_trigger",
        "Webhook Event Trigger",
        "Starts when a webhook_event runtime record is created.",
        "trigger",
        "trigger webhook event start",
        "trigger",
    ),
    _template(
        "inbound_email_trigger",
        "Inbound Email Trigger",
        "Starts when an inbound_email runtime record is captured.",
        "trigger",
        "trigger email inbound mailbox start",
        "trigger",
    ),
    _template(
        "form_submission_trigger",
        "Form Submission Trigger",
        "Starts when a form_submission runtime record is created.",
        "trigger",
        "trigger form submission event start",
        "trigger",
    ),
    _template(
        "schedule_hourly_trigger",
        "Hourly Schedule Trigger",
        "Starts when a schedule_hourly runtime tick record is created.",
        "trigger",
        "trigger schedule hourly timer cron",
        "trigger",
    ),
    _template(
        "schedule_daily_trigger",
        "Daily Schedule Trigger",
        "Starts when a schedule_daily runtime tick record is created.",
        "trigger",
        "trigger schedule daily timer cron",
        "trigger",
    ),
    _template(
        "approval_requested_trigger",
        "Approval Requested Trigger",
        "Starts when an approval_request runtime record is created.",
        "trigger",
        "trigger approval review request start",
        "trigger",
    ),
    # Logic
    _template(
        "condition_equals",
        "If Equals",
        "Branch execution when a payload field equals a value.",
        "logic",
        "if branch equals condition",
    ),
    _template(
        "condition_exists",
        "If Exists",
        "Branch execution when a payload field exists.",
        "logic",
        "if exists condition branch",
    ),
    # Integration
    _template(
        "http_request",
        "HTTP Request",
        "Queue an outbound HTTP dispatch record for an integration worker.",
        "integration",
        "http request api integration",
    ),
    _template(
        "transform_payload",
        "Transform Payload",
        "Map input values into a structured integration payload record.",
        "integration",
        "transform map payload integration",
    ),
    _template(
        "delay_step",
        "Delay",
        "Insert a wait/delay semantic step for downstream processing.",
        "integration",
        "delay wait timer",
    ),
    _template(
        "send_email_notification",
        "Send Email Notification",
        "Create an email_outbox record for downstream mail delivery.",
        "integration",
        "email notification message integration",
    ),
    _template(
        "send_slack_notification",
        "Send Slack Notification",
        "Create a chat_notification record for Slack/Teams relays.",
        "integration",
        "slack teams chat notification integration",
    ),
    _template(
        "dispatch_webhook",
        "Dispatch Webhook",
        "Create a webhook_dispatch record for outbound webhook delivery.",
        "integration",
        "webhook dispatch http integration",
    ),
    # Data
    _template(
        "create_task",
        "Create Task Record",
        "Create a task runtime record with follow-up defaults.",
        "data",
        "create record task data",
    ),
    _template(
        "create_note",
        "Create Note Record",
        "Create a note runtime record for activity capture.",
        "data",
        "create record note data",
    ),
    _template(
        "create_followup_task",
        "Create Follow-up Task",
        "Create a task assigned for next-step follow-up work.",
        "data",
        "task follow-up assign work",
    ),
    _template(
        "assign_record_owner",
        "Assign Record Owner",
        "Create a record_assignment event for ownership routing.",
        "data",
        "assign owner routing queue",
    ),
    _template(
        "create_approval_request",
        "Create Approval Request",
        "Create an approval_request record for human approval flow.",
        "data",
        "approval review request workflow",
    ),
    _template(
        "create_incident_ticket",
        "Create Incident Ticket",
        "Create an incident_ticket record for operations handling.",
        "data",
        "incident ticket ops support",
    ),
    _template(
        "upsert_contact_profile",
        "Upsert Contact Profile",
        "Create a contact_upsert_queue record for profile syncing.",
        "data",
        "contact crm profile sync upsert",
    ),
    # Operations
    _template(
        "log_info",
        "Log Info",
        "Write an informational trace message.",
        "operations",
        "log message trace ops",
    ),
    _template(
        "log_warning",
        "Log Warning",
        "Write a warning trace message.",
        "operations",
        "log warning message ops",
    ),
    _template(
        "post_feed_update",
        "Post Feed Update",
        "Create a team_feed_event record for activity timelines.",
        "operations",
        "feed activity post timeline",
    ),
    _template(
        "create_audit_entry",
        "Create Audit Entry",
        "Create a workflow_audit_log record for compliance tracing.",
        "operations",
        "audit compliance trace log",
    ),
)

TEMPLATES_BY_ID: dict[str, FlowTemplate] = {t.id: t for t in FLOW_TEMPLATES}

SEARCH_SYNONYMS: dict[str, tuple[str, ...]] = {
    "condition": ("if", "branch", "rule", "decision"),
    "if": ("condition", "branch", "rule", "decision"),
    "branch": ("condition", "if", "rule"),
    "decision": ("condition", "if", "branch"),
    "webhook": ("http", "event", "trigger"),
    "email": ("mail", "notification", "message", "inbound"),
    "slack": ("teams", "chat", "message", "notification"),
    "schedule": ("timer", "cron", "daily", "hourly"),
    "approval": ("review", "signoff", "request"),
    "incident": ("ticket", "alert", "ops"),
    "owner": ("assign", "routing", "queue"),
    "webhook_dispatch": ("webhook", "http", "integration"),
    "trigger": ("start", "when", "event"),
    "action": ("step", "task", "operation"),
    "task": ("todo", "work item", "follow-up"),
    "note": ("comment", "activity", "log"),
    "delay": ("wait", "pause", "sleep"),
    "wait": ("delay", "timer", "pause"),
    "transform": ("map", "shape", "convert"),
    "map": ("transform", "convert", "shape"),
    "http": ("api", "request", "webhook"),
    "record": ("row", "entity", "data"),
    "create": ("add", "insert", "new"),
    "exists": ("present", "has", "available"),
    "equals": ("is", "match", "same"),
}

_TRIGGER_TEMPLATES: dict[str, TriggerTemplateConfig] = {
    "manual_trigger": TriggerTemplateConfig(Trigger(TriggerType.MANUAL), "Manual"),
    "record_created_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.RECORD_CREATED, "contact"), "Record Created"
    ),
    "webhook_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.RECORD_CREATED, "webhook_event"), "Webhook Event"
    ),
    "inbound_email_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.RECORD_CREATED, "inbound_email"), "Inbound Email"
    ),
    "form_submission_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.RECORD_CREATED, "form_submission"), "Form Submission"
    ),
    "schedule_hourly_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.SCHEDULE_TICK, "hourly"), "Hourly Schedule"
    ),
    "schedule_daily_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.SCHEDULE_TICK, "daily"), "Daily Schedule"
    ),
    "approval_requested_trigger": TriggerTemplateConfig(
        Trigger(TriggerType.RECORD_CREATED, "approval_request"), "Approval Requested"
    ),
}

# Templates that only seed a create_runtime_record step: (entity, data).
_RECORD_TEMPLATES: dict[str, tuple[str, Mapping[str, JsonValue]]] = {
    "post_feed_update": (
        "team_feed_event",
        {
            "title": "Workflow update",
            "body": "Processed {{trigger.payload.record_id}} in run {{run.id}}",
            "visibility": "team",
        },
    ),
    "create_audit_entry": (
        "workflow_audit_log",
        {
            "run_id": "{{run.id}}",
            "event": "workflow_step_completed",
            "source_record_id": "{{trigger.payload.record_id}}",
        },
    ),
    "create_task": ("task", {"title": "Follow-up", "priority": "normal"}),
    "create_note": ("note", {"title": "Activity Note", "body": "auto generated"}),
    "create_followup_task": (
        "task",
        {
            "title": "Follow up on {{trigger.payload.record_id}}",
            "status": "open",
            "priority": "normal",
            "source": "workflow",
        },
    ),
    "assign_record_owner": (
        "record_assignment",
        {
            "source_record_id": "{{trigger.payload.record_id}}",
            "source_entity": "{{trigger.payload.entity_logical_name}}",
            "owner_id": "triage_queue",
            "reason": "auto routing",
        },
    ),
    "create_approval_request": (
        "approval_request",
        {
            "request_type": "record_change",
            "source_record_id": "{{trigger.payload.record_id}}",
            "requested_by": "{{trigger.payload.triggered_by}}",
            "status": "pending",
        },
    ),
    "create_incident_ticket": (
        "incident_ticket",
        {
            "title": "Automation incident for {{trigger.payload.record_id}}",
            "severity": "medium",
            "source": "workflow",
            "status": "open",
        },
    ),
    "upsert_contact_profile": (
        "contact_upsert_queue",
        {
            "external_id": "{{trigger.payload.record_id}}",
            "source": "workflow",
            "payload": {
                "email": "{{trigger.payload.email}}",
                "name": "{{trigger.payload.name}}",
            },
        },
    ),
    "http_request": (
        "integration_http_request",
        {
            "method": "POST",
            "url": "https://api.example.com/hooks/workflow",
            "headers": {"content-type": "application/json"},
            "body": {"run_id": "{{run.id}}", "record_id": "{{trigger.payload.record_id}}"},
        },
    ),
    "transform_payload": (
        "integration_payload",
        {"source": "trigger", "transformed": True, "mapping_version": "v1"},
    ),
    "delay_step": (
        "workflow_delay_request",
        {"duration": "PT5M", "reason": "downstream consistency wait", "run_id": "{{run.id}}"},
    ),
    "send_email_notification": (
        "email_outbox",
        {
            "to": "ops@example.com",
            "subject": "Workflow alert: {{trigger.payload.record_id}}",
            "body": "Flow {{run.id}} processed {{trigger.payload.record_id}}.",
            "channel": "email",
        },
    ),
    "send_slack_notification": (
        "chat_notification",
        {
            "provider": "slack",
            "channel": "#ops-alerts",
            "message": "Workflow {{run.id}} handled {{trigger.payload.record_id}}",
        },
    ),
    "dispatch_webhook": (
        "webhook_dispatch",
        {
            "endpoint": "https://example.org/workflow-callback",
            "event": "workflow.completed",
            "payload": {
                "run_id": "{{run.id}}",
                "trigger_record_id": "{{trigger.payload.record_id}}",
            },
        },
    ),
}

_LOG_TEMPLATES: dict[str, str] = {
    "log_info": "[INFO] flow step executed",
    "log_warning": "[WARN] requires attention",
}


def get_template(template_id: str) -> FlowTemplate:
    try:
        return TEMPLATES_BY_ID[template_id]
    except KeyError:
        raise UnknownTemplateError(template_id) from None


def create_draft_step(step_type: StepType, create_id: IdGenerator) -> Step:
    """A new step of ``step_type`` with editable starter content."""

    if step_type == "log_message":
        return LogStep(id=create_id(), message="workflow fired")
    if step_type == "create_runtime_record":
        return CreateRecordStep(
            id=create_id(),
            entity_logical_name="task",
            data_json=format_json({"title": "Follow-up"}),
        )
    step_id = create_id()
    return ConditionStep(
        id=step_id,
        field_path="status",
        operator=ConditionOperator.EQUALS,
        value_json=format_json("open"),
        then_steps=(LogStep(id=create_id(), message="matched condition"),),
        else_steps=(LogStep(id=create_id(), message="did not match condition"),),
    )


def create_template_step(template_id: str, create_id: IdGenerator) -> Step:
    """The step a template seeds.

    Trigger templates still yield a placeholder log step so that dropping one
    onto the canvas is never a no-op.

    Raises:
        UnknownTemplateError: ``template_id`` is not in the catalog.
    """

    template = get_template(template_id)
    if template.target == "trigger":
        return LogStep(id=create_id(), message="trigger template applied")

    if template_id in _LOG_TEMPLATES:
        return LogStep(id=create_id(), message=_LOG_TEMPLATES[template_id])

    if template_id in _RECORD_TEMPLATES:
        entity, data = _RECORD_TEMPLATES[template_id]
        return CreateRecordStep(
            id=create_id(), entity_logical_name=entity, data_json=format_json(dict(data))
        )

    if template_id == "condition_exists":
        step_id = create_id()
        return ConditionStep(
            id=step_id,
            field_path="contact.email",
            operator=ConditionOperator.EXISTS,
            value_json="null",
            then_label="Found",
            else_label="Missing",
            then_steps=(LogStep(id=create_id(), message="email found"),),
            else_steps=(
                CreateRecordStep(
                    id=create_id(),
                    entity_logical_name="task",
                    data_json=format_json({"title": "Collect missing email"}),
                ),
            ),
        )

    step_id = create_id()
    return ConditionStep(
        id=step_id,
        field_path="status",
        operator=ConditionOperator.EQUALS,
        value_json=format_json("open"),
        then_label="Open",
        else_label="Closed",
        then_steps=(LogStep(id=create_id(), message="status is open"),),
        else_steps=(LogStep(id=create_id(), message="status is not open"),),
    )


def trigger_template_config(template_id: str) -> TriggerTemplateConfig | None:
    """Trigger settings for a trigger template; ``None`` for step templates."""

    get_template(template_id)
    return _TRIGGER_TEMPLATES.get(template_id)


def instantiate_template(
    template_id: str, create_id: IdGenerator
) -> Step | TriggerTemplateConfig:
    config = trigger_template_config(template_id)
    if config is not None:
        return config
    return create_template_step(template_id, create_id)


def _tokenize(query: str) -> list[str]:
    return [token.lower() for token in query.split()]


def _expand(tokens: list[str]) -> list[str]:
    expanded = list(dict.fromkeys(tokens))
    for token in tokens:
        for synonym in SEARCH_SYNONYMS.get(token, ()):
            if synonym not in expanded:
                expanded.append(synonym)
    return expanded


def _score_haystack(token: str, haystack: str) -> int:
    if haystack == token:
        return 120
    if haystack.startswith(token):
        return 90
    if token in haystack:
        return 45
    if all(char in haystack for char in token):
        return 15
    return 0


def score_template(template: FlowTemplate, query: str) -> int:
    tokens = _tokenize(query)
    haystacks = [
        value.lower() for value in (template.label, template.description, *template.keywords)
    ]
    score = sum(
        _score_haystack(token, haystack) for token in _expand(tokens) for haystack in haystacks
    )
    if len(tokens) > 1 and all(any(t in h for h in haystacks) for t in tokens):
        score += 60
    return score


def resolve_template_list(
    query: str = "", category: TemplateCategory | Literal["all"] = "all"
) -> list[FlowTemplate]:
    """Templates in ``category`` ranked against ``query``.

    An empty query lists every template of the category ordered by label.
    Otherwise templates scoring zero are dropped and the rest are sorted by
    descending score, ties broken by label.
    """

    candidates = [t for t in FLOW_TEMPLATES if category == "all" or t.category == category]
    if not query.strip():
        return sorted(candidates, key=lambda t: t.label)

    scored = [(score_template(t, query), t) for t in candidates]
    ranked = sorted(
        ((score, t) for score, t in scored if score > 0),
        key=lambda entry: (-entry[0], entry[1].label),
    )
    logger.debug("Resolved template search", extra={"query": query, "matches": len(ranked)})
    return [t for _score, t in ranked]
