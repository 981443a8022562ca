"""Built-in automation rules, in registration order."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from intakesync.domain.automation.types import (
    AutomationRule,
    CreateEventAction,
    CreateTaskAction,
    TriggerType,
)
from intakesync.domain.model import AutomatedAction, EventType

if TYPE_CHECKING:
    from intakesync.domain.automation.types import AutomationContext, Condition

COMPLETED_STATUS: Final[str] = "Completed"


def _event_is(event_type: EventType) -> Condition:
    def condition(context: AutomationContext) -> bool:
        return context.event is not None and context.event.event_type == event_type

    return condition


def _completed_consultation(context: AutomationContext) -> bool:
    event = context.event
    return (
        event is not None
        and event.event_type == EventType.CONSULTATION
        and (event.status or "").lower() == COMPLETED_STATUS.lower()
    )


def _always(context: AutomationContext) -> bool:  # noqa: ARG001
    return True


BOOKING_QUESTIONNAIRE_CHECK: Final = AutomationRule(
    rule_id="booking-questionnaire-check",
    name="Check questionnaire returned before consultation",
    trigger=TriggerType.EVENT_CREATED,
    condition=_event_is(EventType.BOOKING),
    actions=(
        CreateTaskAction(
            description="Check questionnaire returned ≥ 48 hours before consultation",
            automated_action=AutomatedAction.CHECK_QUESTIONNAIRE_RETURNED,
            priority=1,
            triggered_by="Event:Booking",
        ),
    ),
)

CONSULTATION_FOLLOW_UP: Final = AutomationRule(
    rule_id="consultation-follow-up",
    name="Send protocol after a completed consultation",
    trigger=TriggerType.EVENT_UPDATED,
    condition=_completed_consultation,
    actions=(
        CreateTaskAction(
            description="Send behaviour protocol to client",
            automated_action=AutomatedAction.SEND_PROTOCOL,
            priority=2,
            triggered_by="Event:Consultation",
        ),
    ),
)

TRAINING_SESSION_PREP: Final = AutomationRule(
    rule_id="training-session-prep",
    name="Prepare training materials",
    trigger=TriggerType.EVENT_CREATED,
    condition=_event_is(EventType.TRAINING_SESSION),
    actions=(
        CreateTaskAction(
            description="Prepare training session materials",
            automated_action=AutomatedAction.PREPARE_TRAINING_MATERIALS,
            priority=2,
            triggered_by="Event:TrainingSession",
        ),
    ),
)

CLIENT_CREATION_NOTE: Final = AutomationRule(
    rule_id="client-creation-note",
    name="Record client creation",
    trigger=TriggerType.CLIENT_CREATED,
    condition=_always,
    actions=(CreateEventAction(event_type=EventType.NOTE, notes="<p>Client created</p>"),),
)

QUESTIONNAIRE_RECEIVED_REVIEW: Final = AutomationRule(
    rule_id="questionnaire-received-review",
    name="Review returned questionnaire",
    trigger=TriggerType.EVENT_CREATED,
    condition=_event_is(EventType.QUESTIONNAIRE_RECEIVED),
    actions=(
        CreateTaskAction(
            description="Review questionnaire and prepare for consultation",
            automated_action=AutomatedAction.REVIEW_QUESTIONNAIRE,
            priority=2,
            triggered_by="Event:QuestionnaireReceived",
        ),
    ),
)

DEFAULT_RULES: Final[tuple[AutomationRule, ...]] = (
    BOOKING_QUESTIONNAIRE_CHECK,
    CONSULTATION_FOLLOW_UP,
    TRAINING_SESSION_PREP,
    CLIENT_CREATION_NOTE,
    QUESTIONNAIRE_RECEIVED_REVIEW,
)
