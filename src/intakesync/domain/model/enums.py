"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator used to build automation trigger names."""

    CLIENT = "client"
    PET = "pet"
    EVENT = "event"
    TASK = "task"


class EventType(StrEnum):
    BOOKING = "Booking"
    CONSULTATION = "Consultation"
    TRAINING_SESSION = "TrainingSession"
    PAYMENT = "Payment"
    FOLLOW_UP = "FollowUp"
    QUESTIONNAIRE_RECEIVED = "QuestionnaireReceived"
    REPORT_SENT = "ReportSent"
    NOTE = "Note"


class TaskStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    BLOCKED = "Blocked"
    DONE = "Done"
    CANCELED = "Canceled"


class PetSex(StrEnum):
    MALE = "Male"
    FEMALE = "Female"
    NEUTERED = "Neutered"
    SPAYED = "Spayed"


class AutomatedAction(StrEnum):
    """Kinds of work an automation rule can schedule as a task."""

    CHECK_QUESTIONNAIRE_RETURNED = "CheckQuestionnaireReturned"
    PREPARE_TRAINING_MATERIALS = "PrepareTrainingMaterials"
    SEND_PROTOCOL = "SendProtocol"
    REVIEW_QUESTIONNAIRE = "ReviewQuestionnaire"


class SubmissionSource(StrEnum):
    BOOKING = "booking"
    QUESTIONNAIRE = "questionnaire"
