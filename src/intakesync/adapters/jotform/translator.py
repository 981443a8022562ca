"""Translate Jotform submissions into canonical questionnaire submissions."""

from __future__ import annotations

from datetime import UTC, tzinfo
from typing import Final

from intakesync.domain.ingest.submissions import CAT, DOG, QuestionnaireSubmission

from .schema import AnswerPayload, SubmissionPayload

QID_NAME: Final[str] = "3"
QID_EMAIL: Final[str] = "6"
QID_PET_NAME: Final[str] = "8"
QID_BREED: Final[str] = "19"
QID_SEX: Final[str] = "22"
QID_AGE: Final[str] = "23"
QID_PHONE: Final[str] = "32"
QID_ADDRESS: Final[str] = "68"
QID_WEIGHT: Final[str] = "69"


def answer_text(answers: dict[str, AnswerPayload], qid: str) -> str:
    answer = answers.get(qid)
    if answer is None:
        return ""
    value = answer.answer
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return ", ".join(str(item).strip() for item in value if str(item).strip())
    return (answer.pretty_format or "").strip()


def answer_part(answers: dict[str, AnswerPayload], qid: str, key: str) -> str:
    answer = answers.get(qid)
    if answer is None or not isinstance(answer.answer, dict):
        return ""
    value = answer.answer.get(key)
    return value.strip() if isinstance(value, str) else ""


def _or_none(value: str) -> str | None:
    return value or None


def parse_submission(
    payload: object,
    *,
    dog_form_id: str,
    zone: tzinfo = UTC,
) -> QuestionnaireSubmission:
    """Validate and translate; raises ``pydantic.ValidationError`` on a malformed payload.

    Jotform reports ``created_at`` without an offset; it is read in ``zone``.
    """

    submission = SubmissionPayload.model_validate(payload)
    answers = submission.answers
    submitted_at = submission.created_at
    if submitted_at.tzinfo is None:
        submitted_at = submitted_at.replace(tzinfo=zone)

    return QuestionnaireSubmission(
        submission_id=submission.id,
        form_id=submission.form_id,
        species=DOG if submission.form_id == dog_form_id else CAT,
        submitted_at=submitted_at,
        first_name=answer_part(answers, QID_NAME, "first"),
        last_name=answer_part(answers, QID_NAME, "last"),
        email=answer_text(answers, QID_EMAIL),
        phone=_or_none(answer_text(answers, QID_PHONE)),
        street_address=_or_none(answer_part(answers, QID_ADDRESS, "addr_line1")),
        city=_or_none(answer_part(answers, QID_ADDRESS, "city")),
        state=_or_none(answer_part(answers, QID_ADDRESS, "state")),
        postcode=_or_none(answer_part(answers, QID_ADDRESS, "postal")),
        pet_name=answer_text(answers, QID_PET_NAME),
        breed=_or_none(answer_text(answers, QID_BREED)),
        age=_or_none(answer_text(answers, QID_AGE)),
        sex=_or_none(answer_text(answers, QID_SEX)),
        weight=_or_none(answer_text(answers, QID_WEIGHT)),
        answers={
            qid: answer.model_dump(by_alias=True, exclude_none=True)
            for qid, answer in answers.items()
        },
    )
