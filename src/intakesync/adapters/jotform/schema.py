"""Pydantic models describing the Jotform API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JotformBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AnswerPayload(JotformBaseModel):
    name: str | None = None
    order: str | None = None
    text: str | None = None
    type: str | None = None
    answer: str | dict[str, Any] | list[Any] | None = None
    pretty_format: str | None = Field(default=None, alias="prettyFormat")


class SubmissionPayload(JotformBaseModel):
    id: str
    form_id: str
    created_at: datetime
    status: str | None = None
    answers: dict[str, AnswerPayload] = Field(default_factory=dict[str, AnswerPayload])

    @field_validator("id", "form_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_created_at(cls, value: object) -> object:
        # "2025-10-26 22:47:12"
        if isinstance(value, str):
            return datetime.fromisoformat(value.strip())
        return value

    @field_validator("answers", mode="before")
    @classmethod
    def _empty_answers(cls, value: object) -> object:
        # the API sends [] instead of {} for a submission without answers
        if value is None or value == []:
            return {}
        return value


class SubmissionsResponse(JotformBaseModel):
    response_code: int = Field(alias="responseCode")
    message: str = ""
    content: list[dict[str, Any]] = Field(default_factory=list[dict[str, Any]])

    @field_validator("content", mode="before")
    @classmethod
    def _error_content(cls, value: object) -> object:
        # error responses carry a message string here
        return value if isinstance(value, list) else []
