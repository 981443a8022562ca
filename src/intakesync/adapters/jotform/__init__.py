"""Public interface for the Jotform questionnaire adapter."""

from __future__ import annotations

from .client import JotformAPIError, JotformSource, should_cache_payload
from .schema import AnswerPayload, SubmissionPayload, SubmissionsResponse
from .translator import parse_submission

__all__ = [
    "AnswerPayload",
    "JotformAPIError",
    "JotformSource",
    "SubmissionPayload",
    "SubmissionsResponse",
    "parse_submission",
    "should_cache_payload",
]
