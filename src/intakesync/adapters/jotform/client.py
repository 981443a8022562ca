"""HTTP client for the Jotform API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, tzinfo
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from intakesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from intakesync.config.jotform import JOTFORM_BASE_URL, JotformConfig, get_jotform_config

from .schema import SubmissionsResponse
from .translator import parse_submission

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from intakesync.domain.ingest.submissions import QuestionnaireSubmission
    from intakesync.domain.ports import QuestionnaireSource

log = getLogger(__name__)

PAGE_LIMIT: Final[int] = 100


def should_cache_payload(payload: object) -> bool:
    """Only successful API envelopes are worth replaying."""

    return isinstance(payload, dict) and payload.get("responseCode") == 200  # pyright: ignore[reportUnknownMemberType]


def _default_config() -> JotformConfig:
    return get_jotform_config(cache_predicate=should_cache_payload)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class JotformAPIError(RuntimeError):
    """Raised when the Jotform API returns an application-level error."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass(slots=True)
class JotformSource:
    """Questionnaire source over the dog and cat intake forms."""

    config: JotformConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    zone: tzinfo = UTC

    @property
    def base_url(self) -> str:
        return (self.config.resilience.base_url or JOTFORM_BASE_URL).rstrip("/")

    def fetch_submissions(self, *, since: datetime) -> list[QuestionnaireSubmission]:
        return asyncio.run(self._fetch_submissions_async(since=since))

    def download_pdf(self, submission: QuestionnaireSubmission, destination_dir: Path) -> Path:
        return asyncio.run(self._download_pdf_async(submission, destination_dir))

    async def _fetch_submissions_async(self, *, since: datetime) -> list[QuestionnaireSubmission]:
        submissions: list[QuestionnaireSubmission] = []
        async with self.client_factory(self.config.resilience) as client:
            for form_id in self.config.form_ids:
                for payload in await self._request_form_submissions(client, form_id):
                    try:
                        submission = parse_submission(
                            payload, dog_form_id=self.config.dog_form_id, zone=self.zone
                        )
                    except ValidationError as exc:
                        log.warning("Skipping malformed submission on form %s: %s", form_id, exc)
                        continue
                    if submission.submitted_at >= since:
                        submissions.append(submission)

        submissions.sort(key=lambda submission: submission.submitted_at)
        log.info("Fetched %d questionnaire submissions since %s", len(submissions), since)
        return submissions

    async def _request_form_submissions(
        self,
        client: ResilientClient,
        form_id: str,
    ) -> list[dict[str, Any]]:
        response = await client.get(
            f"{self.base_url}/form/{form_id}/submissions",
            params={
                "apiKey": self.config.api_key,
                "limit": PAGE_LIMIT,
                "orderby": "created_at",
            },
        )
        try:
            envelope = SubmissionsResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            response.raise_for_status()
            raise JotformAPIError("Unexpected Jotform response payload") from None

        if envelope.response_code != 200:  # noqa: PLR2004
            log.error(f"Jotform API error {envelope.response_code}: {envelope.message}")
            raise JotformAPIError(envelope.message, code=envelope.response_code)
        return envelope.content

    async def _download_pdf_async(
        self,
        submission: QuestionnaireSubmission,
        destination_dir: Path,
    ) -> Path:
        stamp = submission.submitted_at.strftime("%Y%m%d%H%M%S")
        async with self.client_factory(self.config.resilience) as client:
            target = await client.download(
                f"{self.base_url}/generatePDF",
                destination_dir / f"questionnaire_{submission.submission_id}_{stamp}.pdf",
                params={
                    "formid": submission.form_id,
                    "submissionid": submission.submission_id,
                    "apiKey": self.config.api_key,
                    "download": 1,
                },
            )
        log.info("Questionnaire PDF for %s saved to %s", submission.submission_id, target)
        return target


if TYPE_CHECKING:

    def _source_check(source: JotformSource) -> QuestionnaireSource:
        return source
