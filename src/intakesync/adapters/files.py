"""Local file adapters: questionnaire payload archive and the seen-submission set."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from intakesync.domain.ingest.errors import MarkerError
from intakesync.domain.ingest.submissions import QuestionnaireSubmission
from intakesync.domain.model import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from intakesync.domain.ports import SubmissionArchive, SubmissionTracker

log = getLogger(__name__)


@dataclass(slots=True)
class JsonQuestionnaireArchive:
    """Writes ``questionnaire_<id>_<timestamp>.json`` into a client folder."""

    clock: Callable[[], datetime] = utcnow

    def save_questionnaire(self, submission: QuestionnaireSubmission, folder: Path) -> Path:
        folder.mkdir(parents=True, exist_ok=True)
        stamp = self.clock().strftime("%Y%m%d%H%M%S")
        target = folder / f"questionnaire_{submission.submission_id}_{stamp}.json"
        target.write_text(
            json.dumps(submission.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        log.info("Questionnaire %s saved to %s", submission.submission_id, target)
        return target

    def find_questionnaire(self, submission_id: str, folder: Path) -> Path | None:
        if not folder.is_dir():
            return None
        candidates = sorted(folder.glob(f"questionnaire_{submission_id}_*.json"))
        # timestamps sort lexically, the newest copy wins
        return candidates[-1] if candidates else None

    def load_questionnaire(self, path: Path) -> QuestionnaireSubmission:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            raise ValueError(f"{path.name} does not contain a questionnaire object")
        return QuestionnaireSubmission.from_payload(cast(dict[str, Any], payload))


@dataclass(slots=True)
class LocalSeenIdTracker:
    """Processed submission ids kept in a JSON list on disk."""

    path: Path
    _seen: set[str] | None = field(default=None, init=False, repr=False)

    def is_processed(self, submission_id: str) -> bool:
        return submission_id in self._load()

    def mark_processed(self, submission_id: str) -> None:
        seen = self._load()
        if submission_id in seen:
            return
        updated = seen | {submission_id}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(sorted(updated), indent=2), encoding="utf-8")
        except OSError as exc:
            raise MarkerError(
                f"Could not record submission {submission_id} as processed: {exc}"
            ) from exc
        self._seen = updated

    def _load(self) -> set[str]:
        if self._seen is not None:
            return self._seen
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = []
        except (OSError, ValueError) as exc:
            log.error("Ignoring unreadable processed-submission file %s: %s", self.path, exc)
            raw = []
        self._seen = {str(item) for item in raw} if isinstance(raw, list) else set()
        return self._seen


if TYPE_CHECKING:

    def _archive_check() -> SubmissionArchive:
        return JsonQuestionnaireArchive()

    def _tracker_check(path: Path) -> SubmissionTracker:
        return LocalSeenIdTracker(path)
