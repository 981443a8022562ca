from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from intakesync.adapters.files import JsonQuestionnaireArchive, LocalSeenIdTracker
from intakesync.domain.ingest import MarkerError
from tests.helpers.submissions import make_questionnaire

if TYPE_CHECKING:
    from pathlib import Path

SAVED_AT = datetime(2025, 10, 20, 9, 0, tzinfo=UTC)


def test_archive_saves_and_loads_questionnaire(tmp_path: Path) -> None:
    archive = JsonQuestionnaireArchive(clock=lambda: SAVED_AT)
    submission = make_questionnaire()

    path = archive.save_questionnaire(submission, tmp_path / "client")

    assert path.name == "questionnaire_5981234567_20251020090000.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["client"]["address"] == "12 Example St, Carlton, VIC, 3053"
    assert payload["formType"] == "Dog"

    loaded = archive.load_questionnaire(path)
    assert loaded.submission_id == submission.submission_id
    assert loaded.submitted_at == submission.submitted_at
    assert loaded.city == "Carlton"
    assert loaded.pet_fields() == submission.pet_fields()


def test_archive_finds_newest_copy(tmp_path: Path) -> None:
    older = tmp_path / "questionnaire_42_20250101000000.json"
    newer = tmp_path / "questionnaire_42_20251001000000.json"
    for path in (newer, older, tmp_path / "questionnaire_421_20251231000000.json"):
        path.write_text("{}", encoding="utf-8")
    archive = JsonQuestionnaireArchive()

    assert archive.find_questionnaire("42", tmp_path) == newer
    assert archive.find_questionnaire("7", tmp_path) is None
    assert archive.find_questionnaire("42", tmp_path / "missing") is None


def test_archive_rejects_non_object_payload(tmp_path: Path) -> None:
    path = tmp_path / "questionnaire_1_20251020090000.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError, match="does not contain a questionnaire"):
        JsonQuestionnaireArchive().load_questionnaire(path)


def test_seen_id_tracker_persists_ids(tmp_path: Path) -> None:
    path = tmp_path / "state" / "processed.json"
    tracker = LocalSeenIdTracker(path)

    assert not tracker.is_processed("1")
    tracker.mark_processed("1")
    tracker.mark_processed("1")

    assert json.loads(path.read_text(encoding="utf-8")) == ["1"]
    assert LocalSeenIdTracker(path).is_processed("1")


def test_seen_id_tracker_treats_unreadable_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "processed.json"
    path.write_text("not json", encoding="utf-8")

    tracker = LocalSeenIdTracker(path)

    assert not tracker.is_processed("1")
    tracker.mark_processed("1")
    assert json.loads(path.read_text(encoding="utf-8")) == ["1"]


def test_seen_id_tracker_reports_write_failures(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    tracker = LocalSeenIdTracker(blocker / "processed.json")

    with pytest.raises(MarkerError, match="Could not record submission 1"):
        tracker.mark_processed("1")
    assert not tracker.is_processed("1")
