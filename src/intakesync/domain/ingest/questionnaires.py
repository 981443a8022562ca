"""Import pipeline for returned behaviour questionnaires."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from intakesync.config.sync import SyncConfig
from intakesync.domain.age import parse_age_to_date_of_birth
from intakesync.domain.ingest.errors import (
    IngestError,
    MatchError,
    PostCommitError,
    TransactionError,
)
from intakesync.domain.ingest.resolution import blank_fill_changes, resolve_pet
from intakesync.domain.ingest.results import SubmissionResult
from intakesync.domain.model import (
    AnnotatedText,
    Event,
    EventType,
    LogEntry,
    Pet,
    SubmissionSource,
    labelled_line,
    utcnow,
)
from intakesync.domain.reconciliation.normalize import map_sex_value

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from intakesync.domain.ingest.submissions import QuestionnaireSubmission
    from intakesync.domain.model import Client
    from intakesync.domain.ports import (
        AutomationHooks,
        IntakeUnitOfWork,
        IntakeUnitOfWorkFactory,
        QuestionnaireDocumentSource,
        SubmissionArchive,
    )

log = getLogger(__name__)

SUBMISSION_ID_LABEL: Final[str] = "Submission ID"


def render_questionnaire_notes(
    submission: QuestionnaireSubmission,
    *,
    recorded_at: datetime,
) -> str:
    lines = [
        "<h2>Questionnaire Received</h2>",
        labelled_line(SUBMISSION_ID_LABEL, submission.submission_id),
        labelled_line("Form Type", submission.form_type),
        labelled_line("Pet", submission.pet_name),
    ]
    for label, value in (
        ("Breed", submission.breed),
        ("Age", submission.age),
        ("Sex", submission.sex),
        ("Weight", submission.weight),
    ):
        if value:
            lines.append(labelled_line(label, value))
    entry = LogEntry(
        kind="imported",
        recorded_at=recorded_at,
        details={
            "source": SubmissionSource.QUESTIONNAIRE.value,
            "form_id": submission.form_id,
        },
    )
    return AnnotatedText(body="\n".join(lines), entries=(entry,)).serialize()


def questionnaire_note(submission: QuestionnaireSubmission) -> str:
    parts: list[str] = []
    if submission.weight:
        parts.append(f"Weight: {submission.weight}")
    if submission.age:
        parts.append(f"Age reported: {submission.age}")
    if not parts:
        return ""
    return f"Questionnaire {submission.submission_id} data: {', '.join(parts)}"


@dataclass(slots=True)
class _Written:
    client: Client
    pet: Pet
    event: Event
    created_event: bool


@dataclass(slots=True)
class QuestionnaireImporter:
    """Merges a questionnaire into an already-known client and records its arrival."""

    unit_of_work_factory: IntakeUnitOfWorkFactory
    archive: SubmissionArchive
    documents: QuestionnaireDocumentSource | None = None
    automation: AutomationHooks | None = None
    config: SyncConfig = field(default_factory=SyncConfig)
    clock: Callable[[], datetime] = utcnow

    def __call__(self, submission: QuestionnaireSubmission) -> SubmissionResult:
        result = SubmissionResult(
            source=SubmissionSource.QUESTIONNAIRE,
            submission_id=submission.submission_id,
            reference=submission.submission_id,
            client_name=f"{submission.first_name} {submission.last_name}".strip(),
            pet_name=submission.pet_name,
        )
        try:
            submission.validate()
            written = self._write(submission)
        except IngestError as error:
            log.warning("Questionnaire %s not imported: %s", submission.submission_id, error)
            return result.fail(error)

        result.success = True
        result.client_id = written.client.id
        result.pet_id = written.pet.id
        result.primary_event_id = written.event.id
        result.created_primary_event = written.created_event
        log.info(
            "Imported questionnaire %s: client=%s, pet=%s, event=%s",
            submission.submission_id,
            result.client_id,
            result.pet_id,
            result.primary_event_id,
        )

        self._after_commit(submission, written, result)
        return result

    def _write(self, submission: QuestionnaireSubmission) -> _Written:
        try:
            with self.unit_of_work_factory() as uow:
                written = self._write_records(uow, submission)
                uow.commit()
        except IngestError:
            raise
        except Exception as exc:
            raise TransactionError(
                f"Questionnaire {submission.submission_id} rolled back: {exc}"
            ) from exc
        return written

    def _write_records(
        self,
        uow: IntakeUnitOfWork,
        submission: QuestionnaireSubmission,
    ) -> _Written:
        repositories = uow.repositories
        now = self.clock()

        client = repositories.clients.find_by_email_or_mobile(submission.email, submission.phone)
        if client is None or client.id is None:
            raise MatchError(f"Client not found for {submission.email}")
        if not client.folder_path:
            raise MatchError("Client folder not created yet")
        client_id = client.id

        changes = blank_fill_changes(
            client,
            {
                "mobile": submission.phone,
                "street_address": submission.street_address,
                "city": submission.city,
                "state": submission.state,
                "postcode": submission.postcode,
            },
        )
        if changes:
            repositories.clients.update(client, **changes)

        pet, _ = resolve_pet(
            repositories.pets,
            client_id=client_id,
            name=submission.pet_name,
            build=lambda: Pet(
                client_id=client_id,
                name=submission.pet_name,
                species=submission.species,
            ),
        )
        pet_changes = blank_fill_changes(
            pet,
            {
                "species": submission.species,
                "breed": submission.breed,
                "sex": map_sex_value(submission.sex),
                "date_of_birth": parse_age_to_date_of_birth(
                    submission.age, today=now.astimezone(self.config.zone).date()
                ),
            },
        )
        note = questionnaire_note(submission)
        if note and note not in (pet.notes or ""):
            pet.append_note(note)
            pet_changes["notes"] = pet.notes
        if pet_changes:
            repositories.pets.update(pet, **pet_changes)

        existing = repositories.events.find_by_marker(
            client_id,
            EventType.QUESTIONNAIRE_RECEIVED,
            SUBMISSION_ID_LABEL,
            submission.submission_id,
        )
        if existing is not None:
            return _Written(client=client, pet=pet, event=existing, created_event=False)

        event = repositories.events.add(
            Event(
                client_id=client_id,
                event_type=EventType.QUESTIONNAIRE_RECEIVED,
                date=submission.submitted_at,
                notes=render_questionnaire_notes(submission, recorded_at=now),
            )
        )
        return _Written(client=client, pet=pet, event=event, created_event=True)

    def _after_commit(
        self,
        submission: QuestionnaireSubmission,
        written: _Written,
        result: SubmissionResult,
    ) -> None:
        if written.created_event or not _files_already_saved(written.event):
            self._save_files(submission, written, result)
        else:
            log.info("Files for questionnaire %s were already saved", submission.submission_id)

        if self.automation is not None and written.created_event:
            try:
                rule_results = self.automation.on_entity_created(written.event)
            except Exception as exc:  # noqa: BLE001
                result.warn(PostCommitError("automation", str(exc)))
            else:
                for rule_result in rule_results:
                    for error in rule_result.errors:
                        result.warn(PostCommitError(f"automation {rule_result.rule_id}", error))

    def _save_files(
        self,
        submission: QuestionnaireSubmission,
        written: _Written,
        result: SubmissionResult,
    ) -> None:
        folder = Path(written.client.folder_path or "")
        saved: dict[str, str] = {}

        try:
            json_path = self.archive.save_questionnaire(submission, folder)
        except Exception as exc:  # noqa: BLE001
            result.warn(PostCommitError("save questionnaire payload", str(exc)))
            saved["json"] = "failed"
        else:
            result.attachments.append(json_path)
            saved["json"] = json_path.name

        if self.documents is not None:
            try:
                pdf_path = self.documents.download_pdf(submission, folder)
            except Exception as exc:  # noqa: BLE001
                result.warn(PostCommitError("download questionnaire pdf", str(exc)))
                saved["pdf"] = "failed"
            else:
                result.attachments.append(pdf_path)
                saved["pdf"] = pdf_path.name

        try:
            self._record_files(written.event, saved)
        except Exception as exc:  # noqa: BLE001
            result.warn(PostCommitError("record saved files", str(exc)))

    def _record_files(self, event: Event, saved: dict[str, str]) -> None:
        if event.id is None:
            return
        with self.unit_of_work_factory() as uow:
            stored = uow.repositories.events.get(event.id)
            if stored is None:
                return
            stored.append_log(LogEntry(kind="files_saved", recorded_at=self.clock(), details=saved))
            uow.repositories.events.update(stored, notes=stored.notes)
            uow.commit()


def _files_already_saved(event: Event) -> bool:
    """True when an earlier import recorded the payload and PDF without failures."""

    return any(
        entry.kind == "files_saved" and "failed" not in entry.details.values()
        for entry in event.annotated_notes.entries
    )
