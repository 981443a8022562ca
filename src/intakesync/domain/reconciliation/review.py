"""Human-reviewed merge of a persisted questionnaire into existing records."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from intakesync.domain.reconciliation.compare import (
    CLIENT_FIELDS,
    PET_FIELDS,
    FieldComparison,
    compare_client,
    compare_pet,
    has_changes,
)
from intakesync.domain.reconciliation.normalize import map_sex_value, normalize_email

if TYPE_CHECKING:
    from collections.abc import Iterable

    from intakesync.domain.ingest.submissions import QuestionnaireSubmission
    from intakesync.domain.model import Client, Pet
    from intakesync.domain.ports import (
        IntakeRepositories,
        IntakeUnitOfWorkFactory,
        SubmissionArchive,
    )

log = getLogger(__name__)

_CLIENT_FIELD_NAMES = frozenset(spec.field for spec in CLIENT_FIELDS)
_PET_FIELD_NAMES = frozenset(spec.field for spec in PET_FIELDS)
WEIGHT_FIELD = "weight"


class ReconciliationLoadError(RuntimeError):
    """The persisted submission or the records it refers to could not be loaded."""


@dataclass(slots=True, kw_only=True)
class ReconciliationResult:
    submission: QuestionnaireSubmission
    client: Client
    pet: Pet | None
    client_comparisons: list[FieldComparison]
    pet_comparisons: list[FieldComparison]

    @property
    def client_has_changes(self) -> bool:
        return has_changes(self.client_comparisons)

    @property
    def pet_has_changes(self) -> bool:
        return has_changes(self.pet_comparisons)

    @property
    def has_changes(self) -> bool:
        return self.client_has_changes or self.pet_has_changes


@dataclass(slots=True)
class QuestionnaireReview:
    unit_of_work_factory: IntakeUnitOfWorkFactory
    archive: SubmissionArchive

    def find_submission_file(self, client_id: int, submission_id: str) -> Path:
        with self.unit_of_work_factory() as uow:
            client = _load_client(uow.repositories, client_id)
        if not client.folder_path:
            raise ReconciliationLoadError(f"Client {client_id} has no folder")
        path = self.archive.find_questionnaire(submission_id, Path(client.folder_path))
        if path is None:
            raise ReconciliationLoadError(
                f"No saved questionnaire {submission_id} in {client.folder_path}"
            )
        return path

    def reconcile(self, client_id: int, payload_path: Path) -> ReconciliationResult:
        """Compare the saved payload with current records; never writes."""

        submission = self._load_submission(payload_path)
        with self.unit_of_work_factory() as uow:
            client = _load_client(uow.repositories, client_id)
            pet = uow.repositories.pets.find_by_name(client_id, submission.pet_name)
        return ReconciliationResult(
            submission=submission,
            client=client,
            pet=pet,
            client_comparisons=compare_client(client, submission.client_fields()),
            pet_comparisons=compare_pet(pet, submission.pet_fields()),
        )

    def apply_client_updates(
        self,
        client_id: int,
        payload_path: Path,
        selected_fields: Iterable[str],
    ) -> Client:
        """Write exactly the selected client fields from the saved payload."""

        selected = _validate_selection(selected_fields, _CLIENT_FIELD_NAMES)
        submission = self._load_submission(payload_path)
        incoming = submission.client_fields()
        changes: dict[str, object] = {}
        for name in selected:
            value = (incoming.get(name) or "").strip()
            if not value:
                continue
            changes[name] = normalize_email(value) if name == "email" else value

        with self.unit_of_work_factory() as uow:
            client = _load_client(uow.repositories, client_id)
            if changes:
                uow.repositories.clients.update(client, **changes)
            uow.commit()
        log.info("Applied client fields %s to client %s", sorted(changes), client_id)
        return client

    def apply_pet_updates(
        self,
        client_id: int,
        payload_path: Path,
        selected_fields: Iterable[str],
    ) -> Pet:
        """Write exactly the selected pet fields; ``weight`` is appended to the notes."""

        selected = _validate_selection(selected_fields, _PET_FIELD_NAMES | {WEIGHT_FIELD})
        submission = self._load_submission(payload_path)
        incoming = submission.pet_fields()
        incoming["sex"] = map_sex_value(incoming.get("sex"))

        with self.unit_of_work_factory() as uow:
            pet = uow.repositories.pets.find_by_name(client_id, submission.pet_name)
            if pet is None:
                raise ReconciliationLoadError(
                    f"Client {client_id} has no pet named {submission.pet_name!r}"
                )
            changes: dict[str, object] = {}
            for name in selected - {WEIGHT_FIELD}:
                value = (incoming.get(name) or "").strip()
                if value:
                    changes[name] = value
            weight = (incoming.get(WEIGHT_FIELD) or "").strip()
            if WEIGHT_FIELD in selected and weight:
                pet.append_note(f"Weight: {weight}")
                changes["notes"] = pet.notes
            if changes:
                uow.repositories.pets.update(pet, **changes)
            uow.commit()
        log.info("Applied pet fields %s to pet %s", sorted(changes), pet.id)
        return pet

    def _load_submission(self, payload_path: Path) -> QuestionnaireSubmission:
        try:
            return self.archive.load_questionnaire(payload_path)
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise ReconciliationLoadError(
                f"Could not load questionnaire payload {payload_path}: {exc}"
            ) from exc


def _load_client(repositories: IntakeRepositories, client_id: int) -> Client:
    client = repositories.clients.get(client_id)
    if client is None:
        raise ReconciliationLoadError(f"Client {client_id} not found")
    return client


def _validate_selection(selected_fields: Iterable[str], allowed: frozenset[str]) -> set[str]:
    selected = set(selected_fields)
    unknown = selected - allowed
    if unknown:
        raise ValueError(f"Unknown fields selected: {', '.join(sorted(unknown))}")
    return selected
