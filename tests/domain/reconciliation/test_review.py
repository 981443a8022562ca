from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from intakesync.adapters.files import JsonQuestionnaireArchive
from intakesync.domain.reconciliation import (
    FieldStatus,
    QuestionnaireReview,
    ReconciliationLoadError,
)
from tests.helpers.records import seed_client, seed_pet
from tests.helpers.submissions import make_questionnaire

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from intakesync.adapters.sqlalchemy import SqlAlchemyUnitOfWork
    from intakesync.domain.model import Client


@pytest.fixture
def archive(clock: Callable[[], datetime]) -> JsonQuestionnaireArchive:
    return JsonQuestionnaireArchive(clock=clock)


@pytest.fixture
def review(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    archive: JsonQuestionnaireArchive,
) -> QuestionnaireReview:
    return QuestionnaireReview(uow_factory, archive)


@pytest.fixture
def client(uow_factory: Callable[[], SqlAlchemyUnitOfWork], client_folder: Path) -> Client:
    client = seed_client(uow_factory, folder_path=str(client_folder), city="Fitzroy")
    assert client.id is not None
    seed_pet(uow_factory, client.id, breed="Lab", sex="Neutered")
    return client


@pytest.fixture
def payload_path(archive: JsonQuestionnaireArchive, client_folder: Path) -> Path:
    return archive.save_questionnaire(make_questionnaire(), client_folder)


def test_find_submission_file(
    review: QuestionnaireReview,
    client: Client,
    payload_path: Path,
) -> None:
    assert client.id is not None
    assert review.find_submission_file(client.id, "5981234567") == payload_path

    with pytest.raises(ReconciliationLoadError, match="No saved questionnaire"):
        review.find_submission_file(client.id, "000")


def test_find_submission_file_requires_folder(
    review: QuestionnaireReview,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    client = seed_client(uow_factory)
    assert client.id is not None

    with pytest.raises(ReconciliationLoadError, match="has no folder"):
        review.find_submission_file(client.id, "5981234567")


def test_reconcile_compares_without_writing(
    review: QuestionnaireReview,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client: Client,
    payload_path: Path,
) -> None:
    assert client.id is not None

    result = review.reconcile(client.id, payload_path)

    client_status = {c.field: c.status for c in result.client_comparisons}
    pet_status = {c.field: c.status for c in result.pet_comparisons}
    assert client_status["email"] is FieldStatus.MATCH
    assert client_status["city"] is FieldStatus.DIFFERENT
    assert client_status["street_address"] is FieldStatus.NEW
    assert pet_status["breed"] is FieldStatus.DIFFERENT
    assert pet_status["sex"] is FieldStatus.MATCH
    assert result.has_changes
    with uow_factory() as uow:
        stored = uow.repositories.clients.get(client.id)
    assert stored is not None
    assert stored.city == "Fitzroy"


def test_apply_client_updates_writes_only_selected_fields(
    review: QuestionnaireReview,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client: Client,
    payload_path: Path,
) -> None:
    assert client.id is not None

    review.apply_client_updates(client.id, payload_path, ["city"])

    with uow_factory() as uow:
        stored = uow.repositories.clients.get(client.id)
    assert stored is not None
    assert stored.city == "Carlton"
    assert stored.street_address is None


def test_apply_pet_updates_appends_weight(
    review: QuestionnaireReview,
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
    client: Client,
    payload_path: Path,
) -> None:
    assert client.id is not None

    pet = review.apply_pet_updates(client.id, payload_path, ["breed", "weight"])

    assert pet.breed == "Labrador"
    with uow_factory() as uow:
        stored = uow.repositories.pets.find_by_name(client.id, "Rex")
    assert stored is not None
    assert stored.breed == "Labrador"
    assert stored.notes == "Weight: 28kg"


def test_unknown_fields_are_rejected(
    review: QuestionnaireReview,
    client: Client,
    payload_path: Path,
) -> None:
    assert client.id is not None

    with pytest.raises(ValueError, match="Unknown fields selected: age"):
        review.apply_pet_updates(client.id, payload_path, ["age"])
    with pytest.raises(ValueError, match="Unknown fields selected: breed"):
        review.apply_client_updates(client.id, payload_path, ["breed"])


def test_corrupt_payload_is_a_load_error(
    review: QuestionnaireReview,
    client: Client,
    client_folder: Path,
) -> None:
    assert client.id is not None
    broken = client_folder / "questionnaire_1_20251020090000.json"
    broken.write_text("[]", encoding="utf-8")

    with pytest.raises(ReconciliationLoadError):
        review.reconcile(client.id, broken)


def test_missing_pet_cannot_be_updated(
    review: QuestionnaireReview,
    archive: JsonQuestionnaireArchive,
    client: Client,
    client_folder: Path,
) -> None:
    assert client.id is not None
    path = archive.save_questionnaire(make_questionnaire("77", pet_name="Bella"), client_folder)

    with pytest.raises(ReconciliationLoadError, match="no pet named 'Bella'"):
        review.apply_pet_updates(client.id, path, ["breed"])
