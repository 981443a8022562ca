"""Natural-key resolution and non-destructive merge helpers for import pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from intakesync.domain.reconciliation.normalize import normalize_email

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from intakesync.domain.model import Client, Pet
    from intakesync.domain.ports import ClientRepository, PetRepository


def blank_fill_changes(
    entity: Client | Pet,
    incoming: Mapping[str, object | None],
) -> dict[str, object]:
    """Changes that fill locally blank fields; populated fields are never overwritten."""

    changes: dict[str, object] = {}
    for name, value in incoming.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if entity.is_blank(name):
            changes[name] = value.strip() if isinstance(value, str) else value
    return changes


def resolve_client(
    clients: ClientRepository,
    *,
    email: str | None,
    mobile: str | None,
    build: Callable[[], Client],
) -> tuple[Client, bool]:
    """Return ``(client, created)``, matching by email first and mobile second."""

    existing = clients.find_by_email_or_mobile(email, mobile)
    if existing is not None:
        return existing, False
    return clients.add(build()), True


def refresh_email(client: Client, email: str | None) -> dict[str, object]:
    """The submission is the freshest source for email, so it always wins."""

    if not email or not email.strip():
        return {}
    if normalize_email(email) == normalize_email(client.email):
        return {}
    return {"email": email}


def resolve_pet(
    pets: PetRepository,
    *,
    client_id: int,
    name: str,
    build: Callable[[], Pet],
) -> tuple[Pet, bool]:
    existing = pets.find_by_name(client_id, name)
    if existing is not None:
        return existing, False
    return pets.add(build()), True
