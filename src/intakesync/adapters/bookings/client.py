"""HTTP client for the hosted bookings database (PostgREST and storage APIs)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from intakesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from intakesync.config.bookings import BookingSourceConfig, get_booking_source_config
from intakesync.domain.ingest.bookings import referral_filename

from .schema import PostgrestError, SignedUrlResponse
from .translator import parse_booking

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    import httpx

    from intakesync.domain.ingest.submissions import BookingSubmission
    from intakesync.domain.ports import BookingSource

log = getLogger(__name__)

UNDEFINED_COLUMN: Final[str] = "42703"
SYNCED_FLAG: Final[str] = "synced_to_admin"
SIGNED_URL_TTL_SECONDS: Final[int] = 3600


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class BookingSourceError(RuntimeError):
    """Raised when the booking database rejects a request."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def _error_from(response: httpx.Response) -> BookingSourceError:
    try:
        error = PostgrestError.model_validate(response.json())
    except (ValueError, ValidationError):
        return BookingSourceError(f"HTTP {response.status_code}: {response.text[:200]}")
    return BookingSourceError(
        error.message or f"HTTP {response.status_code}", code=error.code
    )


@dataclass(slots=True)
class SupabaseBookingSource:
    """Booking source whose processed flag lives on the remote row."""

    config: BookingSourceConfig = field(default_factory=get_booking_source_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def fetch_unsynced(self) -> list[BookingSubmission]:
        return asyncio.run(self._fetch_unsynced_async())

    def mark_synced(self, booking_id: str) -> None:
        asyncio.run(self._mark_synced_async(booking_id))

    def find_by_reference(self, reference: str) -> BookingSubmission | None:
        return asyncio.run(self._find_by_reference_async(reference))

    def update_status(self, booking_id: str, status: str) -> None:
        asyncio.run(self._patch_async(booking_id, {"status": status}))
        log.info("Booking %s marked %s", booking_id, status)

    def download_referral(self, booking: BookingSubmission, destination_dir: Path) -> Path:
        return asyncio.run(self._download_referral_async(booking, destination_dir))

    async def _fetch_unsynced_async(self) -> list[BookingSubmission]:
        params = {
            "select": "*",
            "status": "eq.confirmed",
            "or": f"({SYNCED_FLAG}.is.null,{SYNCED_FLAG}.eq.false)",
            "order": "created_at.asc",
        }
        async with self.client_factory(self.config.resilience) as client:
            try:
                rows = await self._select(client, params)
            except BookingSourceError as error:
                if error.code != UNDEFINED_COLUMN:
                    raise
                log.warning(
                    "Bookings table has no %s column; fetching every confirmed booking",
                    SYNCED_FLAG,
                )
                params.pop("or")
                rows = await self._select(client, params)

        bookings: list[BookingSubmission] = []
        for row in rows:
            try:
                bookings.append(parse_booking(row))
            except ValidationError as exc:
                log.warning("Skipping malformed booking row: %s", exc)
        log.info("Fetched %d unsynced bookings", len(bookings))
        return bookings

    async def _find_by_reference_async(self, reference: str) -> BookingSubmission | None:
        params = {"select": "*", "booking_reference": f"eq.{reference}", "limit": "1"}
        async with self.client_factory(self.config.resilience) as client:
            rows = await self._select(client, params)
        if not rows:
            return None
        return parse_booking(rows[0])

    async def _mark_synced_async(self, booking_id: str) -> None:
        try:
            await self._patch_async(booking_id, {SYNCED_FLAG: True})
        except BookingSourceError as error:
            if error.code != UNDEFINED_COLUMN:
                raise
            log.warning("Cannot flag booking %s: %s column is missing", booking_id, SYNCED_FLAG)

    async def _patch_async(self, booking_id: str, changes: dict[str, object]) -> None:
        headers = {**self.config.auth_headers, "Prefer": "return=minimal"}
        async with self.client_factory(self.config.resilience) as client:
            response = await client.patch(
                self.config.rest_url,
                params={"id": f"eq.{booking_id}"},
                json=changes,
                headers=headers,
            )
        if response.is_error:
            raise _error_from(response)

    async def _select(
        self,
        client: ResilientClient,
        params: dict[str, str],
    ) -> list[object]:
        response = await client.get(
            self.config.rest_url, params=params, headers=self.config.auth_headers
        )
        if response.is_error:
            raise _error_from(response)
        payload = response.json()
        if not isinstance(payload, list):
            raise BookingSourceError("Unexpected bookings response payload")
        return list(payload)  # pyright: ignore[reportUnknownArgumentType]

    async def _download_referral_async(
        self,
        booking: BookingSubmission,
        destination_dir: Path,
    ) -> Path:
        if not booking.referral_file_path:
            raise BookingSourceError(f"Booking {booking.reference} has no referral file")

        storage_url = self.config.storage_url
        sign_url = (
            f"{storage_url}/object/sign/{self.config.referral_bucket}/"
            f"{booking.referral_file_path.lstrip('/')}"
        )
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(
                sign_url,
                json={"expiresIn": SIGNED_URL_TTL_SECONDS},
                headers=self.config.auth_headers,
            )
            if response.is_error:
                raise _error_from(response)
            signed = SignedUrlResponse.model_validate(response.json())
            target = await client.download(
                f"{storage_url}{signed.signed_url}",
                destination_dir / referral_filename(booking),
            )
        log.info("Referral for %s saved to %s", booking.reference, target)
        return target


if TYPE_CHECKING:

    def _source_check(source: SupabaseBookingSource) -> BookingSource:
        return source
