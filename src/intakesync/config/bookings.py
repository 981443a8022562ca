"""Website booking source configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

BOOKINGS_TIMEOUT_SECONDS = 20.0
DEFAULT_BOOKINGS_TABLE = "bookings"
DEFAULT_REFERRAL_BUCKET = "referrals"


@dataclass(frozen=True)
class BookingSourceConfig:
    """Connection settings for the hosted booking database (PostgREST API)."""

    base_url: str
    api_key: str
    table: str
    referral_bucket: str
    resilience: ResilienceConfig

    @property
    def rest_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/rest/v1/{self.table}"

    @property
    def storage_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/storage/v1"

    @property
    def auth_headers(self) -> dict[str, str]:
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}


def get_booking_source_config(*, resilience: ResilienceConfig | None = None) -> BookingSourceConfig:
    values = require_env_vars(("BOOKINGS_URL", "BOOKINGS_API_KEY"))
    base_url = values["BOOKINGS_URL"]
    return BookingSourceConfig(
        base_url=base_url,
        api_key=values["BOOKINGS_API_KEY"],
        table=optional_env_var("BOOKINGS_TABLE", DEFAULT_BOOKINGS_TABLE),
        referral_bucket=optional_env_var("BOOKINGS_REFERRAL_BUCKET", DEFAULT_REFERRAL_BUCKET),
        # never cache: the unsynced listing changes as bookings are marked
        resilience=resilience
        or ResilienceConfig(
            name="bookings",
            timeout_seconds=BOOKINGS_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=None,
        ),
    )
