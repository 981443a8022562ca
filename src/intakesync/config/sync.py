"""Configuration defaults for import pipelines and automation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError

DEFAULT_TIMEZONE: Final[str] = "Australia/Melbourne"
DEFAULT_STATE: Final[str] = "VIC"
DEFAULT_QUESTIONNAIRE_LOOKBACK_DAYS: Final[int] = 30
DEFAULT_QUESTIONNAIRE_CHECK_HOURS: Final[int] = 48


@dataclass(frozen=True, slots=True)
class SyncConfig:
    timezone: str = DEFAULT_TIMEZONE
    default_state: str = DEFAULT_STATE
    questionnaire_lookback_days: int = DEFAULT_QUESTIONNAIRE_LOOKBACK_DAYS
    questionnaire_check_hours: int = DEFAULT_QUESTIONNAIRE_CHECK_HOURS

    @property
    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except ZoneInfoNotFoundError as exc:
            raise ConfigurationError(f"Unknown timezone: {self.timezone}") from exc


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        timezone=optional_env_var("INTAKESYNC_TIMEZONE", DEFAULT_TIMEZONE),
        default_state=optional_env_var("INTAKESYNC_DEFAULT_STATE", DEFAULT_STATE),
        questionnaire_lookback_days=optional_int_env_var(
            "INTAKESYNC_QUESTIONNAIRE_LOOKBACK_DAYS", DEFAULT_QUESTIONNAIRE_LOOKBACK_DAYS
        ),
        questionnaire_check_hours=optional_int_env_var(
            "INTAKESYNC_QUESTIONNAIRE_CHECK_HOURS", DEFAULT_QUESTIONNAIRE_CHECK_HOURS
        ),
    )
