"""Jotform questionnaire source configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook

JOTFORM_BASE_URL = "https://api.jotform.com"
JOTFORM_TIMEOUT_SECONDS = 15.0


@dataclass(frozen=True)
class JotformConfig:
    """Holds Jotform API configuration values."""

    api_key: str
    dog_form_id: str
    cat_form_id: str
    resilience: ResilienceConfig

    @property
    def form_ids(self) -> tuple[str, str]:
        return (self.dog_form_id, self.cat_form_id)


def get_jotform_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> JotformConfig:
    values = require_env_vars(("JOTFORM_API_KEY", "JOTFORM_DOG_FORM_ID", "JOTFORM_CAT_FORM_ID"))
    return JotformConfig(
        api_key=values["JOTFORM_API_KEY"],
        dog_form_id=values["JOTFORM_DOG_FORM_ID"],
        cat_form_id=values["JOTFORM_CAT_FORM_ID"],
        resilience=resilience
        or ResilienceConfig(
            name="jotform",
            base_url=optional_env_var("JOTFORM_BASE_URL", JOTFORM_BASE_URL),
            timeout_seconds=JOTFORM_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(backend="memory", should_cache=cache_predicate),
        ),
    )
