"""Component intelligence service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, resilience_from_env

INTELLIGENCE_TIMEOUT_SECONDS = 30.0
DEFAULT_NOTIFICATION_PAGE_SIZE = 100
DEFAULT_RATE_LIMIT = RateLimit(max_calls=10, per_seconds=1.0)


@dataclass(frozen=True, slots=True)
class IntelligenceConfig:
    """Holds the intelligence service endpoint and credentials."""

    base_url: str
    api_token: str
    resilience: ResilienceConfig
    page_size: int = DEFAULT_NOTIFICATION_PAGE_SIZE


def get_intelligence_config(*, resilience: ResilienceConfig | None = None) -> IntelligenceConfig:
    values = require_env_vars(("BINSIGHT_SERVICE_URL", "BINSIGHT_API_TOKEN"))
    base_url = values["BINSIGHT_SERVICE_URL"].rstrip("/")
    token = values["BINSIGHT_API_TOKEN"]
    page_size = env_int("BINSIGHT_NOTIFICATION_PAGE_SIZE", DEFAULT_NOTIFICATION_PAGE_SIZE)
    if page_size < 1:
        raise ConfigurationError("BINSIGHT_NOTIFICATION_PAGE_SIZE must be at least 1")

    return IntelligenceConfig(
        base_url=base_url,
        api_token=token,
        page_size=page_size,
        resilience=resilience
        or resilience_from_env(
            "intelligence",
            prefix="BINSIGHT_SERVICE",
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            default_timeout=INTELLIGENCE_TIMEOUT_SECONDS,
            default_ratelimit=DEFAULT_RATE_LIMIT,
        ),
    )
