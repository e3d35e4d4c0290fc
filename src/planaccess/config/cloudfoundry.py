"""Cloud Controller connection configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, env_float, require_env_vars
from .errors import InvalidConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

CLOUDFOUNDRY_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CALLS_PER_SECOND = 10.0


@dataclass(frozen=True, slots=True)
class CloudFoundryConfig:
    """Holds the Cloud Controller endpoint and credentials."""

    api_endpoint: str
    access_token: str
    resilience: ResilienceConfig


def get_cloudfoundry_config(*, resilience: ResilienceConfig | None = None) -> CloudFoundryConfig:
    values = require_env_vars(("CF_API_ENDPOINT", "CF_ACCESS_TOKEN"))
    api_endpoint = values["CF_API_ENDPOINT"].strip().rstrip("/")
    if not api_endpoint.startswith(("http://", "https://")):
        raise InvalidConfigurationError(
            "CF_API_ENDPOINT", api_endpoint, "expected an http:// or https:// URL"
        )
    access_token = values["CF_ACCESS_TOKEN"].strip()
    if not access_token.lower().startswith("bearer "):
        access_token = f"bearer {access_token}"

    max_calls = env_float("CF_MAX_CALLS_PER_SECOND")
    if max_calls is None:
        max_calls = DEFAULT_MAX_CALLS_PER_SECOND
    if max_calls <= 0:
        raise InvalidConfigurationError(
            "CF_MAX_CALLS_PER_SECOND", str(max_calls), "expected a positive rate"
        )

    return CloudFoundryConfig(
        api_endpoint=api_endpoint,
        access_token=access_token,
        resilience=resilience
        or ResilienceConfig(
            name="cloudfoundry",
            base_url=api_endpoint,
            timeout_seconds=CLOUDFOUNDRY_TIMEOUT_SECONDS,
            verify_ssl=not env_flag("CF_SKIP_SSL_VALIDATION"),
            retry=RetryPolicy(),
            ratelimit=_rate_limit(max_calls),
            default_headers={"Authorization": access_token, "Accept": "application/json"},
        ),
    )


def _rate_limit(calls_per_second: float) -> RateLimit:
    """Whole rates allow bursts of that size; fractional rates space single calls."""

    if calls_per_second.is_integer():
        return RateLimit(max_calls=int(calls_per_second))
    return RateLimit(max_calls=1, per_seconds=1 / calls_per_second)
