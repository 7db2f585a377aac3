"""Optional Sentry error reporting for the PongRank API."""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)


def _parse_sample_rate(env_var: str, default: float = 0.0) -> float:
    raw_value = os.getenv(env_var)
    if raw_value is None:
        return default

    try:
        value = float(raw_value)
    except ValueError:
        logger.warning("Ignoring %s=%r (not a number); using %.2f", env_var, raw_value, default)
        return default

    if value < 0:
        logger.warning("Ignoring negative %s=%r; using %.2f", env_var, raw_value, default)
        return default
    return value


def init_sentry() -> bool:
    """Report API errors to Sentry when ``SENTRY_DSN`` is set.

    Returns whether the SDK was initialised. Tracing and profiling stay off
    unless their sample rates are configured.
    """

    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not set; error reporting disabled")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        traces_sample_rate=_parse_sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=_parse_sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
    )
    logger.info("Sentry error reporting enabled (environment=%s)", environment or "default")
    return True
