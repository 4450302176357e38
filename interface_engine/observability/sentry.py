# File: interface_engine/observability/sentry.py | Version: 1.1 | Title: Optional Sentry initialization
import logging
import os

import sentry_sdk

log = logging.getLogger(__name__)


def init_sentry_if_configured() -> bool:
    dsn = os.getenv("SENTRY_DSN", "").strip()
    if not dsn:
        log.info("Sentry disabled (no SENTRY_DSN).")
        return False

    try:
        traces = float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1"))
    except ValueError:
        log.warning("Invalid SENTRY_TRACES_SAMPLE_RATE; tracing disabled")
        traces = 0.0

    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=traces,
        environment=os.getenv("SENTRY_ENVIRONMENT", "development"),
    )
    log.info("Sentry initialized.")
    return True
