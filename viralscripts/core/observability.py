"""
Logfire observability configuration for ViralScripts.

Provides tracing and monitoring for:
- Pipeline runs (one span per run, one per stage)
- Anthropic and OpenAI calls
- Standard library logging (forwarded to Logfire)

Usage:
    # At CLI start-up
    from viralscripts.core.observability import setup_logfire
    setup_logfire()

    # In pipeline code
    lf = get_logfire()
    with lf.span("script_pipeline", model_id=model_id):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Your Logfire write token (required for production)
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

_logfire_configured = False


def setup_logfire(
    environment: Optional[str] = None,
    service_name: str = "viralscripts",
    forward_logging: bool = True,
) -> bool:
    """
    Configure Logfire for observability.

    Args:
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing
        forward_logging: Attach a LogfireLoggingHandler to the root logger

    Returns:
        True if Logfire was configured, False if skipped (no token)
    """
    global _logfire_configured

    if _logfire_configured:
        logger.debug("Logfire already configured")
        return True

    token = os.environ.get("LOGFIRE_TOKEN")
    if not token:
        logger.info("LOGFIRE_TOKEN not set, skipping Logfire configuration")
        return False

    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    try:
        logfire.configure(
            token=token,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )

        logfire.instrument_pydantic()
        logfire.instrument_anthropic()
        logfire.instrument_openai()

        if forward_logging:
            logging.getLogger().addHandler(logfire.LogfireLoggingHandler())

        _logfire_configured = True
        logger.info(f"Logfire configured: service={service_name}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False


def get_logfire():
    """
    Get the logfire module for spans.

    Spans opened before setup_logfire() has run are not exported.
    """
    return logfire
