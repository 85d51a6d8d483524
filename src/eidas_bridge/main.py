"""
Application entry point — wires dependencies and starts the service.

Composition root: creates the concrete adapters, injects them into the PRID
service and the LoA negotiator, and hands the result to the ASGI app.

This is the ONLY place where concrete classes are instantiated.
Everything else depends on Protocol interfaces.

Responsibilities:
  1. Configure structlog
  2. Load and validate configuration from environment
  3. Create the policy reader, generators and metadata provider
  4. Build the PRID service (initial policy load, fails fast)
  5. Serve the operations endpoints with uvicorn (the app builds the
     components in its lifespan)
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import structlog
import uvicorn

from eidas_bridge import __version__
from eidas_bridge.adapters.metadata import StaticCountryMetadataProvider
from eidas_bridge.adapters.policy_reader import create_policy_reader
from eidas_bridge.config import AppSettings
from eidas_bridge.health import PridHealth
from eidas_bridge.loa.negotiator import LoaNegotiator
from eidas_bridge.prid.generators import create_generators
from eidas_bridge.prid.service import PridService


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured console logging.

    Unknown level names fall back to INFO.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


@dataclass(frozen=True, slots=True)
class Components:
    """The wired application, shared by the ASGI app and the tests."""

    service: PridService
    negotiator: LoaNegotiator
    metadata_provider: StaticCountryMetadataProvider
    health: PridHealth


def create_components(settings: AppSettings) -> Components:
    """
    Instantiate all concrete collaborators from application settings.

    Raises PolicyStartupError if the initial PRID policy is unusable.
    """
    reader = create_policy_reader(settings.prid.policy_location, timeout=settings.http_timeout_seconds)
    generators = create_generators(settings.prid.algorithms, settings.prid.destination_country)
    metadata_provider = StaticCountryMetadataProvider(settings.metadata.countries)

    service = PridService(reader, generators)
    return Components(
        service=service,
        negotiator=LoaNegotiator(metadata_provider),
        metadata_provider=metadata_provider,
        health=PridHealth(service, metadata_provider),
    )


def main() -> None:
    """Validate configuration, then serve the ASGI app (which loads the policy)."""
    try:
        settings = AppSettings()
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        policy_location=settings.prid.policy_location,
        reload_cron=settings.prid.reload_cron,
    )

    uvicorn.run(
        "eidas_bridge.asgi:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
