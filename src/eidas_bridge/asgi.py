"""
FastAPI + Uvicorn ASGI application — operations endpoints of the PRID service.

Architecture:
  - FastAPI: lightweight web framework
  - Uvicorn: production ASGI server (handles signals, graceful shutdown)
  - APScheduler: BackgroundScheduler reloading the policy on its cron
  - Probes: /health reports the policy state, /ready flips once the initial
    policy is installed

Endpoints:
  GET  /health   UP / WARNING / OUT_OF_SERVICE with details
  GET  /ready    readiness probe
  GET  /info     installed PRID policy
  POST /refresh  reload the policy now

Entry point for production: uvicorn eidas_bridge.asgi:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from eidas_bridge import __version__
from eidas_bridge.config import AppSettings
from eidas_bridge.health import HealthStatus
from eidas_bridge.main import Components, configure_structlog, create_components
from eidas_bridge.prid.service import PolicyStartupError
from eidas_bridge.scheduler import create_scheduler

# ─────────────────────── Global State ───────────────────────
# Set during app startup, read by the endpoints.

_components: Components | None = None
_scheduler: BackgroundScheduler | None = None
_error_message: str | None = None
log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup: load settings, build the components (initial policy load) and
    start the reload scheduler.
    Shutdown: stop the scheduler.
    """
    global _components, _scheduler, _error_message
    _components, _scheduler, _error_message = None, None, None

    try:
        settings = AppSettings()
    except Exception as e:
        _error_message = f"Configuration error: {e}"
        log.error("asgi.startup_error", error=_error_message)
        raise

    configure_structlog(settings.log_level)
    log.info("asgi.startup_config", version=__version__, policy_location=settings.prid.policy_location)

    try:
        _components = create_components(settings)
    except PolicyStartupError as e:
        _error_message = str(e)
        log.error("asgi.policy_startup_failed", errors=list(e.validation.errors))
        raise

    scheduler = BackgroundScheduler()
    create_scheduler(
        reload_fn=_components.service.reload,
        cron=settings.prid.reload_cron,
        run_on_startup=settings.prid.reload_on_startup,
        scheduler=scheduler,
    )
    scheduler.start()
    _scheduler = scheduler
    log.info("asgi.startup_complete", countries=_components.service.get_policy().countries)

    yield

    log.info("asgi.shutdown", reason="SIGTERM or server stop")
    try:
        scheduler.shutdown(wait=True)
        log.info("asgi.scheduler_shutdown_complete")
    except Exception as e:
        log.warning("asgi.scheduler_shutdown_error", error=str(e))


# ─────────────────────── FastAPI Application ───────────────────────

app = FastAPI(
    title="eidas-bridge",
    description="PRID generation and LoA negotiation for an eIDAS connector",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> JSONResponse:
    """
    Health of the PRID service.

    Returns 200 for UP and WARNING, 503 for OUT_OF_SERVICE or when the
    service failed to start.
    """
    if _error_message or _components is None:
        return JSONResponse(
            status_code=503,
            content={"status": HealthStatus.OUT_OF_SERVICE.value, "error": _error_message},
        )

    report = _components.health.report()
    status_code = 503 if report.status is HealthStatus.OUT_OF_SERVICE else 200
    return JSONResponse(status_code=status_code, content=report.to_dict())


@app.get("/ready")
async def ready() -> JSONResponse:
    """Readiness probe — ready once the initial policy is installed and the scheduler runs."""
    if _components is None or _scheduler is None or not _scheduler.running:
        return JSONResponse(status_code=503, content={"status": "starting", "error": _error_message})
    return JSONResponse(status_code=200, content={"status": "ready"})


@app.get("/info")
async def info() -> dict[str, Any]:
    """The installed PRID policy, as the policy document would spell it."""
    policy = _components.service.get_policy().to_dict() if _components else {}
    return {
        "name": "eidas-bridge",
        "version": __version__,
        "prid": {"policy": policy},
        "scheduler_running": _scheduler is not None and _scheduler.running,
    }


@app.post("/refresh")
async def refresh() -> JSONResponse:
    """
    Reload the PRID policy now.

    Runs the reload in a worker thread to avoid blocking the event loop.
    Returns 200 {"status": "OK", "policy": ...} when the document validated
    cleanly, 500 {"status": "ERROR", "errors": [...]} otherwise (valid
    entries of a partially invalid document are still installed).
    """
    if _components is None:
        return JSONResponse(
            status_code=503,
            content={"status": "ERROR", "errors": ["PRID service not initialized"]},
        )

    log.info("refresh.manual_start", source="REST")
    validation = await asyncio.to_thread(_components.service.update_policy)

    if validation.has_errors():
        log.error("refresh.failed", errors=list(validation.errors))
        return JSONResponse(status_code=500, content={"status": "ERROR", "errors": list(validation.errors)})

    policy = _components.service.get_policy()
    log.info("refresh.completed", countries=policy.countries)
    return JSONResponse(status_code=200, content={"status": "OK", "policy": policy.to_dict()})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("eidas_bridge.asgi:app", host="0.0.0.0", port=8000, reload=False, log_level="info")
