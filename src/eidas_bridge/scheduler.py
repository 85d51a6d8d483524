"""
Scheduler — periodic reload of the PRID policy.

Infrastructure layer — uses APScheduler (3.x) with a standard 5-field cron
expression. Each run is wrapped in a LoggingExecutionContext for timing and
success/failure logging. A failed reload never stops the schedule; the
service keeps its last good policy.

Graceful shutdown: handles SIGINT/SIGTERM to stop the scheduler cleanly.
"""

from __future__ import annotations

import signal
import sys
from collections.abc import Callable

import structlog
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from railway import LoggingExecutionContext
from railway.result import Result

from eidas_bridge.domain.models import PridPolicy

log = structlog.get_logger()

JOB_ID = "prid_policy_reload"


def create_reload_job(reload_fn: Callable[[], Result[PridPolicy]]) -> Callable[[], None]:
    """Wrap a reload callable so that its outcome is logged and never raised."""
    ctx = LoggingExecutionContext(operation="PridPolicyReload")

    def _job() -> None:
        result = ctx.execute(reload_fn)
        if result.is_success():
            log.info("scheduler.reload_completed", countries=result.value().countries)
        else:
            log.error("scheduler.reload_failed", failure=str(result.error()))

    return _job


def create_scheduler(
    reload_fn: Callable[[], Result[PridPolicy]],
    cron: str = "*/10 * * * *",
    run_on_startup: bool = False,
    scheduler: BaseScheduler | None = None,
) -> BaseScheduler:
    """
    Create a scheduler that reloads the PRID policy on a cron schedule.

    Args:
        reload_fn: Zero-argument callable, normally PridService.reload.
        cron: Standard 5-field cron expression (minute hour dom month dow).
        run_on_startup: If True, reload once immediately.
        scheduler: Scheduler to register the job on; a BlockingScheduler with
                   shutdown signal handlers is created when omitted.

    Returns:
        The configured scheduler (call .start() to begin).
    """
    job = create_reload_job(reload_fn)

    if scheduler is None:
        scheduler = BlockingScheduler()
        _register_shutdown_signals(scheduler)

    minute, hour, dom, month, dow = cron.split()
    scheduler.add_job(
        job,
        trigger=CronTrigger(minute=minute, hour=hour, day=dom, month=month, day_of_week=dow),
        id=JOB_ID,
        name="PRID policy reload",
        replace_existing=True,
    )

    if run_on_startup:
        log.info("scheduler.startup_run", message="Reloading PRID policy on startup")
        job()

    return scheduler


def _register_shutdown_signals(scheduler: BaseScheduler) -> None:
    """Register SIGINT and SIGTERM handlers for graceful shutdown."""

    def _shutdown(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        log.info("scheduler.shutdown_requested", signal=sig_name)
        scheduler.shutdown(wait=False)
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)
