"""POSTCREDIT — Scheduler Jobs.

APScheduler nightly job that re-materializes every client's rollups, so the
7/30/90-day windows keep sliding forward even on days nothing is imported.
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session, select

from postcredit.config import settings
from postcredit.database import engine
from postcredit.models.source_models import Client
from postcredit.analyzer.pipeline import recompute_all
from postcredit.core.errors import AttributionError
from postcredit.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


def recompute_all_clients(bind=None) -> dict[str, int]:
    """Recompute every preset for every client. Returns client id → rows written.

    Each client gets its own session; a failing client is logged and skipped.
    """
    bind = bind or engine
    with Session(bind) as session:
        client_ids = list(session.exec(select(Client.id).order_by(Client.id)).all())

    written: dict[str, int] = {}
    for client_id in client_ids:
        with Session(bind) as session:
            try:
                results = recompute_all(session, client_id)
                written[client_id] = sum(r.row_count for r in results)
            except AttributionError as e:
                logger.error(
                    f"Nightly recompute failed: {e}", extra={"client_id": client_id}
                )

    logger.info(f"Nightly recompute finished for {len(written)}/{len(client_ids)} clients")
    return written


async def nightly_recompute_job():
    """Refresh all rollups off the event loop."""
    logger.info("Scheduled attribution recompute starting...")
    try:
        await asyncio.to_thread(recompute_all_clients)
    except Exception as e:
        logger.error(f"Scheduled attribution recompute failed: {e}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        nightly_recompute_job,
        "cron",
        hour=settings.recompute_hour,
        minute=0,
        id="nightly_attribution_recompute",
        replace_existing=True,
        misfire_grace_time=3600,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Nightly recompute at {settings.recompute_hour}:00 UTC")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
