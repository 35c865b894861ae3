import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from app.ai.config import load_ai_config
from app.analytics.db import init_db, purge_old_records
from app.core.config import settings

logger = logging.getLogger(__name__)


async def _purge_until_stopped(stop_event: asyncio.Event, interval_s: float) -> None:
    # First purge already ran inside init_db(); wait a full interval before the next one.
    while True:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_s)
        except asyncio.TimeoutError:
            pass
        else:
            return
        try:
            deleted = purge_old_records()
            if any(deleted.values()):
                logger.info("analytics_retention_purge deleted=%s", deleted)
        except Exception as exc:  # pragma: no cover - guard rail
            logger.warning("analytics_retention_purge_failed: %s", exc)


@asynccontextmanager
async def lifespan(app):
    init_db()
    ai_config = load_ai_config()
    logger.info(
        "startup ai_provider=%s ai_model=%s analytics_enabled=%s rate_limit_enabled=%s",
        ai_config.provider,
        ai_config.model,
        settings.analytics_enabled,
        settings.rate_limit_enabled,
    )

    stop_event = asyncio.Event()
    purge_task = None
    if settings.analytics_enabled:
        purge_task = asyncio.create_task(
            _purge_until_stopped(stop_event, max(1.0, settings.analytics_purge_interval_s))
        )
    yield
    stop_event.set()
    if purge_task is not None and not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
