"""Periodic purge of expired moments.

Visibility never depends on this task; read paths check expires_at on their own.
Each pass runs in a worker thread so the event loop is never blocked.
"""
import asyncio
import logging
import os

from app.services.query_service import QueryService

logger = logging.getLogger(__name__)

CHECK_INTERVAL_SECONDS = float(os.getenv("MOMENT_REAPER_INTERVAL_SEC", "60"))


def run_reaper_once(service: QueryService) -> int:
    return service.purge_expired_moments()


async def run_reaper_loop(service: QueryService, interval: float = CHECK_INTERVAL_SECONDS) -> None:
    while True:
        try:
            await asyncio.to_thread(run_reaper_once, service)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("moment reaper pass failed")
        await asyncio.sleep(interval)
