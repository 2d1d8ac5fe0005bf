"""
Background maintenance inside the FastAPI process.

Uses APScheduler to periodically purge expired chatbot conversations and idle
rate-limit windows. Started and stopped by the app lifespan.
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from incubridge.services.chat_store import get_chat_service

logger = logging.getLogger(__name__)


class MaintenanceScheduler:
    """Background scheduler for housekeeping jobs."""

    def __init__(self):
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    def start(self, interval_minutes: int = 10):
        """Start the APScheduler background jobs."""
        if self._running:
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self._purge_chat_state,
            IntervalTrigger(minutes=interval_minutes),
            id="purge_chat_state",
            name="Purge expired chat history and rate-limit windows",
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info("Maintenance scheduler started (interval=%dm)", interval_minutes)

    def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            self._running = False
            logger.info("Maintenance scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def _purge_chat_state(self):
        get_chat_service().purge()


_scheduler: Optional[MaintenanceScheduler] = None


def get_maintenance_scheduler() -> MaintenanceScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = MaintenanceScheduler()
    return _scheduler
