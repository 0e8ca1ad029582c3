"""Rating check scheduler.

Runs the scheduled rating check once on start, then again every configured interval.
Plain asyncio task; cancelled on shutdown.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from playstore_agent.core.logging import get_logger
from playstore_agent.workflow.engine import RunListener
from playstore_agent.workflow.rating_check import HistoryAppender, RatingLookup, run_rating_check

log = get_logger("workflow.scheduler")

RETRY_AFTER_ERROR_SECONDS = 60


class RatingCheckScheduler:
    """Manages the periodic scheduled-rating-check workflow."""

    def __init__(
        self,
        app_names: list[str],
        *,
        lookup: RatingLookup,
        history_store: Optional[HistoryAppender] = None,
        listener_factory=None,
        interval_hours: int = 24,
    ):
        self.app_names = list(app_names)
        self.lookup = lookup
        self.history_store = history_store
        self.listener_factory = listener_factory
        self._interval_seconds = max(1, interval_hours) * 3600
        self._task: asyncio.Task | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the background refresh loop."""
        if self._running:
            return
        if not self.app_names:
            log.warning("No app names configured, rating check scheduler disabled")
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        log.info("Rating check scheduler started (interval: %d hours, apps: %s)",
                 self._interval_seconds // 3600, ", ".join(self.app_names))

    async def stop(self):
        """Stop the background refresh loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        log.info("Rating check scheduler stopped")

    async def run_once(self):
        listener: Optional[RunListener] = self.listener_factory() if self.listener_factory else None
        result = await run_rating_check(
            self.app_names,
            lookup=self.lookup,
            history_store=self.history_store,
            listener=listener,
        )
        if result.ok:
            log.info("Scheduled rating check %s completed", result.run_id)
        else:
            log.error("Scheduled rating check %s failed at %s: %s",
                      result.run_id, result.failed_step, result.error)
        return result

    async def _run_loop(self):
        """Immediate run, then one run per interval."""
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                log.error("Scheduled rating check crashed: %s", exc, exc_info=True)
                await asyncio.sleep(RETRY_AFTER_ERROR_SECONDS)
