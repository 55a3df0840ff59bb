"""
Service de journalisation des activités

Best-effort: record() hands the activity to a bounded in-memory queue and
returns immediately. One worker drains it into the `activity` collection.
- queue full  -> the activity is dropped, a warning is logged
- write fails -> the error is logged, the worker keeps going
Nothing is persisted across restarts.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from models.activity import Activity

logger = logging.getLogger("activity_logger")


class ActivityLogger:
    def __init__(self, repository, max_queue_size: int = 1000):
        self.repository = repository
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue_size)
        self.dropped = 0
        self._worker: Optional[asyncio.Task] = None

    def record(self, user_id: str, action: str, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Queue an activity. Returns False when it had to be dropped."""
        activity = Activity(user_id=user_id, action=action, metadata=metadata or {})
        try:
            self.queue.put_nowait(activity)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"Activity queue full, dropped {action} for user {user_id} (total dropped: {self.dropped})")
            return False
        return True

    async def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="activity-logger")
            logger.info("Activity logger started")

    async def stop(self, timeout: float = 5.0) -> None:
        """Drain what can be written within `timeout`, then stop the worker."""
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self.queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Activity logger stopped with {self.queue.qsize()} pending activities")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("Activity logger stopped")

    async def _run(self) -> None:
        while True:
            activity = await self.queue.get()
            try:
                await self.repository.save(activity)
            except Exception as e:
                logger.error(f"Error while saving activity {activity.action} for user {activity.user_id}: {e}")
            finally:
                self.queue.task_done()
