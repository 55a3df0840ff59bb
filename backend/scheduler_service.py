"""
Scheduler pour les tâches différées Numeris
- Suppression des PDF générés après DOWNLOAD_TTL_SECONDS
"""

import logging
import os
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from config import now_utc

logger = logging.getLogger("scheduler")


def remove_file(path: str) -> bool:
    """Delete a rendered file; a file already gone is fine."""
    try:
        os.remove(path)
        logger.info(f"Removed downloaded file {path}")
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error(f"Could not remove {path}: {e}")
        return False


class TaskScheduler:
    """Gestionnaire de tâches planifiées"""

    def __init__(self):
        self.scheduler = AsyncIOScheduler(timezone="UTC")

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")

    def schedule_removal(self, path: str, delay_seconds: int):
        """Remove `path` once, `delay_seconds` from now."""
        run_at = now_utc() + timedelta(seconds=delay_seconds)
        job = self.scheduler.add_job(
            remove_file,
            DateTrigger(run_date=run_at),
            args=[path],
            id=f"cleanup:{path}",
            name="Suppression PDF",
            replace_existing=True,
        )
        logger.info(f"Scheduled removal of {path} at {run_at.isoformat()}")
        return job
