# services/scheduler.py

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from dailystuff.services.backup import BackupService

logger = logging.getLogger(__name__)

BACKUP_JOB_ID = 'daily_backup'

def create_scheduler(backup_service: BackupService, hour: int = 3, timezone=None) -> AsyncIOScheduler:
    """
    Планировщик ежедневного бэкапа.

    Задача запускается сразу при старте и затем раз в день;
    backup_if_needed сам пропускает повторы в пределах дня.
    """
    scheduler = AsyncIOScheduler(timezone=timezone) if timezone else AsyncIOScheduler()

    scheduler.add_job(
        backup_service.backup_if_needed,
        CronTrigger(hour=hour, minute=0, timezone=timezone),
        id=BACKUP_JOB_ID,
        replace_existing=True,
        misfire_grace_time=3600,
        coalesce=True
    )

    return scheduler

async def run_startup_backup(backup_service: BackupService) -> None:
    """Попытка бэкапа при запуске приложения"""
    result = await backup_service.backup_if_needed()
    if result.skipped:
        logger.info("⏭️ Backup already performed today")
    elif not result.success:
        logger.warning(f"Startup backup failed: {result.error}")
