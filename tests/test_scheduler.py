import pytz

from dailystuff.services.backup import BackupService
from dailystuff.services.scheduler import BACKUP_JOB_ID, create_scheduler, run_startup_backup
from tests.conftest import MemoryKeyValueStore, RecordingUploader

async def test_daily_job_is_registered(repository, clock):
    service = BackupService(repository, RecordingUploader(), MemoryKeyValueStore(), clock=clock)
    scheduler = create_scheduler(service, hour=5, timezone=pytz.timezone("Europe/Moscow"))

    job = scheduler.get_job(BACKUP_JOB_ID)

    assert job is not None
    assert job.func == service.backup_if_needed
    assert str(job.trigger.fields[5]) == "5"

async def test_startup_backup_runs_once_per_day(repository, clock):
    uploader = RecordingUploader()
    service = BackupService(repository, uploader, MemoryKeyValueStore(), clock=clock)

    await run_startup_backup(service)
    await run_startup_backup(service)

    assert len(uploader.uploads) == 1
