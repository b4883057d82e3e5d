from datetime import date, datetime

import pytest
import pytest_asyncio
import pytz

from dailystuff.core.database import DatabaseManager
from dailystuff.core.models import Task, TaskType
from dailystuff.core.repository import TaskRepository
from dailystuff.services.backup import BackupUploader, KeyValueStore

# 2024-01-01 - понедельник
MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
WEDNESDAY = date(2024, 1, 3)

@pytest_asyncio.fixture
async def database(tmp_path):
    manager = DatabaseManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await manager.initialize()
    yield manager
    await manager.shutdown()

@pytest_asyncio.fixture
async def repository(database):
    return TaskRepository(database)

@pytest.fixture
def pushups():
    return Task(name="Pushups", type=TaskType.COUNTER, target_value=3, valid_days="MONDAY,WEDNESDAY")

@pytest.fixture
def reading():
    return Task(name="Read", type=TaskType.TIMED, target_value=30, valid_days="MONDAY")

class MemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial=None):
        self.data = dict(initial or {})

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

class RecordingUploader(BackupUploader):
    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    async def upload(self, filename, content):
        if self.error is not None:
            raise self.error
        self.uploads.append((filename, content))
        return f"memory://{filename}"

class FixedClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self):
        return self.moment

@pytest.fixture
def clock():
    return FixedClock(pytz.utc.localize(datetime(2024, 1, 1, 10, 30, 0)))
