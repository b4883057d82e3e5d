#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Daily Backup
Снимок всех задач и отметок в JSON и загрузка не чаще раза в день

Дата последнего бэкапа хранится в отдельном key-value хранилище,
которое передаётся в сервис явно. Ошибки бэкапа только логируются
и никогда не затрагивают данные задач.

Версия: 1.0.0
Дата: 2026-10-19
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

import aiofiles

from dailystuff.core.calendar import format_date
from dailystuff.core.models import Task, TaskCompletion
from dailystuff.core.repository import TaskRepository
from dailystuff.utils.datetime_utils import now_in, to_millis

logger = logging.getLogger(__name__)

LAST_BACKUP_DATE_KEY = "last_backup_date"
BACKUP_FILE_PREFIX = "daily_stuff_backup_"

# ===== EXCEPTIONS =====

class BackupError(Exception):
    """Ошибка выгрузки бэкапа"""
    pass

# ===== KEY-VALUE STORE =====

class KeyValueStore(ABC):
    """Небольшое хранилище настроек ключ-значение"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

class JsonFileKeyValueStore(KeyValueStore):
    """Хранилище ключ-значение в JSON файле"""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
            content = await f.read()

        try:
            data = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            logger.warning(f"State file {self.path} is corrupted, starting empty: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    async def get(self, key: str) -> Optional[str]:
        return (await self._load()).get(key)

    async def set(self, key: str, value: str) -> None:
        data = await self._load()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # атомарная запись через временный файл
        temp_file = self.path.with_suffix('.tmp')
        async with aiofiles.open(temp_file, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(data, ensure_ascii=False, indent=2))
        temp_file.replace(self.path)

# ===== UPLOADERS =====

class BackupUploader(ABC):
    """Внешний получатель файла бэкапа"""

    @abstractmethod
    async def upload(self, filename: str, content: bytes) -> str:
        """Загрузить файл, вернуть его идентификатор"""
        ...

class LocalDirectoryUploader(BackupUploader):
    """Сохранение бэкапа в локальную директорию"""

    def __init__(self, backup_dir: Path):
        self.backup_dir = Path(backup_dir)

    async def upload(self, filename: str, content: bytes) -> str:
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            path = self.backup_dir / filename
            async with aiofiles.open(path, 'wb') as f:
                await f.write(content)
        except OSError as e:
            raise BackupError(f"Failed to write backup {filename}: {e}") from e

        logger.info(f"Backup written to {path}")
        return str(path)

# ===== SNAPSHOT =====

def build_snapshot(
    tasks: Iterable[Task],
    completions: Iterable[TaskCompletion],
    now: datetime
) -> Dict[str, Any]:
    """Полный снимок обеих таблиц"""
    return {
        'timestamp': to_millis(now),
        'date': now.strftime('%Y-%m-%d %H:%M:%S'),
        'tasks': [task.to_dict() for task in tasks],
        'taskCompletions': [completion.to_dict() for completion in completions]
    }

def backup_filename(now: datetime) -> str:
    return f"{BACKUP_FILE_PREFIX}{now.strftime('%Y-%m-%d_%H-%M-%S')}.json"

@dataclass
class BackupResult:
    """Результат попытки бэкапа"""
    success: bool
    skipped: bool = False
    filename: Optional[str] = None
    location: Optional[str] = None
    error: Optional[str] = None

class BackupService:
    """Ежедневный бэкап данных"""

    def __init__(
        self,
        repository: TaskRepository,
        uploader: BackupUploader,
        state_store: KeyValueStore,
        clock: Callable[[], datetime] = now_in
    ):
        self.repository = repository
        self.uploader = uploader
        self.state_store = state_store
        self.clock = clock

    async def was_backup_done_today(self) -> bool:
        last_backup_date = await self.state_store.get(LAST_BACKUP_DATE_KEY)
        if last_backup_date is None:
            return False
        return last_backup_date == format_date(self.clock().date())

    async def create_snapshot(self) -> Dict[str, Any]:
        tasks = await self.repository.get_all_tasks()
        completions = await self.repository.all_completions()
        logger.debug(f"Fetched {len(tasks)} tasks and {len(completions)} completions")
        return build_snapshot(tasks, completions, self.clock())

    async def backup_if_needed(self) -> BackupResult:
        """
        Сделать бэкап, если сегодня его ещё не было.

        Дата бэкапа записывается только после успешной загрузки,
        поэтому неудачная попытка повторяется при следующем вызове,
        в том числе в тот же день.
        """
        try:
            now = self.clock()
            today = format_date(now.date())
            last_backup_date = await self.state_store.get(LAST_BACKUP_DATE_KEY)

            if last_backup_date == today:
                logger.debug(f"Backup already performed today ({today}), skipping")
                return BackupResult(success=True, skipped=True)

            logger.info(f"Starting backup (last backup: {last_backup_date or 'never'})")

            snapshot = await self.create_snapshot()
            content = json.dumps(snapshot, ensure_ascii=False, indent=2).encode('utf-8')
            filename = backup_filename(now)

            location = await self.uploader.upload(filename, content)

            await self.state_store.set(LAST_BACKUP_DATE_KEY, today)
            logger.info(f"✅ Backup completed: {filename} ({len(content)} bytes)")
            return BackupResult(success=True, filename=filename, location=location)

        except Exception as e:
            logger.error(f"❌ Backup failed: {e}", exc_info=True)
            return BackupResult(success=False, error=str(e))

__all__ = [
    'LAST_BACKUP_DATE_KEY',
    'BackupError',
    'KeyValueStore',
    'JsonFileKeyValueStore',
    'BackupUploader',
    'LocalDirectoryUploader',
    'build_snapshot',
    'backup_filename',
    'BackupResult',
    'BackupService'
]
