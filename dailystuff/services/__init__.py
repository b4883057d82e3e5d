# services/__init__.py

"""
Модуль сервисов DailyStuff

Сборка хранилища, репозитория и сервисов поверх него
в правильном порядке.
"""

import logging
from typing import List, Optional

from dailystuff.config import AppConfig
from dailystuff.core.database import DatabaseManager
from dailystuff.core.repository import TaskListObserver, TaskRepository
from dailystuff.utils.datetime_utils import now_in, today_in

from .aggregation import ChartService
from .backup import BackupService, BackupUploader, JsonFileKeyValueStore, LocalDirectoryUploader
from .day_board import DayBoard
from .drive_uploader import DriveUploader
from .task_service import TaskService

logger = logging.getLogger(__name__)

class ServiceManager:
    """
    Менеджер всех сервисов приложения

    Обеспечивает:
    - Инициализацию базы данных и репозитория
    - Создание сервисов с общими зависимостями
    - Корректное закрытие
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self.database: Optional[DatabaseManager] = None
        self.repository: Optional[TaskRepository] = None
        self.task_service: Optional[TaskService] = None
        self.backup_service: Optional[BackupService] = None
        self._subscriptions: List[TaskListObserver] = []
        self.initialized = False

    def today(self):
        return today_in(self.config.timezone)

    def now(self):
        return now_in(self.config.timezone)

    def _create_uploader(self) -> BackupUploader:
        backup = self.config.backup
        if backup.uses_drive:
            return DriveUploader(
                folder_id=backup.drive_folder_id,
                credentials_file=backup.credentials_file,
                timeout=backup.request_timeout
            )
        return LocalDirectoryUploader(backup.backup_dir)

    async def initialize(self) -> None:
        """Инициализация всех сервисов"""
        logger.info("🔧 Initializing services...")

        self.database = DatabaseManager(self.config.database.url, echo=self.config.database.echo)
        await self.database.initialize()

        self.repository = TaskRepository(self.database)
        self.task_service = TaskService(self.repository)
        self.backup_service = BackupService(
            repository=self.repository,
            uploader=self._create_uploader(),
            state_store=JsonFileKeyValueStore(self.config.backup.state_file),
            clock=self.now
        )

        self.initialized = True
        logger.info("✅ Services initialized")

    def _subscribe(self, observer: TaskListObserver) -> None:
        self.repository.subscribe(observer)
        self._subscriptions.append(observer)

    def create_day_board(self) -> DayBoard:
        board = DayBoard(self.repository, today_provider=self.today)
        self._subscribe(board.on_tasks_changed)
        return board

    def create_chart_service(self) -> ChartService:
        chart = ChartService(self.repository, today_provider=self.today)
        self._subscribe(chart.on_tasks_changed)
        return chart

    def release(self, view) -> None:
        """Отписать доску дня или график от изменений списка задач"""
        observer = view.on_tasks_changed
        self.repository.unsubscribe(observer)
        if observer in self._subscriptions:
            self._subscriptions.remove(observer)

    async def close(self) -> None:
        """Закрытие всех сервисов"""
        if self.repository is not None:
            for observer in self._subscriptions:
                self.repository.unsubscribe(observer)
        self._subscriptions.clear()

        if self.database is not None:
            await self.database.shutdown()
        self.initialized = False
        logger.info("🔒 Services closed")

__all__ = [
    'ServiceManager',
    'TaskService',
    'DayBoard',
    'ChartService',
    'BackupService'
]
