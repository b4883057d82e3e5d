#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
Дата: 2026-10-19
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any, Mapping
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"

class LogLevel(Enum):
    """Уровни логирования"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class DatabaseConfig:
    """Конфигурация базы данных"""
    url: str
    echo: bool = False

@dataclass
class BackupConfig:
    """Конфигурация ежедневного бэкапа"""
    enabled: bool
    backup_dir: Path
    state_file: Path
    daily_hour: int = 3
    drive_folder_id: Optional[str] = None
    credentials_file: Optional[str] = None
    request_timeout: int = 30

    @property
    def uses_drive(self) -> bool:
        return bool(self.drive_folder_id)

@dataclass
class LoggingConfig:
    """Конфигурация логирования"""
    level: LogLevel
    to_file: bool
    log_dir: Path
    format: str

class AppConfig:
    """Главный класс конфигурации"""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self.environment = Environment(self._getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _getenv(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._environ.get(key, default)

    def _getbool(self, key: str, default: str) -> bool:
        return self._getenv(key, default).lower() == 'true'

    def _load_config(self):
        """Загрузка конфигурации из переменных окружения"""

        # Директории
        self.data_dir = Path(self._getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(self._getenv('BACKUP_DIR', 'backups'))
        self.log_dir = Path(self._getenv('LOG_DIR', 'logs'))

        # База данных
        default_url = f"sqlite+aiosqlite:///{self.data_dir / 'dailystuff.db'}"
        self.database = DatabaseConfig(
            url=self._getenv('DATABASE_URL', default_url),
            echo=self._getbool('DATABASE_ECHO', 'false')
        )

        # Бэкап
        self.backup = BackupConfig(
            enabled=self._getbool('BACKUP_ENABLED', 'true'),
            backup_dir=self.backup_dir,
            state_file=self.data_dir / "backup_state.json",
            daily_hour=int(self._getenv('BACKUP_HOUR', '3')),
            drive_folder_id=self._getenv('DRIVE_FOLDER_ID') or None,
            credentials_file=self._getenv('GOOGLE_CREDENTIALS_FILE', 'service_account.json'),
            request_timeout=int(self._getenv('BACKUP_TIMEOUT', '30'))
        )

        self.timezone_name = self._getenv('TIMEZONE', 'UTC')

        # Логирование
        self.logging = LoggingConfig(
            level=LogLevel(self._getenv('LOG_LEVEL', 'INFO')),
            to_file=self._getbool('LOG_TO_FILE', 'true'),
            log_dir=self.log_dir,
            format=self._getenv(
                'LOG_FORMAT',
                '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            )
        )

    def _validate_config(self):
        """Валидация конфигурации"""
        errors = []

        if not 0 <= self.backup.daily_hour <= 23:
            errors.append(f"BACKUP_HOUR {self.backup.daily_hour} вне диапазона (0-23)")

        if self.backup.request_timeout <= 0:
            errors.append("BACKUP_TIMEOUT должен быть положительным числом")

        if self.timezone_name not in pytz.all_timezones_set:
            errors.append(f"Неизвестная временная зона: {self.timezone_name}")

        if not self.database.url:
            errors.append("DATABASE_URL не может быть пустым")

        if errors:
            raise ValueError("Ошибки конфигурации:\n" + "\n".join(f"• {error}" for error in errors))

    @property
    def timezone(self):
        return pytz.timezone(self.timezone_name)

    def ensure_directories(self):
        """Создание необходимых директорий"""
        directories = [self.data_dir, self.backup_dir]
        if self.logging.to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Получение конфигурации логирования"""
        level = self.logging.level.value
        handlers = ['console']
        if self.logging.to_file:
            handlers.append('file')

        config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.logging.format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': level,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': level,
                    'handlers': handlers,
                    'propagate': False
                },
                'aiosqlite': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'sqlalchemy.engine': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.logging.to_file:
            config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': level,
                'formatter': 'default',
                'filename': str(self.log_dir / f"dailystuff_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация конфигурации в словарь"""
        return {
            'environment': self.environment.value,
            'database_url': self.database.url,
            'backup': {
                'enabled': self.backup.enabled,
                'daily_hour': self.backup.daily_hour,
                'target': 'drive' if self.backup.uses_drive else str(self.backup.backup_dir)
            },
            'timezone': self.timezone_name,
            'log_level': self.logging.level.value
        }

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Получить глобальный экземпляр конфигурации"""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

__all__ = [
    'AppConfig',
    'get_config',
    'Environment',
    'LogLevel',
    'DatabaseConfig',
    'BackupConfig',
    'LoggingConfig'
]
