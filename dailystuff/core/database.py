#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Database Manager
Схема хранилища и управление асинхронным движком SQLAlchemy

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import (
    MetaData,
    Table,
    Column,
    Integer,
    BigInteger,
    String,
    Text,
    ForeignKey,
    Index,
    event,
    text
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass

class StorageConnectionError(StorageError):
    """Ошибка подключения к хранилищу"""
    pass

class StorageIntegrityError(StorageError):
    """Нарушение целостности данных"""
    pass

# ===== SCHEMA =====

metadata = MetaData()

tasks_table = Table(
    'tasks', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('name', Text, nullable=False),
    Column('type', String(16), nullable=False),
    Column('target_value', Integer, nullable=False),
    Column('valid_days', Text, nullable=False, default=''),  # "MONDAY,WEDNESDAY"
    Column('created_at', BigInteger, nullable=False),
    sqlite_autoincrement=True
)

task_completions_table = Table(
    'task_completions', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('task_id', Integer, ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
    Column('date', String(10), nullable=False),  # YYYY-MM-DD
    Column('state', String(16), nullable=False),
    Column('actual_value', Integer, nullable=False, default=0),
    Column('last_updated', BigInteger, nullable=False),
    Index('ix_task_completions_task_id_date', 'task_id', 'date', unique=True),
    Index('ix_task_completions_date', 'date')
)

# ===== MANAGER =====

class DatabaseManager:
    """Владелец асинхронного движка и схемы"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self.is_initialized = False

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise StorageConnectionError("Database not initialized")
        return self._engine

    def _create_engine(self) -> AsyncEngine:
        kwargs: Dict[str, Any] = {'echo': self.echo}

        # In-memory SQLite живёт, пока жив единственный коннект
        if self.url.startswith('sqlite') and ':memory:' in self.url:
            kwargs['poolclass'] = StaticPool
            kwargs['connect_args'] = {'check_same_thread': False}

        engine = create_async_engine(self.url, **kwargs)

        if engine.dialect.name == 'sqlite':
            @event.listens_for(engine.sync_engine, "connect")
            def _enable_foreign_keys(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        return engine

    async def initialize(self) -> None:
        """Подключение и создание таблиц"""
        if self.is_initialized:
            return

        try:
            logger.info("Initializing database...")
            self._engine = self._create_engine()

            async with self._engine.begin() as conn:
                await conn.run_sync(metadata.create_all)

            self.is_initialized = True
            logger.info("Database initialized")

        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize database: {e}")
            if self._engine is not None:
                await self._engine.dispose()
                self._engine = None
            raise StorageConnectionError(f"Database initialization failed: {e}") from e

    async def health_check(self) -> Dict[str, Any]:
        """Проверка доступности базы данных"""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "healthy", "initialized": self.is_initialized}
        except (SQLAlchemyError, StorageError) as e:
            return {"status": "error", "error": str(e), "initialized": self.is_initialized}

    async def shutdown(self) -> None:
        """Корректное завершение работы"""
        if self._engine is None:
            return

        logger.info("Shutting down database...")
        await self._engine.dispose()
        self._engine = None
        self.is_initialized = False
        logger.info("Database shutdown completed")

__all__ = [
    'StorageError',
    'StorageConnectionError',
    'StorageIntegrityError',
    'metadata',
    'tasks_table',
    'task_completions_table',
    'DatabaseManager'
]
