#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Task Repository
Фасад запросов к хранилищу с привязкой к датам

Репозиторий не хранит копий данных: каждое чтение идёт в базу.
Подписчики на список задач получают полный актуальный список
после каждого добавления, изменения или удаления задачи.

Версия: 1.0.0
Дата: 2026-10-19
"""

import inspect
import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Awaitable, Callable, List, Optional, Union

from sqlalchemy import and_, delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dailystuff.core.calendar import format_date, weekday_of
from dailystuff.core.database import (
    DatabaseManager,
    StorageError,
    StorageIntegrityError,
    tasks_table,
    task_completions_table
)
from dailystuff.core.models import Task, TaskCompletion, TaskState, TaskType

logger = logging.getLogger(__name__)

TaskListObserver = Callable[[List[Task]], Union[None, Awaitable[None]]]

_UPSERT_DIALECTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}

def _row_to_task(row: Any) -> Task:
    try:
        return Task(
            id=row.id,
            name=row.name,
            type=TaskType(row.type),
            target_value=row.target_value,
            valid_days=row.valid_days or "",
            created_at=row.created_at
        )
    except ValueError as e:
        raise StorageIntegrityError(f"Corrupted task row {row.id}: {e}") from e

def _row_to_completion(row: Any) -> TaskCompletion:
    try:
        return TaskCompletion(
            id=row.id,
            task_id=row.task_id,
            date=row.date,
            state=TaskState(row.state),
            actual_value=row.actual_value,
            last_updated=row.last_updated
        )
    except ValueError as e:
        raise StorageIntegrityError(f"Corrupted completion row {row.id}: {e}") from e

def _task_values(task: Task) -> dict:
    return {
        'name': task.name,
        'type': task.type.value,
        'target_value': task.target_value,
        'valid_days': task.valid_days_string,
        'created_at': task.created_at
    }

class TaskRepository:
    """Единственная точка доступа к задачам и их выполнению"""

    def __init__(self, database: DatabaseManager):
        self.database = database
        self._observers: List[TaskListObserver] = []

    @asynccontextmanager
    async def _storage(self, operation: str):
        """Перевод ошибок SQLAlchemy в StorageError"""
        try:
            yield
        except IntegrityError as e:
            logger.error(f"Integrity error during {operation}: {e}")
            raise StorageIntegrityError(f"{operation} failed: {e}") from e
        except SQLAlchemyError as e:
            logger.error(f"Storage error during {operation}: {e}")
            raise StorageError(f"{operation} failed: {e}") from e

    # ===== ЗАДАЧИ =====

    async def get_all_tasks(self) -> List[Task]:
        """Все задачи, новые первыми"""
        query = select(tasks_table).order_by(
            tasks_table.c.created_at.desc(), tasks_table.c.id.desc()
        )
        async with self._storage("get_all_tasks"):
            async with self.database.engine.connect() as conn:
                rows = (await conn.execute(query)).all()
        return [_row_to_task(row) for row in rows]

    async def get_task(self, task_id: int) -> Optional[Task]:
        query = select(tasks_table).where(tasks_table.c.id == task_id)
        async with self._storage("get_task"):
            async with self.database.engine.connect() as conn:
                row = (await conn.execute(query)).first()
        return _row_to_task(row) if row else None

    async def insert_task(self, task: Task) -> Task:
        """Добавить задачу, вернуть её с присвоенным id"""
        async with self._storage("insert_task"):
            async with self.database.engine.begin() as conn:
                result = await conn.execute(tasks_table.insert().values(**_task_values(task)))
                task_id = result.inserted_primary_key[0]

        logger.info(f"Task {task_id} created: {task.name}")
        await self._notify_observers()
        return task.copy(id=task_id)

    async def update_task(self, task: Task) -> bool:
        """Обновить задачу на месте (тот же id)"""
        query = (
            update(tasks_table)
            .where(tasks_table.c.id == task.id)
            .values(**_task_values(task))
        )
        async with self._storage("update_task"):
            async with self.database.engine.begin() as conn:
                result = await conn.execute(query)
                updated = result.rowcount

        if updated == 0:
            logger.warning(f"Task {task.id} not found for update")
            return False

        logger.info(f"Task {task.id} updated")
        await self._notify_observers()
        return True

    async def delete_task(self, task: Task) -> None:
        """Удалить задачу и все её записи о выполнении"""
        async with self._storage("delete_task"):
            async with self.database.engine.begin() as conn:
                await conn.execute(delete(tasks_table).where(tasks_table.c.id == task.id))
                # каскад выполняем явно, не полагаясь на внешний ключ
                await conn.execute(
                    delete(task_completions_table)
                    .where(task_completions_table.c.task_id == task.id)
                )

        logger.info(f"Task {task.id} deleted with its completions")
        await self._notify_observers()

    async def tasks_active_on(self, day: date) -> List[Task]:
        """
        Задачи, действующие в день недели указанной даты.

        Сначала грубый отбор в базе по подстроке, затем точная проверка
        по разобранному списку дней: строка в базе может быть повреждена.
        """
        weekday = weekday_of(day)
        query = (
            select(tasks_table)
            .where(tasks_table.c.valid_days.like(f"%{weekday.value}%"))
            .order_by(tasks_table.c.created_at.desc(), tasks_table.c.id.desc())
        )
        async with self._storage("tasks_active_on"):
            async with self.database.engine.connect() as conn:
                rows = (await conn.execute(query)).all()

        candidates = [_row_to_task(row) for row in rows]
        return [task for task in candidates if weekday in task.valid_days]

    # ===== ВЫПОЛНЕНИЕ =====

    async def completion_for(self, task_id: int, day: date) -> Optional[TaskCompletion]:
        query = select(task_completions_table).where(and_(
            task_completions_table.c.task_id == task_id,
            task_completions_table.c.date == format_date(day)
        ))
        async with self._storage("completion_for"):
            async with self.database.engine.connect() as conn:
                row = (await conn.execute(query)).first()
        return _row_to_completion(row) if row else None

    async def completions_for_date(self, day: date) -> List[TaskCompletion]:
        query = select(task_completions_table).where(
            task_completions_table.c.date == format_date(day)
        )
        return await self._fetch_completions("completions_for_date", query)

    async def completions_in_range(self, start: date, end: date) -> List[TaskCompletion]:
        """Записи за период, границы включительно, по возрастанию даты"""
        query = (
            select(task_completions_table)
            .where(task_completions_table.c.date.between(format_date(start), format_date(end)))
            .order_by(task_completions_table.c.date.asc(), task_completions_table.c.id.asc())
        )
        return await self._fetch_completions("completions_in_range", query)

    async def completions_for_task_in_range(
        self, task_id: int, start: date, end: date
    ) -> List[TaskCompletion]:
        query = (
            select(task_completions_table)
            .where(and_(
                task_completions_table.c.task_id == task_id,
                task_completions_table.c.date.between(format_date(start), format_date(end))
            ))
            .order_by(task_completions_table.c.date.asc())
        )
        return await self._fetch_completions("completions_for_task_in_range", query)

    async def all_completions(self) -> List[TaskCompletion]:
        query = select(task_completions_table).order_by(
            task_completions_table.c.date.asc(), task_completions_table.c.id.asc()
        )
        return await self._fetch_completions("all_completions", query)

    async def _fetch_completions(self, operation: str, query) -> List[TaskCompletion]:
        async with self._storage(operation):
            async with self.database.engine.connect() as conn:
                rows = (await conn.execute(query)).all()
        return [_row_to_completion(row) for row in rows]

    async def upsert_completion(self, completion: TaskCompletion) -> TaskCompletion:
        """Вставить или заменить запись по ключу (task_id, date)"""
        values = {
            'task_id': completion.task_id,
            'date': completion.date,
            'state': completion.state.value,
            'actual_value': completion.actual_value,
            'last_updated': completion.last_updated
        }

        async with self._storage("upsert_completion"):
            async with self.database.engine.begin() as conn:
                insert = _UPSERT_DIALECTS.get(conn.dialect.name)
                if insert is None:
                    raise StorageError(f"Upsert is not supported for {conn.dialect.name}")

                statement = insert(task_completions_table).values(**values)
                statement = statement.on_conflict_do_update(
                    index_elements=['task_id', 'date'],
                    set_={
                        'state': statement.excluded.state,
                        'actual_value': statement.excluded.actual_value,
                        'last_updated': statement.excluded.last_updated
                    }
                )
                await conn.execute(statement)

                row = (await conn.execute(
                    select(task_completions_table).where(and_(
                        task_completions_table.c.task_id == completion.task_id,
                        task_completions_table.c.date == completion.date
                    ))
                )).first()

        logger.debug(
            f"Completion upserted: task={completion.task_id} date={completion.date} "
            f"state={completion.state.value} value={completion.actual_value}"
        )
        return _row_to_completion(row)

    async def reset_day(self, day: date) -> int:
        """Удалить все записи о выполнении за дату (необратимо)"""
        date_string = format_date(day)
        async with self._storage("reset_day"):
            async with self.database.engine.begin() as conn:
                result = await conn.execute(
                    delete(task_completions_table)
                    .where(task_completions_table.c.date == date_string)
                )
                removed = result.rowcount

        logger.info(f"Day {date_string} reset, {removed} completions removed")
        return removed

    # ===== ПОДПИСКИ =====

    def subscribe(self, observer: TaskListObserver) -> None:
        """Подписаться на изменения списка задач"""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: TaskListObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    async def _notify_observers(self) -> None:
        if not self._observers:
            return

        tasks = await self.get_all_tasks()
        for observer in list(self._observers):
            try:
                result = observer(list(tasks))
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Task list observer failed: {e}")

__all__ = [
    'TaskListObserver',
    'TaskRepository'
]
