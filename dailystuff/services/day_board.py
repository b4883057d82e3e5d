#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Day Board
Список задач текущего дня с их выполнением

Доска держит в памяти пары (задача, запись о выполнении) для
выбранной даты. Каждое действие пользователя проходит через машину
состояний, сохраняется в репозитории и сразу заменяет элемент списка
на месте, без повторного чтения из базы.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from dailystuff.core.models import Task, TaskCompletion, TaskState, TaskType
from dailystuff.core.repository import TaskRepository
from dailystuff.core.state_machine import Event, SetValue, Tap, transition
from dailystuff.utils.datetime_utils import today_in

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class TaskWithCompletion:
    task: Task
    completion: Optional[TaskCompletion] = None

    @property
    def state(self) -> TaskState:
        return self.completion.state if self.completion else TaskState.NOT_DONE

    @property
    def actual_value(self) -> int:
        return self.completion.actual_value if self.completion else 0

class DayBoard:
    """Задачи выбранной даты (по умолчанию - сегодня)"""

    def __init__(
        self,
        repository: TaskRepository,
        today_provider: Callable[[], date] = today_in,
        current_date: Optional[date] = None
    ):
        self.repository = repository
        self.current_date = current_date or today_provider()
        self.entries: List[TaskWithCompletion] = []

    async def load(self) -> List[TaskWithCompletion]:
        """Загрузить задачи и записи для текущей даты"""
        tasks = await self.repository.tasks_active_on(self.current_date)
        completions = {
            completion.task_id: completion
            for completion in await self.repository.completions_for_date(self.current_date)
        }
        self.entries = [TaskWithCompletion(task, completions.get(task.id)) for task in tasks]
        return self.entries

    async def on_tasks_changed(self, tasks: List[Task]) -> None:
        """Подписчик репозитория: список задач изменился"""
        await self.load()

    def _find(self, task_id: int) -> int:
        for index, entry in enumerate(self.entries):
            if entry.task.id == task_id:
                return index
        return -1

    async def _apply(self, task_id: int, event: Event) -> Optional[TaskCompletion]:
        index = self._find(task_id)
        if index == -1:
            logger.debug(f"Task {task_id} is not on the board for {self.current_date}")
            return None

        entry = self.entries[index]
        completion = transition(entry.task, entry.completion, event, self.current_date)
        stored = await self.repository.upsert_completion(completion)

        # замена на месте, порядок списка сохраняется
        self.entries[index] = TaskWithCompletion(entry.task, stored)
        logger.info(
            f"Task {task_id} on {stored.date}: {stored.state.value} ({stored.actual_value}/"
            f"{entry.task.target_value})"
        )
        return stored

    async def tap(self, task_id: int) -> Optional[TaskCompletion]:
        """Нажатие: +1 для счётчика, «выполнено полностью» для задачи на время"""
        return await self._apply(task_id, Tap())

    async def set_time(self, task_id: int, minutes: int) -> Optional[TaskCompletion]:
        """Ввод минут для задачи на время; для счётчиков ничего не делает"""
        index = self._find(task_id)
        if index == -1 or self.entries[index].task.type != TaskType.TIMED:
            return None
        return await self._apply(task_id, SetValue(minutes))

    async def go_to(self, day: date) -> List[TaskWithCompletion]:
        self.current_date = day
        return await self.load()

    async def previous_day(self) -> List[TaskWithCompletion]:
        return await self.go_to(self.current_date - timedelta(days=1))

    async def next_day(self) -> List[TaskWithCompletion]:
        return await self.go_to(self.current_date + timedelta(days=1))

    async def reset_current_day(self) -> List[TaskWithCompletion]:
        """Стереть все отметки за текущую дату"""
        await self.repository.reset_day(self.current_date)
        return await self.load()

    def progress(self) -> Tuple[int, int]:
        """(выполнено, всего) за текущую дату"""
        done = sum(1 for entry in self.entries if entry.state == TaskState.DONE)
        return done, len(self.entries)

__all__ = ['TaskWithCompletion', 'DayBoard']
