#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Aggregation Engine
Процент выполнения по дням и сетка недель для тепловой карты

Версия: 1.0.0
Дата: 2026-10-19
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from dailystuff.core.calendar import format_date
from dailystuff.core.models import Task, TaskCompletion, TaskState
from dailystuff.core.repository import TaskRepository
from dailystuff.utils.datetime_utils import today_in

logger = logging.getLogger(__name__)

# Ограничение сетки: ~10 лет
MAX_WEEKS = 520

DEFAULT_YEARS_BACK = 5

_STATE_SCORES = {
    TaskState.DONE: 1.0,
    TaskState.PARTIALLY_DONE: 0.5,
    TaskState.NOT_DONE: 0.0,
}

@dataclass(frozen=True)
class DayCompletion:
    """Процент выполнения за день (0.0 - 1.0)"""
    date: date
    percentage: float
    in_range: bool = True

Week = List[DayCompletion]

def score_of(state: Optional[TaskState]) -> float:
    """Вклад одной задачи в процент дня; нет записи - 0"""
    if state is None:
        return 0.0
    return _STATE_SCORES[state]

def intensity_level(percentage: float) -> int:
    """Категория ячейки тепловой карты: 0 - пусто, 4 - всё выполнено"""
    if percentage <= 0.0:
        return 0
    if percentage < 0.2:
        return 1
    if percentage < 0.5:
        return 2
    if percentage < 1.0:
        return 3
    return 4

def _index_completions(completions: Iterable[TaskCompletion]) -> Dict[Tuple[int, str], TaskCompletion]:
    return {completion.key: completion for completion in completions}

def _filter_tasks(tasks: Iterable[Task], task_id: Optional[int]) -> List[Task]:
    if task_id is None:
        return list(tasks)
    return [task for task in tasks if task.id == task_id]

def daily_percentage(
    day: date,
    tasks: Iterable[Task],
    completions_by_key: Dict[Tuple[int, str], TaskCompletion],
    task_id: Optional[int] = None
) -> float:
    """Средний балл задач, действующих в этот день; без задач - 0.0"""
    valid_tasks = [task for task in _filter_tasks(tasks, task_id) if task.is_active_on(day)]
    if not valid_tasks:
        return 0.0

    date_string = format_date(day)
    total_score = 0.0
    for task in valid_tasks:
        completion = completions_by_key.get((task.id, date_string))
        total_score += score_of(completion.state if completion else None)

    return total_score / len(valid_tasks)

def build_daily_series(
    tasks: Iterable[Task],
    completions: Iterable[TaskCompletion],
    start: date,
    end: date,
    task_id: Optional[int] = None
) -> List[DayCompletion]:
    """Одна точка на каждый день периода включительно, без пропусков"""
    tasks = _filter_tasks(tasks, task_id)
    completions_by_key = _index_completions(completions)

    series = []
    current = start
    while current <= end:
        series.append(DayCompletion(current, daily_percentage(current, tasks, completions_by_key)))
        current += timedelta(days=1)

    return series

def default_range(today: date, years_back: int = DEFAULT_YEARS_BACK) -> Tuple[date, date]:
    """С 1 января (год - years_back) по сегодня"""
    return date(today.year - years_back, 1, 1), today

def build_week_grid(series: List[DayCompletion]) -> List[Week]:
    """
    Разбиение ряда на недели с понедельника по воскресенье.

    Дни вне диапазона ряда становятся заглушками с in_range=False,
    чтобы их можно было отличить от настоящего нуля.
    """
    if not series:
        return []

    by_date = {day.date: day for day in series}
    start_date = min(by_date)
    end_date = max(by_date)

    first_monday = start_date
    while first_monday.weekday() != 0:
        first_monday -= timedelta(days=1)

    last_sunday = end_date
    while last_sunday.weekday() != 6:
        last_sunday += timedelta(days=1)

    weeks: List[Week] = []
    current = first_monday
    while current <= last_sunday and len(weeks) < MAX_WEEKS:
        week = []
        for offset in range(7):
            day = current + timedelta(days=offset)
            if start_date <= day <= end_date:
                week.append(by_date.get(day, DayCompletion(day, 0.0)))
            else:
                week.append(DayCompletion(day, 0.0, in_range=False))
        weeks.append(week)
        current += timedelta(days=7)

    if current <= last_sunday:
        logger.warning(f"Week grid truncated at {MAX_WEEKS} weeks")

    return weeks

def years_present(series: Iterable[DayCompletion]) -> List[int]:
    """Годы, в которых есть хотя бы частичное выполнение"""
    return sorted({day.date.year for day in series if day.percentage > 0})

def weeks_for_year(grid: List[Week], year: int) -> List[Week]:
    """Недели, содержащие хотя бы один день года из диапазона"""
    return [
        week for week in grid
        if any(day.in_range and day.date.year == year for day in week)
    ]

class ChartService:
    """Данные для графика активности с фильтром по задаче"""

    def __init__(self, repository: TaskRepository, today_provider: Callable[[], date] = today_in):
        self.repository = repository
        self.today_provider = today_provider
        self.selected_task_id: Optional[int] = None
        self.series: List[DayCompletion] = []

    async def load(self, task_id: Optional[int] = None) -> List[DayCompletion]:
        """Загрузить ряд за период по умолчанию"""
        if task_id is not None:
            self.selected_task_id = task_id

        start, end = default_range(self.today_provider())
        tasks = await self.repository.get_all_tasks()
        completions = await self.repository.completions_in_range(start, end)

        self.series = build_daily_series(tasks, completions, start, end, self.selected_task_id)
        logger.debug(
            f"Chart series loaded: {len(self.series)} days, {len(tasks)} tasks, "
            f"{len(completions)} completions, filter={self.selected_task_id}"
        )
        return self.series

    async def select_task(self, task_id: Optional[int]) -> List[DayCompletion]:
        """Выбрать задачу (None - все задачи) и перезагрузить ряд"""
        self.selected_task_id = task_id
        return await self.load()

    async def on_tasks_changed(self, tasks: List[Task]) -> None:
        """Подписчик репозитория: пересчёт после изменения задач"""
        await self.load()

    def week_grid(self) -> List[Week]:
        return build_week_grid(self.series)

    def years_in_data(self) -> List[int]:
        return years_present(self.series)

__all__ = [
    'MAX_WEEKS',
    'DayCompletion',
    'Week',
    'score_of',
    'intensity_level',
    'daily_percentage',
    'build_daily_series',
    'default_range',
    'build_week_grid',
    'years_present',
    'weeks_for_year',
    'ChartService'
]
