#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Core Data Models
Задачи и записи о выполнении задач по дням

Версия: 1.0.0
Дата: 2026-10-19
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Iterable
import logging

from dailystuff.core.calendar import (
    Weekday,
    parse_days_string,
    days_to_string,
    weekday_of,
    parse_date
)
from dailystuff.utils.datetime_utils import now_millis

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class TaskType(Enum):
    """Типы задач"""
    COUNTER = "COUNTER"  # цель - количество повторений
    TIMED = "TIMED"      # цель - минуты

class TaskState(Enum):
    """Состояние выполнения задачи за день"""
    NOT_DONE = "NOT_DONE"
    PARTIALLY_DONE = "PARTIALLY_DONE"
    DONE = "DONE"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass

def validate_name(name: str) -> str:
    """Валидация названия задачи"""
    if not isinstance(name, str):
        raise ValidationError("name должен быть строкой")

    name = name.strip()
    if not name:
        raise ValidationError("name не может быть пустым")

    return name

def validate_target(target_value: int) -> int:
    """Валидация целевого значения"""
    if isinstance(target_value, bool) or not isinstance(target_value, int):
        raise ValidationError("target_value должен быть целым числом")

    if target_value <= 0:
        raise ValidationError("target_value должен быть положительным числом")

    return target_value

def validate_days(days: Iterable[Weekday]) -> List[Weekday]:
    """Валидация набора дней недели"""
    days = list(days)
    if not days:
        raise ValidationError("нужно выбрать хотя бы один день недели")

    for day in days:
        if not isinstance(day, Weekday):
            raise ValidationError(f"неизвестный день недели: {day!r}")

    return days

# ===== CORE MODELS =====

@dataclass
class Task:
    """Повторяющаяся задача"""
    name: str
    type: TaskType
    target_value: int  # количество для COUNTER, минуты для TIMED
    valid_days: List[Weekday] = field(default_factory=list)
    id: Optional[int] = None
    created_at: int = field(default_factory=now_millis)

    def __post_init__(self):
        if not isinstance(self.type, TaskType):
            self.type = TaskType(self.type)
        if not isinstance(self.valid_days, str):
            self.valid_days = ",".join(
                day.value if isinstance(day, Weekday) else str(day)
                for day in self.valid_days
            )
        # порядок с понедельника, без повторов
        self.valid_days = parse_days_string(self.valid_days)

    @property
    def valid_days_string(self) -> str:
        return days_to_string(self.valid_days)

    def is_active_on(self, day: date) -> bool:
        """Задача действует в этот день недели"""
        return weekday_of(day) in self.valid_days

    def validate(self) -> "Task":
        """Проверка инвариантов перед сохранением"""
        self.name = validate_name(self.name)
        self.target_value = validate_target(self.target_value)
        self.valid_days = validate_days(self.valid_days)
        return self

    def copy(self, **changes) -> "Task":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'targetValue': self.target_value,
            'validDays': self.valid_days_string,
            'createdAt': self.created_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=data.get('id'),
            name=data['name'],
            type=TaskType(data['type']),
            target_value=int(data['targetValue']),
            valid_days=parse_days_string(data.get('validDays') or ""),
            created_at=int(data.get('createdAt') or now_millis())
        )

@dataclass
class TaskCompletion:
    """Запись о выполнении задачи за конкретный день"""
    task_id: int
    date: str  # YYYY-MM-DD
    state: TaskState = TaskState.NOT_DONE
    actual_value: int = 0  # количество или минуты
    id: Optional[int] = None
    last_updated: int = field(default_factory=now_millis)

    def __post_init__(self):
        if not isinstance(self.state, TaskState):
            self.state = TaskState(self.state)

    @property
    def completion_date(self) -> date:
        return parse_date(self.date)

    @property
    def key(self):
        return (self.task_id, self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'taskId': self.task_id,
            'date': self.date,
            'state': self.state.value,
            'actualValue': self.actual_value,
            'lastUpdated': self.last_updated
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskCompletion":
        return cls(
            id=data.get('id'),
            task_id=int(data['taskId']),
            date=data['date'],
            state=TaskState(data['state']),
            actual_value=int(data.get('actualValue', 0)),
            last_updated=int(data.get('lastUpdated') or now_millis())
        )

__all__ = [
    'TaskType',
    'TaskState',
    'ValidationError',
    'validate_name',
    'validate_target',
    'validate_days',
    'Task',
    'TaskCompletion'
]
