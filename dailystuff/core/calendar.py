#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Calendar Utilities
Дни недели, разбор строки дней задачи и канонический формат дат

Версия: 1.0.0
Дата: 2026-10-19
"""

from datetime import date, datetime
from enum import Enum
from typing import Iterable, List

# Единственный формат даты во всём приложении, он же ключ в хранилище
DATE_FORMAT = "%Y-%m-%d"

class Weekday(Enum):
    """Дни недели в каноническом написании"""
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

# Порядок совпадает с date.weekday(): 0 - понедельник
_WEEKDAYS_BY_INDEX = list(Weekday)

ALL_DAYS = tuple(_WEEKDAYS_BY_INDEX)

def from_weekday(native_weekday: int) -> Weekday:
    """Преобразование date.weekday() в Weekday"""
    if not 0 <= native_weekday <= 6:
        raise ValueError(f"weekday must be in 0..6, got {native_weekday}")
    return _WEEKDAYS_BY_INDEX[native_weekday]

def weekday_of(day: date) -> Weekday:
    return from_weekday(day.weekday())

def _ordered(days: Iterable[Weekday]) -> List[Weekday]:
    present = set(days)
    return [day for day in _WEEKDAYS_BY_INDEX if day in present]

def parse_days_string(days_string: str) -> List[Weekday]:
    """
    Разбор строки дней вида "MONDAY, WEDNESDAY".

    Токены обрезаются по краям, сравнение с каноническими именами
    регистрозависимое, нераспознанные токены молча отбрасываются.
    Результат упорядочен с понедельника и без повторов.
    """
    if not days_string or not days_string.strip():
        return []

    recognized = []
    for token in days_string.split(","):
        token = token.strip()
        if token in Weekday.__members__ and Weekday[token].value == token:
            recognized.append(Weekday[token])

    return _ordered(recognized)

def days_to_string(days: Iterable[Weekday]) -> str:
    return ",".join(day.value for day in _ordered(days))

def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)

def parse_date(date_string: str) -> date:
    return datetime.strptime(date_string, DATE_FORMAT).date()

__all__ = [
    'DATE_FORMAT',
    'Weekday',
    'ALL_DAYS',
    'from_weekday',
    'weekday_of',
    'parse_days_string',
    'days_to_string',
    'format_date',
    'parse_date'
]
