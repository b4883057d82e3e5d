#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - трекер ежедневных привычек

Задачи-счётчики и задачи на время, отметки выполнения по дням,
тепловая карта активности и ежедневный бэкап в Google Drive.

Версия: 1.0.0
"""

__version__ = "1.0.0"

__all__ = ['__version__']
