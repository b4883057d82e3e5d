#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DailyStuff - Command Line Entry Point
Управление задачами, отметки за день, тепловая карта и бэкап

Версия: 1.0.0
Дата: 2026-10-19
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from dailystuff.config import AppConfig, get_config
from dailystuff.core.calendar import ALL_DAYS, format_date, parse_date
from dailystuff.core.database import StorageError
from dailystuff.core.models import TaskType, ValidationError
from dailystuff.core.state_machine import InvalidTransitionError
from dailystuff.services import ServiceManager
from dailystuff.services.scheduler import create_scheduler, run_startup_backup
from dailystuff.ui.heatmap import day_board_message, day_progress_message, render_heatmap
from dailystuff.utils.logger import setup_logging

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='dailystuff', description='Трекер ежедневных задач')
    parser.add_argument('--date', help='Дата в формате YYYY-MM-DD (по умолчанию сегодня)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    add = subparsers.add_parser('add-task', help='Создать задачу')
    add.add_argument('name')
    add.add_argument('--type', choices=[t.value for t in TaskType], default=TaskType.COUNTER.value)
    add.add_argument('--target', type=int, default=1)
    add.add_argument('--days', default=','.join(day.value for day in ALL_DAYS),
                     help='Дни через запятую, например MONDAY,WEDNESDAY')

    subparsers.add_parser('list', help='Все задачи')
    subparsers.add_parser('today', help='Задачи на дату с отметками')

    tap = subparsers.add_parser('tap', help='Отметить задачу')
    tap.add_argument('task_id', type=int)

    set_time = subparsers.add_parser('set-time', help='Указать минуты для задачи на время')
    set_time.add_argument('task_id', type=int)
    set_time.add_argument('minutes', type=int)

    subparsers.add_parser('reset-day', help='Стереть отметки за дату')

    delete = subparsers.add_parser('delete-task', help='Удалить задачу и её историю')
    delete.add_argument('task_id', type=int)

    heatmap = subparsers.add_parser('heatmap', help='Тепловая карта активности')
    heatmap.add_argument('--task', type=int, default=None, help='Только одна задача')
    heatmap.add_argument('--year', type=int, default=None)

    subparsers.add_parser('backup', help='Бэкап, если сегодня его ещё не было')
    subparsers.add_parser('run', help='Фоновый режим с ежедневным бэкапом')

    return parser

async def _show_board(manager: ServiceManager, args) -> None:
    board = manager.create_day_board()
    if args.date:
        board.current_date = parse_date(args.date)
    entries = await board.load()
    print(day_board_message(format_date(board.current_date), entries))
    print(day_progress_message(*board.progress()))

async def _run_forever(manager: ServiceManager) -> None:
    config = manager.config
    if not config.backup.enabled:
        logger.warning("Backup is disabled, nothing to schedule")
        return

    await run_startup_backup(manager.backup_service)
    scheduler = create_scheduler(
        manager.backup_service, hour=config.backup.daily_hour, timezone=config.timezone
    )
    scheduler.start()
    logger.info(f"📅 Daily backup scheduled at {config.backup.daily_hour:02d}:00")

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)

async def run_command(args, config: AppConfig) -> int:
    manager = ServiceManager(config)
    await manager.initialize()

    try:
        if args.command == 'add-task':
            task = await manager.task_service.create_task(args.name, args.type, args.target, args.days)
            print(f"✅ Задача создана: {task.name} (id {task.id})")

        elif args.command == 'list':
            tasks = await manager.task_service.list_tasks()
            if not tasks:
                print("У вас пока нет задач. Добавьте первую!")
            for task in tasks:
                print(f"{task.id}. {task.name} [{task.type.value}, цель {task.target_value}] "
                      f"{task.valid_days_string}")

        elif args.command == 'today':
            await _show_board(manager, args)

        elif args.command in ('tap', 'set-time'):
            board = manager.create_day_board()
            if args.date:
                board.current_date = parse_date(args.date)
            await board.load()
            if args.command == 'tap':
                completion = await board.tap(args.task_id)
            else:
                completion = await board.set_time(args.task_id, args.minutes)
            if completion is None:
                print(f"Задача {args.task_id} недоступна на {format_date(board.current_date)}")
                return 1
            print(day_board_message(format_date(board.current_date), board.entries))

        elif args.command == 'reset-day':
            board = manager.create_day_board()
            if args.date:
                board.current_date = parse_date(args.date)
            await board.reset_current_day()
            print(f"🔄 Отметки за {format_date(board.current_date)} удалены")

        elif args.command == 'delete-task':
            if not await manager.task_service.delete_task(args.task_id):
                print(f"Задача {args.task_id} не найдена")
                return 1
            print(f"🗑️ Задача {args.task_id} удалена")

        elif args.command == 'heatmap':
            chart = manager.create_chart_service()
            await chart.select_task(args.task)
            years = chart.years_in_data()
            if args.year is not None:
                print(render_heatmap(chart.week_grid(), args.year))
            elif years:
                for year in years:
                    print(render_heatmap(chart.week_grid(), year))
            else:
                print("Нет данных для графика.")

        elif args.command == 'backup':
            result = await manager.backup_service.backup_if_needed()
            if result.skipped:
                print("⏭️ Бэкап сегодня уже выполнен")
            elif result.success:
                print(f"✅ Бэкап сохранён: {result.location}")
            else:
                print(f"❌ Ошибка бэкапа: {result.error}")
                return 1

        elif args.command == 'run':
            await _run_forever(manager)

        return 0

    finally:
        await manager.close()

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ {e}")
        return 2

    config.ensure_directories()
    setup_logging(config)

    try:
        return asyncio.run(run_command(args, config))
    except (ValidationError, InvalidTransitionError, ValueError) as e:
        print(f"❌ {e}")
        return 2
    except StorageError as e:
        logger.error(f"Storage failure: {e}")
        print(f"❌ Ошибка хранилища: {e}")
        return 3
    except KeyboardInterrupt:
        logger.info("Stopped by user")
        return 0

if __name__ == "__main__":
    sys.exit(main())
