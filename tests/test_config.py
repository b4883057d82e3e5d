from pathlib import Path

import pytest

from dailystuff.config import AppConfig, Environment, LogLevel
from dailystuff.services import ServiceManager
from dailystuff.services.backup import LocalDirectoryUploader
from dailystuff.services.drive_uploader import DriveUploader

def test_defaults():
    config = AppConfig(environ={})

    assert config.environment == Environment.DEVELOPMENT
    assert config.database.url == f"sqlite+aiosqlite:///{Path('data') / 'dailystuff.db'}"
    assert config.backup.enabled
    assert config.backup.daily_hour == 3
    assert not config.backup.uses_drive
    assert config.logging.level == LogLevel.INFO
    assert config.timezone.zone == "UTC"

def test_environment_overrides(tmp_path):
    config = AppConfig(environ={
        'ENVIRONMENT': 'production',
        'DATA_DIR': str(tmp_path),
        'BACKUP_HOUR': '22',
        'DRIVE_FOLDER_ID': 'folder-123',
        'TIMEZONE': 'Europe/Moscow',
        'LOG_LEVEL': 'DEBUG',
        'LOG_TO_FILE': 'false',
    })

    assert config.environment == Environment.PRODUCTION
    assert config.to_dict()["environment"] == "production"
    assert config.database.url.endswith(str(tmp_path / 'dailystuff.db'))
    assert config.backup.daily_hour == 22
    assert config.backup.uses_drive
    assert config.backup.state_file == tmp_path / "backup_state.json"
    assert config.to_dict()['backup']['target'] == 'drive'

    logging_config = config.get_logging_config()
    assert 'file' not in logging_config['handlers']
    assert logging_config['loggers']['']['level'] == 'DEBUG'

@pytest.mark.parametrize("environ", [
    {'BACKUP_HOUR': '24'},
    {'BACKUP_TIMEOUT': '0'},
    {'TIMEZONE': 'Mars/Olympus'},
    {'DATABASE_URL': ''},
])
def test_invalid_values_are_reported(environ):
    with pytest.raises(ValueError, match="Ошибки конфигурации"):
        AppConfig(environ=environ)

def test_file_logging_handler(tmp_path):
    config = AppConfig(environ={'LOG_DIR': str(tmp_path)})
    handler = config.get_logging_config()['handlers']['file']

    assert handler['class'] == 'logging.handlers.RotatingFileHandler'
    assert handler['filename'] == str(tmp_path / "dailystuff_development.log")

def test_ensure_directories(tmp_path):
    config = AppConfig(environ={
        'DATA_DIR': str(tmp_path / 'data'),
        'BACKUP_DIR': str(tmp_path / 'backups'),
        'LOG_TO_FILE': 'false',
    })
    config.ensure_directories()

    assert (tmp_path / 'data').is_dir()
    assert (tmp_path / 'backups').is_dir()

def test_uploader_follows_drive_setting(tmp_path):
    local = ServiceManager(AppConfig(environ={'BACKUP_DIR': str(tmp_path)}))
    assert isinstance(local._create_uploader(), LocalDirectoryUploader)

    drive = ServiceManager(AppConfig(environ={'DRIVE_FOLDER_ID': 'folder-123'}))
    uploader = drive._create_uploader()
    assert isinstance(uploader, DriveUploader)
    assert uploader.folder_id == 'folder-123'

async def test_service_manager_wires_services(tmp_path):
    config = AppConfig(environ={
        'DATA_DIR': str(tmp_path),
        'BACKUP_DIR': str(tmp_path / 'backups'),
        'LOG_TO_FILE': 'false',
    })
    config.ensure_directories()
    manager = ServiceManager(config)
    await manager.initialize()
    try:
        task = await manager.task_service.create_task("Read", "TIMED", 30, "MONDAY,TUESDAY,WEDNESDAY,THURSDAY,FRIDAY,SATURDAY,SUNDAY")
        board = manager.create_day_board()
        await board.load()
        assert [entry.task.id for entry in board.entries] == [task.id]

        result = await manager.backup_service.backup_if_needed()
        assert result.success
        assert list((tmp_path / 'backups').glob('daily_stuff_backup_*.json'))
    finally:
        await manager.close()

async def test_service_manager_drops_view_subscriptions(tmp_path):
    config = AppConfig(environ={
        'DATA_DIR': str(tmp_path),
        'BACKUP_DIR': str(tmp_path / 'backups'),
        'LOG_TO_FILE': 'false',
    })
    manager = ServiceManager(config)
    await manager.initialize()
    repository = manager.repository
    try:
        board = manager.create_day_board()
        chart = manager.create_chart_service()
        manager.create_day_board()
        assert len(repository._observers) == 3

        manager.release(board)
        assert len(repository._observers) == 2
        assert chart.on_tasks_changed in repository._observers
    finally:
        await manager.close()

    assert repository._observers == []
