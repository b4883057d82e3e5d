# services/drive_uploader.py

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiohttp
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from dailystuff.services.backup import BackupError, BackupUploader

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ['https://www.googleapis.com/auth/drive.file']
DRIVE_UPLOAD_URL = 'https://www.googleapis.com/upload/drive/v3/files'

class DriveUploader(BackupUploader):
    """Загрузка бэкапа в папку Google Drive через сервисный аккаунт"""

    def __init__(
        self,
        folder_id: str,
        credentials_file: str,
        timeout: int = 30,
        upload_url: str = DRIVE_UPLOAD_URL
    ):
        self.folder_id = folder_id
        self.credentials_file = Path(credentials_file)
        self.timeout = timeout
        self.upload_url = upload_url
        self._credentials: Optional[service_account.Credentials] = None

    def _load_credentials(self) -> service_account.Credentials:
        if self._credentials is None:
            if not self.credentials_file.exists():
                raise BackupError(
                    f"Service account key {self.credentials_file} not found"
                )
            self._credentials = service_account.Credentials.from_service_account_file(
                str(self.credentials_file), scopes=DRIVE_SCOPES
            )
        return self._credentials

    def _get_access_token(self) -> str:
        """Синхронное получение токена (блокирующий HTTP запрос)"""
        credentials = self._load_credentials()
        try:
            if not credentials.valid:
                credentials.refresh(Request())
        except GoogleAuthError as e:
            raise BackupError(f"Google authorization failed: {e}") from e
        return credentials.token

    async def upload(self, filename: str, content: bytes) -> str:
        token = await asyncio.get_running_loop().run_in_executor(None, self._get_access_token)

        metadata = {'name': filename, 'parents': [self.folder_id]}
        params = {
            'uploadType': 'multipart',
            'supportsAllDrives': 'true',
            'fields': 'id,name,parents'
        }
        headers = {'Authorization': f'Bearer {token}'}

        logger.info(f"Uploading {filename} to Drive folder {self.folder_id}")

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                with aiohttp.MultipartWriter('related') as writer:
                    writer.append_json(metadata)
                    writer.append(content, {'Content-Type': 'application/json'})

                    async with session.post(
                        self.upload_url, params=params, data=writer, headers=headers
                    ) as response:
                        if response.status >= 400:
                            body = await response.text()
                            raise BackupError(
                                f"Drive upload failed with HTTP {response.status}: {body[:500]}"
                            )
                        uploaded = await response.json()

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise BackupError(f"Drive upload failed: {e}") from e

        logger.info(f"File uploaded: {uploaded.get('name')} (ID: {uploaded.get('id')})")
        return uploaded.get('id', '')

__all__ = ['DriveUploader', 'DRIVE_SCOPES']
