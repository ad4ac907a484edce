"""
DownloadResponse - ответ DownloadManager на запрос скачивания
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class DownloadResponse:
    """
    Ответ DownloadManager на запрос request_download()

    Attributes:
        status: Статус обработки:
            - QUEUED: Задача создана и добавлена в очередь
            - ERROR: URL отклонен, задача не создана
        job_id: ID задачи (если status == QUEUED)
        error: Сообщение об ошибке (если status == ERROR)
    """
    status: str  # QUEUED | ERROR
    job_id: Optional[str] = None  # если QUEUED
    error: Optional[str] = None  # если ERROR

    def is_queued(self) -> bool:
        """Проверка, добавлено ли в очередь"""
        return self.status == 'QUEUED'

    def is_error(self) -> bool:
        """Проверка, есть ли ошибка"""
        return self.status == 'ERROR'
