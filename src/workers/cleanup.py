"""
Отложенное удаление одиночных файлов после успешной доставки
"""
import asyncio
import logging
import os
from typing import Dict

from src.database.job_store import JobStore

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Таймеры очистки по job_id

    Каждый таймер - asyncio.Task, поэтому их можно отменить при остановке сервиса.
    """

    def __init__(self, store: JobStore, delay_minutes: float = 60):
        """
        Args:
            store: JobStore (путь к файлу перечитывается в момент срабатывания)
            delay_minutes: Задержка в минутах (минимум 1)
        """
        self.store = store
        self.delay_seconds = max(1, delay_minutes) * 60
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, job_id: str) -> asyncio.Task:
        """Запланировать удаление файла задачи (заменяет уже запланированное)"""
        self.cancel(job_id)
        task = asyncio.create_task(self._fire(job_id))
        self._tasks[job_id] = task
        task.add_done_callback(lambda t, jid=job_id: self._forget(jid, t))
        return task

    def _forget(self, job_id: str, task: asyncio.Task):
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _fire(self, job_id: str):
        await asyncio.sleep(self.delay_seconds)
        job = await self.store.get(job_id)
        if job is None or not job.file_path:
            return
        remove_artifact(job.file_path, job_id)

    def cancel(self, job_id: str) -> None:
        task = self._tasks.pop(job_id, None)
        if task is not None:
            task.cancel()

    def cancel_all(self) -> None:
        """Отменить все таймеры (остановка сервиса / тесты)"""
        for job_id in list(self._tasks):
            self.cancel(job_id)


def remove_artifact(file_path: str, job_id: str) -> None:
    """
    Удалить файл задачи, ошибки удаления только логируются.
    Если файл лежал в пустой теперь директории job_<id> - удалить и ее.
    """
    if os.path.exists(file_path):
        try:
            os.remove(file_path)
            logger.info(f"[cleanup] job={job_id} удален файл: {file_path}")
        except OSError as e:
            logger.warning(f"[cleanup] job={job_id} не удалось удалить {file_path}: {e}")
            return

    parent = os.path.dirname(file_path)
    if os.path.basename(parent) == f"job_{job_id}":
        try:
            os.rmdir(parent)
        except OSError:
            pass  # директория не пустая или уже удалена
