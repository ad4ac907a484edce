"""
Хранилище задач в памяти процесса
Хранит: job_id -> Job (неизменяемый снимок)
Данные теряются при перезапуске - персистентность не нужна
"""
import asyncio
from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Dict

from src.models.job import Job, JobStatus, can_transition


class JobStoreError(Exception):
    """Ошибка хранилища задач"""


class InvalidTransitionError(JobStoreError):
    """Недопустимый переход статуса задачи"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStore:
    """
    Реестр задач

    Все изменения идут через create/patch/append_log под asyncio.Lock.
    Каждое изменение кладет новый Job целиком, поэтому get() всегда
    возвращает согласованный снимок.
    """

    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = asyncio.Lock()

    def _touch(self, job: Job) -> datetime:
        """Новое значение updated_at (не меньше предыдущего, даже если часы ушли назад)"""
        now = _utcnow()
        return now if now > job.updated_at else job.updated_at

    async def create(self, job_id: str, url: str) -> Job:
        """
        Создать задачу со статусом queued

        Raises:
            JobStoreError: если задача с таким ID уже есть
        """
        async with self._lock:
            if job_id in self._jobs:
                raise JobStoreError(f"Задача {job_id} уже существует")
            now = _utcnow()
            job = Job(
                id=job_id,
                url=url,
                status=JobStatus.QUEUED,
                created_at=now,
                updated_at=now,
            )
            self._jobs[job_id] = job
            return job

    async def patch(self, job_id: str, **fields) -> Optional[Job]:
        """
        Обновить поля задачи и updated_at

        Returns:
            Новый снимок или None, если задачи нет

        Raises:
            InvalidTransitionError: если новый статус недопустим
        """
        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None

            if 'status' in fields:
                status = JobStatus(fields['status'])
                if not can_transition(current.status, status):
                    raise InvalidTransitionError(
                        f"Задача {job_id}: переход {current.status.value} -> {status.value} недопустим"
                    )
                fields['status'] = status

            updated = replace(current, **fields, updated_at=self._touch(current))
            self._jobs[job_id] = updated
            return updated

    async def append_log(self, job_id: str, text: str) -> None:
        """Дописать вывод процесса в лог задачи"""
        if not text:
            return
        async with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return
            self._jobs[job_id] = replace(
                current,
                log=current.log + text,
                updated_at=self._touch(current),
            )

    async def get(self, job_id: str) -> Optional[Job]:
        """Получить снимок задачи или None"""
        async with self._lock:
            return self._jobs.get(job_id)

    async def count_by_status(self) -> Dict[str, int]:
        """Количество задач по статусам (для /health)"""
        async with self._lock:
            counts = Counter(job.status.value for job in self._jobs.values())
        return dict(counts)
