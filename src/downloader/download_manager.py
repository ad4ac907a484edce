"""
DownloadManager - координатор системы скачивания
Принимает URL, создает задачу и ставит ее в очередь, но НЕ скачивает сам
"""
import logging
import uuid
from typing import Any, Dict, Optional

from src.bot.notifier import TelegramNotifier
from src.config import Settings
from src.database.job_store import JobStore
from src.models.download_response import DownloadResponse
from src.services.service_factory import EngineFactory
from src.utils.utils import is_valid_url
from src.workers.cleanup import CleanupScheduler
from src.workers.download_worker import DownloadWorker

logger = logging.getLogger(__name__)

INVALID_URL_ERROR = "Некорректный URL. Нужна ссылка http:// или https://"


def new_job_id() -> str:
    return uuid.uuid4().hex


class DownloadManager:
    """
    Координатор запросов на скачивание

    Ответственность:
    - Валидация URL
    - Создание задачи в JobStore
    - Постановка в очередь DownloadWorker
    - Чтение состояния задачи для API

    НЕ делает:
    - Не скачивает (это делают движки через DownloadWorker)
    - Не работает с Telegram напрямую
    """

    def __init__(self, store: JobStore, worker: DownloadWorker, log_tail_chars: int = 8000):
        """
        Args:
            store: JobStore с задачами
            worker: DownloadWorker с очередью
            log_tail_chars: Сколько последних символов лога отдавать наружу
        """
        self.store = store
        self.worker = worker
        self.log_tail_chars = log_tail_chars

    async def request_download(self, url: Any) -> DownloadResponse:
        """
        Принять URL на скачивание

        Returns:
            DownloadResponse со статусом QUEUED и job_id,
            либо ERROR (задача не создается)
        """
        if not isinstance(url, str) or not is_valid_url(url):
            logger.info(f"[api] Отклонен URL: {url!r}")
            return DownloadResponse(status='ERROR', error=INVALID_URL_ERROR)

        url = url.strip()
        job_id = new_job_id()
        await self.store.create(job_id, url)
        self.worker.enqueue(job_id)

        logger.info(f"[api] Задача создана: job={job_id} url={url}")
        return DownloadResponse(status='QUEUED', job_id=job_id)

    async def get_job(self, job_id: str) -> Optional[Dict[str, Any]]:
        """Состояние задачи (лог обрезан до хвоста) или None"""
        job = await self.store.get(job_id)
        if job is None:
            return None
        return job.to_dict(log_tail=self.log_tail_chars)

    async def stats(self) -> Dict[str, Any]:
        return {
            'queued': self.worker.queued,
            'running': self.worker.running,
            'jobs': await self.store.count_by_status(),
        }

    async def close(self) -> None:
        """Остановка: отменить задачи и таймеры, закрыть сессию бота"""
        self.worker.shutdown()
        # Дождаться отмененных задач, чтобы их процессы были убиты
        await self.worker.join()
        await self.worker.notifier.close()


def build_download_manager(settings: Settings) -> DownloadManager:
    """Собрать все зависимости по настройкам"""
    store = JobStore()
    notifier = TelegramNotifier(settings.bot_token, settings.chat_id)
    worker = DownloadWorker(
        store=store,
        engine_factory=EngineFactory(settings, store),
        notifier=notifier,
        cleanup=CleanupScheduler(store, settings.auto_cleanup_minutes),
        max_concurrent=settings.max_concurrent,
    )
    return DownloadManager(store, worker, log_tail_chars=settings.log_tail_chars)
