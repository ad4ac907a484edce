"""
Worker для обработки очереди задач на скачивание
FIFO очередь + ограничение числа одновременно выполняемых задач

Жизненный цикл задачи:
    queued -> downloading -> uploading -> done
    downloading/uploading -> error (при любой ошибке)
"""
import asyncio
import logging
import os
from collections import deque
from typing import Deque, Set

from src.bot.notifier import Notifier
from src.database.job_store import JobStore
from src.models.download_result import DownloadResult, FileList, SingleFile
from src.models.job import Job, JobStatus
from src.services.base import EngineError
from src.services.service_factory import EngineFactory
from src.workers.cleanup import CleanupScheduler, remove_artifact

logger = logging.getLogger(__name__)


class DownloadWorker:
    """
    Исполнитель очереди задач

    Алгоритм drive():
    1. Если занято max_concurrent слотов - ничего не делаем (освободившийся слот вызовет drive снова)
    2. Иначе берем следующий job_id из очереди и запускаем его в отдельной asyncio.Task
    3. По завершении задачи (успех или ошибка) освобождаем слот и снова вызываем drive()

    Нет приоритетов, отмены и повторов: ошибка для задачи окончательна.
    """

    def __init__(
        self,
        store: JobStore,
        engine_factory: EngineFactory,
        notifier: Notifier,
        cleanup: CleanupScheduler,
        max_concurrent: int = 1,
    ):
        """
        Args:
            store: JobStore с задачами
            engine_factory: Фабрика движков (выбор по URL)
            notifier: Доставка сообщений и файлов
            cleanup: Планировщик отложенного удаления файлов
            max_concurrent: Максимум одновременно выполняемых задач (>= 1)
        """
        self.store = store
        self.engine_factory = engine_factory
        self.notifier = notifier
        self.cleanup = cleanup
        self.max_concurrent = max(1, max_concurrent)
        self._queue: Deque[str] = deque()
        self._running = 0
        self._tasks: Set[asyncio.Task] = set()
        self._stopped = False

    @property
    def queued(self) -> int:
        return len(self._queue)

    @property
    def running(self) -> int:
        return self._running

    def enqueue(self, job_id: str) -> None:
        """Добавить задачу в конец очереди и попробовать запустить"""
        self._queue.append(job_id)
        logger.info(f"[queue] job={job_id} в очереди (позиция {len(self._queue)})")
        self.drive()

    def drive(self) -> None:
        """Запустить задачи из очереди, пока есть свободные слоты"""
        while not self._stopped and self._running < self.max_concurrent and self._queue:
            job_id = self._queue.popleft()
            self._running += 1
            task = asyncio.create_task(self._run_slot(job_id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run_slot(self, job_id: str):
        try:
            await self.process_job(job_id)
        except Exception as e:
            # process_job сам переводит задачу в error; сюда попадают только сбои хранилища
            logger.error(f"[queue] job={job_id} необработанная ошибка: {e}", exc_info=True)
        finally:
            self._running -= 1
            self.drive()

    async def join(self) -> None:
        """Дождаться, пока очередь опустеет и все задачи завершатся"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def shutdown(self) -> None:
        """Остановить очередь: отменить выполняемые задачи и таймеры очистки"""
        self._stopped = True
        if self._queue:
            logger.info(f"[queue] Остановка, не запущено задач: {len(self._queue)}")
            self._queue.clear()
        for task in list(self._tasks):
            task.cancel()
        self.cleanup.cancel_all()

    async def _notify_safe(self, text: str) -> None:
        """Уведомление без права сорвать задачу"""
        try:
            await self.notifier.send_message(text)
        except Exception as e:
            logger.warning(f"[notifier] Не удалось отправить уведомление: {e}")

    async def process_job(self, job_id: str) -> None:
        """
        Выполнить задачу целиком: скачать, доставить, выставить итоговый статус

        Любая ошибка переводит задачу в error и не затрагивает другие задачи.
        """
        job = await self.store.get(job_id)
        if job is None:
            logger.warning(f"[queue] job={job_id} не найдена, пропускаю")
            return

        await self.store.patch(job_id, status=JobStatus.DOWNLOADING)
        logger.info(f"[queue] job={job_id} начало: {job.url}")

        try:
            await self._notify_safe(f"⏳ Начинаю скачивание.\nJob: {job_id}\nURL: {job.url}")

            engine = self.engine_factory.get_engine_by_url(job.url)
            result = await engine.run(job_id, job.url)

            await self.store.patch(job_id, status=JobStatus.UPLOADING)
            await self._deliver(job, result)

        except Exception as e:
            await self._fail(job_id, e)

    async def _deliver(self, job: Job, result: DownloadResult) -> None:
        if isinstance(result, FileList):
            await self._deliver_many(job, result)
        elif isinstance(result, SingleFile):
            await self._deliver_single(job, result)
        else:
            raise TypeError(f"Неизвестный результат движка: {result!r}")

    async def _deliver_single(self, job: Job, result: SingleFile) -> None:
        file_name = os.path.basename(result.path)
        await self.store.patch(job.id, file_path=result.path, file_name=file_name)

        caption = f"✅ Скачано.\nJob: {job.id}\nFile: {file_name}\nSource: {job.url}"
        await self.notifier.send_file(result.path, caption)

        await self.store.patch(job.id, status=JobStatus.DONE)
        self.cleanup.schedule(job.id)
        logger.info(f"[queue] job={job.id} готово: {file_name}")

        await self._notify_safe(f"📤 Загрузка завершена.\nJob: {job.id}")

    async def _deliver_many(self, job: Job, result: FileList) -> None:
        """
        Плейлист: файлы отправляются строго по порядку, по одному.
        Каждый файл удаляется сразу после отправки, чтобы не держать весь плейлист на диске.

        Ошибка на любом файле прерывает задачу целиком (частичного успеха нет),
        уже отправленные и удаленные файлы не восстанавливаются.
        """
        files = sorted(result.paths)
        total = len(files)
        await self.store.patch(job.id, file_path=None, file_name=f"{total} files")

        await self.notifier.send_message(
            f"🎵 Плейлист / несколько файлов.\nJob: {job.id}\nItems: {total}\nОтправляю по одному..."
        )

        for index, file_path in enumerate(files, start=1):
            name = os.path.basename(file_path)
            caption = f"({index}/{total})\nJob: {job.id}\nFile: {name}"
            await self.notifier.send_file(file_path, caption)

            # Удаляем сразу после отправки, чтобы диск не раздувался
            try:
                os.remove(file_path)
            except OSError as e:
                logger.warning(f"[queue] job={job.id} не удалось удалить {file_path}: {e}")

        job_dir = os.path.dirname(files[0]) if files else None
        if job_dir and os.path.basename(job_dir) == f"job_{job.id}":
            try:
                os.rmdir(job_dir)
            except OSError:
                pass  # в директории остались посторонние файлы

        await self.store.patch(job.id, status=JobStatus.DONE)
        logger.info(f"[queue] job={job.id} готово: {total} файлов")

        await self._notify_safe(f"✅ Плейлист отправлен.\nJob: {job.id}\nTotal: {total} files")

    async def _fail(self, job_id: str, error: Exception) -> None:
        message = str(error) or error.__class__.__name__
        if isinstance(error, EngineError):
            logger.error(f"[queue] job={job_id} ошибка движка ({error.kind}): {message}")
        else:
            logger.error(f"[queue] job={job_id} ошибка: {message}", exc_info=error)

        current = await self.store.get(job_id)
        if current is not None and current.status.is_terminal:
            # Ошибка после done (например, в планировщике очистки) - статус не трогаем
            return
        if current is not None and current.file_path:
            # Для одиночного файла таймер очистки не запустится - удаляем сразу
            remove_artifact(current.file_path, job_id)

        await self.store.patch(
            job_id,
            status=JobStatus.ERROR,
            error=message,
            file_path=None,
            file_name=None,
        )
        await self._notify_safe(f"❌ Задача не выполнена.\nJob: {job_id}\nError: {message}")
