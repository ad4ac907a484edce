"""
Базовый класс для движков скачивания
"""
import os
import logging
from abc import ABC, abstractmethod
from functools import partial
from typing import List, Optional

from src.database.job_store import JobStore
from src.models.download_result import DownloadResult
from src.services.process_runner import ProcessRunner, ProcessResult, ProcessError

# Сколько последних символов stderr прикладывать к ошибке
STDERR_TAIL_CHARS = 400


class EngineError(Exception):
    """
    Ошибка движка скачивания

    Attributes:
        kind: 'spawn' (бинарник не найден/не запускается), 'exit' (ненулевой код выхода),
              'missing_output' (процесс завершился успешно, но файла нет), 'timeout'
        returncode: Код выхода процесса (если был)
        stderr_tail: Хвост stderr для диагностики
    """

    def __init__(self, message: str, kind: str, returncode: Optional[int] = None, stderr_tail: str = ""):
        super().__init__(message)
        self.kind = kind
        self.returncode = returncode
        self.stderr_tail = stderr_tail


class BaseEngine(ABC):
    """
    Базовый класс для всех движков

    Каждый движок знает только свой внешний инструмент: строит аргументы,
    запускает процесс и приводит результат к SingleFile или FileList.
    НЕ работает с Telegram, НЕ меняет статус задачи.
    """

    name = "engine"

    def __init__(self, store: JobStore, runner: ProcessRunner, binary: str, download_dir: str):
        """
        Args:
            store: JobStore, куда пишется вывод процесса
            runner: ProcessRunner для запуска процесса
            binary: Путь к бинарнику движка
            download_dir: Корневая директория для файлов
        """
        self.store = store
        self.runner = runner
        self.binary = binary
        self.download_dir = download_dir
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def run(self, job_id: str, url: str) -> DownloadResult:
        """
        Скачать URL

        Args:
            job_id: ID задачи (для лога и имен файлов)
            url: URL для скачивания

        Returns:
            SingleFile или FileList

        Raises:
            EngineError: при любой ошибке движка
        """
        pass

    def job_basename(self, job_id: str) -> str:
        return f"job_{job_id}"

    def job_dir(self, job_id: str) -> str:
        """Директория задачи (создается при необходимости)"""
        path = os.path.join(self.download_dir, self.job_basename(job_id))
        os.makedirs(path, exist_ok=True)
        return path

    async def execute(self, job_id: str, args: List[str]) -> ProcessResult:
        """Запустить бинарник с аргументами, вывод пишется в лог задачи по мере поступления"""
        self.logger.info(f"[engine:{self.name}] job={job_id} запуск {self.binary}")
        try:
            return await self.runner.run(
                [self.binary, *args],
                on_output=partial(self.store.append_log, job_id),
            )
        except ProcessError as e:
            raise EngineError(
                str(e),
                kind=e.kind,
                stderr_tail=e.stderr[-STDERR_TAIL_CHARS:],
            ) from e

    def check_exit(self, result: ProcessResult) -> None:
        """Ненулевой код выхода -> EngineError с хвостом stderr"""
        if result.returncode != 0:
            tail = result.stderr[-STDERR_TAIL_CHARS:]
            raise EngineError(
                f"{self.name} exit code {result.returncode}. {tail}".strip(),
                kind='exit',
                returncode=result.returncode,
                stderr_tail=tail,
            )

    def missing_output(self, result: ProcessResult, detail: str) -> EngineError:
        tail = result.stderr[-STDERR_TAIL_CHARS:]
        return EngineError(
            f"{self.name}: {detail}. {tail}".strip(),
            kind='missing_output',
            returncode=result.returncode,
            stderr_tail=tail,
        )

    @staticmethod
    def list_files(directory: str) -> List[str]:
        """Обычные файлы в директории, отсортированные по имени"""
        if not os.path.isdir(directory):
            return []
        files = (os.path.join(directory, name) for name in os.listdir(directory))
        return sorted(path for path in files if os.path.isfile(path))
