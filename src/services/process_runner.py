"""
ProcessRunner - запуск внешних процессов движков скачивания
Читает stdout/stderr по кускам и сразу отдает их в callback (лог задачи)
"""
import asyncio
import codecs
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from src.config import subprocess_env

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], Awaitable[None]]

CHUNK_SIZE = 4096

# Сколько ждать завершения процесса после kill
KILL_WAIT_SECONDS = 5


@dataclass
class ProcessResult:
    """Итог работы процесса"""
    returncode: int
    stdout: str
    stderr: str


class ProcessError(Exception):
    """
    Процесс не удалось запустить или он превысил таймаут

    Attributes:
        kind: 'spawn' или 'timeout'
        stderr: Вывод stderr, собранный до ошибки
    """

    def __init__(self, message: str, kind: str, stderr: str = ""):
        super().__init__(message)
        self.kind = kind
        self.stderr = stderr


class ProcessRunner:
    """
    Запуск процесса с потоковым чтением вывода

    Выделен отдельно, чтобы движки можно было тестировать без реальных бинарников.
    """

    def __init__(self, env: Optional[dict] = None, timeout: Optional[float] = None):
        """
        Args:
            env: Окружение процесса (по умолчанию текущее + расширенный PATH)
            timeout: Таймаут на процесс в секундах, None - без ограничения
        """
        self.env = env
        self.timeout = timeout

    async def _pump(self, stream: asyncio.StreamReader, chunks: List[str], on_output: OutputCallback):
        decoder = codecs.getincrementaldecoder('utf-8')(errors='replace')
        while True:
            data = await stream.read(CHUNK_SIZE)
            if not data:
                break
            text = decoder.decode(data)
            if text:
                chunks.append(text)
                await on_output(text)
        tail = decoder.decode(b'', final=True)
        if tail:
            chunks.append(tail)
            await on_output(tail)

    async def run(self, cmd: List[str], on_output: OutputCallback) -> ProcessResult:
        """
        Запустить процесс и дождаться завершения

        Args:
            cmd: Команда (бинарник + аргументы)
            on_output: Вызывается для каждого куска stdout/stderr

        Returns:
            ProcessResult с кодом выхода и полным выводом

        Raises:
            ProcessError: процесс не запустился (kind='spawn') или превысил таймаут (kind='timeout')

        При отмене задачи процесс убивается, CancelledError пробрасывается дальше.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.env if self.env is not None else subprocess_env(),
            )
        except OSError as e:
            raise ProcessError(f"Не удалось запустить {cmd[0]}: {e}", kind='spawn') from e

        stdout_chunks: List[str] = []
        stderr_chunks: List[str] = []

        async def communicate():
            await asyncio.gather(
                self._pump(process.stdout, stdout_chunks, on_output),
                self._pump(process.stderr, stderr_chunks, on_output),
            )
            return await process.wait()

        try:
            returncode = await asyncio.wait_for(communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"[process] {cmd[0]} превысил таймаут {self.timeout}s, завершаю")
            await self._kill(process, cmd[0])
            raise ProcessError(
                f"{cmd[0]} превысил таймаут {self.timeout:g}s",
                kind='timeout',
                stderr=''.join(stderr_chunks),
            )
        except asyncio.CancelledError:
            logger.warning(f"[process] {cmd[0]} отменен, завершаю pid={process.pid}")
            await self._kill(process, cmd[0])
            raise

        return ProcessResult(
            returncode=returncode,
            stdout=''.join(stdout_chunks),
            stderr=''.join(stderr_chunks),
        )

    async def _kill(self, process: asyncio.subprocess.Process, name: str):
        """Убить процесс и дождаться, пока его заберет event loop"""
        try:
            process.kill()
        except ProcessLookupError:
            pass  # процесс уже завершился
        try:
            await asyncio.wait_for(process.wait(), timeout=KILL_WAIT_SECONDS)
        except asyncio.TimeoutError:
            # Потомки процесса могут держать пайпы открытыми
            logger.warning(f"[process] {name} pid={process.pid} не завершился за {KILL_WAIT_SECONDS}s после kill")
