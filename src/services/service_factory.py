"""
Фабрика движков скачивания
"""
from typing import Dict

from src.config import Settings
from src.database.job_store import JobStore
from src.services.aria2_service import Aria2Engine
from src.services.base import BaseEngine
from src.services.ffmpeg_service import FfmpegEngine
from src.services.process_runner import ProcessRunner
from src.services.spotdl_service import SpotdlEngine
from src.services.ytdlp_service import YtDlpEngine
from src.utils.utils import Route, classify_url


class EngineFactory:
    """Фабрика движков: Route -> движок (создается один раз на маршрут)"""

    def __init__(self, settings: Settings, store: JobStore, runner: ProcessRunner = None):
        """
        Args:
            settings: Настройки (пути к бинарникам, директория загрузок)
            store: JobStore для записи логов
            runner: ProcessRunner (по умолчанию с таймаутом из настроек)
        """
        self.settings = settings
        self.store = store
        self.runner = runner or ProcessRunner(timeout=settings.engine_timeout)
        self._engines: Dict[Route, BaseEngine] = {}

    def _create(self, route: Route) -> BaseEngine:
        s = self.settings
        if route == Route.DIRECT:
            return Aria2Engine(self.store, self.runner, s.aria2c_path, s.download_dir)
        elif route == Route.STREAM_MANIFEST:
            return FfmpegEngine(self.store, self.runner, s.ffmpeg_path, s.download_dir)
        elif route == Route.MUSIC_SERVICE:
            return SpotdlEngine(self.store, self.runner, s.spotdl_path, s.download_dir)
        return YtDlpEngine(self.store, self.runner, s.ytdlp_path, s.download_dir)

    def get_engine(self, route: Route) -> BaseEngine:
        """Получить движок для маршрута"""
        if route not in self._engines:
            self._engines[route] = self._create(route)
        return self._engines[route]

    def get_engine_by_url(self, url: str) -> BaseEngine:
        """Получить движок для URL"""
        return self.get_engine(classify_url(url))
