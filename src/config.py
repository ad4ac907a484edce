"""
Настройки сервиса из переменных окружения (.env)
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional, Union
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Дополнительные пути, чтобы systemd / минимальное окружение находили бинарники
EXTRA_PATH = ":/usr/local/bin:/usr/bin:/bin"


def _get_int(name: str, default: int) -> int:
    """Прочитать целое число из окружения, при ошибке вернуть default"""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning(f"[config] {name}={raw!r} не число, использую {default}")
        return default


def _get_str(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip()


@dataclass
class Settings:
    """
    Конфигурация сервиса

    Attributes:
        bot_token: Токен Telegram бота
        chat_id: ID чата/канала (int) или username канала (str)
        ytdlp_path, aria2c_path, ffmpeg_path, spotdl_path: Пути к бинарникам движков
        max_concurrent: Максимум одновременно выполняемых задач (>= 1)
        auto_cleanup_minutes: Через сколько минут удалять одиночный файл (>= 1)
        download_dir: Корневая директория для скачанных файлов
        host, port: Адрес HTTP сервера
        log_tail_chars: Сколько последних символов лога отдавать по HTTP
        engine_timeout_seconds: Таймаут на процесс движка (0 - без таймаута)
        log_level: Уровень логирования
    """
    bot_token: str = ""
    chat_id: Union[int, str] = ""
    ytdlp_path: str = "yt-dlp"
    aria2c_path: str = "aria2c"
    ffmpeg_path: str = "ffmpeg"
    spotdl_path: str = "spotdl"
    max_concurrent: int = 1
    auto_cleanup_minutes: int = 60
    download_dir: str = "downloads"
    host: str = "0.0.0.0"
    port: int = 3000
    log_tail_chars: int = 8000
    engine_timeout_seconds: int = 0
    log_level: str = "INFO"

    def __post_init__(self):
        self.max_concurrent = max(1, self.max_concurrent)
        self.auto_cleanup_minutes = max(1, self.auto_cleanup_minutes)
        self.download_dir = os.path.abspath(self.download_dir)

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def engine_timeout(self) -> Optional[float]:
        """Таймаут процесса в секундах или None (без таймаута)"""
        return float(self.engine_timeout_seconds) if self.engine_timeout_seconds > 0 else None

    @classmethod
    def from_env(cls) -> "Settings":
        """Собрать настройки из окружения (с подгрузкой .env)"""
        load_dotenv()

        chat_id: Union[int, str] = _get_str("TG_CHAT_ID", "")
        # Преобразуем CHAT_ID в int, если это число
        try:
            chat_id = int(chat_id)
        except ValueError:
            pass  # Оставляем строку, если это username канала

        return cls(
            bot_token=_get_str("TG_BOT_TOKEN", ""),
            chat_id=chat_id,
            ytdlp_path=_get_str("YTDLP_PATH", "yt-dlp"),
            aria2c_path=_get_str("ARIA2C_PATH", "aria2c"),
            ffmpeg_path=_get_str("FFMPEG_PATH", "ffmpeg"),
            spotdl_path=_get_str("SPOTDL_PATH", "spotdl"),
            max_concurrent=_get_int("MAX_CONCURRENT", 1),
            auto_cleanup_minutes=_get_int("AUTO_CLEANUP_MINUTES", 60),
            download_dir=_get_str("DOWNLOAD_DIR", os.path.join(os.getcwd(), "downloads")),
            host=_get_str("HOST", "0.0.0.0"),
            port=_get_int("PORT", 3000),
            log_tail_chars=_get_int("LOG_TAIL_CHARS", 8000),
            engine_timeout_seconds=_get_int("ENGINE_TIMEOUT_SECONDS", 0),
            log_level=_get_str("LOG_LEVEL", "INFO").upper(),
        )


def subprocess_env() -> dict:
    """Окружение для дочерних процессов с расширенным PATH"""
    env = dict(os.environ)
    env["PATH"] = env.get("PATH", "") + EXTRA_PATH
    return env
