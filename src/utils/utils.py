"""
Утилиты для работы с URL и выбора движка скачивания
"""
from enum import Enum
from typing import Any
from urllib.parse import urlparse

# Расширения файлов, которые качаем напрямую (aria2c)
DIRECT_EXTENSIONS = frozenset({
    '.mp4', '.mkv', '.webm', '.mov',
    '.mp3', '.m4a', '.wav', '.flac', '.ogg',
    '.zip', '.rar', '.7z', '.pdf',
    '.jpg', '.jpeg', '.png', '.webp',
})
_DIRECT_SUFFIXES = tuple(DIRECT_EXTENSIONS)

# HLS плейлисты (ffmpeg)
STREAM_MANIFEST_EXTENSIONS = ('.m3u8',)

# Домены музыкального сервиса (spotdl)
MUSIC_SERVICE_DOMAINS = ('spotify.com',)


class Route(str, Enum):
    """Куда отправить URL"""
    DIRECT = 'direct'
    STREAM_MANIFEST = 'stream-manifest'
    MUSIC_SERVICE = 'music-service'
    GENERIC = 'generic'


def is_valid_url(url: Any) -> bool:
    """Проверка, что это абсолютный http/https URL"""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
        return parsed.scheme in ('http', 'https') and bool(parsed.hostname)
    except ValueError:
        return False


def _host_matches(host: str, domain: str) -> bool:
    return host == domain or host.endswith('.' + domain)


def classify_url(url: str) -> Route:
    """
    Определение движка по URL (первое совпадение побеждает):
    1. Расширение прямого файла -> DIRECT
    2. .m3u8 -> STREAM_MANIFEST
    3. Домен музыкального сервиса -> MUSIC_SERVICE
    4. Все остальное -> GENERIC (yt-dlp)
    """
    parsed = urlparse(url)
    host = (parsed.hostname or '').lower()
    path = parsed.path.lower()

    if path.endswith(_DIRECT_SUFFIXES):
        return Route.DIRECT
    if path.endswith(STREAM_MANIFEST_EXTENSIONS):
        return Route.STREAM_MANIFEST
    if any(_host_matches(host, domain) for domain in MUSIC_SERVICE_DOMAINS):
        return Route.MUSIC_SERVICE
    return Route.GENERIC
