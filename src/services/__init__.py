"""
Движки скачивания (yt-dlp, aria2c, ffmpeg, spotdl)
"""
from .base import BaseEngine, EngineError
from .process_runner import ProcessRunner, ProcessResult, ProcessError
from .ytdlp_service import YtDlpEngine
from .aria2_service import Aria2Engine
from .ffmpeg_service import FfmpegEngine
from .spotdl_service import SpotdlEngine
from .service_factory import EngineFactory

__all__ = [
    'BaseEngine',
    'EngineError',
    'ProcessRunner',
    'ProcessResult',
    'ProcessError',
    'YtDlpEngine',
    'Aria2Engine',
    'FfmpegEngine',
    'SpotdlEngine',
    'EngineFactory',
]
