"""
Координация запросов на скачивание
"""
from .download_manager import DownloadManager, build_download_manager

__all__ = ['DownloadManager', 'build_download_manager']
