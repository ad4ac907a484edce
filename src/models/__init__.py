"""
Модели данных для системы скачивания
"""
from .job import Job, JobStatus, can_transition
from .download_result import SingleFile, FileList, DownloadResult
from .download_response import DownloadResponse

__all__ = [
    'Job',
    'JobStatus',
    'can_transition',
    'SingleFile',
    'FileList',
    'DownloadResult',
    'DownloadResponse',
]
