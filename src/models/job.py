"""
Job - запись о задаче скачивания (URL -> Telegram)
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class JobStatus(str, Enum):
    """Статусы задачи"""
    QUEUED = "queued"
    DOWNLOADING = "downloading"
    UPLOADING = "uploading"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.ERROR)


# Разрешенные переходы: из done/error выйти нельзя
ALLOWED_TRANSITIONS = {
    JobStatus.QUEUED: {JobStatus.DOWNLOADING},
    JobStatus.DOWNLOADING: {JobStatus.UPLOADING, JobStatus.ERROR},
    JobStatus.UPLOADING: {JobStatus.DONE, JobStatus.ERROR},
    JobStatus.DONE: set(),
    JobStatus.ERROR: set(),
}


def can_transition(current: JobStatus, new: JobStatus) -> bool:
    """Проверка перехода статуса (повторная установка того же статуса разрешена для нетерминальных)"""
    if current == new:
        return not current.is_terminal
    return new in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class Job:
    """
    Снимок состояния задачи

    Неизменяемый: JobStore заменяет запись целиком при каждом изменении,
    поэтому читатель никогда не видит частично примененный patch.

    Attributes:
        id: Уникальный ID задачи
        url: Исходный URL (http/https)
        status: Текущий статус
        created_at: Время создания
        updated_at: Время последнего изменения
        file_path: Путь к файлу (только для одиночного файла)
        file_name: Имя файла или "N files" для плейлиста
        error: Сообщение об ошибке (только в статусе error)
        log: Вывод процессов движка
    """
    id: str
    url: str
    status: JobStatus
    created_at: datetime
    updated_at: datetime
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    error: Optional[str] = None
    log: str = ""

    def to_dict(self, log_tail: Optional[int] = None) -> Dict[str, Any]:
        """Сериализация в JSON-совместимый dict (лог обрезается до последних log_tail символов)"""
        data = asdict(self)
        data['status'] = self.status.value
        data['created_at'] = self.created_at.isoformat()
        data['updated_at'] = self.updated_at.isoformat()
        if log_tail is not None and log_tail >= 0:
            data['log'] = self.log[-log_tail:] if log_tail else ""
        return data
