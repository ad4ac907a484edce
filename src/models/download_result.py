"""
Результат работы движка скачивания - один файл или упорядоченный список файлов
Ошибки движков выражаются исключением EngineError (src.services.base)
"""
from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class SingleFile:
    """Один скачанный файл"""
    path: str


@dataclass(frozen=True)
class FileList:
    """Несколько файлов (плейлист), отсортированы по имени"""
    paths: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, 'paths', tuple(sorted(self.paths)))

    def __len__(self) -> int:
        return len(self.paths)


DownloadResult = Union[SingleFile, FileList]
