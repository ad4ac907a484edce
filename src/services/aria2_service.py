"""
Aria2Engine - прямое скачивание файлов через aria2c (многопоточно, с докачкой)
"""
import os

from src.models.download_result import SingleFile
from src.services.base import BaseEngine

# Служебные файлы aria2c для докачки
CONTROL_SUFFIX = ".aria2"


class Aria2Engine(BaseEngine):
    """Скачивание прямой ссылки в директорию задачи"""

    name = "aria2c"

    def build_args(self, out_dir: str, url: str):
        return [
            "--allow-overwrite=true",
            "--auto-file-renaming=false",
            "--continue=true",
            "--max-connection-per-server=8",
            "--split=8",
            "--dir", out_dir,
            url,
        ]

    async def run(self, job_id: str, url: str) -> SingleFile:
        out_dir = self.job_dir(job_id)
        result = await self.execute(job_id, self.build_args(out_dir, url))
        self.check_exit(result)

        files = [path for path in self.list_files(out_dir) if not path.endswith(CONTROL_SUFFIX)]
        if not files:
            raise self.missing_output(result, "процесс завершился, но файл не найден")

        # Если файлов несколько - берем самый свежий (при равенстве - по имени)
        newest = max(files, key=lambda path: (os.path.getmtime(path), path))
        if len(files) > 1:
            self.logger.warning(
                f"[engine:{self.name}] job={job_id} найдено {len(files)} файлов, беру {os.path.basename(newest)}"
            )
        return SingleFile(newest)
