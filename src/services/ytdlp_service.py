"""
YtDlpEngine - универсальный движок на yt-dlp (fallback для всех URL)
"""
import os
from typing import Optional

from src.models.download_result import SingleFile
from src.services.base import BaseEngine


def parse_final_path(stdout: str, download_dir: str) -> Optional[str]:
    """
    Найти итоговый путь файла в выводе yt-dlp

    yt-dlp печатает путь после --print after_move:filepath.
    Берем последнюю строку, которая указывает внутрь download_dir.

    Args:
        stdout: Полный stdout процесса
        download_dir: Корневая директория загрузок

    Returns:
        Путь к файлу или None
    """
    root = os.path.abspath(download_dir)
    final_path = None
    for line in stdout.splitlines():
        line = line.strip()
        if not line:
            continue
        candidate = os.path.abspath(line)
        if os.path.commonpath([root, candidate]) == root and candidate != root:
            final_path = candidate
    return final_path


class YtDlpEngine(BaseEngine):
    """
    Скачивание через yt-dlp

    Без раскрытия плейлистов, лучшее видео+аудио склеивается в mp4.
    """

    name = "yt-dlp"

    def build_args(self, job_id: str, url: str):
        out_template = os.path.join(self.download_dir, f"{self.job_basename(job_id)}.%(ext)s")
        return [
            # Чтобы плейлист не раздувался, по умолчанию --no-playlist
            "--no-playlist",
            "-f", "bv*+ba/best",
            "--merge-output-format", "mp4",
            "--restrict-filenames",
            "-o", out_template,
            "--print", "after_move:filepath",
            url,
        ]

    async def run(self, job_id: str, url: str) -> SingleFile:
        os.makedirs(self.download_dir, exist_ok=True)
        result = await self.execute(job_id, self.build_args(job_id, url))
        self.check_exit(result)

        final_path = parse_final_path(result.stdout, self.download_dir)
        if not final_path or not os.path.isfile(final_path):
            raise self.missing_output(result, "процесс завершился, но итоговый файл не найден")

        self.logger.info(f"[engine:{self.name}] job={job_id} файл: {final_path}")
        return SingleFile(final_path)
