"""
FfmpegEngine - сохранение HLS (.m3u8) потока через ffmpeg без перекодирования
"""
import os

from src.models.download_result import SingleFile
from src.services.base import BaseEngine


class FfmpegEngine(BaseEngine):
    """Remux потока в mp4 (-c copy)"""

    name = "ffmpeg"

    def output_path(self, job_id: str) -> str:
        return os.path.join(self.download_dir, f"{self.job_basename(job_id)}.mp4")

    async def run(self, job_id: str, url: str) -> SingleFile:
        os.makedirs(self.download_dir, exist_ok=True)
        out_path = self.output_path(job_id)
        result = await self.execute(job_id, ["-y", "-i", url, "-c", "copy", out_path])
        self.check_exit(result)

        if not os.path.isfile(out_path):
            raise self.missing_output(result, "процесс завершился, но файл не найден")
        return SingleFile(out_path)
