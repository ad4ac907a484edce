"""
SpotdlEngine - скачивание треков и плейлистов Spotify через spotdl
"""
from src.models.download_result import FileList
from src.services.base import BaseEngine


class SpotdlEngine(BaseEngine):
    """
    spotdl качает трек или весь плейлист в директорию задачи.
    Возвращает все файлы, отсортированные по имени.
    """

    name = "spotdl"

    async def run(self, job_id: str, url: str) -> FileList:
        out_dir = self.job_dir(job_id)
        result = await self.execute(job_id, ["download", url, "--output", out_dir])
        self.check_exit(result)

        files = self.list_files(out_dir)
        if not files:
            raise self.missing_output(result, "процесс завершился, но файлы не найдены")

        self.logger.info(f"[engine:{self.name}] job={job_id} файлов: {len(files)}")
        return FileList(tuple(files))
