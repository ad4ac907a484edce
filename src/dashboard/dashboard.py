"""
HTTP API: прием ссылок и статус задач
Простая HTML форма на / для ручной отправки
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from src.config import Settings
from src.downloader.download_manager import DownloadManager, INVALID_URL_ERROR, build_download_manager

logger = logging.getLogger(__name__)


class JobRequest(BaseModel):
    url: Optional[Any] = None


INDEX_HTML = """<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>Downloader -> Telegram</title>
  <style>
    body{font-family:system-ui;background:#0a0a0a;color:#eaeaea;max-width:820px;margin:40px auto;padding:0 16px}
    input{width:100%;padding:12px;border-radius:12px;border:1px solid #2a2a2a;background:#0f0f0f;color:#eaeaea}
    button{padding:10px 14px;border-radius:12px;border:1px solid #2a2a2a;background:#1f1f1f;color:#eaeaea;cursor:pointer}
    pre{white-space:pre-wrap;background:#0f0f0f;border:1px solid #2a2a2a;border-radius:12px;padding:12px;max-height:320px;overflow:auto}
  </style>
</head>
<body>
  <h1>Web Download -> Telegram</h1>
  <input id="url" placeholder="https://..."/>
  <p>
    <button onclick="submitJob()">Скачать</button>
    <button onclick="checkJob()">Статус</button>
  </p>
  <p>Job ID: <span id="jobid">-</span></p>
  <pre id="out">Готово.</pre>
<script>
let JOB = null;
async function submitJob(){
  const out = document.getElementById("out");
  const r = await fetch("/api/jobs", {
    method: "POST",
    headers: {"content-type": "application/json"},
    body: JSON.stringify({url: document.getElementById("url").value.trim()})
  });
  const j = await r.json();
  if(!r.ok){ out.textContent = "ERROR: " + (j.error || r.status); return; }
  JOB = j.id;
  document.getElementById("jobid").textContent = JOB;
  out.textContent = JSON.stringify(j, null, 2);
}
async function checkJob(){
  const out = document.getElementById("out");
  if(!JOB){ out.textContent = "Нет Job ID."; return; }
  const r = await fetch("/api/jobs/" + JOB);
  out.textContent = JSON.stringify(await r.json(), null, 2);
}
</script>
</body>
</html>
"""


def create_app(manager: Optional[DownloadManager] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Создать FastAPI приложение

    Args:
        manager: Готовый DownloadManager (для тестов); иначе собирается при старте
        settings: Настройки; по умолчанию из окружения
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.manager is None:
            cfg = app.state.settings or Settings.from_env()
            app.state.settings = cfg
            os.makedirs(cfg.download_dir, exist_ok=True)
            if not cfg.telegram_enabled:
                logger.warning("[api] TG_BOT_TOKEN / TG_CHAT_ID не заданы, отправка в Telegram отключена")
            app.state.manager = build_download_manager(cfg)
            logger.info(
                f"[api] Запущен: download_dir={cfg.download_dir}, max_concurrent={cfg.max_concurrent}"
            )
        yield
        await app.state.manager.close()
        logger.info("[api] Остановлен")

    app = FastAPI(title="Downloader -> Telegram", version="0.1.0", lifespan=lifespan)
    app.state.manager = manager
    app.state.settings = settings

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        # Тело не JSON-объект (строка, массив, битый JSON) - тот же ответ, что и для плохого URL
        logger.info(f"[api] Некорректное тело запроса {request.url.path}: {exc.errors()[:1]}")
        return JSONResponse(status_code=400, content={"error": INVALID_URL_ERROR})

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return INDEX_HTML

    @app.get("/health")
    async def health():
        stats = await app.state.manager.stats()
        return {"status": "ok", **stats}

    @app.post("/api/jobs")
    async def create_job(payload: JobRequest):
        response = await app.state.manager.request_download(payload.url)
        if response.is_error():
            return JSONResponse(status_code=400, content={"error": response.error})
        return {"id": response.job_id, "status": "queued"}

    @app.get("/api/jobs/{job_id}")
    async def get_job(job_id: str):
        job = await app.state.manager.get_job(job_id)
        if job is None:
            return JSONResponse(status_code=404, content={"error": "Задача не найдена"})
        return job

    return app


app = create_app()
