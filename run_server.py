"""
Скрипт для запуска HTTP сервера
Запускать из корневой директории проекта: python run_server.py
"""
import sys
import os

# Добавляем корневую директорию в PYTHONPATH
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import logging
import uvicorn

from src.config import Settings

if __name__ == "__main__":
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run("src.dashboard.dashboard:app", host=settings.host, port=settings.port, reload=False)
