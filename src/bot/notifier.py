"""
Уведомления и отправка файлов в Telegram чат
"""
import os
import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from aiogram import Bot
from aiogram.client.session.aiohttp import AiohttpSession
from aiogram.types import FSInputFile, LinkPreviewOptions

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = {'.mp3', '.m4a', '.wav', '.flac', '.ogg'}
VIDEO_EXTENSIONS = {'.mp4', '.mkv', '.webm', '.mov'}

# Лимит подписи к медиа в Telegram
CAPTION_LIMIT = 1024


def media_kind(file_path: str) -> str:
    """Тип отправки по расширению: audio, video или document"""
    ext = os.path.splitext(file_path)[1].lower()
    if ext in AUDIO_EXTENSIONS:
        return 'audio'
    if ext in VIDEO_EXTENSIONS:
        return 'video'
    return 'document'


class Notifier(ABC):
    """Контракт доставки: текстовое сообщение и файл с подписью"""

    @abstractmethod
    async def send_message(self, text: str) -> None:
        pass

    @abstractmethod
    async def send_file(self, file_path: str, caption: Optional[str] = None) -> None:
        pass

    async def close(self) -> None:
        pass


class TelegramNotifier(Notifier):
    """
    Отправка в Telegram через aiogram

    Если токен или chat_id не заданы - все вызовы ничего не делают
    (сервис продолжает качать, но ничего не доставляет).
    """

    def __init__(self, bot_token: str, chat_id: Union[int, str], bot: Optional[Bot] = None):
        """
        Args:
            bot_token: Токен бота
            chat_id: ID чата (int) или username канала
            bot: Готовый экземпляр Bot (для тестов)
        """
        self.chat_id = chat_id
        self.bot = bot
        if self.bot is None and bot_token and chat_id:
            # Увеличенный таймаут для больших файлов
            session = AiohttpSession(timeout=600)
            self.bot = Bot(token=bot_token, session=session)

    @property
    def enabled(self) -> bool:
        return self.bot is not None

    async def send_message(self, text: str) -> None:
        if not self.enabled:
            logger.debug("[notifier] Telegram не настроен, сообщение пропущено")
            return
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=text,
            link_preview_options=LinkPreviewOptions(is_disabled=True),
        )

    async def send_file(self, file_path: str, caption: Optional[str] = None) -> None:
        if not self.enabled:
            logger.debug(f"[notifier] Telegram не настроен, файл пропущен: {file_path}")
            return

        if caption:
            caption = caption[:CAPTION_LIMIT]
        document = FSInputFile(file_path, filename=os.path.basename(file_path))
        kind = media_kind(file_path)

        logger.info(f"[notifier] Отправка {kind}: {file_path}")
        if kind == 'audio':
            await self.bot.send_audio(chat_id=self.chat_id, audio=document, caption=caption)
        elif kind == 'video':
            await self.bot.send_video(chat_id=self.chat_id, video=document, caption=caption)
        else:
            await self.bot.send_document(chat_id=self.chat_id, document=document, caption=caption)

    async def close(self) -> None:
        if self.bot is not None:
            await self.bot.session.close()
