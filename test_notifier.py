"""
Тесты для TelegramNotifier и выбора типа отправки
"""
import os
import shutil
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock

from aiogram.types import FSInputFile

from src.bot.notifier import CAPTION_LIMIT, TelegramNotifier, media_kind


def make_bot():
    """Мок aiogram Bot с асинхронными методами отправки"""
    bot = MagicMock()
    bot.send_message = AsyncMock()
    bot.send_audio = AsyncMock()
    bot.send_video = AsyncMock()
    bot.send_document = AsyncMock()
    bot.session.close = AsyncMock()
    return bot


class TestMediaKind(unittest.TestCase):
    """Тесты для media_kind"""

    def test_audio(self):
        for name in ("a.mp3", "a.M4A", "a.wav", "a.flac", "a.ogg"):
            self.assertEqual(media_kind(name), 'audio', name)

    def test_video(self):
        for name in ("a.mp4", "a.MKV", "a.webm", "a.mov"):
            self.assertEqual(media_kind(name), 'video', name)

    def test_document(self):
        for name in ("a.zip", "a.pdf", "a.jpg", "noext"):
            self.assertEqual(media_kind(name), 'document', name)


class TestTelegramNotifier(unittest.IsolatedAsyncioTestCase):
    """Тесты для TelegramNotifier"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.bot = make_bot()
        self.notifier = TelegramNotifier("token", -100123, bot=self.bot)

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def make_file(self, name):
        path = os.path.join(self.test_dir, name)
        with open(path, 'w') as f:
            f.write('data')
        return path

    async def test_send_message_disables_preview(self):
        await self.notifier.send_message("hello")

        self.bot.send_message.assert_awaited_once()
        kwargs = self.bot.send_message.await_args.kwargs
        self.assertEqual(kwargs["chat_id"], -100123)
        self.assertEqual(kwargs["text"], "hello")
        self.assertTrue(kwargs["link_preview_options"].is_disabled)

    async def test_audio_file(self):
        path = self.make_file("song.mp3")
        await self.notifier.send_file(path, "caption")

        self.bot.send_audio.assert_awaited_once()
        kwargs = self.bot.send_audio.await_args.kwargs
        self.assertEqual(kwargs["chat_id"], -100123)
        self.assertIsInstance(kwargs["audio"], FSInputFile)
        self.assertEqual(kwargs["audio"].filename, "song.mp3")
        self.assertEqual(kwargs["caption"], "caption")
        self.bot.send_video.assert_not_awaited()
        self.bot.send_document.assert_not_awaited()

    async def test_video_file(self):
        path = self.make_file("clip.mp4")
        await self.notifier.send_file(path, "caption")

        self.bot.send_video.assert_awaited_once()
        self.assertIsInstance(self.bot.send_video.await_args.kwargs["video"], FSInputFile)
        self.bot.send_audio.assert_not_awaited()
        self.bot.send_document.assert_not_awaited()

    async def test_other_file_as_document(self):
        path = self.make_file("archive.zip")
        await self.notifier.send_file(path)

        self.bot.send_document.assert_awaited_once()
        kwargs = self.bot.send_document.await_args.kwargs
        self.assertEqual(kwargs["document"].filename, "archive.zip")
        self.assertIsNone(kwargs["caption"])

    async def test_caption_truncated(self):
        path = self.make_file("clip.mp4")
        await self.notifier.send_file(path, "x" * 5000)

        caption = self.bot.send_video.await_args.kwargs["caption"]
        self.assertEqual(len(caption), CAPTION_LIMIT)

    async def test_close_closes_session(self):
        await self.notifier.close()
        self.bot.session.close.assert_awaited_once()

    async def test_send_errors_propagate(self):
        self.bot.send_message.side_effect = RuntimeError("Bad Request")
        with self.assertRaises(RuntimeError):
            await self.notifier.send_message("hello")


class TestDisabledNotifier(unittest.IsolatedAsyncioTestCase):
    """Без токена или chat_id отправка ничего не делает"""

    async def test_no_credentials_is_noop(self):
        for token, chat_id in (("", -100123), ("token", ""), ("", "")):
            notifier = TelegramNotifier(token, chat_id)
            self.assertFalse(notifier.enabled)
            self.assertIsNone(notifier.bot)
            await notifier.send_message("hello")
            await notifier.send_file("/nonexistent/file.mp4", "caption")
            await notifier.close()


if __name__ == '__main__':
    unittest.main(verbosity=2)
