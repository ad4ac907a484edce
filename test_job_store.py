"""
Тесты для JobStore и модели Job
"""
import asyncio
import unittest
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from src.database.job_store import JobStore, JobStoreError, InvalidTransitionError
from src.models.job import JobStatus, can_transition


class TestJobStore(unittest.IsolatedAsyncioTestCase):
    """Тесты для JobStore"""

    async def asyncSetUp(self):
        self.store = JobStore()

    async def test_create_queued(self):
        job = await self.store.create("a1", "https://example.com/x")
        self.assertEqual(job.status, JobStatus.QUEUED)
        self.assertEqual(job.created_at, job.updated_at)
        self.assertIsNone(job.file_path)
        self.assertIsNone(job.file_name)
        self.assertIsNone(job.error)
        self.assertEqual(job.log, "")
        self.assertEqual(await self.store.get("a1"), job)

    async def test_create_duplicate_fails(self):
        await self.store.create("a1", "https://example.com/x")
        with self.assertRaises(JobStoreError):
            await self.store.create("a1", "https://example.com/y")

    async def test_get_unknown(self):
        self.assertIsNone(await self.store.get("missing"))

    async def test_patch_merges_and_refreshes_updated_at(self):
        created = await self.store.create("a1", "https://example.com/x")
        updated = await self.store.patch("a1", status=JobStatus.DOWNLOADING, file_name="x.mp4")
        self.assertEqual(updated.status, JobStatus.DOWNLOADING)
        self.assertEqual(updated.file_name, "x.mp4")
        self.assertEqual(updated.url, "https://example.com/x")
        self.assertGreaterEqual(updated.updated_at, created.updated_at)

    async def test_patch_accepts_status_string(self):
        await self.store.create("a1", "https://example.com/x")
        updated = await self.store.patch("a1", status="downloading")
        self.assertIs(updated.status, JobStatus.DOWNLOADING)

    async def test_patch_unknown_is_noop(self):
        self.assertIsNone(await self.store.patch("missing", status=JobStatus.DOWNLOADING))
        self.assertIsNone(await self.store.get("missing"))

    async def test_snapshot_is_immutable(self):
        await self.store.create("a1", "https://example.com/x")
        snapshot = await self.store.get("a1")
        await self.store.patch("a1", status=JobStatus.DOWNLOADING)
        self.assertEqual(snapshot.status, JobStatus.QUEUED)
        with self.assertRaises(FrozenInstanceError):
            snapshot.status = JobStatus.DONE

    async def test_append_log(self):
        await self.store.create("a1", "https://example.com/x")
        await self.store.append_log("a1", "hello ")
        await self.store.append_log("a1", "world")
        job = await self.store.get("a1")
        self.assertEqual(job.log, "hello world")

    async def test_append_log_unknown_is_noop(self):
        await self.store.append_log("missing", "text")
        self.assertIsNone(await self.store.get("missing"))

    async def test_terminal_state_cannot_be_left(self):
        await self.store.create("a1", "https://example.com/x")
        await self.store.patch("a1", status=JobStatus.DOWNLOADING)
        await self.store.patch("a1", status=JobStatus.ERROR, error="boom")
        with self.assertRaises(InvalidTransitionError):
            await self.store.patch("a1", status=JobStatus.DOWNLOADING)
        with self.assertRaises(InvalidTransitionError):
            await self.store.patch("a1", status=JobStatus.ERROR)
        self.assertEqual((await self.store.get("a1")).status, JobStatus.ERROR)

    async def test_cannot_skip_downloading(self):
        await self.store.create("a1", "https://example.com/x")
        with self.assertRaises(InvalidTransitionError):
            await self.store.patch("a1", status=JobStatus.UPLOADING)

    async def test_updated_at_never_goes_back(self):
        await self.store.create("a1", "https://example.com/x")
        before = (await self.store.get("a1")).updated_at
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        with patch("src.database.job_store._utcnow", return_value=past):
            await self.store.append_log("a1", "x")
        self.assertEqual((await self.store.get("a1")).updated_at, before)

    async def test_concurrent_appends(self):
        await self.store.create("a1", "https://example.com/x")
        await asyncio.gather(*(self.store.append_log("a1", "x") for _ in range(100)))
        self.assertEqual(len((await self.store.get("a1")).log), 100)

    async def test_count_by_status(self):
        await self.store.create("a1", "https://example.com/x")
        await self.store.create("a2", "https://example.com/y")
        await self.store.patch("a2", status=JobStatus.DOWNLOADING)
        self.assertEqual(await self.store.count_by_status(), {"queued": 1, "downloading": 1})


class TestJobModel(unittest.IsolatedAsyncioTestCase):
    """Тесты для Job.to_dict и переходов статусов"""

    async def test_to_dict_truncates_log(self):
        store = JobStore()
        await store.create("a1", "https://example.com/x")
        await store.append_log("a1", "a" * 100 + "b" * 8000)
        data = (await store.get("a1")).to_dict(log_tail=8000)
        self.assertEqual(data["log"], "b" * 8000)
        self.assertEqual(data["status"], "queued")
        self.assertIsInstance(data["created_at"], str)
        self.assertEqual(data["id"], "a1")

    async def test_to_dict_full_log(self):
        store = JobStore()
        await store.create("a1", "https://example.com/x")
        await store.append_log("a1", "abc")
        self.assertEqual((await store.get("a1")).to_dict()["log"], "abc")

    def test_transitions(self):
        self.assertTrue(can_transition(JobStatus.QUEUED, JobStatus.DOWNLOADING))
        self.assertTrue(can_transition(JobStatus.DOWNLOADING, JobStatus.ERROR))
        self.assertTrue(can_transition(JobStatus.UPLOADING, JobStatus.DONE))
        self.assertFalse(can_transition(JobStatus.QUEUED, JobStatus.DONE))
        self.assertFalse(can_transition(JobStatus.QUEUED, JobStatus.ERROR))
        self.assertFalse(can_transition(JobStatus.DONE, JobStatus.ERROR))
        self.assertFalse(can_transition(JobStatus.DONE, JobStatus.DONE))


if __name__ == '__main__':
    unittest.main(verbosity=2)
