"""
Тесты для HTTP API
"""
import asyncio
import unittest

from fastapi.testclient import TestClient

from src.dashboard.dashboard import create_app
from src.database.job_store import JobStore
from src.downloader.download_manager import DownloadManager


class StubNotifier:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


class StubWorker:
    """Очередь без исполнения: задачи остаются в queued"""

    def __init__(self):
        self.enqueued = []
        self.notifier = StubNotifier()
        self.stopped = False

    @property
    def queued(self):
        return len(self.enqueued)

    running = 0

    def enqueue(self, job_id):
        self.enqueued.append(job_id)

    def shutdown(self):
        self.stopped = True

    async def join(self):
        pass


class TestJobsApi(unittest.TestCase):
    """Тесты для /api/jobs"""

    def setUp(self):
        self.store = JobStore()
        self.worker = StubWorker()
        self.manager = DownloadManager(self.store, self.worker, log_tail_chars=8000)
        self.app = create_app(manager=self.manager)

    def test_create_and_get(self):
        with TestClient(self.app) as client:
            response = client.post("/api/jobs", json={"url": "https://example.com/video.mp4"})
            self.assertEqual(response.status_code, 200)
            body = response.json()
            self.assertEqual(body["status"], "queued")
            self.assertEqual(self.worker.enqueued, [body["id"]])

            response = client.get(f"/api/jobs/{body['id']}")
            self.assertEqual(response.status_code, 200)
            job = response.json()
            self.assertEqual(job["id"], body["id"])
            self.assertEqual(job["status"], "queued")
            self.assertEqual(job["url"], "https://example.com/video.mp4")
            for key in ("created_at", "updated_at", "file_path", "file_name", "error", "log"):
                self.assertIn(key, job)

    def test_url_is_stripped(self):
        with TestClient(self.app) as client:
            body = client.post("/api/jobs", json={"url": "  https://example.com/a  "}).json()
            job = client.get(f"/api/jobs/{body['id']}").json()
            self.assertEqual(job["url"], "https://example.com/a")

    def test_invalid_url_rejected(self):
        with TestClient(self.app) as client:
            for payload in ({"url": "ftp://example.com/a"}, {"url": "nope"}, {"url": ""}, {}, {"url": 5}):
                response = client.post("/api/jobs", json=payload)
                self.assertEqual(response.status_code, 400, payload)
                self.assertIn("error", response.json())
        self.assertEqual(self.worker.enqueued, [])
        self.assertEqual(self.store._jobs, {})

    def test_non_object_body_rejected(self):
        with TestClient(self.app) as client:
            for raw in ('"https://example.com/a"', '[]', 'not json', '42'):
                response = client.post(
                    "/api/jobs",
                    content=raw,
                    headers={"content-type": "application/json"},
                )
                self.assertEqual(response.status_code, 400, raw)
                self.assertIn("error", response.json())
                self.assertNotIn("detail", response.json())
        self.assertEqual(self.worker.enqueued, [])
        self.assertEqual(self.store._jobs, {})

    def test_unknown_job_404(self):
        with TestClient(self.app) as client:
            response = client.get("/api/jobs/does-not-exist")
            self.assertEqual(response.status_code, 404)
            self.assertIn("error", response.json())

    def test_log_is_truncated(self):
        with TestClient(self.app) as client:
            job_id = client.post("/api/jobs", json={"url": "https://example.com/a"}).json()["id"]
            asyncio.run(self.store.append_log(job_id, "x" * 500 + "y" * 8000))
            job = client.get(f"/api/jobs/{job_id}").json()
            self.assertEqual(len(job["log"]), 8000)
            self.assertEqual(set(job["log"]), {"y"})

    def test_index_page(self):
        with TestClient(self.app) as client:
            response = client.get("/")
            self.assertEqual(response.status_code, 200)
            self.assertIn("text/html", response.headers["content-type"])
            self.assertIn("/api/jobs", response.text)

    def test_health(self):
        with TestClient(self.app) as client:
            client.post("/api/jobs", json={"url": "https://example.com/a"})
            body = client.get("/health").json()
            self.assertEqual(body["status"], "ok")
            self.assertEqual(body["queued"], 1)
            self.assertEqual(body["jobs"], {"queued": 1})

    def test_shutdown_closes_resources(self):
        with TestClient(self.app):
            pass
        self.assertTrue(self.worker.stopped)
        self.assertTrue(self.worker.notifier.closed)


if __name__ == '__main__':
    unittest.main(verbosity=2)
