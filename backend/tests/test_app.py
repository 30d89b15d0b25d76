import re
import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.db.models.photo import PhotoDoc, photo_filename
from app.db.photo_store import InMemoryPhotoStore, PhotoStoreError
from app.main import create_app


class BrokenPhotoStore(InMemoryPhotoStore):
    async def ping(self):
        raise PhotoStoreError("server selection timed out")

    async def insert(self, photo):
        raise PhotoStoreError("insert failed")

    async def get(self, photo_id):
        raise PhotoStoreError("find failed")

    async def list_recent(self):
        raise PhotoStoreError("list failed")


class PhotoApiTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryPhotoStore()
        self.client = TestClient(create_app(store=self.store))

    def upload(self, content=b"0123456789", name="photo.jpg"):
        return self.client.post("/upload", files={"file": (name, content, "image/jpeg")})

    def _insert(self, photo):
        saved = photo.model_copy(update={"id": f"{len(self.store.photos):024x}"})
        self.store.photos[saved.id] = saved

    def test_upload_then_fetch_roundtrip(self):
        response = self.upload()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "message": "Photo saved!"})

        photos = self.client.get("/photos").json()
        self.assertEqual(len(photos), 1)
        self.assertRegex(photos[0]["filename"], r"^photo_\d+\.jpg$")
        self.assertEqual(set(photos[0]), {"id", "filename", "timestamp"})

        image = self.client.get(f"/image/{photos[0]['id']}")
        self.assertEqual(image.status_code, 200)
        self.assertEqual(image.headers["content-type"], "image/jpeg")
        self.assertEqual(image.content, b"0123456789")

    def test_filename_ignores_client_name_and_type(self):
        response = self.client.post(
            "/upload", files={"file": ("cat.png", b"\x89PNG....", "image/png")}
        )
        self.assertEqual(response.status_code, 200)

        saved = next(iter(self.store.photos.values()))
        self.assertTrue(re.fullmatch(r"photo_\d+\.jpg", saved.filename))
        image = self.client.get(f"/image/{saved.id}")
        self.assertEqual(image.headers["content-type"], "image/jpeg")

    def test_upload_without_body_is_rejected(self):
        response = self.client.post("/upload")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "No file received")
        self.assertEqual(self.store.photos, {})

    def test_upload_without_file_field_is_rejected(self):
        response = self.client.post("/upload", data={"caption": "hello"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
        self.assertEqual(self.store.photos, {})

    def test_text_field_named_file_is_rejected(self):
        response = self.client.post("/upload", data={"file": "notafile"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "No file received"})
        self.assertEqual(self.store.photos, {})

    def test_multipart_without_boundary_is_rejected(self):
        response = self.client.post(
            "/upload", headers={"content-type": "multipart/form-data"}, content=b""
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "No file received"})
        self.assertEqual(self.store.photos, {})

    def test_photos_lists_every_upload_newest_first(self):
        for i in range(3):
            self.assertEqual(self.upload(content=bytes([i]) * 4).status_code, 200)

        photos = self.client.get("/photos").json()
        self.assertEqual(len(photos), 3)
        stamps = [datetime.fromisoformat(p["timestamp"].replace("Z", "+00:00")) for p in photos]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_photos_sorted_by_timestamp_not_insertion(self):
        base = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        for minutes in (5, 0, 10):
            at = base + timedelta(minutes=minutes)
            self._insert(PhotoDoc.from_upload(b"x", at=at))

        photos = self.client.get("/photos").json()
        self.assertEqual(
            [p["filename"] for p in photos],
            [photo_filename(base + timedelta(minutes=m)) for m in (10, 5, 0)],
        )

    def test_missing_image_returns_404(self):
        response = self.client.get("/image/0123456789abcdef01234567")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.text, "Image not found")

    def test_malformed_id_is_server_error(self):
        response = self.client.get("/image/not-an-object-id")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Error fetching image"})

    def test_gallery_page_polls_photo_list(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("text/html", response.headers["content-type"])
        self.assertIn("IoT Camera Photos", response.text)
        self.assertIn('fetch("/photos")', response.text)
        self.assertIn("10000", response.text)

    def test_health_reports_store(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok", "db": "ok"})


class UnreachablePhotoStore(InMemoryPhotoStore):
    async def connect(self):
        raise PhotoStoreError("connection refused")


class StartupTests(unittest.TestCase):
    def test_connection_failure_is_logged_and_service_keeps_serving(self):
        store = UnreachablePhotoStore()
        with self.assertLogs("app.main", "ERROR") as logs:
            with TestClient(create_app(store=store)) as client:
                upload = client.post("/upload", files={"file": ("a.jpg", b"abc", "image/jpeg")})
                photos = client.get("/photos")

        self.assertIn("connection refused", logs.output[0])
        self.assertEqual(upload.status_code, 200)
        self.assertEqual(photos.status_code, 200)
        self.assertEqual(len(photos.json()), 1)


class StoreFailureTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app(store=BrokenPhotoStore()))

    def test_upload_store_failure(self):
        response = self.client.post("/upload", files={"file": ("a.jpg", b"abc", "image/jpeg")})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"success": False, "message": "Error saving photo"})

    def test_fetch_store_failure(self):
        response = self.client.get("/image/0123456789abcdef01234567")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Error fetching image"})

    def test_list_store_failure(self):
        response = self.client.get("/photos")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Error fetching photos"})

    def test_health_still_answers(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["db"], "error: server selection timed out")


if __name__ == "__main__":
    unittest.main()
