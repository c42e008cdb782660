import base64
import io

import pytest

from marketplace.services import upload_service
from marketplace.services.upload_service import decode_base64, guess_mimetype

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def cdn(monkeypatch, fake_response):
    calls = []

    def fake_post(url, files=None, json=None, timeout=None):
        calls.append({"url": url, "files": files, "json": json})
        return fake_response(payload={"url": "https://cdn.example.com/u/1.png"})

    monkeypatch.setattr(upload_service.requests, "post", fake_post)
    return calls


def test_help(client):
    data = client.get("/api/upload").get_json()
    assert data["success"] is True
    assert data["backend"] == "appgen"
    assert set(data["methods"]) == {"file", "url", "base64"}


def test_multipart_upload(client, cdn):
    resp = client.post(
        "/api/upload",
        data={"file": (io.BytesIO(PNG), "photo.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert resp.get_json() == {"success": True, "url": "https://cdn.example.com/u/1.png"}
    name, content, mimetype = cdn[0]["files"]["file"]
    assert (name, content, mimetype) == ("photo.png", PNG, "image/png")


def test_multipart_without_file(client, cdn):
    resp = client.post("/api/upload", data={"other": "x"}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No file provided"


def test_too_large(app, client, cdn):
    app.config["UPLOAD_MAX_BYTES"] = 16
    resp = client.post(
        "/api/upload",
        data={"file": (io.BytesIO(PNG), "photo.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 413
    assert cdn == []


def test_unsupported_type(client, cdn):
    resp = client.post(
        "/api/upload",
        data={"file": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 415
    assert resp.get_json()["error"] == "Unsupported file type: text/plain"


def test_url_upload(client, cdn):
    resp = client.post("/api/upload", json={"url": "https://example.com/a.jpg"})
    assert resp.get_json()["url"] == "https://cdn.example.com/u/1.png"
    assert cdn[0]["json"] == {"url": "https://example.com/a.jpg"}


def test_base64_upload(client, cdn):
    payload = "data:image/png;base64," + base64.b64encode(PNG).decode()
    resp = client.post("/api/upload", json={"base64": payload, "fileName": "p.png"})
    assert resp.get_json()["success"] is True
    assert cdn[0]["json"]["mimeType"] == "image/png"
    assert base64.b64decode(cdn[0]["json"]["base64"]) == PNG


def test_bad_bodies(client, cdn):
    assert client.post("/api/upload", json={"name": "x"}).status_code == 400
    assert client.post("/api/upload", json={"base64": "***", "mimeType": "image/png"}).status_code == 400
    resp = client.post("/api/upload", data="plain", content_type="text/plain")
    assert resp.status_code == 400
    assert cdn == []


def test_non_string_base64(client, cdn):
    resp = client.post("/api/upload", json={"base64": 12345, "fileName": "a.png", "mimeType": "image/png"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid base64 payload"
    assert cdn == []


def test_upstream_error_is_forwarded(client, monkeypatch, fake_response):
    monkeypatch.setattr(upload_service.requests, "post", lambda *a, **kw: fake_response(status_code=502, text="bad gateway"))
    resp = client.post("/api/upload", json={"url": "https://example.com/a.jpg"})
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "bad gateway"


def test_blob_backend(app, client, monkeypatch, fake_response):
    app.config.update(UPLOAD_BACKEND="blob", BLOB_READ_WRITE_TOKEN="vercel_blob_rw_x")
    calls = []

    def fake_put(url, data=None, headers=None, timeout=None):
        calls.append((url, data, headers))
        return fake_response(payload={"url": "https://blob.example.com/uploads/photo.png"})

    monkeypatch.setattr(upload_service.requests, "put", fake_put)
    resp = client.post(
        "/api/upload",
        data={"file": (io.BytesIO(PNG), "my photo.png", "image/png")},
        content_type="multipart/form-data",
    )
    assert resp.get_json()["url"] == "https://blob.example.com/uploads/photo.png"
    url, data, headers = calls[0]
    assert url.startswith("https://blob.vercel-storage.com/uploads/my_photo-")
    assert url.endswith(".png")
    assert data == PNG
    assert headers["Authorization"] == "Bearer vercel_blob_rw_x"


def test_blob_backend_requires_token(app, client):
    app.config["UPLOAD_BACKEND"] = "blob"
    resp = client.post("/api/upload", json={"url": "https://example.com/a.jpg"})
    assert resp.status_code == 500
    assert client.get("/api/upload").get_json()["backend"] == "blob"


def test_helpers():
    assert guess_mimetype("a.jpg", "application/octet-stream") == "image/jpeg"
    assert guess_mimetype("a.bin", "Image/PNG; charset=binary") == "image/png"
    content, mimetype = decode_base64(base64.b64encode(b"abc").decode(), "clip.mp4")
    assert (content, mimetype) == (b"abc", "video/mp4")


class RemoteFile:
    ok = True
    status_code = 200
    headers = {"Content-Type": "image/png"}

    def __init__(self, *chunks):
        self.chunks = chunks

    def iter_content(self, size):
        return iter(self.chunks)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_blob_url_upload_joins_chunks(app, client, monkeypatch, fake_response):
    app.config.update(UPLOAD_BACKEND="blob", BLOB_READ_WRITE_TOKEN="vercel_blob_rw_x")
    stored = []

    def fake_put(url, data=None, headers=None, timeout=None):
        stored.append(data)
        return fake_response(payload={"url": "https://blob.example.com/x.png"})

    monkeypatch.setattr(upload_service.requests, "get", lambda url, stream=None, timeout=None: RemoteFile(PNG[:10], PNG[10:]))
    monkeypatch.setattr(upload_service.requests, "put", fake_put)
    resp = client.post("/api/upload", json={"url": "https://example.com/pics/x.png?s=1"})
    assert resp.get_json()["url"] == "https://blob.example.com/x.png"
    assert stored == [PNG]


def test_blob_url_upload_too_large(app, client, monkeypatch):
    app.config.update(UPLOAD_BACKEND="blob", BLOB_READ_WRITE_TOKEN="vercel_blob_rw_x", UPLOAD_MAX_BYTES=16)
    monkeypatch.setattr(upload_service.requests, "get", lambda url, stream=None, timeout=None: RemoteFile(PNG[:10], PNG[10:]))
    assert client.post("/api/upload", json={"url": "https://example.com/x.png"}).status_code == 413
