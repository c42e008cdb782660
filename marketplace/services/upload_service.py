"""
Upload forwarding.

Two interchangeable backends share one interface (``upload_file``,
``upload_url``, ``upload_base64``); which one serves a request is decided
by configuration alone, see :func:`get_uploader`.
"""
import base64
import binascii
import mimetypes
import os
import re
import uuid

import requests
from werkzeug.utils import secure_filename

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/heic",
    "video/mp4",
    "video/quicktime",
}

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?;base64,", re.I)


class UploadError(Exception):
    def __init__(self, message, status_code=400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def guess_mimetype(filename, declared=None):
    if declared and declared != "application/octet-stream":
        return declared.split(";")[0].strip().lower()
    guessed, _ = mimetypes.guess_type(filename or "")
    return (guessed or declared or "application/octet-stream").lower()


def too_large(max_bytes):
    return UploadError(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB", 413)


def check_payload(size, mimetype, max_bytes):
    if size > max_bytes:
        raise too_large(max_bytes)
    if mimetype not in ALLOWED_MIME_TYPES:
        raise UploadError(f"Unsupported file type: {mimetype}", 415)


def decode_base64(data, filename=None, mimetype=None):
    """Returns (bytes, mimetype). Accepts raw base64 or a data: URL."""
    if not isinstance(data, str):
        raise UploadError("Invalid base64 payload")
    data = data.strip()
    m = _DATA_URL.match(data)
    if m:
        mimetype = mimetype or m.group("mime")
        data = data[m.end():]
    try:
        content = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise UploadError("Invalid base64 payload")
    return content, guess_mimetype(filename, mimetype)


def _unique_name(filename, mimetype):
    name = secure_filename(filename or "") or "file"
    base, ext = os.path.splitext(name)
    if not ext:
        ext = mimetypes.guess_extension(mimetype) or ""
    return f"{base}-{uuid.uuid4().hex[:8]}{ext}"


def _result_url(resp):
    if not resp.ok:
        raise UploadError(resp.text or "Upload failed", resp.status_code)
    try:
        url = resp.json().get("url")
    except ValueError:
        url = None
    if not url:
        raise UploadError("Upload service returned no URL", 502)
    return url


class AppGenUploader:
    """Forwards payloads untouched to the AppGen CDN upload endpoint."""

    name = "appgen"

    def __init__(self, endpoint, max_bytes, timeout=10):
        self.endpoint = endpoint
        self.max_bytes = max_bytes
        self.timeout = timeout

    def upload_file(self, filename, content, mimetype):
        check_payload(len(content), mimetype, self.max_bytes)
        resp = requests.post(
            self.endpoint,
            files={"file": (filename or "file", content, mimetype)},
            timeout=self.timeout,
        )
        return _result_url(resp)

    def upload_url(self, url):
        resp = requests.post(self.endpoint, json={"url": url}, timeout=self.timeout)
        return _result_url(resp)

    def upload_base64(self, data, filename=None, mimetype=None):
        content, mimetype = decode_base64(data, filename, mimetype)
        check_payload(len(content), mimetype, self.max_bytes)
        resp = requests.post(
            self.endpoint,
            json={
                "base64": base64.b64encode(content).decode("ascii"),
                "fileName": filename or "file",
                "mimeType": mimetype,
            },
            timeout=self.timeout,
        )
        return _result_url(resp)


class BlobUploader:
    """Stores payloads in Vercel Blob; remote URLs are fetched first."""

    name = "blob"

    def __init__(self, token, api_url, max_bytes, timeout=10):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.max_bytes = max_bytes
        self.timeout = timeout

    def upload_file(self, filename, content, mimetype):
        check_payload(len(content), mimetype, self.max_bytes)
        pathname = f"uploads/{_unique_name(filename, mimetype)}"
        resp = requests.put(
            f"{self.api_url}/{pathname}",
            data=content,
            headers={
                "Authorization": f"Bearer {self.token}",
                "x-api-version": "7",
                "x-content-type": mimetype,
            },
            timeout=self.timeout,
        )
        return _result_url(resp)

    def upload_url(self, url):
        try:
            resp = requests.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadError(f"Could not fetch {url}: {e}", 400)
        with resp:
            if not resp.ok:
                raise UploadError(f"Could not fetch {url}: HTTP {resp.status_code}", 400)
            declared = int(resp.headers.get("Content-Length") or 0)
            if declared > self.max_bytes:
                raise too_large(self.max_bytes)
            buf = bytearray()
            for chunk in resp.iter_content(64 * 1024):
                buf.extend(chunk)
                if len(buf) > self.max_bytes:
                    raise too_large(self.max_bytes)
            content = bytes(buf)
            mimetype = guess_mimetype(url.split("?")[0], resp.headers.get("Content-Type"))
        filename = os.path.basename(url.split("?")[0]) or "file"
        return self.upload_file(filename, content, mimetype)

    def upload_base64(self, data, filename=None, mimetype=None):
        content, mimetype = decode_base64(data, filename, mimetype)
        return self.upload_file(filename, content, mimetype)


def backend_name(config):
    explicit = (config.get("UPLOAD_BACKEND") or "").strip().lower()
    if explicit:
        return explicit
    return "blob" if config.get("BLOB_READ_WRITE_TOKEN") else "appgen"


def get_uploader(config):
    name = backend_name(config)
    max_bytes = config.get("UPLOAD_MAX_BYTES", 10 * 1024 * 1024)
    timeout = config.get("HTTP_TIMEOUT", 10)
    if name == "blob":
        if not config.get("BLOB_READ_WRITE_TOKEN"):
            raise UploadError("Blob storage is not configured", 500)
        return BlobUploader(config["BLOB_READ_WRITE_TOKEN"], config["BLOB_API_URL"], max_bytes, timeout)
    if name == "appgen":
        return AppGenUploader(config["APPGEN_UPLOAD_URL"], max_bytes, timeout)
    raise UploadError(f"Unknown upload backend: {name}", 500)
