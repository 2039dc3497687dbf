"""Tests for the Cloudinary uploader."""

import pytest
import requests

from promptforms.errors import MediaUploadError, ServiceNotConfigured
from promptforms.services import media_uploader as media_module
from promptforms.services.media_uploader import MediaUploader


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


@pytest.fixture()
def uploader():
    return MediaUploader(cloud_name="demo", upload_preset="forms")


def test_successful_upload(uploader, monkeypatch):
    seen = {}

    def fake_post(url, data, files, timeout):
        seen.update(url=url, data=data, files=files, timeout=timeout)
        return FakeResponse({"secure_url": "https://res.cloudinary.com/demo/cv.pdf",
                             "public_id": "forms/cv"})

    monkeypatch.setattr(media_module.requests, "post", fake_post)

    media = uploader.upload("cv.pdf", b"%PDF-1.4", "application/pdf")

    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/upload"
    assert seen["data"] == {"upload_preset": "forms"}
    assert seen["files"]["file"] == ("cv.pdf", b"%PDF-1.4", "application/pdf")
    assert media.url == "https://res.cloudinary.com/demo/cv.pdf"
    assert media.public_id == "forms/cv"
    assert media.file_size == 8
    assert media.mime_type == "application/pdf"


def test_unconfigured(monkeypatch):
    def fail_post(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr(media_module.requests, "post", fail_post)
    uploader = MediaUploader(cloud_name="demo", upload_preset="")
    assert uploader.configured is False
    with pytest.raises(ServiceNotConfigured):
        uploader.upload("a.txt", b"hi")


def test_connection_error(uploader, monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("unreachable")

    monkeypatch.setattr(media_module.requests, "post", fake_post)
    with pytest.raises(MediaUploadError):
        uploader.upload("a.txt", b"hi")


def test_http_error(uploader, monkeypatch):
    monkeypatch.setattr(media_module.requests, "post",
                        lambda *a, **kw: FakeResponse({"error": "bad preset"}, status_code=400))
    with pytest.raises(MediaUploadError):
        uploader.upload("a.txt", b"hi")


def test_non_json_reply(uploader, monkeypatch):
    monkeypatch.setattr(media_module.requests, "post", lambda *a, **kw: FakeResponse(None))
    with pytest.raises(MediaUploadError):
        uploader.upload("a.txt", b"hi")


def test_reply_missing_url(uploader, monkeypatch):
    monkeypatch.setattr(media_module.requests, "post",
                        lambda *a, **kw: FakeResponse({"public_id": "x"}))
    with pytest.raises(MediaUploadError):
        uploader.upload("a.txt", b"hi")
