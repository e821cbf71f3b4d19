from __future__ import annotations

import pytest
import requests

from wp_bulk_sync.pipeline.media import (MediaIngestor, filename_from_response, reconcile_extension,
                                         rewrite_share_url)

from .conftest import FakeHttp, FakeResponse

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://drive.google.com/file/d/ABC123/view?usp=sharing",
         "https://drive.google.com/uc?export=download&id=ABC123"),
        ("https://drive.google.com/open?id=XYZ_9-a",
         "https://drive.google.com/uc?export=download&id=XYZ_9-a"),
        ("https://cdn.example.com/a/d/photo.png", "https://cdn.example.com/a/d/photo.png"),
        ("https://drive.google.com/drive/folders", "https://drive.google.com/drive/folders"),
    ],
)
def test_rewrite_share_url(url, expected):
    assert rewrite_share_url(url) == expected


def test_filename_from_content_disposition():
    h = {"Content-Disposition": 'attachment; filename="cover photo.png"'}
    assert filename_from_response("https://x.test/uc", h) == "cover photo.png"
    h = {"Content-Disposition": "attachment; filename*=UTF-8''caf%C3%A9.jpg"}
    assert filename_from_response("https://x.test/uc", h) == "café.jpg"
    assert filename_from_response("https://x.test/uc", {"Content-Disposition": "inline"}) == "image.jpg"


def test_filename_from_url_path():
    assert filename_from_response("https://x.test/img/brunch%20plate.jpg?w=300", {}) == "brunch plate.jpg"
    assert filename_from_response("https://x.test/", {}) == "image"


@pytest.mark.parametrize(
    "filename, mime, expected",
    [
        ("photo.png", "image/png", "photo.png"),
        ("photo.PNG", "image/png", "photo.PNG"),
        ("photo.jpg", "image/png", "photo.png"),
        ("uc", "image/png", "uc.png"),
        ("photo", "image/png", "photo.png"),
        ("photo.png", None, "photo.png"),
    ],
)
def test_reconcile_extension(filename, mime, expected):
    assert reconcile_extension(filename, mime) == expected


def test_download_and_upload_drive_image(wp, pacer):
    http = FakeHttp(FakeResponse(PNG, {"Content-Type": "image/png"}))
    media_id = MediaIngestor(wp, pacer, http=http).ingest("https://drive.google.com/file/d/ABC123/view")
    assert http.urls == ["https://drive.google.com/uc?export=download&id=ABC123"]
    buffer, filename, mime = wp.media[media_id]
    assert buffer == PNG
    assert mime == "image/png"
    assert filename == "uc.png"
    assert pacer.waits == 1


def test_html_answer_is_rejected(wp, pacer):
    http = FakeHttp(FakeResponse(b"<html>sign in</html>", {"Content-Type": "text/html; charset=utf-8"}))
    assert MediaIngestor(wp, pacer, http=http).ingest("https://drive.google.com/open?id=PRIVATE") is None
    assert wp.media == {}
    assert pacer.waits == 0


def test_http_error_yields_none(wp, pacer):
    http = FakeHttp(FakeResponse(b"", {}, status_code=404))
    assert MediaIngestor(wp, pacer, http=http).ingest("https://x.test/missing.jpg") is None


def test_missing_content_type_guessed_from_url(wp, pacer):
    http = FakeHttp(FakeResponse(b"gif", {}))
    media_id = MediaIngestor(wp, pacer, http=http).ingest("https://x.test/anim.gif")
    assert wp.media[media_id][2] == "image/gif"


def test_local_file_relative_to_base_dir(wp, pacer, tmp_path):
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "cover.png").write_bytes(PNG)
    media_id = MediaIngestor(wp, pacer, base_dir=tmp_path).ingest("images/cover.png")
    assert wp.media[media_id] == (PNG, "cover.png", "image/png")


def test_missing_local_file_yields_none(wp, pacer, tmp_path):
    assert MediaIngestor(wp, pacer, base_dir=tmp_path).ingest("nope.png") is None
    assert pacer.waits == 0


def test_upload_failure_yields_none(wp, pacer, tmp_path):
    (tmp_path / "a.png").write_bytes(PNG)
    wp.media_error = requests.ConnectionError("reset")
    assert MediaIngestor(wp, pacer, base_dir=tmp_path).ingest(str(tmp_path / "a.png")) is None


def test_blank_source_is_ignored(wp, pacer):
    assert MediaIngestor(wp, pacer).ingest("  ") is None
    assert MediaIngestor(wp, pacer).ingest(None) is None
