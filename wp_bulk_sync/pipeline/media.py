# -*- coding: utf-8 -*-
"""
Featured image ingestion
1) Source is a local path or an http(s) URL
2) Google Drive share links are rewritten to the direct-download form
3) An HTML answer (private Drive file -> login page) counts as a failure
4) Filename from Content-Disposition, else URL path; extension made to match the MIME type
5) Bytes are uploaded to /media after the pacing delay; the media id is returned

ingest() never raises: every failure is logged and yields None.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from urllib.parse import unquote, urlparse

import requests

from ..pacing import Pacer

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DRIVE_HOST = "drive.google.com"
_DRIVE_ID_PATTERNS = (
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9_-]+)"),
)
_FILENAME_STAR = re.compile(r"filename\*=(?:[\w-]+'[^']*')?\"?([^\";]+)\"?", re.IGNORECASE)
_FILENAME = re.compile(r"filename=\"?([^\";]+)\"?", re.IGNORECASE)


@dataclass
class MediaAsset:
    buffer: bytes
    filename: str
    mime_type: str


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def rewrite_share_url(url: str) -> str:
    """/file/d/<ID>/view or /open?id=<ID> -> https://drive.google.com/uc?export=download&id=<ID>"""
    if DRIVE_HOST not in url:
        return url
    for pattern in _DRIVE_ID_PATTERNS:
        m = pattern.search(url)
        if m:
            file_id = m.group(1)
            logger.info("Converting Google Drive URL to direct link (id=%s)", file_id)
            return f"https://{DRIVE_HOST}/uc?export=download&id={file_id}"
    return url


def filename_from_response(url: str, headers: Mapping[str, str]) -> str:
    disposition = headers.get("Content-Disposition") or headers.get("content-disposition")
    if disposition:
        m = _FILENAME_STAR.search(disposition) or _FILENAME.search(disposition)
        return unquote(m.group(1)).strip() if m else "image.jpg"
    return os.path.basename(unquote(urlparse(url).path)) or "image"


def reconcile_extension(filename: str, mime_type: Optional[str]) -> str:
    """Make the filename's extension agree with the declared MIME type."""
    if not mime_type:
        return filename
    wanted = mimetypes.guess_extension(mime_type)
    if not wanted:
        return filename
    stem, current = os.path.splitext(filename)
    current = current.lstrip(".").lower()
    if current and mimetypes.guess_type(f"file.{current}")[0] == mime_type:
        return filename
    # "uc" is what Drive export links leave behind
    if not current or current == "uc":
        return f"{filename}{wanted}"
    return f"{stem}{wanted}"


class MediaIngestor:
    def __init__(self, client: Any, pacer: Pacer, base_dir: Union[str, Path, None] = None,
                 http: Optional[requests.Session] = None) -> None:
        self.client = client
        self.pacer = pacer
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        # Plain session: WP credentials must never reach third-party hosts
        self.http = http or requests.Session()

    def ingest(self, source: Optional[str]) -> Optional[int]:
        source = (source or "").strip()
        if not source:
            return None
        try:
            asset = self.download(source) if is_url(source) else self.read_local(source)
        except Exception as e:
            logger.warning("Failed to fetch image \"%s\": %s", source, e)
            return None
        if asset is None:
            return None

        try:
            self.pacer.wait()
            media = self.client.upload_media(asset.buffer, asset.filename, asset.mime_type)
            media_id = int(media["id"])
        except Exception as e:
            logger.warning("Failed to upload media \"%s\": %s", source, e)
            return None
        logger.info("Uploaded media %s as id=%s", asset.filename, media_id)
        return media_id

    def download(self, url: str) -> Optional[MediaAsset]:
        url = rewrite_share_url(url)
        r = self.http.get(url, headers={"User-Agent": USER_AGENT}, timeout=DOWNLOAD_TIMEOUT)
        r.raise_for_status()
        content_type = (r.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        if content_type in ("text/html", "application/xhtml+xml"):
            logger.warning(
                "Downloaded content is HTML, not an image (private Google Drive link?). URL: %s. "
                "Share the file as \"Anyone with the link\".", url)
            return None
        mime_type = content_type or mimetypes.guess_type(urlparse(url).path)[0] or "image/jpeg"
        filename = reconcile_extension(filename_from_response(url, r.headers), mime_type)
        return MediaAsset(buffer=r.content, filename=filename, mime_type=mime_type)

    def read_local(self, source: str) -> Optional[MediaAsset]:
        path = Path(source).expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        if not path.is_file():
            logger.warning("Image file not found: %s", path)
            return None
        mime_type = mimetypes.guess_type(str(path))[0] or "application/octet-stream"
        return MediaAsset(buffer=path.read_bytes(), filename=path.name, mime_type=mime_type)
