# -*- coding: utf-8 -*-
from __future__ import annotations

import html
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from wp_bulk_sync.config import SiteConfig
from wp_bulk_sync.errors import WordPressAPIError
from wp_bulk_sync.pacing import Pacer


class FakeWordPress:
    """In-memory stand-in for WordPressClient (same method surface)."""

    def __init__(self) -> None:
        self.posts: Dict[int, Dict[str, Any]] = {}
        self.terms: Dict[str, Dict[int, Dict[str, Any]]] = {"categories": {}, "tags": {}}
        self.media: Dict[int, Tuple[bytes, str, str]] = {}
        self.created: List[Dict[str, Any]] = []
        self.updates: List[Tuple[int, Dict[str, Any]]] = []
        self.list_calls: List[int] = []
        self.term_create_errors: Dict[str, Exception] = {}
        self.ping_error: Optional[Exception] = None
        self.media_error: Optional[Exception] = None
        self.closed = False
        self._next_id = 1

    def _new_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    # --- seeding ---
    def add_post(self, title: str, status: str = "publish", slug: str = "", content: str = "") -> int:
        pid = self._new_id()
        self.posts[pid] = {"id": pid, "title": {"rendered": title}, "status": status,
                           "slug": slug, "content": {"rendered": content}}
        return pid

    def add_term(self, taxonomy: str, name: str) -> int:
        tid = self._new_id()
        self.terms[taxonomy][tid] = {"id": tid, "name": html.escape(name, quote=False)}
        return tid

    # --- reads ---
    def ping(self) -> None:
        if self.ping_error:
            raise self.ping_error

    def list_posts(self, page: int = 1, per_page: int = 100, status: str = "any",
                   orderby: str = "date", order: str = "desc") -> List[Dict[str, Any]]:
        self.list_calls.append(page)
        ordered = sorted(self.posts.values(), key=lambda p: p["id"], reverse=True)
        start = (page - 1) * per_page
        if page > 1 and start >= len(ordered):
            raise WordPressAPIError(400, "Bad Request", {"code": "rest_post_invalid_page_number"})
        return ordered[start:start + per_page]

    def find_posts_by_slug(self, slug: str) -> List[Dict[str, Any]]:
        return [p for p in self.posts.values() if p.get("slug") == slug][:1]

    def get_post(self, post_id: int) -> Dict[str, Any]:
        if post_id not in self.posts:
            raise WordPressAPIError(404, "Not Found", {"code": "rest_post_invalid_id"})
        return self.posts[post_id]

    def search_terms(self, taxonomy: str, search: str) -> List[Dict[str, Any]]:
        needle = search.lower()
        return [t for t in self.terms[taxonomy].values() if needle in html.unescape(t["name"]).lower()]

    # --- writes ---
    def create_term(self, taxonomy: str, name: str) -> Dict[str, Any]:
        if name in self.term_create_errors:
            raise self.term_create_errors[name]
        tid = self.add_term(taxonomy, name)
        return self.terms[taxonomy][tid]

    def upload_media(self, buffer: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        if self.media_error:
            raise self.media_error
        mid = self._new_id()
        self.media[mid] = (buffer, filename, mime_type)
        return {"id": mid}

    def create_post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        pid = self.add_post(payload["title"], payload.get("status", "draft"), payload.get("slug", ""),
                            payload.get("content", ""))
        self.created.append(payload)
        return self.posts[pid]

    def update_post(self, post_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        post = self.get_post(post_id)
        self.updates.append((post_id, dict(payload)))
        for key, value in payload.items():
            post[key] = {"rendered": value} if key in ("title", "content") else value
        return post

    def close(self) -> None:
        self.closed = True


class FakeResponse:
    def __init__(self, content: bytes = b"", headers: Optional[Dict[str, str]] = None, status_code: int = 200):
        self.content = content
        self.headers = CaseInsensitiveDict(headers or {})
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class FakeHttp:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response
        self.urls: List[str] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def get(self, url: str, headers: Any = None, timeout: Any = None) -> FakeResponse:
        self.urls.append(url)
        return self.response


@pytest.fixture
def wp() -> FakeWordPress:
    return FakeWordPress()


@pytest.fixture
def pacer() -> Pacer:
    return Pacer(0.3, sleep=lambda _s: None)


@pytest.fixture
def site() -> SiteConfig:
    return SiteConfig(key="default", name="Test Site", wp_site="https://wp.test",
                      wp_user="editor", wp_app_password="secret", request_delay_ms=0)
