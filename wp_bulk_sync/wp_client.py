# -*- coding: utf-8 -*-
"""
WordPress REST API client (wp/v2, Application Password basic auth)
- One requests.Session per client: each batch run owns its own instance
- 429/5xx retried for GET only (a retried POST could create a second post)
- Non-2xx answers raise WordPressAPIError with the response body attached
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter, Retry

from .config import SiteConfig
from .errors import WordPressAPIError

logger = logging.getLogger(__name__)

TAXONOMIES = ("categories", "tags")


def make_session(retries: int) -> requests.Session:
    s = requests.Session()
    retry = Retry(total=retries, backoff_factor=0.5, status_forcelist=[429, 500, 502, 503, 504],
                  allowed_methods=frozenset(["GET"]))
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    return s


class WordPressClient:
    def __init__(self, cfg: SiteConfig, session: Optional[requests.Session] = None) -> None:
        self.cfg = cfg
        self.base = cfg.api_base
        self.session = session or make_session(cfg.retries)
        self.session.auth = (cfg.wp_user, cfg.wp_app_password)
        self.session.headers.update({"Accept": "application/json"})

    # --- transport ---
    def _url(self, path: str) -> str:
        return f"{self.base}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        r = self.session.request(method, url, timeout=self.cfg.timeout, **kwargs)
        logger.debug("%s %s -> %s", method, url, r.status_code)
        if not 200 <= r.status_code < 300:
            try:
                body: Any = r.json()
            except ValueError:
                body = r.text[:500]
            raise WordPressAPIError(r.status_code, r.reason or "", body, url)
        if not r.content:
            return None
        return r.json()

    def close(self) -> None:
        self.session.close()

    # --- reads ---
    def ping(self) -> None:
        self._request("GET", "/posts", params={"per_page": 1})

    def list_posts(self, page: int = 1, per_page: int = 100, status: str = "any",
                   orderby: str = "date", order: str = "desc") -> List[Dict[str, Any]]:
        params = {"per_page": per_page, "page": page, "status": status, "orderby": orderby, "order": order}
        return self._request("GET", "/posts", params=params) or []

    def find_posts_by_slug(self, slug: str) -> List[Dict[str, Any]]:
        return self._request("GET", "/posts", params={"slug": slug, "per_page": 1, "status": "any"}) or []

    def get_post(self, post_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/posts/{post_id}")

    def search_terms(self, taxonomy: str, search: str) -> List[Dict[str, Any]]:
        assert taxonomy in TAXONOMIES
        return self._request("GET", f"/{taxonomy}", params={"search": search, "per_page": 100}) or []

    # --- writes ---
    def create_term(self, taxonomy: str, name: str) -> Dict[str, Any]:
        assert taxonomy in TAXONOMIES
        return self._request("POST", f"/{taxonomy}", json={"name": name})

    def upload_media(self, buffer: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        headers = {
            "Content-Type": mime_type,
            "Content-Disposition": f'attachment; filename="{filename}"',
        }
        return self._request("POST", "/media", data=buffer, headers=headers)

    def create_post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/posts", json=payload)

    def update_post(self, post_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", f"/posts/{post_id}", json=payload)
