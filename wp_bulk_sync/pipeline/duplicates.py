# -*- coding: utf-8 -*-
"""
Existing-post lookup
- Title: normalized exact match over a paginated listing of every status
  (the /posts search endpoint does not reliably return drafts)
- Slug / id: direct point queries
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from ..errors import WordPressAPIError

logger = logging.getLogger(__name__)

PER_PAGE = 100
MAX_PAGES = 10

_TAG = re.compile(r"<[^>]*>")
_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#8217;", "'"),
    ("&#8216;", "'"),
    ("&#39;", "'"),
    ("&#038;", "&"),
)
_ANY_ENTITY = re.compile(r"&(?:[A-Za-z][A-Za-z0-9]*|#\d+|#[xX][0-9A-Fa-f]+);")
_WS = re.compile(r"\s+")


def normalize_title(value: Optional[str]) -> str:
    """Strip tags, decode common entities, drop the rest, collapse spaces, lowercase."""
    if not value:
        return ""
    s = _TAG.sub("", value)
    for entity, char in _ENTITIES:
        s = s.replace(entity, char)
    # removal can join fragments into a new token ("&a&b;;"), so repeat until stable
    prev = None
    while prev != s:
        prev, s = s, _ANY_ENTITY.sub("", s)
    s = _WS.sub(" ", s)
    return s.lower().strip()


def post_title(post: Dict[str, Any]) -> str:
    title = post.get("title")
    if isinstance(title, dict):
        return title.get("rendered") or title.get("raw") or ""
    return str(title or "")


class DuplicateDetector:
    def __init__(self, client: Any, per_page: int = PER_PAGE, max_pages: int = MAX_PAGES) -> None:
        self.client = client
        self.per_page = per_page
        self.max_pages = max_pages

    def find_by_title(self, title: Optional[str]) -> Optional[int]:
        """First (newest) post whose normalized title equals `title`'s, else None."""
        wanted = normalize_title(title)
        if not wanted:
            return None
        logger.debug("Searching for duplicate, normalized title: \"%s\"", wanted)

        checked = 0
        for page in range(1, self.max_pages + 1):
            try:
                posts = self.client.list_posts(page=page, per_page=self.per_page, status="any",
                                               orderby="date", order="desc")
            except WordPressAPIError as e:
                # Asking one page past the end (total is a multiple of per_page)
                if e.code == "rest_post_invalid_page_number":
                    break
                raise
            checked += len(posts)
            for post in posts:
                if normalize_title(post_title(post)) == wanted:
                    logger.info("Duplicate found: post %s (%s) \"%s\"",
                                post.get("id"), post.get("status"), post_title(post))
                    return int(post["id"])
            if len(posts) < self.per_page:
                break
        else:
            logger.warning("Reached the %d post scan limit, treating \"%s\" as not found",
                           self.max_pages * self.per_page, title)
            return None

        logger.debug("No duplicate found after checking %d posts", checked)
        return None

    def find_by_slug(self, slug: Optional[str]) -> Optional[int]:
        slug = (slug or "").strip()
        if not slug:
            return None
        posts = self.client.find_posts_by_slug(slug)
        return int(posts[0]["id"]) if posts else None

    def find_by_id(self, post_id: Any) -> Optional[int]:
        """404 (or a non-numeric id) is "not found", anything else propagates."""
        try:
            pid = int(str(post_id).strip())
        except (TypeError, ValueError):
            return None
        try:
            post = self.client.get_post(pid)
        except WordPressAPIError as e:
            if e.status_code == 404:
                return None
            raise
        return int(post["id"]) if post else None
