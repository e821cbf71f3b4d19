from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from wp_bulk_sync.errors import WordPressAPIError
from wp_bulk_sync.wp_client import WordPressClient


class Resp:
    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        self._body = body
        self.text = text if text is not None else ("" if body is None else "json")
        self.content = b"" if body is None and not text else b"x"

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no json")
        return self._body


class Session:
    def __init__(self, responses: List[Resp]) -> None:
        self.responses = responses
        self.calls: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}
        self.auth = None

    def request(self, method: str, url: str, **kwargs: Any) -> Resp:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)

    def close(self) -> None:
        pass


def test_auth_and_list_params(site):
    s = Session([Resp(body=[{"id": 1}])])
    client = WordPressClient(site, session=s)
    assert client.list_posts(page=2) == [{"id": 1}]
    assert s.auth == ("editor", "secret")
    call = s.calls[0]
    assert call["url"] == "https://wp.test/wp-json/wp/v2/posts"
    assert call["params"] == {"per_page": 100, "page": 2, "status": "any", "orderby": "date", "order": "desc"}


def test_error_carries_body_and_code(site):
    body = {"code": "term_exists", "message": "exists", "data": {"term_id": 9}}
    client = WordPressClient(site, session=Session([Resp(400, body, "Bad Request")]))
    with pytest.raises(WordPressAPIError) as ei:
        client.create_term("tags", "x")
    assert ei.value.status_code == 400
    assert ei.value.code == "term_exists"
    assert "term_exists" in str(ei.value)


def test_error_with_html_body(site):
    client = WordPressClient(site, session=Session([Resp(502, None, "Bad Gateway", text="<html>down</html>")]))
    with pytest.raises(WordPressAPIError, match="502 Bad Gateway: <html>down</html>") as ei:
        client.ping()
    assert ei.value.code is None


def test_upload_media_headers(site):
    s = Session([Resp(201, {"id": 5}, "Created")])
    assert WordPressClient(site, session=s).upload_media(b"img", "a.png", "image/png") == {"id": 5}
    call = s.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/media")
    assert call["data"] == b"img"
    assert call["headers"] == {"Content-Type": "image/png", "Content-Disposition": 'attachment; filename="a.png"'}


def test_update_post_and_slug_lookup(site):
    s = Session([Resp(body=[]), Resp(body={"id": 3, "status": "draft"})])
    client = WordPressClient(site, session=s)
    assert client.find_posts_by_slug("x") == []
    assert s.calls[0]["params"] == {"slug": "x", "per_page": 1, "status": "any"}
    assert client.update_post(3, {"title": "T"})["id"] == 3
    assert s.calls[1]["url"].endswith("/posts/3")
    assert s.calls[1]["json"] == {"title": "T"}
