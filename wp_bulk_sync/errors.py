# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from typing import Any, Optional


class SyncError(RuntimeError):
    """Batch-level failure: the run stops before (or instead of) row processing."""


class ConfigError(SyncError):
    pass


class ConnectivityError(SyncError):
    pass


class CsvLoadError(SyncError):
    pass


class EmptyCsvError(SyncError):
    pass


class RowError(RuntimeError):
    """Row-level failure. Caught at the row boundary and recorded on the Outcome."""


class WordPressAPIError(RuntimeError):
    """Non-2xx answer from the WP REST API. The message carries the response body."""

    def __init__(self, status_code: int, reason: str, body: Any = None, url: str = "") -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url
        super().__init__(self._format())

    @property
    def code(self) -> Optional[str]:
        if isinstance(self.body, dict):
            return self.body.get("code")
        return None

    def _format(self) -> str:
        msg = f"{self.status_code} {self.reason}".strip()
        if self.body in (None, ""):
            return msg
        if isinstance(self.body, (dict, list)):
            return f"{msg}: {json.dumps(self.body, ensure_ascii=False)}"
        return f"{msg}: {str(self.body)[:500]}"
