# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

# Row actions
CREATED = "created"
UPDATED = "updated"
NONE = "none"

# Progress event types
INFO = "info"
SUCCESS = "success"
ERROR = "error"

Row = Mapping[str, str]


@dataclass(frozen=True)
class Outcome:
    """Result of one CSV row. `error` is set iff `action` is "none"."""

    row_number: int
    title: str
    action: str = NONE
    remote_id: Optional[int] = None
    remote_status: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def done(cls, row_number: int, title: str, action: str, post: Mapping[str, Any]) -> "Outcome":
        assert action in (CREATED, UPDATED)
        return cls(row_number, title, action, int(post["id"]), post.get("status"), None)

    @classmethod
    def failed(cls, row_number: int, title: str, error: str) -> "Outcome":
        return cls(row_number, title, NONE, None, None, error or "Unknown error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Summary:
    total: int
    success_count: int
    failed_count: int
    duration_seconds: float
    outcomes: List[Outcome] = field(default_factory=list)
    log_path: Optional[str] = None

    @classmethod
    def from_outcomes(cls, outcomes: List[Outcome], duration_seconds: float,
                      log_path: Optional[str] = None) -> "Summary":
        failed = sum(1 for o in outcomes if not o.ok)
        return cls(
            total=len(outcomes),
            success_count=len(outcomes) - failed,
            failed_count=failed,
            duration_seconds=round(duration_seconds, 2),
            outcomes=list(outcomes),
            log_path=log_path,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "success_count": self.success_count,
            "failed_count": self.failed_count,
            "duration_seconds": self.duration_seconds,
            "log_path": self.log_path,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


@dataclass(frozen=True)
class ProgressEvent:
    type: str
    message: str
    row_number: Optional[int] = None
    remote_id: Optional[int] = None
    title: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


ProgressCallback = Callable[[ProgressEvent], None]
