# -*- coding: utf-8 -*-
"""
Batch driver
- One BatchContext per invocation: its own HTTP session, pacer, outcome list and clock
- Connectivity probe first; an unreachable API aborts before any row
- Rows strictly in input order, one at a time
- Outcomes written to import_log.json / update_log.json (or a per-run name), Summary returned
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

import requests

from ..common import save_json
from ..config import SiteConfig
from ..csv_rows import load_csv
from ..errors import ConnectivityError, EmptyCsvError, WordPressAPIError
from ..models import INFO, Outcome, ProgressCallback, ProgressEvent, Summary
from ..pacing import Pacer
from ..wp_client import WordPressClient
from .duplicates import DuplicateDetector
from .media import MediaIngestor
from .reconciler import MODE_CREATE, MODES, RowReconciler
from .terms import TermResolver

logger = logging.getLogger(__name__)

LOG_NAMES = {"create": "import_log.json", "update": "update_log.json"}


@dataclass
class BatchContext:
    site: SiteConfig
    client: Any
    pacer: Pacer
    mode: str = MODE_CREATE
    progress: Optional[ProgressCallback] = None
    media_dir: Optional[Path] = None
    log_dir: Optional[Path] = None
    log_name: Optional[str] = None
    # image downloads; no WP credentials on this one
    http: Any = field(default_factory=requests.Session)
    outcomes: List[Outcome] = field(default_factory=list)
    started_at: float = field(default_factory=time.monotonic)

    def emit(self, message: str) -> None:
        logger.info(message)
        if self.progress is None:
            return
        try:
            self.progress(ProgressEvent(INFO, message))
        except Exception as e:
            logger.warning("Progress callback failed: %s", e)

    def close(self) -> None:
        try:
            self.client.close()
        finally:
            self.http.close()


def unique_log_name(mode: str, site_key: str) -> str:
    """import_log_<site>_<utc time>_<rand>.json: one file per run when runs overlap."""
    stem = LOG_NAMES[mode].rsplit(".", 1)[0]
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"{stem}_{site_key}_{stamp}_{uuid.uuid4().hex[:6]}.json"


def new_context(
    site: SiteConfig,
    mode: str = MODE_CREATE,
    progress: Optional[ProgressCallback] = None,
    client: Any = None,
    sleep: Callable[[float], None] = time.sleep,
    media_dir: Union[str, Path, None] = None,
    log_dir: Union[str, Path, None] = None,
    log_name: Optional[str] = None,
    http: Any = None,
) -> BatchContext:
    if mode not in MODES:
        raise ValueError(f"mode must be one of {MODES}, got {mode!r}")
    return BatchContext(
        site=site,
        client=client if client is not None else WordPressClient(site),
        pacer=Pacer(site.request_delay, sleep=sleep),
        mode=mode,
        progress=progress,
        media_dir=Path(media_dir) if media_dir else None,
        log_dir=Path(log_dir) if log_dir else None,
        log_name=log_name,
        http=http if http is not None else requests.Session(),
    )


def build_reconciler(ctx: BatchContext) -> RowReconciler:
    return RowReconciler(
        client=ctx.client,
        terms=TermResolver(ctx.client, ctx.pacer),
        media=MediaIngestor(ctx.client, ctx.pacer, base_dir=ctx.media_dir, http=ctx.http),
        duplicates=DuplicateDetector(ctx.client),
        pacer=ctx.pacer,
        default_status=ctx.site.default_status,
        progress=ctx.progress,
    )


def check_connectivity(ctx: BatchContext) -> None:
    """GET /posts?per_page=1. Raises ConnectivityError with a readable cause."""
    ctx.emit(f"Checking WordPress REST API connectivity for {ctx.site.name}...")
    try:
        ctx.client.ping()
    except WordPressAPIError as e:
        if e.status_code == 401:
            cause = "Authentication failed. Check WP_USER and WP_APP_PASSWORD."
        elif e.status_code == 403:
            cause = "REST API is blocked. Enable it in WordPress settings."
        else:
            cause = f"Connectivity check failed: {e}"
        raise ConnectivityError(f"WordPress REST API is not accessible for {ctx.site.name}. {cause}") from e
    except requests.ConnectionError as e:
        raise ConnectivityError(f"Cannot reach {ctx.site.wp_site}. Check WP_SITE URL. ({e})") from e
    except requests.RequestException as e:
        raise ConnectivityError(f"Connectivity check failed: {e}") from e
    ctx.emit(f"WordPress REST API is accessible for {ctx.site.name}")


def write_log(ctx: BatchContext) -> Optional[str]:
    """Outcome list as JSON. A failed write never fails the batch."""
    path = (ctx.log_dir or Path.cwd()) / (ctx.log_name or LOG_NAMES[ctx.mode])
    data = [o.to_dict() for o in ctx.outcomes]
    try:
        save_json(data, path)
    except OSError as e:
        logger.warning("Could not write log file %s: %s", path, e)
        logger.info("Log data: %s", data)
        return None
    logger.info("Log written to: %s", path)
    return str(path)


def run(rows: Iterable[Mapping[str, Any]], ctx: BatchContext, probe: bool = True) -> Summary:
    rows = list(rows)
    if probe:
        check_connectivity(ctx)

    reconciler = build_reconciler(ctx)
    ctx.emit(f"Starting {ctx.mode} process for {len(rows)} row(s)...")
    for i, row in enumerate(rows, start=1):
        ctx.outcomes.append(reconciler.process(row, i, ctx.mode))

    log_path = write_log(ctx)
    summary = Summary.from_outcomes(ctx.outcomes, time.monotonic() - ctx.started_at, log_path)
    logger.info("Batch done: total=%d success=%d failed=%d (%.2fs)",
                summary.total, summary.success_count, summary.failed_count, summary.duration_seconds)
    return summary


def process_csv_file(csv_path: Union[str, Path], ctx: BatchContext) -> Summary:
    """Probe, load, run. Zero rows is an EmptyCsvError; the caller decides if that is fatal."""
    check_connectivity(ctx)
    ctx.emit("Loading CSV file...")
    rows = load_csv(csv_path)
    if not rows:
        raise EmptyCsvError("CSV file is empty")
    ctx.emit(f"Loaded {len(rows)} row(s)")
    return run(rows, ctx, probe=False)
