# -*- coding: utf-8 -*-
# Shared helpers: logging setup and JSON artifacts
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
DEBUG_LOG_NAME = "upload_debug.log"


def setup_logging(log_dir: Optional[Path] = None, verbose: bool = False) -> None:
    """Console logging, plus an appended debug log file when a directory is given."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if log_dir is None:
        return
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_dir / DEBUG_LOG_NAME, encoding="utf-8")
    except OSError as e:
        logging.getLogger(__name__).warning("Debug log file unavailable (%s): %s", log_dir, e)
        return
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(handler)


def save_json(obj: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)
