# -*- coding: utf-8 -*-
"""
CSV loading
- UTF-8 (BOM tolerated), comma-delimited, header row required
- Header names normalized: BOM/whitespace stripped, lowercased
- Every row comes back as a plain dict of strings (missing cells -> "")
"""
from __future__ import annotations

import csv
import io
import logging
import sys
from pathlib import Path
from typing import Dict, List, Union

from .errors import CsvLoadError

logger = logging.getLogger(__name__)

# long post bodies exceed the 128 KiB default
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))


def _norm(s: str) -> str:
    return (s or "").strip().lstrip("\ufeff").strip()


def parse_csv_text(text: str) -> List[Dict[str, str]]:
    rdr = csv.DictReader(io.StringIO(text))
    rows: List[Dict[str, str]] = []
    try:
        if not rdr.fieldnames:
            raise CsvLoadError("CSV has no header row")
        rdr.fieldnames = [_norm(h).lower() for h in rdr.fieldnames]
        for row in rdr:
            clean = {k: (v if isinstance(v, str) else "") for k, v in row.items() if k}
            if not any(v.strip() for v in clean.values()):
                continue
            rows.append(clean)
    except csv.Error as e:
        raise CsvLoadError(f"CSV parse error at line {rdr.line_num}: {e}") from e
    return rows


def load_csv(path: Union[str, Path]) -> List[Dict[str, str]]:
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = Path.cwd() / p
    if not p.is_file():
        raise CsvLoadError(f"CSV file not found: {p}")
    try:
        text = p.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CsvLoadError(f"CSV is not valid UTF-8: {e}") from e
    except OSError as e:
        raise CsvLoadError(f"Cannot read CSV {p}: {e}") from e
    rows = parse_csv_text(text)
    logger.info("Loaded %d row(s) from %s", len(rows), p)
    return rows
