# -*- coding: utf-8 -*-
from .batch import BatchContext, check_connectivity, new_context, process_csv_file, run
from .duplicates import DuplicateDetector, normalize_title
from .media import MediaIngestor, rewrite_share_url
from .reconciler import MODE_CREATE, MODE_UPDATE, RowReconciler
from .terms import TermResolver

__all__ = [
    "BatchContext",
    "DuplicateDetector",
    "MODE_CREATE",
    "MODE_UPDATE",
    "MediaIngestor",
    "RowReconciler",
    "TermResolver",
    "check_connectivity",
    "new_context",
    "normalize_title",
    "process_csv_file",
    "rewrite_share_url",
    "run",
]
