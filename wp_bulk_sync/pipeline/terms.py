# -*- coding: utf-8 -*-
"""
Category/tag resolution: "News, Food & Drink" -> [12, 31]
- Exact, case-insensitive name match among the server's (fuzzy) search hits
- Missing terms are created; the pacing delay follows every create
- A failing term is logged and skipped, the rest still resolve
"""
from __future__ import annotations

import html
import logging
from typing import Any, Dict, List, Optional

from ..errors import WordPressAPIError
from ..pacing import Pacer

logger = logging.getLogger(__name__)


def split_names(names_csv: Optional[str]) -> List[str]:
    return [n.strip() for n in (names_csv or "").split(",") if n.strip()]


def _term_name(term: Dict[str, Any]) -> str:
    # WP returns names HTML-escaped ("Food &amp; Drink")
    return html.unescape(str(term.get("name") or "")).strip()


class TermResolver:
    def __init__(self, client: Any, pacer: Pacer) -> None:
        self.client = client
        self.pacer = pacer

    def resolve_terms(self, names_csv: Optional[str], taxonomy: str) -> List[int]:
        """Never raises: unresolved names are simply left out of the result."""
        resolved: Dict[str, Optional[int]] = {}
        ids: List[int] = []
        for name in split_names(names_csv):
            key = name.lower()
            if key not in resolved:
                resolved[key] = self._get_or_create(name, taxonomy)
            term_id = resolved[key]
            if term_id is not None and term_id not in ids:
                ids.append(term_id)
        return ids

    def _get_or_create(self, name: str, taxonomy: str) -> Optional[int]:
        try:
            for term in self.client.search_terms(taxonomy, name):
                if _term_name(term).lower() == name.lower():
                    return int(term["id"])
            return self._create(name, taxonomy)
        except Exception as e:
            logger.warning("Failed to get/create %s \"%s\": %s", taxonomy, name, e)
            return None

    def _create(self, name: str, taxonomy: str) -> Optional[int]:
        try:
            created = self.client.create_term(taxonomy, name)
            logger.info("Created %s \"%s\" (id=%s)", taxonomy, name, created.get("id"))
            return int(created["id"])
        except WordPressAPIError as e:
            # Race or search miss: WP answers 400 term_exists with the existing id
            if e.code == "term_exists" and isinstance(e.body, dict):
                term_id = (e.body.get("data") or {}).get("term_id")
                if term_id:
                    return int(term_id)
            raise
        finally:
            self.pacer.wait()
