# -*- coding: utf-8 -*-
"""
CSV row -> wp/v2 post payload
- create: title/content/status always, optional fields when non-blank
- update: sparse, only the non-blank fields
- SEO values are written under every known convention at once
  (generic, Yoast, Rank Math); the site's plugin picks the one it reads.
  Requires the fields to be exposed through register_rest_field on the site.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]

OPTIONAL_TEXT_FIELDS = ("slug", "excerpt")
UPDATE_TEXT_FIELDS = ("title", "content", "status", "slug", "excerpt")

SEO_ALIASES: Dict[str, Tuple[str, ...]] = {
    "meta_title": ("meta_title", "_yoast_wpseo_title", "rank_math_title"),
    "meta_description": ("meta_description", "_yoast_wpseo_metadesc", "rank_math_description"),
    "focus_keyword": ("focus_keyword", "_yoast_wpseo_focuskw", "rank_math_focus_keyword"),
}


def cell(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return value.strip() if isinstance(value, str) else ""


def parse_acf(raw: str, row_number: int) -> Optional[Any]:
    """acf_json column -> object. Invalid JSON is logged and dropped."""
    try:
        return json.loads(raw)
    except ValueError as e:
        logger.warning("Invalid ACF JSON in row %d: %s", row_number, e)
        return None


def _apply_acf(row: Mapping[str, Any], payload: Payload, row_number: int) -> None:
    raw = cell(row, "acf_json")
    if raw:
        acf = parse_acf(raw, row_number)
        if acf is not None:
            payload["acf"] = acf


def build_create_payload(row: Mapping[str, Any], default_status: str, row_number: int) -> Payload:
    payload: Payload = {
        "title": cell(row, "title"),
        "content": cell(row, "content"),
        "status": cell(row, "status") or default_status,
    }
    for key in OPTIONAL_TEXT_FIELDS:
        if cell(row, key):
            payload[key] = cell(row, key)
    _apply_acf(row, payload, row_number)
    return payload


def build_update_payload(row: Mapping[str, Any], row_number: int) -> Payload:
    payload: Payload = {}
    for key in UPDATE_TEXT_FIELDS:
        if cell(row, key):
            payload[key] = cell(row, key)
    _apply_acf(row, payload, row_number)
    return payload


def apply_seo_aliases(row: Mapping[str, Any], payload: Payload) -> Payload:
    for column, targets in SEO_ALIASES.items():
        value = cell(row, column)
        if value:
            for target in targets:
                payload[target] = value
    return payload


def image_source(row: Mapping[str, Any]) -> str:
    return cell(row, "featured_image_path") or cell(row, "featured_image_url")
