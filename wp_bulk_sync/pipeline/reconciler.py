# -*- coding: utf-8 -*-
"""
Per-row reconciliation.

create mode
  1. title/content required
  2. payload (status default, slug, excerpt, acf)
  3. categories/tags -> term ids
  4. featured image -> media id
  5. SEO alias fan-out
  6. duplicate gate: an equal normalized title refuses the row
  7. same slug already on the site -> update it instead (re-runs are idempotent)
  8. pacing, then create/update

update mode
  1. target: post_id > slug > title (the first one given decides, no fallback)
  2. confirm the post exists
  3. sparse payload: only the non-blank columns, terms/media/SEO as in create mode
  4. nothing to send -> row fails
  5. pacing, then update

process() never raises: whatever goes wrong becomes a failed Outcome.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..errors import RowError
from ..models import CREATED, ERROR, SUCCESS, UPDATED, Outcome, ProgressCallback, ProgressEvent
from ..pacing import Pacer
from .duplicates import DuplicateDetector
from .media import MediaIngestor
from .payload import (apply_seo_aliases, build_create_payload, build_update_payload, cell,
                      image_source)
from .terms import TermResolver

logger = logging.getLogger(__name__)

MODE_CREATE = "create"
MODE_UPDATE = "update"
MODES = (MODE_CREATE, MODE_UPDATE)


class RowReconciler:
    def __init__(
        self,
        client: Any,
        terms: TermResolver,
        media: MediaIngestor,
        duplicates: DuplicateDetector,
        pacer: Pacer,
        default_status: str = "draft",
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.client = client
        self.terms = terms
        self.media = media
        self.duplicates = duplicates
        self.pacer = pacer
        self.default_status = default_status
        self.progress = progress

    # --- row boundary ---
    def process(self, row: Mapping[str, Any], row_number: int, mode: str = MODE_CREATE) -> Outcome:
        title = cell(row, "title") or "Untitled"
        try:
            if mode == MODE_UPDATE:
                outcome = self.update(row, row_number)
            elif mode == MODE_CREATE:
                outcome = self.create(row, row_number)
            else:
                raise RowError(f"Unknown mode: {mode}")
        except Exception as e:
            outcome = Outcome.failed(row_number, title, str(e) or e.__class__.__name__)
            message = f"[{row_number}] failed: {outcome.title} - {outcome.error}"
            logger.error(message)
            self._emit(ProgressEvent(ERROR, message, row_number=row_number,
                                     title=outcome.title, error=outcome.error))
            return outcome

        message = f"[{row_number}] {outcome.action} post {outcome.remote_id}: {outcome.title}"
        logger.info(message)
        self._emit(ProgressEvent(SUCCESS, message, row_number=row_number,
                                 remote_id=outcome.remote_id, title=outcome.title))
        return outcome

    # --- create ---
    def create(self, row: Mapping[str, Any], row_number: int) -> Outcome:
        for required in ("title", "content"):
            if not cell(row, required):
                raise RowError(f"Missing required field: {required}")

        payload = build_create_payload(row, self.default_status, row_number)
        self._attach_references(row, payload)
        apply_seo_aliases(row, payload)

        title = payload["title"]
        duplicate_id = self.duplicates.find_by_title(title)
        if duplicate_id:
            raise RowError(f"Post with title \"{title}\" already exists (ID: {duplicate_id}). "
                           "Duplicate posts are not allowed.")

        existing_id = self.duplicates.find_by_slug(payload.get("slug"))

        self.pacer.wait()
        if existing_id:
            post = self.client.update_post(existing_id, payload)
            return Outcome.done(row_number, title, UPDATED, post)
        post = self.client.create_post(payload)
        return Outcome.done(row_number, title, CREATED, post)

    # --- update ---
    def update(self, row: Mapping[str, Any], row_number: int) -> Outcome:
        post_id = self._resolve_target(row)
        # Existence check only; columns left blank stay untouched on the site
        self.client.get_post(post_id)

        payload = build_update_payload(row, row_number)
        self._attach_references(row, payload)
        apply_seo_aliases(row, payload)
        if not payload:
            raise RowError("No fields to update. Provide at least one field to update.")

        self.pacer.wait()
        post = self.client.update_post(post_id, payload)
        return Outcome.done(row_number, cell(row, "title") or "Untitled", UPDATED, post)

    def _resolve_target(self, row: Mapping[str, Any]) -> int:
        post_id, slug, title = cell(row, "post_id"), cell(row, "slug"), cell(row, "title")
        if post_id:
            found = self.duplicates.find_by_id(post_id)
            what = f"ID \"{post_id}\""
        elif slug:
            found = self.duplicates.find_by_slug(slug)
            what = f"slug \"{slug}\""
        elif title:
            found = self.duplicates.find_by_title(title)
            what = f"title \"{title}\""
        else:
            raise RowError("Missing identifier: must provide post_id, slug, or title")
        if not found:
            raise RowError(f"Post with {what} not found")
        return found

    # --- shared ---
    def _attach_references(self, row: Mapping[str, Any], payload: Dict[str, Any]) -> None:
        for taxonomy in ("categories", "tags"):
            if cell(row, taxonomy):
                ids = self.terms.resolve_terms(cell(row, taxonomy), taxonomy)
                if ids:
                    payload[taxonomy] = ids

        source = image_source(row)
        if source:
            media_id = self.media.ingest(source)
            if media_id:
                payload["featured_media"] = media_id

    def _emit(self, event: ProgressEvent) -> None:
        if self.progress is None:
            return
        try:
            self.progress(event)
        except Exception as e:
            logger.warning("Progress callback failed: %s", e)
