# -*- coding: utf-8 -*-
"""
Upload form + live progress
- GET  /             minimal upload form
- GET  /api/clients  configured sites [{id, name, wp_site}]
- POST /upload       multipart (csvfile, mode, client_id) -> text/event-stream
                     progress events, then {"type": "complete", "summary"} or {"type": "fatal"}
Every request runs its own batch (own sessions, pacer, outcomes, log file) in a worker thread.

Run:
  wp-bulk-web --port 8787
"""
from __future__ import annotations

import argparse
import html
import json
import logging
import os
import queue
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, StreamingResponse

from . import config
from .common import setup_logging
from .config import SiteConfig
from .errors import SyncError
from .pipeline.batch import new_context, process_csv_file, unique_log_name
from .pipeline.reconciler import MODE_CREATE, MODES
from .wp_client import WordPressClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[SiteConfig], Any]

INDEX_STYLE = """
body { font-family: -apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,sans-serif; line-height:1.6; color:#222; max-width:860px; margin:0 auto; padding:24px; }
#log div { font-family: monospace; font-size: 13px; }
.success { color:#15803d; } .error, .fatal { color:#b91c1c; }
"""

INDEX_SCRIPT = """
const form = document.getElementById('uploadForm');
const log = document.getElementById('log');
function line(ev) {
  const div = document.createElement('div');
  div.className = ev.type;
  div.textContent = ev.type === 'complete'
    ? `Done: ${ev.summary.success_count} ok, ${ev.summary.failed_count} failed, ${ev.summary.duration_seconds}s`
    : ev.message;
  log.appendChild(div);
}
form.addEventListener('submit', async (e) => {
  e.preventDefault();
  log.innerHTML = '';
  const res = await fetch('/upload', { method: 'POST', body: new FormData(form) });
  if (!res.ok) { line({ type: 'fatal', message: (await res.json()).detail }); return; }
  const reader = res.body.getReader();
  const decoder = new TextDecoder();
  let buf = '';
  for (;;) {
    const { value, done } = await reader.read();
    if (done) break;
    buf += decoder.decode(value, { stream: true });
    const chunks = buf.split('\\n\\n');
    buf = chunks.pop();
    chunks.filter(c => c.startsWith('data: ')).forEach(c => line(JSON.parse(c.slice(6))));
  }
});
"""


def render_index(sites: Mapping[str, SiteConfig]) -> str:
    options = "".join(f'<option value="{html.escape(s.key)}">{html.escape(s.name)}</option>' for s in sites.values())
    return f"""<!doctype html>
<html lang="en"><head><meta charset="utf-8"><title>WordPress Bulk Sync</title>
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<style>{INDEX_STYLE}</style></head>
<body>
<h1>WordPress Bulk Sync</h1>
<form id="uploadForm">
  <p><input type="file" name="csvfile" accept=".csv" required></p>
  <p><select name="mode"><option value="create">Create posts</option><option value="update">Update posts</option></select>
     <select name="client_id">{options}</select></p>
  <p><button type="submit">Upload</button></p>
</form>
<div id="log"></div>
<script>{INDEX_SCRIPT}</script>
</body></html>"""


def sse(event: Dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False)}\n\n"


def stream_batch(
    csv_path: Path,
    site: SiteConfig,
    mode: str,
    client_factory: ClientFactory,
    sleep: Callable[[float], None] = time.sleep,
    log_dir: Optional[Path] = None,
    media_dir: Optional[Path] = None,
) -> Iterator[str]:
    """Runs the batch in a worker thread and yields its events as SSE frames. Deletes csv_path when done."""
    events: "queue.Queue[Optional[Dict[str, Any]]]" = queue.Queue()

    def worker() -> None:
        ctx = None
        try:
            ctx = new_context(site, mode=mode, progress=lambda ev: events.put(ev.to_dict()),
                              client=client_factory(site), sleep=sleep,
                              log_dir=log_dir, log_name=unique_log_name(mode, site.key),
                              media_dir=media_dir)
            summary = process_csv_file(csv_path, ctx)
            events.put({"type": "complete", "summary": summary.to_dict()})
        except SyncError as e:
            logger.error("Batch aborted: %s", e)
            events.put({"type": "fatal", "message": str(e)})
        except Exception as e:
            logger.exception("Batch crashed: %s", e)
            events.put({"type": "fatal", "message": f"Unexpected error: {e}"})
        finally:
            if ctx is not None:
                try:
                    ctx.close()
                except Exception as e:
                    logger.warning("Closing batch sessions failed: %s", e)
            try:
                os.unlink(csv_path)
            except OSError as e:
                logger.debug("Temp CSV not removed (%s): %s", csv_path, e)
            events.put(None)

    threading.Thread(target=worker, name=f"batch-{site.key}", daemon=True).start()
    while True:
        event = events.get()
        if event is None:
            break
        yield sse(event)


def create_app(
    sites: Optional[Mapping[str, SiteConfig]] = None,
    client_factory: ClientFactory = WordPressClient,
    sleep: Callable[[float], None] = time.sleep,
    log_dir: Optional[Path] = None,
    media_dir: Optional[Path] = None,
) -> FastAPI:
    app = FastAPI(title="WordPress Bulk Sync")

    def _sites() -> Mapping[str, SiteConfig]:
        return sites if sites is not None else config.load_sites()

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return render_index(_sites())

    @app.get("/api/clients")
    def clients() -> Dict[str, Any]:
        return {"success": True, "clients": config.list_sites(_sites())}

    @app.post("/upload")
    async def upload(
        csvfile: UploadFile = File(...),
        mode: str = Form(MODE_CREATE),
        client_id: Optional[str] = Form(None),
    ) -> StreamingResponse:
        if mode not in MODES:
            raise HTTPException(status_code=400, detail=f"mode must be one of {', '.join(MODES)}")
        try:
            site = config.select_site(_sites(), client_id or None)
        except SyncError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        raw = await csvfile.read()
        with tempfile.NamedTemporaryFile(prefix="wp-bulk-", suffix=".csv", delete=False) as f:
            f.write(raw)
        logger.info("Upload received: %s (%d bytes) mode=%s site=%s", csvfile.filename, len(raw), mode, site.key)

        stream = stream_batch(Path(f.name), site, mode, client_factory, sleep=sleep,
                              log_dir=log_dir or config.log_dir(), media_dir=media_dir)
        return StreamingResponse(stream, media_type="text/event-stream",
                                 headers={"Cache-Control": "no-cache"})

    return app


app = create_app()


def main() -> None:
    load_dotenv(override=False)
    setup_logging(config.log_dir())
    parser = argparse.ArgumentParser(description="WordPress bulk sync upload form")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8787)
    args = parser.parse_args()
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
