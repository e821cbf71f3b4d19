# -*- coding: utf-8 -*-
"""
WordPress bulk uploader / updater (CSV)
- create: one post per row, duplicate titles refused, same slug updated in place
- update: sparse update of existing posts (post_id > slug > title)
- exit code 0 only when every row succeeded

Usage:
  wp-bulk-upload posts.csv
  wp-bulk-update updates.csv --site acme
  wp-bulk-upload            # asks for the path (CSV_PATH is suggested)
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from . import config
from .common import setup_logging
from .errors import CsvLoadError, EmptyCsvError, SyncError
from .models import Summary
from .pipeline.batch import new_context, process_csv_file
from .pipeline.reconciler import MODE_CREATE, MODE_UPDATE, MODES

logger = logging.getLogger("wp_bulk_sync")

TITLES = {MODE_CREATE: "WordPress Bulk Uploader", MODE_UPDATE: "WordPress Bulk Updater"}


def build_arg_parser(mode: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description=f"{TITLES[mode]}: CSV rows -> WordPress posts")
    p.add_argument("csv", nargs="?", help="CSV file path (prompted when omitted)")
    p.add_argument("--mode", choices=list(MODES), default=mode, help="create new posts or update existing ones")
    p.add_argument("--site", default=None, help="site key from CLIENTS_CONFIG (first site by default)")
    p.add_argument("--media-dir", default=None, help="base for relative featured_image_path (default: CSV folder)")
    p.add_argument("--log-dir", default=None, help="where the JSON log goes (default: LOG_DIR or cwd)")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p


def prompt_for_csv_path(default_path: str) -> str:
    answer = input(f"\nEnter CSV file path [{default_path}]: ").strip()
    return answer or default_path


def print_summary(summary: Summary) -> None:
    print("\n" + "=" * 50)
    print("Summary")
    print("=" * 50)
    print(f"Success: {summary.success_count}")
    print(f"Failed: {summary.failed_count}")
    print(f"Total Time: {summary.duration_seconds:.2f}s")
    if summary.log_path:
        print(f"Log: {summary.log_path}")
    print("=" * 50 + "\n")


def run_cli(argv: Optional[List[str]], mode: str) -> int:
    load_dotenv(override=False)
    args = build_arg_parser(mode).parse_args(argv)
    log_dir = Path(args.log_dir) if args.log_dir else config.log_dir()
    setup_logging(log_dir, args.verbose)

    try:
        site = config.select_site(config.load_sites(), args.site)
    except SyncError as e:
        logger.error("%s", e)
        return 1

    logger.info("%s | site=%s | default status=%s | request delay=%sms",
                TITLES[args.mode], site.wp_site, site.default_status, site.request_delay_ms)

    if args.csv:
        csv_path = args.csv
        logger.info("CSV: %s (from command-line argument)", csv_path)
    else:
        csv_path = prompt_for_csv_path(config.default_csv_path())
        logger.info("CSV: %s", csv_path)

    media_dir = Path(args.media_dir) if args.media_dir else Path(csv_path).expanduser().resolve().parent
    ctx = new_context(site, mode=args.mode, media_dir=media_dir, log_dir=log_dir)
    try:
        summary = process_csv_file(csv_path, ctx)
    except EmptyCsvError:
        logger.warning("CSV file is empty, nothing to do")
        return 0
    except CsvLoadError as e:
        logger.error("Failed to load CSV: %s", e)
        logger.error("Pass an absolute path, a path relative to the current folder, or set CSV_PATH.")
        return 1
    except SyncError as e:
        logger.error("%s", e)
        return 1
    finally:
        ctx.close()

    print_summary(summary)
    return 0 if summary.failed_count == 0 else 1


def _main(mode: str, argv: Optional[List[str]] = None) -> int:
    try:
        return run_cli(argv, mode)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 130
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        return 1


def main_upload(argv: Optional[List[str]] = None) -> int:
    return _main(MODE_CREATE, argv)


def main_update(argv: Optional[List[str]] = None) -> int:
    return _main(MODE_UPDATE, argv)


if __name__ == "__main__":
    sys.exit(main_upload())
