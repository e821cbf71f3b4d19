# -*- coding: utf-8 -*-
"""
Site configuration
- Single site: WP_SITE, WP_USER, WP_APP_PASSWORD, DEFAULT_STATUS, REQUEST_DELAY_MS
- Multiple sites: CLIENTS_CONFIG (JSON object keyed by site id)
- Network: NET_TIMEOUT(30), NET_RETRIES(3), WP_API_ROOT(wp-json/wp/v2)

.env:
  WP_SITE=https://example.com
  WP_USER=editor
  WP_APP_PASSWORD=xxxx xxxx xxxx xxxx
  CLIENTS_CONFIG={"acme": {"name": "Acme", "wp_site": "https://acme.test", "wp_user": "u", "wp_app_password": "p"}}
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SITE_KEY = "default"
DEFAULT_API_ROOT = "wp-json/wp/v2"


@dataclass(frozen=True)
class SiteConfig:
    key: str
    name: str
    wp_site: str
    wp_user: str
    wp_app_password: str
    default_status: str = "draft"
    request_delay_ms: int = 300
    api_root: str = DEFAULT_API_ROOT
    timeout: int = 30
    retries: int = 3

    @property
    def api_base(self) -> str:
        return f"{self.wp_site}/{self.api_root.strip('/')}"

    @property
    def request_delay(self) -> float:
        return max(self.request_delay_ms, 0) / 1000.0

    def public_info(self) -> Dict[str, str]:
        return {"id": self.key, "name": self.name, "wp_site": self.wp_site}


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _site_from_mapping(key: str, raw: Mapping[str, Any], env: Mapping[str, str]) -> SiteConfig:
    return SiteConfig(
        key=key,
        name=str(raw.get("name") or key),
        wp_site=str(raw.get("wp_site") or "").strip().rstrip("/"),
        wp_user=str(raw.get("wp_user") or ""),
        wp_app_password=str(raw.get("wp_app_password") or ""),
        default_status=str(raw.get("default_status") or "draft"),
        request_delay_ms=_int(raw.get("request_delay_ms"), 300),
        api_root=env.get("WP_API_ROOT") or DEFAULT_API_ROOT,
        timeout=_int(env.get("NET_TIMEOUT"), 30),
        retries=_int(env.get("NET_RETRIES"), 3),
    )


def load_sites(env: Optional[Mapping[str, str]] = None) -> Dict[str, SiteConfig]:
    """Every configured site, in declaration order. Reads .env when `env` is not given."""
    if env is None:
        load_dotenv(override=False)
        env = os.environ

    sites: Dict[str, SiteConfig] = {}
    clients_raw = (env.get("CLIENTS_CONFIG") or "").strip()
    if clients_raw:
        try:
            parsed = json.loads(clients_raw)
            if not isinstance(parsed, dict):
                raise ValueError("CLIENTS_CONFIG must be a JSON object")
            for key, raw in parsed.items():
                if isinstance(raw, dict):
                    sites[str(key)] = _site_from_mapping(str(key), raw, env)
        except ValueError as e:
            logger.warning("Failed to parse CLIENTS_CONFIG, using single-site settings: %s", e)
            sites = {}

    if not sites and env.get("WP_SITE"):
        sites[DEFAULT_SITE_KEY] = _site_from_mapping(
            DEFAULT_SITE_KEY,
            {
                "name": env.get("WP_SITE_NAME") or "WordPress Site",
                "wp_site": env.get("WP_SITE"),
                "wp_user": env.get("WP_USER"),
                "wp_app_password": env.get("WP_APP_PASSWORD"),
                "default_status": env.get("DEFAULT_STATUS"),
                "request_delay_ms": env.get("REQUEST_DELAY_MS"),
            },
            env,
        )
    return sites


def select_site(sites: Mapping[str, SiteConfig], key: Optional[str] = None) -> SiteConfig:
    """Pick a site by key (first one when no key). Credentials must be complete."""
    if not sites:
        raise ConfigError("Missing required configuration: WP_SITE, WP_USER, WP_APP_PASSWORD (or CLIENTS_CONFIG)")
    if key:
        site = sites.get(key)
        if site is None:
            raise ConfigError(f"Unknown site '{key}'. Available: {', '.join(sites)}")
    else:
        site = next(iter(sites.values()))
    missing = [n for n, v in (("wp_site", site.wp_site), ("wp_user", site.wp_user),
                              ("wp_app_password", site.wp_app_password)) if not v]
    if missing:
        raise ConfigError(f"Site '{site.key}' is missing: {', '.join(missing)}")
    return site


def list_sites(sites: Mapping[str, SiteConfig]) -> List[Dict[str, str]]:
    return [s.public_info() for s in sites.values()]


def default_csv_path(env: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if env is None else env
    return env.get("CSV_PATH") or "posts.csv"


def log_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    """Where the JSON log and debug log go. Serverless hosts only allow /tmp."""
    env = os.environ if env is None else env
    if env.get("LOG_DIR"):
        return Path(env["LOG_DIR"])
    if env.get("VERCEL") or env.get("VERCEL_ENV"):
        return Path("/tmp")
    return Path.cwd()
