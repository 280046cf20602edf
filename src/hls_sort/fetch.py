from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import requests
import yaml

from .errors import FetchError, InvalidLocation, PlaylistIOError
from .models import MasterPlaylist
from .parse_m3u8 import parse_playlist


@dataclass
class FetchSettings:
    timeout_secs: int = 20
    retries: int = 3
    backoff: float = 1.5
    headers: Dict[str, str] = field(default_factory=dict)


def _load_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(config_path: Path) -> FetchSettings:
    """
    Read fetch settings from the `fetch:` section of a YAML file:

        fetch:
          timeout_secs: 10
          retries: 2
          backoff: 2.0
          headers:
            User-Agent: hls-sort
    """
    try:
        raw = _load_yaml(config_path)
    except (OSError, yaml.YAMLError) as e:
        raise PlaylistIOError(str(config_path), str(e)) from e
    fetch = raw.get("fetch", {}) or {}
    return FetchSettings(
        timeout_secs=int(fetch.get("timeout_secs", 20)),
        retries=int(fetch.get("retries", 3)),
        backoff=float(fetch.get("backoff", 1.5)),
        headers={str(k): str(v) for k, v in (fetch.get("headers") or {}).items()},
    )


def is_url(location: str) -> bool:
    return location.startswith("http://") or location.startswith("https://")


def fetch_url(url: str, settings: FetchSettings, logger: logging.Logger) -> str:
    attempt = 0
    last_error = "fetch failed"
    while attempt <= settings.retries:
        try:
            resp = requests.get(url, headers=settings.headers, timeout=settings.timeout_secs)
            if 200 <= resp.status_code < 300:
                logger.info("200 OK (%s bytes): %s", len(resp.content), url)
                return resp.content.decode("utf-8-sig", errors="replace")
            last_error = f"HTTP {resp.status_code}"
            logger.warning("HTTP %s for %s", resp.status_code, url)

        except requests.RequestException as e:
            last_error = str(e)
            logger.warning("Network error on %s (attempt %d/%d): %s", url, attempt + 1, settings.retries + 1, e)

        attempt += 1
        if attempt <= settings.retries:
            time.sleep(settings.backoff ** attempt)

    logger.error("Fetch failed for %s. Last error: %s", url, last_error)
    raise FetchError(url, last_error)


def read_file(path: Path, logger: logging.Logger) -> str:
    try:
        with path.open("r", encoding="utf-8-sig") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PlaylistIOError(str(path), str(e)) from e
    logger.info("Read %d characters from %s", len(content), path)
    return content


def fetch_content(location: str, settings: FetchSettings, logger: logging.Logger) -> str:
    """
    Return the playlist text at `location`: an http(s) URL, or a local file path.
    """
    if is_url(location):
        logger.info("Fetching from URL: %s", location)
        return fetch_url(location, settings, logger)

    path = Path(location)
    if path.exists():
        logger.info("Reading from local file: %s", location)
        return read_file(path, logger)

    logger.error("Invalid location: %s", location)
    raise InvalidLocation(location)


def fetch_playlist(
    location: str,
    settings: Optional[FetchSettings] = None,
    logger: Optional[logging.Logger] = None,
) -> MasterPlaylist:
    logger = logger or logging.getLogger("hls_sort.fetch")
    content = fetch_content(location, settings or FetchSettings(), logger)
    return parse_playlist(content)
