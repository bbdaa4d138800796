from __future__ import annotations

import json
from typing import Optional
from urllib import error, request

from mitmconf import __version__
from mitmconf.log import get_logger

logger = get_logger("updates")

INDEX_URL = "https://pypi.org/pypi/mitmconf/json"


def _version_key(version: str) -> tuple:
    parts = []
    for part in version.split("."):
        digits = "".join(ch for ch in part if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def latest_version(url: str = INDEX_URL, timeout: float = 5.0) -> Optional[str]:
    req = request.Request(url, headers={"User-Agent": f"mitmconf/{__version__}"})
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            data = json.loads(resp.read().decode("utf-8"))
    except (error.URLError, OSError, ValueError) as e:
        logger.warning("update check failed: %s", e)
        return None
    return data.get("info", {}).get("version")


def check_updates(current: str = __version__, url: str = INDEX_URL) -> Optional[bool]:
    """Log whether a newer release exists. Returns None when the check failed."""
    logger.info("Checking for updates ...")
    latest = latest_version(url)
    if latest is None:
        return None
    if _version_key(latest) > _version_key(current):
        logger.warning("New version %s is available (running %s).", latest, current)
        return True
    logger.info("You are running the latest version (%s).", current)
    return False
