"""
Best-effort check for a newer gitp release on the package index.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Optional

import requests


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PYPI_URL = "https://pypi.org/pypi/{package}/json"
DISABLE_ENV_VAR = "GITP_NO_UPDATE_CHECK"

_RELEASE_RE = re.compile(r"\d+(?:\.\d+)*")


def fetch_latest_version(package: str = "gitp", timeout: float = 2.0) -> Optional[str]:
    """Return the latest released version of ``package``, or ``None``.

    Returns ``None`` without a request when ``GITP_NO_UPDATE_CHECK`` is
    set, and when the index cannot be reached or answers unexpectedly.
    """
    if os.environ.get(DISABLE_ENV_VAR):
        return None
    url = PYPI_URL.format(package=package)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()["info"]["version"]
    except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
        logger.debug("Error fetching latest version: %s", exc)
        return None


def is_newer(latest: Optional[str], current: str) -> bool:
    """Return True if ``latest`` is a higher dotted version than ``current``."""
    if not latest or latest == current:
        return False
    return _version_key(latest) > _version_key(current)


def _version_key(version: str):
    # Only the leading release segment counts; "rc1", "b2", ".dev0" are ignored.
    match = _RELEASE_RE.match(version.strip())
    if not match:
        return ()
    return tuple(int(piece) for piece in match.group().split("."))
