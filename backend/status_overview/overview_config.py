"""Overview link configuration backed by JSON on disk."""

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from threading import Lock
from typing import Optional
from urllib.parse import urlsplit

from status_overview.models import OverviewConfig

logger = logging.getLogger("status_overview.overview_config")

INVALID_LINK_MESSAGE = "The URL you've specified is invalid! Please specify a correct URL."

_WHITESPACE = re.compile(r"\s")


def is_valid_url(url: Optional[str]) -> bool:
    if not url or _WHITESPACE.search(url):
        return False
    try:
        parsed = urlsplit(url)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_acceptable_link(url: str) -> bool:
    """An empty link clears the setting and is always accepted."""
    return url == "" or is_valid_url(url)


def link_root(url: str) -> str:
    """Return ``scheme://authority`` of *url*, or ``""`` unless it is a valid link."""
    if not is_valid_url(url):
        return ""
    parsed = urlsplit(url)
    return f"{parsed.scheme}://{parsed.netloc}"


class InvalidOverviewLinkError(ValueError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(INVALID_LINK_MESSAGE)


class OverviewConfigStore:
    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = Lock()

    def _read_link_unlocked(self) -> str:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("Invalid overview config format")
        value = payload.get("overviewLink")
        return value.strip() if isinstance(value, str) else ""

    def _write_link_unlocked(self, url: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps({"overviewLink": url}, indent=2) + "\n"
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f"{self.path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)
        tmp_path.replace(self.path)

    def overview_link(self) -> str:
        with self._lock:
            return self._read_link_unlocked()

    def link_root(self) -> str:
        """Allowed CORS origin; an unreadable or invalid file allows none."""
        try:
            url = self.overview_link()
        except (OSError, ValueError) as exc:
            logger.warning(
                "Overview config %s is unreadable (%s); serving without CORS origin",
                self.path,
                exc.__class__.__name__,
            )
            return ""
        root = link_root(url)
        if url and not root:
            logger.warning("Stored overview link is not a valid URL; serving without CORS origin")
        return root

    def get(self) -> OverviewConfig:
        url = self.overview_link()
        return OverviewConfig(overview_link=url, link_root=link_root(url))

    def set_overview_link(self, url: Optional[str]) -> OverviewConfig:
        cleaned = url or ""
        if not is_acceptable_link(cleaned):
            raise InvalidOverviewLinkError(cleaned)
        with self._lock:
            self._write_link_unlocked(cleaned)
        logger.info("Overview link updated (root=%s)", link_root(cleaned) or "<none>")
        return OverviewConfig(overview_link=cleaned, link_root=link_root(cleaned))
