from __future__ import annotations

import logging
import time
from typing import Callable
from urllib.parse import urlsplit

import requests
from PIL import Image

from ..config import SETTINGS, EditorSettings
from ..processing.imaging import open_image


SessionFactory = Callable[[], requests.Session]

LOGGER = logging.getLogger("instafilter.network")

_CHUNK_SIZE = 64 * 1024


class FetchError(RuntimeError):
    """Raised once every attempt to download a picture has failed."""


class DownloadTooLargeError(FetchError):
    """Raised when a remote picture exceeds the upload size limit."""


def validate_image_url(url: str) -> str:
    parts = urlsplit(url or "")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"Not an http(s) URL: {url!r}")
    return url


class ImageFetcher:
    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        settings: EditorSettings = SETTINGS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session_factory = session_factory or requests.Session
        self._settings = settings
        self._sleep = sleep
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "instafilter/1.0"})
        return session

    def fetch(self, url: str) -> Image.Image:
        target_url = validate_image_url(url)
        last_exception: Exception | None = None
        for attempt in range(1, self._settings.retries + 2):
            try:
                return open_image(self._download(target_url))
            except DownloadTooLargeError:
                raise
            except Exception as exc:
                last_exception = exc
                LOGGER.warning("Fetching %s failed (attempt %d): %s", target_url, attempt, exc)
                if attempt <= self._settings.retries:
                    self._sleep(0.4 * attempt)
        raise FetchError(f"Could not download {target_url}: {last_exception}")

    def _download(self, url: str) -> bytes:
        limit = self._settings.max_upload_mb * 1024 * 1024
        response = self._session.get(url, timeout=self._settings.timeout, stream=True)
        try:
            response.raise_for_status()
            declared = response.headers.get("Content-Length")
            if declared and declared.isdigit() and int(declared) > limit:
                raise DownloadTooLargeError(self._too_large_message(url))
            received = bytearray()
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                received.extend(chunk)
                if len(received) > limit:
                    raise DownloadTooLargeError(self._too_large_message(url))
            return bytes(received)
        finally:
            response.close()

    def _too_large_message(self, url: str) -> str:
        return f"{url} is larger than {self._settings.max_upload_mb} MB"
