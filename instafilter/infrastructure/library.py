from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import List

from PIL import Image

from ..config import SETTINGS, EditorSettings
from ..processing.imaging import InvalidImageError, encode_image, open_image

LOGGER = logging.getLogger("instafilter.library")

_EXTENSIONS = {"PNG": ".png", "JPEG": ".jpg", "JPG": ".jpg"}
_READABLE = (".png", ".jpg", ".jpeg")


class LibraryError(RuntimeError):
    """Raised when the photo library cannot be read or written."""


class PhotoLibrary:
    """A directory of saved pictures standing in for the device photo album."""

    def __init__(self, directory: str | os.PathLike | None = None, settings: EditorSettings = SETTINGS) -> None:
        self.directory = Path(directory or settings.library_dir).resolve()
        self._format = settings.save_format.upper()
        if self._format not in _EXTENSIONS:
            raise ValueError(f"Unsupported save format: {settings.save_format}")
        self._quality = settings.jpeg_quality

    def save(self, img: Image.Image) -> str:
        name = f"instafilter-{time.strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}{_EXTENSIONS[self._format]}"
        data = encode_image(img, self._format, quality=self._quality)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / name).write_bytes(data)
        except OSError as exc:
            raise LibraryError(f"Could not save picture: {exc.strerror or exc}") from exc
        LOGGER.info("Saved %s (%d bytes)", name, len(data))
        return name

    def list(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        try:
            entries = [
                entry for entry in self.directory.iterdir()
                if entry.is_file() and entry.suffix.lower() in _READABLE
            ]
        except OSError as exc:
            raise LibraryError(f"Could not read library: {exc.strerror or exc}") from exc
        entries.sort(key=lambda entry: (entry.stat().st_mtime, entry.name), reverse=True)
        return [entry.name for entry in entries]

    def path_for(self, name: str) -> Path:
        if not name or name != Path(name).name or name.startswith("."):
            raise LibraryError(f"Invalid picture name: {name!r}")
        path = self.directory / name
        if not path.is_file():
            raise LibraryError(f"No such picture: {name}")
        return path

    def load(self, name: str) -> Image.Image:
        path = self.path_for(name)
        try:
            return open_image(path.read_bytes())
        except OSError as exc:
            raise LibraryError(f"Could not read {name}: {exc.strerror or exc}") from exc
        except InvalidImageError as exc:
            raise LibraryError(str(exc)) from exc
