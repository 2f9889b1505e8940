from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Dict, Optional

from PIL import Image

from ..config import SETTINGS, EditorSettings
from .filters import PhotoFilter, apply_intensity, create_filter, validate_intensity
from .imaging import normalize_image

if TYPE_CHECKING:  # pragma: no cover
    from ..infrastructure.library import PhotoLibrary

LOGGER = logging.getLogger("instafilter.editor")


class NoImageError(RuntimeError):
    """Raised when an operation needs a picture but none has been picked."""


class EditorSession:
    """State behind the single editing screen.

    Holds the picked photo, the selected filter object and the slider
    position. Every change re-renders ``processed_image``.
    """

    def __init__(self, settings: EditorSettings = SETTINGS) -> None:
        self._settings = settings
        self._lock = threading.RLock()
        self.input_image: Optional[Image.Image] = None
        self.processed_image: Optional[Image.Image] = None
        self.intensity = validate_intensity(settings.default_intensity)
        self.current_filter: PhotoFilter = apply_intensity(
            create_filter(settings.default_filter), self.intensity
        )

    @property
    def has_image(self) -> bool:
        return self.input_image is not None

    def load_image(self, img: Image.Image) -> None:
        prepared = normalize_image(img, self._settings.max_image_side)
        with self._lock:
            self.input_image = prepared
            LOGGER.info("Loaded %dx%d picture", *prepared.size)
            self.apply_processing()

    def set_intensity(self, intensity: float) -> None:
        value = validate_intensity(intensity)
        with self._lock:
            self.intensity = value
            apply_intensity(self.current_filter, value)
            self.apply_processing()

    def set_filter(self, name: str) -> None:
        replacement = create_filter(name)
        with self._lock:
            self.current_filter = apply_intensity(replacement, self.intensity)
            LOGGER.info("Switched filter to %s", name)
            self.apply_processing()

    def apply_processing(self) -> None:
        with self._lock:
            if self.input_image is None:
                return
            started = time.perf_counter()
            self.processed_image = self.current_filter.apply(self.input_image)
            LOGGER.debug(
                "Rendered %s in %.1f ms",
                self.current_filter.name,
                (time.perf_counter() - started) * 1000,
            )

    def save(self, library: "PhotoLibrary") -> str:
        with self._lock:
            if self.processed_image is None:
                raise NoImageError("Pick a picture before saving")
            snapshot = self.processed_image.copy()
        return library.save(snapshot)

    def state(self) -> Dict[str, object]:
        with self._lock:
            size = list(self.input_image.size) if self.input_image is not None else None
            return {
                "has_image": self.has_image,
                "filter": self.current_filter.name,
                "title": self.current_filter.title,
                "intensity": self.intensity,
                "parameters": dict(self.current_filter.parameters),
                "size": size,
            }
