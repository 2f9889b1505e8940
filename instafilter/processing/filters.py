from __future__ import annotations

import logging
import math
from typing import Dict, List, Tuple, Type

from PIL import Image, ImageEnhance, ImageFilter

INTENSITY_KEY = "intensity"
RADIUS_KEY = "radius"
SCALE_KEY = "scale"

# Slider position (0..1) to parameter value.
RADIUS_PER_INTENSITY = 200.0
SCALE_PER_INTENSITY = 10.0

_EDGE_GAIN = 4.0

# Longest side of the grid the vignette weights are computed on.
_VIGNETTE_GRID = 256

_SEPIA_MATRIX = (
    0.393, 0.769, 0.189, 0,
    0.349, 0.686, 0.168, 0,
    0.272, 0.534, 0.131, 0,
)

LOGGER = logging.getLogger("instafilter.filters")


class UnknownFilterError(ValueError):
    """Raised when a filter name is not part of the catalog."""


class PhotoFilter:
    """A built-in filter with a small set of tunable input keys.

    Subclasses declare ``name``, ``title`` and ``defaults`` and implement
    ``_render`` on an RGB image.
    """

    name = ""
    title = ""
    defaults: Dict[str, float] = {}

    def __init__(self) -> None:
        self.parameters: Dict[str, float] = dict(self.defaults)

    @property
    def input_keys(self) -> Tuple[str, ...]:
        return tuple(self.parameters)

    def set_value(self, key: str, value: float) -> None:
        if key not in self.parameters:
            raise KeyError(f"{self.name} has no input key {key!r}")
        self.parameters[key] = float(value)

    def apply(self, img: Image.Image) -> Image.Image:
        src = img if img.mode == "RGB" else img.convert("RGB")
        return self._render(src)

    def _render(self, img: Image.Image) -> Image.Image:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.parameters!r})"


class EdgesFilter(PhotoFilter):
    name = "edges"
    title = "Edges"
    defaults = {INTENSITY_KEY: 1.0}

    def _render(self, img: Image.Image) -> Image.Image:
        edges = img.filter(ImageFilter.FIND_EDGES)
        gain = max(0.0, self.parameters[INTENSITY_KEY]) * _EDGE_GAIN
        return ImageEnhance.Brightness(edges).enhance(gain)


class GaussianBlurFilter(PhotoFilter):
    name = "gaussian_blur"
    title = "Gaussian Blur"
    defaults = {RADIUS_KEY: 10.0}

    def _render(self, img: Image.Image) -> Image.Image:
        radius = max(0.0, self.parameters[RADIUS_KEY])
        if radius == 0:
            return img.copy()
        return img.filter(ImageFilter.GaussianBlur(radius))


class PixellateFilter(PhotoFilter):
    name = "pixellate"
    title = "Pixellate"
    defaults = {SCALE_KEY: 8.0}

    def _render(self, img: Image.Image) -> Image.Image:
        block = int(round(self.parameters[SCALE_KEY]))
        if block <= 1:
            return img.copy()
        width, height = img.size
        small = img.resize(
            (max(1, math.ceil(width / block)), max(1, math.ceil(height / block))),
            Image.Resampling.BOX,
        )
        blocks = small.resize((small.width * block, small.height * block), Image.Resampling.NEAREST)
        return blocks.crop((0, 0, width, height))


class SepiaToneFilter(PhotoFilter):
    name = "sepia_tone"
    title = "Sepia Tone"
    defaults = {INTENSITY_KEY: 1.0}

    def _render(self, img: Image.Image) -> Image.Image:
        amount = min(1.0, max(0.0, self.parameters[INTENSITY_KEY]))
        toned = img.convert("RGB", _SEPIA_MATRIX)
        return Image.blend(img, toned, amount)


class UnsharpMaskFilter(PhotoFilter):
    name = "unsharp_mask"
    title = "Unsharp Mask"
    defaults = {RADIUS_KEY: 2.5, INTENSITY_KEY: 0.5}

    def _render(self, img: Image.Image) -> Image.Image:
        radius = self.parameters[RADIUS_KEY]
        percent = int(round(self.parameters[INTENSITY_KEY] * 100))
        if radius <= 0 or percent <= 0:
            return img.copy()
        return img.filter(ImageFilter.UnsharpMask(radius=radius, percent=percent, threshold=0))


class VignetteFilter(PhotoFilter):
    """Darkens (or, with negative intensity, lightens) outside a clear disc.

    ``radius`` is the radius in pixels of the untouched centre; the effect
    ramps up quadratically from there to the corners.
    """

    name = "vignette"
    title = "Vignette"
    defaults = {RADIUS_KEY: 1.0, INTENSITY_KEY: 0.0}

    def _render(self, img: Image.Image) -> Image.Image:
        strength = min(1.0, max(-1.0, self.parameters[INTENSITY_KEY]))
        if strength == 0:
            return img.copy()

        width, height = img.size
        half_diagonal = math.hypot(width, height) / 2
        inner = min(1.0, max(0.0, self.parameters[RADIUS_KEY]) / half_diagonal)
        if inner >= 1.0:
            return img.copy()

        mask = _vignette_mask(width, height, inner, abs(strength))
        tone = (0, 0, 0) if strength > 0 else (255, 255, 255)
        return Image.composite(Image.new("RGB", img.size, tone), img, mask)


def _vignette_mask(width: int, height: int, inner: float, strength: float) -> Image.Image:
    """Mask of the vignette weight, computed on a coarse grid and upscaled.

    Distance is measured from the image centre in full-size pixels and
    normalised so the corners sit at 1.0.
    """
    step = max(1.0, max(width, height) / _VIGNETTE_GRID)
    grid_w = max(1, math.ceil(width / step))
    grid_h = max(1, math.ceil(height / step))
    centre_x = width / 2
    centre_y = height / 2
    half_diagonal = math.hypot(width, height) / 2

    weights = []
    for gy in range(grid_h):
        dy = (gy + 0.5) * height / grid_h - centre_y
        for gx in range(grid_w):
            dx = (gx + 0.5) * width / grid_w - centre_x
            distance = math.hypot(dx, dy) / half_diagonal
            if distance <= inner:
                weights.append(0)
                continue
            ramp = min(1.0, (distance - inner) / (1.0 - inner))
            weights.append(min(255, int(strength * ramp * ramp * 255 + 0.5)))

    mask = Image.new("L", (grid_w, grid_h))
    mask.putdata(weights)
    if (grid_w, grid_h) != (width, height):
        mask = mask.resize((width, height), Image.Resampling.BILINEAR)
    return mask


_CATALOG: Tuple[Type[PhotoFilter], ...] = (
    EdgesFilter,
    GaussianBlurFilter,
    PixellateFilter,
    SepiaToneFilter,
    UnsharpMaskFilter,
    VignetteFilter,
)
FILTERS: Dict[str, Type[PhotoFilter]] = {cls.name: cls for cls in _CATALOG}


def available_filters() -> List[Dict[str, object]]:
    return [
        {"name": cls.name, "title": cls.title, "input_keys": list(cls.defaults)}
        for cls in _CATALOG
    ]


def create_filter(name: str) -> PhotoFilter:
    try:
        cls = FILTERS[name]
    except KeyError:
        raise UnknownFilterError(f"Unknown filter: {name}") from None
    return cls()


def validate_intensity(intensity: float) -> float:
    try:
        value = float(intensity)
    except (TypeError, ValueError):
        raise ValueError(f"Intensity must be a number, got {intensity!r}") from None
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"Intensity must be between 0 and 1, got {intensity!r}")
    return value


def apply_intensity(photo_filter: PhotoFilter, intensity: float) -> PhotoFilter:
    """Push the slider position into whichever keys the filter accepts."""
    value = validate_intensity(intensity)
    keys = photo_filter.input_keys
    if INTENSITY_KEY in keys:
        photo_filter.set_value(INTENSITY_KEY, value)
    if RADIUS_KEY in keys:
        photo_filter.set_value(RADIUS_KEY, value * RADIUS_PER_INTENSITY)
    if SCALE_KEY in keys:
        photo_filter.set_value(SCALE_KEY, value * SCALE_PER_INTENSITY)
    LOGGER.debug("%s parameters now %s", photo_filter.name, photo_filter.parameters)
    return photo_filter
