"""Filter catalog and editing state for the Instafilter screen."""

from .editor import EditorSession, NoImageError
from .filters import (
    FILTERS,
    PhotoFilter,
    UnknownFilterError,
    apply_intensity,
    available_filters,
    create_filter,
    validate_intensity,
)
from .imaging import InvalidImageError, encode_image, normalize_image, open_image

__all__ = [
    "EditorSession",
    "NoImageError",
    "FILTERS",
    "PhotoFilter",
    "UnknownFilterError",
    "apply_intensity",
    "available_filters",
    "create_filter",
    "validate_intensity",
    "InvalidImageError",
    "encode_image",
    "normalize_image",
    "open_image",
]
