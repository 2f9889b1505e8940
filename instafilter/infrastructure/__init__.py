"""Infrastructure helpers for sessions, downloads, the photo library and responses."""

from .library import LibraryError, PhotoLibrary
from .network import DownloadTooLargeError, FetchError, ImageFetcher, validate_image_url
from .responses import error_response, send_png
from .sessions import SessionStore

__all__ = [
    "LibraryError",
    "PhotoLibrary",
    "DownloadTooLargeError",
    "FetchError",
    "ImageFetcher",
    "validate_image_url",
    "error_response",
    "send_png",
    "SessionStore",
]
