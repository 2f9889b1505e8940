import logging
import os
import secrets
from dataclasses import dataclass


@dataclass(frozen=True)
class EditorSettings:
    port: int
    library_dir: str
    save_format: str
    jpeg_quality: int
    default_filter: str
    default_intensity: float
    max_image_side: int
    max_upload_mb: int
    timeout: float
    retries: int
    session_ttl: float
    max_sessions: int
    secret_key: str
    log_level: str

    @classmethod
    def from_env(cls) -> "EditorSettings":
        return cls(
            port=int(os.getenv("PORT", "5500")),
            library_dir=os.getenv("LIBRARY_DIR", os.path.join(os.getcwd(), "library")),
            save_format=os.getenv("SAVE_FORMAT", "PNG").upper(),
            jpeg_quality=int(os.getenv("JPEG_QUALITY", "92")),
            default_filter=os.getenv("DEFAULT_FILTER", "sepia_tone").lower(),
            default_intensity=float(os.getenv("DEFAULT_INTENSITY", "0.5")),
            max_image_side=int(os.getenv("MAX_IMAGE_SIDE", "2048")),
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "20")),
            timeout=float(os.getenv("SOURCE_TIMEOUT", "10.0")),
            retries=int(os.getenv("SOURCE_RETRIES", "2")),
            session_ttl=float(os.getenv("SESSION_TTL", "3600")),
            max_sessions=int(os.getenv("MAX_SESSIONS", "16")),
            secret_key=os.getenv("SECRET_KEY") or secrets.token_hex(16),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


SETTINGS = EditorSettings.from_env()


def configure_logging(settings: EditorSettings = SETTINGS) -> logging.Logger:
    logging.basicConfig(level=settings.log_level)
    return logging.getLogger("instafilter")
