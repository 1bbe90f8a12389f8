"""Gallery configuration management using Pydantic settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Values shipped in the sample configuration; treated as "not configured".
API_KEY_PLACEHOLDER = "YOUR_API_KEY_HERE"
FOLDER_ID_PLACEHOLDER = "YOUR_FOLDER_ID_HERE"
PLACEHOLDER_VALUES = frozenset({API_KEY_PLACEHOLDER, FOLDER_ID_PLACEHOLDER})


def is_placeholder(value: Optional[str]) -> bool:
    """Return True when a credential is missing or still a sample placeholder."""

    if value is None:
        return True
    stripped = value.strip()
    return not stripped or stripped in PLACEHOLDER_VALUES


class GallerySettings(BaseSettings):
    """Settings for the gallery session and its surfaces.

    Environment variables use the ``GALLERY_`` prefix, e.g. ``GALLERY_API_KEY``.
    """

    model_config = SettingsConfigDict(env_prefix="GALLERY_", env_file=".env", extra="ignore")

    site_name: str = "Offer Gallery"
    log_level: str = "INFO"

    # Storage backend (Google Drive v3)
    api_key: str = API_KEY_PLACEHOLDER
    folder_id: str = FOLDER_ID_PLACEHOLDER
    list_url: str = "https://www.googleapis.com/drive/v3/files"
    page_size: int = 1000
    request_timeout: float = 30.0

    # Asset URL templates; the image id is appended, then the size suffix
    thumbnail_url_template: str = "https://drive.google.com/thumbnail?id="
    thumbnail_size_suffix: str = "&sz=w400"
    view_url_template: str = "https://drive.google.com/thumbnail?id="
    view_size_suffix: str = "&sz=w2000"
    fallback_view_url_template: str = "https://drive.google.com/uc?export=view&id="

    # Interaction tunables
    search_debounce_seconds: float = 0.3
    swipe_threshold_px: float = 50.0
    lazy_root_margin_px: float = 200.0
    lazy_loading_enabled: bool = True

    # HTTP surface
    host: str = "0.0.0.0"
    port: int = 8600
    session_cookie: str = "gallery_session"
    max_sessions: int = 256

    def thumbnail_url(self, image_id: str) -> str:
        return f"{self.thumbnail_url_template}{image_id}{self.thumbnail_size_suffix}"

    def view_url(self, image_id: str) -> str:
        return f"{self.view_url_template}{image_id}{self.view_size_suffix}"

    def fallback_view_url(self, image_id: str) -> str:
        return f"{self.fallback_view_url_template}{image_id}"

    def missing_credentials(self) -> list[str]:
        """Names of the settings that block a catalog load."""

        missing = []
        if is_placeholder(self.api_key):
            missing.append("api_key")
        if is_placeholder(self.folder_id):
            missing.append("folder_id")
        if is_placeholder(self.list_url):
            missing.append("list_url")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> GallerySettings:
    """Load and cache configuration for the current process."""

    return GallerySettings()  # type: ignore[arg-type]


__all__ = [
    "API_KEY_PLACEHOLDER",
    "FOLDER_ID_PLACEHOLDER",
    "GallerySettings",
    "get_settings",
    "is_placeholder",
]
