"""Error types raised by the catalog fetcher and asset resolver."""

from __future__ import annotations

from typing import Optional

SETUP_GUIDANCE = (
    "Share the storage folder as 'Anyone with the link can view', then set "
    "GALLERY_API_KEY and GALLERY_FOLDER_ID (an API key with the Drive API "
    "enabled, and the id taken from the folder link)."
)


class GalleryError(Exception):
    """Base class for failures surfaced to the gallery page."""

    kind = "error"
    title = "Unable to load offers"

    def __init__(self, message: str, guidance: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.guidance = guidance or SETUP_GUIDANCE


class ConfigurationError(GalleryError):
    """Credentials are missing or still the shipped placeholders."""

    kind = "configuration"
    title = "Gallery not configured"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        names = ", ".join(self.missing) or "configuration"
        super().__init__(f"Missing gallery settings: {names}.")


class HttpError(GalleryError):
    """The listing endpoint answered with a non-success status."""

    kind = "http"

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(
            f"Unable to load offers (HTTP {status}). Please check your API configuration."
        )


class CatalogFetchError(GalleryError):
    """The listing request could not be completed or its body was unreadable."""

    kind = "transport"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__("Unable to load offers. Please check your connection and API configuration.")


class EmptyCatalogError(GalleryError):
    """The listing succeeded but contained no image entries."""

    kind = "empty"
    title = "No offers found"

    def __init__(self) -> None:
        super().__init__(
            "No offers were found in the configured folder.",
            guidance="Upload images to the shared folder, or check that GALLERY_FOLDER_ID points at it.",
        )


class AssetLoadError(Exception):
    """A thumbnail or full-size image could not be loaded.

    Recovered locally (placeholder or fallback URL); never shown as a page error.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


__all__ = [
    "AssetLoadError",
    "CatalogFetchError",
    "ConfigurationError",
    "EmptyCatalogError",
    "GalleryError",
    "HttpError",
    "SETUP_GUIDANCE",
]
