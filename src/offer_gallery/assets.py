"""Full-size asset resolution with a primary → fallback → last-resort chain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

import httpx

from .config import GallerySettings
from .errors import AssetLoadError
from .http import http_client
from .logging import get_logger
from .models import Offer

LOGGER = get_logger(__name__)


class AssetTier(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    LAST_RESORT = "last_resort"


@dataclass(frozen=True)
class AssetResolution:
    """Outcome of resolving one offer's full-size image."""

    offer_id: str
    url: str
    tier: AssetTier

    @property
    def failed(self) -> bool:
        """Both tiers failed; ``url`` is the primary shown as a retry-able last resort."""

        return self.tier == AssetTier.LAST_RESORT


class ImageLoader(Protocol):
    async def load(self, url: str) -> str:
        """Return ``url`` once it serves an image, else raise AssetLoadError."""


class ImageProbe:
    """Load an image URL far enough to know it serves image bytes.

    Success is a 2xx status with an ``image/*`` content type; the body is not
    downloaded.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
        self._client = client
        self.timeout = timeout

    async def load(self, url: str) -> str:
        if self._client is not None:
            return await self._probe(self._client, url)
        async with http_client(timeout=self.timeout, accept="image/*") as client:
            return await self._probe(client, url)

    @staticmethod
    async def _probe(client: httpx.AsyncClient, url: str) -> str:
        try:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise AssetLoadError(url, f"HTTP {response.status_code}")
                content_type = response.headers.get("content-type", "")
                if not content_type.lower().startswith("image/"):
                    raise AssetLoadError(url, f"not an image ({content_type or 'no content type'})")
        except httpx.HTTPError as exc:
            raise AssetLoadError(url, str(exc) or exc.__class__.__name__) from exc
        return url


class AssetResolver:
    """Pick the URL the modal should display for an offer."""

    def __init__(self, settings: GallerySettings, loader: ImageLoader) -> None:
        self.settings = settings
        self.loader = loader

    def primary_url(self, offer: Offer) -> str:
        return self.settings.view_url(offer.image_id)

    def fallback_url(self, offer: Offer) -> str:
        return self.settings.fallback_view_url(offer.image_id)

    async def resolve(self, offer: Offer) -> AssetResolution:
        primary = self.primary_url(offer)
        try:
            await self.loader.load(primary)
            return AssetResolution(offer.id, primary, AssetTier.PRIMARY)
        except AssetLoadError as exc:
            LOGGER.info("asset.primary_failed", offer_id=offer.id, reason=exc.reason)

        fallback = self.fallback_url(offer)
        try:
            await self.loader.load(fallback)
            return AssetResolution(offer.id, fallback, AssetTier.FALLBACK)
        except AssetLoadError as exc:
            LOGGER.warning("asset.fallback_failed", offer_id=offer.id, reason=exc.reason)

        return AssetResolution(offer.id, primary, AssetTier.LAST_RESORT)


__all__ = ["AssetResolution", "AssetResolver", "AssetTier", "ImageLoader", "ImageProbe"]
