"""Catalog fetcher for the storage backend's file listing endpoint."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .config import GallerySettings
from .errors import CatalogFetchError, ConfigurationError, EmptyCatalogError, HttpError
from .http import http_client
from .logging import get_logger
from .models import DriveFile, FileListResponse, Offer

LOGGER = get_logger(__name__)

LIST_FIELDS = "files(id,name,mimeType)"


def build_list_params(settings: GallerySettings) -> Dict[str, Any]:
    """Query parameters for listing images directly inside the configured folder."""

    query = (
        f"'{settings.folder_id}' in parents"
        " and mimeType contains 'image/'"
        " and trashed = false"
    )
    return {
        "q": query,
        "key": settings.api_key,
        "fields": LIST_FIELDS,
        "pageSize": settings.page_size,
    }


def parse_offers(payload: Any) -> List[Offer]:
    """Map a listing payload to offers, preserving backend order."""

    try:
        listing = FileListResponse.model_validate(payload)
    except ValidationError as exc:
        raise CatalogFetchError(f"Malformed listing payload: {exc}") from exc

    if not listing.files:
        raise EmptyCatalogError()

    offers: List[Offer] = []
    for raw in listing.files:
        try:
            file = DriveFile.model_validate(raw)
        except ValidationError:
            LOGGER.warning("catalog.entry_skipped", entry=raw)
            continue
        offers.append(Offer.from_file(file))

    if not offers:
        raise EmptyCatalogError()
    return offers


class CatalogFetcher:
    """Load the offer catalog from the storage backend.

    A single GET is issued per ``load()``; nothing is cached between calls.
    """

    def __init__(
        self,
        settings: GallerySettings,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            settings: Gallery settings carrying credentials and endpoint
            client: Pre-built HTTP client (tests); a short-lived one is opened otherwise
        """
        self.settings = settings
        self._client = client

    def check_configuration(self) -> None:
        missing = self.settings.missing_credentials()
        if missing:
            raise ConfigurationError(missing)

    async def load(self) -> List[Offer]:
        """Fetch and map the catalog.

        Raises:
            ConfigurationError: credentials missing or placeholders (no request sent)
            HttpError: non-success status from the listing endpoint
            CatalogFetchError: transport failure or unreadable body
            EmptyCatalogError: the listing held no usable image entries
        """
        self.check_configuration()
        params = build_list_params(self.settings)
        LOGGER.info("catalog.load_started", folder_id=self.settings.folder_id)

        if self._client is not None:
            response = await self._get(self._client, params)
        else:
            async with http_client(timeout=self.settings.request_timeout) as client:
                response = await self._get(client, params)

        if not response.is_success:
            LOGGER.warning("catalog.load_failed", status=response.status_code)
            raise HttpError(response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogFetchError(f"Listing body is not JSON: {exc}") from exc

        offers = parse_offers(payload)
        LOGGER.info("catalog.load_succeeded", count=len(offers))
        return offers

    async def _get(self, client: httpx.AsyncClient, params: Dict[str, Any]) -> httpx.Response:
        try:
            return await client.get(self.settings.list_url, params=params)
        except httpx.RequestError as exc:
            LOGGER.error("catalog.request_error", error=str(exc))
            raise CatalogFetchError(str(exc)) from exc


__all__ = ["CatalogFetcher", "LIST_FIELDS", "build_list_params", "parse_offers"]
