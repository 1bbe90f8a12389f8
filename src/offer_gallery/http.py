"""Standard HTTP client helpers for the storage backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx

USER_AGENT = "OfferGallery/0.1"


def _build_headers(accept: Optional[str]) -> Dict[str, str]:
    headers: Dict[str, str] = {"User-Agent": USER_AGENT}
    if accept:
        headers["Accept"] = accept
    return headers


@asynccontextmanager
async def http_client(
    base_url: str = "",
    timeout: float = 30.0,
    accept: Optional[str] = "application/json",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Provide a configured async HTTP client."""

    headers = _build_headers(accept)
    async with httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers=headers,
        follow_redirects=True,
        transport=transport,
    ) as client:
        yield client


__all__ = ["USER_AGENT", "http_client"]
