"""Shared fixtures for gallery tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from offer_gallery.config import GallerySettings  # noqa: E402
from offer_gallery.errors import AssetLoadError, GalleryError  # noqa: E402
from offer_gallery.models import Offer, derive_offer_name  # noqa: E402


def make_offers(names: Sequence[str]) -> List[Offer]:
    return [
        Offer(id=f"id-{i}", name=derive_offer_name(name), image_id=f"id-{i}", original_name=name)
        for i, name in enumerate(names)
    ]


class GatedLoader:
    """Image loader double: fails listed URLs, optionally blocks until released."""

    def __init__(self, failing: Iterable[str] = ()) -> None:
        self.failing = set(failing)
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    def gate(self, url: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[url] = event
        return event

    async def load(self, url: str) -> str:
        self.calls.append(url)
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        if url in self.failing:
            raise AssetLoadError(url, "HTTP 404")
        return url


class FakeFetcher:
    """Catalog fetcher double returning fixed offers or raising an error."""

    def __init__(self, offers: Optional[Sequence[Offer]] = None, error: Optional[GalleryError] = None):
        self.offers = list(offers or [])
        self.error = error
        self.calls = 0

    async def load(self) -> List[Offer]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.offers)


@pytest.fixture
def settings() -> GallerySettings:
    return GallerySettings(
        _env_file=None,
        api_key="test-key",
        folder_id="folder-123",
        search_debounce_seconds=0.01,
    )


@pytest.fixture
def sample_offers() -> List[Offer]:
    return make_offers(["Summer Program 2026.jpg", "Fall STEM.png", "summer coding.gif"])


@pytest.fixture
def six_offers() -> List[Offer]:
    return make_offers([f"Offer {i}.jpg" for i in range(6)])
