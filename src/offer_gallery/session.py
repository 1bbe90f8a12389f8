"""Gallery session controller.

One ``GallerySession`` owns the catalog and modal state for a page session
and is handed to every surface (HTTP routes, CLI) instead of module globals.
The HTTP surface keeps one session per visitor in a ``SessionRegistry``.
"""

from __future__ import annotations

import asyncio
import secrets
from collections import OrderedDict
from typing import List, Optional, Tuple

from .assets import AssetResolver, ImageLoader, ImageProbe
from .bindings import DispatchResult, InputDispatcher, InputEvent
from .catalog import Catalog
from .config import GallerySettings
from .errors import GalleryError
from .fetcher import CatalogFetcher
from .lazy import DeferredImageLoader
from .logging import get_logger
from .modal import ModalController
from .models import Offer, card_id_for
from .search import Debouncer
from .viewmodels import (
    GridViewModel,
    PageViewModel,
    build_error_panel,
    build_grid,
    build_modal,
)

LOGGER = get_logger(__name__)


class GallerySession:
    """Wire fetcher, filter, grid and modal together for one session."""

    def __init__(
        self,
        settings: GallerySettings,
        fetcher: Optional[CatalogFetcher] = None,
        image_loader: Optional[ImageLoader] = None,
        thumbnails: Optional[DeferredImageLoader] = None,
    ) -> None:
        self.settings = settings
        self.catalog = Catalog()
        self.fetcher = fetcher or CatalogFetcher(settings)
        loader = image_loader or ImageProbe(timeout=settings.request_timeout)
        self.modal = ModalController(self.catalog, AssetResolver(settings, loader))
        self.thumbnails = thumbnails or DeferredImageLoader(
            root_margin=settings.lazy_root_margin_px,
            supported=settings.lazy_loading_enabled,
        )
        self.debouncer = Debouncer(settings.search_debounce_seconds)
        self.dispatcher = InputDispatcher(self.modal, swipe_threshold=settings.swipe_threshold_px)
        self.loading = False
        self.error: Optional[GalleryError] = None

    # ------------------------------------------------------------------
    # Catalog lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Fetch the catalog; on failure record the error panel and clear offers."""

        self.loading = True
        self.error = None
        try:
            offers = await self.fetcher.load()
        except GalleryError as exc:
            LOGGER.warning("session.load_failed", kind=exc.kind, error=exc.message)
            self.error = exc
            self.catalog.reset()
            self._after_filter_change()
            return False
        finally:
            self.loading = False

        self.catalog.load(offers)
        self._after_filter_change()
        return True

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(self, text: str) -> asyncio.Future:
        """Debounced query input; the future resolves False if superseded."""

        return self.debouncer.trigger(lambda: self._apply_query(text))

    def apply_search(self, text: str) -> List[Offer]:
        """Apply a query immediately, dropping any pending debounced one."""

        self.debouncer.cancel()
        return self._apply_query(text)

    def clear_search(self) -> List[Offer]:
        return self.apply_search("")

    def _apply_query(self, text: str) -> List[Offer]:
        filtered = self.catalog.apply_query(text)
        self._after_filter_change()
        return filtered

    def _after_filter_change(self) -> None:
        self.thumbnails.sync(
            {
                card_id_for(offer.id): self.settings.thumbnail_url(offer.image_id)
                for offer in self.catalog.filtered_offers
            }
        )
        self.modal.reanchor()

    # ------------------------------------------------------------------
    # Input and views
    # ------------------------------------------------------------------

    def dispatch(self, event: InputEvent) -> DispatchResult:
        return self.dispatcher.dispatch(event)

    def grid(self) -> GridViewModel:
        return build_grid(
            self.catalog.filtered_offers,
            self.thumbnails,
            total=self.catalog.total,
            filtered=self.catalog.is_filtered,
        )

    def page(self) -> PageViewModel:
        return PageViewModel(
            site_name=self.settings.site_name,
            query=self.catalog.query,
            loading=self.loading,
            error=build_error_panel(self.error) if self.error is not None else None,
            grid=self.grid(),
            modal=build_modal(self.modal),
        )

    async def aclose(self) -> None:
        self.debouncer.cancel()
        await self.modal.aclose()


class CatalogCache:
    """Fetch the offer list once per process and share it across sessions.

    The fetched offers (or the load error) are kept until ``refresh``; each
    session filters its own copy.
    """

    def __init__(self, fetcher: CatalogFetcher) -> None:
        self.fetcher = fetcher
        self._offers: Optional[List[Offer]] = None
        self._error: Optional[GalleryError] = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._offers is not None or self._error is not None

    async def load(self) -> List[Offer]:
        async with self._lock:
            if not self.loaded:
                await self._fetch()
        if self._error is not None:
            raise self._error
        return list(self._offers or [])

    async def refresh(self) -> None:
        async with self._lock:
            await self._fetch()

    async def _fetch(self) -> None:
        try:
            self._offers = await self.fetcher.load()
            self._error = None
        except GalleryError as exc:
            self._offers = None
            self._error = exc


class SessionRegistry:
    """Per-visitor ``GallerySession`` objects keyed by a session cookie value.

    Sessions share the ``CatalogCache``; query, modal, thumbnail and debounce
    state stay private to each one. The least recently used session is
    closed once more than ``max_sessions`` are open.
    """

    def __init__(
        self,
        settings: GallerySettings,
        fetcher: Optional[CatalogFetcher] = None,
        image_loader: Optional[ImageLoader] = None,
    ) -> None:
        self.settings = settings
        self.cache = CatalogCache(fetcher or CatalogFetcher(settings))
        self.image_loader = image_loader
        self._sessions: "OrderedDict[str, GallerySession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def warm(self) -> None:
        """Fetch the shared catalog; failures are kept for the error panel."""

        try:
            await self.cache.load()
        except GalleryError as exc:
            LOGGER.warning("catalog.unavailable", kind=exc.kind, error=exc.message)

    async def get(self, session_id: Optional[str]) -> Tuple[str, GallerySession, bool]:
        """Return ``(id, session, created)`` for a cookie value, creating on a miss."""

        if session_id is not None and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return session_id, self._sessions[session_id], False
        new_id, session = await self.start()
        return new_id, session, True

    async def start(self, previous_id: Optional[str] = None) -> Tuple[str, GallerySession]:
        """Begin a fresh page session, discarding ``previous_id`` if it exists."""

        if previous_id is not None:
            await self.discard(previous_id)
        session = GallerySession(self.settings, fetcher=self.cache, image_loader=self.image_loader)
        await session.load()
        session_id = secrets.token_urlsafe(16)
        self._sessions[session_id] = session
        while len(self._sessions) > self.settings.max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            LOGGER.info("session.evicted", session_id=evicted_id)
            await evicted.aclose()
        return session_id, session

    async def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            await session.aclose()

    async def refresh(self) -> None:
        await self.cache.refresh()

    async def aclose(self) -> None:
        while self._sessions:
            _, session = self._sessions.popitem()
            await session.aclose()


__all__ = ["CatalogCache", "GallerySession", "SessionRegistry"]
