"""Modal navigation controller over the filtered offer list.

States are CLOSED and OPEN(index). Every transition into OPEN starts an
asset resolution task; results are applied only if they still target the
offer and generation the controller is showing, so a slow resolution for a
previously shown offer can never replace the current image.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .assets import AssetResolution, AssetResolver, AssetTier
from .catalog import Catalog
from .logging import get_logger
from .models import Offer, card_id_for

LOGGER = get_logger(__name__)


class ModalStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass
class ModalState:
    is_open: bool = False
    current_index: Optional[int] = None
    offer_id: Optional[str] = None
    origin_card_id: Optional[str] = None
    displayed_url: Optional[str] = None
    surface_visible: bool = False
    pending: bool = False
    tier: Optional[AssetTier] = None
    generation: int = 0

    def clear_asset(self) -> None:
        self.displayed_url = None
        self.surface_visible = False
        self.pending = False
        self.tier = None


class ModalController:
    """Own the open/closed state of the lightbox and its displayed asset.

    Transitions that start a resolution must run inside an event loop.
    """

    def __init__(self, catalog: Catalog, resolver: AssetResolver) -> None:
        self.catalog = catalog
        self.resolver = resolver
        self.state = ModalState()
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Read-only view of the state
    # ------------------------------------------------------------------

    @property
    def status(self) -> ModalStatus:
        return ModalStatus.OPEN if self.state.is_open else ModalStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.state.is_open

    @property
    def current_index(self) -> Optional[int]:
        return self.state.current_index

    @property
    def current_offer(self) -> Optional[Offer]:
        if self.state.current_index is None:
            return None
        return self.catalog.get(self.state.current_index)

    @property
    def can_previous(self) -> bool:
        return self.state.is_open and (self.state.current_index or 0) > 0

    @property
    def can_next(self) -> bool:
        if not self.state.is_open or self.state.current_index is None:
            return False
        return self.state.current_index < len(self.catalog.filtered_offers) - 1

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open(self, index: int, origin_card_id: Optional[str] = None) -> Optional[asyncio.Task]:
        """Open at ``index`` clamped into the filtered range; no-op on an empty list."""

        offers = self.catalog.filtered_offers
        if not offers:
            return None
        index = max(0, min(index, len(offers) - 1))
        self.state.is_open = True
        self.state.origin_card_id = origin_card_id or card_id_for(offers[index].id)
        return self._show(index)

    def next(self) -> Optional[asyncio.Task]:
        if not self.can_next:
            return None
        return self._show(self.state.current_index + 1)

    def previous(self) -> Optional[asyncio.Task]:
        if not self.can_previous:
            return None
        return self._show(self.state.current_index - 1)

    def close(self) -> Optional[str]:
        """Close the modal; return the card id to refocus, if it is still shown."""

        if not self.state.is_open:
            return None
        self._cancel_pending()
        origin = self.state.origin_card_id
        generation = self.state.generation + 1
        self.state = ModalState(generation=generation)
        if origin is None:
            return None
        if any(card_id_for(offer.id) == origin for offer in self.catalog.filtered_offers):
            return origin
        return None

    def reanchor(self) -> None:
        """Follow the open offer through a change of the filtered list."""

        if not self.state.is_open or self.state.offer_id is None:
            return
        index = self.catalog.index_of(self.state.offer_id)
        if index is None:
            LOGGER.info("modal.offer_filtered_out", offer_id=self.state.offer_id)
            self.close()
            return
        self.state.current_index = index

    # ------------------------------------------------------------------
    # Asset resolution
    # ------------------------------------------------------------------

    def apply_resolution(self, result: AssetResolution, generation: int) -> bool:
        """Display a resolution result unless it has been superseded."""

        state = self.state
        if not state.is_open or generation != state.generation or result.offer_id != state.offer_id:
            LOGGER.debug(
                "modal.stale_resolution_discarded",
                offer_id=result.offer_id,
                current_offer_id=state.offer_id,
            )
            return False
        state.displayed_url = result.url
        state.tier = result.tier
        state.pending = False
        state.surface_visible = True
        return True

    async def wait(self) -> None:
        """Wait for the in-flight resolution, if any, to finish or be cancelled."""

        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def aclose(self) -> None:
        task = self._task
        self._cancel_pending()
        if task is not None:
            await asyncio.wait({task})

    def _show(self, index: int) -> asyncio.Task:
        offer = self.catalog.filtered_offers[index]
        self._cancel_pending()
        state = self.state
        state.generation += 1
        state.current_index = index
        state.offer_id = offer.id
        state.clear_asset()
        state.pending = True
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._resolve(offer, state.generation))
        return self._task

    async def _resolve(self, offer: Offer, generation: int) -> None:
        try:
            result = await self.resolver.resolve(offer)
        except Exception:
            LOGGER.exception("modal.resolution_failed", offer_id=offer.id)
            result = AssetResolution(offer.id, self.resolver.primary_url(offer), AssetTier.LAST_RESORT)
        self.apply_resolution(result, generation)

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


__all__ = ["ModalController", "ModalState", "ModalStatus"]
