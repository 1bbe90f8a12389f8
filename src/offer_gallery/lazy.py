"""Deferred thumbnail loading for gallery cards.

Thumbnails are registered with their URL but no source is assigned until a
proximity trigger fires for the card: either an intersection report from the
rendering layer, or a geometry check against the viewport grown by the root
margin. Once assigned, a source is never reassigned. When the runtime cannot
observe proximity, every source is assigned at registration.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .logging import get_logger

LOGGER = get_logger(__name__)


class ThumbnailState(str, Enum):
    """Lifecycle of one card thumbnail."""

    PENDING = "pending"
    ASSIGNED = "assigned"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class ThumbnailSlot:
    card_id: str
    url: str
    state: ThumbnailState = ThumbnailState.PENDING
    src: Optional[str] = None

    @property
    def placeholder(self) -> bool:
        return self.state == ThumbnailState.FAILED


@dataclass(frozen=True)
class Viewport:
    """Visible vertical window, in page pixels."""

    top: float
    height: float

    def expanded(self, margin: float) -> Tuple[float, float]:
        return self.top - margin, self.top + self.height + margin


class DeferredImageLoader:
    """Track and assign card thumbnail sources on proximity."""

    def __init__(self, root_margin: float = 200.0, supported: bool = True) -> None:
        self.root_margin = root_margin
        self.supported = supported
        self._slots: Dict[str, ThumbnailSlot] = {}

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def slot(self, card_id: str) -> Optional[ThumbnailSlot]:
        return self._slots.get(card_id)

    def register(self, card_id: str, url: str) -> ThumbnailSlot:
        existing = self._slots.get(card_id)
        if existing is not None and existing.url == url:
            return existing
        slot = ThumbnailSlot(card_id=card_id, url=url)
        self._slots[card_id] = slot
        if not self.supported:
            self._assign(slot)
        return slot

    def sync(self, cards: Mapping[str, str]) -> None:
        """Keep slots for cards still shown, register new ones, drop the rest."""

        for card_id in list(self._slots):
            if card_id not in cards:
                del self._slots[card_id]
        for card_id, url in cards.items():
            self.register(card_id, url)

    def on_intersection(self, card_ids: Iterable[str]) -> List[str]:
        """Assign sources for cards reported near the viewport.

        Returns the ids whose source was assigned by this call.
        """
        assigned = []
        for card_id in card_ids:
            slot = self._slots.get(card_id)
            if slot is not None and slot.state == ThumbnailState.PENDING:
                self._assign(slot)
                assigned.append(card_id)
        return assigned

    def check_viewport(
        self, viewport: Viewport, positions: Mapping[str, Tuple[float, float]]
    ) -> List[str]:
        """Assign sources for cards whose (top, bottom) overlaps the expanded viewport."""

        low, high = viewport.expanded(self.root_margin)
        near = [
            card_id
            for card_id, (top, bottom) in positions.items()
            if bottom >= low and top <= high
        ]
        return self.on_intersection(near)

    def mark_loaded(self, card_id: str) -> None:
        slot = self._slots.get(card_id)
        if slot is not None and slot.state == ThumbnailState.ASSIGNED:
            slot.state = ThumbnailState.LOADED

    def mark_failed(self, card_id: str) -> None:
        """Swap one card to its placeholder; siblings are untouched."""

        slot = self._slots.get(card_id)
        if slot is None or slot.state == ThumbnailState.PENDING:
            return
        LOGGER.info("thumbnail.failed", card_id=card_id, url=slot.url)
        slot.state = ThumbnailState.FAILED
        slot.src = None

    @staticmethod
    def _assign(slot: ThumbnailSlot) -> None:
        slot.src = slot.url
        slot.state = ThumbnailState.ASSIGNED


__all__ = ["DeferredImageLoader", "ThumbnailSlot", "ThumbnailState", "Viewport"]
