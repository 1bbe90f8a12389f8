"""
Presentation view models.

Pure mappings from catalog/modal state to plain data any rendering layer can
consume (server-side template, JSON API, terminal table).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from markupsafe import escape

from .assets import AssetTier
from .errors import GalleryError
from .lazy import DeferredImageLoader, ThumbnailState
from .modal import ModalController
from .models import Offer, card_id_for

CARD_ANIMATION_STEP = 0.05


def escape_text(value: object) -> str:
    """HTML-escape a value for insertion into markup."""

    return str(escape(str(value)))


@dataclass(frozen=True)
class CardViewModel:
    card_id: str
    offer_id: str
    index: int
    name: str
    escaped_name: str
    thumbnail_url: Optional[str]
    thumbnail_state: ThumbnailState
    placeholder: bool
    animation_delay: float


@dataclass(frozen=True)
class GridViewModel:
    cards: Tuple[CardViewModel, ...]
    count_message: str
    is_empty: bool
    total: int


@dataclass(frozen=True)
class ErrorPanelViewModel:
    kind: str
    title: str
    message: str
    guidance: str


@dataclass(frozen=True)
class ModalViewModel:
    is_open: bool
    index: Optional[int] = None
    image_url: Optional[str] = None
    surface_visible: bool = False
    pending: bool = False
    caption: str = ""
    escaped_caption: str = ""
    can_previous: bool = False
    can_next: bool = False
    failed: bool = False
    tier: Optional[str] = None
    position: str = ""


@dataclass(frozen=True)
class PageViewModel:
    site_name: str
    query: str
    loading: bool
    error: Optional[ErrorPanelViewModel]
    grid: GridViewModel
    modal: ModalViewModel = field(default_factory=lambda: ModalViewModel(is_open=False))


def count_message(shown: int, total: int, filtered: bool) -> str:
    if shown == 0:
        return "No offers match your search" if filtered and total else "No offers available"
    if filtered:
        return f"Showing {shown} of {total} offers"
    return f"Showing {shown} offer" + ("" if shown == 1 else "s")


def build_card(offer: Offer, index: int, thumbnails: DeferredImageLoader) -> CardViewModel:
    card_id = card_id_for(offer.id)
    slot = thumbnails.slot(card_id)
    state = slot.state if slot is not None else ThumbnailState.PENDING
    return CardViewModel(
        card_id=card_id,
        offer_id=offer.id,
        index=index,
        name=offer.name,
        escaped_name=escape_text(offer.name),
        thumbnail_url=slot.src if slot is not None else None,
        thumbnail_state=state,
        placeholder=state == ThumbnailState.FAILED,
        animation_delay=round(index * CARD_ANIMATION_STEP, 2),
    )


def build_grid(
    offers: Sequence[Offer],
    thumbnails: DeferredImageLoader,
    total: Optional[int] = None,
    filtered: bool = False,
) -> GridViewModel:
    total = len(offers) if total is None else total
    cards = tuple(build_card(offer, index, thumbnails) for index, offer in enumerate(offers))
    return GridViewModel(
        cards=cards,
        count_message=count_message(len(cards), total, filtered),
        is_empty=not cards,
        total=total,
    )


def build_error_panel(error: GalleryError) -> ErrorPanelViewModel:
    return ErrorPanelViewModel(
        kind=error.kind,
        title=error.title,
        message=error.message,
        guidance=error.guidance,
    )


def build_modal(controller: ModalController) -> ModalViewModel:
    state = controller.state
    offer = controller.current_offer
    if not state.is_open or offer is None:
        return ModalViewModel(is_open=False)
    total = len(controller.catalog.filtered_offers)
    return ModalViewModel(
        is_open=True,
        index=state.current_index,
        image_url=state.displayed_url,
        surface_visible=state.surface_visible,
        pending=state.pending,
        caption=offer.name,
        escaped_caption=escape_text(offer.name),
        can_previous=controller.can_previous,
        can_next=controller.can_next,
        failed=state.tier == AssetTier.LAST_RESORT,
        tier=state.tier.value if state.tier is not None else None,
        position=f"{state.current_index + 1} / {total}",
    )


__all__ = [
    "CardViewModel",
    "ErrorPanelViewModel",
    "GridViewModel",
    "ModalViewModel",
    "PageViewModel",
    "build_card",
    "build_error_panel",
    "build_grid",
    "build_modal",
    "count_message",
    "escape_text",
]
