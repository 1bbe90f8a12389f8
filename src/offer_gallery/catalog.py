"""Session catalog: the full offer set and its filtered view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .models import Offer
from .search import filter_offers, normalize_query


@dataclass
class Catalog:
    """Full and filtered offer collections held for one page session.

    ``offers`` is replaced only by ``load``; ``filtered_offers`` is always a
    list (empty before a successful load).
    """

    offers: Tuple[Offer, ...] = ()
    filtered_offers: List[Offer] = field(default_factory=list)
    query: str = ""
    loaded: bool = False

    def load(self, offers: Sequence[Offer]) -> List[Offer]:
        self.offers = tuple(offers)
        self.loaded = True
        return self.apply_query(self.query)

    def reset(self) -> None:
        """Drop all offers after a failed load."""

        self.offers = ()
        self.filtered_offers = []
        self.loaded = False

    def apply_query(self, query: Optional[str]) -> List[Offer]:
        self.query = query or ""
        self.filtered_offers = filter_offers(self.offers, self.query)
        return self.filtered_offers

    @property
    def is_filtered(self) -> bool:
        return bool(normalize_query(self.query))

    @property
    def total(self) -> int:
        return len(self.offers)

    def index_of(self, offer_id: str) -> Optional[int]:
        """Position of an offer within the filtered list, or None."""

        for index, offer in enumerate(self.filtered_offers):
            if offer.id == offer_id:
                return index
        return None

    def get(self, index: int) -> Optional[Offer]:
        if 0 <= index < len(self.filtered_offers):
            return self.filtered_offers[index]
        return None


__all__ = ["Catalog"]
