"""Searchable image-offer gallery backed by a shared cloud-storage folder."""

from .catalog import Catalog
from .errors import (
    AssetLoadError,
    CatalogFetchError,
    ConfigurationError,
    EmptyCatalogError,
    GalleryError,
    HttpError,
)
from .models import Offer
from .search import filter_offers

__all__ = [
    "AssetLoadError",
    "Catalog",
    "CatalogFetchError",
    "ConfigurationError",
    "EmptyCatalogError",
    "GalleryError",
    "HttpError",
    "Offer",
    "filter_offers",
]
