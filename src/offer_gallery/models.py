"""Offer records and the raw listing schema they are built from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

IMAGE_EXTENSIONS = frozenset(
    {
        ".jpg",
        ".jpeg",
        ".png",
        ".gif",
        ".webp",
        ".bmp",
        ".svg",
        ".tif",
        ".tiff",
        ".heic",
        ".heif",
        ".avif",
        ".ico",
    }
)


def derive_offer_name(filename: str) -> str:
    """Strip one trailing known image extension (case-insensitive).

    "Summer Program 2026.jpg" -> "Summer Program 2026". Unknown extensions and
    names that would become empty (".png") are returned unchanged.
    """
    dot = filename.rfind(".")
    if dot <= 0:
        return filename
    if filename[dot:].lower() not in IMAGE_EXTENSIONS:
        return filename
    return filename[:dot]


@dataclass(frozen=True, slots=True)
class Offer:
    """One discovered image entry."""

    id: str
    name: str
    image_id: str
    original_name: str = ""
    mime_type: Optional[str] = None

    @classmethod
    def from_file(cls, file: "DriveFile") -> "Offer":
        return cls(
            id=file.id,
            name=derive_offer_name(file.name),
            image_id=file.id,
            original_name=file.name,
            mime_type=file.mime_type,
        )


CARD_ID_PREFIX = "offer-"


def card_id_for(offer_id: str) -> str:
    """DOM-safe id of the grid card showing an offer."""

    return f"{CARD_ID_PREFIX}{offer_id}"


def offer_id_from_card(card_id: str) -> Optional[str]:
    if not card_id.startswith(CARD_ID_PREFIX):
        return None
    return card_id[len(CARD_ID_PREFIX):] or None


class DriveFile(BaseModel):
    """Single entry of a ``files.list`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    mime_type: Optional[str] = Field(None, alias="mimeType")


class FileListResponse(BaseModel):
    """Listing payload; only ``files`` is read."""

    model_config = ConfigDict(extra="ignore")

    files: Optional[List[dict]] = None


__all__ = [
    "DriveFile",
    "FileListResponse",
    "IMAGE_EXTENSIONS",
    "Offer",
    "card_id_for",
    "derive_offer_name",
    "offer_id_from_card",
]
