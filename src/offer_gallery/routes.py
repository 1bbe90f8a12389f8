"""HTTP routes exposing per-visitor gallery sessions."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .bindings import InputEvent
from .lazy import Viewport
from .render import render_page
from .session import GallerySession, SessionRegistry

router = APIRouter()


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _remember(response: Response, registry: SessionRegistry, session_id: str) -> None:
    response.set_cookie(
        registry.settings.session_cookie,
        session_id,
        httponly=True,
        samesite="lax",
    )


async def get_session(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
) -> GallerySession:
    """Session for the visitor's cookie; a new one is issued when it is unknown."""
    cookie = request.cookies.get(registry.settings.session_cookie)
    session_id, session, created = await registry.get(cookie)
    if created:
        _remember(response, registry, session_id)
    return session


class SearchRequest(BaseModel):
    query: str = ""
    immediate: bool = False


class ViewportReport(BaseModel):
    top: float
    height: float = Field(ge=0)


class ThumbnailReport(BaseModel):
    """Thumbnail signals from the rendering layer.

    ``visible`` lists cards an intersection observer reported. ``viewport``
    with ``positions`` (card id to top/bottom, page pixels) lets the server
    run the proximity check itself.
    """

    visible: List[str] = Field(default_factory=list)
    viewport: Optional[ViewportReport] = None
    positions: Dict[str, Tuple[float, float]] = Field(default_factory=dict)
    loaded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)


def _grid_payload(session: GallerySession) -> Dict[str, Any]:
    page = session.page()
    return {
        "query": page.query,
        "error": asdict(page.error) if page.error is not None else None,
        **asdict(page.grid),
    }


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    response: Response,
    registry: SessionRegistry = Depends(get_registry),
    q: Optional[str] = None,
) -> str:
    """Rendered gallery page; every page load starts a fresh session.

    ``q`` applies a search before rendering.
    """
    previous = request.cookies.get(registry.settings.session_cookie)
    session_id, session = await registry.start(previous)
    _remember(response, registry, session_id)
    if q:
        session.apply_search(q)
    return render_page(session.page(), root_margin=session.settings.lazy_root_margin_px)


@router.get("/api/offers")
async def list_offers(
    session: GallerySession = Depends(get_session), q: Optional[str] = None
) -> Dict[str, Any]:
    if q is not None:
        session.apply_search(q)
    return _grid_payload(session)


@router.post("/api/load")
async def reload_catalog(
    registry: SessionRegistry = Depends(get_registry),
    session: GallerySession = Depends(get_session),
) -> Dict[str, Any]:
    """Refetch the shared catalog and reload the caller's session from it."""
    await registry.refresh()
    await session.load()
    return _grid_payload(session)


@router.post("/api/search")
async def search(body: SearchRequest, session: GallerySession = Depends(get_session)) -> Dict[str, Any]:
    """Apply a query; debounced unless ``immediate`` is set.

    A debounced request superseded by a newer one answers ``applied: false``.
    """
    if body.immediate:
        session.apply_search(body.query)
        applied = True
    else:
        applied = await session.search(body.query)
    return {"applied": applied, **_grid_payload(session)}


@router.post("/api/events")
async def dispatch_event(
    event: InputEvent,
    session: GallerySession = Depends(get_session),
    wait: bool = True,
) -> Dict[str, Any]:
    """Route one input event through the modal bindings."""
    result = session.dispatch(event)
    if wait:
        await session.modal.wait()
    return {
        "action": result.action.value,
        "focus_card_id": result.focus_card_id,
        "modal": asdict(session.page().modal),
    }


@router.get("/api/modal")
async def modal_state(session: GallerySession = Depends(get_session)) -> Dict[str, Any]:
    return asdict(session.page().modal)


@router.post("/api/thumbnails")
async def report_thumbnails(
    report: ThumbnailReport, session: GallerySession = Depends(get_session)
) -> Dict[str, Any]:
    thumbnails = session.thumbnails
    assigned = thumbnails.on_intersection(report.visible)
    if report.viewport is not None:
        viewport = Viewport(top=report.viewport.top, height=report.viewport.height)
        assigned += thumbnails.check_viewport(viewport, report.positions)
    for card_id in report.loaded:
        thumbnails.mark_loaded(card_id)
    for card_id in report.failed:
        thumbnails.mark_failed(card_id)
    touched = set(assigned) | set(report.loaded) | set(report.failed)
    cards = [asdict(card) for card in session.grid().cards if card.card_id in touched]
    return {"assigned": assigned, "cards": cards}


@router.get("/healthz")
async def health() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


__all__ = ["get_registry", "get_session", "router"]
