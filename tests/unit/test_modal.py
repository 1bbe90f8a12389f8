from __future__ import annotations

import asyncio

import pytest

from conftest import GatedLoader, make_offers
from offer_gallery.assets import AssetResolution, AssetResolver, AssetTier
from offer_gallery.catalog import Catalog
from offer_gallery.modal import ModalController, ModalStatus
from offer_gallery.viewmodels import build_modal


def _controller(settings, offers, loader=None):
    catalog = Catalog()
    catalog.load(offers)
    loader = loader or GatedLoader()
    return ModalController(catalog, AssetResolver(settings, loader)), loader


@pytest.mark.asyncio
@pytest.mark.parametrize("requested, expected", [(-5, 0), (0, 0), (3, 3), (4, 4), (99, 4)])
async def test_open_clamps_into_range(settings, requested, expected):
    controller, _ = _controller(settings, make_offers([f"o{i}.jpg" for i in range(5)]))
    controller.open(requested)
    assert controller.status == ModalStatus.OPEN
    assert controller.current_index == expected
    await controller.aclose()


@pytest.mark.asyncio
async def test_open_on_empty_list_is_noop(settings):
    controller, _ = _controller(settings, [])
    assert controller.open(0) is None
    assert controller.status == ModalStatus.CLOSED


@pytest.mark.asyncio
async def test_open_hides_surface_until_resolved(settings, six_offers):
    controller, loader = _controller(settings, six_offers)
    gate = loader.gate(settings.view_url("id-1"))

    controller.open(1)
    await asyncio.sleep(0)
    assert controller.state.pending
    assert controller.state.displayed_url is None
    assert not controller.state.surface_visible

    gate.set()
    await controller.wait()
    assert controller.state.displayed_url == settings.view_url("id-1")
    assert controller.state.surface_visible
    assert controller.state.tier == AssetTier.PRIMARY


@pytest.mark.asyncio
async def test_previous_at_start_and_next_at_end_are_noops(settings, six_offers):
    controller, _ = _controller(settings, six_offers)

    controller.open(0)
    assert not controller.can_previous
    assert controller.previous() is None
    assert controller.current_index == 0

    controller.open(5)
    assert not controller.can_next
    assert controller.next() is None
    assert controller.current_index == 5
    await controller.aclose()


@pytest.mark.asyncio
async def test_next_and_previous_step_and_reresolve(settings, six_offers):
    controller, loader = _controller(settings, six_offers)
    controller.open(2)
    await controller.wait()

    controller.next()
    await controller.wait()
    assert controller.current_index == 3
    assert controller.state.displayed_url == settings.view_url("id-3")

    controller.previous()
    controller.previous()
    await controller.wait()
    assert controller.current_index == 1
    assert controller.state.displayed_url == settings.view_url("id-1")
    assert controller.can_previous and controller.can_next


@pytest.mark.asyncio
async def test_superseded_resolution_is_never_displayed(settings, six_offers):
    controller, loader = _controller(settings, six_offers)
    slow = loader.gate(settings.view_url("id-2"))
    # Let the superseded task run to completion so only the guard protects us.
    controller._cancel_pending = lambda: None

    first = controller.open(2)
    await asyncio.sleep(0)
    controller.open(5)
    await controller.wait()
    assert controller.state.displayed_url == settings.view_url("id-5")

    slow.set()
    await first
    assert controller.current_index == 5
    assert controller.state.displayed_url == settings.view_url("id-5")


@pytest.mark.asyncio
async def test_superseded_task_is_cancelled(settings, six_offers):
    controller, loader = _controller(settings, six_offers)
    loader.gate(settings.view_url("id-2"))

    first = controller.open(2)
    await asyncio.sleep(0)
    controller.open(5)
    await controller.wait()
    await asyncio.wait({first})

    assert first.cancelled()
    assert controller.state.displayed_url == settings.view_url("id-5")


@pytest.mark.asyncio
async def test_stale_generation_is_rejected(settings, six_offers):
    controller, _ = _controller(settings, six_offers)
    controller.open(1)
    stale_generation = controller.state.generation - 1
    result = AssetResolution("id-1", "https://stale", AssetTier.PRIMARY)
    assert controller.apply_resolution(result, stale_generation) is False
    assert controller.state.displayed_url is None
    await controller.aclose()


@pytest.mark.asyncio
async def test_close_clears_asset_and_returns_focus(settings, six_offers):
    controller, _ = _controller(settings, six_offers)
    controller.open(2, origin_card_id="offer-id-2")
    await controller.wait()
    controller.next()

    assert controller.close() == "offer-id-2"
    assert controller.status == ModalStatus.CLOSED
    assert controller.current_index is None
    assert controller.state.displayed_url is None
    assert controller.close() is None


@pytest.mark.asyncio
async def test_close_skips_focus_when_origin_card_is_gone(settings, six_offers):
    controller, _ = _controller(settings, six_offers)
    controller.open(0, origin_card_id="offer-id-0")
    controller.catalog.apply_query("offer 3")
    controller.reanchor()
    assert not controller.is_open

    controller.open(0, origin_card_id="offer-id-0")
    assert controller.close() is None


@pytest.mark.asyncio
async def test_reanchor_follows_offer_by_id(settings, six_offers):
    controller, _ = _controller(settings, six_offers)
    controller.open(4)
    await controller.wait()

    controller.catalog.apply_query("offer 4")
    controller.reanchor()
    assert controller.is_open
    assert controller.current_index == 0
    assert controller.current_offer.id == "id-4"
    assert not controller.can_next and not controller.can_previous


@pytest.mark.asyncio
async def test_reanchor_closes_when_offer_filtered_out(settings, six_offers):
    controller, _ = _controller(settings, six_offers)
    controller.open(4)
    controller.catalog.apply_query("offer 1")
    controller.reanchor()
    assert controller.status == ModalStatus.CLOSED


class ExplodingLoader:
    async def load(self, url: str) -> str:
        raise RuntimeError("loader crashed")


@pytest.mark.asyncio
async def test_unexpected_loader_error_still_shows_surface(settings, six_offers):
    controller, _ = _controller(settings, six_offers, ExplodingLoader())

    task = controller.open(0)
    await controller.wait()

    assert task.exception() is None
    assert controller.state.surface_visible
    assert not controller.state.pending
    assert controller.state.displayed_url == settings.view_url("id-0")
    assert controller.state.tier == AssetTier.LAST_RESORT
    assert build_modal(controller).failed


@pytest.mark.asyncio
async def test_modal_view_model_reflects_failure(settings, six_offers):
    primary = settings.view_url("id-0")
    fallback = settings.fallback_view_url("id-0")
    controller, _ = _controller(settings, six_offers, GatedLoader(failing=[primary, fallback]))

    controller.open(0)
    await controller.wait()
    vm = build_modal(controller)

    assert vm.is_open and vm.surface_visible
    assert vm.image_url == primary
    assert vm.failed
    assert vm.caption == "Offer 0"
    assert vm.position == "1 / 6"
    assert not vm.can_previous and vm.can_next
