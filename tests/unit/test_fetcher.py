from __future__ import annotations

import httpx
import pytest

from offer_gallery.config import API_KEY_PLACEHOLDER, FOLDER_ID_PLACEHOLDER, GallerySettings
from offer_gallery.errors import (
    CatalogFetchError,
    ConfigurationError,
    EmptyCatalogError,
    HttpError,
)
from offer_gallery.fetcher import CatalogFetcher, build_list_params


class RecordingBackend:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None):
        self.response = response or httpx.Response(200, json={"files": []})
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


FILES = [
    {"id": "a1", "name": "Summer Program 2026.jpg", "mimeType": "image/jpeg"},
    {"id": "b2", "name": "Fall STEM.png", "mimeType": "image/png"},
    {"id": "c3", "name": "summer coding.gif", "mimeType": "image/gif"},
]


def test_list_params_restrict_to_folder_images(settings):
    params = build_list_params(settings)
    assert params["q"] == "'folder-123' in parents and mimeType contains 'image/' and trashed = false"
    assert params["key"] == "test-key"
    assert params["fields"] == "files(id,name,mimeType)"
    assert params["pageSize"] == 1000


@pytest.mark.asyncio
async def test_load_maps_files_in_backend_order(settings):
    backend = RecordingBackend(httpx.Response(200, json={"files": FILES}))
    async with backend.client() as client:
        offers = await CatalogFetcher(settings, client=client).load()

    assert [offer.name for offer in offers] == ["Summer Program 2026", "Fall STEM", "summer coding"]
    assert [offer.image_id for offer in offers] == ["a1", "b2", "c3"]
    assert len(backend.requests) == 1
    request = backend.requests[0]
    assert request.method == "GET"
    assert request.url.host == "www.googleapis.com"
    assert request.url.params["key"] == "test-key"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"api_key": API_KEY_PLACEHOLDER},
        {"folder_id": FOLDER_ID_PLACEHOLDER},
        {"api_key": ""},
        {"list_url": ""},
    ],
)
async def test_placeholder_configuration_fails_without_request(overrides):
    values = {"api_key": "test-key", "folder_id": "folder-123", **overrides}
    settings = GallerySettings(_env_file=None, **values)
    backend = RecordingBackend(httpx.Response(200, json={"files": FILES}))

    async with backend.client() as client:
        with pytest.raises(ConfigurationError):
            await CatalogFetcher(settings, client=client).load()

    assert backend.requests == []


@pytest.mark.asyncio
async def test_non_success_status_raises_http_error(settings):
    backend = RecordingBackend(httpx.Response(403, json={"error": {"message": "forbidden"}}))
    async with backend.client() as client:
        with pytest.raises(HttpError) as excinfo:
            await CatalogFetcher(settings, client=client).load()
    assert excinfo.value.status == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"files": []}, {}, {"nextPageToken": "x"}])
async def test_empty_listing_raises_empty_catalog(settings, payload):
    backend = RecordingBackend(httpx.Response(200, json=payload))
    async with backend.client() as client:
        with pytest.raises(EmptyCatalogError):
            await CatalogFetcher(settings, client=client).load()


@pytest.mark.asyncio
async def test_malformed_entries_are_skipped(settings):
    files = [{"id": "", "name": "x.jpg"}, {"name": "no-id.png"}, FILES[1]]
    backend = RecordingBackend(httpx.Response(200, json={"files": files}))
    async with backend.client() as client:
        offers = await CatalogFetcher(settings, client=client).load()
    assert [offer.id for offer in offers] == ["b2"]


@pytest.mark.asyncio
async def test_only_malformed_entries_is_empty_catalog(settings):
    backend = RecordingBackend(httpx.Response(200, json={"files": [{"name": "x.jpg"}]}))
    async with backend.client() as client:
        with pytest.raises(EmptyCatalogError):
            await CatalogFetcher(settings, client=client).load()


@pytest.mark.asyncio
async def test_non_json_body_raises_fetch_error(settings):
    backend = RecordingBackend(httpx.Response(200, text="<html>oops</html>"))
    async with backend.client() as client:
        with pytest.raises(CatalogFetchError):
            await CatalogFetcher(settings, client=client).load()


@pytest.mark.asyncio
async def test_transport_error_raises_fetch_error(settings):
    backend = RecordingBackend(error=httpx.ConnectError("connection refused"))
    async with backend.client() as client:
        with pytest.raises(CatalogFetchError) as excinfo:
            await CatalogFetcher(settings, client=client).load()
    assert "connection refused" in excinfo.value.detail
