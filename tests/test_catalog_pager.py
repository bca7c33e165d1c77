import httpx
import pytest

from catalog_images.core.exceptions import NetworkError
from catalog_images.services.tiendanube import CatalogPager

from tests.conftest import json_response, make_client


def catalog_handler(pages, requested):
    def handler(request):
        page = int(request.url.params["page"])
        requested.append((page, int(request.url.params["per_page"])))
        return json_response(200, pages.get(page, []))
    return handler


@pytest.mark.asyncio
async def test_pages_are_walked_in_order_until_empty_page():
    pages = {
        1: [{"id": 1}, {"id": 2}],
        2: [{"id": 3}],
        3: [{"id": 4}],
    }
    requested = []

    async with make_client(catalog_handler(pages, requested)) as client:
        pager = CatalogPager(client)
        walked = [(page, [p.id for p in products]) async for page, products in pager.iter_pages()]

    assert walked == [(1, [1, 2]), (2, [3]), (3, [4])]
    assert requested == [(1, 200), (2, 200), (3, 200), (4, 200)]


@pytest.mark.asyncio
async def test_per_page_is_configurable():
    requested = []

    async with make_client(catalog_handler({}, requested)) as client:
        assert await CatalogPager(client, per_page=50).fetch_page(1) == []

    assert requested == [(1, 50)]


@pytest.mark.asyncio
async def test_error_status_reads_as_empty_page_and_stops_paging():
    requested = []

    def handler(request):
        page = int(request.url.params["page"])
        requested.append(page)
        if page == 2:
            return json_response(500, {"error": "boom"})
        return json_response(200, [{"id": page}])

    async with make_client(handler) as client:
        walked = [page async for page, _ in CatalogPager(client).iter_pages()]

    assert walked == [1]
    assert requested == [1, 2]


@pytest.mark.asyncio
async def test_page_request_is_not_retried_on_rate_limit():
    requested = []

    def handler(request):
        requested.append(request)
        return json_response(429, {})

    async with make_client(handler) as client:
        assert await CatalogPager(client).fetch_page(1) == []

    assert len(requested) == 1


@pytest.mark.asyncio
async def test_products_parse_missing_and_null_collections():
    payload = [
        {"id": 10, "images": [{"id": 100, "src": "a.jpg", "position": 1}], "variants": [{"id": 5, "sku": "ABC"}]},
        {"id": 11, "images": None, "variants": None, "name": {"es": "Remera"}},
        {"id": 12},
    ]

    async with make_client(lambda request: json_response(200, payload)) as client:
        products = await CatalogPager(client).fetch_page(1)

    assert [p.id for p in products] == [10, 11, 12]
    assert products[0].images[0].id == 100
    assert products[0].variants[0].sku == "ABC"
    assert products[1].images == [] and products[1].variants == []
    assert products[2].images == [] and products[2].variants == []


@pytest.mark.asyncio
async def test_transport_error_on_page_fetch_propagates():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async with make_client(handler) as client:
        with pytest.raises(NetworkError):
            await CatalogPager(client).fetch_page(1)


@pytest.mark.asyncio
async def test_page_of_only_malformed_entries_does_not_end_paging():
    pages = {
        1: [{"name": "no id"}, {"id": None}],
        2: [{"id": 20}, {"sku": "missing id"}],
    }
    requested = []

    async with make_client(catalog_handler(pages, requested)) as client:
        pager = CatalogPager(client)
        walked = [(page, [p.id for p in products]) async for page, products in pager.iter_pages()]

    assert walked == [(1, []), (2, [20])]
    assert [page for page, _ in requested] == [1, 2, 3]
