from unittest.mock import MagicMock

import pytest

from wcart_migrator.exceptions import ConfigurationError
from wcart_migrator.extractors.shopify_extractor import ShopifyExtractor
from wcart_migrator.models.settings import MigrationSettings

BASE = "https://acme.myshopify.com/admin/api/2024-01"


def _page(data_type: str, records, next_url=None):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {data_type: records}
    # requests parses the Link header into response.links
    response.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}
    return response


def _extractor(session) -> ShopifyExtractor:
    return ShopifyExtractor("acme.myshopify.com", "shpat_token", session=session)


@pytest.mark.unit
class TestShopifyExtractor:
    def test_requires_credentials(self) -> None:
        with pytest.raises(ConfigurationError):
            ShopifyExtractor("", "token")
        with pytest.raises(ConfigurationError):
            ShopifyExtractor.from_settings(MigrationSettings(shopify_store="acme.myshopify.com"))

    def test_first_page_request(self) -> None:
        session = MagicMock()
        next_url = f"{BASE}/orders.json?limit=250&page_info=abc"
        session.get.return_value = _page("orders", [{"id": 1}], next_url)

        records, next_page = _extractor(session).extract_page("orders")

        assert records == [{"id": 1}]
        assert next_page == next_url
        session.get.assert_called_once_with(
            f"{BASE}/orders.json",
            headers={"X-Shopify-Access-Token": "shpat_token"},
            params={"limit": 250, "status": "any"},
            timeout=30.0,
        )

    def test_cursor_page_request_uses_link_as_is(self) -> None:
        session = MagicMock()
        cursor_url = f"{BASE}/orders.json?limit=250&page_info=abc"
        session.get.return_value = _page("orders", [{"id": 2}])

        records, next_page = _extractor(session).extract_page("orders", cursor_url)

        assert records == [{"id": 2}]
        assert next_page is None
        session.get.assert_called_once_with(
            cursor_url,
            headers={"X-Shopify-Access-Token": "shpat_token"},
            params=None,
            timeout=30.0,
        )

    def test_stream_follows_next_links_until_absent(self) -> None:
        session = MagicMock()
        second = f"{BASE}/products.json?limit=250&page_info=p2"
        third = f"{BASE}/products.json?limit=250&page_info=p3"
        session.get.side_effect = [
            _page("products", [{"id": 1}, {"id": 2}], second),
            _page("products", [{"id": 3}, {"id": 4}], third),
            _page("products", [{"id": 5}, {"id": 6}]),
        ]

        pages = list(_extractor(session).stream("products"))

        # Full pages do not imply more data; only the Link header does
        assert pages == [[{"id": 1}, {"id": 2}], [{"id": 3}, {"id": 4}], [{"id": 5}, {"id": 6}]]
        assert [c.args[0] for c in session.get.call_args_list] == [
            f"{BASE}/products.json", second, third,
        ]

    def test_stream_skips_empty_pages(self) -> None:
        session = MagicMock()
        session.get.side_effect = [
            _page("customers", [{"id": 1}], f"{BASE}/customers.json?page_info=next"),
            _page("customers", []),
        ]

        assert list(_extractor(session).stream("customers")) == [[{"id": 1}]]

    def test_fetch_and_cache(self, cache) -> None:
        session = MagicMock()
        session.get.side_effect = [
            _page("products", [{"id": 10, "title": "Hat"}], f"{BASE}/products.json?page_info=p2"),
            _page("products", [{"id": 11, "title": "Cap"}]),
        ]

        total = _extractor(session).fetch_and_cache("products", cache)

        assert total == 2
        assert [r.source_id for r in cache.load_records("products")] == ["10", "11"]
