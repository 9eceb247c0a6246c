from unittest.mock import MagicMock

import pytest
import requests

from wcart_migrator.loaders.wcart_loader import WcartPublisher
from wcart_migrator.models.settings import MigrationSettings


def _response(status_code: int = 201, body=None, text=None) -> requests.Response:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = body
    if text is None:
        text = "" if body is None else "json"
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    else:
        response.raise_for_status.return_value = None
    return response


def _publisher(session, **kwargs) -> WcartPublisher:
    return WcartPublisher("https://wcart.test/api/", api_key="secret", session=session, **kwargs)


@pytest.mark.unit
class TestPublish:
    def test_posts_record_to_data_type_endpoint(self) -> None:
        session = MagicMock()
        session.post.return_value = _response(201, {"id": 55})
        publisher = _publisher(session, timeout=12.5)

        result = publisher.publish("products", {"product_name": "Hat"})

        session.post.assert_called_once_with(
            "https://wcart.test/api/products", json={"product_name": "Hat"}, timeout=12.5
        )
        assert result.success is True
        assert result.destination_id == "55"
        assert result.status_code == 201

    @pytest.mark.parametrize(
        "body, expected",
        [
            ({"id": "abc"}, "abc"),
            ({"product_id": 9}, "9"),
            ({"data": {"id": 12}}, "12"),
            ({"id": 0}, "0"),
            ({"id": None, "product_id": 0, "data": {"id": 5}}, "0"),
        ],
    )
    def test_destination_id_sources(self, body, expected) -> None:
        session = MagicMock()
        session.post.return_value = _response(200, body)
        assert _publisher(session).publish("products", {}).destination_id == expected

    def test_accepted_without_id_still_succeeds(self) -> None:
        session = MagicMock()
        session.post.return_value = _response(204)

        result = _publisher(session).publish("customers", {"email": "a@b.c"})

        assert result.success is True
        assert result.destination_id is None

    def test_http_error_message_uses_response_detail(self) -> None:
        session = MagicMock()
        session.post.return_value = _response(422, {"message": "sku is required"})

        result = _publisher(session).publish("products", {})

        assert result.success is False
        assert result.status_code == 422
        assert result.error == "Wcart API returned 422: sku is required"

    def test_http_error_with_plain_text_body(self) -> None:
        session = MagicMock()
        response = _response(500, text="Internal Server Error")
        response.json.side_effect = ValueError("not json")
        session.post.return_value = response

        result = _publisher(session).publish("products", {})

        assert result.error == "Wcart API returned 500: Internal Server Error"
        assert result.status_code == 500

    def test_timeout_becomes_failure(self) -> None:
        session = MagicMock()
        session.post.side_effect = requests.exceptions.Timeout("slow")

        result = _publisher(session, timeout=3).publish("orders", {})

        assert result.success is False
        assert result.error == "Timed out after 3s posting to https://wcart.test/api/orders"
        assert result.status_code is None

    def test_connection_error_becomes_failure(self) -> None:
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        result = _publisher(session).publish("orders", {})

        assert result.success is False
        assert result.error.startswith("Request to https://wcart.test/api/orders failed")

    def test_dry_run_skips_http(self) -> None:
        session = MagicMock()
        result = _publisher(session, dry_run=True).publish("products", {"a": 1})

        session.post.assert_not_called()
        assert result.success is True
        assert result.response_data == {"dry_run": True}

    def test_missing_base_url(self) -> None:
        session = MagicMock()
        result = WcartPublisher("", session=session).publish("products", {})

        session.post.assert_not_called()
        assert result.success is False
        assert "not configured" in result.error


@pytest.mark.unit
class TestValidateConnection:
    def test_healthy(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(200, {"status": "ok"})
        publisher = _publisher(session, connect_timeout=2.0)

        assert publisher.validate_connection() is True
        session.get.assert_called_once_with("https://wcart.test/api/health", timeout=2.0)

    def test_unreachable(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        assert _publisher(session).validate_connection() is False

    def test_unhealthy_status(self) -> None:
        session = MagicMock()
        session.get.return_value = _response(503, {"error": "down"})
        assert _publisher(session).validate_connection() is False

    def test_no_url(self) -> None:
        assert WcartPublisher("", session=MagicMock()).validate_connection() is False


@pytest.mark.unit
def test_session_carries_bearer_token() -> None:
    publisher = WcartPublisher("https://wcart.test/api", api_key="secret")
    assert publisher._session.headers["Authorization"] == "Bearer secret"
    assert publisher._session.headers["Content-Type"] == "application/json"


@pytest.mark.unit
def test_from_settings() -> None:
    settings = MigrationSettings(wcart_api_url="https://w.test", publish_timeout=9.0, dry_run=True)
    publisher = WcartPublisher.from_settings(settings, session=MagicMock())
    assert publisher.base_url == "https://w.test"
    assert publisher.timeout == 9.0
    assert publisher.dry_run is True


@pytest.mark.unit
def test_close_closes_session() -> None:
    session = MagicMock()
    WcartPublisher("https://w.test", session=session).close()
    session.close.assert_called_once_with()
