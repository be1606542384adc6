"""Tests for the HTTP client, token storage and local history."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from storefront.client.gateway import ApiClient, ApiError, TokenStore, extract_error_message
from storefront.client.local_history import RECENTLY_VIEWED_LIMIT, LocalHistory


def make_response(status: int, body=None, reason: str = "Bad Request") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def storage(tmp_path):
    return TokenStore(tmp_path / "storage.json")


class TestExtractErrorMessage:
    def test_prefers_message(self):
        body = {"error": "Validation failed", "message": "Quantity must be greater than 0"}
        assert extract_error_message(make_response(400, body)) == "Quantity must be greater than 0"

    def test_falls_back_to_error(self):
        assert extract_error_message(make_response(409, {"error": "Conflict"})) == "Conflict"

    def test_joins_detail_messages(self):
        body = {"details": [{"field": "price", "message": "too low"}, {"field": "name", "message": "missing"}]}
        assert extract_error_message(make_response(400, body)) == "too low, missing"

    def test_status_line_when_body_is_not_json(self):
        response = make_response(502, reason="Bad Gateway")
        response._content = b"<html>proxy error</html>"

        assert extract_error_message(response) == "HTTP 502: Bad Gateway"


class TestTokenStore:
    def test_set_get_remove(self, storage):
        assert storage.get("authToken") is None

        storage.set("authToken", "abc")
        assert storage.get("authToken") == "abc"

        storage.remove("authToken")
        assert storage.get("authToken", "none") == "none"


class TestApiClient:
    def test_headers_carry_token_and_identity(self, storage):
        storage.set("authToken", "secret")
        session = MagicMock()
        session.request.return_value = make_response(200, {"success": True, "data": []}, reason="OK")

        client = ApiClient("http://shop.test/api/", storage=storage, user_id="user-1", session=session)
        client.cart.get_cart_items()

        args, kwargs = session.request.call_args
        assert args == ("GET", "http://shop.test/api/cart")
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["headers"]["X-User-Id"] == "user-1"
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_no_authorization_without_token(self, storage):
        session = MagicMock()
        session.request.return_value = make_response(200, {"success": True}, reason="OK")

        ApiClient("http://shop.test/api", storage=storage, session=session).cart.clear_cart()

        headers = session.request.call_args.kwargs["headers"]
        assert "Authorization" not in headers
        assert "X-User-Id" not in headers

    def test_cart_add_sends_product_and_quantity(self):
        session = MagicMock()
        session.request.return_value = make_response(200, {"success": True, "data": {"id": 1}}, reason="OK")

        body = ApiClient("http://shop.test/api", session=session).cart.add_to_cart(7, 2)

        assert session.request.call_args.kwargs["json"] == {"productId": 7, "quantity": 2}
        assert body == {"success": True, "data": {"id": 1}}

    def test_product_calls_unwrap_data(self):
        session = MagicMock()
        session.request.return_value = make_response(200, {"success": True, "data": [{"id": 1}]}, reason="OK")

        products = ApiClient("http://shop.test/api", session=session).products.get_products(limit=5)

        assert products == [{"id": 1}]
        assert session.request.call_args.kwargs["params"] == {"limit": 5}

    def test_error_response_raises_api_error(self):
        session = MagicMock()
        session.request.return_value = make_response(404, {"success": False, "message": "Cart item not found"})

        with pytest.raises(ApiError) as exc:
            ApiClient("http://shop.test/api", session=session).cart.remove_from_cart(3)

        assert exc.value.status == 404
        assert exc.value.message == "Cart item not found"

    def test_network_failure_raises_api_error(self):
        session = MagicMock()
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(ApiError) as exc:
            ApiClient("http://shop.test/api", session=session).orders.get_orders()

        assert exc.value.status is None
        assert "connection refused" in exc.value.message


class TestLocalHistory:
    def test_record_view_prepends_and_keeps_existing_position(self, storage):
        history = LocalHistory(storage)

        history.record_view(1, "Lamp")
        history.record_view(2, "Sofa")
        entries = history.record_view(1, "Lamp")

        assert [e["id"] for e in entries] == [2, 1]
        assert history.recently_viewed() == entries

    def test_recently_viewed_is_capped(self, storage):
        history = LocalHistory(storage)

        for product_id in range(RECENTLY_VIEWED_LIMIT + 5):
            history.record_view(product_id)

        entries = history.recently_viewed()
        assert len(entries) == RECENTLY_VIEWED_LIMIT
        assert entries[0]["id"] == RECENTLY_VIEWED_LIMIT + 4

    def test_reviews_are_appended_per_product(self, storage):
        history = LocalHistory(storage)

        history.save_review(5, 4, "Comfy")
        history.save_review(5, 2, "Squeaks")

        assert [r["rating"] for r in history.reviews(5)] == [4, 2]
        assert history.reviews(6) == []

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, storage, rating):
        with pytest.raises(ValueError):
            LocalHistory(storage).save_review(5, rating)
