# storefront/client/gateway.py
"""
Klient HTTP API sklepu.

`ApiClient` sklada bazowy URL, naglowki JSON, token bearer z lokalnego
magazynu i tozsamosc (`X-User-Id`). Kazda odpowiedz spoza 2xx konczy sie
jednym typem bledu, `ApiError`, z czytelnym komunikatem.
"""
import json
from pathlib import Path
from typing import Any, Dict

import requests

from storefront.utils.settings import API_BASE_URL, API_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

TOKEN_KEY = "authToken"


class ApiError(Exception):
    def __init__(self, message: str, status: int | None = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload


def extract_error_message(response: requests.Response) -> str:
    """message -> error -> details[].message -> linia statusu HTTP."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    message = body.get("message") or body.get("error")

    details = body.get("details")
    if not message and isinstance(details, list) and details:
        message = ", ".join(
            d["message"] for d in details if isinstance(d, dict) and d.get("message")
        )

    if not message:
        message = f"HTTP {response.status_code}: {response.reason}"
    return message


class TokenStore:
    """Odpowiednik localStorage przegladarki: slownik JSON w jednym pliku."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8") or "{}")

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def remove(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self.path.write_text(json.dumps(data), encoding="utf-8")


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        storage: TokenStore | None = None,
        user_id: str | None = None,
        session: requests.Session | None = None,
        timeout: float = API_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self.storage = storage
        self.user_id = user_id
        self.session = session or requests.Session()
        self.timeout = timeout

        self.products = ProductsAPI(self)
        self.cart = CartAPI(self)
        self.wishlist = WishlistAPI(self)
        self.orders = OrdersAPI(self)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.storage.get(TOKEN_KEY) if self.storage else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if self.user_id:
            headers["X-User-Id"] = str(self.user_id)
        return headers

    def request(self, method: str, endpoint: str, *, json_body: Any = None, params: Dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"ApiClient {method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                json=json_body,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(str(e)) from e

        if not response.ok:
            raise ApiError(extract_error_message(response), status=response.status_code)
        return response.json()


def _unwrap(body: Any) -> Any:
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


class ProductsAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_products(self, **params) -> Any:
        return _unwrap(self.client.request("GET", "/products", params=params or None))

    def get_product(self, product_id: int) -> Any:
        return _unwrap(self.client.request("GET", f"/products/{product_id}"))

    def get_categories(self) -> Any:
        return _unwrap(self.client.request("GET", "/products/categories"))

    def create_product(self, product: Dict[str, Any]) -> Any:
        return _unwrap(self.client.request("POST", "/products", json_body=product))

    def update_product(self, product_id: int, product: Dict[str, Any]) -> Any:
        return _unwrap(self.client.request("PUT", f"/products/{product_id}", json_body=product))

    def delete_product(self, product_id: int) -> Any:
        return _unwrap(self.client.request("DELETE", f"/products/{product_id}"))


class CartAPI:
    """Metody koszyka zwracaja cala koperte odpowiedzi (`success`, `data`, `message`)."""

    def __init__(self, client: ApiClient):
        self.client = client

    def get_cart_items(self) -> Any:
        return self.client.request("GET", "/cart")

    def get_cart_summary(self) -> Any:
        return self.client.request("GET", "/cart/summary")

    def add_to_cart(self, product_id: int, quantity: int = 1) -> Any:
        return self.client.request("POST", "/cart", json_body={"productId": product_id, "quantity": quantity})

    def update_cart_item_quantity(self, product_id: int, quantity: int) -> Any:
        return self.client.request("PUT", f"/cart/{product_id}", json_body={"quantity": quantity})

    def remove_from_cart(self, product_id: int) -> Any:
        return self.client.request("DELETE", f"/cart/{product_id}")

    def clear_cart(self) -> Any:
        return self.client.request("DELETE", "/cart")


class WishlistAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_wishlist_items(self) -> Any:
        return self.client.request("GET", "/wishlist")

    def add_to_wishlist(self, product_id: int) -> Any:
        return self.client.request("POST", "/wishlist", json_body={"product_id": product_id})

    def remove_from_wishlist(self, product_id: int) -> Any:
        return self.client.request("DELETE", f"/wishlist/{product_id}")

    def toggle_wishlist(self, product_id: int) -> Any:
        return self.client.request("POST", "/wishlist/toggle", json_body={"product_id": product_id})

    def check_wishlist_status(self, product_id: int) -> Any:
        return self.client.request("GET", f"/wishlist/check/{product_id}")

    def move_all_to_cart(self) -> Any:
        return self.client.request("POST", "/wishlist/move-to-cart")

    def clear_wishlist(self) -> Any:
        return self.client.request("DELETE", "/wishlist")


class OrdersAPI:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_orders(self, **params) -> Any:
        return self.client.request("GET", "/orders", params=params or None)

    def get_order(self, order_id: int) -> Any:
        return self.client.request("GET", f"/orders/{order_id}")

    def create_order(self, shipping_address: Any = None) -> Any:
        return self.client.request("POST", "/orders", json_body={"shippingAddress": shipping_address})

    def update_order_status(self, order_id: int, status: str) -> Any:
        return self.client.request("PUT", f"/orders/{order_id}/status", json_body={"status": status})

    def cancel_order(self, order_id: int) -> Any:
        return self.client.request("DELETE", f"/orders/{order_id}/cancel")

    def get_order_stats(self) -> Any:
        return self.client.request("GET", "/orders/stats")
