# storefront/services/cart_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List

from storefront.domain.errors import NotAuthenticatedError, NotFoundError, ValidationFailedError
from storefront.domain.schemas import CartLine, CartOut, CartSummary
from storefront.repos.session_store import CART, SessionStore
from storefront.services.product_service import ProductService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.jpg"


def require_user(user_id: str | None) -> str:
    # brak wspolnego "test-user-id", kazde wywolanie musi miec tozsamosc
    if not user_id:
        raise NotAuthenticatedError("User not authenticated")
    return user_id


def cart_totals(lines: List[CartLine]) -> Dict[str, Any]:
    return {
        "total": round(sum(line.price * line.quantity for line in lines), 2),
        "count": sum(line.quantity for line in lines),
    }


class CartService:
    """
    Prosta implementacja cqrs dla koszyka
    commands (add, update, remove, clear) modyfikuja stan pod blokada usera
    query (get, summary) tylko odczyt
    """

    def __init__(self, store: SessionStore, products: ProductService):
        self.store = store
        self.products = products

    def _lines(self, user_id: str) -> List[CartLine]:
        return [CartLine.model_validate(raw) for raw in self.store.get(CART, user_id)]

    def _save(self, user_id: str, lines: List[CartLine]) -> None:
        self.store.put(CART, user_id, [line.model_dump(mode="json") for line in lines])

    #query
    def get_cart(self, user_id: str | None) -> CartOut:
        user_id = require_user(user_id)
        lines = self._lines(user_id)
        return CartOut(items=lines, **cart_totals(lines))

    def get_summary(self, user_id: str | None) -> CartSummary:
        user_id = require_user(user_id)
        totals = cart_totals(self._lines(user_id))
        return CartSummary(
            total=totals["total"],
            items=totals["count"],
            formatted=f"${totals['total']:.2f}",
        )

    #commands
    def add_item(self, user_id: str | None, product_id: int, quantity: int = 1) -> CartLine:
        user_id = require_user(user_id)
        if quantity <= 0:
            raise ValidationFailedError("Quantity must be greater than 0")

        # cena i dane do wyswietlenia zawsze z katalogu, nie od klienta
        product = self.products.get_product_by_id(product_id)
        now = datetime.now(timezone.utc)

        with self.store.lock(CART, user_id):
            lines = self._lines(user_id)
            existing = next((line for line in lines if line.product_id == product_id), None)

            if existing:
                logger.info(
                    f"Product {product_id} already in cart of {user_id}, "
                    f"quantity {existing.quantity} -> {existing.quantity + quantity}"
                )
                existing.quantity += quantity
                existing.price = product.price
                existing.updated_at = now
                line = existing
            else:
                logger.info(f"Adding product {product_id} to cart of {user_id}")
                line = CartLine(
                    id=self.store.next_id(CART),
                    product_id=product_id,
                    quantity=quantity,
                    price=product.price,
                    name=product.name,
                    image=product.images[0] if product.images else PLACEHOLDER_IMAGE,
                    created_at=now,
                    updated_at=now,
                )
                lines.append(line)

            self._save(user_id, lines)
        return line

    def update_quantity(self, user_id: str | None, product_id: int, quantity: int) -> CartLine:
        user_id = require_user(user_id)
        if quantity < 1:
            raise ValidationFailedError("Product ID and valid quantity are required")

        with self.store.lock(CART, user_id):
            lines = self._lines(user_id)
            line = next((line for line in lines if line.product_id == product_id), None)
            if not line:
                raise NotFoundError("Cart item not found")

            line.quantity = quantity
            line.updated_at = datetime.now(timezone.utc)
            self._save(user_id, lines)

        logger.info(f"Cart of {user_id}: product {product_id} quantity set to {quantity}")
        return line

    def remove_item(self, user_id: str | None, product_id: int) -> CartLine:
        """Usuwa linie; brak linii to 404 (wishlist w tej sytuacji nie zglasza bledu)."""
        user_id = require_user(user_id)

        with self.store.lock(CART, user_id):
            lines = self._lines(user_id)
            removed = next((line for line in lines if line.product_id == product_id), None)
            if not removed:
                raise NotFoundError("Cart item not found")
            self._save(user_id, [line for line in lines if line.product_id != product_id])

        logger.info(f"Product {product_id} removed from cart of {user_id}")
        return removed

    def clear(self, user_id: str | None) -> None:
        user_id = require_user(user_id)
        with self.store.lock(CART, user_id):
            self.store.put(CART, user_id, [])
        logger.info(f"Cart of {user_id} cleared")

    def take_snapshot(self, user_id: str) -> List[CartLine]:
        """Zwraca linie i czysci koszyk w jednej sekcji krytycznej (dla zamowien)."""
        with self.store.lock(CART, user_id):
            lines = self._lines(user_id)
            if lines:
                self.store.put(CART, user_id, [])
        return lines
