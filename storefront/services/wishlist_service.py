# storefront/services/wishlist_service.py
from datetime import datetime, timezone
from typing import List, Tuple

from storefront.domain.errors import ConflictError, NotFoundError
from storefront.domain.schemas import MoveToCartResult, WishlistLine
from storefront.repos.session_store import WISHLIST, SessionStore
from storefront.services.cart_service import PLACEHOLDER_IMAGE, CartService, require_user
from storefront.services.product_service import ProductService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class WishlistService:
    """Wishlist ma semantyke zbioru po product_id; id linii == product_id."""

    def __init__(self, store: SessionStore, products: ProductService, cart: CartService):
        self.store = store
        self.products = products
        self.cart = cart

    def _lines(self, user_id: str) -> List[WishlistLine]:
        return [WishlistLine.model_validate(raw) for raw in self.store.get(WISHLIST, user_id)]

    def _save(self, user_id: str, lines: List[WishlistLine]) -> None:
        self.store.put(WISHLIST, user_id, [line.model_dump(mode="json") for line in lines])

    def _new_line(self, product_id: int) -> WishlistLine:
        product = self.products.get_product_by_id(product_id)
        return WishlistLine(
            id=product_id,
            product_id=product_id,
            name=product.name,
            price=product.price,
            image=product.images[0] if product.images else PLACEHOLDER_IMAGE,
            created_at=datetime.now(timezone.utc),
        )

    def get_items(self, user_id: str | None) -> List[WishlistLine]:
        return self._lines(require_user(user_id))

    def contains(self, user_id: str | None, product_id: int) -> bool:
        return any(line.product_id == product_id for line in self._lines(require_user(user_id)))

    def add_item(self, user_id: str | None, product_id: int) -> WishlistLine:
        user_id = require_user(user_id)
        line = self._new_line(product_id)

        with self.store.lock(WISHLIST, user_id):
            lines = self._lines(user_id)
            if any(existing.product_id == product_id for existing in lines):
                raise ConflictError("Product already in wishlist")
            lines.append(line)
            self._save(user_id, lines)

        logger.info(f"Product {product_id} added to wishlist of {user_id}")
        return line

    def remove_item(self, user_id: str | None, product_id: int) -> bool:
        """Usuniecie nieistniejacej pozycji to no-op (w koszyku jest 404)."""
        user_id = require_user(user_id)

        with self.store.lock(WISHLIST, user_id):
            lines = self._lines(user_id)
            remaining = [line for line in lines if line.product_id != product_id]
            removed = len(remaining) != len(lines)
            if removed:
                self._save(user_id, remaining)

        logger.info(f"Wishlist of {user_id}: remove {product_id} (removed={removed})")
        return removed

    def toggle(self, user_id: str | None, product_id: int) -> Tuple[bool, WishlistLine | None]:
        user_id = require_user(user_id)

        with self.store.lock(WISHLIST, user_id):
            lines = self._lines(user_id)
            if any(line.product_id == product_id for line in lines):
                self._save(user_id, [line for line in lines if line.product_id != product_id])
                logger.info(f"Wishlist of {user_id}: toggled {product_id} off")
                return False, None

            line = self._new_line(product_id)
            lines.append(line)
            self._save(user_id, lines)

        logger.info(f"Wishlist of {user_id}: toggled {product_id} on")
        return True, line

    def move_to_cart(self, user_id: str | None) -> MoveToCartResult:
        user_id = require_user(user_id)

        with self.store.lock(WISHLIST, user_id):
            moved = 0
            for line in self._lines(user_id):
                try:
                    self.cart.add_item(user_id, line.product_id, 1)
                    moved += 1
                except NotFoundError:
                    logger.warning(f"Product {line.product_id} no longer exists, dropped from wishlist")
            self.store.put(WISHLIST, user_id, [])

        logger.info(f"Moved {moved} wishlist items to cart of {user_id}")
        return MoveToCartResult(moved=moved, cart=self.cart.get_cart(user_id))

    def clear(self, user_id: str | None) -> None:
        user_id = require_user(user_id)
        with self.store.lock(WISHLIST, user_id):
            self.store.put(WISHLIST, user_id, [])
