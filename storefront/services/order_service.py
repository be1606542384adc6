# storefront/services/order_service.py
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List

from storefront.domain.errors import NotFoundError, ValidationFailedError
from storefront.domain.schemas import ORDER_STATUSES, OrderOut, OrderStats
from storefront.repos.session_store import ORDERS, SessionStore
from storefront.services.cart_service import CartService, require_user
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# po wysylce nie da sie juz anulowac
NON_CANCELLABLE = {"shipped", "delivered"}


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Zamowienie powstaje z migawki koszyka; pozniej zmienia sie tylko status.
    """

    def __init__(self, store: SessionStore, cart: CartService, notifications: NotificationService | None = None):
        self.store = store
        self.cart = cart
        self.notification_service = notifications or NotificationService()

    def _orders(self, user_id: str) -> List[OrderOut]:
        return [OrderOut.model_validate(raw) for raw in self.store.get(ORDERS, user_id)]

    def _save(self, user_id: str, orders: List[OrderOut]) -> None:
        self.store.put(ORDERS, user_id, [o.model_dump(mode="json") for o in orders])

    def _notify(self, user_id: str, order_id: int, status: str) -> None:
        # zamowienie jest juz zapisane, awaria brokera nie moze cofnac odpowiedzi
        try:
            self.notification_service.send_order_notification(user_id, order_id, status)
        except Exception as e:
            logger.warning(f"Notification for order {order_id} ({status}) not published: {e}")

    def create_order(self, user_id: str | None, shipping_address: Any = None) -> OrderOut:
        """
        Use Case: Tworzenie zamowienia z koszyka.

        1. Pobiera i czysci koszyk (jedna sekcja krytyczna)
        2. Oblicza total
        3. Zapisuje zamowienie w statusie pending
        4. Wysyla powiadomienie (async)
        """
        user_id = require_user(user_id)

        items = self.cart.take_snapshot(user_id)
        if not items:
            raise ValidationFailedError("No items in order")

        now = datetime.now(timezone.utc)
        order = OrderOut(
            id=self.store.next_id(ORDERS),
            user_id=user_id,
            items=items,
            total_amount=round(sum(i.price * i.quantity for i in items), 2),
            status="pending",
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
        )

        with self.store.lock(ORDERS, user_id):
            orders = self._orders(user_id)
            orders.append(order)
            self._save(user_id, orders)

        logger.info(f"Order {order.id} created for {user_id} ({len(items)} lines, total {order.total_amount})")
        self._notify(user_id, order.id, order.status)
        return order

    def list_orders(self, user_id: str | None, status: str | None = None) -> List[OrderOut]:
        orders = self._orders(require_user(user_id))
        if status:
            orders = [o for o in orders if o.status == status]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def get_order(self, user_id: str | None, order_id: int) -> OrderOut:
        user_id = require_user(user_id)
        order = next((o for o in self._orders(user_id) if o.id == order_id), None)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def update_status(self, user_id: str | None, order_id: int, status: str) -> OrderOut:
        user_id = require_user(user_id)
        if status not in ORDER_STATUSES:
            raise ValidationFailedError("Invalid status")

        with self.store.lock(ORDERS, user_id):
            orders = self._orders(user_id)
            order = next((o for o in orders if o.id == order_id), None)
            if not order:
                raise NotFoundError("Order not found")

            order.status = status
            order.updated_at = datetime.now(timezone.utc)
            self._save(user_id, orders)

        logger.info(f"Order {order_id} of {user_id} -> {status}")
        self._notify(user_id, order_id, status)
        return order

    def cancel_order(self, user_id: str | None, order_id: int) -> OrderOut:
        order = self.get_order(user_id, order_id)
        if order.status == "cancelled":
            return order
        if order.status in NON_CANCELLABLE:
            raise ValidationFailedError(f"Order already {order.status} and cannot be cancelled")
        return self.update_status(user_id, order_id, "cancelled")

    def get_stats(self, user_id: str | None) -> OrderStats:
        orders = self._orders(require_user(user_id))
        by_status: Dict[str, int] = dict.fromkeys(ORDER_STATUSES, 0)
        by_status.update(Counter(o.status for o in orders))
        return OrderStats(
            count=len(orders),
            total_spent=round(sum(o.total_amount for o in orders if o.status != "cancelled"), 2),
            by_status=by_status,
        )
