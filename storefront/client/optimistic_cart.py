# storefront/client/optimistic_cart.py
"""
Optymistyczny koszyk po stronie klienta.

Kazda operacja najpierw synchronicznie zmienia lokalny stan, potem wysyla
zadanie do API i po odpowiedzi albo uzgadnia stan z serwerem, albo go
cofa. Cykl zycia operacji: idle -> optimistic-applied -> confirmed | rolled-back.

Operacje w locie to rekordy `PendingOperation` w uporzadkowanym slowniku
kluczowanym `operation_id`; uzgadnianie zawsze szuka po tym id, nigdy nie
zgaduje ktora linia sie zmienila. Dla kazdego klucza (produkt albo "clear")
pamietamy numer ostatniej operacji: odpowiedz starszej operacji nie nadpisuje
wartosci ustawionej przez nowsza (rozwiazanie wyscigu dwoch update'ow).
"""
import asyncio
import copy
import itertools
import secrets
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional

from storefront.client.gateway import ApiError, CartAPI
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

NOT_AUTHENTICATED = "not-authenticated"
ITEM_NOT_FOUND = "Item not found in cart"
PLACEHOLDER_IMAGE = "/placeholder.jpg"
CLEAR_KEY = "clear"

OperationKind = Literal["add", "remove", "update", "clear"]
LOADING_TAGS = {"add": "adding", "remove": "removing", "update": "updating", "clear": "clearing"}

Listener = Callable[[str, str], None]


@dataclass
class CartLine:
    id: Any
    product_id: int
    quantity: int
    price: float
    name: str
    image: str = PLACEHOLDER_IMAGE
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_optimistic: bool = False
    operation_id: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "productId": self.product_id,
            "quantity": self.quantity,
            "price": self.price,
            "name": self.name,
            "image": self.image,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        # znaczniki optymistyczne tylko w oknie miedzy wyslaniem a odpowiedzia
        if self.is_optimistic:
            data["isOptimistic"] = True
            data["operationId"] = self.operation_id
        return data

    @classmethod
    def from_server(cls, raw: Dict[str, Any]) -> "CartLine":
        return cls(
            id=raw["id"],
            product_id=raw.get("productId", raw.get("product_id")),
            quantity=raw["quantity"],
            price=raw.get("price", 0),
            name=raw.get("name", "Unknown Product"),
            image=raw.get("image", PLACEHOLDER_IMAGE),
            created_at=raw.get("createdAt"),
            updated_at=raw.get("updatedAt"),
        )


@dataclass
class PendingOperation:
    kind: OperationKind
    key: Any
    operation_id: str
    sequence: int
    # add: dodana ilosc, remove: kopia linii, update: poprzednia ilosc, clear: kopia koszyka
    snapshot: Any = None
    merged: bool = False


@dataclass
class OperationResult:
    success: bool
    data: Any = None
    error: Any = None


class AsyncCartAPI:
    """Adapter synchronicznego `CartAPI` (requests) na korutyny."""

    def __init__(self, cart_api: CartAPI):
        self._api = cart_api

    async def add_to_cart(self, product_id: int, quantity: int) -> Any:
        return await asyncio.to_thread(self._api.add_to_cart, product_id, quantity)

    async def update_cart_item_quantity(self, product_id: int, quantity: int) -> Any:
        return await asyncio.to_thread(self._api.update_cart_item_quantity, product_id, quantity)

    async def remove_from_cart(self, product_id: int) -> Any:
        return await asyncio.to_thread(self._api.remove_from_cart, product_id)

    async def clear_cart(self) -> Any:
        return await asyncio.to_thread(self._api.clear_cart)

    async def get_cart_items(self) -> Any:
        return await asyncio.to_thread(self._api.get_cart_items)


def new_operation_id(kind: str) -> str:
    return f"{kind}-{time.monotonic_ns()}-{secrets.token_hex(4)}"


class OptimisticCart:
    def __init__(self, api: Any, products: Iterable[Dict[str, Any]] = (), user_id: str | None = None):
        self.api = api
        self.user_id = user_id
        self.lines: List[CartLine] = []
        self.catalog: Dict[Any, Dict[str, Any]] = {}
        self.loading: Dict[Any, Optional[str]] = {}
        self.pending: "OrderedDict[str, PendingOperation]" = OrderedDict()
        self._sequence = itertools.count(1)
        self._latest: Dict[Any, int] = {}
        self._listeners: List[Listener] = []
        self.set_catalog(products)

    # ------------------------------------------------------------ state

    def set_catalog(self, products: Iterable[Dict[str, Any]]) -> None:
        self.catalog = {p["id"]: p for p in products}

    def subscribe(self, listener: Listener) -> None:
        """listener(level, message); level to "success", "info" albo "error"."""
        self._listeners.append(listener)

    def load(self, items: Iterable[Dict[str, Any]]) -> None:
        self.lines = [CartLine.from_server(raw) for raw in items]

    async def refresh(self) -> None:
        body = await self.api.get_cart_items()
        self.load(body["data"]["items"])

    @property
    def is_loading(self) -> bool:
        return any(tag is not None for tag in self.loading.values())

    @property
    def has_pending(self) -> bool:
        return bool(self.pending)

    def snapshot(self) -> List[Dict[str, Any]]:
        return [line.as_dict() for line in self.lines]

    def find(self, product_id: int) -> CartLine | None:
        return next((line for line in self.lines if line.product_id == product_id), None)

    # ------------------------------------------------------------ bookkeeping

    def _notify(self, level: str, message: str) -> None:
        for listener in self._listeners:
            listener(level, message)

    def _begin(self, kind: OperationKind, key: Any, snapshot: Any = None) -> PendingOperation:
        op = PendingOperation(
            kind=kind,
            key=key,
            operation_id=new_operation_id(kind),
            sequence=next(self._sequence),
            snapshot=snapshot,
        )
        self._latest[key] = op.sequence
        self.pending[op.operation_id] = op
        self.loading[key] = LOADING_TAGS[kind]
        return op

    def _is_latest(self, op: PendingOperation) -> bool:
        return self._latest.get(op.key) == op.sequence

    def _is_settled(self, op: PendingOperation) -> bool:
        others = any(p.key == op.key for p in self.pending.values() if p is not op)
        return self._is_latest(op) and not others

    def _finish(self, op: PendingOperation) -> None:
        self.pending.pop(op.operation_id, None)
        if self._is_latest(op):
            self.loading[op.key] = None

    async def _dispatch(
        self,
        op: PendingOperation,
        request: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_failure: Callable[[], None],
        failure_message: str,
    ) -> OperationResult:
        # kazdy odrzucony request to rollback; bez retry i bez rozrozniania bledow
        try:
            result = await request()
        except ApiError as e:
            logger.warning(f"Cart operation {op.operation_id} failed: {e.message}")
            on_failure()
            self._finish(op)
            self._notify("error", failure_message)
            return OperationResult(False, error=e)
        except BaseException:
            on_failure()
            self._finish(op)
            raise

        on_success(result)
        self._finish(op)
        return OperationResult(True, data=result)

    # ------------------------------------------------------------ operations

    async def add(self, product_id: int, quantity: int = 1) -> OperationResult:
        if not self.user_id:
            self._notify("error", "Please login to add items to cart")
            return OperationResult(False, error=NOT_AUTHENTICATED)

        op = self._begin("add", product_id, snapshot=quantity)
        existing = self.find(product_id)
        product = self.catalog.get(product_id, {})

        if existing:
            existing.quantity += quantity
            op.merged = True
        else:
            # dane do wyswietlenia z zaladowanego katalogu, odpowiedz serwera ich nie niesie
            images = product.get("images") or []
            self.lines.append(
                CartLine(
                    id=f"temp-{op.operation_id}",
                    product_id=product_id,
                    quantity=quantity,
                    price=product.get("price", 0),
                    name=product.get("name", "Unknown Product"),
                    image=images[0] if images else PLACEHOLDER_IMAGE,
                    is_optimistic=True,
                    operation_id=op.operation_id,
                )
            )
        self._notify("success", "Item added to cart!")

        return await self._dispatch(
            op,
            lambda: self.api.add_to_cart(product_id, quantity),
            on_success=lambda result: self._confirm_add(op, result),
            on_failure=lambda: self._rollback_add(op),
            failure_message="Failed to add item to cart",
        )

    def _confirm_add(self, op: PendingOperation, result: Any) -> None:
        data = (result or {}).get("data") or {}
        line = next((l for l in self.lines if l.operation_id == op.operation_id), None)
        if line is None and op.merged:
            line = self.find(op.key)

        if line is None:
            # nasza linia zniknela (np. rollback innej operacji), serwer ma ja jednak
            if data and self._is_latest(op):
                product = self.catalog.get(op.key, {})
                images = product.get("images") or []
                self.lines.append(
                    CartLine(
                        id=data.get("id"),
                        product_id=op.key,
                        quantity=data.get("quantity", op.snapshot),
                        price=product.get("price", 0),
                        name=product.get("name", "Unknown Product"),
                        image=images[0] if images else PLACEHOLDER_IMAGE,
                    )
                )
            return

        if line.operation_id == op.operation_id:
            if data.get("id") is not None:
                line.id = data["id"]
            line.is_optimistic = False
            line.operation_id = None
        # ilosc z serwera tylko gdy zadna inna operacja na tym produkcie nie jest w locie
        if data.get("quantity") is not None and self._is_settled(op):
            line.quantity = data["quantity"]

    def _rollback_add(self, op: PendingOperation) -> None:
        tagged = next((l for l in self.lines if l.operation_id == op.operation_id), None)
        if tagged is not None:
            self.lines.remove(tagged)
            return
        if op.merged:
            # cofamy tylko wlasny przyrost, potwierdzona linia zostaje
            line = self.find(op.key)
            if line is not None:
                line.quantity -= op.snapshot
                if line.quantity <= 0:
                    self.lines.remove(line)

    async def remove(self, product_id: int) -> OperationResult:
        if not self.user_id:
            return OperationResult(False, error=NOT_AUTHENTICATED)

        line = self.find(product_id)
        if line is None:
            return OperationResult(False, error=ITEM_NOT_FOUND)

        op = self._begin("remove", product_id, snapshot=copy.deepcopy(line))
        self.lines = [l for l in self.lines if l.product_id != product_id]
        self._notify("info", "Item removed from cart")

        return await self._dispatch(
            op,
            lambda: self.api.remove_from_cart(product_id),
            on_success=lambda result: None,
            on_failure=lambda: self._rollback_remove(op),
            failure_message="Failed to remove item",
        )

    def _rollback_remove(self, op: PendingOperation) -> None:
        # pelna kopia linii, dopisana na koniec; nie dublujemy jesli produkt juz wrocil
        if self.find(op.key) is None:
            self.lines.append(op.snapshot)

    async def update_quantity(self, product_id: int, new_quantity: int) -> OperationResult:
        if new_quantity <= 0:
            return await self.remove(product_id)
        if not self.user_id:
            return OperationResult(False, error=NOT_AUTHENTICATED)

        line = self.find(product_id)
        if line is None:
            return OperationResult(False, error=ITEM_NOT_FOUND)

        op = self._begin("update", product_id, snapshot=line.quantity)
        line.quantity = new_quantity

        return await self._dispatch(
            op,
            lambda: self.api.update_cart_item_quantity(product_id, new_quantity),
            on_success=lambda result: None,
            on_failure=lambda: self._rollback_update(op),
            failure_message="Failed to update quantity",
        )

    def _rollback_update(self, op: PendingOperation) -> None:
        # nowsza operacja na tym produkcie wygrywa, stara odpowiedz nic nie cofa
        if not self._is_latest(op):
            return
        line = self.find(op.key)
        if line is not None:
            line.quantity = op.snapshot

    async def clear(self) -> OperationResult:
        if not self.user_id:
            return OperationResult(False, error=NOT_AUTHENTICATED)

        op = self._begin("clear", CLEAR_KEY, snapshot=copy.deepcopy(self.lines))
        self.lines = []
        self._notify("success", "All items removed from cart successfully!")

        return await self._dispatch(
            op,
            lambda: self.api.clear_cart(),
            on_success=lambda result: None,
            on_failure=lambda: self._rollback_clear(op),
            failure_message="Failed to clear cart",
        )

    def _rollback_clear(self, op: PendingOperation) -> None:
        restored = [line for line in op.snapshot if self.find(line.product_id) is None]
        self.lines = restored + self.lines
