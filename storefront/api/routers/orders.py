# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_order_service, get_user_id
from storefront.domain.schemas import ApiResponse, OrderCreate, OrderOut, OrderStats, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=ApiResponse[List[OrderOut]])
def get_orders(
    status: str | None = Query(None),
    user_id: str = Depends(get_user_id),
    svc: OrderService = Depends(get_order_service),
):
    return ApiResponse[List[OrderOut]](data=svc.list_orders(user_id, status))


@router.get("/stats", response_model=ApiResponse[OrderStats])
def get_order_stats(user_id: str = Depends(get_user_id), svc: OrderService = Depends(get_order_service)):
    return ApiResponse[OrderStats](data=svc.get_stats(user_id))


@router.post("", response_model=ApiResponse[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: str = Depends(get_user_id),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z aktualnego koszyka i czysci koszyk.
    Wysyla powiadomienie asynchronicznie.
    """
    order = svc.create_order(user_id, payload.shipping_address)
    return ApiResponse[OrderOut](data=order, message="Order created successfully")


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(order_id: int, user_id: str = Depends(get_user_id), svc: OrderService = Depends(get_order_service)):
    return ApiResponse[OrderOut](data=svc.get_order(user_id, order_id))


@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut])
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    user_id: str = Depends(get_user_id),
    svc: OrderService = Depends(get_order_service),
):
    order = svc.update_status(user_id, order_id, payload.status)
    return ApiResponse[OrderOut](data=order, message="Order status updated successfully")


@router.delete("/{order_id}/cancel", response_model=ApiResponse[OrderOut])
def cancel_order(order_id: int, user_id: str = Depends(get_user_id), svc: OrderService = Depends(get_order_service)):
    return ApiResponse[OrderOut](data=svc.cancel_order(user_id, order_id), message="Order cancelled successfully")
