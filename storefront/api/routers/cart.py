# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_cart_service, get_user_id
from storefront.domain.schemas import ApiResponse, CartItemIn, CartLine, CartOut, CartQuantityIn, CartSummary
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.get("", response_model=ApiResponse[CartOut])
def get_cart(user_id: str = Depends(get_user_id), svc: CartService = Depends(get_cart_service)):
    return ApiResponse[CartOut](data=svc.get_cart(user_id))


@router.get("/summary", response_model=ApiResponse[CartSummary])
def get_cart_summary(user_id: str = Depends(get_user_id), svc: CartService = Depends(get_cart_service)):
    return ApiResponse[CartSummary](data=svc.get_summary(user_id))


@router.post("", response_model=ApiResponse[CartLine])
def add_to_cart(
    payload: CartItemIn,
    user_id: str = Depends(get_user_id),
    svc: CartService = Depends(get_cart_service),
):
    line = svc.add_item(user_id, payload.product_id, payload.quantity)
    return ApiResponse[CartLine](data=line, message="Item added to cart successfully")


@router.put("/{product_id}", response_model=ApiResponse[CartLine])
def update_cart_item_quantity(
    product_id: int,
    payload: CartQuantityIn,
    user_id: str = Depends(get_user_id),
    svc: CartService = Depends(get_cart_service),
):
    line = svc.update_quantity(user_id, product_id, payload.quantity)
    return ApiResponse[CartLine](data=line, message="Cart item updated successfully")


@router.delete("/{product_id}", response_model=ApiResponse[CartLine])
def remove_from_cart(
    product_id: int,
    user_id: str = Depends(get_user_id),
    svc: CartService = Depends(get_cart_service),
):
    line = svc.remove_item(user_id, product_id)
    return ApiResponse[CartLine](data=line, message="Item removed from cart successfully")


@router.delete("", response_model=ApiResponse[None])
def clear_cart(user_id: str = Depends(get_user_id), svc: CartService = Depends(get_cart_service)):
    svc.clear(user_id)
    return ApiResponse[None](message="Cart cleared successfully")
