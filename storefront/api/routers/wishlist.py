# storefront/api/routers/wishlist.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_user_id, get_wishlist_service
from storefront.domain.schemas import ApiResponse, MoveToCartResult, WishlistCheck, WishlistItemIn, WishlistLine
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


@router.get("", response_model=ApiResponse[List[WishlistLine]])
def get_wishlist_items(user_id: str = Depends(get_user_id), svc: WishlistService = Depends(get_wishlist_service)):
    return ApiResponse[List[WishlistLine]](data=svc.get_items(user_id))


@router.post("", response_model=ApiResponse[WishlistLine])
def add_to_wishlist(
    payload: WishlistItemIn,
    user_id: str = Depends(get_user_id),
    svc: WishlistService = Depends(get_wishlist_service),
):
    line = svc.add_item(user_id, payload.product_id)
    return ApiResponse[WishlistLine](data=line, message="Item added to wishlist successfully")


@router.post("/toggle", response_model=ApiResponse[WishlistLine])
def toggle_wishlist(
    payload: WishlistItemIn,
    user_id: str = Depends(get_user_id),
    svc: WishlistService = Depends(get_wishlist_service),
):
    added, line = svc.toggle(user_id, payload.product_id)
    if added:
        return ApiResponse[WishlistLine](data=line, message="Item added to wishlist successfully")
    return ApiResponse[WishlistLine](message="Item removed from wishlist successfully")


@router.get("/check/{product_id}", response_model=ApiResponse[WishlistCheck])
def check_wishlist_status(
    product_id: int,
    user_id: str = Depends(get_user_id),
    svc: WishlistService = Depends(get_wishlist_service),
):
    return ApiResponse[WishlistCheck](
        data=WishlistCheck(productId=product_id, inWishlist=svc.contains(user_id, product_id))
    )


@router.post("/move-to-cart", response_model=ApiResponse[MoveToCartResult])
def move_all_to_cart(user_id: str = Depends(get_user_id), svc: WishlistService = Depends(get_wishlist_service)):
    result = svc.move_to_cart(user_id)
    return ApiResponse[MoveToCartResult](data=result, message=f"Moved {result.moved} items to cart")


@router.delete("/{product_id}", response_model=ApiResponse[None])
def remove_from_wishlist(
    product_id: int,
    user_id: str = Depends(get_user_id),
    svc: WishlistService = Depends(get_wishlist_service),
):
    # brak pozycji nie jest bledem
    removed = svc.remove_item(user_id, product_id)
    message = "Item removed from wishlist successfully" if removed else "Item was not in wishlist"
    return ApiResponse[None](message=message)


@router.delete("", response_model=ApiResponse[None])
def clear_wishlist(user_id: str = Depends(get_user_id), svc: WishlistService = Depends(get_wishlist_service)):
    svc.clear(user_id)
    return ApiResponse[None](message="Wishlist cleared successfully")
