# storefront/api/deps.py
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import NotAuthenticatedError
from storefront.repos.session_store import SessionStore
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.services.product_service import ProductService
from storefront.services.wishlist_service import WishlistService


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise NotAuthenticatedError("User not authenticated")
    return x_user_id.strip()


def get_session_store(request: Request) -> SessionStore:
    # magazyn jest tworzony w create_app i wstrzykiwany, nie jest globalem modulu
    return request.app.state.session_store


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_cart_service(
    store: SessionStore = Depends(get_session_store),
    products: ProductService = Depends(get_product_service),
) -> CartService:
    return CartService(store, products)


def get_wishlist_service(
    store: SessionStore = Depends(get_session_store),
    products: ProductService = Depends(get_product_service),
    cart: CartService = Depends(get_cart_service),
) -> WishlistService:
    return WishlistService(store, products, cart)


def get_order_service(
    store: SessionStore = Depends(get_session_store),
    cart: CartService = Depends(get_cart_service),
) -> OrderService:
    return OrderService(store, cart)
