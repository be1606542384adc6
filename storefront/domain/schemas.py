# storefront/domain/schemas.py
from datetime import datetime
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")
OrderStatus = Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]


class CamelModel(BaseModel):
    """Pola snake_case w pythonie, camelCase w JSON (tak jak oczekuje frontend)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Koperta odpowiedzi `{success, data, message}`."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: Optional[bool] = None


class PagedResponse(ApiResponse[T], Generic[T]):
    pagination: Pagination


class SearchResponse(PagedResponse[T], Generic[T]):
    query: str


# ---------------------------------------------------------------- products


class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    """Produkt w odpowiedzi; `category` i `inStock` sa wyliczane przy odczycie."""

    id: int
    slug: str
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category_id: Optional[int] = None
    category: str = "uncategorized"
    categories: Optional[CategoryOut] = None
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    specifications: Optional[Dict[str, Any]] = None
    featured: bool = False
    inStock: bool = False
    created_at: datetime
    updated_at: datetime


class ProductQuery(BaseModel):
    """Filtry listy produktow; flagi `featured`/`inStock` to napisy "true"."""

    category: Optional[str] = None
    search: Optional[str] = None
    sort: Literal["name", "price", "created_at", "updated_at", "stock", "id"] = "name"
    order: Literal["asc", "desc"] = "asc"
    limit: int = Field(50, ge=1, le=100)
    offset: int = Field(0, ge=0)
    minPrice: Optional[float] = Field(None, ge=0)
    maxPrice: Optional[float] = Field(None, ge=0)
    featured: Optional[str] = None
    inStock: Optional[str] = None


class ProductWrite(BaseModel):
    """Payload zapisu produktu (create/update). Nieznane pola sa odrzucane."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    inStock: Optional[bool] = None
    category_id: Optional[int] = None
    category: Optional[str] = None
    categorySlug: Optional[str] = None
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    specifications: Optional[Dict[str, Any]] = None
    featured: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class ProductCreate(ProductWrite):
    name: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0)


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0, description="Ilosc (nieujemna)")
    operation: Literal["set", "add", "subtract"] = "set"


# ---------------------------------------------------------------- cart


class CartLine(CamelModel):
    id: int
    product_id: int
    quantity: int
    price: float
    name: str
    image: str
    created_at: datetime
    updated_at: datetime


class CartItemIn(CamelModel):
    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    quantity: int = Field(1, ge=1, le=99, description="Ilosc produktu")


class CartQuantityIn(BaseModel):
    quantity: int = Field(..., ge=1, le=99)


class CartOut(BaseModel):
    items: List[CartLine]
    total: float
    count: int


class CartSummary(BaseModel):
    total: float
    items: int
    formatted: str


# ---------------------------------------------------------------- wishlist


class WishlistLine(CamelModel):
    id: int
    product_id: int
    name: str
    price: float
    image: str
    created_at: datetime


class WishlistItemIn(BaseModel):
    product_id: int = Field(..., gt=0)


class WishlistCheck(BaseModel):
    productId: int
    inWishlist: bool


class MoveToCartResult(BaseModel):
    moved: int
    cart: CartOut


# ---------------------------------------------------------------- orders


class OrderOut(CamelModel):
    id: int
    user_id: str
    items: List[CartLine]
    total_amount: float
    status: OrderStatus
    shipping_address: Optional[Union[str, Dict[str, Any]]] = None
    created_at: datetime
    updated_at: datetime


class OrderCreate(CamelModel):
    shipping_address: Optional[Union[str, Dict[str, Any]]] = None


class OrderStatusIn(BaseModel):
    status: str


class OrderStats(CamelModel):
    count: int
    total_spent: float
    by_status: Dict[str, int]


# ---------------------------------------------------------------- misc


class HealthOut(BaseModel):
    status: str
    timestamp: datetime
