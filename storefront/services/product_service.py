# storefront/services/product_service.py
import re
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    ConflictError,
    NotFoundError,
    StorefrontError,
    UpstreamError,
    ValidationFailedError,
    WriteRejectedError,
)
from storefront.domain.schemas import CategoryOut, ProductOut, ProductQuery
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SLUG_CONFLICT = "Product with this slug already exists"


def slugify_name(name: str | None) -> str:
    slug = str(name or "").strip().lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def to_public(product: ProductModel) -> ProductOut:
    """Projekcja odczytu: slug kategorii i `inStock` wyliczone ze `stock`."""
    category = product.category
    return ProductOut(
        id=product.id,
        slug=product.slug,
        name=product.name,
        description=product.description,
        price=float(product.price),
        stock=product.stock,
        category_id=product.category_id,
        category=category.slug if category else "uncategorized",
        categories=CategoryOut.model_validate(category) if category else None,
        images=list(product.images or []),
        tags=list(product.tags or []),
        specifications=product.specifications,
        featured=bool(product.featured),
        inStock=product.stock > 0,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class ProductService:
    """
    Katalog produktow:
    query (lista z filtrami, szczegoly, wyszukiwanie, kategorie) i
    commands (create, update, delete, stock) z normalizacja payloadu.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #query
    def get_products(self, query: ProductQuery) -> Dict[str, Any]:
        rows, total = self.repo.list_products(
            category=query.category,
            search=query.search,
            sort=query.sort,
            ascending=query.order == "asc",
            limit=query.limit,
            offset=query.offset,
            min_price=query.minPrice,
            max_price=query.maxPrice,
            # flagi przychodza jako napisy, tylko dokladne "true" wlacza filtr
            featured_only=query.featured == "true",
            in_stock_only=query.inStock == "true",
        )
        return {
            "products": [to_public(p) for p in rows],
            "pagination": {
                "total": total,
                "limit": query.limit,
                "offset": query.offset,
                "hasMore": total > query.offset + query.limit,
            },
        }

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_product_by_id(self, product_id: int) -> ProductOut:
        return to_public(self.get_product(product_id))

    def get_categories(self) -> List[CategoryOut]:
        return [CategoryOut.model_validate(c) for c in self.repo.list_categories()]

    def get_featured_products(self, limit: int = 10) -> List[ProductOut]:
        return [to_public(p) for p in self.repo.list_featured(limit)]

    def search_products(self, query: str, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        rows, total = self.repo.search_products(query, limit=limit, offset=offset)
        return {"products": [to_public(p) for p in rows], "total": total, "query": query}

    #commands
    def resolve_category_id(self, slug_or_name: str | None) -> int | None:
        if not slug_or_name:
            return None
        category = self.repo.find_category(str(slug_or_name).strip().lower())
        return category.id if category else None

    def normalize_write_payload(self, payload: Dict[str, Any], generate_slug: bool = True) -> Dict[str, Any]:
        data = dict(payload)

        if generate_slug and not data.get("slug") and data.get("name"):
            data["slug"] = slugify_name(data["name"])

        category_ref = data.pop("category", None) or data.pop("categorySlug", None)
        data.pop("categorySlug", None)
        if not data.get("category_id") and category_ref:
            resolved = self.resolve_category_id(category_ref)
            if resolved:
                data["category_id"] = resolved

        in_stock = data.pop("inStock", None)
        if in_stock is not None:
            # flaga bool niszczy liczbe sztuk, wiec nie pozwalamy podac obu naraz
            if data.get("stock") is not None:
                raise ValidationFailedError("Provide either stock or inStock, not both")
            data["stock"] = 1 if in_stock else 0

        return data

    def _check_category(self, data: Dict[str, Any]) -> None:
        category_id = data.get("category_id")
        if category_id is not None and not self.repo.get_category(category_id):
            raise ValidationFailedError(f"Category {category_id} does not exist")

    def _integrity_error(self, error: IntegrityError, slug: str | None) -> StorefrontError:
        self.repo.rollback()
        # tylko zajety slug to konflikt, reszta (np. klucz obcy) to blad bazy
        if slug and self.repo.get_product_by_slug(slug):
            return ConflictError(SLUG_CONFLICT)
        logger.error(f"Integrity error on product write: {error.orig}")
        return UpstreamError(str(error.orig))

    def create_product(self, payload: Dict[str, Any]) -> ProductOut:
        data = self.normalize_write_payload(payload, generate_slug=True)
        if not data.get("slug"):
            raise ValidationFailedError("Product slug could not be derived from name")

        if self.repo.get_product_by_slug(data["slug"]):
            raise ConflictError(SLUG_CONFLICT)
        self._check_category(data)

        data.setdefault("stock", 0)
        data.setdefault("images", [])
        data.setdefault("tags", [])
        data.setdefault("featured", False)

        try:
            inserted_id = self.repo.insert_product(data)
        except IntegrityError as e:
            raise self._integrity_error(e, data["slug"]) from e

        if not inserted_id:
            raise WriteRejectedError("Insert was blocked (likely RLS). Check the database role used by the API.")

        logger.info(f"Product {inserted_id} created with slug {data['slug']}")
        return self.get_product_by_id(inserted_id)

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> ProductOut:
        existing = self.get_product(product_id)
        data = self.normalize_write_payload(payload, generate_slug=False)

        if data.get("slug") and data["slug"] != existing.slug:
            if self.repo.get_product_by_slug(data["slug"]):
                raise ConflictError(SLUG_CONFLICT)

        if not data:
            return to_public(existing)
        self._check_category(data)

        try:
            rowcount = self.repo.update_product(product_id, data)
        except IntegrityError as e:
            new_slug = data.get("slug") if data.get("slug") != existing.slug else None
            raise self._integrity_error(e, new_slug) from e

        # produkt istnial, wiec 0 wierszy oznacza blokade polityki, nie brak danych
        if rowcount == 0:
            raise WriteRejectedError("Update was blocked (likely RLS). Check the database role used by the API.")

        logger.info(f"Product {product_id} updated: {sorted(data)}")
        return self.get_product_by_id(product_id)

    def delete_product(self, product_id: int) -> ProductOut:
        existing = to_public(self.get_product(product_id))

        rowcount = self.repo.delete_product(product_id)
        if rowcount == 0:
            raise WriteRejectedError("Delete was blocked (likely RLS). Check the database role used by the API.")

        logger.info(f"Product {product_id} deleted")
        return existing

    def update_stock(self, product_id: int, quantity: int, operation: str = "set") -> ProductOut:
        product = self.get_product(product_id)

        if operation == "add":
            new_stock = product.stock + quantity
        elif operation == "subtract":
            new_stock = max(0, product.stock - quantity)
        else:
            new_stock = quantity

        return self.update_product(product_id, {"stock": new_stock})
