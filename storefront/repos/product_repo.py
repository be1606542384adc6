# storefront/repos/product_repo.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy import String, cast, delete, func, insert, or_, select, update
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_product_by_slug(self, slug: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.slug == slug)
        ).scalar_one_or_none()

    def list_products(
        self,
        *,
        category: str | None = None,
        search: str | None = None,
        sort: str = "name",
        ascending: bool = True,
        limit: int = 50,
        offset: int = 0,
        min_price: float | None = None,
        max_price: float | None = None,
        featured_only: bool = False,
        in_stock_only: bool = False,
    ) -> Tuple[List[ProductModel], int]:
        stmt = select(ProductModel)

        if category:
            stmt = stmt.join(CategoryModel, ProductModel.category_id == CategoryModel.id).where(
                CategoryModel.slug == category
            )
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(ProductModel.name.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        if min_price is not None:
            stmt = stmt.where(ProductModel.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(ProductModel.price <= max_price)
        if featured_only:
            stmt = stmt.where(ProductModel.featured.is_(True))
        if in_stock_only:
            stmt = stmt.where(ProductModel.stock > 0)

        total = self.db.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()

        column = getattr(ProductModel, sort)
        stmt = stmt.order_by(column.asc() if ascending else column.desc(), ProductModel.id.asc())
        rows = self.db.execute(stmt.limit(limit).offset(offset)).scalars().all()
        return list(rows), total

    def search_products(self, query: str, limit: int, offset: int) -> Tuple[List[ProductModel], int]:
        pattern = f"%{query}%"
        # tagi sa lista JSON, szukamy dokladnego elementu w jego tekstowej postaci
        condition = or_(
            ProductModel.name.ilike(pattern),
            ProductModel.description.ilike(pattern),
            cast(ProductModel.tags, String).like(f'%"{query}"%'),
        )
        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(condition)
        ).scalar_one()
        rows = self.db.execute(
            select(ProductModel)
            .where(condition)
            .order_by(ProductModel.name.asc(), ProductModel.id.asc())
            .limit(limit)
            .offset(offset)
        ).scalars().all()
        return list(rows), total

    def list_featured(self, limit: int) -> List[ProductModel]:
        rows = self.db.execute(
            select(ProductModel)
            .where(ProductModel.featured.is_(True))
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .limit(limit)
        ).scalars().all()
        return list(rows)

    def list_categories(self) -> List[CategoryModel]:
        rows = self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars().all()
        return list(rows)

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def find_category(self, slug_or_name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel)
            .where(or_(CategoryModel.slug == slug_or_name, CategoryModel.name.ilike(slug_or_name)))
            .limit(1)
        ).scalar_one_or_none()

    # --- zapisy; kazdy zwraca liczbe/ID objetych wierszy, serwis decyduje co z tym zrobic

    def insert_product(self, values: Dict[str, Any]) -> int | None:
        now = datetime.now(timezone.utc)
        inserted_id = self.db.execute(
            insert(ProductModel)
            .values(**values, created_at=now, updated_at=now)
            .returning(ProductModel.id)
        ).scalar_one_or_none()
        self.db.commit()
        return inserted_id

    def update_product(self, product_id: int, values: Dict[str, Any]) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(**values, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        # obiekty w sesji moga byc nieaktualne po update na poziomie core
        self.db.expire_all()
        return result.rowcount

    def delete_product(self, product_id: int) -> int:
        result = self.db.execute(
            delete(ProductModel)
            .where(ProductModel.id == product_id)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.expire_all()
        return result.rowcount

    def rollback(self):
        self.db.rollback()
