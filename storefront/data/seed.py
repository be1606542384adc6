# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal
from storefront.data.models import CategoryModel, ProductModel
from storefront.services.product_service import slugify_name

CATEGORIES = [
    ("Living Room", "living-room"),
    ("Bedroom", "bedroom"),
    ("Lighting", "lighting"),
]

PRODUCTS = [
    # name, category slug, price, stock, featured
    ("Oak Coffee Table", "living-room", "249.00", 12, True),
    ("Linen Sofa", "living-room", "1199.00", 3, True),
    ("Walnut Bed Frame", "bedroom", "899.00", 5, False),
    ("Bedside Lamp", "lighting", "49.99", 40, False),
    ("Arc Floor Lamp", "lighting", "179.00", 0, False),
]


def seed(db: Session | None = None) -> bool:
    """Wypelnia pusty katalog przykladowymi danymi; zwraca False gdy dane juz byly."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return False

        categories = {slug: CategoryModel(name=name, slug=slug) for name, slug in CATEGORIES}
        db.add_all(categories.values())

        for name, category_slug, price, stock, featured in PRODUCTS:
            db.add(
                ProductModel(
                    name=name,
                    slug=slugify_name(name),
                    price=Decimal(price),
                    stock=stock,
                    featured=featured,
                    category=categories[category_slug],
                    images=[f"/images/{slugify_name(name)}.jpg"],
                    tags=[category_slug],
                )
            )
        db.commit()
        return True
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    seed()
