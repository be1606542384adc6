"""Pytest configuration for storefront tests."""

import os

# ustawienia musza byc w env zanim zaimportujemy cokolwiek ze storefront
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_STORE"] = "memory"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["APP_ENV"] = "test"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.middleware import FixedWindowRateLimiter
from storefront.data.database import Base, get_db
from storefront.data.models import CategoryModel, ProductModel
from storefront.main import create_app
from storefront.repos.session_store import MemorySessionStore

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


# Force anyio to use only asyncio backend (not trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def catalog(db_session):
    """Dwie kategorie i kilka mebli; zwraca slownik slug -> id produktu."""
    living = CategoryModel(name="Living Room", slug="living-room")
    lighting = CategoryModel(name="Lighting", slug="lighting")
    db_session.add_all([living, lighting])

    rows = [
        ("Lamp", "lamp", Decimal("49.99"), 10, lighting, False, ["light"]),
        ("Oak Table", "oak-table", Decimal("120.00"), 4, living, True, ["wood"]),
        ("Linen Sofa", "linen-sofa", Decimal("450.00"), 2, living, True, ["fabric"]),
        ("Armchair", "armchair", Decimal("300.00"), 0, living, False, ["fabric"]),
        ("Bookshelf", "bookshelf", Decimal("210.00"), 7, living, False, ["wood"]),
        ("Floor Lamp", "floor-lamp", Decimal("150.00"), 3, lighting, False, ["light"]),
        ("Chandelier", "chandelier", Decimal("890.00"), 1, lighting, True, ["light"]),
    ]
    products = {}
    for name, slug, price, stock, category, featured, tags in rows:
        product = ProductModel(
            name=name,
            slug=slug,
            description=f"{name} for your home",
            price=price,
            stock=stock,
            category=category,
            featured=featured,
            images=[f"/images/{slug}.jpg"],
            tags=tags,
        )
        db_session.add(product)
        products[slug] = product
    db_session.commit()
    return {slug: p.id for slug, p in products.items()}


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def app(session_factory, session_store):
    app = create_app(
        session_store=session_store,
        rate_limiter=FixedWindowRateLimiter(max_requests=10_000, window_seconds=900),
        init_database=False,
    )

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
