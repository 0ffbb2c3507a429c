import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api.deps import get_db
from storefront.core.auth import create_access_token
from storefront.db.models import Order, OrderItem, Product
from storefront.db.session import Base
from storefront.main import app
from storefront.services.payments import get_payment_gateway
from tests.fakes import FakePaymentGateway


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog(db):
    """Four products: three on sale, one withdrawn."""
    products = [
        Product(id=1, slug="bloom-vibrator", name="Bloom Vibrator", category="vibrators",
                price=Decimal("79.00"), image_url="https://img.test/bloom.jpg"),
        Product(id=2, slug="silk-blindfold", name="Silk Blindfold", category="intimacy",
                price=Decimal("28.00")),
        Product(id=3, slug="serenity-lube", name="Serenity Lube", category="intimacy",
                price=Decimal("18.00")),
        Product(id=4, slug="glow-massage-candle", name="Glow Massage Candle", category="self-care",
                price=Decimal("22.00"), active=False),
    ]
    db.add_all(products); db.commit()
    return {p.id: p for p in products}


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def client(session_factory, gateway):
    def _get_db():
        session = session_factory()
        try: yield session
        finally: session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token, _ = create_access_token("admin@example.com", role="admin")
    return {"Authorization": f"Bearer {token}"}


def count_orders(db) -> int:
    return db.scalar(select(func.count(Order.id)))


def count_order_items(db) -> int:
    return db.scalar(select(func.count(OrderItem.id)))


def cart_line(product_id: int, price: float, quantity: int = 1, name: str = "") -> dict:
    return {"id": product_id, "name": name, "price": price, "quantity": quantity}
