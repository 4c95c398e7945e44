import os

# avant tout import applicatif : pas de Postgres requis pour les tests
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.app.api.deps import get_db
from backend.app.db.base import Base
from backend.app.db.session import make_engine
from backend.app.db.models.models_v1 import (
    Category,
    Product,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    TrackingNumber,
)
from backend.app.db.models.core_types import Currency, POStatus
from backend.app.main import app


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test.

    Base SQLite en mémoire neuve à chaque test : aucun état partagé.
    """
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)


# ---------- jeux de données ----------
@pytest.fixture
def supplier(db_session):
    s = Supplier(name="TEST-SUP", contact_info="Email: sup@test.mg", modules=["stock"])
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture
def category(db_session):
    c = Category(name="TEST-CAT", modules=["stock"])
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def products(db_session, category, supplier):
    rows = [
        Product(sku="RIZ-250101-00001", name="Riz parfumé", category_id=category.id, supplier_id=supplier.id),
        Product(sku="HUI-250101-00001", name="Huile", category_id=category.id, supplier_id=supplier.id),
        Product(sku="SUC-250101-00001", name="Sucre", category_id=category.id, supplier_id=supplier.id),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def make_order(db_session, supplier):
    """Fabrique une commande (statut, devise, suivi au choix)."""
    counter = {"n": 0}

    def _make(
        lines,
        status=POStatus.ordered,
        currency=Currency.mga,
        tracking_number=None,
        expected_delivery_date=None,
    ):
        counter["n"] += 1
        po = PurchaseOrder(
            order_number=f"PO-TEST-{counter['n']:04d}",
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            status=status,
            order_date=date(2025, 1, 10),
            expected_delivery_date=expected_delivery_date,
            currency=currency,
            tracking_number=tracking_number,
        )
        total = Decimal("0")
        for product, qty, price in lines:
            price = Decimal(str(price))
            po.items.append(
                PurchaseOrderItem(
                    product_id=product.id,
                    quantity_ordered=qty,
                    quantity_received=0,
                    unit_price=price,
                    total_price=price * qty,
                )
            )
            total += price * qty
        po.total_amount = total
        db_session.add(po)
        db_session.commit()
        return po

    return _make


@pytest.fixture
def tracking(db_session):
    """Colis : 100x50x40 cm, 30 kg, 200 USD/m³, 5 USD/kg, 1 USD = 4500 MGA."""

    def _make(tracking_number, po=None, **overrides):
        values = dict(
            length=Decimal("100"),
            width=Decimal("50"),
            height=Decimal("40"),
            weight_kg=Decimal("30"),
            rate_per_m3=Decimal("200"),
            rate_per_kg=Decimal("5"),
            exchange_rate_mga=Decimal("4500"),
        )
        values.update(overrides)
        tn = TrackingNumber(tracking_number=tracking_number, purchase_order_id=po.id if po else None, **values)
        db_session.add(tn)
        db_session.commit()
        return tn

    return _make
