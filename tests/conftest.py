"""Shared fixtures: a throwaway SQLite database, seeded products and a fake gateway."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from checkout_service.database import get_db, init_db
from checkout_service.dependencies import get_gateway
from checkout_service.inventory import InventoryStore
from checkout_service.main import app
from checkout_service.models import ChargeResult
from checkout_service.tables import Order, Product

BUYER_ID = "buyer-1"


class FakeGateway:
    """Stands in for PaymentGatewayClient and records every charge."""

    def __init__(self):
        self.calls = []
        self.result = ChargeResult(
            success=True,
            transaction_id="txn_123",
            status="submitted_for_settlement",
            raw={"success": True, "transactionId": "txn_123", "status": "submitted_for_settlement"},
        )
        self.error = None
        self.on_charge = None

    def charge(self, amount, nonce, reference_id):
        self.calls.append({"amount": amount, "nonce": nonce, "reference_id": reference_id})
        if self.on_charge:
            self.on_charge()
        if self.error:
            raise self.error
        return self.result

    def generate_client_token(self):
        return "tok_abc"

    def close(self):
        pass


@pytest.fixture
def engine(tmp_path):
    # File based so that separate sessions really use separate connections.
    engine = create_engine(
        f"sqlite:///{tmp_path / 'checkout.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def products(session_factory):
    """Laptop: price 1500, 10 in stock. Mouse: price 25, 7 in stock."""
    with session_factory() as session:
        store = InventoryStore(session)
        store.add_product("Laptop", 1500, 10, product_id="laptop")
        store.add_product("Mouse", 25, 7, product_id="mouse")
        session.commit()
    return {
        "laptop": {"_id": "laptop", "name": "Laptop", "price": Decimal("1500")},
        "mouse": {"_id": "mouse", "name": "Mouse", "price": Decimal("25")},
    }


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def stock(session_factory):
    """Reads the current stock of a product from a fresh session."""
    def _stock(product_id):
        with session_factory() as session:
            return session.get(Product, product_id).quantity
    return _stock


@pytest.fixture
def stored_orders(session_factory):
    def _orders():
        with session_factory() as session:
            return list(session.scalars(select(Order)))
    return _orders


@pytest.fixture
def client(session_factory, gateway):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-User-Id": BUYER_ID}
