"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from jaybesin.core.shipment_record import CargoItem, Shipment
from jaybesin.database import Base, make_engine
from jaybesin.store.document_store import DocumentStore

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database and return its path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass  # Windows may hold the file


@pytest.fixture
def session_factory(temp_db):
    """sessionmaker bound to a fresh schema."""
    engine = make_engine(f"sqlite:///{temp_db}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory):
    """DocumentStore without an event bus (changes notify subscribers directly)."""
    return DocumentStore(session_factory, write_timeout=5.0)


@pytest.fixture
def make_shipment():
    """Factory for Shipment domain objects; cbms become one item each."""
    def _make(tracking_number="JB-CN-100000", consignee_name="Kwame Mensah", container_id="",
              cbms=(1.0,), rate_per_cbm=450.0, shipping_fee=0.0, age_days=0, **fields):
        return Shipment(
            id=fields.pop("id", tracking_number.lower()),
            tracking_number=tracking_number,
            consignee_name=consignee_name,
            container_id=container_id,
            rate_per_cbm=rate_per_cbm,
            shipping_fee=shipping_fee,
            items=[CargoItem(description=f"Carton {i + 1}", cbm=cbm) for i, cbm in enumerate(cbms)],
            created_at=BASE_TIME - timedelta(days=age_days),
            **fields,
        )
    return _make


@pytest.fixture
def shipment_form():
    """A valid admin manifest form."""
    return {
        "tracking_number": "JB-CN-100203",
        "status": "Order Initiated",
        "consignee_name": "Ama Owusu",
        "consignee_phone": "+233 20 555 0102",
        "consignee_address": "Tema",
        "container_id": "CN-001",
        "rate_per_cbm": 450,
        "shipping_fee": 50,
        "items": [
            {"description": "Solar panels", "quantity": 4, "cbm": 1.5, "weight": 80},
            {"description": "Inverter", "quantity": 1, "cbm": 2.0, "weight": 35},
        ],
    }
