"""Shared fixtures: an in-memory document store and an app wired to it."""
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api.deps import get_advisor_client
from app.db.init_db import init_db
from app.db.session import make_engine
from app.main import create_app
from app.store.entity_store import EntityStore
from ai.groq_client import GroqClient


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return EntityStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def fake_groq():
    """Stands in for the Groq client; set .complete_json.return_value per test."""
    client = MagicMock(spec=GroqClient)
    client.is_available.return_value = True
    client.complete_json.return_value = None
    return client


@pytest.fixture
def client(engine, fake_groq):
    app = create_app(engine)
    app.dependency_overrides[get_advisor_client] = lambda: fake_groq
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_invoice(store):
    """Insert an invoice record straight into the store and return its id."""

    def _make(customer_id="CUS-1", items=None, invoice_id=None, invoice_number=None):
        record = {
            "customerId": customer_id,
            "date": "2024-01-05",
            "items": items if items is not None else [
                {"name": "Cleaning", "quantity": 1, "price": 100, "total": 100}
            ],
            "total": 100,
        }
        if invoice_number:
            record["invoiceNumber"] = invoice_number
        return store.create("invoices", record, doc_id=invoice_id)

    return _make
