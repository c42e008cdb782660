import pytest
import requests

from marketplace import create_app
from marketplace.config import TestConfig
from marketplace.extensions import db


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = {}

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"HTTP {self.status_code}")


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def business(client):
    resp = client.post("/api/businesses", json={
        "name": "Crumbs & Co",
        "owner_id": "firebase-owner-1",
        "categories": ["bakery", "cafe"],
        "payment_methods": ["cash", "upi"],
    })
    assert resp.status_code == 201
    return resp.get_json()["business"]


@pytest.fixture
def make_product(client, business):
    def _make(**overrides):
        body = {
            "business_id": business["id"],
            "name": "Sourdough",
            "description": "Country loaf",
            "price": 120,
            "category": "bread",
            "image_url": "https://cdn.example.com/sourdough.jpg",
        }
        body.update(overrides)
        resp = client.post("/api/products", json=body)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["product"]
    return _make


@pytest.fixture
def make_order(client, business):
    def _make(**overrides):
        body = {
            "user_id": "firebase-buyer-1",
            "business_id": business["id"],
            "items": [{"name": "Sourdough", "quantity": 2, "price": 120, "image": "https://cdn.example.com/s.jpg"}],
            "subtotal": 240,
            "shipping_fee": 20,
            "total_amount": 260,
            "delivery_type": "delivery",
            "delivery_address": {"street": "1 Main St", "city": "Pune", "state": "MH", "postalCode": "411001"},
            "payment_method": "cod",
            "customer_name": "Asha",
            "customer_phone": "+91 90000 00000",
        }
        body.update(overrides)
        resp = client.post("/api/orders", json=body)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["order"]
    return _make
