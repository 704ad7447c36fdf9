"""Shared fixtures: every test gets its own data directory under tmp_path."""

import copy

import pytest

from database import RecordStore
from guard import ADMIN, CUSTOMER, Caller

PRODUCTS = [
    {
        "id": 1,
        "name": "Photo Editor Pro",
        "price": 9.99,
        "category": "Software",
        "description": "Layered photo editing",
        "image": "/img/photo.png",
        "featured": True,
        "createdAt": "2024-01-01T00:00:00+00:00",
        "updatedAt": "2024-01-01T00:00:00+00:00",
    },
    {
        "id": 2,
        "name": "Icon Pack",
        "price": 4.5,
        "category": "Graphics",
        "description": "500 flat icons",
        "image": "/img/icons.png",
        "featured": False,
        "createdAt": "2024-01-02T00:00:00+00:00",
        "updatedAt": "2024-01-02T00:00:00+00:00",
    },
    {
        "id": 3,
        "name": "Font Bundle",
        "price": 12.0,
        "category": "Graphics",
        "description": "Twenty display fonts",
        "image": "/img/fonts.png",
        "featured": False,
        "createdAt": "2024-01-03T00:00:00+00:00",
        "updatedAt": "2024-01-03T00:00:00+00:00",
    },
]


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path / "data")


@pytest.fixture
def seeded_store(store):
    store.save("products", copy.deepcopy(PRODUCTS))
    return store


@pytest.fixture
def admin():
    return Caller(user_id=100, role=ADMIN)


@pytest.fixture
def customer():
    return Caller(user_id=200, role=CUSTOMER)


@pytest.fixture
def other_customer():
    return Caller(user_id=300, role=CUSTOMER)


def order_payload(**overrides):
    payload = {
        "email": "jane@example.com",
        "firstName": "Jane",
        "lastName": "Doe",
        "address": "1 Main St",
        "city": "Springfield",
        "zipCode": "12345",
        "paymentMethod": "card",
        "items": [{"id": 1, "quantity": 2}],
        "total": 19.98,
    }
    payload.update(overrides)
    return payload
