import os
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from car_rental import create_app
from car_rental.config import TestConfig


@pytest.fixture
def app():
    """App with an in-memory store, so every test starts empty."""
    app = create_app(TestConfig)
    yield app


@pytest.fixture
def store(app):
    return app.extensions["car_rental_store"]


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def auth_client(client):
    """Client whose session carries the user id the login flow would set."""
    with client.session_transaction() as sess:
        sess["uid"] = 3
    return client


@pytest.fixture
def car_payload():
    return {
        "name": "pick-up",
        "price": 12000.5,
        "size": "medium",
        "image": "pickup.jpg",
    }
