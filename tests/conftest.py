# tests/conftest.py
import os
import sys
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# ensure project root is importable
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# point settings at a throwaway directory before the app is imported so the
# lifespan hook never touches a real data dir
from app import config as app_config  # noqa: E402
app_config.settings.DATA_DIR = Path(tempfile.mkdtemp(prefix="test_data_"))

from app.main import app  # noqa: E402
from app.api.deps import get_db  # noqa: E402
from app.database import FileBackedDB  # noqa: E402
from app.services.cart_manager import CartManager  # noqa: E402


@pytest.fixture
def file_db(tmp_path):
    """An isolated FileBackedDB per test."""
    return FileBackedDB(tmp_path / "data")


@pytest.fixture
def client(file_db):
    app.dependency_overrides[get_db] = lambda: file_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fixed_clock():
    """
    Deterministic clock for CartManager. Each call returns the next tick so
    tests can tell which operation stamped a field.
    """
    ticks = {"n": 0}

    def _now():
        ticks["n"] += 1
        return f"2024-01-01 00:00:{ticks['n']:02d}+00:00"
    return _now


@pytest.fixture
def carts(file_db, fixed_clock):
    return CartManager(file_db.collection("carts"), clock=fixed_clock)


@pytest.fixture
def seeded_cart(carts):
    """
    Cart for owner@example.com with two lines:
      p1: 2 units, 10% off, line total 18.00 (unit 10.00)
      p2: 1 unit, no discount, line total 5.50
    """
    def _fn(owner="owner@example.com"):
        items = [
            {"productId": "p1", "quantity": 2, "discountPercent": 10, "lineTotal": 18.00},
            {"productId": "p2", "quantity": 1, "discountPercent": 0, "lineTotal": 5.50},
        ]
        carts.create_or_replace_cart(owner, items, totals={"total_item_count": 3, "total_price": 23.5})
        return owner
    return _fn


@pytest.fixture
def assert_totals_consistent():
    """Derived fields must match the items they are computed from."""
    def _check(cart_dict):
        items = cart_dict["items"]
        assert cart_dict["totalItemCount"] == sum(it["quantity"] for it in items)
        assert cart_dict["totalPrice"] == pytest.approx(round(sum(it["lineTotal"] for it in items), 2))
    return _check
