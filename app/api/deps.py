# app/api/deps.py
from functools import lru_cache

from fastapi import Depends

from app.config import settings
from app.database import FileBackedDB
from app.services.cart_manager import CartManager
from app.services.payment import FakePaymentGateway, PaymentGateway


@lru_cache()
def _default_db() -> FileBackedDB:
    return FileBackedDB(settings.DATA_DIR)


def get_db() -> FileBackedDB:
    """
    Dependency that returns the file-backed DB object.
    Usage:
        db = Depends(get_db)
    Tests override this through app.dependency_overrides.
    """
    return _default_db()


def get_cart_manager(db: FileBackedDB = Depends(get_db)) -> CartManager:
    return CartManager(db.collection("carts"))


@lru_cache()
def get_payment_gateway() -> PaymentGateway:
    return FakePaymentGateway()
