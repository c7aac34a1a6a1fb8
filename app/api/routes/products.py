# app/api/routes/products.py
from typing import Any, Dict, List
from fastapi import APIRouter, Depends

from app.api.deps import get_db
from app.core.errors import NotFound
from app.database import FileBackedDB

router = APIRouter(tags=["products"])


@router.get("/products", response_model=List[Dict[str, Any]])
def list_products(db: FileBackedDB = Depends(get_db)):
    return db.collection("products").find()


@router.get("/product/{product_id}", response_model=Dict[str, Any])
def get_product(product_id: str, db: FileBackedDB = Depends(get_db)):
    product = db.collection("products").find_one({"_id": product_id})
    if not product:
        raise NotFound("Product not found")
    return product
