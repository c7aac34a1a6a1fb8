from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_cart_manager
from app.api.schemas.cart import AddItemRequest, CartCreateRequest, CartItemRequest, ClearCartRequest
from app.core.errors import ValidationError
from app.database import InsertOneResult
from app.services.cart_manager import CartManager

router = APIRouter(tags=["carts"])


@router.post("/carts", response_model=Dict[str, Any])
def create_cart(payload: CartCreateRequest, carts: CartManager = Depends(get_cart_manager)):
    """
    Store a cart for `cartData.email` exactly as sent (totals are taken as given).
    Returns the insert result with the cart's document id.
    """
    data = payload.cart_data
    totals = {"total_item_count": data.total_item_count, "total_price": data.total_price}
    cart_id = carts.create_or_replace_cart(
        data.email, [it.to_cart_item() for it in data.items], totals=totals
    )
    return InsertOneResult(inserted_id=cart_id).to_dict()


@router.get("/carts")
def get_cart(email: Optional[str] = Query(None), carts: CartManager = Depends(get_cart_manager)):
    """Cart of `email`, or null when the user has none yet."""
    if not email:
        raise ValidationError("Email is required")
    cart = carts.get_cart(email)
    return cart.to_dict() if cart else None


@router.patch("/carts", response_model=Dict[str, Any])
def add_item(payload: AddItemRequest, carts: CartManager = Depends(get_cart_manager)):
    cart = carts.add_item(payload.email, payload.new_item.to_cart_item())
    return cart.to_dict()


@router.patch("/carts/increase", response_model=Dict[str, Any])
def increase_quantity(payload: CartItemRequest, carts: CartManager = Depends(get_cart_manager)):
    cart, result = carts.increase_quantity(payload.email, payload.product_id)
    return {"message": "Quantity increased", "result": result.to_dict(), "cart": cart.to_dict()}


@router.patch("/carts/decrease", response_model=Dict[str, Any])
def decrease_quantity(payload: CartItemRequest, carts: CartManager = Depends(get_cart_manager)):
    cart, result = carts.decrease_quantity(payload.email, payload.product_id)
    return {"message": "Quantity decreased", "result": result.to_dict(), "cart": cart.to_dict()}


@router.delete("/carts/item", response_model=Dict[str, Any])
def remove_item(payload: CartItemRequest, carts: CartManager = Depends(get_cart_manager)):
    cart, result = carts.remove_item(payload.email, payload.product_id)
    return {"message": "Item deleted from cart", "result": result.to_dict(), "cart": cart.to_dict()}


@router.delete("/carts/clear", response_model=Dict[str, Any])
def clear_cart(payload: ClearCartRequest, carts: CartManager = Depends(get_cart_manager)):
    result = carts.clear_cart(payload.email)
    return {"message": "Cart cleared", "result": result.to_dict()}
