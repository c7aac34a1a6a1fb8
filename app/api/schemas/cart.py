from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field, model_validator

from app.models.cart import CartItem, discounted_line_total

# upper bound for any single money field, keeps cent rounding exact
MAX_AMOUNT = 1_000_000_000.0


class CartItemSchema(BaseModel):
    """
    A line item as the client sends it. Either `line_total` (already
    discounted, for the whole quantity) or `unit_price` (undiscounted, per
    unit) must be given; the stored line total is derived from unit_price
    when line_total is absent.
    """
    product_id: str = Field(..., min_length=1, validation_alias=AliasChoices("product_id", "productId"))
    quantity: int = Field(1, ge=1)
    discount_percent: float = Field(
        0.0, ge=0.0, lt=100.0, allow_inf_nan=False,
        validation_alias=AliasChoices("discount_percent", "discountPercent", "discount"),
    )
    line_total: Optional[float] = Field(
        None, ge=0.0, le=MAX_AMOUNT, allow_inf_nan=False,
        validation_alias=AliasChoices("line_total", "lineTotal", "price"),
    )
    unit_price: Optional[float] = Field(
        None, ge=0.0, le=MAX_AMOUNT, allow_inf_nan=False, validation_alias=AliasChoices("unit_price", "unitPrice")
    )
    title: Optional[str] = None
    image: Optional[str] = None

    @model_validator(mode="after")
    def _price_given(self):
        if self.line_total is None and self.unit_price is None:
            raise ValueError("either line_total or unit_price is required")
        return self

    def to_cart_item(self) -> CartItem:
        line_total = self.line_total
        if line_total is None:
            line_total = discounted_line_total(self.unit_price, self.discount_percent, self.quantity)
        return CartItem(
            product_id=self.product_id,
            quantity=self.quantity,
            discount_percent=self.discount_percent,
            line_total=float(line_total),
            title=self.title,
            image=self.image,
        )


class CartData(BaseModel):
    email: str = Field(..., min_length=1, validation_alias=AliasChoices("email", "owner"))
    items: List[CartItemSchema] = Field(
        default_factory=list, validation_alias=AliasChoices("items", "cartItems")
    )
    total_item_count: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("total_item_count", "totalItems")
    )
    total_price: Optional[float] = Field(
        None, ge=0.0, allow_inf_nan=False, validation_alias=AliasChoices("total_price", "totalPrice")
    )


class CartCreateRequest(BaseModel):
    cart_data: CartData = Field(..., validation_alias=AliasChoices("cart_data", "cartData"))


class AddItemRequest(BaseModel):
    email: str = Field(..., min_length=1)
    new_item: CartItemSchema = Field(..., validation_alias=AliasChoices("new_item", "newItem"))


class CartItemRequest(BaseModel):
    email: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1, validation_alias=AliasChoices("product_id", "productId"))


class ClearCartRequest(BaseModel):
    email: str = Field(..., min_length=1)