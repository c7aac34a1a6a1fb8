# app/services/cart_manager.py
"""
Cart mutations over the `carts` collection, one document per owner.

Every mutating operation is a single read-compute-write against the owner's
document: load it, change the items, recompute totalItemCount/totalPrice
over the full item list, then replace the stored fields in one update_one.
There is no compare-and-swap, so two concurrent writers on the same cart can
lose an update; callers that need strict per-owner ordering must serialize
outside this class.
"""
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from app.core.errors import InvalidState, NotFound
from app.database import DocumentCollection, UpdateResult
from app.models.cart import Cart, CartItem
from app.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


class CartManager:
    def __init__(self, collection: DocumentCollection, clock: Callable[[], str] = utc_now_iso):
        self.collection = collection
        self.clock = clock

    # --- reads ---

    def get_cart(self, owner: str) -> Optional[Cart]:
        doc = self.collection.find_one({"owner": owner})
        if doc is None:
            return None
        return Cart.from_dict(doc)

    def _load(self, owner: str) -> Cart:
        cart = self.get_cart(owner)
        if cart is None:
            raise NotFound("Cart not found")
        return cart

    def _load_item(self, owner: str, product_id: str) -> Tuple[Cart, CartItem]:
        cart = self._load(owner)
        item = cart.find_item(product_id)
        if item is None:
            raise NotFound("Product not found in cart")
        return cart, item

    # --- writes ---

    def _save(self, cart: Cart) -> UpdateResult:
        cart.recompute_totals()
        cart.last_modified_at = self.clock()
        result = self.collection.update_one(
            {"owner": cart.owner}, {"$set": cart.to_dict(include_id=False)}
        )
        if result.matched_count == 0:
            # deleted between our read and write
            raise NotFound("Cart not found")
        return result

    def create_or_replace_cart(self, owner: str, items: Iterable[Any], totals: Optional[Dict[str, Any]] = None) -> str:
        """
        Store `items` for `owner` exactly as supplied (totals are not recomputed).
        Replaces the existing document in place if the owner already has a cart.
        Returns the document id.
        """
        totals = dict(totals or {})
        cart = Cart(
            owner=owner,
            items=[it if isinstance(it, CartItem) else CartItem.from_dict(it) for it in items],
            total_item_count=int(totals.get("total_item_count") or 0),
            total_price=float(totals.get("total_price") or 0.0),
            last_modified_at=self.clock(),
        )
        result = self.collection.update_one(
            {"owner": owner}, {"$set": cart.to_dict(include_id=False)}, upsert=True
        )
        if result.upserted_id:
            logger.info("Created cart %s for %s", result.upserted_id, owner)
            return result.upserted_id
        # the owner's document id never changes once assigned
        existing = self.collection.find_one({"owner": owner}) or {}
        logger.info("Replaced cart %s for %s", existing.get("_id"), owner)
        return existing.get("_id")

    def add_item(self, owner: str, new_item: CartItem) -> Cart:
        cart = self._load(owner)
        new_item.added_at = self.clock()
        cart.items.append(new_item)
        self._save(cart)
        logger.debug("Added %s x%d to cart of %s", new_item.product_id, new_item.quantity, owner)
        return self._load(owner)

    def increase_quantity(self, owner: str, product_id: str) -> Tuple[Cart, UpdateResult]:
        cart, item = self._load_item(owner, product_id)
        item.change_quantity(item.quantity + 1, at=self.clock())
        result = self._save(cart)
        return cart, result

    def decrease_quantity(self, owner: str, product_id: str) -> Tuple[Cart, UpdateResult]:
        cart, item = self._load_item(owner, product_id)
        if item.quantity <= 1:
            raise InvalidState("Quantity cannot be less than 1")
        item.change_quantity(item.quantity - 1, at=self.clock())
        result = self._save(cart)
        return cart, result

    def remove_item(self, owner: str, product_id: str) -> Tuple[Cart, UpdateResult]:
        cart = self._load(owner)
        cart.items = [it for it in cart.items if it.product_id != product_id]
        result = self._save(cart)
        return cart, result

    def clear_cart(self, owner: str) -> UpdateResult:
        result = self.collection.update_one(
            {"owner": owner},
            {"$set": {
                "items": [],
                "totalItemCount": 0,
                "totalPrice": 0,
                "lastModifiedAt": self.clock(),
            }},
        )
        if result.matched_count == 0:
            logger.info("Clear requested for %s but no cart exists", owner)
        return result
