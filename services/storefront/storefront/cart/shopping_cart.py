"""
Shopping cart backed by ``cart_items`` rows.

A cart is identified by a cart id string: the signed-in user's email, or an
anonymous session id. The cart never commits; callers own the transaction.
"""
import logging
from datetime import datetime
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session, joinedload

from storefront.cart.costs import OrderCostSummary, calculate_costs, to_cents
from storefront.db.models import CartItem, Order, OrderDetail, Product

logger = logging.getLogger(__name__)


class ShoppingCart:
    def __init__(self, db: Session, cart_id: str):
        self.db = db
        self.cart_id = cart_id

    def _find_item(self, **filters) -> CartItem | None:
        stmt = select(CartItem).where(CartItem.cart_id == self.cart_id)
        for column, value in filters.items():
            stmt = stmt.where(getattr(CartItem, column) == value)
        return self.db.execute(stmt).scalars().first()

    def add_to_cart(self, product: Product) -> CartItem:
        """Add one unit of ``product``, merging into an existing row if there is one."""
        item = self._find_item(product_id=product.id)
        if item is None:
            item = CartItem(cart_id=self.cart_id, product_id=product.id, count=1, date_created=datetime.utcnow())
            self.db.add(item)
        else:
            item.count += 1
        self.db.flush()
        logger.debug("cart %s: product %s now x%s", self.cart_id, product.id, item.count)
        return item

    def get_cart_item(self, cart_item_id: int) -> CartItem | None:
        return self._find_item(id=cart_item_id)

    def remove_from_cart(self, cart_item_id: int) -> int:
        """Delete the row and return how many units it held (0 if it isn't in this cart)."""
        item = self.get_cart_item(cart_item_id)
        if item is None:
            return 0
        removed = item.count
        self.db.delete(item)
        self.db.flush()
        return removed

    def empty_cart(self) -> None:
        self.db.execute(delete(CartItem).where(CartItem.cart_id == self.cart_id))
        self.db.flush()

    def get_cart_items(self) -> List[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == self.cart_id)
            .options(joinedload(CartItem.product))
            .order_by(CartItem.date_created, CartItem.id)
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    def get_count(self) -> int:
        return sum(item.count for item in self.get_cart_items())

    def get_costs(self, items: List[CartItem] | None = None) -> OrderCostSummary:
        items = self.get_cart_items() if items is None else items
        return calculate_costs((item.count, item.product.price) for item in items)

    def migrate_cart(self, target_cart_id: str) -> None:
        """Move every row into ``target_cart_id``, summing counts for shared products."""
        if target_cart_id == self.cart_id:
            return
        target = ShoppingCart(self.db, target_cart_id)
        for item in self.get_cart_items():
            existing = target._find_item(product_id=item.product_id)
            if existing is None:
                item.cart_id = target_cart_id
            else:
                existing.count += item.count
                self.db.delete(item)
        self.db.flush()
        logger.info("migrated cart %s into %s", self.cart_id, target_cart_id)

    def create_order(self, order: Order) -> Order:
        """Turn the cart into order details on ``order``, total it and empty the cart."""
        items = self.get_cart_items()
        for item in items:
            order.details.append(OrderDetail(
                product_id=item.product_id,
                quantity=item.count,
                unit_price=item.product.price,
            ))
        order.total = to_cents(self.get_costs(items).total)
        self.db.add(order)
        self.empty_cart()
        return order
