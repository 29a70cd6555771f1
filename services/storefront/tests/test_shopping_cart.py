from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from storefront.cart.shopping_cart import ShoppingCart
from storefront.db.models import CartItem, Order, Product


def _product(db, sku):
    return db.execute(select(Product).where(Product.sku_number == sku)).scalar_one()


def _rows(db, cart_id):
    return db.execute(select(CartItem).where(CartItem.cart_id == cart_id)).scalars().all()


def test_adding_same_product_increments_existing_row(catalog):
    db = catalog
    cart = ShoppingCart(db, "cart-1")
    product = _product(db, "BRK-001")

    cart.add_to_cart(product)
    cart.add_to_cart(product)
    db.commit()

    rows = _rows(db, "cart-1")
    assert len(rows) == 1
    assert rows[0].count == 2
    assert cart.get_count() == 2


def test_carts_are_isolated_by_cart_id(catalog):
    db = catalog
    product = _product(db, "BRK-001")
    ShoppingCart(db, "a").add_to_cart(product)
    ShoppingCart(db, "b").add_to_cart(product)
    db.commit()

    assert len(_rows(db, "a")) == 1
    assert len(_rows(db, "b")) == 1


def test_remove_returns_removed_quantity_and_drops_row(catalog):
    db = catalog
    cart = ShoppingCart(db, "cart-1")
    product = _product(db, "LIG-001")
    for _ in range(3):
        item = cart.add_to_cart(product)
    db.commit()

    assert cart.remove_from_cart(item.id) == 3
    db.commit()
    assert cart.get_cart_items() == []


def test_remove_ignores_items_from_other_carts(catalog):
    db = catalog
    item = ShoppingCart(db, "owner").add_to_cart(_product(db, "OIL-001"))
    db.commit()

    assert ShoppingCart(db, "intruder").remove_from_cart(item.id) == 0
    assert len(_rows(db, "owner")) == 1


def test_costs_use_current_product_prices(catalog):
    db = catalog
    cart = ShoppingCart(db, "cart-1")
    cart.add_to_cart(_product(db, "BRK-002"))  # 18.99
    cart.add_to_cart(_product(db, "BRK-002"))
    cart.add_to_cart(_product(db, "OIL-001"))  # 28.99
    db.commit()

    costs = cart.get_costs()
    assert costs.item_count == 3
    assert costs.sub_total == Decimal("66.97")
    assert costs.shipping == Decimal("15.00")


def test_migrate_cart_merges_duplicate_products(catalog):
    db = catalog
    brake, oil = _product(db, "BRK-001"), _product(db, "OIL-001")
    anonymous = ShoppingCart(db, "anon")
    anonymous.add_to_cart(brake)
    anonymous.add_to_cart(oil)
    user = ShoppingCart(db, "cust@example.com")
    user.add_to_cart(brake)
    db.commit()

    anonymous.migrate_cart("cust@example.com")
    db.commit()

    assert _rows(db, "anon") == []
    counts = {item.product_id: item.count for item in user.get_cart_items()}
    assert counts == {brake.id: 2, oil.id: 1}


def test_create_order_snapshots_lines_and_empties_cart(catalog):
    db = catalog
    cart = ShoppingCart(db, "cart-1")
    product = _product(db, "BRK-001")  # 25.99
    cart.add_to_cart(product)
    cart.add_to_cart(product)
    db.commit()

    order = Order(username="cart-1", name="Sam", address="1 Main St", city="Redmond", state="WA",
                  postal_code="98052", country="US", phone="555-0100", email="sam@example.com")
    cart.create_order(order)
    db.commit()

    assert cart.get_cart_items() == []
    assert len(order.details) == 1
    assert order.details[0].quantity == 2
    assert order.details[0].unit_price == Decimal("25.99")
    # 51.98 + 10.00 shipping + 3.099 tax
    assert order.total == Decimal("65.08")


def test_cart_rejects_second_row_for_same_product(catalog):
    db = catalog
    product = _product(db, "BRK-001")
    db.add(CartItem(cart_id="cart-1", product_id=product.id, count=1))
    db.commit()

    db.add(CartItem(cart_id="cart-1", product_id=product.id, count=1))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    assert len(_rows(db, "cart-1")) == 1
