from decimal import Decimal

from sqlalchemy import select

from helpers import TOKEN_FIELD, auth_headers
from storefront.db.models import CartItem, Order, Product

ADDRESS = {
    "name": "Sam Shopper",
    "address": "1 Microsoft Way",
    "city": "Redmond",
    "state": "WA",
    "postal_code": "98052",
    "country": "US",
    "phone": "555-0100",
    "email": "sam@example.com",
    "promo_code": "free",
}


def _product_id(db, sku):
    return db.execute(select(Product.id).where(Product.sku_number == sku)).scalar_one()


def _form_token(client, headers=None):
    resp = client.get("/Checkout/AddressAndPayment", headers=headers or {})
    assert resp.status_code == 200
    return TOKEN_FIELD.search(resp.text).group(1)


def _checkout(client, data, headers=None):
    token = _form_token(client, headers)
    return client.post("/Checkout/AddressAndPayment", data={**data, "__RequestVerificationToken": token},
                       headers=headers or {}, follow_redirects=False)


def test_checkout_creates_order_and_empties_cart(client, catalog, telemetry):
    pid = _product_id(catalog, "BRK-001")  # 25.99
    client.get(f"/ShoppingCart/AddToCart/{pid}")

    resp = _checkout(client, ADDRESS)
    assert resp.status_code == 303
    assert resp.headers["location"].startswith("/Checkout/Complete/")

    catalog.expire_all()
    order = catalog.execute(select(Order)).scalar_one()
    assert order.total == Decimal("32.54")
    assert [(d.product_id, d.quantity, d.unit_price) for d in order.details] == [(pid, 1, Decimal("25.99"))]
    assert catalog.execute(select(CartItem)).scalars().all() == []
    assert any(e[0] == "Checkout/Server/Complete" for e in telemetry.events)

    complete = client.get(resp.headers["location"])
    assert complete.status_code == 200
    assert "$32.54" in complete.text


def test_invalid_promo_code_is_rejected(client, catalog):
    client.get(f"/ShoppingCart/AddToCart/{_product_id(catalog, 'BRK-001')}")

    resp = _checkout(client, {**ADDRESS, "promo_code": "HALFOFF"})
    assert resp.status_code == 400
    assert "Promo code is not valid" in resp.text
    assert catalog.execute(select(Order)).scalars().all() == []
    assert len(catalog.execute(select(CartItem)).scalars().all()) == 1


def test_missing_fields_rerender_form(client, catalog):
    client.get(f"/ShoppingCart/AddToCart/{_product_id(catalog, 'BRK-001')}")

    resp = _checkout(client, {**ADDRESS, "name": "", "email": "not-an-email"})
    assert resp.status_code == 400
    assert "name:" in resp.text
    assert "email:" in resp.text
    assert 'value="1 Microsoft Way"' in resp.text


def test_empty_cart_cannot_check_out(client, catalog):
    resp = _checkout(client, ADDRESS)
    assert resp.status_code == 400
    assert "Your shopping cart is empty" in resp.text


def test_checkout_requires_antiforgery_token(client, catalog):
    client.get(f"/ShoppingCart/AddToCart/{_product_id(catalog, 'BRK-001')}")
    resp = client.post("/Checkout/AddressAndPayment", data=ADDRESS, follow_redirects=False)
    assert resp.status_code == 400
    assert catalog.execute(select(Order)).scalars().all() == []


def test_complete_page_hides_other_callers_orders(client, catalog):
    client.get(f"/ShoppingCart/AddToCart/{_product_id(catalog, 'BRK-001')}")
    location = _checkout(client, ADDRESS).headers["location"]

    client.cookies.clear()
    assert client.get(location).status_code == 404


def test_orders_require_authentication(client, catalog):
    assert client.get("/Orders").status_code == 401


def test_signed_in_customer_sees_own_orders(client, catalog):
    headers = auth_headers()
    client.get(f"/ShoppingCart/AddToCart/{_product_id(catalog, 'OIL-002')}", headers=headers)
    location = _checkout(client, ADDRESS, headers=headers).headers["location"]
    order_id = int(location.rsplit("/", 1)[1])

    listing = client.get("/Orders", headers=headers)
    assert listing.status_code == 200
    assert f"/Orders/Details/{order_id}" in listing.text

    details = client.get(f"/Orders/Details/{order_id}", headers=headers)
    assert details.status_code == 200
    assert "Oil and Filter Combo" in details.text
    # 34.49 + 5.00 + 1.9745
    assert "$41.46" in details.text

    other = auth_headers("someone@example.com")
    assert client.get(f"/Orders/Details/{order_id}", headers=other).status_code == 404
    assert f"/Orders/Details/{order_id}" not in client.get("/Orders", headers=other).text
