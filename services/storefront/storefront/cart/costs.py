"""Order cost calculation shared by the cart, checkout and order pages."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from pydantic import BaseModel

from storefront.core.config import settings

CENTS = Decimal("0.01")


class OrderCostSummary(BaseModel):
    item_count: int = 0
    sub_total: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    total: Decimal = Decimal("0")

    def display(self) -> dict:
        return {
            "cart_sub_total": format_currency(self.sub_total),
            "cart_shipping": format_currency(self.shipping),
            "cart_tax": format_currency(self.tax),
            "cart_total": format_currency(self.total),
        }


def calculate_costs(
    lines: Iterable[Tuple[int, Decimal]],
    shipping_per_item: Decimal | None = None,
    tax_rate: Decimal | None = None,
) -> OrderCostSummary:
    """Compute subtotal, shipping, tax and total for ``(quantity, unit_price)`` lines.

    Shipping is charged per unit, and tax applies to subtotal plus shipping.
    Values are exact; rounding only happens in :func:`format_currency`.
    """
    shipping_per_item = settings.SHIPPING_PER_ITEM if shipping_per_item is None else shipping_per_item
    tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate

    item_count = 0
    sub_total = Decimal("0")
    for quantity, price in lines:
        item_count += quantity
        sub_total += quantity * Decimal(price)

    shipping = item_count * shipping_per_item
    tax = (sub_total + shipping) * tax_rate
    return OrderCostSummary(
        item_count=item_count,
        sub_total=sub_total,
        shipping=shipping,
        tax=tax,
        total=sub_total + shipping + tax,
    )


def to_cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value: Decimal) -> str:
    amount = to_cents(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
