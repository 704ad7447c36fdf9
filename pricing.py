"""
Order validation and pricing.

Prices always come from the server-side catalog, never from the request.
The client-declared total is only used as a cross-check: if it differs from
the catalog-computed total by more than TOTAL_TOLERANCE the order is
rejected. Every check runs before anything is written, so a rejected
order leaves no trace in storage.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from errors import (
    InvalidQuantityError,
    TotalMismatchError,
    UnknownProductError,
    ValidationError,
)
from schemas import OrderCreate

TOTAL_TOLERANCE = 0.01
# float slack: a difference of exactly TOTAL_TOLERANCE passes
_EPSILON = 1e-9

BILLING_FIELDS = ("email", "firstName", "lastName", "address", "city", "zipCode")


@dataclass
class PricedOrder:
    customer_info: Dict[str, str]
    payment_method: str
    items: List[Dict[str, Any]]
    total: float


def sanitize(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


def validate_billing(order: OrderCreate) -> Dict[str, str]:
    """Check billing fields and payment method; report all missing ones at once."""
    values = {f: sanitize(getattr(order, f)) for f in BILLING_FIELDS + ("paymentMethod",)}
    missing = [f for f, v in values.items() if not v]
    if missing:
        raise ValidationError("All billing information fields are required", missing)
    return {f: values[f] for f in BILLING_FIELDS}


def is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_positive_amount(value: Any) -> bool:
    """Finite number above zero; rejects NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def price_items(items, products: Mapping[Any, Dict[str, Any]]):
    """Resolve each requested line against the catalog.

    Returns the line snapshots (name and price captured now) and their sum.
    """
    lines = []
    computed_total = 0.0
    for item in items:
        product = products.get(item.id)
        if product is None:
            raise UnknownProductError(item.id)
        if not is_positive_int(item.quantity):
            raise InvalidQuantityError(product.get("name"), item.quantity)

        if not is_positive_amount(product.get("price")):
            raise ValidationError(f"Invalid catalog price for product: {product.get('name')}", ["price"])
        price = float(product["price"])
        subtotal = price * item.quantity
        computed_total += subtotal
        lines.append({
            "productId": product["id"],
            "name": product.get("name"),
            "price": price,
            "quantity": item.quantity,
            "subtotal": subtotal,
        })
    return lines, computed_total


def reconcile_total(computed: float, declared: float) -> None:
    if not math.isfinite(computed) or abs(computed - declared) > TOTAL_TOLERANCE + _EPSILON:
        raise TotalMismatchError(computed, declared)


def price_order(order: OrderCreate, products: Mapping[Any, Dict[str, Any]]) -> PricedOrder:
    customer_info = validate_billing(order)

    if not order.items:
        raise ValidationError("Order must contain at least one item", ["items"])
    if not is_positive_amount(order.total):
        raise ValidationError("Invalid order total", ["total"])

    lines, computed_total = price_items(order.items, products)
    reconcile_total(computed_total, order.total)

    return PricedOrder(
        customer_info=customer_info,
        payment_method=sanitize(order.paymentMethod),
        items=lines,
        total=computed_total,
    )
