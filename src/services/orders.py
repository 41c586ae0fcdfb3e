"""
Order/Billing Engine.

Prices a list of product ids (repetition = quantity) into an Order
and renders fixed-width invoices.
"""

import logging
from collections import Counter
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence

import config.settings as settings
from src.errors import NotFoundError, ValidationError
from src.models.order import Order
from src.models.user import User
from src.registry.repository import Repository
from src.utils.clock import format_instant, utc_now

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 64


def round2(value: float) -> float:
    """Round half-up to 2 decimal places (2.675 -> 2.68, 0.125 -> 0.13)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def truncate(text: Optional[str], width: int) -> str:
    """Cut text to width characters, marking the cut with an ellipsis."""
    if text is None:
        return ""
    if len(text) <= width:
        return text
    return text[:width - 1] + "…"


class OrderService:
    """
    Creates priced orders and renders their invoices.
    """

    def __init__(self, repository: Repository, tax_rate: float = settings.TAX_RATE):
        """
        Initialize order service.

        Args:
            repository: Shared entity repository
            tax_rate: Fraction of the subtotal charged as tax
        """
        self.repository = repository
        self.tax_rate = tax_rate

    def create_order(self, user: User, product_ids: Sequence[int]) -> Order:
        """
        Price and store an order.

        Every id must resolve to a product; a single unknown id rejects
        the whole order before an order id is allocated.

        Args:
            user: Buyer
            product_ids: Ordered ids, repeated once per unit of quantity

        Returns:
            The stored Order

        Raises:
            ValidationError: If product_ids is empty
            NotFoundError: If any id does not resolve to a product
        """
        product_ids = list(product_ids)
        if not product_ids:
            raise ValidationError("An order needs at least one product id")

        with self.repository.lock:
            missing = [pid for pid in product_ids if self.repository.get_product(pid) is None]
            if missing:
                raise NotFoundError(f"Product(s) not found: {sorted(set(missing))}")

            raw_subtotal = sum(self.repository.get_product(pid).price for pid in product_ids)
            subtotal = round2(raw_subtotal)
            tax = round2(subtotal * self.tax_rate)
            total = round2(subtotal + tax)

            order = Order(
                id=self.repository.next_id("order"),
                user_id=user.id,
                product_ids=product_ids,
                subtotal=subtotal,
                tax=tax,
                total=total,
                created_at=utc_now()
            )
            self.repository.add_order(order)

        logger.info(
            f"Order #{order.id} for user #{user.id}: {len(product_ids)} units, "
            f"total={total:.2f} {settings.CURRENCY}"
        )
        return order

    def orders_for_user(self, user_id: int) -> List[Order]:
        """Orders placed by a user, oldest first."""
        return self.repository.orders_for_user(user_id)

    def generate_bill(self, order: Order) -> str:
        """
        Render an invoice for an order. Read-only and deterministic.

        Lines are grouped by product id in first-seen order; groups whose
        product no longer resolves are skipped.

        Args:
            order: Order to bill

        Returns:
            Invoice text
        """
        buyer = self.repository.get_user(order.user_id)
        quantities = Counter(order.product_ids)  # Preserves first-seen order
        currency = settings.CURRENCY
        width = settings.BILL_NAME_WIDTH

        lines = [
            f"Invoice No: {order.id}",
            f"Date: {format_instant(order.created_at)}",
            f"Buyer: {buyer.username if buyer else '?'} (#{order.user_id})",
            "",
            f"{'ID':<5} {'Product':<{width}} {'Qty':<8} {'Price':<10} {'Line Total':<10}",
            SEPARATOR,
        ]

        for product_id, quantity in quantities.items():
            product = self.repository.get_product(product_id)
            if product is None:
                logger.warning(f"Order #{order.id}: product #{product_id} missing, line skipped")
                continue
            line_total = round2(product.price * quantity)
            lines.append(
                f"{product_id:<5d} {truncate(product.name, width):<{width}} {quantity:<8d} "
                f"{product.price:<10.2f} {line_total:<10.2f}"
            )

        tax_label = f"Tax ({round(self.tax_rate * 100):g}%):"
        lines.extend([
            SEPARATOR,
            f"{'Subtotal:':<30} {order.subtotal:>20.2f} {currency}",
            f"{tax_label:<30} {order.tax:>20.2f} {currency}",
            f"{'TOTAL:':<30} {order.total:>20.2f} {currency}",
        ])
        return "\n".join(lines) + "\n"
