# src/cart_promotions/cart.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Hashable, Iterator, List, Optional, Tuple

from cart_promotions.catalog import Item, ItemLookup, SaleUnit
from cart_promotions.errors import ValidationError
from cart_promotions.money import money, positive, q2

if TYPE_CHECKING:
    from cart_promotions.engine import PromotionEngine, Scenario
    from cart_promotions.promotions import Promotion

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class LineView:
    """Read-only snapshot of a line for presentation, prices rounded for display."""

    item_id: Hashable
    item_name: str
    amount: Decimal
    sale_unit: SaleUnit
    original_price: Decimal
    discounted_price: Decimal
    promotion_name: Optional[str]


class CartLine:
    """One cart entry: an item, an amount and its current pricing state.

    ``original_price`` is fixed at construction. ``discounted_price`` and
    ``applied_promotion`` are rewritten on every reprice and always satisfy
    ``0 <= discounted_price <= original_price``.
    """

    def __init__(self, item: Item, amount):
        self.item = item
        self.amount = positive(amount, "amount")
        self.original_price = item.price * self.amount
        self.discounted_price = self.original_price
        self.applied_promotion: Optional[Promotion] = None

    @property
    def quantity(self) -> Decimal:
        return self.amount if self.item.sold_by_quantity else ZERO

    @property
    def weight(self) -> Decimal:
        return self.amount if self.item.sold_by_weight else ZERO

    @property
    def whole_units(self) -> int:
        # Fractional quantities round down when counting discrete units
        return int(self.quantity)

    @property
    def savings(self) -> Decimal:
        return self.original_price - self.discounted_price

    @property
    def has_promotion(self) -> bool:
        return self.applied_promotion is not None

    def apply_promotion(self, promotion: Promotion, discount) -> None:
        discount = min(max(discount, ZERO), self.original_price)
        self.applied_promotion = promotion
        self.discounted_price = self.original_price - discount

    def remove_promotion(self) -> None:
        self.applied_promotion = None
        self.discounted_price = self.original_price

    def view(self) -> LineView:
        return LineView(
            item_id=self.item.id,
            item_name=self.item.name,
            amount=self.amount,
            sale_unit=self.item.sale_unit,
            original_price=q2(self.original_price),
            discounted_price=q2(self.discounted_price),
            promotion_name=self.applied_promotion.name if self.applied_promotion else None,
        )

    def __str__(self):
        if self.item.sold_by_quantity:
            return f"{self.item.name} x{self.amount}"
        return f"{self.item.name} {self.amount}kg"

    def __repr__(self):
        return f"CartLine({self.item.id!r}, {self.amount})"


class Cart:
    """Ordered cart lines, repriced by the injected engine on every change.

    Adding the same item twice yields two lines. Totals are always summed
    from the lines, never cached.
    """

    def __init__(self, engine: PromotionEngine, items: Optional[ItemLookup] = None):
        self._engine = engine
        self._items = items
        self._lines: List[CartLine] = []

    @property
    def engine(self) -> PromotionEngine:
        return self._engine

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def add(self, item: Item, amount, now: Optional[datetime] = None) -> CartLine:
        line = CartLine(item, amount)
        self._lines.append(line)
        logger.debug("added %r", line)
        self.reprice(now)
        return line

    def add_by_id(self, item_id: Hashable, amount, now: Optional[datetime] = None) -> CartLine:
        if self._items is None:
            raise ValidationError("item_id", "cart has no item lookup")
        item = self._items.get_item(item_id)
        if item is None:
            raise ValidationError("item_id", f"unknown item {item_id!r}")
        return self.add(item, amount, now)

    def remove(self, item_id: Hashable, now: Optional[datetime] = None) -> List[CartLine]:
        removed = [line for line in self._lines if line.item.id == item_id]
        if not removed:
            return []
        self._lines = [line for line in self._lines if line.item.id != item_id]
        logger.debug("removed %d line(s) for item %r", len(removed), item_id)
        self.reprice(now)
        return removed

    def clear(self) -> None:
        self._lines.clear()

    def reprice(self, now: Optional[datetime] = None) -> Scenario:
        return self._engine.reprice(self, now)

    @property
    def total_original_price(self) -> Decimal:
        return sum((line.original_price for line in self._lines), ZERO)

    @property
    def total_discounted_price(self) -> Decimal:
        return sum((line.discounted_price for line in self._lines), ZERO)

    @property
    def total_savings(self) -> Decimal:
        return self.total_original_price - self.total_discounted_price

    @property
    def item_count(self) -> Decimal:
        return sum((line.quantity for line in self._lines), ZERO)

    @property
    def total_weight(self) -> Decimal:
        return sum((line.weight for line in self._lines), ZERO)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def views(self) -> List[LineView]:
        return [line.view() for line in self._lines]

    def summary(self) -> str:
        if self.is_empty:
            return "Cart is empty"

        out = ["Cart Summary:", "=" * 40]
        for line in self._lines:
            text = f"{line}: {money(line.discounted_price)}"
            if line.has_promotion:
                text += f" ({line.applied_promotion.name})"
            out.append(text)
        out.append("-" * 40)
        out.append(f"Original Total: {money(self.total_original_price)}")
        if q2(self.total_savings) > 0:
            out.append(f"Total Savings: {money(self.total_savings)}")
        out.append(f"Final Total: {money(self.total_discounted_price)}")
        return "\n".join(out)

    def __len__(self):
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(tuple(self._lines))
