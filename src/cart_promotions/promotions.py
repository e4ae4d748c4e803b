# src/cart_promotions/promotions.py
# Promotion kinds. The set is closed: FlatDiscount, PercentageDiscount,
# BuyXGetY and WeightThreshold. Every kind must implement both
# can_apply_to and calculate_discount; ABC refuses to instantiate one that
# doesn't.
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, Hashable, Iterable, Optional

from cart_promotions.errors import ValidationError
from cart_promotions.money import percent, positive, positive_int

if TYPE_CHECKING:
    from cart_promotions.cart import CartLine
    from cart_promotions.catalog import Item

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class TargetType(Enum):
    ITEM = "item"
    CATEGORY = "category"


class PromotionKind(Enum):
    FLAT_DISCOUNT = "flat_discount"
    PERCENTAGE_DISCOUNT = "percentage_discount"
    BUY_X_GET_Y = "buy_x_get_y"
    WEIGHT_THRESHOLD = "weight_threshold"


def _now(now: Optional[datetime]) -> datetime:
    return datetime.now() if now is None else now


def _aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() is not None


def _align(now: datetime, reference: datetime) -> datetime:
    # Naive datetimes are taken as local time
    if _aware(now) == _aware(reference):
        return now
    if _aware(reference):
        return now.astimezone()
    return now.astimezone().replace(tzinfo=None)


def _target_type(value) -> TargetType:
    if isinstance(value, TargetType):
        return value
    try:
        return TargetType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in TargetType)
        raise ValidationError("target_type", f"invalid target type {value!r}, must be one of {allowed}") from None


@dataclass(frozen=True, kw_only=True, eq=False)
class Promotion(ABC):
    """Shared activation window and targeting for every promotion kind.

    An empty ``target_ids`` set targets every item (of the sale unit the
    concrete kind accepts).
    """

    kind = None  # set by each concrete kind

    id: Hashable
    name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    target_type: TargetType = TargetType.ITEM
    target_ids: FrozenSet[Hashable] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("name", "must be a non-empty string")
        if not isinstance(self.start_time, datetime):
            raise ValidationError("start_time", "must be a datetime")
        if self.end_time is not None and not isinstance(self.end_time, datetime):
            raise ValidationError("end_time", "must be a datetime or None")
        if self.end_time is not None and _aware(self.start_time) != _aware(self.end_time):
            raise ValidationError("end_time", "must match start_time in timezone awareness")
        object.__setattr__(self, "target_type", _target_type(self.target_type))
        object.__setattr__(self, "target_ids", frozenset(self.target_ids or ()))

    def active(self, now: Optional[datetime] = None) -> bool:
        now = _align(_now(now), self.start_time)
        return now >= self.start_time and (self.end_time is None or now <= self.end_time)

    def applicable_to_item(self, item: Item, now: Optional[datetime] = None) -> bool:
        if not self.active(now):
            return False
        if not self.target_ids:
            return True
        if self.target_type is TargetType.ITEM:
            return item.id in self.target_ids
        return not self.target_ids.isdisjoint(item.category_ids)

    @property
    def target_key(self) -> str:
        ids = ",".join(str(i) for i in sorted(self.target_ids, key=str))
        return f"{self.target_type.value}_{ids}"

    @abstractmethod
    def can_apply_to(self, line: CartLine, now: Optional[datetime] = None) -> bool:
        ...

    @abstractmethod
    def calculate_discount(self, lines, now: Optional[datetime] = None) -> Decimal:
        ...

    def __eq__(self, other):
        return isinstance(other, Promotion) and self.id == other.id

    def __hash__(self):
        return hash(("promotion", self.id))


@dataclass(frozen=True, kw_only=True, eq=False)
class FlatDiscount(Promotion):
    """Fixed amount off a line, never more than the line's price."""

    kind = PromotionKind.FLAT_DISCOUNT

    amount: Decimal

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "amount", positive(self.amount, "amount"))

    def can_apply_to(self, line, now=None):
        return self.applicable_to_item(line.item, now)

    def calculate_discount(self, line, now=None):
        if not self.can_apply_to(line, now):
            return ZERO
        return min(self.amount, line.original_price)

    def __str__(self):
        return f"{self.name} - ${self.amount} off"


@dataclass(frozen=True, kw_only=True, eq=False)
class PercentageDiscount(Promotion):
    kind = PromotionKind.PERCENTAGE_DISCOUNT

    percentage: Decimal

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "percentage", percent(self.percentage, "percentage"))

    def can_apply_to(self, line, now=None):
        return self.applicable_to_item(line.item, now)

    def calculate_discount(self, line, now=None):
        if not self.can_apply_to(line, now):
            return ZERO
        return line.original_price * self.percentage / HUNDRED

    def __str__(self):
        return f"{self.name} - {self.percentage}% off"


@dataclass(frozen=True, kw_only=True, eq=False)
class WeightThreshold(Promotion):
    """Percentage off a weight line once it reaches ``threshold_weight`` (inclusive)."""

    kind = PromotionKind.WEIGHT_THRESHOLD

    threshold_weight: Decimal
    discount_pct: Decimal

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "threshold_weight", positive(self.threshold_weight, "threshold_weight"))
        object.__setattr__(self, "discount_pct", percent(self.discount_pct, "discount_pct", Decimal("99")))

    def can_apply_to(self, line, now=None):
        return self.applicable_to_item(line.item, now) and line.item.sold_by_weight

    def calculate_discount(self, line, now=None):
        if not self.can_apply_to(line, now):
            return ZERO
        if line.weight < self.threshold_weight:
            return ZERO
        return line.original_price * self.discount_pct / HUNDRED

    def __str__(self):
        return f"{self.name} - {self.discount_pct}% off when buying {self.threshold_weight}+ by weight"


@dataclass(frozen=True, kw_only=True, eq=False)
class BuyXGetY(Promotion):
    """Buy ``buy_qty`` units, get ``get_qty`` more at ``get_discount_pct`` off.

    Unlike the other kinds, the discount is computed for a group of lines
    at once: quantities are pooled across every applicable line and the
    free units are taken from the cheapest items first. The result is a
    single aggregate amount; splitting it across lines is the engine's job.
    """

    kind = PromotionKind.BUY_X_GET_Y

    buy_qty: int
    get_qty: int
    get_discount_pct: Decimal = HUNDRED

    def __post_init__(self):
        super().__post_init__()
        positive_int(self.buy_qty, "buy_qty")
        positive_int(self.get_qty, "get_qty")
        object.__setattr__(self, "get_discount_pct", percent(self.get_discount_pct, "get_discount_pct"))

    @property
    def set_size(self) -> int:
        return self.buy_qty + self.get_qty

    def can_apply_to(self, line, now=None):
        return self.applicable_to_item(line.item, now) and line.item.sold_by_quantity

    def free_units(self, total_qty: int) -> int:
        # A lone full-price purchase never qualifies
        if total_qty < self.buy_qty + 1:
            return 0
        complete_sets, remainder = divmod(total_qty, self.set_size)
        partial_bonus = 0
        if remainder > self.buy_qty:
            partial_bonus = min(remainder - self.buy_qty, self.get_qty)
        return complete_sets * self.get_qty + partial_bonus

    def calculate_discount(self, lines: Iterable[CartLine], now=None):
        applicable = [line for line in lines if self.can_apply_to(line, now)]
        if not applicable:
            return ZERO

        remaining = self.free_units(sum(line.whole_units for line in applicable))
        discount = ZERO
        # sorted() is stable, equal prices keep cart order
        for line in sorted(applicable, key=lambda l: l.item.price):
            if remaining <= 0:
                break
            taken = min(line.whole_units, remaining)
            discount += line.item.price * taken * self.get_discount_pct / HUNDRED
            remaining -= taken
        return discount

    def __str__(self):
        if self.get_discount_pct == HUNDRED:
            return f"{self.name} - Buy {self.buy_qty} get {self.get_qty} ({self.get_qty} free)"
        return (f"{self.name} - Buy {self.buy_qty} get {self.get_qty} "
                f"({self.get_qty} at {self.get_discount_pct}% off)")
