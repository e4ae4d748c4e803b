# src/cart_promotions/catalog.py
# Catalog value types and a plain in-memory registry.
# The engine only reads an item's price, sale unit and category ids.
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Hashable, Iterable, List, Optional, Protocol

from cart_promotions.errors import ValidationError
from cart_promotions.money import positive


class SaleUnit(Enum):
    WEIGHT = "weight"
    QUANTITY = "quantity"


def _sale_unit(value) -> SaleUnit:
    if isinstance(value, SaleUnit):
        return value
    try:
        return SaleUnit(value)
    except ValueError:
        allowed = ", ".join(u.value for u in SaleUnit)
        raise ValidationError("sale_unit", f"invalid sale unit {value!r}, must be one of {allowed}") from None


def _name(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("name", "must be a non-empty string")
    return value


@dataclass(frozen=True, eq=False)
class Category:
    id: Hashable
    name: str

    def __post_init__(self):
        _name(self.name)

    def __eq__(self, other):
        return isinstance(other, Category) and self.id == other.id

    def __hash__(self):
        return hash(("category", self.id))


@dataclass(frozen=True, eq=False)
class Brand:
    id: Hashable
    name: str

    def __post_init__(self):
        _name(self.name)

    def __eq__(self, other):
        return isinstance(other, Brand) and self.id == other.id

    def __hash__(self):
        return hash(("brand", self.id))

    def __str__(self):
        return self.name


@dataclass(frozen=True, eq=False)
class Item:
    """A sellable product.

    ``price`` is per unit for quantity items and per unit of mass for
    weight items. Two items are the same item when their ids match.
    """

    id: Hashable
    name: str
    price: Decimal
    sale_unit: SaleUnit
    category_ids: FrozenSet[Hashable] = field(default_factory=frozenset)
    brand_id: Optional[Hashable] = None

    def __post_init__(self):
        _name(self.name)
        object.__setattr__(self, "price", positive(self.price, "price"))
        object.__setattr__(self, "sale_unit", _sale_unit(self.sale_unit))
        object.__setattr__(self, "category_ids", frozenset(self.category_ids or ()))

    @property
    def sold_by_weight(self) -> bool:
        return self.sale_unit is SaleUnit.WEIGHT

    @property
    def sold_by_quantity(self) -> bool:
        return self.sale_unit is SaleUnit.QUANTITY

    def __eq__(self, other):
        return isinstance(other, Item) and self.id == other.id

    def __hash__(self):
        return hash(("item", self.id))


class ItemLookup(Protocol):
    def get_item(self, item_id: Hashable) -> Optional[Item]:
        ...


class Catalog:
    """Keyed stores for categories, brands and items."""

    def __init__(self):
        self._categories: Dict[Hashable, Category] = {}
        self._brands: Dict[Hashable, Brand] = {}
        self._items: Dict[Hashable, Item] = {}

    def create_category(self, id: Hashable, name: str) -> Category:
        category = Category(id=id, name=name)
        self._categories[id] = category
        return category

    def get_category(self, category_id: Hashable) -> Optional[Category]:
        return self._categories.get(category_id)

    def categories(self) -> List[Category]:
        return list(self._categories.values())

    def create_brand(self, id: Hashable, name: str) -> Brand:
        brand = Brand(id=id, name=name)
        self._brands[id] = brand
        return brand

    def get_brand(self, brand_id: Hashable) -> Optional[Brand]:
        return self._brands.get(brand_id)

    def brands(self) -> List[Brand]:
        return list(self._brands.values())

    def create_item(self, id: Hashable, name: str, price, sale_unit,
                    category_ids: Iterable[Hashable] = (), brand_id: Optional[Hashable] = None) -> Item:
        # Unknown category/brand references are dropped rather than rejected
        known = frozenset(c for c in category_ids if c in self._categories)
        item = Item(
            id=id,
            name=name,
            price=price,
            sale_unit=sale_unit,
            category_ids=known,
            brand_id=brand_id if brand_id in self._brands else None,
        )
        self._items[id] = item
        return item

    def get_item(self, item_id: Hashable) -> Optional[Item]:
        return self._items.get(item_id)

    def items(self) -> List[Item]:
        return list(self._items.values())
