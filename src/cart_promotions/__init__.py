# src/cart_promotions/__init__.py
from cart_promotions.cart import Cart, CartLine, LineView
from cart_promotions.catalog import Brand, Catalog, Category, Item, ItemLookup, SaleUnit
from cart_promotions.engine import Assignment, PromotionEngine, Scenario, ScenarioKind
from cart_promotions.errors import CartPromotionsError, ValidationError
from cart_promotions.promotions import (
    BuyXGetY,
    FlatDiscount,
    PercentageDiscount,
    Promotion,
    PromotionKind,
    TargetType,
    WeightThreshold,
)
from cart_promotions.system import PromotionSystem

__all__ = [
    "Assignment",
    "Brand",
    "BuyXGetY",
    "Cart",
    "CartLine",
    "CartPromotionsError",
    "Catalog",
    "Category",
    "FlatDiscount",
    "Item",
    "ItemLookup",
    "LineView",
    "PercentageDiscount",
    "Promotion",
    "PromotionEngine",
    "PromotionKind",
    "PromotionSystem",
    "SaleUnit",
    "Scenario",
    "ScenarioKind",
    "TargetType",
    "ValidationError",
    "WeightThreshold",
]
