# src/cart_promotions/system.py
# Wires a catalog and a promotion engine together and hands out carts that
# share the engine.
from __future__ import annotations

from datetime import datetime
from typing import Callable, Hashable, Iterable, List, Optional

from cart_promotions.cart import Cart
from cart_promotions.catalog import Brand, Catalog, Category, Item
from cart_promotions.engine import PromotionEngine
from cart_promotions.promotions import (
    BuyXGetY,
    FlatDiscount,
    PercentageDiscount,
    Promotion,
    TargetType,
    WeightThreshold,
)


class PromotionSystem:
    def __init__(self, catalog: Optional[Catalog] = None, engine: Optional[PromotionEngine] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.catalog = catalog or Catalog()
        self.engine = engine or PromotionEngine(clock=clock)

    # ---- catalog ----

    def create_category(self, id: Hashable, name: str) -> Category:
        return self.catalog.create_category(id, name)

    def create_brand(self, id: Hashable, name: str) -> Brand:
        return self.catalog.create_brand(id, name)

    def create_item(self, id: Hashable, name: str, price, sale_unit,
                    category_ids: Iterable[Hashable] = (), brand_id: Optional[Hashable] = None) -> Item:
        return self.catalog.create_item(id, name, price, sale_unit, category_ids, brand_id)

    def get_item(self, item_id: Hashable) -> Optional[Item]:
        return self.catalog.get_item(item_id)

    def get_category(self, category_id: Hashable) -> Optional[Category]:
        return self.catalog.get_category(category_id)

    def get_brand(self, brand_id: Hashable) -> Optional[Brand]:
        return self.catalog.get_brand(brand_id)

    # ---- promotions ----

    def _register(self, promotion: Promotion) -> Promotion:
        self.engine.add(promotion)
        return promotion

    def create_flat_discount(self, id, name, amount, start_time, end_time=None,
                             target_type=TargetType.ITEM, target_ids=()) -> FlatDiscount:
        return self._register(FlatDiscount(
            id=id, name=name, amount=amount,
            start_time=start_time, end_time=end_time,
            target_type=target_type, target_ids=target_ids,
        ))

    def create_percentage_discount(self, id, name, percentage, start_time, end_time=None,
                                   target_type=TargetType.ITEM, target_ids=()) -> PercentageDiscount:
        return self._register(PercentageDiscount(
            id=id, name=name, percentage=percentage,
            start_time=start_time, end_time=end_time,
            target_type=target_type, target_ids=target_ids,
        ))

    def create_buy_x_get_y(self, id, name, buy_qty, get_qty, start_time, get_discount_pct=100,
                           end_time=None, target_type=TargetType.ITEM, target_ids=()) -> BuyXGetY:
        return self._register(BuyXGetY(
            id=id, name=name, buy_qty=buy_qty, get_qty=get_qty, get_discount_pct=get_discount_pct,
            start_time=start_time, end_time=end_time,
            target_type=target_type, target_ids=target_ids,
        ))

    def create_weight_threshold(self, id, name, threshold_weight, discount_pct, start_time, end_time=None,
                                target_type=TargetType.ITEM, target_ids=()) -> WeightThreshold:
        return self._register(WeightThreshold(
            id=id, name=name, threshold_weight=threshold_weight, discount_pct=discount_pct,
            start_time=start_time, end_time=end_time,
            target_type=target_type, target_ids=target_ids,
        ))

    def remove_promotion(self, promotion_id: Hashable) -> Optional[Promotion]:
        return self.engine.remove(promotion_id)

    def active_promotions(self, now: Optional[datetime] = None) -> List[Promotion]:
        return self.engine.active_promotions(now)

    def create_cart(self) -> Cart:
        return Cart(self.engine, items=self.catalog)
