# src/cart_promotions/__main__.py
import logging
from datetime import datetime, timedelta

from cart_promotions.catalog import SaleUnit
from cart_promotions.config import configure_logging
from cart_promotions.promotions import TargetType
from cart_promotions.system import PromotionSystem

logger = logging.getLogger("cart_promotions")


def build_demo(now: datetime) -> PromotionSystem:
    system = PromotionSystem(clock=lambda: now)
    start = now - timedelta(hours=1)

    system.create_category(1, "Electronics")
    system.create_category(2, "Produce")
    system.create_brand(1, "Acme")
    system.create_item(1, "Headphones", 50, SaleUnit.QUANTITY, category_ids=[1], brand_id=1)
    system.create_item(2, "Charger", 30, SaleUnit.QUANTITY, category_ids=[1], brand_id=1)
    system.create_item(3, "Apples", 5, SaleUnit.WEIGHT, category_ids=[2])

    system.create_percentage_discount(1, "40% off Headphones", 40, start, target_ids=[1])
    system.create_buy_x_get_y(2, "Electronics: Buy 2 Get 1 Free", 2, 1, start,
                              target_type=TargetType.CATEGORY, target_ids=[1])
    system.create_weight_threshold(3, "Bulk Produce", 100, 30, start,
                                   target_type=TargetType.CATEGORY, target_ids=[2])
    return system


def main() -> None:
    configure_logging()

    system = build_demo(datetime.now())
    cart = system.create_cart()
    cart.add(system.get_item(1), 2)
    cart.add(system.get_item(2), 1)
    cart.add(system.get_item(3), 150)

    logger.info("cart repriced with %d active promotion(s)", len(system.active_promotions()))
    print(cart.summary())


if __name__ == "__main__":
    main()
