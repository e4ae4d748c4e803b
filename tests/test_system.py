# tests/test_system.py
from datetime import timedelta
from decimal import Decimal

import pytest

from cart_promotions.catalog import SaleUnit
from cart_promotions.engine import ScenarioKind
from cart_promotions.system import PromotionSystem

from conftest import NOW

START = NOW - timedelta(hours=1)
END = NOW + timedelta(hours=1)


@pytest.fixture
def system():
    s = PromotionSystem(clock=lambda: NOW)
    s.create_category(1, "Electronics")
    s.create_category(2, "Food")
    s.create_brand(1, "Apple")
    s.create_brand(2, "Samsung")
    s.create_item(1, "iPhone", 999.99, SaleUnit.QUANTITY, category_ids=[1], brand_id=1)
    s.create_item(2, "Samsung Phone", 799.99, SaleUnit.QUANTITY, category_ids=[1], brand_id=2)
    s.create_item(3, "Apples", 3.99, SaleUnit.WEIGHT, category_ids=[2])
    s.create_item(4, "Bananas", 1.99, SaleUnit.WEIGHT, category_ids=[2])
    return s


def test_carts_share_the_system_engine(system):
    first, second = system.create_cart(), system.create_cart()
    assert first is not second
    assert first.engine is system.engine is second.engine


def test_factories_register_promotions(system):
    system.create_flat_discount(1, "$100 off iPhone", 100, START, END, target_ids=[1])
    system.create_percentage_discount(2, "20% off Electronics", 20, START, END,
                                      target_type="category", target_ids=[1])
    system.create_buy_x_get_y(3, "Phones B1G1", 1, 1, START, target_type="category", target_ids=[1])
    system.create_weight_threshold(4, "Bulk Fruit", 2, 25, START, END, target_type="category", target_ids=[2])

    assert [p.id for p in system.active_promotions()] == [1, 2, 3, 4]
    assert system.remove_promotion(3).name == "Phones B1G1"
    assert [p.id for p in system.active_promotions()] == [1, 2, 4]


def test_mixed_cart(system):
    system.create_percentage_discount(1, "20% off Electronics", 20, START, END,
                                      target_type="category", target_ids=[1])
    system.create_weight_threshold(2, "Bulk Fruit", 2, 25, START, END, target_type="category", target_ids=[2])

    cart = system.create_cart()
    cart.add(system.get_item(1), 1)
    cart.add(system.get_item(3), 2)
    cart.add(system.get_item(4), 1)

    # 20% of 999.99 + 25% of 7.98; bananas stay under the threshold
    assert cart.total_savings == Decimal("199.998") + Decimal("1.995")
    assert cart.reprice().kind is ScenarioKind.INDIVIDUAL


def test_buy_x_get_y_across_items(system):
    system.create_buy_x_get_y(1, "Phones B1G1", 1, 1, START, target_type="category", target_ids=[1])
    cart = system.create_cart()
    cart.add(system.get_item(1), 1)
    cart.add(system.get_item(2), 1)

    # the cheaper phone is free, split across both lines by price
    assert abs(cart.total_savings - Decimal("799.99")) < Decimal("1e-20")
    assert all(line.applied_promotion.id == 1 for line in cart)


def test_promotion_outside_window_is_not_active(system):
    system.create_percentage_discount(1, "Later", 50, NOW + timedelta(days=1))
    cart = system.create_cart()
    cart.add(system.get_item(1), 1)
    assert system.active_promotions() == []
    assert cart.total_savings == 0


def test_system_carts_add_by_id(system):
    cart = system.create_cart()
    cart.add_by_id(3, 2)
    assert cart.total_weight == Decimal("2")
    assert cart.total_original_price == Decimal("7.98")
