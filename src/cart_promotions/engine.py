# src/cart_promotions/engine.py
# Chooses, among mutually exclusive ways of applying the active promotions,
# the one that saves the customer the most, then writes it onto the lines.
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Hashable, List, Optional, Sequence, Tuple

from cart_promotions.promotions import BuyXGetY, Promotion, PromotionKind

if TYPE_CHECKING:
    from cart_promotions.cart import Cart, CartLine

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ScenarioKind(Enum):
    BASELINE = "baseline"
    BUY_X_GET_Y = "buy_x_get_y"
    INDIVIDUAL = "individual"
    COMBINED_BUY_X_GET_Y = "combined_buy_x_get_y"

    @property
    def proportional(self) -> bool:
        # Aggregate discounts are split across lines by original price
        return self in (ScenarioKind.BUY_X_GET_Y, ScenarioKind.COMBINED_BUY_X_GET_Y)


@dataclass(frozen=True)
class Assignment:
    promotion: Promotion
    lines: Tuple[CartLine, ...]
    discount: Decimal


@dataclass(frozen=True)
class Scenario:
    kind: ScenarioKind
    assignments: Tuple[Assignment, ...] = ()
    total_savings: Decimal = ZERO

    @classmethod
    def of(cls, kind: ScenarioKind, assignments: Sequence[Assignment]) -> "Scenario":
        return cls(kind, tuple(assignments), sum((a.discount for a in assignments), ZERO))


BASELINE = Scenario(ScenarioKind.BASELINE)


class PromotionEngine:
    """Holds the promotion set and reprices carts against it.

    Nothing but the promotions survives between calls; every scenario is
    scratch data built and discarded inside ``reprice``.
    """

    def __init__(self, promotions: Sequence[Promotion] = (),
                 clock: Callable[[], datetime] = datetime.now):
        self._promotions: Dict[Hashable, Promotion] = {}
        self._clock = clock
        for promotion in promotions:
            self.add(promotion)

    # ---- promotion set ----

    def add(self, promotion: Promotion) -> bool:
        if promotion.id in self._promotions:
            return False
        self._promotions[promotion.id] = promotion
        logger.info("promotion added: %s", promotion)
        return True

    def remove(self, promotion_id: Hashable) -> Optional[Promotion]:
        promotion = self._promotions.pop(promotion_id, None)
        if promotion is not None:
            logger.info("promotion removed: %s", promotion)
        return promotion

    def get(self, promotion_id: Hashable) -> Optional[Promotion]:
        return self._promotions.get(promotion_id)

    @property
    def promotions(self) -> List[Promotion]:
        return list(self._promotions.values())

    def active_promotions(self, now: Optional[datetime] = None) -> List[Promotion]:
        now = self._now(now)
        return [p for p in self._promotions.values() if p.active(now)]

    def __len__(self):
        return len(self._promotions)

    def _now(self, now: Optional[datetime]) -> datetime:
        return self._clock() if now is None else now

    # ---- repricing ----

    def reprice(self, cart: Cart, now: Optional[datetime] = None) -> Scenario:
        lines = cart.lines
        if not lines:
            return BASELINE
        now = self._now(now)

        for line in lines:
            line.remove_promotion()

        best = BASELINE
        for scenario in self.generate_scenarios(lines, now):
            logger.debug("scenario %s saves %s", scenario.kind.value, scenario.total_savings)
            if scenario.total_savings > best.total_savings:
                best = scenario

        if best.total_savings > 0:
            self._apply(best, now)
        logger.info("selected %s scenario, savings %s", best.kind.value, best.total_savings)
        return best

    def generate_scenarios(self, lines: Sequence[CartLine], now: Optional[datetime] = None) -> List[Scenario]:
        """Candidates in tie-break order: baseline, each buy-x-get-y alone,
        individual promotions, combined buy-x-get-y."""
        now = self._now(now)
        active = self.active_promotions(now)
        bxgy = [p for p in active if p.kind is PromotionKind.BUY_X_GET_Y]
        individual = [p for p in active if p.kind is not PromotionKind.BUY_X_GET_Y]

        scenarios = [BASELINE]
        for promotion in bxgy:
            assignment = self._group_assignment(promotion, lines, now)
            if assignment.discount > 0:
                scenarios.append(Scenario.of(ScenarioKind.BUY_X_GET_Y, [assignment]))

        scenario = self._individual_scenario(lines, individual, now)
        if scenario.total_savings > 0:
            scenarios.append(scenario)

        if len(bxgy) > 1:
            scenario = self._combined_scenario(lines, bxgy, now)
            if scenario.total_savings > 0:
                scenarios.append(scenario)
        return scenarios

    def _group_assignment(self, promotion: BuyXGetY, lines, now) -> Assignment:
        applicable = tuple(line for line in lines if promotion.can_apply_to(line, now))
        return Assignment(promotion, applicable, promotion.calculate_discount(applicable, now))

    def _individual_scenario(self, lines, promotions, now) -> Scenario:
        groups: Dict[Hashable, List[CartLine]] = {}
        for line in lines:
            groups.setdefault(line.item.id, []).append(line)

        assignments = []
        for group in groups.values():
            best_promotion, best_discount = None, ZERO
            for promotion in promotions:
                if not any(promotion.can_apply_to(line, now) for line in group):
                    continue
                discount = sum((promotion.calculate_discount(line, now) for line in group), ZERO)
                if discount > best_discount:
                    best_promotion, best_discount = promotion, discount
            if best_promotion is not None:
                assignments.append(Assignment(best_promotion, tuple(group), best_discount))
        return Scenario.of(ScenarioKind.INDIVIDUAL, assignments)

    def _combined_scenario(self, lines, promotions, now) -> Scenario:
        # One survivor per distinct target; overlapping targets are not deduplicated
        best_by_target: Dict[str, Assignment] = {}
        for promotion in promotions:
            assignment = self._group_assignment(promotion, lines, now)
            if assignment.discount <= 0:
                continue
            kept = best_by_target.get(promotion.target_key)
            if kept is None or kept.discount < assignment.discount:
                best_by_target[promotion.target_key] = assignment
        return Scenario.of(ScenarioKind.COMBINED_BUY_X_GET_Y, list(best_by_target.values()))

    def _apply(self, scenario: Scenario, now: datetime) -> None:
        for assignment in scenario.assignments:
            if scenario.kind.proportional:
                self._apply_proportional(assignment, now)
            else:
                self._apply_direct(assignment, now)

    def _apply_proportional(self, assignment: Assignment, now) -> None:
        promotion = assignment.promotion
        applicable = [line for line in assignment.lines if promotion.can_apply_to(line, now)]
        total = sum((line.original_price for line in applicable), ZERO)
        if total <= 0:
            return
        for line in applicable:
            line.apply_promotion(promotion, assignment.discount * (line.original_price / total))

    def _apply_direct(self, assignment: Assignment, now) -> None:
        promotion = assignment.promotion
        for line in assignment.lines:
            if not promotion.can_apply_to(line, now):
                continue
            discount = promotion.calculate_discount(line, now)
            if discount > 0:
                line.apply_promotion(promotion, discount)
