"""
Combo Ranker - Scores combo rules by savings and applies them to counts.

Used by the pricing engine to decide which combos are worth applying and
in which order, and how many times each one fits the remaining units.
"""
from dataclasses import dataclass
from typing import Optional

from .models import Category, ComboRule, PricingRule, QuantityCombo, UnitRule


@dataclass
class RankedCombo:
    """A combo rule with the savings of a single application."""
    rule: ComboRule
    savings: float
    would_pay: float
    position: int  # index in the input rule sequence


def build_unit_prices(
    rules: list[PricingRule],
    categories: Optional[tuple] = None
) -> dict[Category, float]:
    """
    Build the category -> unit price lookup.

    Later unit rules overwrite earlier ones for the same category.
    Categories without a unit rule are priced at 0.
    """
    prices = {category: 0.0 for category in (categories or ())}
    for rule in rules:
        if isinstance(rule, UnitRule):
            prices[rule.category] = float(rule.price)
    return prices


def unusable_reason(rule: ComboRule) -> Optional[str]:
    """Return why a combo can never apply, or None if it is well formed."""
    if isinstance(rule, QuantityCombo):
        if rule.quantity <= 0:
            return f"quantity must be positive (got {rule.quantity})"
        return None

    if not rule.requirements:
        return "mixed combo has no requirements"
    for req in rule.requirements:
        if req.quantity <= 0:
            return f"requirement {req.category} quantity must be positive (got {req.quantity})"
    return None


class ComboRanker:
    """
    Ranks combo rules by per-application savings against unit prices.

    Savings is what the covered units would cost at unit price minus the
    combo price. Only strictly positive savings are kept.
    """

    def __init__(self, unit_prices: dict[Category, float]):
        self.unit_prices = unit_prices

    def unit_price(self, category: Category) -> float:
        return self.unit_prices.get(category, 0.0)

    def would_pay(self, rule: ComboRule) -> float:
        """Unit-price cost of everything one application of the combo covers."""
        if isinstance(rule, QuantityCombo):
            return self.unit_price(rule.category) * rule.quantity
        return sum(self.unit_price(req.category) * req.quantity for req in rule.requirements)

    def score(self, rule: ComboRule, position: int = 0) -> RankedCombo:
        would_pay = self.would_pay(rule)
        return RankedCombo(
            rule=rule,
            savings=would_pay - rule.price,
            would_pay=would_pay,
            position=position,
        )

    def rank(self, rules: list[PricingRule]) -> tuple[list[RankedCombo], list[str]]:
        """
        Score every combo rule and sort by savings, best first.

        Returns (ranked, traces). The sort is stable so rules with equal
        savings keep their input order.
        """
        traces = []
        scored = []

        for position, rule in enumerate(rules):
            if isinstance(rule, UnitRule):
                continue

            reason = unusable_reason(rule)
            if reason:
                traces.append(f"Rule {rule.rule_id} skipped: {reason}")
                continue

            ranked = self.score(rule, position)
            if ranked.savings <= 0:
                traces.append(
                    f"Rule {rule.rule_id} skipped: ${rule.price:.2f} does not beat "
                    f"${ranked.would_pay:.2f} at unit price"
                )
                continue
            scored.append(ranked)

        scored.sort(key=lambda c: c.savings, reverse=True)
        return scored, traces

    @staticmethod
    def times_applicable(rule: ComboRule, remaining: dict[Category, int]) -> int:
        """How many whole applications of the combo fit the remaining units."""
        if isinstance(rule, QuantityCombo):
            return remaining.get(rule.category, 0) // rule.quantity

        # Any requirement with no capacity blocks the whole combo
        return min(remaining.get(req.category, 0) // req.quantity for req in rule.requirements)

    @staticmethod
    def consume(rule: ComboRule, times: int, remaining: dict[Category, int]) -> None:
        """Subtract the units covered by `times` applications from remaining."""
        if isinstance(rule, QuantityCombo):
            remaining[rule.category] -= rule.quantity * times
            return
        for req in rule.requirements:
            remaining[req.category] = remaining.get(req.category, 0) - req.quantity * times

    @staticmethod
    def units_covered(rule: ComboRule) -> dict[Category, int]:
        """Units consumed per category by a single application."""
        if isinstance(rule, QuantityCombo):
            return {rule.category: rule.quantity}
        covered = {}
        for req in rule.requirements:
            covered[req.category] = covered.get(req.category, 0) + req.quantity
        return covered
