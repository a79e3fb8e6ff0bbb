"""
Pricing Engine - Greedy combo pricing with traceability.

Resolution order:
1. Aggregate selected quantities per category
2. Build the unit-price lookup (last unit rule per category wins)
3. Rank combos by savings against unit price, dropping non-saving ones
4. Apply combos greedily in rank order against a private copy of the counts
5. Price whatever is left at unit price
6. Describe the applied combos in the breakdown

The greedy pass is single-shot: a combo applied earlier is never undone to
make room for a later one, so the result is not a global optimum for every
rule set.
"""
from typing import Optional

from ..config.settings import Settings, get_settings
from .breakdown import build_breakdown
from .combo_ranker import ComboRanker, build_unit_prices, unusable_reason
from .models import (
    AppliedCombo,
    CatalogItem,
    Category,
    PriceResult,
    PricingRule,
    QuantityCombo,
    Request,
    UnitRule,
)


def _known_categories(
    categories: tuple,
    items: list[CatalogItem],
    rules: list[PricingRule],
    result: PriceResult
) -> tuple:
    """Configured categories plus any extra ones referenced by items or rules."""
    known = list(categories)
    for item in items:
        if item.category not in known:
            known.append(item.category)
            result.add_warning(f"Item {item.item_id} uses unconfigured category {item.category}")
    for rule in rules:
        if isinstance(rule, (UnitRule, QuantityCombo)):
            referenced = [rule.category]
        else:
            referenced = rule.categories
        for category in referenced:
            if category not in known:
                known.append(category)
                result.add_warning(f"Rule {rule.rule_id} uses unconfigured category {category}")
    return tuple(known)


def aggregate_selection(
    selections: dict[str, int],
    items: list[CatalogItem],
    categories: tuple,
    result: Optional[PriceResult] = None
) -> dict[Category, int]:
    """
    Sum selected quantities per category.

    Unknown item ids and non-positive quantities contribute nothing.
    Every category in `categories` is present in the returned mapping.
    """
    counts = {category: 0 for category in categories}
    item_map = {item.item_id: item for item in items}

    for item_id, quantity in selections.items():
        item = item_map.get(item_id)
        if item is None:
            if result is not None:
                result.add_warning(f"Unknown item {item_id} ignored")
            continue
        if quantity is None or quantity <= 0:
            if result is not None and quantity:
                result.add_warning(f"Non-positive quantity {quantity} for item {item_id} ignored")
            continue
        counts[item.category] = counts.get(item.category, 0) + int(quantity)

    return counts


def compute_best_price(
    selections: dict[str, int],
    items: list[CatalogItem],
    rules: list[PricingRule],
    categories: Optional[tuple] = None,
    settings: Optional[Settings] = None
) -> PriceResult:
    """
    Price a selection with the best-saving combos applied first.

    Args:
        selections: Dict of {item_id: quantity}
        items: Catalog items, used to resolve each item's category
        rules: Unit rules and combo rules, in priority order for ties
        categories: Closed category set; defaults to settings.categories
        settings: Optional settings override (labels, categories); built-in defaults otherwise

    Returns:
        PriceResult with total, applied combos, breakdown, trace and warnings
    """
    settings = settings or Settings.defaults()
    result = PriceResult(total=0.0)

    known = _known_categories(tuple(categories or settings.categories), items, rules, result)

    # 1. Category counts
    counts = aggregate_selection(selections, items, known, result)
    result.category_counts = dict(counts)
    result.add_trace(
        "Selection",
        "Units per category",
        ", ".join(f"{c}={n}" for c, n in counts.items())
    )

    if not rules:
        result.remaining_counts = dict(counts)
        result.unit_prices = {category: 0.0 for category in known}
        result.add_trace("Rules", "No pricing rules configured", "$0.00")
        return result

    # 2. Unit prices
    unit_prices = build_unit_prices(rules, known)
    result.unit_prices = dict(unit_prices)

    priced = set()
    for rule in rules:
        if isinstance(rule, UnitRule):
            if rule.category in priced:
                result.add_warning(f"Duplicate unit rule for {rule.category}; {rule.rule_id} wins")
            priced.add(rule.category)
    result.add_trace(
        "Unit Prices",
        "Unit price per category",
        ", ".join(f"{c}=${p:.2f}" for c, p in unit_prices.items())
    )

    # 3-4. Rank combos
    ranker = ComboRanker(unit_prices)
    ranked, rank_traces = ranker.rank(rules)
    for message in rank_traces:
        result.add_trace("Combo Ranking", message)
    for rule in rules:
        if not isinstance(rule, UnitRule):
            reason = unusable_reason(rule)
            if reason:
                result.add_warning(f"Combo {rule.rule_id} can never apply: {reason}")
    if ranked:
        result.add_trace(
            "Combo Ranking",
            "Combos by savings",
            ", ".join(f"{c.rule.rule_id}=${c.savings:.2f}" for c in ranked)
        )

    # 5. Greedy application
    remaining = dict(counts)
    total = 0.0
    for candidate in ranked:
        rule = candidate.rule
        times = ranker.times_applicable(rule, remaining)
        if times <= 0:
            continue

        result.applied_combos.append(AppliedCombo(
            rule=rule,
            savings=candidate.savings * times,
            times_applied=times,
            unit_savings=candidate.savings,
        ))
        ranker.consume(rule, times, remaining)
        total += rule.price * times
        result.add_trace(
            "Combo Applied",
            f"{rule.rule_id} ({rule.describe()}) × {times}",
            f"${rule.price * times:.2f}"
        )

    # 6. Remainder at unit price
    for category, count in remaining.items():
        if count <= 0:
            continue
        if category not in priced:
            result.add_warning(f"No unit price for {category}; {count} unit(s) priced at $0.00")
        extended = unit_prices.get(category, 0.0) * count
        total += extended
        result.add_trace(
            "Remainder",
            f"{count} × {category} at ${unit_prices.get(category, 0.0):.2f}",
            f"${extended:.2f}"
        )

    result.remaining_counts = remaining
    result.total = total
    result.add_trace("Total", "Combos plus remainder", f"${total:.2f}")

    # 7. Breakdown
    result.breakdown = build_breakdown(result.applied_combos, settings)
    return result


class PricingEngine:
    """
    Prices selections against a catalog loaded from the configured files.

    The catalog and rules are read once at construction; `calculate` never
    mutates them, so a single engine can serve concurrent requests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        items: Optional[list[CatalogItem]] = None,
        rules: Optional[list[PricingRule]] = None
    ):
        """Initialize engine with catalog items and pricing rules."""
        self.settings = settings or get_settings()
        self.items: list[CatalogItem] = []
        self.rules: list[PricingRule] = []
        self.load_warnings: list[str] = []

        if items is None or rules is None:
            self._load_catalog()
        if items is not None:
            self.items = list(items)
        if rules is not None:
            self.rules = list(rules)

    def _load_catalog(self):
        """Load items and rules CSVs when they exist."""
        from ..data.catalog_loader import load_items_csv, load_rules_csv

        if self.settings.items_csv.exists():
            self.items = load_items_csv(self.settings.items_csv, self.settings)
        else:
            self.load_warnings.append(f"Catalog items not found at {self.settings.items_csv}")

        if self.settings.rules_csv.exists():
            self.rules, errors = load_rules_csv(self.settings.rules_csv, self.settings)
            self.load_warnings.extend(errors)
        else:
            self.load_warnings.append(f"Pricing rules not found at {self.settings.rules_csv}")

    def reload_data(self):
        """Reload catalog items and rules from disk."""
        self.__init__(self.settings)

    @property
    def unit_prices(self) -> dict[Category, float]:
        return build_unit_prices(self.rules, self.settings.categories)

    def get_item(self, item_id: str) -> Optional[CatalogItem]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def calculate(self, request: Request) -> PriceResult:
        """
        Price a request against the loaded catalog.

        Args:
            request: Request dataclass with item selections

        Returns:
            PriceResult dataclass with breakdown, trace, and warnings
        """
        result = compute_best_price(
            request.selections,
            self.items,
            self.rules,
            categories=self.settings.categories,
            settings=self.settings,
        )
        for warning in self.load_warnings:
            result.add_warning(warning)
        return result

    def calculate_quote(self, selections: dict) -> dict:
        """Calculate and return the plain dict result."""
        return self.calculate(Request(selections=selections)).to_dict()
