"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
Pricing rules are a closed set of frozen variants: UnitRule, QuantityCombo
and MixedCombo. Match on them with isinstance.
"""
from dataclasses import dataclass, field
from typing import Optional, Union


Category = str

UNITARY = "UNITARY"
QUANTITY_COMBO = "QUANTITY_COMBO"
MIXED_COMBO = "MIXED_COMBO"

RULE_KINDS = (UNITARY, QUANTITY_COMBO, MIXED_COMBO)


@dataclass(frozen=True)
class CatalogItem:
    """A selectable catalog item belonging to exactly one category."""
    item_id: str
    name: str
    category: Category
    description: Optional[str] = None
    images: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnitRule:
    """Per-unit price for a category."""
    rule_id: str
    category: Category
    price: float

    @property
    def kind(self) -> str:
        return UNITARY


@dataclass(frozen=True)
class QuantityCombo:
    """N units of one category for a bundle price."""
    rule_id: str
    category: Category
    quantity: int
    price: float

    @property
    def kind(self) -> str:
        return QUANTITY_COMBO

    def describe(self) -> str:
        return f"{self.quantity}x {self.category}"


@dataclass(frozen=True)
class MixRequirement:
    """One (category, quantity) component of a mixed combo."""
    category: Category
    quantity: int


@dataclass(frozen=True)
class MixedCombo:
    """Fixed quantities across several categories for a bundle price."""
    rule_id: str
    requirements: tuple[MixRequirement, ...]
    price: float

    @property
    def kind(self) -> str:
        return MIXED_COMBO

    @property
    def categories(self) -> list[Category]:
        return [req.category for req in self.requirements]

    def describe(self) -> str:
        return " + ".join(f"{req.quantity}x {req.category}" for req in self.requirements)


PricingRule = Union[UnitRule, QuantityCombo, MixedCombo]
ComboRule = Union[QuantityCombo, MixedCombo]


def rule_to_dict(rule: PricingRule) -> dict:
    """Serialize a rule to the camelCase shape used by menu data files."""
    if isinstance(rule, UnitRule):
        return {"id": rule.rule_id, "type": UNITARY, "category": rule.category, "price": rule.price}
    if isinstance(rule, QuantityCombo):
        return {
            "id": rule.rule_id,
            "type": QUANTITY_COMBO,
            "category": rule.category,
            "quantity": rule.quantity,
            "price": rule.price,
        }
    return {
        "id": rule.rule_id,
        "type": MIXED_COMBO,
        # Mixed combos still carry a nominal category in menu data
        "category": rule.requirements[0].category if rule.requirements else None,
        "mixQuantities": [
            {"category": req.category, "quantity": req.quantity} for req in rule.requirements
        ],
        "price": rule.price,
    }


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class AppliedCombo:
    """A combo applied one or more times during pricing."""
    rule: ComboRule
    savings: float  # unit_savings * times_applied
    times_applied: int = 1
    unit_savings: float = 0.0

    def to_dict(self) -> dict:
        return {
            "rule": rule_to_dict(self.rule),
            "savings": self.savings,
            "timesApplied": self.times_applied,
        }


@dataclass
class Request:
    """A pricing request: item id -> requested quantity."""
    selections: dict[str, int]
    notes: Optional[str] = None


@dataclass
class PriceResult:
    """Complete result of a pricing calculation."""
    total: float
    applied_combos: list[AppliedCombo] = field(default_factory=list)
    breakdown: list[str] = field(default_factory=list)

    # Working state exposed for inspection
    category_counts: dict[Category, int] = field(default_factory=dict)
    remaining_counts: dict[Category, int] = field(default_factory=dict)
    unit_prices: dict[Category, float] = field(default_factory=dict)

    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def total_savings(self) -> float:
        return sum(combo.savings for combo in self.applied_combos)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning (duplicates are dropped)."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to the dict shape consumed by callers of the old calculator."""
        return {
            "total": self.total,
            "appliedCombos": [combo.to_dict() for combo in self.applied_combos],
            "breakdown": list(self.breakdown),
            "categoryCounts": dict(self.category_counts),
            "remainingCounts": dict(self.remaining_counts),
            "warnings": list(self.warnings),
        }
