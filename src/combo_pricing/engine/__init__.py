"""Engine subpackage - core pricing logic and combo resolution."""
from .pricing_engine import PricingEngine, compute_best_price
from .models import (
    AppliedCombo,
    CatalogItem,
    MixedCombo,
    MixRequirement,
    PriceResult,
    PricingRule,
    QuantityCombo,
    Request,
    UnitRule,
)

__all__ = [
    'PricingEngine', 'compute_best_price', 'AppliedCombo', 'CatalogItem',
    'MixedCombo', 'MixRequirement', 'PriceResult', 'PricingRule',
    'QuantityCombo', 'Request', 'UnitRule',
]
