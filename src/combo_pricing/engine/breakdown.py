"""
Breakdown formatting for applied combos.

Downstream consumers parse these lines verbatim, so the shape is fixed:

    Combos aplicados:
    - 10x FIT: R$ 90.00 (economia: R$ 10.00)
    - Combo 5x FIT + 5x CALDOS: R$ 150.00 (economia: R$ 25.00)
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..config.settings import Settings
from .models import AppliedCombo, QuantityCombo


def format_money(amount: float, settings: Settings) -> str:
    # Exact ties round up (10.125 -> 10.13)
    cents = Decimal(amount)
    if cents.is_finite():
        cents = cents.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return f"{settings.currency_symbol} {cents}"


def format_combo_line(applied: AppliedCombo, settings: Settings) -> str:
    """Format a single applied combo as a breakdown line."""
    rule = applied.rule
    price = format_money(rule.price, settings)
    savings = format_money(applied.savings, settings)

    if isinstance(rule, QuantityCombo):
        label = rule.describe()
    else:
        label = f"{settings.combo_label} {rule.describe()}"

    return f"- {label}: {price} ({settings.savings_label}: {savings})"


def build_breakdown(applied_combos: list[AppliedCombo], settings: Optional[Settings] = None) -> list[str]:
    """Header plus one line per applied combo, or nothing if none applied."""
    if not applied_combos:
        return []

    settings = settings or Settings.defaults()
    lines = [settings.breakdown_header]
    lines.extend(format_combo_line(applied, settings) for applied in applied_combos)
    return lines
