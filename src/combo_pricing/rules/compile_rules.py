"""
Rule Compiler - Validates and converts raw rows into typed catalog entities.

Rows come from CSV files or from menu JSON (`{"items": [...],
"pricingRules": [...]}`). Both snake_case and camelCase keys are accepted.
"""
import uuid
from typing import Any, Optional

from ..config.settings import Settings, get_settings
from ..engine.models import (
    MIXED_COMBO,
    QUANTITY_COMBO,
    RULE_KINDS,
    UNITARY,
    CatalogItem,
    MixedCombo,
    MixRequirement,
    PricingRule,
    QuantityCombo,
    UnitRule,
)


class RuleValidationError(ValueError):
    """Raised when a rule row cannot be turned into a pricing rule."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def parse_optional_int(value: Any) -> Optional[int]:
    """Parse optional integer."""
    if value is None or str(value).strip() == '':
        return None
    return int(float(str(value).strip()))


def parse_optional_float(value: Any) -> Optional[float]:
    """Parse optional float (accepts a decimal comma)."""
    if value is None or str(value).strip() == '':
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return float(str(value).strip().replace(',', '.'))


def parse_optional_str(value: Any) -> Optional[str]:
    """Parse optional string (empty = None)."""
    if value is None or str(value).strip() == '':
        return None
    return str(value).strip()


def generate_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


def _first(row: dict, *keys: str) -> Any:
    for key in keys:
        if key in row and row[key] is not None:
            return row[key]
    return None


def parse_mix_quantities(value: Any) -> list[tuple[Optional[str], Any]]:
    """
    Parse mixed combo requirements.

    Accepts a list of {"category", "quantity"} dicts (menu JSON) or a
    string like "FIT:5;CALDOS:5" (CSV).
    """
    if value is None:
        return []
    if isinstance(value, str):
        pairs = []
        for chunk in value.split(';'):
            chunk = chunk.strip()
            if not chunk:
                continue
            category, _, quantity = chunk.partition(':')
            pairs.append((parse_optional_str(category), quantity))
        return pairs
    return [(parse_optional_str(mix.get('category')), mix.get('quantity')) for mix in value]


def validate_rule(
    row: dict,
    line_num: int,
    categories: Optional[tuple] = None
) -> tuple[Optional[PricingRule], list[str]]:
    """
    Validate and parse a rule from a row.

    Returns (rule, errors) - rule is None if validation failed.
    """
    errors = []
    categories = tuple(categories) if categories else None

    rule_id = parse_optional_str(_first(row, 'rule_id', 'id'))
    if not rule_id:
        errors.append(f"Line {line_num}: rule id is required")
        return None, errors

    kind = (parse_optional_str(_first(row, 'type', 'rule_type')) or '').upper()
    if kind not in RULE_KINDS:
        errors.append(f"Line {line_num}: invalid type '{kind}', must be one of: {', '.join(RULE_KINDS)}")
        return None, errors

    try:
        price = parse_optional_float(row.get('price'))
    except ValueError:
        errors.append(f"Line {line_num}: price must be numeric")
        return None, errors
    if price is None:
        errors.append(f"Line {line_num}: price is required")
        return None, errors
    if price < 0:
        errors.append(f"Line {line_num}: price must not be negative")

    def check_category(category: Optional[str], label: str = 'category'):
        if not category:
            errors.append(f"Line {line_num}: {label} is required for {kind}")
        elif categories and category not in categories:
            errors.append(f"Line {line_num}: unknown {label} '{category}'")

    if kind == MIXED_COMBO:
        requirements = []
        seen = set()
        pairs = parse_mix_quantities(_first(row, 'mixQuantities', 'mix_quantities', 'mix'))
        if not pairs:
            errors.append(f"Line {line_num}: mixQuantities is required for {MIXED_COMBO}")
        for category, raw_qty in pairs:
            check_category(category, 'mix category')
            try:
                quantity = parse_optional_int(raw_qty)
            except (ValueError, OverflowError):
                quantity = None
            if category and category in seen:
                errors.append(f"Line {line_num}: mix category '{category}' listed more than once")
            seen.add(category)
            if quantity is None or quantity <= 0:
                errors.append(f"Line {line_num}: mix quantity for '{category}' must be a positive integer")
                continue
            requirements.append(MixRequirement(category=category, quantity=quantity))
        if errors:
            return None, errors
        return MixedCombo(rule_id=rule_id, requirements=tuple(requirements), price=price), []

    category = parse_optional_str(row.get('category'))
    check_category(category)

    if kind == UNITARY:
        if errors:
            return None, errors
        return UnitRule(rule_id=rule_id, category=category, price=price), []

    try:
        quantity = parse_optional_int(row.get('quantity'))
    except (ValueError, OverflowError):
        quantity = None
    if quantity is None or quantity <= 0:
        errors.append(f"Line {line_num}: quantity must be a positive integer for {QUANTITY_COMBO}")
    if errors:
        return None, errors
    return QuantityCombo(rule_id=rule_id, category=category, quantity=quantity, price=price), []


def parse_rule(row: dict, categories: Optional[tuple] = None) -> PricingRule:
    """Parse a single rule, raising RuleValidationError on bad input."""
    rule, errors = validate_rule(row, 1, categories)
    if errors:
        raise RuleValidationError(errors)
    return rule


def compile_rules(
    rows: list[dict],
    categories: Optional[tuple] = None,
    verbose: bool = False,
    start_line: int = 1
) -> tuple[bool, list[PricingRule], list[str]]:
    """
    Compile rule rows, keeping input order.

    Returns (success, rules, errors). Valid rules are returned even when
    other rows fail.
    """
    all_errors = []
    rules = []

    for line_num, row in enumerate(rows, start=start_line):
        rule, errors = validate_rule(row, line_num, categories)
        if errors:
            all_errors.extend(errors)
        elif rule:
            rules.append(rule)

    if verbose:
        if all_errors:
            print("Validation errors:")
            for err in all_errors:
                print(f"  ❌ {err}")
        print(f"✅ Compiled {len(rules)} rules")

    return not all_errors, rules, all_errors


def compile_items(
    rows: list[dict],
    categories: Optional[tuple] = None,
    start_line: int = 1
) -> tuple[list[CatalogItem], list[str]]:
    """Compile item rows. Returns (items, errors)."""
    items = []
    errors = []
    seen = set()

    for line_num, row in enumerate(rows, start=start_line):
        item_id = parse_optional_str(_first(row, 'item_id', 'id'))
        name = parse_optional_str(row.get('name'))
        category = parse_optional_str(row.get('category'))

        if not item_id:
            errors.append(f"Line {line_num}: item id is required")
            continue
        if item_id in seen:
            errors.append(f"Line {line_num}: duplicate item id '{item_id}'")
            continue
        if not category:
            errors.append(f"Line {line_num}: category is required")
            continue
        if categories and category not in categories:
            errors.append(f"Line {line_num}: unknown category '{category}'")
            continue

        seen.add(item_id)
        items.append(CatalogItem(
            item_id=item_id,
            name=name or '',
            category=category,
            description=parse_optional_str(row.get('description')),
        ))

    return items, errors


def parse_structured_menu(
    data: Optional[dict],
    settings: Optional[Settings] = None
) -> tuple[list[CatalogItem], list[PricingRule]]:
    """
    Leniently convert menu JSON into items and rules.

    Missing ids are generated, missing categories fall back to the first
    configured category, missing types to UNITARY and unparseable prices to
    0. Data missing either list yields nothing; empty lists are kept.
    """
    if not data or data.get('items') is None or data.get('pricingRules') is None:
        return [], []

    settings = settings or get_settings()
    default_category = settings.default_category

    items = [
        CatalogItem(
            item_id=parse_optional_str(raw.get('id')) or generate_id('item'),
            name=parse_optional_str(raw.get('name')) or '',
            category=parse_optional_str(raw.get('category')) or default_category,
            description=parse_optional_str(raw.get('description')),
            images=tuple(raw.get('images') or ()),
        )
        for raw in data['items']
    ]

    rules = []
    for raw in data['pricingRules']:
        rule_id = parse_optional_str(raw.get('id')) or generate_id('rule')
        category = parse_optional_str(raw.get('category')) or default_category
        kind = (parse_optional_str(raw.get('type')) or UNITARY).upper()

        try:
            price = parse_optional_float(raw.get('price')) or 0.0
        except ValueError:
            price = 0.0

        try:
            quantity = parse_optional_int(raw.get('quantity'))
        except (ValueError, OverflowError):
            quantity = None

        if kind == QUANTITY_COMBO and quantity:
            rules.append(QuantityCombo(rule_id=rule_id, category=category, quantity=quantity, price=price))
        elif kind == MIXED_COMBO and raw.get('mixQuantities'):
            requirements = []
            for mix_category, mix_qty in parse_mix_quantities(raw['mixQuantities']):
                try:
                    mix_qty = parse_optional_int(mix_qty) or 0
                except (ValueError, OverflowError):
                    mix_qty = 0
                requirements.append(MixRequirement(category=mix_category or default_category, quantity=mix_qty))
            rules.append(MixedCombo(rule_id=rule_id, requirements=tuple(requirements), price=price))
        elif kind == UNITARY:
            rules.append(UnitRule(rule_id=rule_id, category=category, price=price))
        # Combos missing their quantities are dropped: they could never apply

    return items, rules
