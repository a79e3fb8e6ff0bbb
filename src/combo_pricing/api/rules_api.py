"""
Rules API - FastAPI router for rule inspection and validation.
"""
from fastapi import APIRouter

from ..engine.combo_ranker import ComboRanker, build_unit_prices
from ..engine.models import UnitRule, rule_to_dict
from ..rules.compile_rules import compile_rules
from .schemas import RuleIn, ValidationResponse
from .state import engine

router = APIRouter(prefix="/api/rules", tags=["rules"])


@router.get("")
async def list_rules():
    """List the loaded pricing rules in evaluation order."""
    return [rule_to_dict(rule) for rule in engine.rules]


@router.get("/ranking")
async def get_ranking():
    """Combos ranked by per-application savings against current unit prices."""
    ranker = ComboRanker(build_unit_prices(engine.rules, engine.settings.categories))
    ranked, skipped = ranker.rank(engine.rules)
    return {
        "ranked": [
            {
                "rule_id": c.rule.rule_id,
                "savings": c.savings,
                "would_pay": c.would_pay,
                "price": c.rule.price,
            }
            for c in ranked
        ],
        "skipped": skipped,
    }


@router.post("/validate", response_model=ValidationResponse)
async def validate_rules(rules: list[RuleIn]):
    """Validate rules without loading them."""
    success, compiled, errors = compile_rules(
        [r.to_row() for r in rules],
        engine.settings.categories,
    )
    return ValidationResponse(valid=success, errors=errors, rule_count=len(compiled))


@router.post("/reload")
async def reload_rules():
    """Reload catalog and rules from disk."""
    engine.reload_data()
    return {
        "success": True,
        "rules_count": len(engine.rules),
        "unit_rules": sum(1 for r in engine.rules if isinstance(r, UnitRule)),
        "warnings": engine.load_warnings,
    }
