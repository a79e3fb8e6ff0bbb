from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder

from ..engine import Request, compute_best_price
from ..engine.models import rule_to_dict
from ..rules.compile_rules import compile_items, compile_rules
from .rules_api import router as rules_router
from .schemas import CalcRequest, QuoteRequest
from .state import engine

app = FastAPI(
    title="Combo Pricing API",
    description="Prices catalog selections with unit prices and combo discounts",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rules_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Combo Pricing API Active"}


@app.post("/calculate")
async def calculate(req: CalcRequest):
    """Price selections against the catalog sent in the request body."""
    categories = tuple(req.categories) if req.categories else engine.settings.categories

    items, item_errors = compile_items([i.model_dump() for i in req.items], categories)
    _, rules, rule_errors = compile_rules([r.to_row() for r in req.pricingRules], categories)
    if item_errors or rule_errors:
        raise HTTPException(status_code=400, detail={"errors": item_errors + rule_errors})

    try:
        result = compute_best_price(
            req.selections,
            items,
            rules,
            categories=categories,
            settings=engine.settings,
        )
        return jsonable_encoder(result.to_dict())
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/quote")
async def quote(req: QuoteRequest):
    """Price selections against the server's loaded catalog."""
    try:
        result = engine.calculate(Request(selections=req.selections))
        payload = result.to_dict()
        payload["trace"] = result.get_trace_text()
        return jsonable_encoder(payload)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/catalog")
async def get_catalog(search: str = None):
    items = engine.items
    if search:
        needle = search.lower()
        items = [i for i in items if needle in i.name.lower() or needle in i.item_id.lower()]
    return {
        "categories": list(engine.settings.categories),
        "items": [
            {"id": i.item_id, "name": i.name, "category": i.category, "description": i.description}
            for i in items
        ],
        "pricingRules": [rule_to_dict(r) for r in engine.rules],
        "unitPrices": engine.unit_prices,
    }


@app.get("/system/status")
async def get_status():
    settings = engine.settings
    return {
        "engine_active": True,
        "items_count": len(engine.items),
        "rules_count": len(engine.rules),
        "categories": list(settings.categories),
        "load_warnings": engine.load_warnings,
        "config_file": str(settings.config_json) if settings.config_json else None,
    }
