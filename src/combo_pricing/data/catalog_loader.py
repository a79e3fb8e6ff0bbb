"""
Catalog Loader - Reads catalog items and pricing rules from CSV.

items.csv columns: id, name, category[, description]
rules.csv columns: id, type, category, price, quantity, mix
    mix holds mixed combo requirements as "FIT:5;CALDOS:5"
"""
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..engine.models import CatalogItem, PricingRule
from ..rules.compile_rules import compile_items, compile_rules


def read_rows(path: Path) -> list[dict]:
    """Read a CSV into a list of stripped string dicts."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found at {path}.")

    df = pd.read_csv(path, dtype=str).fillna('')
    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient='records')


def load_items_csv(path: Path, settings: Optional[Settings] = None) -> list[CatalogItem]:
    """Load catalog items, raising ValueError if any row is invalid."""
    settings = settings or get_settings()
    # +2 for 1-indexed header row
    items, errors = compile_items(read_rows(path), settings.categories, start_line=2)
    if errors:
        raise ValueError(f"Invalid catalog items in {path}: " + "; ".join(errors))
    return items


def load_rules_csv(path: Path, settings: Optional[Settings] = None) -> tuple[list[PricingRule], list[str]]:
    """Load pricing rules in file order. Returns (rules, errors); invalid rows are skipped."""
    settings = settings or get_settings()
    _, rules, errors = compile_rules(read_rows(path), settings.categories, start_line=2)
    return rules, errors
