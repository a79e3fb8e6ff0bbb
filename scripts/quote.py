#!/usr/bin/env python
"""
Price a selection against the catalog from the command line.

Usage:
    python scripts/quote.py fit-frango=6 fit-carne=4 cd-verde=5
    python scripts/quote.py --menu menu.json fit-frango=3
    python scripts/quote.py --trace fit-frango=12
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from combo_pricing.config.settings import get_settings
from combo_pricing.engine import PricingEngine, Request
from combo_pricing.rules.compile_rules import parse_structured_menu


def parse_selection(args: list[str]) -> dict[str, int]:
    selections = {}
    for arg in args:
        item_id, sep, qty = arg.partition('=')
        if not sep:
            raise SystemExit(f"ERROR: expected ITEM=QTY, got '{arg}'")
        try:
            selections[item_id] = selections.get(item_id, 0) + int(qty)
        except ValueError:
            raise SystemExit(f"ERROR: quantity for '{item_id}' must be an integer")
    return selections


def main():
    parser = argparse.ArgumentParser(description="Price a catalog selection")
    parser.add_argument('selection', nargs='+', help="ITEM=QTY pairs")
    parser.add_argument('--menu', type=Path, help="Menu JSON with items and pricingRules")
    parser.add_argument('--trace', action='store_true', help="Print the resolution trace")
    args = parser.parse_args()

    settings = get_settings()
    if args.menu:
        with open(args.menu, 'r', encoding='utf-8') as f:
            items, rules = parse_structured_menu(json.load(f), settings)
        engine = PricingEngine(settings, items=items, rules=rules)
    else:
        engine = PricingEngine(settings)

    result = engine.calculate(Request(selections=parse_selection(args.selection)))

    if result.breakdown:
        print("\n".join(result.breakdown))
        print()
    print(f"Total: {settings.currency_symbol} {result.total:.2f}")

    if args.trace:
        print()
        print(result.get_trace_text())

    for warning in result.warnings:
        print(f"  WARNING: {warning}")


if __name__ == "__main__":
    main()
