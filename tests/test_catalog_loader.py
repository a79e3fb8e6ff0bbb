"""
Tests for CSV catalog loading, settings overrides, and the engine facade.
"""
import json
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from combo_pricing.config.settings import Settings
from combo_pricing.data.catalog_loader import load_items_csv, load_rules_csv
from combo_pricing.engine import PricingEngine, Request
from combo_pricing.engine.models import MixedCombo

ITEMS_CSV = """id,name,category,description
fit-1,Frango grelhado,FIT,
fit-2,Carne moida,FIT,Com arroz
cd-1,Caldo verde,CALDOS,
"""

RULES_CSV = """id,type,category,price,quantity,mix
unit-fit,UNITARY,FIT,18.00,,
unit-caldos,UNITARY,CALDOS,15.00,,
combo-fit-10,QUANTITY_COMBO,FIT,160.00,10,
combo-mix,MIXED_COMBO,FIT,150.00,,FIT:5;CALDOS:5
"""


@pytest.fixture
def catalog_root(tmp_path):
    catalog = tmp_path / 'catalog'
    catalog.mkdir()
    (catalog / 'items.csv').write_text(ITEMS_CSV, encoding='utf-8')
    (catalog / 'rules.csv').write_text(RULES_CSV, encoding='utf-8')
    return tmp_path


def test_settings_load_defaults(catalog_root):
    settings = Settings.load(catalog_root)

    assert settings.categories == ('FIT', 'LOWCARB', 'CALDOS')
    assert settings.items_csv == catalog_root / 'catalog' / 'items.csv'
    assert settings.config_json is None
    assert settings.default_category == 'FIT'


def test_settings_load_overrides(tmp_path):
    (tmp_path / 'combo_pricing.json').write_text(json.dumps({
        "categories": ["FOOD", "DRINK"],
        "currency_symbol": "$",
        "rules_csv": "data/my_rules.csv",
    }), encoding='utf-8')

    settings = Settings.load(tmp_path)

    assert settings.categories == ('FOOD', 'DRINK')
    assert settings.currency_symbol == '$'
    assert settings.breakdown_header == 'Combos aplicados:'
    assert settings.rules_csv == tmp_path / 'data' / 'my_rules.csv'
    assert settings.config_json == tmp_path / 'combo_pricing.json'
    assert settings.with_categories(['X']).categories == ('X',)


def test_load_items_and_rules(catalog_root):
    settings = Settings.load(catalog_root)

    items = load_items_csv(settings.items_csv, settings)
    rules, errors = load_rules_csv(settings.rules_csv, settings)

    assert [i.item_id for i in items] == ['fit-1', 'fit-2', 'cd-1']
    assert items[1].description == 'Com arroz'
    assert errors == []
    assert [r.rule_id for r in rules] == ['unit-fit', 'unit-caldos', 'combo-fit-10', 'combo-mix']
    assert isinstance(rules[3], MixedCombo)
    assert rules[3].describe() == '5x FIT + 5x CALDOS'


def test_invalid_rule_rows_reported_with_line_numbers(catalog_root):
    settings = Settings.load(catalog_root)
    settings.rules_csv.write_text(RULES_CSV + "broken,QUANTITY_COMBO,FIT,10.00,,\n", encoding='utf-8')

    rules, errors = load_rules_csv(settings.rules_csv, settings)

    assert len(rules) == 4
    assert errors == ["Line 6: quantity must be a positive integer for QUANTITY_COMBO"]


def test_invalid_items_raise(catalog_root):
    settings = Settings.load(catalog_root)
    settings.items_csv.write_text(ITEMS_CSV + "x-1,Pao,BAKERY,\n", encoding='utf-8')

    with pytest.raises(ValueError, match="unknown category 'BAKERY'"):
        load_items_csv(settings.items_csv, settings)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_items_csv(tmp_path / 'nope.csv', Settings.load(tmp_path))


def test_engine_loads_catalog_from_files(catalog_root):
    engine = PricingEngine(Settings.load(catalog_root))

    result = engine.calculate(Request(selections={'fit-1': 8, 'fit-2': 4, 'cd-1': 5}))

    # mix saves 15 (90 + 75 - 150), fit-10 saves 20 (180 - 160)
    assert [c.rule.rule_id for c in result.applied_combos] == ['combo-fit-10']
    assert result.remaining_counts == {'FIT': 2, 'LOWCARB': 0, 'CALDOS': 5}
    assert result.total == pytest.approx(160 + 36 + 75)
    assert engine.load_warnings == []


def test_engine_without_catalog_files(tmp_path):
    engine = PricingEngine(Settings.load(tmp_path))

    assert engine.items == []
    assert engine.rules == []
    assert len(engine.load_warnings) == 2

    result = engine.calculate(Request(selections={'a': 1}))
    assert result.total == 0
    assert any("Catalog items not found" in w for w in result.warnings)


def test_engine_reload_picks_up_changes(catalog_root):
    settings = Settings.load(catalog_root)
    engine = PricingEngine(settings)
    settings.rules_csv.write_text("id,type,category,price,quantity,mix\nunit-fit,UNITARY,FIT,20.00,,\n", encoding='utf-8')

    engine.reload_data()

    assert engine.unit_prices['FIT'] == 20.0
    assert len(engine.rules) == 1
