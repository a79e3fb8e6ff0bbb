"""Rules subpackage - parsing and validation of catalog and rule rows."""
from .compile_rules import (
    RuleValidationError,
    compile_items,
    compile_rules,
    parse_rule,
    parse_structured_menu,
    validate_rule,
)

__all__ = [
    'RuleValidationError', 'compile_items', 'compile_rules', 'parse_rule',
    'parse_structured_menu', 'validate_rule',
]
