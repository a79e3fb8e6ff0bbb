"""
Combo Pricing Package

Prices a selection of catalog items against unit prices and promotional
combos, applying the best-saving combos first and pricing the rest per unit.
"""

__version__ = "1.0.0"
