"""
Centralized settings and path configuration for the combo pricing tool.
"""
import json
from pathlib import Path
from dataclasses import dataclass, replace
from typing import Optional


DEFAULT_CATEGORIES = ('FIT', 'LOWCARB', 'CALDOS')

CONFIG_FILENAME = 'combo_pricing.json'


def get_project_root() -> Path:
    """Get the project root directory (where the catalog folder or config lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / CONFIG_FILENAME).exists() or (parent / 'catalog').is_dir():
            return parent
    # Fallback to 4 levels up from this file (src/combo_pricing/config/settings.py)
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog input files
    items_csv: Path
    rules_csv: Path

    # Closed set of categories known to this catalog
    categories: tuple = DEFAULT_CATEGORIES

    # Breakdown presentation
    currency_symbol: str = 'R$'
    breakdown_header: str = 'Combos aplicados:'
    savings_label: str = 'economia'
    combo_label: str = 'Combo'

    config_json: Optional[Path] = None

    @property
    def default_category(self) -> str:
        return self.categories[0]

    def with_categories(self, categories) -> 'Settings':
        """Copy of these settings bound to another category set."""
        return replace(self, categories=tuple(categories))

    @classmethod
    def defaults(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Built-in settings, without reading anything from disk."""
        root = project_root or Path('.')
        return cls(
            project_root=root,
            items_csv=root / 'catalog' / 'items.csv',
            rules_csv=root / 'catalog' / 'rules.csv',
        )

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()

        settings = cls.defaults(root)

        config_path = root / CONFIG_FILENAME
        if config_path.exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                overrides = json.load(f)

            settings.config_json = config_path
            if overrides.get('categories'):
                settings.categories = tuple(str(c).strip() for c in overrides['categories'])
            for key in ('currency_symbol', 'breakdown_header', 'savings_label', 'combo_label'):
                if key in overrides:
                    setattr(settings, key, str(overrides[key]))
            for key in ('items_csv', 'rules_csv'):
                if overrides.get(key):
                    setattr(settings, key, root / overrides[key])

        return settings


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
