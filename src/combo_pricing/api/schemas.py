"""
Pydantic request/response models for the API.

Field names follow the menu JSON shape (camelCase) so exported menus can be
posted as-is.
"""
from typing import Optional, Union

from pydantic import BaseModel, Field


class MixQuantity(BaseModel):
    category: str
    quantity: int


class ItemIn(BaseModel):
    """A catalog item as found in menu data."""
    id: str
    name: str = ""
    category: str
    description: Optional[str] = None


class RuleIn(BaseModel):
    """A pricing rule as found in menu data."""
    id: str
    type: str = "UNITARY"
    category: Optional[str] = None
    price: Union[float, str]
    quantity: Optional[int] = None
    mixQuantities: Optional[list[MixQuantity]] = None

    def to_row(self) -> dict:
        return self.model_dump(exclude_none=True)


class CalcRequest(BaseModel):
    """Selections plus the catalog to price them against."""
    selections: dict[str, int]
    items: list[ItemIn] = Field(default_factory=list)
    pricingRules: list[RuleIn] = Field(default_factory=list)
    categories: Optional[list[str]] = None


class QuoteRequest(BaseModel):
    """Selections priced against the server's loaded catalog."""
    selections: dict[str, int]


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    rule_count: int
