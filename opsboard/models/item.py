"""
Opsboard: Catalog (menu) items

Margin is always derived from price and cost; it is never stored.
"""
from datetime import datetime, timezone
from enum import Enum as PyEnum

from pydantic import Field

from opsboard.models.base import WireModel


class ItemCategory(str, PyEnum):
    ENTREE = "Entree"
    SIDE = "Side"
    DRINK = "Drink"
    DESSERT = "Dessert"
    SAUCE = "Sauce"
    OTHER = "Other"


class CatalogItem(WireModel):
    id: str
    name: str = Field(..., min_length=1)
    category: ItemCategory = ItemCategory.OTHER
    active: bool = True
    price: float = Field(..., gt=0)
    cost: float = Field(0.0, ge=0)
    qty: int = Field(0, ge=0)   # sold in the current reporting period
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def period_revenue(self) -> float:
        return self.price * self.qty

    @property
    def period_cost(self) -> float:
        return self.cost * self.qty
