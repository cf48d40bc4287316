"""
Opsboard: Item catalog aggregation, filtering and editing
"""
import math
import re
import uuid

from pydantic import BaseModel

from opsboard.api.sources import DataSource
from opsboard.core.exceptions import DomainValidationError
from opsboard.core.permissions import Action, require
from opsboard.core.session import Session
from opsboard.models.item import CatalogItem, ItemCategory
from opsboard.schemas.filters import ALL, ItemFilter
from opsboard.schemas.metrics import ItemRow, ItemSummary
from opsboard.services.metrics import (
    finite,
    format_money,
    format_money_precise,
    format_percent,
    margin_band,
    margin_percent,
)
from opsboard.services.optimistic import OptimisticCollection

_NON_NUMERIC = re.compile(r"[^0-9.]")


# ─── Pure derivations ─────────────────────────────────────────────────────────

def filter_items(items: list[CatalogItem], flt: ItemFilter | None = None) -> list[CatalogItem]:
    flt = flt or ItemFilter()
    needle = flt.search.strip().lower()
    out = items
    if flt.only_active:
        out = [i for i in out if i.active]
    if flt.category != ALL:
        out = [i for i in out if i.category == flt.category]
    if needle:
        out = [i for i in out if needle in i.name.lower()]
    return list(out)


def sort_items(items: list[CatalogItem]) -> list[CatalogItem]:
    """Period revenue, highest first. sorted() is stable, ties keep their order."""
    return sorted(items, key=lambda i: i.period_revenue, reverse=True)


def summarize_items(items: list[CatalogItem]) -> ItemSummary:
    revenue = sum(i.period_revenue for i in items)
    cost = sum(i.period_cost for i in items)
    profit = revenue - cost
    margin = profit / revenue * 100 if revenue else 0.0
    return ItemSummary(
        count=len(items),
        revenue=revenue,
        cost=cost,
        profit=profit,
        avg_margin_percent=margin,
        revenue_label=format_money(revenue),
        cost_label=format_money(cost),
        profit_label=format_money(profit),
        margin_label=format_percent(margin),
    )


def item_rows(items: list[CatalogItem]) -> list[ItemRow]:
    rows = []
    for item in items:
        margin = margin_percent(item.price, item.cost)
        rows.append(ItemRow(
            item=item,
            revenue=item.period_revenue,
            margin_percent=margin,
            band=margin_band(margin),
            price_label=format_money_precise(item.price),
            cost_label=format_money_precise(item.cost),
            revenue_label=format_money_precise(item.period_revenue),
        ))
    return rows


# ─── Form validation ──────────────────────────────────────────────────────────

def parse_amount(raw) -> float:
    """Strip everything but digits and dots; unparseable input is 0."""
    if isinstance(raw, (int, float)):
        return finite(raw)
    cleaned = _NON_NUMERIC.sub("", str(raw or ""))
    try:
        return finite(float(cleaned))
    except ValueError:
        return 0.0


def parse_quantity(raw) -> int:
    return max(0, math.floor(parse_amount(raw)))


class ItemForm(BaseModel):
    """Raw editor input, as typed."""

    name: str = ""
    category: str = ItemCategory.OTHER.value
    price: str | float = ""
    cost: str | float = ""
    qty: str | float = "0"
    active: bool = True


class ItemDraft(BaseModel):
    name: str
    category: ItemCategory
    price: float
    cost: float
    qty: int
    active: bool


def validate_item_form(
    form: ItemForm,
    existing: list[CatalogItem],
    editing_id: str | None = None,
) -> ItemDraft:
    name = form.name.strip()
    if not name:
        raise DomainValidationError("Name is required.", field="name")

    price = parse_amount(form.price)
    if price <= 0:
        raise DomainValidationError("Price must be greater than $0.00", field="price")

    cost = parse_amount(form.cost)
    if cost < 0:
        raise DomainValidationError("Cost cannot be negative.", field="cost")

    lowered = name.lower()
    if any(i.name.strip().lower() == lowered and i.id != editing_id for i in existing):
        raise DomainValidationError(f'An item named "{name}" already exists.', field="name")

    try:
        category = ItemCategory(form.category)
    except ValueError:
        raise DomainValidationError("Choose a valid category.", field="category")

    return ItemDraft(
        name=name,
        category=category,
        price=price,
        cost=cost,
        qty=parse_quantity(form.qty),
        active=form.active,
    )


# ─── Screen controller ────────────────────────────────────────────────────────

class ItemCatalog:
    def __init__(self, source: DataSource[CatalogItem], session: Session):
        self.session = session
        self.collection: OptimisticCollection[CatalogItem] = OptimisticCollection(source)
        self.filter = ItemFilter()

    @property
    def items(self) -> list[CatalogItem]:
        return self.collection.items

    async def load(self) -> list[CatalogItem]:
        return await self.collection.load()

    def visible(self) -> list[CatalogItem]:
        return sort_items(filter_items(self.items, self.filter))

    def view(self) -> list[ItemRow]:
        return item_rows(self.visible())

    def summary(self) -> ItemSummary:
        return summarize_items(filter_items(self.items, self.filter))

    async def add(self, form: ItemForm) -> CatalogItem:
        require(self.session.role, Action.EDIT_ITEMS)
        draft = validate_item_form(form, self.items)
        optimistic = CatalogItem(id=f"itm_{uuid.uuid4().hex[:8]}", **draft.model_dump())
        source = self.collection.source

        async def remote():
            return (await source.create(optimistic.to_wire())).data

        return await self.collection.insert(optimistic, remote, at_start=True)

    async def edit(self, item_id: str, form: ItemForm) -> CatalogItem:
        require(self.session.role, Action.EDIT_ITEMS)
        current = self._get(item_id)
        draft = validate_item_form(form, self.items, editing_id=item_id)
        optimistic = current.model_copy(update=draft.model_dump())
        payload = draft.model_dump(mode="json")

        async def remote():
            return await self.collection.source.update(item_id, payload)

        return await self.collection.replace(item_id, optimistic, remote)

    async def remove(self, item_id: str) -> None:
        require(self.session.role, Action.EDIT_ITEMS)
        self._get(item_id)

        async def remote():
            await self.collection.source.delete(item_id)

        await self.collection.remove(item_id, remote)

    def _get(self, item_id: str) -> CatalogItem:
        item = self.collection.get(item_id)
        if item is None:
            raise DomainValidationError("Item no longer exists.")
        return item
