import pytest

from opsboard.core.exceptions import ApiError, DomainValidationError, PermissionDenied
from opsboard.models.item import CatalogItem
from opsboard.schemas.filters import ItemFilter
from opsboard.schemas.metrics import MarginBand
from opsboard.services.items import (
    ItemCatalog,
    ItemForm,
    filter_items,
    item_rows,
    parse_amount,
    parse_quantity,
    sort_items,
    summarize_items,
    validate_item_form,
)


# ─── Filtering and ordering ────────────────────────────────────────────────────
def test_inactive_cookie_excluded_from_list_and_summary(item_factory):
    cookie = item_factory(name="Cookie", category="Dessert", price=1.89, cost=0.44, qty=85, active=False)
    sandwich = item_factory(name="Chicken Sandwich", price=5.29, cost=2.05, qty=85)

    visible = filter_items([cookie, sandwich], ItemFilter(only_active=True))
    assert visible == [sandwich]
    assert summarize_items(visible).revenue == pytest.approx(5.29 * 85)


def test_filters_are_a_conjunction(item_factory):
    a = item_factory(name="Sweet Tea", category="Drink")
    b = item_factory(name="Sweet Potato Fries", category="Side")
    c = item_factory(name="Sweet Tea (Gallon)", category="Drink", active=False)

    flt = ItemFilter(search="  SWEET ", category="Drink", only_active=True)
    assert filter_items([a, b, c], flt) == [a]
    assert filter_items([a, b, c], ItemFilter(search="")) == [a, b, c]


def test_sort_by_period_revenue_is_stable(item_factory):
    low = item_factory(price=1, qty=1)
    tie_first = item_factory(price=5, qty=2)
    tie_second = item_factory(price=2, qty=5)
    high = item_factory(price=100, qty=1)

    assert sort_items([low, tie_first, tie_second, high]) == [high, tie_first, tie_second, low]
    assert sort_items([low, tie_second, tie_first, high]) == [high, tie_second, tie_first, low]


def test_filter_and_sort_are_deterministic(item_factory):
    items = [item_factory(price=p, qty=q) for p, q in [(3, 3), (9, 1), (1, 9), (4, 4)]]
    flt = ItemFilter(search="item")
    once = sort_items(filter_items(items, flt))
    assert sort_items(filter_items(items, flt)) == once
    assert sort_items(filter_items(once, flt)) == once


# ─── Summary and rows ──────────────────────────────────────────────────────────
def test_summary_profit_is_revenue_minus_cost(item_factory):
    items = [item_factory(price=5.29, cost=2.05, qty=85), item_factory(price=0.25, cost=0.04, qty=300)]
    summary = summarize_items(items)
    assert summary.profit == summary.revenue - summary.cost
    assert summary.avg_margin_percent == pytest.approx(summary.profit / summary.revenue * 100)


def test_summary_of_unsold_items_has_zero_margin(item_factory):
    summary = summarize_items([item_factory(qty=0), item_factory(qty=0)])
    assert summary.revenue == 0
    assert summary.avg_margin_percent == 0
    assert summarize_items([]).avg_margin_percent == 0


def test_rows_carry_margin_band_and_cent_labels(item_factory):
    rows = item_rows([
        item_factory(price=10, cost=5, qty=3),
        item_factory(price=10, cost=7, qty=1),
        item_factory(price=10, cost=8, qty=1),
    ])
    assert [r.band for r in rows] == [MarginBand.GOOD, MarginBand.CAUTION, MarginBand.POOR]
    assert rows[0].price_label == "$10.00"
    assert rows[0].revenue_label == "$30.00"


def test_summary_labels_use_whole_dollars_while_rows_keep_cents(item_factory):
    items = [item_factory(price=5.29, cost=2.05, qty=85), item_factory(price=1.89, cost=0.44, qty=1)]
    summary = summarize_items(items)
    rows = item_rows(items)

    assert summary.revenue_label == "$452"
    assert summary.cost_label == "$175"
    assert summary.profit_label == "$277"
    assert summary.margin_label == "61.3%"
    assert rows[0].revenue_label == "$449.65"
    assert summary.revenue_label not in {row.revenue_label for row in rows}


# ─── Form parsing and validation ───────────────────────────────────────────────
@pytest.mark.parametrize("raw,expected", [
    ("$4.50", 4.5),
    ("1,299.99", 1299.99),
    ("abc", 0.0),
    ("", 0.0),
    ("1.2.3", 0.0),
    (7, 7.0),
])
def test_parse_amount_is_permissive(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


def test_parse_quantity_floors_to_non_negative():
    assert parse_quantity("12.9") == 12
    assert parse_quantity(-4) == 0
    assert parse_quantity("n/a") == 0


@pytest.mark.parametrize("form,message", [
    (ItemForm(name="   ", price="5"), "Name is required."),
    (ItemForm(name="Wrap", price="0"), "Price must be greater than $0.00"),
    (ItemForm(name="Wrap", price="free"), "Price must be greater than $0.00"),
    (ItemForm(name="Wrap", price="5", cost=-1.0), "Cost cannot be negative."),
    (ItemForm(name="wrap", price="5"), 'An item named "wrap" already exists.'),
    (ItemForm(name="Shake", price="5", category="Beverage"), "Choose a valid category."),
])
def test_validation_errors(item_factory, form, message):
    existing = [item_factory(name="Wrap")]
    with pytest.raises(DomainValidationError) as exc:
        validate_item_form(form, existing)
    assert exc.value.message == message


def test_editing_may_keep_own_name(item_factory):
    wrap = item_factory(name="Wrap")
    draft = validate_item_form(ItemForm(name="WRAP ", price="6.5", cost="2"), [wrap], editing_id=wrap.id)
    assert draft.name == "WRAP"
    assert draft.price == 6.5


# ─── Catalog controller ────────────────────────────────────────────────────────
@pytest.fixture
def catalog_factory(item_factory, recording_source):
    def _make(session, items=None):
        items = items if items is not None else [
            item_factory(name="Chicken Sandwich", price=5.29, cost=2.05, qty=85),
            item_factory(name="Cookie", category="Dessert", price=1.89, cost=0.44, qty=85, active=False),
        ]
        source = recording_source(CatalogItem, items)
        return ItemCatalog(source, session), source

    return _make


@pytest.mark.asyncio
async def test_created_item_reads_back_with_validated_values(catalog_factory, manager_session):
    catalog, _ = catalog_factory(manager_session)
    await catalog.load()

    created = await catalog.add(ItemForm(
        name="  Frosted Coffee ", category="Drink", price="$4.59", cost="1.10", qty="12.7",
    ))
    catalog.filter = ItemFilter()
    row = next(i for i in catalog.visible() if i.id == created.id)

    assert row.name == "Frosted Coffee"
    assert row.price == 4.59
    assert row.cost == 1.10
    assert row.qty == 12
    assert row.category.value == "Drink"


@pytest.mark.asyncio
async def test_validation_error_touches_nothing(catalog_factory, admin_session):
    catalog, source = catalog_factory(admin_session)
    await catalog.load()
    before = list(catalog.items)

    with pytest.raises(DomainValidationError):
        await catalog.add(ItemForm(name="cookie", price="2"))
    assert catalog.items == before
    assert source.calls == ["list"]


@pytest.mark.asyncio
async def test_edit_reconciles_in_place(catalog_factory, admin_session):
    catalog, _ = catalog_factory(admin_session)
    await catalog.load()
    target = catalog.items[1]

    updated = await catalog.edit(target.id, ItemForm(
        name="Cookie", category="Dessert", price="2.09", cost="0.44", qty="85", active=True,
    ))
    assert catalog.items[1].id == target.id
    assert catalog.items[1].price == 2.09
    assert updated.active is True


@pytest.mark.asyncio
async def test_failed_edit_rolls_back_by_refetch(catalog_factory, admin_session):
    catalog, source = catalog_factory(admin_session)
    await catalog.load()
    original = catalog.items[0]
    source.fail_writes = ApiError("Request failed (500)", status_code=500)

    with pytest.raises(ApiError):
        await catalog.edit(original.id, ItemForm(name="Renamed", category="Entree", price="9"))

    assert source.calls == ["list", "update", "list"]
    assert catalog.items[0].name == original.name
    assert not catalog.collection.is_busy(original.id)


@pytest.mark.asyncio
async def test_remove_item(catalog_factory, admin_session):
    catalog, source = catalog_factory(admin_session)
    await catalog.load()
    target = catalog.items[0].id

    await catalog.remove(target)
    assert all(i.id != target for i in catalog.items)
    assert target not in {i.id for i in await source.list()}


@pytest.mark.asyncio
async def test_staff_cannot_edit_items(catalog_factory, session_factory):
    catalog, source = catalog_factory(await session_factory("STAFF"))
    await catalog.load()

    with pytest.raises(PermissionDenied):
        await catalog.add(ItemForm(name="Shake", category="Drink", price="3"))
    assert source.calls == ["list"]
