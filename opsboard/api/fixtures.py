"""
Opsboard: Sample data for the mock data source
"""
import random
from datetime import datetime, timedelta, timezone

from opsboard.models.item import CatalogItem
from opsboard.models.ticket import Ticket
from opsboard.models.user import UserAccount
from opsboard.schemas.overview import OverviewRange, OverviewResponse

_SHIFT_START = datetime(2025, 1, 6, 10, 30, tzinfo=timezone.utc)

# (id, customer, promised, actual, status, items, revenue)
_TICKETS = [
    ("T-1001", "Avery Catering",   15, 12,   "COMPLETED",   3,  48.50),
    ("T-1002", "Brookside Office", 20, 24,   "COMPLETED",   8,  186.00),
    ("T-1003", "Carter Family",    15, 15,   "COMPLETED",   2,  22.75),
    ("T-1004", "Delta Dental",     25, 31,   "COMPLETED",   12, 264.00),
    ("T-1005", "Eastgate Church",  20, 18,   "COMPLETED",   6,  129.40),
    ("T-1006", "Foster",           10, 9,    "COMPLETED",   1,  11.29),
    ("T-1007", "Greenway HOA",     30, None, "IN_PROGRESS", 14, 310.00),
    ("T-1008", "Harper",           15, None, "PENDING",     2,  19.98),
    ("T-1009", "Ivy Lane School",  25, None, "READY",       10, 215.50),
    ("T-1010", "Jensen",           15, None, "CANCELLED",   3,  0.00),
    ("T-1011", "Kline Realty",     20, 17,   "COMPLETED",   5,  98.25),
    ("T-1012", "Lowe",             15, 21,   "COMPLETED",   2,  26.10),
]

# (id, name, category, price, cost, qty, active)
_ITEMS = [
    ("itm_001", "Chicken Sandwich",      "Entree",  5.29,   2.05,  85,  True),
    ("itm_002", "Nugget Tray (Large)",   "Entree",  140.00, 68.50, 52,  True),
    ("itm_003", "Grilled Cool Wrap",     "Entree",  8.50,   3.95,  34,  True),
    ("itm_004", "Gallon Sweet Tea",      "Drink",   35.00,  6.80,  28,  True),
    ("itm_005", "Waffle Fries (Medium)", "Side",    2.65,   0.62,  120, True),
    ("itm_006", "Mac & Cheese Tray",     "Side",    45.00,  21.40, 9,   True),
    ("itm_007", "Cookie",                "Dessert", 1.89,   0.44,  85,  False),
    ("itm_008", "Frosted Lemonade",      "Dessert", 4.85,   1.95,  40,  True),
    ("itm_009", "Polynesian Sauce",      "Sauce",   0.25,   0.04,  300, True),
    ("itm_010", "Catering Setup Fee",    "Other",   25.00,  18.00, 6,   True),
]

# (id, name, email, role, active, created)
_USERS = [
    ("u_1", "Admin User",  "admin@catering.local", "ADMIN",   True,  datetime(2024, 1, 2, tzinfo=timezone.utc)),
    ("u_2", "Maria Lopez", "maria@catering.local", "MANAGER", True,  datetime(2024, 3, 10, tzinfo=timezone.utc)),
    ("u_3", "Devon Price", "devon@catering.local", "STAFF",   True,  datetime(2024, 5, 21, tzinfo=timezone.utc)),
    ("u_4", None,          "sam@catering.local",   "STAFF",   False, datetime(2024, 6, 1, tzinfo=timezone.utc)),
    ("u_5", "Priya Shah",  "priya@catering.local", "MANAGER", True,  datetime(2024, 7, 15, tzinfo=timezone.utc)),
]


def sample_tickets() -> list[Ticket]:
    return [
        Ticket(
            id=tid,
            customer=customer,
            created_at=_SHIFT_START + timedelta(minutes=7 * n),
            promised_mins=promised,
            duration_mins=actual,
            status=status,
            items=items,
            revenue=revenue,
        )
        for n, (tid, customer, promised, actual, status, items, revenue) in enumerate(_TICKETS)
    ]


def sample_items() -> list[CatalogItem]:
    return [
        CatalogItem(
            id=iid, name=name, category=category, price=price, cost=cost, qty=qty,
            active=active, updated_at=_SHIFT_START,
        )
        for iid, name, category, price, cost, qty, active in _ITEMS
    ]


def sample_users() -> list[UserAccount]:
    return [
        UserAccount(id=uid, name=name, email=email, role=role, active=active, created_at=created)
        for uid, name, email, role, active, created in _USERS
    ]


def sample_overview(range_: OverviewRange) -> OverviewResponse:
    series7 = [
        {"label": "Mon", "value": 1500},
        {"label": "Tue", "value": 3100},
        {"label": "Wed", "value": 2200},
        {"label": "Thu", "value": 2800},
        {"label": "Fri", "value": 1600},
        {"label": "Sat", "value": 1400},
        {"label": "Sun", "value": 4300},
    ]
    series30 = [
        {"label": str(day + 1), "value": round(1200 + random.random() * 3200)}
        for day in range(30)
    ]
    period = {"30d": (58340, 892), "1d": (2450, 38)}.get(range_, (15320, 210))

    return OverviewResponse.model_validate({
        "range": range_,
        "kpis": {
            "revenueToday": 2450,
            "ordersToday": 38,
            "avgTicketMins": 12,
            "marginPct": 31.4,
            "revenuePeriod": period[0],
            "ordersPeriod": period[1],
        },
        "revenueSeries": series30 if range_ == "30d" else series7,
        "topItems": [
            {"name": "Chicken Sandwich", "qty": 85, "revenue": 5525},
            {"name": "Nugget Tray (Large)", "qty": 52, "revenue": 7280},
            {"name": "Grilled Cool Wrap", "qty": 34, "revenue": 2890},
            {"name": "Gallon Sweet Tea", "qty": 28, "revenue": 980},
        ],
        "alerts": [
            {"level": "danger", "text": "5 late orders today"},
            {"level": "warn", "text": "15 unpaid orders (manual tracking)"},
            {"level": "success", "text": "Top item margin holding steady"},
        ],
    })
