"""
Opsboard: Derived view models (KPIs, histogram buckets, alerts, item rows)
"""
from enum import Enum as PyEnum

from pydantic import BaseModel, Field

from opsboard.models.item import CatalogItem


class AlertLevel(str, PyEnum):
    DANGER = "danger"
    WARN = "warn"
    SUCCESS = "success"


class Alert(BaseModel):
    level: AlertLevel
    text: str
    rule: str | None = None


class HistogramBucket(BaseModel):
    label: str
    lower: float            # exclusive, except the first bucket which includes 0
    upper: float | None     # inclusive; None means unbounded
    count: int = 0


class TicketAggregate(BaseModel):
    total: int = 0
    completed: int = 0
    cancelled: int = 0
    active: int = 0
    late: int = 0
    avg_duration_mins: float = 0.0
    p90_duration_mins: float = 0.0
    on_time_rate: float = 0.0
    late_rate: float = 0.0
    cancelled_rate: float = 0.0
    revenue_total: float = 0.0
    status_counts: dict[str, int] = Field(default_factory=dict)
    histogram: list[HistogramBucket] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)


class MarginBand(str, PyEnum):
    GOOD = "good"
    CAUTION = "caution"
    POOR = "poor"


class ItemSummary(BaseModel):
    count: int = 0
    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    avg_margin_percent: float = 0.0
    # Whole dollars; ItemRow labels carry cents
    revenue_label: str = "$0"
    cost_label: str = "$0"
    profit_label: str = "$0"
    margin_label: str = "0.0%"


class ItemRow(BaseModel):
    item: CatalogItem
    revenue: float
    margin_percent: float
    band: MarginBand
    price_label: str
    cost_label: str
    revenue_label: str
