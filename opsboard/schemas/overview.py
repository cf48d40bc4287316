"""
Opsboard: Dashboard overview payload
"""
from typing import Literal

from pydantic import Field

from opsboard.models.base import WireModel
from opsboard.schemas.metrics import Alert

OverviewRange = Literal["1d", "7d", "30d", "ytd"]


class OverviewKpis(WireModel):
    revenue_today: float
    orders_today: int
    avg_ticket_mins: float
    margin_pct: float
    revenue_period: float
    orders_period: int


class SeriesPoint(WireModel):
    label: str
    value: float


class TopItem(WireModel):
    name: str
    qty: int
    revenue: float


class OverviewResponse(WireModel):
    range: OverviewRange
    kpis: OverviewKpis
    revenue_series: list[SeriesPoint] = Field(default_factory=list)
    top_items: list[TopItem] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
