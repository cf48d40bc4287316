"""
Opsboard: Ticket aggregation engine

Pipeline:
  1. Partition tickets into completed / cancelled / active
  2. Duration KPIs over completed tickets only
  3. Rates and revenue over the whole list
  4. Fixed-boundary duration histogram
  5. Threshold alerts, one per rule group, evaluated independently
"""
import logging
import math

from opsboard.api.sources import DataSource
from opsboard.core.exceptions import ApiError
from opsboard.models.ticket import Ticket, TicketStatus
from opsboard.schemas.filters import ALL, TicketFilter
from opsboard.schemas.metrics import Alert, AlertLevel, HistogramBucket, TicketAggregate
from opsboard.services.metrics import percentage

logger = logging.getLogger(__name__)

# (label, exclusive lower, inclusive upper); the first bucket also takes 0
HISTOGRAM_BOUNDS: list[tuple[str, float, float | None]] = [
    ("0–10m", 0, 10),
    ("11–15m", 10, 15),
    ("16–20m", 15, 20),
    ("21–30m", 20, 30),
    ("30m+", 30, None),
]

# ── Alert thresholds ──────────────────────────────────────────
AVG_DURATION_DANGER_MINS = 22
AVG_DURATION_WARN_MINS = 18
ON_TIME_DANGER_PCT = 75
ON_TIME_WARN_PCT = 90
CANCELLED_WARN_PCT = 10


def is_late(ticket: Ticket) -> bool:
    return (
        ticket.status == TicketStatus.COMPLETED
        and ticket.duration_mins is not None
        and ticket.duration_mins > ticket.promised_mins
    )


def duration_histogram(completed: list[Ticket]) -> list[HistogramBucket]:
    buckets = [HistogramBucket(label=label, lower=lower, upper=upper) for label, lower, upper in HISTOGRAM_BOUNDS]
    for ticket in completed:
        minutes = ticket.duration_mins or 0
        for bucket in buckets:
            if bucket.upper is None or minutes <= bucket.upper:
                bucket.count += 1
                break
    return buckets


def p90_duration(durations: list[float]) -> float:
    """Nearest-rank 90th percentile."""
    if not durations:
        return 0.0
    ordered = sorted(durations)
    rank = math.ceil(len(ordered) * 9 / 10)
    return float(ordered[rank - 1])


def ticket_alerts(aggregate: TicketAggregate) -> list[Alert]:
    alerts: list[Alert] = []

    avg = aggregate.avg_duration_mins
    if avg > AVG_DURATION_DANGER_MINS:
        alerts.append(Alert(level=AlertLevel.DANGER, rule="avg_duration",
                            text=f"Average ticket time {avg:.1f}m is over {AVG_DURATION_DANGER_MINS}m"))
    elif avg > AVG_DURATION_WARN_MINS:
        alerts.append(Alert(level=AlertLevel.WARN, rule="avg_duration",
                            text=f"Average ticket time {avg:.1f}m is above {AVG_DURATION_WARN_MINS}m"))
    else:
        alerts.append(Alert(level=AlertLevel.SUCCESS, rule="avg_duration",
                            text=f"Average ticket time {avg:.1f}m is on target"))

    on_time = aggregate.on_time_rate
    if on_time < ON_TIME_DANGER_PCT:
        alerts.append(Alert(level=AlertLevel.DANGER, rule="on_time",
                            text=f"On-time rate {on_time:.0f}% is below {ON_TIME_DANGER_PCT}%"))
    elif on_time < ON_TIME_WARN_PCT:
        alerts.append(Alert(level=AlertLevel.WARN, rule="on_time",
                            text=f"On-time rate {on_time:.0f}% is below {ON_TIME_WARN_PCT}%"))
    else:
        alerts.append(Alert(level=AlertLevel.SUCCESS, rule="on_time",
                            text=f"On-time rate {on_time:.0f}% is healthy"))

    # No danger tier and no all-clear message for cancellations
    if aggregate.cancelled_rate > CANCELLED_WARN_PCT:
        alerts.append(Alert(level=AlertLevel.WARN, rule="cancelled",
                            text=f"Cancellation rate {aggregate.cancelled_rate:.0f}% is above {CANCELLED_WARN_PCT}%"))

    return alerts


def aggregate_tickets(tickets: list[Ticket]) -> TicketAggregate:
    completed = [t for t in tickets if t.status == TicketStatus.COMPLETED]
    cancelled = [t for t in tickets if t.status == TicketStatus.CANCELLED]
    active = [t for t in tickets if t.is_active]

    durations = [t.duration_mins or 0 for t in completed]
    on_time = sum(1 for t in completed if not is_late(t))
    late = len(completed) - on_time

    status_counts = {status.value: 0 for status in TicketStatus}
    for ticket in tickets:
        status_counts[ticket.status.value] += 1

    aggregate = TicketAggregate(
        total=len(tickets),
        completed=len(completed),
        cancelled=len(cancelled),
        active=len(active),
        late=late,
        avg_duration_mins=sum(durations) / len(durations) if durations else 0.0,
        p90_duration_mins=p90_duration(durations),
        on_time_rate=percentage(on_time, len(completed)),
        late_rate=percentage(late, len(completed)),
        cancelled_rate=percentage(len(cancelled), len(tickets)),
        revenue_total=sum(t.revenue for t in tickets),
        status_counts=status_counts,
        histogram=duration_histogram(completed),
    )
    aggregate.alerts = ticket_alerts(aggregate)
    return aggregate


def filter_tickets(tickets: list[Ticket], flt: TicketFilter | None = None) -> list[Ticket]:
    """Status match and customer/id substring, newest first."""
    flt = flt or TicketFilter()
    needle = flt.search.strip().lower()
    out = [
        t for t in tickets
        if (flt.status == ALL or t.status == flt.status)
        and (not needle or needle in t.customer.lower() or needle in t.id.lower())
    ]
    return sorted(out, key=lambda t: t.created_at, reverse=True)


class TicketBoard:
    """Operations screen state: one ticket list, read-only."""

    def __init__(self, source: DataSource[Ticket]):
        self.source = source
        self.tickets: list[Ticket] = []
        self.load_error: str | None = None
        self.filter = TicketFilter()

    async def load(self) -> list[Ticket]:
        try:
            self.tickets = await self.source.list()
        except ApiError as exc:
            self.tickets = []
            self.load_error = exc.message
            logger.warning("Ticket list failed to load: %s", exc.message)
            raise
        self.load_error = None
        return self.tickets

    def view(self) -> list[Ticket]:
        return filter_tickets(self.tickets, self.filter)

    def aggregate(self) -> TicketAggregate:
        return aggregate_tickets(self.tickets)

    def late_tickets(self) -> list[Ticket]:
        return [t for t in self.view() if is_late(t)]
