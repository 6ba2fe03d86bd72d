import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

from evently import config
from evently.schemas.analytics import (
    Analytics,
    AnalyticsTotals,
    CategoryStat,
    MonthlyStat,
)
from evently.services.event_service import EventService
from evently.services.registration_service import RegistrationService

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]


def _month_index(registration_date: str):
    try:
        return date.fromisoformat(registration_date[:10]).month - 1
    except (TypeError, ValueError):
        return None


def fold_analytics(
    registrations: Iterable[Dict[str, Any]], events: Iterable[Dict[str, Any]]
) -> Analytics:
    """
    Fold registrations and events into dashboard figures.

    Months bucket by registration date, not event date. Revenue counts one
    unit of the event price per registration. Cancelled registrations and
    registrations whose event is gone contribute no revenue.
    """
    events = list(events)
    events_by_id = {event["id"]: event for event in events}

    monthly = [
        {"events": set(), "revenue": 0.0, "registrations": 0} for _ in MONTH_NAMES
    ]
    total_registrations = 0
    total_revenue = 0.0

    for registration in registrations:
        if registration.get("status") == "cancelled":
            continue
        total_registrations += 1

        event = events_by_id.get(registration.get("eventId"))
        if event is None:
            continue

        price = float(event.get("price") or 0)
        total_revenue += price

        month = _month_index(registration.get("registrationDate"))
        if month is None:
            continue
        monthly[month]["events"].add(event["id"])
        monthly[month]["revenue"] += price
        monthly[month]["registrations"] += 1

    # dicts keep first-seen category order
    category_counts: Dict[str, int] = {}
    for event in events:
        category = event.get("category")
        category_counts[category] = category_counts.get(category, 0) + 1

    total_events = len(events)
    avg_attendance = 0
    if total_events > 0:
        avg_attendance = int(
            (Decimal(total_registrations) / Decimal(total_events)).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )

    return Analytics(
        totals=AnalyticsTotals(
            events=total_events,
            registrations=total_registrations,
            revenue=total_revenue,
            avgAttendance=avg_attendance,
        ),
        monthlyData=[
            MonthlyStat(
                name=name,
                events=len(stats["events"]),
                revenue=stats["revenue"],
                registrations=stats["registrations"],
            )
            for name, stats in zip(MONTH_NAMES, monthly)
        ],
        categoryData=[
            CategoryStat(name=name, value=count)
            for name, count in category_counts.items()
        ],
    )


class AnalyticsService:
    def __init__(self, dynamodb_resource, table_name=config.TABLE_NAME):
        self.event_service = EventService(dynamodb_resource, table_name)
        self.registration_service = RegistrationService(dynamodb_resource, table_name)

    def get_analytics(self) -> Analytics:
        """Recomputed on every call; nothing is stored"""
        registrations = self.registration_service.get_active_registrations()
        events = [event.model_dump() for event in self.event_service.get_all_events()]
        analytics = fold_analytics(registrations, events)
        logger.debug(
            "Analytics folded %d registrations over %d events",
            analytics.totals.registrations,
            analytics.totals.events,
        )
        return analytics
