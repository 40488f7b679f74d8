"""Report queries: category summary, balance sheet, trends and dashboard metrics."""

import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..core.errors import ValidationError
from ..domain.aggregation import (
    CategorySummary,
    Metrics,
    MonthBucket,
    TrendSeries,
    clamp_trend_months,
    metrics_from_sums,
    monthly_breakdown,
    summary_from_totals,
    trend_series,
    trend_start,
)
from ..domain.dates import DateRange, parse_date, utc_today
from ..domain.models import Direction
from ..store.base import TransactionStore


@dataclass(frozen=True)
class BalanceSheet:
    date_range: DateRange
    totals: Metrics
    monthly: List[MonthBucket]


def parse_date_range(start: Optional[str], end: Optional[str]) -> DateRange:
    """Build a report range from the optional ``from``/``to`` query values."""
    try:
        start_d = parse_date(start) if start else None
    except ValueError:
        raise ValidationError("from", "from must be YYYY-MM-DD")
    try:
        end_d = parse_date(end) if end else None
    except ValueError:
        raise ValidationError("to", "to must be YYYY-MM-DD")
    if start_d and end_d and start_d > end_d:
        raise ValidationError("from", "from must not be after to")
    return DateRange(start=start_d, end=end_d)


def parse_direction(raw: Optional[str], default: Direction = Direction.EXPENSE) -> Direction:
    if raw is None or raw == "":
        return default
    try:
        return Direction.parse(raw)
    except ValueError:
        raise ValidationError("direction", "direction must be INCOME or EXPENSE")


class ReportService:
    def __init__(self, store: TransactionStore):
        self.store = store

    def category_summary(
        self,
        user_id: uuid.UUID,
        direction: Direction = Direction.EXPENSE,
        date_range: DateRange = DateRange(),
    ) -> CategorySummary:
        totals = self.store.sum_by_category(user_id, direction, date_range)
        categories = self.store.categories_by_ids(user_id, (category_id for category_id, _ in totals))
        return summary_from_totals(totals, categories, direction, date_range)

    def metrics(self, user_id: uuid.UUID, date_range: DateRange = DateRange()) -> Metrics:
        income = self.store.sum_by_direction(user_id, Direction.INCOME, date_range)
        expense = self.store.sum_by_direction(user_id, Direction.EXPENSE, date_range)
        return metrics_from_sums(income, expense)

    def balance_sheet(self, user_id: uuid.UUID, date_range: DateRange = DateRange()) -> BalanceSheet:
        # Two separate reads; not guaranteed consistent under concurrent writes
        totals = self.metrics(user_id, date_range)
        transactions = self.store.find_transactions(user_id, date_range)
        return BalanceSheet(
            date_range=date_range,
            totals=totals,
            monthly=monthly_breakdown(transactions, date_range),
        )

    def trends(self, user_id: uuid.UUID, months: Optional[int] = None, today: Optional[date] = None) -> TrendSeries:
        count = clamp_trend_months(months)
        today = today or utc_today()
        transactions = self.store.find_transactions(user_id, DateRange(start=trend_start(count, today)))
        return trend_series(transactions, count, today)
