"""Pure functions turning transactions into report data.

This module contains the functional core for reporting:
- No I/O operations (no database, no HTTP)
- Exact arithmetic through Money, never floats
- Direction is authoritative; a category's type is only a label

Transactions are any objects exposing ``direction``, ``amount`` (Money),
``txn_date`` and ``category_id``.
"""

from dataclasses import dataclass
from datetime import date
from itertools import accumulate
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from fintrack.domain.dates import DateRange, add_months, iter_months, month_key, month_start
from fintrack.domain.models import Direction, Month
from fintrack.domain.money import Money


MIN_TREND_MONTHS = 1
MAX_TREND_MONTHS = 60
DEFAULT_TREND_MONTHS = 12

UNKNOWN_CATEGORY = "Unknown"


@dataclass(frozen=True)
class SummaryItem:
    category_id: object
    category_name: str
    category_type: Optional[Direction]
    total: Money


@dataclass(frozen=True)
class CategorySummary:
    direction: Direction
    date_range: DateRange
    items: List[SummaryItem]
    grand_total: Money


@dataclass(frozen=True)
class MonthBucket:
    month: Month
    income: Money
    expense: Money
    tx_count: int = 0

    @property
    def net(self) -> Money:
        return self.income - self.expense


@dataclass(frozen=True)
class TrendPoint:
    month: Month
    income: Money
    expense: Money
    net: Money
    net_worth: Money
    tx_count: int


@dataclass(frozen=True)
class TrendSeries:
    months: int
    start_date: date
    data: List[TrendPoint]


@dataclass(frozen=True)
class Metrics:
    total_income: Money
    total_expense: Money
    tx_count: int

    @property
    def net_cashflow(self) -> Money:
        return self.total_income - self.total_expense


def summary_from_totals(
    totals: Iterable[Tuple[object, Money]],
    categories: Mapping[object, object],
    direction: Direction,
    date_range: DateRange = DateRange(),
) -> CategorySummary:
    """Join per-category totals to their labels and rank them.

    Items are sorted by total descending; ties go to the smaller category id
    (compared as strings) first. A category missing from ``categories`` is
    labelled "Unknown" with no type.
    """
    items = []
    for category_id, total in totals:
        category = categories.get(category_id)
        items.append(
            SummaryItem(
                category_id=category_id,
                category_name=category.name if category is not None else UNKNOWN_CATEGORY,
                category_type=category.type if category is not None else None,
                total=total,
            )
        )
    items.sort(key=lambda item: (-item.total.cents, str(item.category_id)))
    return CategorySummary(
        direction=direction,
        date_range=date_range,
        items=items,
        grand_total=Money.total(item.total for item in items),
    )


def category_summary(
    transactions: Iterable,
    categories: Mapping[object, object],
    direction: Direction,
    date_range: DateRange = DateRange(),
) -> CategorySummary:
    """Category totals for one direction, computed from raw transactions."""
    totals: Dict[object, Money] = {}
    for txn in transactions:
        if txn.direction != direction or not date_range.contains(txn.txn_date):
            continue
        totals[txn.category_id] = totals.get(txn.category_id, Money.zero()) + txn.amount
    return summary_from_totals(totals.items(), categories, direction, date_range)


def _bucket(transactions: Iterable, keys: Iterable[Month] = (), sparse: bool = True) -> Dict[Month, MonthBucket]:
    buckets: Dict[Month, MonthBucket] = {
        key: MonthBucket(month=key, income=Money.zero(), expense=Money.zero()) for key in keys
    }
    for txn in transactions:
        key = month_key(txn.txn_date)
        bucket = buckets.get(key)
        if bucket is None:
            if not sparse:
                continue
            bucket = MonthBucket(month=key, income=Money.zero(), expense=Money.zero())
        if txn.direction == Direction.INCOME:
            bucket = MonthBucket(key, bucket.income + txn.amount, bucket.expense, bucket.tx_count + 1)
        else:
            bucket = MonthBucket(key, bucket.income, bucket.expense + txn.amount, bucket.tx_count + 1)
        buckets[key] = bucket
    return buckets


def monthly_breakdown(transactions: Iterable, date_range: DateRange = DateRange()) -> List[MonthBucket]:
    """Sparse monthly income/expense buckets, oldest first.

    Only months with at least one transaction appear.
    """
    in_range = (txn for txn in transactions if date_range.contains(txn.txn_date))
    buckets = _bucket(in_range)
    return [buckets[key] for key in sorted(buckets)]


def clamp_trend_months(months: Optional[int]) -> int:
    if months is None:
        return DEFAULT_TREND_MONTHS
    return max(MIN_TREND_MONTHS, min(MAX_TREND_MONTHS, int(months)))


def trend_start(months: int, today: date) -> date:
    """First day of the earliest month in a ``months``-long window ending now."""
    return add_months(month_start(today), -(months - 1))


def trend_series(transactions: Iterable, months: Optional[int], today: date) -> TrendSeries:
    """Dense monthly series ending with ``today``'s month.

    Every month in the window appears, zero-filled when empty, so charts get
    a fixed-length series. ``net_worth`` is the running sum of ``net`` from
    the first month of the window, starting at zero. Transactions outside the
    window are dropped.
    """
    count = clamp_trend_months(months)
    start = trend_start(count, today)
    keys = list(iter_months(start, count))
    buckets = _bucket(transactions, keys, sparse=False)
    ordered = [buckets[key] for key in keys]

    running = accumulate((bucket.net for bucket in ordered), Money.add, initial=Money.zero())
    next(running)  # the seed

    data = [
        TrendPoint(
            month=bucket.month,
            income=bucket.income,
            expense=bucket.expense,
            net=bucket.net,
            net_worth=net_worth,
            tx_count=bucket.tx_count,
        )
        for bucket, net_worth in zip(ordered, running)
    ]
    return TrendSeries(months=count, start_date=start, data=data)


def metrics_from_sums(income: Tuple[Money, int], expense: Tuple[Money, int]) -> Metrics:
    """Combine the two ``(sum, count)`` store aggregates into dashboard metrics."""
    income_total, income_count = income
    expense_total, expense_count = expense
    return Metrics(
        total_income=income_total,
        total_expense=expense_total,
        tx_count=income_count + expense_count,
    )
