from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import SQLModel

from ..core.security import get_current_user
from ..dependencies import get_report_service
from ..domain.aggregation import Metrics
from ..models.user import User
from ..services.reports import ReportService, parse_date_range

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


class TotalsRead(SQLModel):
    total_income: str
    total_expense: str
    net_cashflow: str
    tx_count: int


class MonthRead(SQLModel):
    month: str
    income: str
    expense: str
    net: str


class BalanceSheetRead(SQLModel):
    range: Dict[str, Optional[str]]
    totals: TotalsRead
    monthly: List[MonthRead]


class TrendPointRead(MonthRead):
    net_worth: str
    tx_count: int


class TrendsRead(SQLModel):
    months: int
    start_date: date
    data: List[TrendPointRead]


def to_totals_read(metrics: Metrics) -> TotalsRead:
    return TotalsRead(
        total_income=metrics.total_income.to_fixed(),
        total_expense=metrics.total_expense.to_fixed(),
        net_cashflow=metrics.net_cashflow.to_fixed(),
        tx_count=metrics.tx_count,
    )


@router.get(
    "/balance-sheet",
    response_model=BalanceSheetRead,
)
def balance_sheet(
    start: Optional[str] = Query(default=None, alias="from"),
    end: Optional[str] = Query(default=None, alias="to"),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    """Totals for the range plus income/expense per month (only months with activity)."""
    sheet = reports.balance_sheet(current_user.id, parse_date_range(start, end))
    return BalanceSheetRead(
        range=sheet.date_range.to_dict(),
        totals=to_totals_read(sheet.totals),
        monthly=[
            MonthRead(
                month=bucket.month,
                income=bucket.income.to_fixed(),
                expense=bucket.expense.to_fixed(),
                net=bucket.net.to_fixed(),
            )
            for bucket in sheet.monthly
        ],
    )


@router.get(
    "/trends",
    response_model=TrendsRead,
)
def trends(
    months: Optional[int] = Query(default=None),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    """
    Income, expense, net and running net worth for each of the last N months.

    - months: 1..60 (default 12), clamped. Every month is present, zero-filled.
    """
    series = reports.trends(current_user.id, months=months)
    return TrendsRead(
        months=series.months,
        start_date=series.start_date,
        data=[
            TrendPointRead(
                month=point.month,
                income=point.income.to_fixed(),
                expense=point.expense.to_fixed(),
                net=point.net.to_fixed(),
                net_worth=point.net_worth.to_fixed(),
                tx_count=point.tx_count,
            )
            for point in series.data
        ],
    )
