from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import SQLModel

from ..core.security import get_current_user
from ..dependencies import get_report_service
from ..models.user import User
from ..services.reports import ReportService, parse_date_range
from .reports import TotalsRead, to_totals_read

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


class MetricsRead(SQLModel):
    range: Dict[str, Optional[str]]
    metrics: TotalsRead


@router.get(
    "/metrics",
    response_model=MetricsRead,
)
def metrics(
    start: Optional[str] = Query(default=None, alias="from"),
    end: Optional[str] = Query(default=None, alias="to"),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    date_range = parse_date_range(start, end)
    return MetricsRead(
        range=date_range.to_dict(),
        metrics=to_totals_read(reports.metrics(current_user.id, date_range)),
    )
