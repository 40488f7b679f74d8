import uuid
from datetime import datetime, date
from typing import Dict, List, Optional, Union

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import StrictFloat, StrictInt, StrictStr
from sqlmodel import SQLModel

from ..core.security import get_current_user
from ..dependencies import get_report_service, get_transaction_service
from ..domain.aggregation import CategorySummary
from ..domain.models import Direction
from ..models.user import User
from ..services.reports import ReportService, parse_date_range, parse_direction
from ..services.transactions import TransactionService, TransactionView
from .categories import CategoryRead

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)

# ─────────────────────────────
#   SCHEMAS (Pydantic/SQLModel)
# ─────────────────────────────

# Input fields are loose; TransactionService does the validation.
# amount is passed through as sent, a JSON string or number but never a boolean.
class TransactionCreate(SQLModel):
    category_id: Optional[str] = None
    direction: Optional[str] = None
    amount: Optional[Union[StrictStr, StrictInt, StrictFloat]] = None
    txn_date: Optional[str] = None
    description: Optional[str] = None


class TransactionUpdate(TransactionCreate):
    pass


class TransactionRead(SQLModel):
    id: uuid.UUID
    direction: Direction
    amount: str
    txn_date: date
    description: Optional[str] = None
    category: Optional[CategoryRead] = None
    created_at: datetime
    updated_at: datetime


class PageInfo(SQLModel):
    take: int
    next_cursor: Optional[str] = None
    has_next_page: bool


class TransactionPage(SQLModel):
    transactions: List[TransactionRead]
    page_info: PageInfo


class SummaryItemRead(SQLModel):
    category_id: uuid.UUID
    category_name: str
    category_type: Optional[Direction] = None
    total: str


class SummaryRead(SQLModel):
    direction: Direction
    range: Dict[str, Optional[str]]
    items: List[SummaryItemRead]
    grand_total: str


def to_transaction_read(view: TransactionView) -> TransactionRead:
    txn = view.transaction
    category = None
    if view.category is not None:
        category = CategoryRead(id=view.category.id, name=view.category.name, type=view.category.type)
    return TransactionRead(
        id=txn.id,
        direction=txn.direction,
        amount=txn.amount.to_fixed(),
        txn_date=txn.txn_date,
        description=txn.description,
        category=category,
        created_at=txn.created_at,
        updated_at=txn.updated_at,
    )


def to_summary_read(summary: CategorySummary) -> SummaryRead:
    return SummaryRead(
        direction=summary.direction,
        range=summary.date_range.to_dict(),
        items=[
            SummaryItemRead(
                category_id=item.category_id,
                category_name=item.category_name,
                category_type=item.category_type,
                total=item.total.to_fixed(),
            )
            for item in summary.items
        ],
        grand_total=summary.grand_total.to_fixed(),
    )


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.get(
    "",
    response_model=TransactionPage,
)
def list_transactions(
    take: Optional[int] = Query(default=None),
    cursor: Optional[str] = Query(default=None),
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    """
    Page through the user's transactions, newest first.

    - take: 1..100 (default 20), clamped.
    - cursor: next_cursor from the previous page.
    """
    page = service.list_page(current_user.id, take=take, cursor=cursor)
    return TransactionPage(
        transactions=[to_transaction_read(v) for v in page.items],
        page_info=PageInfo(take=page.take, next_cursor=page.next_cursor, has_next_page=page.has_next_page),
    )


@router.post(
    "",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    payload: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    view = service.create(current_user.id, payload.model_dump())
    return to_transaction_read(view)


@router.get(
    "/summary",
    response_model=SummaryRead,
)
def transaction_summary(
    direction: Optional[str] = Query(default=None),
    start: Optional[str] = Query(default=None, alias="from"),
    end: Optional[str] = Query(default=None, alias="to"),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    """Category totals for one direction (default EXPENSE), biggest first."""
    summary = reports.category_summary(
        current_user.id,
        direction=parse_direction(direction),
        date_range=parse_date_range(start, end),
    )
    return to_summary_read(summary)


@router.get(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def get_transaction(
    transaction_id: uuid.UUID,
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    return to_transaction_read(service.get(current_user.id, transaction_id))


@router.patch(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def update_transaction(
    transaction_id: uuid.UUID,
    payload: TransactionUpdate,
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    """Partially update a transaction; only the fields sent are changed."""
    view = service.update(current_user.id, transaction_id, payload.model_dump(exclude_unset=True))
    return to_transaction_read(view)


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_transaction(
    transaction_id: uuid.UUID,
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    service.delete(current_user.id, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
