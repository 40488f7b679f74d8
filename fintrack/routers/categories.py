import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import SQLModel

from ..core.security import get_current_user
from ..dependencies import get_transaction_service
from ..domain.models import Direction
from ..models.user import User
from ..services.transactions import TransactionService

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    type: Direction


class CategoryList(SQLModel):
    categories: List[CategoryRead]


@router.get(
    "",
    response_model=CategoryList,
)
def list_categories(
    service: TransactionService = Depends(get_transaction_service),
    current_user: User = Depends(get_current_user),
):
    """The user's categories ordered by type, then name."""
    categories = service.list_categories(current_user.id)
    return CategoryList(categories=[CategoryRead(id=c.id, name=c.name, type=c.type) for c in categories])
