"""Validated create/update/delete and paged listing of transactions.

Every field is validated before the store is touched, so a failed request
never leaves a partial write behind.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from ..core.errors import NotFound, ValidationError
from ..core.logs import get_logger
from ..domain.dates import parse_date
from ..domain.models import Direction
from ..domain.money import InvalidAmount, Money
from ..domain.pagination import Page, PageCursor, build_page, clamp_page_size
from ..models.category import Category
from ..models.transaction import Transaction
from ..store.base import TransactionStore


logger = get_logger(__name__)

MAX_DESCRIPTION_LENGTH = 255

UPDATABLE_FIELDS = ("category_id", "direction", "amount", "txn_date", "description")


@dataclass(frozen=True)
class TransactionView:
    """A transaction joined with its category label."""

    transaction: Transaction
    category: Optional[Category]


def _parse_uuid(field: str, raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    if raw is None or raw == "":
        raise ValidationError(field, f"{field} is required")
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise ValidationError(field, f"{field} must be a valid id")


def _validate_direction(raw: Any) -> Direction:
    try:
        return Direction.parse(raw)
    except ValueError:
        raise ValidationError("direction", "direction must be INCOME or EXPENSE")


def _validate_amount(raw: Any) -> Money:
    try:
        return Money.parse(raw)
    except InvalidAmount as e:
        raise ValidationError("amount", str(e))


def _validate_txn_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return parse_date(raw)
    except ValueError:
        raise ValidationError("txn_date", "txn_date must be YYYY-MM-DD")


def _validate_description(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError("description", "description must be text")
    text = raw.strip()
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError("description", f"description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    return text or None


class TransactionService:
    def __init__(self, store: TransactionStore):
        self.store = store

    def _validate_category(self, user_id: uuid.UUID, raw: Any) -> Category:
        category_id = _parse_uuid("category_id", raw)
        category = self.store.find_category(category_id, user_id)
        if category is None:
            raise ValidationError("category_id", "Category not found")
        return category

    def _view(self, transaction: Transaction, category: Optional[Category] = None) -> TransactionView:
        if category is None:
            category = self.store.find_category(transaction.category_id, transaction.user_id)
        return TransactionView(transaction=transaction, category=category)

    def list_categories(self, user_id: uuid.UUID) -> List[Category]:
        return self.store.list_categories(user_id)

    def list_page(
        self,
        user_id: uuid.UUID,
        take: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[TransactionView]:
        size = clamp_page_size(take)
        after = None
        if cursor:
            try:
                after = PageCursor.decode(cursor)
            except ValueError:
                raise ValidationError("cursor", "cursor is not valid")

        rows = self.store.page_transactions(user_id, limit=size + 1, after=after)
        page = build_page(rows, size)

        categories = self.store.categories_by_ids(user_id, (t.category_id for t in page.items))
        views = [TransactionView(t, categories.get(t.category_id)) for t in page.items]
        return Page(items=views, take=page.take, next_cursor=page.next_cursor, has_next_page=page.has_next_page)

    def get(self, user_id: uuid.UUID, transaction_id: uuid.UUID) -> TransactionView:
        transaction = self.store.find_transaction(transaction_id, user_id)
        if transaction is None:
            raise NotFound("Transaction not found")
        return self._view(transaction)

    def create(self, user_id: uuid.UUID, payload: Mapping[str, Any]) -> TransactionView:
        category = self._validate_category(user_id, payload.get("category_id"))
        direction = _validate_direction(payload.get("direction"))
        amount = _validate_amount(payload.get("amount"))
        txn_date = _validate_txn_date(payload.get("txn_date"))
        description = _validate_description(payload.get("description"))

        transaction = Transaction(
            id=uuid.uuid4(),
            user_id=user_id,
            category_id=category.id,
            direction=direction,
            amount_cents=amount.cents,
            txn_date=txn_date,
            description=description,
        )
        created = self.store.create_transaction(transaction)
        logger.info("transaction_created", user_id=str(user_id), transaction_id=str(created.id))
        return self._view(created, category)

    def update(self, user_id: uuid.UUID, transaction_id: uuid.UUID, patch: Mapping[str, Any]) -> TransactionView:
        fields = [name for name in UPDATABLE_FIELDS if name in patch]
        if not fields:
            raise ValidationError(None, "No fields to update")

        if self.store.find_transaction(transaction_id, user_id) is None:
            raise NotFound("Transaction not found")

        changes = {}
        category = None
        if "category_id" in patch:
            category = self._validate_category(user_id, patch["category_id"])
            changes["category_id"] = category.id
        if "direction" in patch:
            changes["direction"] = _validate_direction(patch["direction"])
        if "amount" in patch:
            changes["amount_cents"] = _validate_amount(patch["amount"]).cents
        if "txn_date" in patch:
            changes["txn_date"] = _validate_txn_date(patch["txn_date"])
        if "description" in patch:
            changes["description"] = _validate_description(patch["description"])

        updated = self.store.update_transaction(transaction_id, user_id, changes)
        if updated is None:
            raise NotFound("Transaction not found")
        logger.info("transaction_updated", user_id=str(user_id), transaction_id=str(transaction_id), fields=fields)
        return self._view(updated, category)

    def delete(self, user_id: uuid.UUID, transaction_id: uuid.UUID) -> None:
        if not self.store.delete_transaction(transaction_id, user_id):
            raise NotFound("Transaction not found")
        logger.info("transaction_deleted", user_id=str(user_id), transaction_id=str(transaction_id))
