import time
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar

from sqlalchemy import and_, delete, func, or_, update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session, col, select

from ..core.errors import InternalError
from ..core.logs import get_logger
from ..domain.dates import DateRange
from ..domain.models import Direction
from ..domain.money import Money
from ..domain.pagination import PageCursor
from ..models.base import utcnow
from ..models.category import Category
from ..models.transaction import Transaction
from .base import TransactionStore


logger = get_logger(__name__)

COMMIT_ATTEMPTS = 3

R = TypeVar("R")


def _date_clauses(date_range: Optional[DateRange]) -> list:
    clauses = []
    if date_range is None:
        return clauses
    if date_range.start is not None:
        clauses.append(col(Transaction.txn_date) >= date_range.start)
    if date_range.end_exclusive is not None:
        clauses.append(col(Transaction.txn_date) < date_range.end_exclusive)
    return clauses


def _after_clause(cursor: PageCursor):
    # Rows strictly after the cursor in (txn_date desc, created_at desc, id desc)
    txn_date = col(Transaction.txn_date)
    created_at = col(Transaction.created_at)
    return or_(
        txn_date < cursor.txn_date,
        and_(txn_date == cursor.txn_date, created_at < cursor.created_at),
        and_(
            txn_date == cursor.txn_date,
            created_at == cursor.created_at,
            col(Transaction.id) < cursor.id,
        ),
    )


class SqlTransactionStore(TransactionStore):
    """TransactionStore backed by a SQLModel session (one per request)."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self, operation: str):
        try:
            yield
        except (SQLAlchemyError, OverflowError) as e:
            self.session.rollback()
            logger.error("store_failure", operation=operation, error=type(e).__name__, exc_info=True)
            raise InternalError() from e

    def _write(self, operation: str, apply: Callable[[], R]) -> R:
        # Retry with small backoff to ride out transient SQLite locks
        with self._guard(operation):
            for attempt in range(COMMIT_ATTEMPTS):
                try:
                    result = apply()
                    self.session.commit()
                    return result
                except OperationalError:
                    self.session.rollback()
                    if attempt == COMMIT_ATTEMPTS - 1:
                        raise
                    logger.warning("store_busy_retry", operation=operation, attempt=attempt + 1)
                    time.sleep(0.25 * (attempt + 1))
        raise InternalError()

    # ─────────────────────────────
    #   CATEGORIES
    # ─────────────────────────────

    def find_category(self, category_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Category]:
        with self._guard("find_category"):
            stmt = select(Category).where(Category.id == category_id, Category.user_id == user_id)
            return self.session.exec(stmt).first()

    def list_categories(self, user_id: uuid.UUID) -> List[Category]:
        with self._guard("list_categories"):
            stmt = (
                select(Category)
                .where(Category.user_id == user_id)
                .order_by(col(Category.type).asc(), col(Category.name).asc())
            )
            return list(self.session.exec(stmt).all())

    def categories_by_ids(self, user_id: uuid.UUID, ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Category]:
        wanted = list(set(ids))
        if not wanted:
            return {}
        with self._guard("categories_by_ids"):
            stmt = select(Category).where(Category.user_id == user_id, col(Category.id).in_(wanted))
            return {c.id: c for c in self.session.exec(stmt).all()}

    # ─────────────────────────────
    #   TRANSACTIONS (reads)
    # ─────────────────────────────

    def find_transaction(self, transaction_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Transaction]:
        with self._guard("find_transaction"):
            stmt = select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id,
            )
            return self.session.exec(stmt).first()

    def find_transactions(
        self,
        user_id: uuid.UUID,
        date_range: Optional[DateRange] = None,
        direction: Optional[Direction] = None,
    ) -> List[Transaction]:
        with self._guard("find_transactions"):
            stmt = select(Transaction).where(Transaction.user_id == user_id, *_date_clauses(date_range))
            if direction is not None:
                stmt = stmt.where(Transaction.direction == direction)
            return list(self.session.exec(stmt).all())

    def page_transactions(
        self,
        user_id: uuid.UUID,
        limit: int,
        after: Optional[PageCursor] = None,
    ) -> List[Transaction]:
        with self._guard("page_transactions"):
            stmt = select(Transaction).where(Transaction.user_id == user_id)
            if after is not None:
                stmt = stmt.where(_after_clause(after))
            stmt = stmt.order_by(
                col(Transaction.txn_date).desc(),
                col(Transaction.created_at).desc(),
                col(Transaction.id).desc(),
            ).limit(limit)
            return list(self.session.exec(stmt).all())

    def sum_by_direction(
        self,
        user_id: uuid.UUID,
        direction: Direction,
        date_range: Optional[DateRange] = None,
    ) -> Tuple[Money, int]:
        with self._guard("sum_by_direction"):
            stmt = select(
                func.coalesce(func.sum(Transaction.amount_cents), 0),
                func.count(col(Transaction.id)),
            ).where(
                Transaction.user_id == user_id,
                Transaction.direction == direction,
                *_date_clauses(date_range),
            )
            total, count = self.session.exec(stmt).one()
            return Money.from_cents(total), int(count)

    def sum_by_category(
        self,
        user_id: uuid.UUID,
        direction: Direction,
        date_range: Optional[DateRange] = None,
    ) -> List[Tuple[uuid.UUID, Money]]:
        with self._guard("sum_by_category"):
            stmt = (
                select(Transaction.category_id, func.sum(Transaction.amount_cents))
                .where(
                    Transaction.user_id == user_id,
                    Transaction.direction == direction,
                    *_date_clauses(date_range),
                )
                .group_by(Transaction.category_id)
            )
            return [(category_id, Money.from_cents(total)) for category_id, total in self.session.exec(stmt).all()]

    # ─────────────────────────────
    #   TRANSACTIONS (writes)
    # ─────────────────────────────

    def create_transaction(self, transaction: Transaction) -> Transaction:
        def apply() -> Transaction:
            self.session.add(transaction)
            return transaction

        created = self._write("create_transaction", apply)
        with self._guard("create_transaction"):
            self.session.refresh(created)
        return created

    def update_transaction(
        self,
        transaction_id: uuid.UUID,
        user_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Optional[Transaction]:
        values = dict(changes)
        values["updated_at"] = utcnow()

        def apply() -> int:
            stmt = (
                update(Transaction)
                .where(col(Transaction.id) == transaction_id, col(Transaction.user_id) == user_id)
                .values(**values)
            )
            return self.session.exec(stmt).rowcount

        if self._write("update_transaction", apply) == 0:
            return None
        return self.find_transaction(transaction_id, user_id)

    def delete_transaction(self, transaction_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        def apply() -> int:
            stmt = delete(Transaction).where(
                col(Transaction.id) == transaction_id,
                col(Transaction.user_id) == user_id,
            )
            return self.session.exec(stmt).rowcount

        return self._write("delete_transaction", apply) > 0
