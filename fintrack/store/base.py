"""
Transaction store interface.

The services only talk to storage through this interface. The SQLModel
implementation lives in ``fintrack.store.sql``; tests substitute an in-memory
one. Every operation is scoped by ``user_id``: a row owned by someone else is
indistinguishable from a row that does not exist.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..domain.dates import DateRange
from ..domain.models import Direction
from ..domain.money import Money
from ..domain.pagination import PageCursor
from ..models.category import Category
from ..models.transaction import Transaction


class TransactionStore(ABC):

    @abstractmethod
    def find_category(self, category_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Category]:
        """Return the category if it exists and belongs to ``user_id``."""

    @abstractmethod
    def list_categories(self, user_id: uuid.UUID) -> List[Category]:
        """All of the user's categories ordered by (type, name)."""

    @abstractmethod
    def categories_by_ids(self, user_id: uuid.UUID, ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Category]:
        """The user's categories among ``ids``, keyed by id. Unknown ids are absent."""

    @abstractmethod
    def find_transaction(self, transaction_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Transaction]:
        pass

    @abstractmethod
    def find_transactions(
        self,
        user_id: uuid.UUID,
        date_range: Optional[DateRange] = None,
        direction: Optional[Direction] = None,
    ) -> List[Transaction]:
        """Bulk fetch for aggregation. No ordering is guaranteed."""

    @abstractmethod
    def page_transactions(
        self,
        user_id: uuid.UUID,
        limit: int,
        after: Optional[PageCursor] = None,
    ) -> List[Transaction]:
        """
        Up to ``limit`` rows ordered by (txn_date desc, created_at desc, id desc),
        strictly after ``after`` in that order when given. The cursor's row
        does not need to exist any more.
        """

    @abstractmethod
    def sum_by_direction(
        self,
        user_id: uuid.UUID,
        direction: Direction,
        date_range: Optional[DateRange] = None,
    ) -> Tuple[Money, int]:
        """(sum, count) of the user's transactions in one direction."""

    @abstractmethod
    def sum_by_category(
        self,
        user_id: uuid.UUID,
        direction: Direction,
        date_range: Optional[DateRange] = None,
    ) -> List[Tuple[uuid.UUID, Money]]:
        """Per-category sums for one direction, unordered."""

    @abstractmethod
    def create_transaction(self, transaction: Transaction) -> Transaction:
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: uuid.UUID,
        user_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Optional[Transaction]:
        """Apply column changes to an owned row. None when nothing matched."""

    @abstractmethod
    def delete_transaction(self, transaction_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Physically delete an owned row. False when nothing matched."""
