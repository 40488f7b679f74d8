"""Keyset pagination over transactions.

Transactions are totally ordered by ``(txn_date desc, created_at desc, id
desc)``. The id makes the order strict even when two rows share a date and a
creation instant. A cursor carries the full ordering key of the last row of a
page, so a page can be resumed even if that row was deleted in between.
"""

import base64
import binascii
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Generic, List, Optional, Sequence, Tuple, TypeVar


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def clamp_page_size(take: Optional[int]) -> int:
    if take is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, int(take)))


def ordering_key(txn) -> Tuple[date, datetime, uuid.UUID]:
    return (txn.txn_date, txn.created_at, txn.id)


@dataclass(frozen=True)
class PageCursor:
    txn_date: date
    created_at: datetime
    id: uuid.UUID

    @classmethod
    def after(cls, txn) -> "PageCursor":
        return cls(txn_date=txn.txn_date, created_at=txn.created_at, id=txn.id)

    @property
    def key(self) -> Tuple[date, datetime, uuid.UUID]:
        return (self.txn_date, self.created_at, self.id)

    def encode(self) -> str:
        raw = f"{self.txn_date.isoformat()}|{self.created_at.isoformat()}|{self.id.hex}"
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, token: str) -> "PageCursor":
        """Inverse of ``encode``.

        Raises:
            ValueError: If the token was not produced by ``encode``.
        """
        try:
            padded = token + "=" * (-len(token) % 4)
            raw = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
            day, created, ident = raw.split("|")
            return cls(
                txn_date=date.fromisoformat(day),
                created_at=datetime.fromisoformat(created),
                id=uuid.UUID(hex=ident),
            )
        except (binascii.Error, UnicodeError, ValueError) as e:
            raise ValueError(f"malformed cursor: {e}")

    def precedes(self, txn) -> bool:
        """True when ``txn`` comes after this cursor in the descending order."""
        return ordering_key(txn) < self.key


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    take: int
    next_cursor: Optional[str]
    has_next_page: bool


def build_page(rows: Sequence[T], take: int) -> Page[T]:
    """Trim a ``take + 1`` fetch down to one page and derive its page info."""
    has_next_page = len(rows) > take
    items = list(rows[:take])
    next_cursor = PageCursor.after(items[-1]).encode() if has_next_page and items else None
    return Page(items=items, take=take, next_cursor=next_cursor, has_next_page=has_next_page)
