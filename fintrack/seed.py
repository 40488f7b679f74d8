"""Default categories for new users and a demo data set."""

import uuid
from datetime import date
from typing import List

from sqlalchemy import delete
from sqlmodel import Session, col, select

from .core.logs import get_logger
from .domain.models import Direction
from .domain.money import Money
from .models.category import Category
from .models.transaction import Transaction


logger = get_logger(__name__)

DEFAULT_CATEGORIES = [
    ("Salary", Direction.INCOME),
    ("Bonus", Direction.INCOME),
    ("Food", Direction.EXPENSE),
    ("Transport", Direction.EXPENSE),
    ("Bills", Direction.EXPENSE),
    ("Shopping", Direction.EXPENSE),
]

# (category name, direction, amount, date, description)
DEMO_TRANSACTIONS = [
    ("Salary", Direction.INCOME, "3200.00", date(2026, 1, 1), "January salary"),
    ("Food", Direction.EXPENSE, "12.50", date(2026, 1, 3), "Lunch"),
    ("Transport", Direction.EXPENSE, "2.20", date(2026, 1, 3), "MRT"),
    ("Bills", Direction.EXPENSE, "120.00", date(2026, 1, 5), "Utilities"),
]


def add_default_categories(session: Session, user_id: uuid.UUID) -> List[Category]:
    """Stage the default categories the user does not have yet. Does not commit."""
    existing = {
        (c.name, c.type)
        for c in session.exec(select(Category).where(Category.user_id == user_id)).all()
    }
    created = []
    for name, kind in DEFAULT_CATEGORIES:
        if (name, kind) in existing:
            continue
        category = Category(id=uuid.uuid4(), user_id=user_id, name=name, type=kind)
        session.add(category)
        created.append(category)
    return created


def seed_default_categories(session: Session, user_id: uuid.UUID) -> List[Category]:
    """Create the default categories the user does not have yet. Commits."""
    created = add_default_categories(session, user_id)
    session.commit()
    logger.info("categories_seeded", user_id=str(user_id), created=len(created))
    return created


def seed_demo_transactions(session: Session, user_id: uuid.UUID) -> List[Transaction]:
    """Replace the user's transactions with the demo set. Commits."""
    seed_default_categories(session, user_id)
    by_key = {
        (c.name, c.type): c
        for c in session.exec(select(Category).where(Category.user_id == user_id)).all()
    }

    session.exec(delete(Transaction).where(col(Transaction.user_id) == user_id))

    created = []
    for name, direction, amount, txn_date, description in DEMO_TRANSACTIONS:
        txn = Transaction(
            id=uuid.uuid4(),
            user_id=user_id,
            category_id=by_key[(name, direction)].id,
            direction=direction,
            amount_cents=Money.parse(amount).cents,
            txn_date=txn_date,
            description=description,
        )
        session.add(txn)
        created.append(txn)
    session.commit()
    logger.info("demo_transactions_seeded", user_id=str(user_id), created=len(created))
    return created
