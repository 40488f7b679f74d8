"""Domain type definitions for fintrack.

- Direction: whether money came in (INCOME) or went out (EXPENSE). Also used
  as the category type.
- Month: calendar month key in YYYY-MM format.
"""

from enum import Enum
from typing import NewType


class Direction(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    @classmethod
    def parse(cls, value) -> "Direction":
        """Accept a Direction or its exact string value.

        Raises:
            ValueError: For anything else.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value)
        raise ValueError(f"direction must be INCOME or EXPENSE, got {value!r}")


# Month is always in YYYY-MM format (e.g., "2026-01"); lexicographic order is chronological
Month = NewType("Month", str)
