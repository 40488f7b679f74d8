"""Tests for ReportService and the query-value parsers."""

import uuid
from datetime import date

import pytest

from fintrack.core.errors import ValidationError
from fintrack.domain.dates import DateRange
from fintrack.domain.models import Direction
from fintrack.services.reports import ReportService, parse_date_range, parse_direction

INCOME = Direction.INCOME
EXPENSE = Direction.EXPENSE


@pytest.fixture
def service(store):
    return ReportService(store)


@pytest.fixture
def seeded(store, user_id, other_user_id):
    """The demo month plus one row belonging to someone else."""
    salary = store.add_category(user_id, "Salary", INCOME)
    food = store.add_category(user_id, "Food", EXPENSE)
    transport = store.add_category(user_id, "Transport", EXPENSE)
    store.add_transaction(user_id, salary, INCOME, "1000.00", "2026-01-01")
    store.add_transaction(user_id, food, EXPENSE, "12.50", "2026-01-03")
    store.add_transaction(user_id, transport, EXPENSE, "2.20", "2026-01-03")

    theirs = store.add_category(other_user_id, "Food", EXPENSE)
    store.add_transaction(other_user_id, theirs, EXPENSE, "500.00", "2026-01-03")
    return {"salary": salary, "food": food, "transport": transport}


class TestParseDateRange:
    """Tests for parse_date_range."""

    def test_both_missing(self) -> None:
        assert parse_date_range(None, None) == DateRange()

    def test_valid(self) -> None:
        rng = parse_date_range("2026-01-01", "2026-01-31")

        assert rng.start == date(2026, 1, 1)
        assert rng.end == date(2026, 1, 31)

    @pytest.mark.parametrize("start,end,field", [("bad", None, "from"), (None, "2026-13-01", "to")])
    def test_malformed(self, start, end, field) -> None:
        """Should name the offending bound."""
        with pytest.raises(ValidationError) as excinfo:
            parse_date_range(start, end)

        assert excinfo.value.field == field

    def test_inverted_range(self) -> None:
        with pytest.raises(ValidationError):
            parse_date_range("2026-02-01", "2026-01-01")


class TestParseDirection:
    def test_defaults_to_expense(self) -> None:
        assert parse_direction(None) == EXPENSE
        assert parse_direction("") == EXPENSE

    def test_rejects_unknown(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            parse_direction("income")

        assert excinfo.value.field == "direction"


class TestMetrics:
    """Tests for ReportService.metrics."""

    def test_scenario(self, service, seeded, user_id) -> None:
        """Only the caller's rows count."""
        metrics = service.metrics(user_id)

        assert metrics.total_income.to_fixed() == "1000.00"
        assert metrics.total_expense.to_fixed() == "14.70"
        assert metrics.net_cashflow.to_fixed() == "985.30"
        assert metrics.tx_count == 3

    def test_no_transactions(self, service, user_id) -> None:
        metrics = service.metrics(user_id)

        assert metrics.net_cashflow.to_fixed() == "0.00"
        assert metrics.tx_count == 0

    def test_range(self, service, seeded, user_id) -> None:
        metrics = service.metrics(user_id, DateRange(start=date(2026, 1, 2)))

        assert metrics.total_income.to_fixed() == "0.00"
        assert metrics.tx_count == 2


class TestCategorySummary:
    """Tests for ReportService.category_summary."""

    def test_expense_summary(self, service, seeded, user_id) -> None:
        summary = service.category_summary(user_id)

        assert summary.direction == EXPENSE
        assert [(i.category_name, i.total.to_fixed()) for i in summary.items] == [
            ("Food", "12.50"),
            ("Transport", "2.20"),
        ]
        assert summary.grand_total.to_fixed() == "14.70"

    def test_inclusive_to(self, service, seeded, user_id) -> None:
        """A row dated on ``to`` is included."""
        day = date(2026, 1, 3)
        summary = service.category_summary(user_id, EXPENSE, DateRange(start=day, end=day))

        assert summary.grand_total.to_fixed() == "14.70"

    def test_income_summary(self, service, seeded, user_id) -> None:
        summary = service.category_summary(user_id, INCOME)

        assert [i.category_id for i in summary.items] == [seeded["salary"].id]

    def test_empty_range(self, service, seeded, user_id) -> None:
        summary = service.category_summary(user_id, EXPENSE, DateRange(start=date(2027, 1, 1)))

        assert summary.items == []
        assert summary.grand_total.to_fixed() == "0.00"


class TestBalanceSheet:
    """Tests for ReportService.balance_sheet."""

    def test_totals_and_sparse_months(self, service, store, seeded, user_id) -> None:
        store.add_transaction(user_id, seeded["food"], EXPENSE, "10.00", "2026-03-05")

        sheet = service.balance_sheet(user_id)

        assert sheet.totals.total_expense.to_fixed() == "24.70"
        assert [b.month for b in sheet.monthly] == ["2026-01", "2026-03"]
        assert sheet.monthly[0].net.to_fixed() == "985.30"
        assert sheet.monthly[1].net.to_fixed() == "-10.00"

    def test_totals_match_monthly_sums(self, service, seeded, user_id) -> None:
        sheet = service.balance_sheet(user_id)

        income = sum(b.income.cents for b in sheet.monthly)
        expense = sum(b.expense.cents for b in sheet.monthly)
        assert income == sheet.totals.total_income.cents
        assert expense == sheet.totals.total_expense.cents


class TestTrends:
    """Tests for ReportService.trends."""

    TODAY = date(2026, 3, 18)

    def test_dense_with_running_net_worth(self, service, seeded, user_id) -> None:
        series = service.trends(user_id, months=3, today=self.TODAY)

        assert series.start_date == date(2026, 1, 1)
        assert [p.month for p in series.data] == ["2026-01", "2026-02", "2026-03"]
        assert [p.net_worth.to_fixed() for p in series.data] == ["985.30", "985.30", "985.30"]
        assert [p.tx_count for p in series.data] == [3, 0, 0]

    def test_default_and_clamped_length(self, service, user_id) -> None:
        assert len(service.trends(user_id, today=self.TODAY).data) == 12
        assert len(service.trends(user_id, months=0, today=self.TODAY).data) == 1
        assert len(service.trends(user_id, months=100, today=self.TODAY).data) == 60

    def test_other_users_rows_are_ignored(self, service, seeded, other_user_id) -> None:
        series = service.trends(other_user_id, months=3, today=self.TODAY)

        assert series.data[-1].net_worth.to_fixed() == "-500.00"

    def test_unknown_user_gets_zeroes(self, service) -> None:
        series = service.trends(uuid.uuid4(), months=2, today=self.TODAY)

        assert all(p.net_worth.cents == 0 for p in series.data)
