"""Unit tests for overdue and coverage-risk detection"""

from datetime import timedelta
from decimal import Decimal
from household_forecast.domain.risk_assessment import compute_risk_assessment, find_overdue_expenses
from tests.helpers import TODAY, make_transaction


def test_find_overdue_expenses():
    transactions = [
        make_transaction("late", TODAY - timedelta(days=4), "50", status="planned", description="Water"),
        make_transaction("due_today", TODAY, "70", status="planned"),
        make_transaction("paid", TODAY - timedelta(days=4), "30"),
        make_transaction("income", TODAY - timedelta(days=4), "30", kind="INCOME", status="planned"),
    ]

    overdue = find_overdue_expenses(transactions, TODAY)

    assert [o.id for o in overdue] == ["late"]
    assert overdue[0].days_overdue == 4
    assert overdue[0].description == "Water"
    assert overdue[0].due_date == TODAY - timedelta(days=4)


def test_overdue_suppresses_coverage_check():
    transactions = [
        make_transaction("late", TODAY - timedelta(days=1), "10", status="planned"),
        make_transaction("soon", TODAY, "500", status="planned", due_date=TODAY + timedelta(days=2)),
    ]

    assessment = compute_risk_assessment(transactions, Decimal("100"), Decimal("50"), today=TODAY)

    assert assessment.has_overdue_expenses is True
    assert assessment.has_coverage_risk is False


def test_coverage_risk_for_upcoming_bills_above_realized_balance():
    transactions = [
        make_transaction("tomorrow", TODAY, "150", status="planned", due_date=TODAY + timedelta(days=1)),
        make_transaction("in_a_week", TODAY, "200", status="planned", due_date=TODAY + timedelta(days=7)),
        make_transaction("too_far", TODAY, "900", status="planned", due_date=TODAY + timedelta(days=8)),
        make_transaction("today", TODAY, "900", status="planned"),
        make_transaction("covered", TODAY, "100", status="planned", due_date=TODAY + timedelta(days=3)),
    ]

    assessment = compute_risk_assessment(transactions, Decimal("100"), Decimal("10"), today=TODAY)

    assert assessment.has_overdue_expenses is False
    assert [c.id for c in assessment.coverage_risk_expenses] == ["tomorrow", "in_a_week"]
    assert [c.days_until_due for c in assessment.coverage_risk_expenses] == [1, 7]


def test_no_coverage_check_when_projection_negative():
    transactions = [make_transaction("soon", TODAY, "500", status="planned", due_date=TODAY + timedelta(days=2))]

    assessment = compute_risk_assessment(transactions, Decimal("100"), Decimal("-1"), today=TODAY)

    assert assessment.has_coverage_risk is False


def test_custom_coverage_window():
    transactions = [make_transaction("soon", TODAY, "500", status="planned", due_date=TODAY + timedelta(days=3))]

    narrow = compute_risk_assessment(transactions, Decimal("0"), Decimal("0"), today=TODAY, coverage_window_days=2)

    assert narrow.coverage_risk_expenses == []
