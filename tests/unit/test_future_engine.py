"""Unit tests for the end-of-month projection engine"""

import pytest
from datetime import date
from decimal import Decimal
from household_forecast.domain.models import FutureEngineInput
from household_forecast.domain.future_engine import (
    compute_future_engine,
    compute_historical_average,
    compute_time_window,
    history_window,
    project_month,
)
from household_forecast.domain.exceptions import InvalidInputError
from tests.helpers import TODAY, make_transaction


def _inputs(**overrides) -> FutureEngineInput:
    values = dict(
        current_balance=Decimal("1000"),
        pending_fixed_expenses=Decimal("400"),
        confirmed_variable_this_month=Decimal("150"),
        historical_variable_avg=Decimal("300"),
        days_elapsed=10,
        days_in_month=30,
    )
    values.update(overrides)
    return FutureEngineInput(**values)


def test_time_window_current_month():
    """Today counts as elapsed; elapsed + remaining = days in month"""
    window = compute_time_window(date(2025, 3, 1), today=date(2025, 3, 10))

    assert window.days_elapsed == 10
    assert window.days_in_month == 31
    assert window.days_remaining == 21
    assert window.days_elapsed + window.days_remaining == window.days_in_month


@pytest.mark.parametrize("selected", [date(2025, 2, 1), date(2025, 4, 1), date(2024, 3, 1)])
def test_time_window_other_months_fully_elapsed(selected):
    """Past and future months show a completed-month view"""
    window = compute_time_window(selected, today=date(2025, 3, 10))

    assert window.days_elapsed == window.days_in_month
    assert window.days_remaining == 0


def test_time_window_leap_year():
    assert compute_time_window(date(2024, 2, 1), today=date(2024, 2, 29)).days_in_month == 29
    assert compute_time_window(date(2023, 2, 1), today=date(2023, 2, 28)).days_in_month == 28


def test_time_window_last_day_of_month():
    window = compute_time_window(date(2025, 1, 1), today=date(2025, 1, 31))
    assert window.days_elapsed == 31
    assert window.days_remaining == 0


def test_history_window_spans_three_full_months():
    """Window crosses the year boundary: start of month-3 through end of month-1"""
    start, end = history_window(date(2025, 2, 1))
    assert start == date(2024, 11, 1)
    assert end == date(2025, 1, 31)


def test_historical_average_divides_by_months_with_data():
    """Two months of data average over two, not three"""
    transactions = [
        make_transaction("1", date(2024, 12, 5), "400", expense_type="variable"),
        make_transaction("2", date(2024, 12, 20), "200", expense_type="variable"),
        make_transaction("3", date(2025, 2, 15), "300", expense_type="variable"),
    ]

    history = compute_historical_average(transactions, date(2025, 3, 1))

    assert history.historical_months_count == 2
    assert history.historical_variable_avg == Decimal("450")  # (600 + 300) / 2


def test_historical_average_filters_status_type_and_window():
    transactions = [
        make_transaction("fixed", date(2025, 1, 5), "999", expense_type="fixed"),
        make_transaction("planned", date(2025, 1, 5), "999", status="planned", expense_type="variable"),
        make_transaction("income", date(2025, 1, 5), "999", kind="INCOME"),
        make_transaction("too_old", date(2024, 11, 30), "999", expense_type="variable"),
        make_transaction("current", date(2025, 3, 2), "999", expense_type="variable"),
        make_transaction("ok", date(2024, 12, 1), "120", expense_type="variable"),
    ]

    history = compute_historical_average(transactions, date(2025, 3, 1))

    assert history.historical_months_count == 1
    assert history.historical_variable_avg == Decimal("120")


def test_historical_average_empty_is_valid():
    history = compute_historical_average([], date(2025, 3, 1))
    assert history.historical_variable_avg == 0
    assert history.historical_months_count == 0


def test_compute_future_engine_in_month_run_rate():
    """1000 - 400 - (150/10 * 20) = 300"""
    result = compute_future_engine(_inputs())

    assert result.daily_variable_rate == Decimal("15")
    assert result.run_rate_source == "in_month"
    assert result.days_remaining == 20
    assert result.projected_variable_remaining == Decimal("300")
    assert result.total_projected_expenses == Decimal("700")
    assert result.projected_balance == Decimal("300")
    assert result.historical_variable_avg == Decimal("300")


def test_compute_future_engine_historical_fallback_before_first_day():
    """No elapsed days: historical average spread over the month"""
    result = compute_future_engine(_inputs(days_elapsed=0, confirmed_variable_this_month=Decimal("0")))

    assert result.run_rate_source == "historical"
    assert result.daily_variable_rate == Decimal("10")  # 300 / 30
    assert result.projected_variable_remaining == Decimal("300")
    assert result.projected_balance == Decimal("300")


def test_compute_future_engine_deterministic():
    inputs = _inputs(current_balance=Decimal("123.45"), confirmed_variable_this_month=Decimal("77.7"), days_elapsed=7)
    assert compute_future_engine(inputs) == compute_future_engine(inputs)


def test_compute_future_engine_negative_balance_is_danger():
    result = compute_future_engine(_inputs(current_balance=Decimal("-50")))

    assert result.projected_balance == Decimal("-750")
    assert result.risk_level == "danger"
    assert result.risk_percentage == 0
    assert result.safe_spending_zone == 0


def test_compute_future_engine_risk_levels_and_buffer():
    # Buffer = 10% of 1000 = 100; projected 300 >= 100
    assert compute_future_engine(_inputs()).risk_level == "safe"
    # projected = 1000 - 850 - 100 = 50, between 0 and the buffer
    caution = compute_future_engine(_inputs(pending_fixed_expenses=Decimal("850"), confirmed_variable_this_month=Decimal("50")))
    assert caution.projected_balance == Decimal("50")
    assert caution.risk_level == "caution"
    # 1000 - 400 - 100 buffer
    assert compute_future_engine(_inputs()).safe_spending_zone == Decimal("500")


def test_compute_future_engine_risk_percentage():
    # 50 + 300/1000 * 50
    assert compute_future_engine(_inputs()).risk_percentage == Decimal("65")
    # projected -500: (1000 - 500) / 1000 * 50
    result = compute_future_engine(_inputs(pending_fixed_expenses=Decimal("1200")))
    assert result.projected_balance == Decimal("-500")
    assert result.risk_percentage == Decimal("25")


def test_compute_future_engine_confidence_levels():
    assert compute_future_engine(_inputs()).confidence_level == "high"
    assert compute_future_engine(_inputs(days_elapsed=2)).confidence_level == "medium"
    assert compute_future_engine(_inputs(historical_variable_avg=Decimal("0"), days_elapsed=3)).confidence_level == "medium"
    low = compute_future_engine(_inputs(historical_variable_avg=Decimal("0"), days_elapsed=1))
    assert low.confidence_level == "low"
    assert low.is_data_sufficient is False


@pytest.mark.parametrize("days_in_month", [0, -1])
def test_compute_future_engine_rejects_non_positive_month(days_in_month):
    with pytest.raises(InvalidInputError):
        compute_future_engine(_inputs(days_in_month=days_in_month, days_elapsed=0))


def test_compute_future_engine_rejects_invalid_ranges():
    with pytest.raises(InvalidInputError):
        compute_future_engine(_inputs(days_elapsed=31))
    with pytest.raises(InvalidInputError):
        compute_future_engine(_inputs(pending_fixed_expenses=Decimal("-1")))


def test_project_month_from_transactions(sample_transactions):
    """
    March 2025, today = 10th:
    - pending fixed: rent 1200 + gym 60
    - confirmed variable: groceries 100 over 10 days -> 10/day * 21 days
    - history: Dec 600, Jan 300 -> avg 450
    """
    result = project_month(date(2025, 3, 1), Decimal("2000"), sample_transactions, today=TODAY)

    assert result.days_elapsed == 10
    assert result.days_remaining == 21
    assert result.daily_variable_rate == Decimal("10")
    assert result.projected_balance == Decimal("2000") - Decimal("1260") - Decimal("210")
    assert result.historical_variable_avg == Decimal("450")
    assert result.historical_months_count == 2
