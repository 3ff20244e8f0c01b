"""End-of-month projection engine - core business logic for the balance forecast"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from household_forecast.domain.exceptions import InvalidInputError
from household_forecast.domain.models import (
    ExpenseType,
    FutureEngineInput,
    FutureEngineResult,
    HistoricalAverage,
    TimeWindow,
    Transaction,
    TransactionKind,
    TransactionStatus,
    to_decimal,
)
from household_forecast.utils.date_utils import (
    add_months,
    days_in_month,
    month_key,
    month_range,
    same_month,
    start_of_month,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def compute_time_window(selected_month: date, today: Optional[date] = None) -> TimeWindow:
    """
    Derive elapsed/remaining days of selected_month relative to today.

    Months other than the one containing today are treated as fully elapsed,
    so past and future months show a completed-month view.
    """
    if today is None:
        today = date.today()

    total_days = days_in_month(selected_month)

    if not same_month(selected_month, today):
        return TimeWindow(days_elapsed=total_days, days_in_month=total_days, days_remaining=0)

    # Today counts as elapsed
    return TimeWindow(
        days_elapsed=today.day,
        days_in_month=total_days,
        days_remaining=total_days - today.day,
    )


def history_window(selected_month: date, months: int = 3) -> Tuple[date, date]:
    """Inclusive range covering the `months` full calendar months before selected_month"""
    if months <= 0:
        raise InvalidInputError(f"History window must span at least one month, got {months}")
    return month_range(add_months(selected_month, -months), add_months(selected_month, -1))


def compute_historical_average(
    transactions: Iterable[Transaction],
    selected_month: date,
    months: int = 3,
) -> HistoricalAverage:
    """
    Average monthly variable spending over the months preceding selected_month.

    Only confirmed variable EXPENSE transactions dated inside the history window
    count. The mean is taken over the months that actually have data, so two
    months of history divide by two, not by the window length.
    """
    start, end = history_window(selected_month, months)

    monthly_totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        if (
            txn.kind == TransactionKind.EXPENSE
            and txn.status == TransactionStatus.CONFIRMED
            and txn.expense_type == ExpenseType.VARIABLE
            and start <= txn.date <= end
        ):
            monthly_totals[month_key(txn.date)] += txn.amount

    if not monthly_totals:
        return HistoricalAverage(historical_variable_avg=ZERO, historical_months_count=0)

    total = sum(monthly_totals.values(), ZERO)
    return HistoricalAverage(
        historical_variable_avg=total / len(monthly_totals),
        historical_months_count=len(monthly_totals),
    )


def _validate_days(inputs: FutureEngineInput) -> None:
    if inputs.days_in_month <= 0:
        raise InvalidInputError(f"days_in_month must be positive, got {inputs.days_in_month}")
    if inputs.days_elapsed < 0 or inputs.days_elapsed > inputs.days_in_month:
        raise InvalidInputError(
            f"days_elapsed must be within 0..{inputs.days_in_month}, got {inputs.days_elapsed}"
        )


def _risk_percentage(current_balance: Decimal, projected: Decimal) -> Decimal:
    """Progress-bar value: 100 = fully safe, 0 = nothing left"""
    if current_balance <= 0:
        return ZERO
    if projected >= current_balance:
        return HUNDRED
    if projected <= 0:
        percentage = max(ZERO, (current_balance + projected) / current_balance * 50)
    else:
        percentage = 50 + projected / current_balance * 50
    return max(ZERO, min(HUNDRED, percentage))


def compute_future_engine(inputs: FutureEngineInput) -> FutureEngineResult:
    """
    Project the end-of-month balance.

    Formula:
        projected = current_balance - pending_fixed - daily_rate * days_remaining

    The daily variable rate is the in-month run-rate (confirmed variable spend
    divided by days elapsed) once at least one day has elapsed; before that the
    historical monthly average spread over the month is the only estimate.

    Raises:
        InvalidInputError: On non-positive days_in_month, days_elapsed out of
            range, or negative magnitudes
    """
    _validate_days(inputs)

    current_balance = to_decimal(inputs.current_balance, "current_balance")
    pending_fixed = to_decimal(inputs.pending_fixed_expenses, "pending_fixed_expenses")
    confirmed_variable = to_decimal(inputs.confirmed_variable_this_month, "confirmed_variable_this_month")
    historical_avg = to_decimal(inputs.historical_variable_avg, "historical_variable_avg")
    buffer_percent = to_decimal(inputs.safety_buffer_percent, "safety_buffer_percent")

    for name, value in (
        ("pending_fixed_expenses", pending_fixed),
        ("confirmed_variable_this_month", confirmed_variable),
        ("historical_variable_avg", historical_avg),
    ):
        if value < 0:
            raise InvalidInputError(f"{name} must be non-negative, got {value}")

    days_remaining = inputs.days_in_month - inputs.days_elapsed

    if inputs.days_elapsed > 0:
        daily_rate = confirmed_variable / inputs.days_elapsed
        run_rate_source = "in_month"
    else:
        daily_rate = historical_avg / inputs.days_in_month
        run_rate_source = "historical"

    projected_variable_remaining = daily_rate * days_remaining
    total_projected_expenses = pending_fixed + projected_variable_remaining
    projected = current_balance - total_projected_expenses

    safety_buffer = abs(current_balance) * buffer_percent / HUNDRED
    safe_spending_zone = max(ZERO, current_balance - pending_fixed - safety_buffer)

    if projected >= safety_buffer:
        risk_level = "safe"
    elif projected >= 0:
        risk_level = "caution"
    else:
        risk_level = "danger"

    if historical_avg > 0 and inputs.days_elapsed >= 7:
        confidence_level = "high"
    elif historical_avg > 0 or inputs.days_elapsed >= 3:
        confidence_level = "medium"
    else:
        confidence_level = "low"

    return FutureEngineResult(
        projected_balance=projected,
        historical_variable_avg=historical_avg,
        days_elapsed=inputs.days_elapsed,
        days_in_month=inputs.days_in_month,
        days_remaining=days_remaining,
        daily_variable_rate=daily_rate,
        run_rate_source=run_rate_source,
        projected_variable_remaining=projected_variable_remaining,
        total_projected_expenses=total_projected_expenses,
        safe_spending_zone=safe_spending_zone,
        risk_level=risk_level,
        risk_percentage=_risk_percentage(current_balance, projected),
        is_data_sufficient=historical_avg > 0,
        confidence_level=confidence_level,
    )


def project_month(
    selected_month: date,
    current_balance: Decimal,
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
    history_months: int = 3,
    safety_buffer_percent: Decimal = Decimal("10"),
) -> FutureEngineResult:
    """
    Main entry point: derive engine inputs from a transaction snapshot and project.

    `transactions` may mix the selected month with the preceding history; each
    input is filtered out of it by status, kind, expense type and date.
    """
    transactions = list(transactions)
    month_start = start_of_month(selected_month)

    # Current-month figures use the effective date (due date wins for bills)
    in_month = [t for t in transactions if same_month(t.effective_date, month_start)]
    pending_fixed = sum(
        (t.amount for t in in_month if t.is_planned_expense and t.expense_type == ExpenseType.FIXED),
        ZERO,
    )
    confirmed_variable = sum(
        (t.amount for t in in_month if t.is_confirmed_expense and t.expense_type == ExpenseType.VARIABLE),
        ZERO,
    )

    window = compute_time_window(month_start, today)
    history = compute_historical_average(transactions, month_start, history_months)

    result = compute_future_engine(
        FutureEngineInput(
            current_balance=to_decimal(current_balance, "current_balance"),
            pending_fixed_expenses=pending_fixed,
            confirmed_variable_this_month=confirmed_variable,
            historical_variable_avg=history.historical_variable_avg,
            days_elapsed=window.days_elapsed,
            days_in_month=window.days_in_month,
            safety_buffer_percent=to_decimal(safety_buffer_percent, "safety_buffer_percent"),
        )
    )
    result.historical_months_count = history.historical_months_count

    logging.debug(
        "Projection computed",
        extra={
            "month_key": month_key(month_start),
            "projected_balance": str(result.projected_balance),
            "run_rate_source": result.run_rate_source,
            "historical_months_count": history.historical_months_count,
        },
    )
    return result
