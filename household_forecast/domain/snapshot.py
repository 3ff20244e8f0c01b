"""Monthly totals and forecast state derived from a month's transactions"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from household_forecast.domain.models import (
    BalanceState,
    ForecastState,
    ProjectionTotals,
    Transaction,
    TransactionKind,
    TransactionStatus,
)
from household_forecast.utils.date_utils import days_between, end_of_month, month_key, same_month, start_of_month

ZERO = Decimal("0")


def compute_projection_totals(transactions: Iterable[Transaction], month: date) -> ProjectionTotals:
    """
    Realized and pending totals for a month, classified strictly by status.

    - Realized = confirmed income - confirmed expenses
    - Pending  = planned income / planned expenses
    - Projected = realized + pending income - pending expenses

    Transactions belong to the month of their effective date. Cancelled
    transactions and transfers do not move the household balance.
    """
    income_realized = expense_realized = ZERO
    income_planned = expense_planned = ZERO

    for txn in transactions:
        if txn.status == TransactionStatus.CANCELLED or not same_month(txn.effective_date, month):
            continue
        if txn.kind == TransactionKind.INCOME:
            if txn.status == TransactionStatus.CONFIRMED:
                income_realized += txn.amount
            else:
                income_planned += txn.amount
        elif txn.kind == TransactionKind.EXPENSE:
            if txn.status == TransactionStatus.CONFIRMED:
                expense_realized += txn.amount
            else:
                expense_planned += txn.amount

    realized = income_realized - expense_realized
    totals = ProjectionTotals(
        projected_balance=realized + income_planned - expense_planned,
        realized_balance=realized,
        pending_expenses=expense_planned,
        pending_income=income_planned,
    )

    logging.debug(
        "Projection totals computed",
        extra={"month_key": month_key(month), "projected_balance": str(totals.projected_balance)},
    )
    return totals


def compute_forecast_state(
    totals: ProjectionTotals,
    month: date,
    today: Optional[date] = None,
    preview_min_days: int = 5,
) -> ForecastState:
    """
    Month-level risk flags.

    The risk preview is an early warning: the month projects negative, bills are
    still pending, and at least `preview_min_days` remain to act on it.
    """
    if today is None:
        today = date.today()

    projected = totals.projected_balance
    is_negative = projected < 0
    days_until_month_end = days_between(end_of_month(month), today)
    month_not_ended = today <= end_of_month(month)

    return ForecastState(
        is_negative=is_negative,
        risk_amount=abs(projected) if is_negative else ZERO,
        balance_state=BalanceState.from_balance(projected),
        days_until_month_end=days_until_month_end,
        show_risk_preview=(
            is_negative
            and totals.pending_expenses > 0
            and month_not_ended
            and days_until_month_end >= preview_min_days
        ),
    )
