"""Deterministic insight generation - severity-ranked findings about the month"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Union

from household_forecast.domain.models import (
    DeterministicInsight,
    InsightSeverity,
    InsightType,
    ProjectionTotals,
    Transaction,
    to_decimal,
)
from household_forecast.utils.date_utils import days_between, month_key

SEVERITY_ORDER = {
    InsightSeverity.CRITICAL: 0,
    InsightSeverity.WARNING: 1,
    InsightSeverity.INFO: 2,
}


def _largest(expenses: List[Transaction]) -> Transaction:
    """Largest by amount; the first one seen wins ties"""
    largest = expenses[0]
    for txn in expenses[1:]:
        if txn.amount > largest.amount:
            largest = txn
    return largest


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def has_risk(totals: ProjectionTotals, risk_ratio: Decimal = Decimal("0.2")) -> bool:
    """Gate: negative projection, or pending bills the projected balance barely covers"""
    projected = totals.projected_balance
    return projected < 0 or (
        totals.pending_expenses > 0 and projected < totals.pending_expenses * risk_ratio
    )


def month_closes_negative(totals: ProjectionTotals) -> Optional[DeterministicInsight]:
    projected = totals.projected_balance
    if projected >= 0:
        return None
    return DeterministicInsight(
        id="month_closes_negative",
        type=InsightType.MONTH_CLOSES_NEGATIVE,
        severity=InsightSeverity.CRITICAL,
        message_key="insights.month_closes_negative",
        params={"amount": abs(projected)},
        value=projected,
    )


def days_in_red(
    totals: ProjectionTotals, transactions: List[Transaction], today: date
) -> Optional[DeterministicInsight]:
    """Days since the earliest confirmed expense, once the realized balance is negative"""
    if totals.realized_balance >= 0:
        return None
    confirmed_expenses = sorted((t for t in transactions if t.is_confirmed_expense), key=lambda t: t.date)
    if not confirmed_expenses:
        return None

    days = days_between(today, confirmed_expenses[0].date)
    if days <= 0:
        return None
    return DeterministicInsight(
        id="days_in_red",
        type=InsightType.DAYS_IN_RED,
        severity=InsightSeverity.WARNING,
        message_key="insights.days_in_red",
        params={"days": days},
        value=Decimal(days),
    )


def postpone_benefit(
    totals: ProjectionTotals, planned_expenses: List[Transaction]
) -> Optional[DeterministicInsight]:
    """What postponing the largest planned expense would do to a negative month"""
    projected = totals.projected_balance
    if not planned_expenses or projected >= 0:
        return None

    largest = _largest(planned_expenses)
    after_postpone = projected + largest.amount
    balances = after_postpone >= 0
    return DeterministicInsight(
        id="postpone_benefit",
        type=InsightType.POSTPONE_BENEFIT,
        severity=InsightSeverity.INFO if balances else InsightSeverity.WARNING,
        message_key="insights.postpone_benefit.balances" if balances else "insights.postpone_benefit.reduces",
        params={
            "description": largest.description,
            "amount": largest.amount,
            "deficit": abs(after_postpone),
        },
        value=largest.amount,
        action_hint_key="insights.action_hint.postpone",
    )


def pending_income_helps(totals: ProjectionTotals) -> Optional[DeterministicInsight]:
    if totals.pending_income <= 0 or totals.projected_balance >= 0:
        return None

    with_income = totals.realized_balance + totals.pending_income - totals.pending_expenses
    balances = with_income >= 0
    return DeterministicInsight(
        id="pending_income_helps",
        type=InsightType.PENDING_INCOME_HELPS,
        severity=InsightSeverity.INFO,
        message_key=(
            "insights.pending_income_helps.balances" if balances else "insights.pending_income_helps.still_missing"
        ),
        params={"amount": totals.pending_income, "missing": abs(with_income)},
        value=totals.pending_income,
    )


def overdue_payments(planned_expenses: List[Transaction], today: date) -> Optional[DeterministicInsight]:
    """Planned expenses whose effective date (due date, else date) is before today"""
    overdue = [t for t in planned_expenses if t.effective_date < today]
    if not overdue:
        return None

    total = sum((t.amount for t in overdue), Decimal("0"))
    return DeterministicInsight(
        id="overdue_payments",
        type=InsightType.OVERDUE_PAYMENTS,
        severity=InsightSeverity.CRITICAL,
        # i18n plural suffixes
        message_key="insights.overdue_payments_one" if len(overdue) == 1 else "insights.overdue_payments_other",
        params={"count": len(overdue), "total": total},
        value=total,
        action_hint_key="insights.action_hint.regularize",
    )


def largest_pending_expense(
    totals: ProjectionTotals,
    planned_expenses: List[Transaction],
    largest_expense_ratio: Decimal = Decimal("0.5"),
) -> Optional[DeterministicInsight]:
    """Flags a single planned expense that dominates a non-negative projection"""
    projected = totals.projected_balance
    if not planned_expenses or projected < 0:
        return None

    largest = _largest(planned_expenses)
    if largest.amount <= projected * largest_expense_ratio:
        return None

    if totals.pending_expenses > 0:
        percentage = _round_half_up(largest.amount / totals.pending_expenses * 100)
    else:
        percentage = 100
    return DeterministicInsight(
        id="largest_pending_expense",
        type=InsightType.LARGEST_PENDING_EXPENSE,
        severity=InsightSeverity.INFO,
        message_key="insights.largest_pending_expense",
        params={
            "description": largest.description,
            "amount": largest.amount,
            "percentage": percentage,
        },
        value=largest.amount,
    )


def compute_insights(
    totals: ProjectionTotals,
    transactions: Iterable[Transaction],
    selected_month: date,
    today: Optional[date] = None,
    risk_ratio: Union[Decimal, float] = Decimal("0.2"),
    largest_expense_ratio: Union[Decimal, float] = Decimal("0.5"),
) -> List[DeterministicInsight]:
    """
    Generate i18n-safe insights for the selected month.

    Every insight carries a message key and raw params (amounts stay numeric);
    translation happens at render time. Returns an empty list when finances are
    healthy. The result is ordered critical, warning, info; insights of equal
    severity keep their generation order.
    """
    if today is None:
        today = date.today()
    risk_ratio = to_decimal(risk_ratio, "risk_ratio")
    largest_expense_ratio = to_decimal(largest_expense_ratio, "largest_expense_ratio")

    if not has_risk(totals, risk_ratio):
        return []

    transactions = list(transactions)
    planned_expenses = [t for t in transactions if t.is_planned_expense]

    candidates = [
        month_closes_negative(totals),
        days_in_red(totals, transactions, today),
        postpone_benefit(totals, planned_expenses),
        pending_income_helps(totals),
        overdue_payments(planned_expenses, today),
        largest_pending_expense(totals, planned_expenses, largest_expense_ratio),
    ]

    # sorted() is stable, so equal severities keep generation order
    insights = sorted(
        (c for c in candidates if c is not None),
        key=lambda i: SEVERITY_ORDER[i.severity],
    )

    logging.debug(
        "Insights generated",
        extra={"month_key": month_key(selected_month), "insight_ids": [i.id for i in insights]},
    )
    return insights
