"""Overdue and coverage-risk detection over planned expenses"""

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from household_forecast.domain.models import (
    CoverageRiskExpense,
    OverdueExpense,
    RiskAssessment,
    Transaction,
)
from household_forecast.utils.date_utils import days_between


def find_overdue_expenses(transactions: Iterable[Transaction], today: date) -> List[OverdueExpense]:
    """Planned expenses whose effective date is strictly before today"""
    return [
        OverdueExpense(
            id=txn.id,
            description=txn.description,
            amount=txn.amount,
            due_date=txn.effective_date,
            days_overdue=days_between(today, txn.effective_date),
            category_name=txn.category_name,
            subcategory_name=txn.subcategory_name,
        )
        for txn in transactions
        if txn.is_planned_expense and txn.effective_date < today
    ]


def compute_risk_assessment(
    transactions: Iterable[Transaction],
    realized_balance: Decimal,
    projected_balance: Decimal,
    today: Optional[date] = None,
    coverage_window_days: int = 7,
) -> RiskAssessment:
    """
    Assess upcoming payment risk.

    Coverage risk is only checked when nothing is overdue and the month does not
    already project negative: a planned expense due within 1..coverage_window_days
    whose amount exceeds the realized balance.
    """
    if today is None:
        today = date.today()

    transactions = list(transactions)
    overdue = find_overdue_expenses(transactions, today)

    coverage: List[CoverageRiskExpense] = []
    if not overdue and projected_balance >= 0:
        for txn in transactions:
            if not txn.is_planned_expense:
                continue
            days_until_due = days_between(txn.effective_date, today)
            if not 1 <= days_until_due <= coverage_window_days:
                continue
            if txn.amount <= realized_balance:
                continue
            coverage.append(
                CoverageRiskExpense(
                    id=txn.id,
                    description=txn.description,
                    amount=txn.amount,
                    due_date=txn.effective_date,
                    days_until_due=days_until_due,
                    category_name=txn.category_name,
                    subcategory_name=txn.subcategory_name,
                )
            )

    return RiskAssessment(overdue_expenses=overdue, coverage_risk_expenses=coverage)
