"""Shared test builders"""

from datetime import date
from decimal import Decimal
from household_forecast.domain.models import Transaction

# Fixed reference date: mid-month, so the selected month is partially elapsed
TODAY = date(2025, 3, 10)


def make_transaction(
    id: str,
    on: date,
    amount: str,
    kind: str = "EXPENSE",
    status: str = "confirmed",
    expense_type: str | None = None,
    due_date: date | None = None,
    description: str | None = None,
) -> Transaction:
    """Build a transaction with string amounts kept exact"""
    return Transaction(
        id=id,
        date=on,
        amount=Decimal(amount),
        kind=kind,
        status=status,
        expense_type=expense_type,
        due_date=due_date,
        description=description,
    )
