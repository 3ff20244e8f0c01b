"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from household_forecast.domain.exceptions import InvalidInputError
from household_forecast.utils.date_utils import parse_date


class TransactionKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"


class TransactionStatus(str, Enum):
    PLANNED = "planned"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ExpenseType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"


class BalanceState(str, Enum):
    """Sign of the projected month-end balance, persisted per household+month"""

    NEGATIVE = "NEGATIVE"
    NON_NEGATIVE = "NON_NEGATIVE"

    @classmethod
    def from_balance(cls, projected_balance: Decimal) -> "BalanceState":
        return cls.NEGATIVE if projected_balance < 0 else cls.NON_NEGATIVE


class InsightSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class InsightType(str, Enum):
    MONTH_CLOSES_NEGATIVE = "month_closes_negative"
    DAYS_IN_RED = "days_in_red"
    POSTPONE_BENEFIT = "postpone_benefit"
    PENDING_INCOME_HELPS = "pending_income_helps"
    OVERDUE_PAYMENTS = "overdue_payments"
    LARGEST_PENDING_EXPENSE = "largest_pending_expense"


class RiskEventKind(str, Enum):
    RISK = "risk"
    RECOVERED = "recovered"
    RISK_REDUCED = "risk_reduced"


def to_decimal(value: Union[Decimal, int, float, str], name: str = "amount") -> Decimal:
    """Coerce a numeric value to Decimal; floats go through str() to avoid binary noise"""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidInputError(f"{name} must be numeric, got bool")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except ArithmeticError as e:
            raise InvalidInputError(f"{name} is not a number: {value!r}") from e
    elif isinstance(value, float):
        result = Decimal(str(value))
    else:
        raise InvalidInputError(f"{name} must be numeric, got {type(value).__name__}")
    if not result.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return result


@dataclass
class Transaction:
    """Household transaction as returned by the external data source"""

    id: str
    date: date
    amount: Decimal
    kind: TransactionKind
    status: TransactionStatus
    due_date: Optional[date] = None
    expense_type: Optional[ExpenseType] = None
    description: Optional[str] = None
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None

    def __post_init__(self) -> None:
        self.date = parse_date(self.date)
        if self.due_date is not None:
            self.due_date = parse_date(self.due_date)
        self.amount = to_decimal(self.amount)
        if self.amount < 0:
            raise InvalidInputError(f"Transaction {self.id}: amount must be non-negative, got {self.amount}")
        try:
            self.kind = TransactionKind(self.kind)
            self.status = TransactionStatus(self.status)
            if self.expense_type is not None:
                self.expense_type = ExpenseType(self.expense_type)
        except ValueError as e:
            raise InvalidInputError(f"Transaction {self.id}: {e}") from e

    @property
    def effective_date(self) -> date:
        """due_date when present, else date"""
        return self.due_date or self.date

    @property
    def is_planned_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE and self.status == TransactionStatus.PLANNED

    @property
    def is_confirmed_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE and self.status == TransactionStatus.CONFIRMED


@dataclass
class ProjectionTotals:
    """Household-wide month totals feeding the insight generator"""

    projected_balance: Decimal
    realized_balance: Decimal
    pending_expenses: Decimal
    pending_income: Decimal


@dataclass
class TimeWindow:
    days_elapsed: int
    days_in_month: int
    days_remaining: int


@dataclass
class HistoricalAverage:
    historical_variable_avg: Decimal
    historical_months_count: int


@dataclass
class FutureEngineInput:
    """Inputs of the end-of-month projection"""

    current_balance: Decimal
    pending_fixed_expenses: Decimal
    confirmed_variable_this_month: Decimal
    historical_variable_avg: Decimal
    days_elapsed: int
    days_in_month: int
    safety_buffer_percent: Decimal = Decimal("10")


@dataclass
class FutureEngineResult:
    """End-of-month projection with its breakdown"""

    projected_balance: Decimal
    historical_variable_avg: Decimal
    days_elapsed: int
    days_in_month: int
    days_remaining: int
    daily_variable_rate: Decimal
    run_rate_source: str  # "in_month" or "historical"
    projected_variable_remaining: Decimal
    total_projected_expenses: Decimal
    safe_spending_zone: Decimal
    risk_level: str  # "safe" | "caution" | "danger"
    risk_percentage: Decimal
    is_data_sufficient: bool
    confidence_level: str  # "high" | "medium" | "low"
    historical_months_count: int = 0


@dataclass
class DeterministicInsight:
    """Finding rendered later as t(message_key, params); never holds display text"""

    id: str
    type: InsightType
    severity: InsightSeverity
    message_key: str
    params: Dict[str, Any]
    value: Optional[Decimal] = None
    action_hint_key: Optional[str] = None


@dataclass
class RiskEvent:
    """Alert emitted on a balance sign transition or an explicit risk reduction"""

    kind: RiskEventKind
    title_key: str
    description_key: str
    params: Dict[str, Any] = field(default_factory=dict)
    amount: Optional[Decimal] = None
    household_id: Optional[str] = None
    month_key: Optional[str] = None


@dataclass
class OverdueExpense:
    id: str
    description: Optional[str]
    amount: Decimal
    due_date: date
    days_overdue: int
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None


@dataclass
class CoverageRiskExpense:
    id: str
    description: Optional[str]
    amount: Decimal
    due_date: date
    days_until_due: int
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None


@dataclass
class RiskAssessment:
    overdue_expenses: List[OverdueExpense]
    coverage_risk_expenses: List[CoverageRiskExpense]

    @property
    def has_overdue_expenses(self) -> bool:
        return bool(self.overdue_expenses)

    @property
    def has_coverage_risk(self) -> bool:
        return bool(self.coverage_risk_expenses)


@dataclass
class ForecastState:
    """Month-level risk flags derived from the projection totals"""

    is_negative: bool
    risk_amount: Decimal
    balance_state: BalanceState
    days_until_month_end: int
    show_risk_preview: bool
