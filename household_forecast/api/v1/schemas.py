"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from household_forecast.domain.models import (
    BalanceState,
    ExpenseType,
    InsightSeverity,
    InsightType,
    RiskEventKind,
    Transaction,
    TransactionKind,
    TransactionStatus,
)

MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class TransactionSchema(BaseModel):
    """Transaction record supplied by the caller's data source"""

    id: str = Field(..., min_length=1)
    date: date
    due_date: Optional[date] = None
    amount: Decimal = Field(..., ge=0, description="Non-negative magnitude; direction comes from kind")
    kind: TransactionKind
    status: TransactionStatus
    expense_type: Optional[ExpenseType] = None
    description: Optional[str] = None
    category_name: Optional[str] = None
    subcategory_name: Optional[str] = None

    def to_domain(self) -> Transaction:
        return Transaction(**self.model_dump())


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    household_id: str = Field(..., min_length=1, description="Household identifier")
    month: str = Field(..., pattern=MONTH_KEY_PATTERN, description="Selected month (YYYY-MM)")
    current_balance: Decimal = Field(..., description="Current available balance, may be negative")
    transactions: List[TransactionSchema] = Field(
        default_factory=list,
        description="Selected month plus the preceding history window",
    )
    today: Optional[date] = Field(None, description="Reference date (defaults to the server date)")


class EngineSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    projected_balance: Decimal
    historical_variable_avg: Decimal
    historical_months_count: int
    days_elapsed: int
    days_in_month: int
    days_remaining: int
    daily_variable_rate: Decimal
    run_rate_source: str
    projected_variable_remaining: Decimal
    total_projected_expenses: Decimal
    safe_spending_zone: Decimal
    risk_level: str
    risk_percentage: Decimal
    is_data_sufficient: bool
    confidence_level: str


class TotalsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    projected_balance: Decimal
    realized_balance: Decimal
    pending_expenses: Decimal
    pending_income: Decimal


class InsightSchema(BaseModel):
    """Insight as message key + raw params; clients translate at render time"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: InsightType
    severity: InsightSeverity
    message_key: str
    params: Dict[str, Any]
    value: Optional[Decimal] = None
    action_hint_key: Optional[str] = None


class RiskEventSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: RiskEventKind
    title_key: str
    description_key: str
    params: Dict[str, Any]
    amount: Optional[Decimal] = None
    household_id: Optional[str] = None
    month_key: Optional[str] = None


class OverdueExpenseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: Optional[str] = None
    amount: Decimal
    due_date: date
    days_overdue: int


class CoverageRiskExpenseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: Optional[str] = None
    amount: Decimal
    due_date: date
    days_until_due: int


class RiskAssessmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    overdue_expenses: List[OverdueExpenseSchema]
    coverage_risk_expenses: List[CoverageRiskExpenseSchema]


class ForecastStateSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_negative: bool
    risk_amount: Decimal
    balance_state: BalanceState
    days_until_month_end: int
    show_risk_preview: bool


class ForecastResponse(BaseModel):
    """Response for POST /v1/forecast"""

    household_id: str
    month: str
    engine: EngineSchema
    totals: TotalsSchema
    insights: List[InsightSchema]
    risk_event: Optional[RiskEventSchema] = None
    risk_assessment: RiskAssessmentSchema
    forecast: ForecastStateSchema


class RiskReducedRequest(BaseModel):
    """Request body for POST /v1/risk-reduced"""

    amount: Decimal = Field(..., description="Deficit reduction achieved by a user decision")


class RiskReducedResponse(BaseModel):
    event: Optional[RiskEventSchema] = None


class BalanceStateResponse(BaseModel):
    """Response for GET /v1/balance-state"""

    key: str
    state: Optional[BalanceState] = None
