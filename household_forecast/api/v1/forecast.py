"""POST /v1/forecast - End-of-month projection, insights and risk transition"""

import dataclasses
import logging
import time
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from household_forecast.api.dependencies import get_request_id, get_state_store, get_webhook_client
from household_forecast.api.v1.schemas import (
    EngineSchema,
    ForecastRequest,
    ForecastResponse,
    ForecastStateSchema,
    InsightSchema,
    RiskAssessmentSchema,
    RiskEventSchema,
    TotalsSchema,
)
from household_forecast.config import settings
from household_forecast.domain.exceptions import InvalidInputError
from household_forecast.domain.future_engine import project_month
from household_forecast.domain.insights import compute_insights
from household_forecast.domain.notifications import RiskNotifier
from household_forecast.domain.risk_assessment import compute_risk_assessment
from household_forecast.domain.snapshot import compute_forecast_state, compute_projection_totals
from household_forecast.infrastructure.clients.webhook import RiskEventWebhookClient, deliver_event
from household_forecast.infrastructure.database.repositories import SqlBalanceStateStore
from household_forecast.infrastructure.database.session import get_db
from household_forecast.infrastructure.observability.logging import log_forecast
from household_forecast.infrastructure.observability.metrics import record_forecast
from household_forecast.utils.date_utils import parse_month_key, same_month

router = APIRouter()


@router.post("/forecast", response_model=ForecastResponse)
def create_forecast(
    request_body: ForecastRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    state_store: SqlBalanceStateStore = Depends(get_state_store),
    webhook_client: RiskEventWebhookClient = Depends(get_webhook_client),
):
    """
    Project the selected month and evaluate its risk.

    Flow:
    1. Project the month-end balance from balance + transaction snapshot
    2. Derive realized/pending totals for the month
    3. Generate insights against the projected balance
    4. Evaluate the balance state transition (persists the new state)
    5. Schedule webhook delivery of any risk event
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        month = parse_month_key(request_body.month)
        today = request_body.today or date.today()
        transactions = [t.to_domain() for t in request_body.transactions]

        # 1. Projection
        engine = project_month(
            month,
            request_body.current_balance,
            transactions,
            today=today,
            history_months=settings.history_months,
            safety_buffer_percent=Decimal(str(settings.safety_buffer_percent)),
        )

        # 2. Totals: realized/pending from the month, projection from the engine
        month_transactions = [t for t in transactions if same_month(t.effective_date, month)]
        totals = dataclasses.replace(
            compute_projection_totals(month_transactions, month),
            projected_balance=engine.projected_balance,
        )

        # 3. Insights
        insights = compute_insights(
            totals,
            month_transactions,
            month,
            today=today,
            risk_ratio=settings.insight_risk_ratio,
            largest_expense_ratio=settings.largest_expense_ratio,
        )

        # 4. State machine
        notifier = RiskNotifier(state_store)
        risk_event = notifier.evaluate_risk_transition(
            request_body.household_id,
            request_body.month,
            engine.projected_balance,
        )
        db.commit()

        risk_assessment = compute_risk_assessment(
            month_transactions,
            totals.realized_balance,
            totals.projected_balance,
            today=today,
            coverage_window_days=settings.coverage_window_days,
        )
        forecast = compute_forecast_state(
            totals, month, today=today, preview_min_days=settings.risk_preview_min_days
        )

        # 5. Webhook
        if risk_event is not None and webhook_client.enabled:
            background_tasks.add_task(deliver_event, webhook_client, risk_event)

        duration_ms = (time.time() - start_time) * 1000
        record_forecast(
            engine.risk_level,
            [i.type.value for i in insights],
            risk_event.kind.value if risk_event else None,
        )
        log_forecast(
            request_id,
            request_body.household_id,
            request_body.month,
            str(engine.projected_balance),
            len(insights),
            risk_event.kind.value if risk_event else None,
            duration_ms,
        )

        return ForecastResponse(
            household_id=request_body.household_id,
            month=request_body.month,
            engine=EngineSchema.model_validate(engine),
            totals=TotalsSchema.model_validate(totals),
            insights=[InsightSchema.model_validate(i) for i in insights],
            risk_event=RiskEventSchema.model_validate(risk_event) if risk_event else None,
            risk_assessment=RiskAssessmentSchema.model_validate(risk_assessment),
            forecast=ForecastStateSchema.model_validate(forecast),
        )

    except InvalidInputError as e:
        db.rollback()
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
