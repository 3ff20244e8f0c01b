"""Risk notification endpoints - explicit risk-reduced feedback and state lookup"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query

from household_forecast.api.dependencies import get_state_store, get_webhook_client
from household_forecast.api.v1.schemas import (
    MONTH_KEY_PATTERN,
    BalanceStateResponse,
    RiskEventSchema,
    RiskReducedRequest,
    RiskReducedResponse,
)
from household_forecast.domain.exceptions import InvalidInputError, StateStoreError
from household_forecast.domain.notifications import RiskNotifier
from household_forecast.domain.state_store import balance_state_key
from household_forecast.infrastructure.clients.webhook import RiskEventWebhookClient, deliver_event
from household_forecast.infrastructure.database.repositories import SqlBalanceStateStore
from household_forecast.infrastructure.observability.metrics import risk_transition_counter

router = APIRouter()


@router.post("/risk-reduced", response_model=RiskReducedResponse)
def risk_reduced(
    request_body: RiskReducedRequest,
    background_tasks: BackgroundTasks,
    state_store: SqlBalanceStateStore = Depends(get_state_store),
    webhook_client: RiskEventWebhookClient = Depends(get_webhook_client),
):
    """
    Emit "your decision reduced the deficit" feedback.

    Returns:
        The emitted event, or no event when amount is not positive
    """
    event = RiskNotifier(state_store).notify_risk_reduced(request_body.amount)
    if event is None:
        return RiskReducedResponse()

    risk_transition_counter.labels(kind=event.kind.value).inc()
    if webhook_client.enabled:
        background_tasks.add_task(deliver_event, webhook_client, event)
    return RiskReducedResponse(event=RiskEventSchema.model_validate(event))


@router.get("/balance-state", response_model=BalanceStateResponse)
def get_balance_state(
    household_id: str = Query(..., min_length=1, description="Household identifier"),
    month: str = Query(..., pattern=MONTH_KEY_PATTERN, description="Month (YYYY-MM)"),
    state_store: SqlBalanceStateStore = Depends(get_state_store),
):
    """
    Retrieve the last observed balance state for a household and month.

    Returns:
        The state key and state (null before the first forecast)
    """
    try:
        key = balance_state_key(household_id, month)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        state = state_store.get(key)
    except StateStoreError:
        raise HTTPException(status_code=503, detail="Balance state storage unavailable")

    return BalanceStateResponse(key=key, state=state)
