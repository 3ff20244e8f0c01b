"""Risk notification state machine - one alert per balance sign change"""

import logging
from decimal import Decimal
from typing import Callable, Optional, Union

from household_forecast.domain.exceptions import StateStoreError
from household_forecast.domain.models import BalanceState, RiskEvent, RiskEventKind, to_decimal
from household_forecast.domain.state_store import BalanceStateStore, balance_state_key

EventListener = Callable[[RiskEvent], None]


class RiskNotifier:
    """
    Edge-triggered alerts for the projected month-end balance.

    State per (household, month):
    - NEGATIVE when projected_balance < 0
    - NON_NEGATIVE otherwise

    Events:
    - NON_NEGATIVE -> NEGATIVE: "risk" with the deficit amount
    - NEGATIVE -> NON_NEGATIVE: "recovered"
    - first observation or unchanged state: nothing

    The read-then-write against the store is not atomic. Two evaluations
    racing on the same key may both see the old state and both emit; the
    store is last-write-wins, so at most one duplicate alert results.
    """

    def __init__(self, store: BalanceStateStore, emit: Optional[EventListener] = None):
        self.store = store
        self.emit = emit

    def _read_state(self, key: str) -> Optional[BalanceState]:
        try:
            return self.store.get(key)
        except StateStoreError as e:
            # Alerting is best-effort: an unreadable store means "no prior observation"
            logging.warning(f"Balance state read failed: {e}", extra={"state_key": key})
            return None

    def _write_state(self, key: str, state: BalanceState) -> None:
        try:
            self.store.set(key, state)
        except StateStoreError as e:
            logging.warning(f"Balance state write failed: {e}", extra={"state_key": key})

    def _dispatch(self, event: RiskEvent) -> RiskEvent:
        if self.emit is not None:
            self.emit(event)
        return event

    def evaluate_risk_transition(
        self,
        household_id: str,
        month_key: str,
        projected_balance: Union[Decimal, int, float, str],
    ) -> Optional[RiskEvent]:
        """
        Compare the current balance state with the persisted one and emit on change.

        The current state is always persisted afterwards, so repeating a call
        with the same sign is a no-op.

        Raises:
            InvalidInputError: On an empty household id or a malformed month key
        """
        key = balance_state_key(household_id, month_key)
        projected_balance = to_decimal(projected_balance, "projected_balance")
        current_state = BalanceState.from_balance(projected_balance)
        previous_state = self._read_state(key)

        event: Optional[RiskEvent] = None
        if previous_state is not None and previous_state != current_state:
            if current_state == BalanceState.NEGATIVE:
                amount = abs(projected_balance)
                event = RiskEvent(
                    kind=RiskEventKind.RISK,
                    title_key="toasts.risk_month_negative.title",
                    description_key="toasts.risk_month_negative.description",
                    params={"amount": amount},
                    amount=amount,
                    household_id=household_id,
                    month_key=month_key,
                )
            else:
                event = RiskEvent(
                    kind=RiskEventKind.RECOVERED,
                    title_key="toasts.month_recovered.title",
                    description_key="toasts.month_recovered.description",
                    household_id=household_id,
                    month_key=month_key,
                )
            logging.info(
                "Balance state transition",
                extra={
                    "state_key": key,
                    "previous_state": previous_state.value,
                    "current_state": current_state.value,
                    "event": event.kind.value,
                },
            )

        self._write_state(key, current_state)

        if event is not None:
            self._dispatch(event)
        return event

    def notify_risk_reduced(self, amount: Union[Decimal, int, float, str]) -> Optional[RiskEvent]:
        """Direct feedback that a user decision shrank the deficit; ignored unless amount > 0"""
        amount = to_decimal(amount)
        if amount <= 0:
            return None

        return self._dispatch(
            RiskEvent(
                kind=RiskEventKind.RISK_REDUCED,
                title_key="toasts.good_decision.title",
                description_key="toasts.good_decision.description",
                params={"amount": amount},
                amount=amount,
            )
        )
