"""Data access layer for balance state"""

from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from household_forecast.infrastructure.database.models import BalanceStateRecord
from household_forecast.infrastructure.observability.metrics import state_store_failures_counter
from household_forecast.domain.exceptions import StateStoreError
from household_forecast.domain.models import BalanceState
from household_forecast.domain.state_store import BalanceStateStore


class SqlBalanceStateStore(BalanceStateStore):
    """Balance state store backed by the balance_state table"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[BalanceState]:
        """Fetch the last recorded state for key"""
        try:
            record = self.db.get(BalanceStateRecord, key)
        except SQLAlchemyError as e:
            state_store_failures_counter.labels(operation="get").inc()
            raise StateStoreError(f"Failed to read balance state {key}: {e}") from e

        if record is None:
            return None
        try:
            return BalanceState(record.state)
        except ValueError as e:
            state_store_failures_counter.labels(operation="get").inc()
            raise StateStoreError(f"Unrecognised balance state {record.state!r} stored for {key}") from e

    def set(self, key: str, state: BalanceState) -> None:
        """Insert or overwrite the state for key (caller commits)"""
        household_id, month_key = key.split("|", 1)
        try:
            record = self.db.get(BalanceStateRecord, key)
            if record is None:
                self.db.add(
                    BalanceStateRecord(
                        state_key=key,
                        household_id=household_id,
                        month_key=month_key,
                        state=state.value,
                    )
                )
            else:
                record.state = state.value
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            state_store_failures_counter.labels(operation="set").inc()
            raise StateStoreError(f"Failed to write balance state {key}: {e}") from e
