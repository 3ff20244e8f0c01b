"""
Balance state storage interface.

The risk notifier only needs two operations: read the last observed state for
a key and overwrite it. Keys have the form "{household_id}|{YYYY-MM}".
Implementations raise StateStoreError when the backend is unavailable.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from household_forecast.domain.exceptions import InvalidInputError
from household_forecast.domain.models import BalanceState
from household_forecast.utils.date_utils import parse_month_key


def balance_state_key(household_id: str, month_key: str) -> str:
    """Build the storage key, validating both parts"""
    if not household_id or "|" in household_id:
        raise InvalidInputError(f"Invalid household id: {household_id!r}")
    parse_month_key(month_key)
    return f"{household_id}|{month_key}"


class BalanceStateStore(ABC):
    """Abstract key-value store for the last observed balance state"""

    @abstractmethod
    def get(self, key: str) -> Optional[BalanceState]:
        """
        Retrieve the state stored under key.

        Returns:
            The state if one was recorded, None otherwise

        Raises:
            StateStoreError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, state: BalanceState) -> None:
        """
        Overwrite the state stored under key.

        Raises:
            StateStoreError: If the backend cannot be written
        """
        pass


class InMemoryBalanceStateStore(BalanceStateStore):
    """Process-local store, used in tests and single-process callers"""

    def __init__(self, initial: Optional[Dict[str, BalanceState]] = None):
        self._states: Dict[str, BalanceState] = dict(initial or {})

    def get(self, key: str) -> Optional[BalanceState]:
        return self._states.get(key)

    def set(self, key: str, state: BalanceState) -> None:
        self._states[key] = state

    def __len__(self) -> int:
        return len(self._states)
