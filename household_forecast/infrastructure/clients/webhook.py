"""Risk event webhook client with exponential backoff retry logic"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict

import httpx

from household_forecast.config import settings
from household_forecast.domain.exceptions import WebhookDeliveryError
from household_forecast.domain.models import RiskEvent
from household_forecast.infrastructure.observability.metrics import webhook_failure_counter, webhook_latency_histogram


def event_payload(event: RiskEvent) -> Dict[str, Any]:
    """JSON body for a risk event; amounts travel as decimal strings"""
    return {
        "event": event.kind.value,
        "household_id": event.household_id,
        "month_key": event.month_key,
        "amount": str(event.amount) if event.amount is not None else None,
        "title_key": event.title_key,
        "description_key": event.description_key,
        "params": {k: str(v) if isinstance(v, Decimal) else v for k, v in event.params.items()},
    }


class RiskEventWebhookClient:
    """Client for delivering risk events to a downstream notification service"""

    def __init__(self, webhook_url: str | None = None, timeout: float | None = None):
        self.webhook_url = webhook_url or settings.notification_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def send_event(self, event: RiskEvent) -> None:
        """
        Send a risk event with retry logic.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx responses and network failures; 4xx fails at once
        - Tracks latency histogram and failure counter

        Raises:
            WebhookDeliveryError: On a 4xx response or after the final failed attempt
        """
        if not self.enabled:
            return

        payload = event_payload(event)
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    # 4xx means the payload or endpoint is wrong; resending will not help
                    if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                        raise WebhookDeliveryError(
                            f"Risk event rejected with status {e.response.status_code}"
                        ) from e

                    if attempt >= self.max_retries:
                        raise WebhookDeliveryError(
                            f"Risk event delivery failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    logging.warning(
                        f"Risk event delivery failed, retrying in {backoff}s",
                        extra={"attempt": attempt, "event": event.kind.value},
                    )
                    await asyncio.sleep(backoff)


async def deliver_event(client: RiskEventWebhookClient, event: RiskEvent) -> None:
    """Background task wrapper: delivery failures are logged, never raised into the request"""
    try:
        await client.send_event(event)
    except WebhookDeliveryError as e:
        logging.error(str(e), extra={"event": event.kind.value, "household_id": event.household_id})
