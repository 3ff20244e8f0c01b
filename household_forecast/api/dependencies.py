"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from household_forecast.infrastructure.clients.webhook import RiskEventWebhookClient
from household_forecast.infrastructure.database.repositories import SqlBalanceStateStore
from household_forecast.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_state_store(db: Session = Depends(get_db)) -> SqlBalanceStateStore:
    """Provide the balance state store bound to the request session"""
    return SqlBalanceStateStore(db)


def get_webhook_client() -> RiskEventWebhookClient:
    """Provide risk event webhook client instance"""
    return RiskEventWebhookClient()
