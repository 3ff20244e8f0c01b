"""SQLAlchemy ORM models for balance state persistence"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BalanceStateRecord(Base):
    """Last observed balance state per household and month (one row per pair, never deleted)"""

    __tablename__ = "balance_state"

    state_key = Column(Text, primary_key=True)  # "{household_id}|{YYYY-MM}"
    household_id = Column(Text, nullable=False, index=True)
    month_key = Column(String(7), nullable=False)
    state = Column(String(16), nullable=False)  # NEGATIVE | NON_NEGATIVE
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
