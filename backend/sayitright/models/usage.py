"""Daily usage tracking model"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint

from sayitright.core.database import Base


class UsageTracking(Base):
    """Per-user, per-day generation counters"""

    __tablename__ = "usage_tracking"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)  # server-local calendar day
    basic_requests = Column(Integer, default=0, nullable=False)
    advanced_requests = Column(Integer, default=0, nullable=False)
    total_tokens_used = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Upserts conflict on this key
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_usage_tracking_user_date"),
    )
