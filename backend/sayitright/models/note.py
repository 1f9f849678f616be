"""Expression (vocabulary) notes"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from sayitright.core.database import Base


class ExpressionNote(Base):
    """A term the user wants to remember"""
    __tablename__ = "expression_notes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    term = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    example = Column(Text, nullable=True)
    is_starred = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<ExpressionNote {self.term}>"
