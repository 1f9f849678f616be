"""Generated email archives and reusable templates"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from sayitright.core.database import Base


class Archive(Base):
    """One generated email result"""
    __tablename__ = "archives"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    preview = Column(String(200), nullable=False)
    tone = Column(String(50), nullable=False, default="neutral")
    purpose = Column(String(50), nullable=True)
    relationship = Column(String(50), nullable=True)
    rationale = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Archive {self.id} user={self.user_id}>"


class Template(Base):
    """User-curated reusable email"""
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # At most one template per archive; the database is the final authority
    source_archive_id = Column(String(36), nullable=True, unique=True)

    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    preview = Column(String(200), nullable=False)
    tone = Column(String(50), nullable=False)
    purpose = Column(String(50), nullable=True)
    relationship = Column(String(50), nullable=True)
    rationale = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Template {self.id} user={self.user_id}>"


def make_preview(content: str) -> str:
    """First 197 characters plus an ellipsis when content exceeds 200"""
    return content[:197] + "..." if len(content) > 200 else content
