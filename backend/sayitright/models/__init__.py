"""Data models"""

from sayitright.models.user import User, Subscription, CreditTransaction, EmailVerification
from sayitright.models.usage import UsageTracking
from sayitright.models.archive import Archive, Template
from sayitright.models.note import ExpressionNote

__all__ = [
    "User",
    "Subscription",
    "CreditTransaction",
    "EmailVerification",
    "UsageTracking",
    "Archive",
    "Template",
    "ExpressionNote",
]
