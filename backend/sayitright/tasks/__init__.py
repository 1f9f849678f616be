"""Celery tasks"""

from sayitright.tasks.maintenance import cleanup_expired_verification_codes

__all__ = [
    "cleanup_expired_verification_codes",
]
