"""Archive retention policy

Hybrid rule: keep the last ``retention_days`` days AND at most
``max_count`` archives, whichever removes more.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from sayitright.core.ai_config import FREE, PREMIUM


@dataclass(frozen=True)
class ArchivePolicy:
    retention_days: int
    max_count: int


ARCHIVE_POLICY: Dict[str, ArchivePolicy] = {
    FREE: ArchivePolicy(retention_days=7, max_count=200),
    PREMIUM: ArchivePolicy(retention_days=30, max_count=2000),
}


def get_archive_policy(tier: str) -> ArchivePolicy:
    """Policy for a tier; unknown tiers get the free policy"""
    return ARCHIVE_POLICY.get(tier, ARCHIVE_POLICY[FREE])


def get_retention_cutoff(days: int, now: Optional[datetime] = None) -> datetime:
    """
    Local midnight ``days`` days ago, as naive UTC.

    Args:
        days: Retention period
        now: Reference time; naive values are read as local time

    Returns:
        Naive UTC datetime comparable with ``created_at`` columns
    """
    local_now = (now or datetime.now()).astimezone()
    cutoff = (local_now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    return cutoff.astimezone(timezone.utc).replace(tzinfo=None)
