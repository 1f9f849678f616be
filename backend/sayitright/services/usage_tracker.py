"""Daily AI usage tracking"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.ai_config import USER_TIERS
from sayitright.core.database import insert_for
from sayitright.models.usage import UsageTracking
from sayitright.models.user import Subscription
from sayitright.services.tier_calculator import has_active_subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageCheck:
    """Result of a usage limit check; ``remaining`` is None for subscribers"""
    allowed: bool
    reason: Optional[str] = None
    remaining: Optional[int] = None


class UsageTracker:
    """Per-user, per-day request counters"""

    def _today(self) -> date:
        # Server-local calendar day
        return date.today()

    async def get_today_usage(self, db: AsyncSession, user_id: str) -> UsageTracking:
        """
        Read today's counters, creating a zeroed row if none exists.

        The row is created with ``INSERT ... ON CONFLICT DO NOTHING`` so two
        concurrent first reads still leave exactly one row behind.
        """
        today = self._today()
        now = datetime.utcnow()
        insert = insert_for(db)

        stmt = insert(UsageTracking).values(
            id=str(uuid4()),
            user_id=user_id,
            date=today,
            basic_requests=0,
            advanced_requests=0,
            total_tokens_used=0,
            created_at=now,
            updated_at=now,
        ).on_conflict_do_nothing(index_elements=["user_id", "date"])
        await db.execute(stmt)
        await db.commit()

        result = await db.execute(
            select(UsageTracking)
            .where(
                UsageTracking.user_id == user_id,
                UsageTracking.date == today,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def check_usage_limit(
        self,
        db: AsyncSession,
        user_id: str,
        tier: str,
        is_advanced: bool,
    ) -> UsageCheck:
        """
        Check whether one more request is allowed today.

        Subscribers bypass the numeric caps. Advanced requests are counted
        against the advanced cap only; basic requests are counted against
        basic + advanced combined.
        """
        usage = await self.get_today_usage(db, user_id)
        tier_config = USER_TIERS[tier]

        result = await db.execute(
            select(Subscription).where(Subscription.user_id == user_id)
        )
        if has_active_subscription(result.scalars().all()):
            return UsageCheck(allowed=True)

        if is_advanced:
            limit = tier_config.max_advanced_per_day or tier_config.max_requests_per_day
            current = usage.advanced_requests

            if current >= limit:
                return UsageCheck(
                    allowed=False,
                    reason=f"오늘의 고급 기능 사용 횟수를 모두 사용했습니다. ({limit}회/일)",
                    remaining=0,
                )
            return UsageCheck(allowed=True, remaining=limit - current)

        limit = tier_config.max_requests_per_day
        current = usage.basic_requests + usage.advanced_requests

        if current >= limit:
            return UsageCheck(
                allowed=False,
                reason=f"오늘의 사용 횟수를 모두 사용했습니다. ({limit}회/일)",
                remaining=0,
            )
        return UsageCheck(allowed=True, remaining=limit - current)

    async def increment_usage(
        self,
        db: AsyncSession,
        user_id: str,
        is_advanced: bool,
        tokens_used: int,
    ) -> None:
        """Atomically add one request and ``tokens_used`` tokens to today's row"""
        today = self._today()
        now = datetime.utcnow()
        insert = insert_for(db)
        table = UsageTracking.__table__

        counter = "advanced_requests" if is_advanced else "basic_requests"

        stmt = insert(UsageTracking).values(
            id=str(uuid4()),
            user_id=user_id,
            date=today,
            basic_requests=0 if is_advanced else 1,
            advanced_requests=1 if is_advanced else 0,
            total_tokens_used=tokens_used,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={
                counter: table.c[counter] + 1,
                "total_tokens_used": table.c.total_tokens_used + tokens_used,
                "updated_at": now,
            },
        )
        await db.execute(stmt)
        await db.commit()

        logger.info(
            f"Usage incremented: user={user_id}, date={today}, "
            f"advanced={is_advanced}, tokens={tokens_used}"
        )

    async def get_usage_stats(
        self,
        db: AsyncSession,
        user_id: str,
        days: int = 7,
    ) -> List[UsageTracking]:
        """Daily rows for the last ``days`` days, newest first"""
        end_date = self._today()
        start_date = end_date - timedelta(days=days)

        result = await db.execute(
            select(UsageTracking)
            .where(
                UsageTracking.user_id == user_id,
                UsageTracking.date >= start_date,
                UsageTracking.date <= end_date,
            )
            .order_by(UsageTracking.date.desc())
        )
        return list(result.scalars().all())


# Shared instance
usage_tracker = UsageTracker()
