"""User profile service"""

import logging
from typing import Any, Dict, Optional

from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.schemas import CamelModel
from sayitright.core.security import hash_password
from sayitright.models.user import User
from sayitright.services.tier_calculator import (
    calculate_user_tier,
    get_daily_request_limit,
    get_subscription_type,
    should_update_tier,
)
from sayitright.services.usage_tracker import usage_tracker

logger = logging.getLogger(__name__)


class UpdateProfileRequest(CamelModel):
    username: Optional[str] = Field(None, min_length=2, max_length=20)
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class UserService:
    """Profile and usage of the current user"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, user: User) -> Dict[str, Any]:
        """
        Profile with the computed tier.

        The cached ``User.tier`` is re-synced when it lags.
        """
        tier = calculate_user_tier(user.credit_balance, user.subscriptions)
        if should_update_tier(user.tier, tier):
            logger.info(f"User {user.id} tier {user.tier} -> {tier}")
            user.tier = tier
            await self.db.commit()

        return {
            "id": user.id,
            "email": user.email,
            "username": user.username,
            "authProvider": user.auth_provider,
            "emailVerified": user.email_verified,
            "tier": tier,
            "subscriptionType": get_subscription_type(user.credit_balance, user.subscriptions),
            "creditBalance": user.credit_balance,
            "createdAt": user.created_at.isoformat(),
        }

    async def update_profile(self, user: User, body: UpdateProfileRequest) -> Dict[str, Any]:
        changes = body.model_dump(exclude_unset=True)

        if changes.get("username") is not None:
            user.username = changes["username"].strip()
        if changes.get("password") is not None:
            user.password_hash = hash_password(changes["password"])

        await self.db.commit()
        logger.info(f"Profile updated: user={user.id}, fields={sorted(changes)}")

        return await self.get_profile(user)

    async def get_usage(self, user: User, days: int = 7) -> Dict[str, Any]:
        """Daily usage rows plus today's limit"""
        tier = calculate_user_tier(user.credit_balance, user.subscriptions)
        rows = await usage_tracker.get_usage_stats(self.db, user.id, days)

        return {
            "tier": tier,
            "dailyLimit": get_daily_request_limit(tier),
            "days": [
                {
                    "date": row.date.isoformat(),
                    "basicRequests": row.basic_requests,
                    "advancedRequests": row.advanced_requests,
                    "totalTokensUsed": row.total_tokens_used,
                }
                for row in rows
            ],
        }
