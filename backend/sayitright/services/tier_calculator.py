"""Tier computation from billing state

A user's tier is a pure function of their credit balance and subscriptions:
premium when a subscription is currently active or any credit is left,
free otherwise. ``guest`` is never computed here; it means "no user".
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from sayitright.core.ai_config import FREE, GUEST, PREMIUM, USER_TIERS

SUBSCRIPTION = "subscription"
CREDIT = "credit"


@dataclass(frozen=True)
class AdvancedFeatureAccess:
    """Result of the advanced feature gate"""
    allowed: bool
    requires_credit: bool
    reason: Optional[str] = None


def is_subscription_active(subscription, now: Optional[datetime] = None) -> bool:
    """active status and ``start_at <= now < end_at``"""
    now = now or datetime.utcnow()
    return (
        subscription.status == "active"
        and subscription.start_at <= now
        and subscription.end_at > now
    )


def has_active_subscription(subscriptions: Optional[Iterable], now: Optional[datetime] = None) -> bool:
    if not subscriptions:
        return False
    now = now or datetime.utcnow()
    return any(is_subscription_active(sub, now) for sub in subscriptions)


def calculate_user_tier(
    credit_balance: int,
    subscriptions: Optional[Iterable] = None,
    now: Optional[datetime] = None,
) -> str:
    """Return ``premium`` or ``free``"""
    if has_active_subscription(subscriptions, now):
        return PREMIUM
    if credit_balance > 0:
        return PREMIUM
    return FREE


def get_subscription_type(
    credit_balance: int,
    subscriptions: Optional[Iterable] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """What makes the user premium; a subscription wins over credit"""
    if has_active_subscription(subscriptions, now):
        return SUBSCRIPTION
    if credit_balance > 0:
        return CREDIT
    return None


def check_advanced_feature_access(
    credit_balance: int,
    subscriptions: Optional[Iterable] = None,
    now: Optional[datetime] = None,
) -> AdvancedFeatureAccess:
    """
    Gate for tone / length / rationale options.

    Free users are always denied. Subscribers are allowed without credit.
    Credit-only premium users are allowed while they hold at least 1 credit.
    """
    tier = calculate_user_tier(credit_balance, subscriptions, now)

    if tier == FREE:
        return AdvancedFeatureAccess(
            allowed=False,
            requires_credit=False,
            reason="고급 기능은 Premium 유저만 사용할 수 있습니다.",
        )

    sub_type = get_subscription_type(credit_balance, subscriptions, now)

    if sub_type == SUBSCRIPTION:
        return AdvancedFeatureAccess(allowed=True, requires_credit=False)

    if sub_type == CREDIT:
        if credit_balance < 1:
            return AdvancedFeatureAccess(
                allowed=False,
                requires_credit=True,
                reason="크레딧이 부족합니다.",
            )
        return AdvancedFeatureAccess(allowed=True, requires_credit=True)

    return AdvancedFeatureAccess(
        allowed=False,
        requires_credit=False,
        reason="알 수 없는 오류가 발생했습니다.",
    )


def get_daily_request_limit(tier: str) -> int:
    limits = USER_TIERS.get(tier)
    return limits.max_requests_per_day if limits else 0


def get_input_limit_by_tier(tier: str) -> int:
    return USER_TIERS[tier].max_input_chars


def should_update_tier(current_tier: Optional[str], calculated_tier: str) -> bool:
    """True when the cached ``User.tier`` lags the computed one"""
    return current_tier != calculated_tier


def resolve_tier(user) -> str:
    """``guest`` when there is no user, otherwise the computed tier"""
    if user is None:
        return GUEST
    return calculate_user_tier(user.credit_balance, user.subscriptions)
