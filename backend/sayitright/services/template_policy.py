"""Template save quota

- guest: 1 template (sign up for more)
- free / premium: 3 free, then 1 credit each
- subscription: unlimited

Templates created earlier stay readable after a subscription ends.
"""

import math
from dataclasses import dataclass
from typing import Dict

from sayitright.core.ai_config import FREE, GUEST, PREMIUM
from sayitright.services.tier_calculator import SUBSCRIPTION


@dataclass(frozen=True)
class TemplatePolicy:
    free_count: float
    credit_cost_per_template: int
    message: str


@dataclass(frozen=True)
class TemplateQuotaDecision:
    allowed: bool
    requires_credit: bool
    cost: int
    message: str


TEMPLATE_POLICY: Dict[str, TemplatePolicy] = {
    GUEST: TemplatePolicy(
        free_count=1,
        credit_cost_per_template=0,
        message="로그인하면 더 많은 템플릿을 저장할 수 있습니다.",
    ),
    FREE: TemplatePolicy(
        free_count=3,
        credit_cost_per_template=1,
        message="무료 한도를 초과했습니다. 크레딧을 사용하거나 구독하세요.",
    ),
    PREMIUM: TemplatePolicy(
        free_count=3,
        credit_cost_per_template=1,
        message="무료 한도를 초과했습니다. 크레딧 1개가 차감됩니다.",
    ),
    SUBSCRIPTION: TemplatePolicy(
        free_count=math.inf,
        credit_cost_per_template=0,
        message="구독 중에는 무제한으로 템플릿을 저장할 수 있습니다.",
    ),
}


def get_template_policy(tier: str) -> TemplatePolicy:
    return TEMPLATE_POLICY[tier]


def can_create_template(tier: str, current_count: int, credit_balance: int = 0) -> TemplateQuotaDecision:
    """
    Decide whether one more template may be saved.

    Args:
        tier: guest / free / premium / subscription
        current_count: Templates the user already has
        credit_balance: Current credit balance

    Returns:
        TemplateQuotaDecision; ``cost`` credits are owed when ``requires_credit``
    """
    policy = get_template_policy(tier)

    if current_count < policy.free_count:
        return TemplateQuotaDecision(
            allowed=True,
            requires_credit=False,
            cost=0,
            message="템플릿을 저장할 수 있습니다.",
        )

    cost = policy.credit_cost_per_template

    if tier == GUEST:
        return TemplateQuotaDecision(allowed=False, requires_credit=False, cost=0, message=policy.message)

    if tier == SUBSCRIPTION:
        return TemplateQuotaDecision(allowed=True, requires_credit=False, cost=0, message=policy.message)

    if cost > 0:
        if credit_balance >= cost:
            return TemplateQuotaDecision(
                allowed=True,
                requires_credit=True,
                cost=cost,
                message=f"크레딧 {cost}개가 차감됩니다.",
            )
        return TemplateQuotaDecision(
            allowed=False,
            requires_credit=True,
            cost=cost,
            message="크레딧이 부족합니다. 크레딧을 충전하거나 구독하세요.",
        )

    return TemplateQuotaDecision(allowed=False, requires_credit=True, cost=cost, message=policy.message)
