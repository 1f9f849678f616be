"""Tier computation and advanced feature gate"""

from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

from sayitright.core.ai_config import get_max_tokens, get_input_limits
from sayitright.services.tier_calculator import (
    CREDIT,
    SUBSCRIPTION,
    calculate_user_tier,
    check_advanced_feature_access,
    get_daily_request_limit,
    get_input_limit_by_tier,
    get_subscription_type,
    is_subscription_active,
    resolve_tier,
    should_update_tier,
)

NOW = datetime(2026, 5, 1, 12, 0, 0)


def sub(status="active", start_offset=-1, end_offset=30):
    return SimpleNamespace(
        status=status,
        start_at=NOW + timedelta(days=start_offset),
        end_at=NOW + timedelta(days=end_offset),
    )


@pytest.mark.parametrize(
    "subscription,expected",
    [
        (sub(), True),
        (sub(status="cancelled"), False),
        (sub(start_offset=1, end_offset=30), False),  # not started
        (sub(start_offset=-30, end_offset=-1), False),  # ended
        (sub(start_offset=0, end_offset=30), True),  # start is inclusive
        (sub(start_offset=-30, end_offset=0), False),  # end is exclusive
    ],
)
def test_is_subscription_active(subscription, expected):
    assert is_subscription_active(subscription, NOW) is expected


@pytest.mark.parametrize(
    "credit,subscriptions,expected",
    [
        (0, [], "free"),
        (0, None, "free"),
        (1, [], "premium"),
        (0, [sub()], "premium"),
        (0, [sub(status="expired")], "free"),
        (5, [sub(start_offset=-30, end_offset=-1)], "premium"),
    ],
)
def test_calculate_user_tier(credit, subscriptions, expected):
    assert calculate_user_tier(credit, subscriptions, NOW) == expected


def test_subscription_wins_over_credit():
    assert get_subscription_type(10, [sub()], NOW) == SUBSCRIPTION
    assert get_subscription_type(10, [], NOW) == CREDIT
    assert get_subscription_type(0, [], NOW) is None


def test_advanced_access_free_denied():
    access = check_advanced_feature_access(0, [], NOW)
    assert access.allowed is False
    assert access.requires_credit is False
    assert "Premium" in access.reason


def test_advanced_access_subscriber_needs_no_credit():
    access = check_advanced_feature_access(0, [sub()], NOW)
    assert access.allowed is True
    assert access.requires_credit is False


def test_advanced_access_credit_user():
    access = check_advanced_feature_access(3, [], NOW)
    assert access.allowed is True
    assert access.requires_credit is True


def test_tier_limits():
    assert get_daily_request_limit("guest") == 3
    assert get_daily_request_limit("free") == 10
    assert get_daily_request_limit("premium") == 100
    assert get_daily_request_limit("unknown") == 0
    assert get_input_limit_by_tier("free") == 300


def test_should_update_tier():
    assert should_update_tier("free", "premium") is True
    assert should_update_tier("premium", "premium") is False


def test_resolve_tier_guest():
    assert resolve_tier(None) == "guest"
    assert resolve_tier(SimpleNamespace(credit_balance=2, subscriptions=[])) == "premium"


def test_max_tokens_capped_by_tier():
    assert get_max_tokens("premium", "long", False) == 400
    assert get_max_tokens("premium", "short", True) == 400  # 100 + 300
    assert get_max_tokens("guest", "long", True) == 100
    assert get_max_tokens("free", "medium", False) == 200


def test_input_limits_hint():
    limits = get_input_limits("premium", "short", False, "en")
    assert limits["total_tokens"] == 100
    assert limits["estimated_output_characters"] == 400
