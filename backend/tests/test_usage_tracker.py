"""Daily usage counters"""

from datetime import date, timedelta

from sqlalchemy import func, select

from sayitright.models.usage import UsageTracking
from sayitright.services.usage_tracker import usage_tracker


async def test_get_today_usage_creates_single_row(db_session, make_user):
    user = await make_user()

    first = await usage_tracker.get_today_usage(db_session, user.id)
    second = await usage_tracker.get_today_usage(db_session, user.id)

    assert first.id == second.id
    assert (first.basic_requests, first.advanced_requests, first.total_tokens_used) == (0, 0, 0)
    count = await db_session.scalar(
        select(func.count()).select_from(UsageTracking).where(UsageTracking.user_id == user.id)
    )
    assert count == 1


async def test_increment_usage_accumulates(db_session, make_user):
    user = await make_user()

    await usage_tracker.increment_usage(db_session, user.id, False, 10)
    await usage_tracker.increment_usage(db_session, user.id, False, 5)
    await usage_tracker.increment_usage(db_session, user.id, True, 20)

    usage = await usage_tracker.get_today_usage(db_session, user.id)
    assert usage.basic_requests == 2
    assert usage.advanced_requests == 1
    assert usage.total_tokens_used == 35


async def test_basic_limit_counts_both_kinds(db_session, make_user):
    user = await make_user()
    for _ in range(6):
        await usage_tracker.increment_usage(db_session, user.id, False, 1)
    for _ in range(3):
        await usage_tracker.increment_usage(db_session, user.id, True, 1)

    check = await usage_tracker.check_usage_limit(db_session, user.id, "free", False)
    assert check.allowed is True
    assert check.remaining == 1

    await usage_tracker.increment_usage(db_session, user.id, False, 1)
    check = await usage_tracker.check_usage_limit(db_session, user.id, "free", False)
    assert check.allowed is False
    assert check.remaining == 0
    assert "10회/일" in check.reason


async def test_advanced_limit_counts_advanced_only(db_session, make_user):
    user = await make_user(credit_balance=5)
    for _ in range(99):
        await usage_tracker.increment_usage(db_session, user.id, True, 1)

    check = await usage_tracker.check_usage_limit(db_session, user.id, "premium", True)
    assert check.allowed is True
    assert check.remaining == 1

    await usage_tracker.increment_usage(db_session, user.id, True, 1)
    check = await usage_tracker.check_usage_limit(db_session, user.id, "premium", True)
    assert check.allowed is False
    assert "고급 기능" in check.reason


async def test_free_advanced_cap(db_session, make_user):
    user = await make_user()
    for _ in range(5):
        await usage_tracker.increment_usage(db_session, user.id, True, 1)

    check = await usage_tracker.check_usage_limit(db_session, user.id, "free", True)
    assert check.allowed is False
    assert "(5회/일)" in check.reason


async def test_subscribers_bypass_caps(db_session, make_user):
    user = await make_user(subscribed=True)
    for _ in range(120):
        await usage_tracker.increment_usage(db_session, user.id, False, 1)

    check = await usage_tracker.check_usage_limit(db_session, user.id, "premium", False)
    assert check.allowed is True
    assert check.remaining is None


async def test_usage_stats_newest_first(db_session, make_user):
    user = await make_user()
    today = date.today()
    for offset in (0, 3, 10):
        db_session.add(UsageTracking(
            user_id=user.id,
            date=today - timedelta(days=offset),
            basic_requests=offset,
        ))
    await db_session.commit()

    rows = await usage_tracker.get_usage_stats(db_session, user.id, days=7)

    assert [row.date for row in rows] == [today, today - timedelta(days=3)]
