"""Credit charging"""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.errors import ForbiddenError
from sayitright.models.user import CreditTransaction, User
from sayitright.services.tier_calculator import calculate_user_tier, should_update_tier

logger = logging.getLogger(__name__)

INSUFFICIENT_CREDIT_MESSAGE = "크레딧이 부족합니다."


async def charge_credits(
    db: AsyncSession,
    user: User,
    amount: int,
    reason: str,
    insufficient_message: str = INSUFFICIENT_CREDIT_MESSAGE,
) -> int:
    """
    Deduct credits and append a ledger row in the current transaction.

    The decrement is a conditional UPDATE so the balance never goes below
    zero under concurrent charges. Nothing is committed here.

    Args:
        db: Session holding the caller's transaction
        user: User to charge (its subscriptions must be loaded)
        amount: Credits to deduct (> 0)
        reason: Ledger reason
        insufficient_message: Message of the error raised when the balance is short

    Returns:
        The balance after the charge

    Raises:
        ForbiddenError: balance lower than ``amount``
    """
    result = await db.execute(
        update(User)
        .where(User.id == user.id, User.credit_balance >= amount)
        .values(credit_balance=User.credit_balance - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(f"Credit charge refused for user {user.id}: balance below {amount}")
        raise ForbiddenError(insufficient_message)

    db.add(CreditTransaction(
        user_id=user.id,
        amount=-amount,
        status="completed",
        reason=reason,
    ))

    await db.refresh(user, attribute_names=["credit_balance"])

    # Keep the cached tier in step with the new balance
    calculated = calculate_user_tier(user.credit_balance, user.subscriptions)
    if should_update_tier(user.tier, calculated):
        logger.info(f"User {user.id} tier {user.tier} -> {calculated}")
        user.tier = calculated

    logger.info(f"Charged {amount} credit(s) to user {user.id}: {reason}")
    return user.credit_balance
