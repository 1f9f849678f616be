"""Email verification API"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.database import get_db
from sayitright.core.errors import BadRequestError
from sayitright.core.responses import ok
from sayitright.middleware.endpoint_limit import rate_limit
from sayitright.services.email_service import EmailDeliveryError
from sayitright.services.email_verification import (
    SendVerificationCodeRequest,
    VerifyEmailCodeRequest,
    email_verification_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/email", tags=["email"])


@router.post(
    "/send-verification-code",
    dependencies=[Depends(rate_limit("send-verification-code", max_requests=5, window=60))],
)
async def send_verification_code(
    body: SendVerificationCodeRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        await email_verification_service.send_verification_code(db, body.email)
    except EmailDeliveryError as e:
        logger.error(f"Verification email failed for {body.email}: {e}")
        raise BadRequestError("인증 코드 발송에 실패했습니다. 잠시 후 다시 시도해주세요.")

    return ok({"message": "인증 코드가 발송되었습니다."})


@router.post("/verify-code")
async def verify_code(
    body: VerifyEmailCodeRequest,
    db: AsyncSession = Depends(get_db),
):
    await email_verification_service.verify_code(db, body.email, body.code)
    return ok({"verified": True})
