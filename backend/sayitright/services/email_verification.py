"""Email verification code service"""

import logging
import secrets
from datetime import datetime, timedelta

from pydantic import BaseModel, EmailStr, Field
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sayitright.core.errors import BadRequestError, NotFoundError
from sayitright.models.user import EmailVerification, User
from sayitright.services.email_service import EmailService, email_service

logger = logging.getLogger(__name__)


class SendVerificationCodeRequest(BaseModel):
    email: EmailStr


class VerifyEmailCodeRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class EmailVerificationService:
    """Issues and checks 6-digit email verification codes"""

    def __init__(
        self,
        mailer: EmailService,
        code_length: int = 6,
        expiry_minutes: int = 10,
        resend_interval_seconds: int = 60,
    ):
        self.mailer = mailer
        self.code_length = code_length
        self.expiry_minutes = expiry_minutes
        self.resend_interval_seconds = resend_interval_seconds

    def _generate_code(self) -> str:
        low = 10 ** (self.code_length - 1)
        return str(low + secrets.randbelow(9 * low))

    async def send_verification_code(self, db: AsyncSession, email: str) -> None:
        """
        Create a code and email it.

        Raises:
            BadRequestError: a code was issued less than a minute ago
        """
        email = email.lower()
        now = datetime.utcnow()

        await db.execute(
            delete(EmailVerification).where(
                EmailVerification.email == email,
                EmailVerification.expires_at < now,
            )
        )

        recent = await db.scalar(
            select(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.expires_at > now,
            )
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        if recent and (now - recent.created_at).total_seconds() < self.resend_interval_seconds:
            await db.commit()
            raise BadRequestError("인증 코드는 1분에 한 번만 요청할 수 있습니다.")

        code = self._generate_code()
        db.add(EmailVerification(
            email=email,
            code=code,
            expires_at=now + timedelta(minutes=self.expiry_minutes),
            created_at=now,
        ))
        await db.commit()

        await self.mailer.send_verification_code(email, code)

        logger.info(f"Verification code issued for {email}")

    async def verify_code(self, db: AsyncSession, email: str, code: str) -> bool:
        """
        Consume a code and mark matching accounts verified.

        Raises:
            NotFoundError: no live code matches
        """
        email = email.lower()
        verification = await db.scalar(
            select(EmailVerification)
            .where(
                EmailVerification.email == email,
                EmailVerification.code == code,
                EmailVerification.expires_at > datetime.utcnow(),
            )
            .order_by(EmailVerification.created_at.desc())
            .limit(1)
        )
        if not verification:
            raise NotFoundError("유효하지 않거나 만료된 인증 코드입니다.")

        await db.delete(verification)
        await db.execute(
            update(User).where(User.email == email).values(email_verified=True)
        )
        await db.commit()

        logger.info(f"Email verified: {email}")
        return True

    async def cleanup_expired_codes(self, db: AsyncSession) -> int:
        """
        Delete expired codes.

        Returns:
            Number of rows deleted
        """
        result = await db.execute(
            delete(EmailVerification).where(EmailVerification.expires_at < datetime.utcnow())
        )
        await db.commit()

        deleted = result.rowcount or 0
        if deleted:
            logger.info(f"Deleted {deleted} expired verification codes")
        return deleted


# Shared instance
email_verification_service = EmailVerificationService(email_service)
