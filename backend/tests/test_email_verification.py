"""Email verification codes"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from sayitright.core.errors import BadRequestError, NotFoundError
from sayitright.models.user import EmailVerification
from sayitright.services.email_verification import EmailVerificationService


@pytest.fixture
def mailer():
    return AsyncMock()


@pytest.fixture
def service(mailer):
    return EmailVerificationService(mailer)


async def latest_code(db, email):
    return await db.scalar(
        select(EmailVerification)
        .where(EmailVerification.email == email)
        .order_by(EmailVerification.created_at.desc())
    )


async def test_send_and_verify(db_session, make_user, service, mailer):
    user = await make_user(email="verify@example.com")

    await service.send_verification_code(db_session, "Verify@Example.com")

    record = await latest_code(db_session, "verify@example.com")
    assert len(record.code) == 6 and record.code.isdigit()
    mailer.send_verification_code.assert_awaited_once_with("verify@example.com", record.code)

    assert await service.verify_code(db_session, "verify@example.com", record.code) is True
    await db_session.refresh(user)
    assert user.email_verified is True
    assert await latest_code(db_session, "verify@example.com") is None


async def test_resend_within_a_minute(db_session, service):
    await service.send_verification_code(db_session, "a@example.com")
    with pytest.raises(BadRequestError, match="1분에 한 번만"):
        await service.send_verification_code(db_session, "a@example.com")


async def test_wrong_or_expired_code(db_session, service):
    db_session.add(EmailVerification(
        email="a@example.com",
        code="123456",
        expires_at=datetime.utcnow() - timedelta(minutes=1),
        created_at=datetime.utcnow() - timedelta(minutes=11),
    ))
    await db_session.commit()

    with pytest.raises(NotFoundError):
        await service.verify_code(db_session, "a@example.com", "123456")
    with pytest.raises(NotFoundError):
        await service.verify_code(db_session, "a@example.com", "654321")


async def test_cleanup_expired_codes(db_session, service):
    now = datetime.utcnow()
    db_session.add_all([
        EmailVerification(email="old@example.com", code="111111", expires_at=now - timedelta(minutes=5)),
        EmailVerification(email="new@example.com", code="222222", expires_at=now + timedelta(minutes=5)),
    ])
    await db_session.commit()

    assert await service.cleanup_expired_codes(db_session) == 1


async def test_endpoints(client):
    response = await client.post("/v1/email/send-verification-code", json={"email": "x@example.com"})
    assert response.status_code == 200

    response = await client.post(
        "/v1/email/verify-code", json={"email": "x@example.com", "code": "12ab56"}
    )
    assert response.status_code == 400

    response = await client.post(
        "/v1/email/verify-code", json={"email": "x@example.com", "code": "000000"}
    )
    assert response.status_code == 404
