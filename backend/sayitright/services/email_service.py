"""Email delivery service"""

import asyncio
import logging
import smtplib
import time
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from sayitright.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


class EmailDeliveryError(Exception):
    """Raised when a message could not be delivered"""


class EmailService:
    """SMTP email sender"""

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_username = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.from_email = settings.smtp_from_email or settings.smtp_username
        self.from_name = settings.smtp_from_name
        self.max_retries = 3
        self.retry_delay = 2  # seconds, doubled per attempt

    @property
    def configured(self) -> bool:
        return bool(self.smtp_username and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send one email.

        Args:
            to_email: Recipient
            subject: Subject line
            html_content: HTML body
            text_content: Optional plain-text alternative

        Returns:
            True if sent, False otherwise
        """
        if not self.configured:
            logger.warning("SMTP credentials not configured, email not sent")
            return False

        # smtplib blocks; run it in the default executor
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._send_email_sync,
            to_email,
            subject,
            html_content,
            text_content
        )

    def _connect(self) -> smtplib.SMTP:
        # 587: STARTTLS, 465: implicit SSL
        if self.smtp_port == 465:
            return smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=30)
        server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30)
        if self.smtp_port == 587:
            server.ehlo()
            server.starttls()
            server.ehlo()
        return server

    def _send_email_sync(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Blocking send with exponential backoff on transient failures"""
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email
        message["Subject"] = subject
        if text_content:
            message.attach(MIMEText(text_content, "plain", "utf-8"))
        message.attach(MIMEText(html_content, "html", "utf-8"))

        for attempt in range(self.max_retries):
            server = None
            try:
                server = self._connect()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(message)
                logger.info(f"Email sent to {to_email}")
                return True
            except (smtplib.SMTPException, OSError) as e:
                logger.warning(f"SMTP error (attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay * (2 ** attempt))
            finally:
                if server:
                    try:
                        server.quit()
                    except (smtplib.SMTPException, OSError):
                        pass

        logger.error(f"Email to {to_email} failed after {self.max_retries} attempts")
        return False

    async def send_verification_code(self, to_email: str, code: str) -> None:
        """
        Send a signup verification code.

        Skipped (with a warning) when SMTP is not configured.

        Raises:
            EmailDeliveryError: SMTP is configured but delivery failed
        """
        if not self.configured:
            logger.warning(f"SMTP not configured, verification email to {to_email} skipped")
            return

        subject = "[SayItRight] 이메일 인증 코드"

        html_content = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">이메일 인증</h2>
  <p>안녕하세요,</p>
  <p>SayItRight 회원가입을 위한 인증 코드입니다:</p>
  <div style="background: #f4f4f4; padding: 20px; text-align: center; margin: 20px 0;">
    <h1 style="color: #4F46E5; letter-spacing: 5px; margin: 0;">{code}</h1>
  </div>
  <p>이 코드는 <strong>10분간</strong> 유효합니다.</p>
  <p>본인이 요청하지 않은 경우, 이 이메일을 무시하셔도 됩니다.</p>
  <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
  <p style="color: #666; font-size: 12px;">이 이메일은 자동 발송되었습니다. 회신하지 마세요.</p>
</div>
"""

        text_content = (
            "SayItRight 이메일 인증\n\n"
            f"인증 코드: {code}\n\n"
            "이 코드는 10분간 유효합니다.\n"
            "본인이 요청하지 않은 경우, 이 이메일을 무시하셔도 됩니다."
        )

        sent = await self.send_email(
            to_email=to_email,
            subject=subject,
            html_content=html_content,
            text_content=text_content
        )
        if not sent:
            raise EmailDeliveryError("이메일 발송에 실패했습니다.")


# Shared instance
email_service = EmailService()
