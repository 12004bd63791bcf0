"""Email service for account and publisher notifications"""

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from ...core.config import settings

logger = logging.getLogger(__name__)


class EmailService:

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.smtp_use_tls = settings.SMTP_USE_TLS
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.frontend_url = settings.FRONTEND_URL

    async def send_email(self,
                         to_email: str,
                         subject: str,
                         html_content: str,
                         text_content: Optional[str] = None) -> bool:
        """Send email with HTML content. Returns False instead of raising on SMTP errors."""
        try:
            logger.info("Sending email to %s: %s", to_email, subject)

            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{self.from_name} <{self.from_email}>"
            msg['To'] = to_email

            if text_content:
                msg.attach(MIMEText(text_content, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            await self._send_smtp_email(msg)
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error("Error sending email to %s: %s", to_email, e)
            return False

    async def _send_smtp_email(self, msg: MIMEMultipart):
        """Send email via SMTP"""
        def send_sync():
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.smtp_use_tls:
                    server.starttls()
                if self.smtp_username:
                    server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

        # smtplib blocks, keep it off the event loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, send_sync)

    async def send_verification_email(self, to_email: str, verification_token: str) -> bool:
        verification_url = f"{self.frontend_url}/verify-email?token={verification_token}"
        html = f"""
        <h2>Welcome to {self.from_name}</h2>
        <p>Please confirm your email address to finish setting up your account.</p>
        <p><a href="{verification_url}">Verify email</a></p>
        """
        return await self.send_email(to_email, f"Verify your {self.from_name} account", html,
                                     f"Verify your email: {verification_url}")

    async def send_password_reset_email(self, to_email: str, reset_token: str) -> bool:
        reset_url = f"{self.frontend_url}/reset-password?token={reset_token}"
        html = f"""
        <h2>Password reset</h2>
        <p>Use the link below to choose a new password. It expires in one hour.</p>
        <p><a href="{reset_url}">Reset password</a></p>
        """
        return await self.send_email(to_email, "Reset your password", html,
                                     f"Reset your password: {reset_url}")
