"""
Verification Mail Service

Sends the one-time sign-up code through the Resend HTTP API.
The caller decides what a failed send means; this module never raises for
delivery problems, it reports them in the returned MailResult.
"""
import html
import logging
from dataclasses import dataclass

import httpx

from ..config import settings

logger = logging.getLogger("uvicorn.error")

SUBJECT = "Verification Code"


@dataclass
class MailResult:
    success: bool
    message: str


def render_verification_email(username: str, code: str) -> str:
    """Minimal HTML body: greeting plus the code, nothing clickable."""
    return (
        "<html><body>"
        f"<h2>Hello {html.escape(username)},</h2>"
        "<p>Thank you for registering. Please use the following verification code "
        "to complete your registration:</p>"
        f"<p style=\"font-size:24px;letter-spacing:4px\"><strong>{html.escape(code)}</strong></p>"
        "<p>The code expires in one hour. If you did not request this code, "
        "please ignore this email.</p>"
        "</body></html>"
    )


class VerificationMailer:
    """Resend client for verification emails"""

    def __init__(self):
        self.api_key = settings.resend_api_key
        self.api_url = settings.resend_api_url
        self.sender = settings.mail_from

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def send(self, email: str, username: str, code: str) -> MailResult:
        if not self.is_available():
            logger.error("[mailer] RESEND_API_KEY not configured, cannot send to %s", email)
            return MailResult(False, "Failed to send verification mail")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "from": self.sender,
            "to": [email],
            "subject": SUBJECT,
            "html": render_verification_email(username, code),
        }

        try:
            async with httpx.AsyncClient(timeout=15) as client:
                resp = await client.post(self.api_url, headers=headers, json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("[mailer] sending verification email to %s failed: %s", email, e)
            return MailResult(False, "Failed to send verification mail")

        logger.info("[mailer] verification email queued for %s", email)
        return MailResult(True, "Verification mail sent successfully")


mailer = VerificationMailer()


async def send_verification_email(email: str, username: str, code: str) -> MailResult:
    return await mailer.send(email, username, code)
