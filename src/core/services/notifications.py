"""Outbound email through SES, plus the few message templates we send."""

import logging
from abc import ABC, abstractmethod
from html import escape
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.config import Config
from core.errors import ErrorCode, UpstreamError

logger = logging.getLogger(__name__)


class NotificationSender(ABC):
    @abstractmethod
    def send(self, recipient: str, subject: str, html_body: str) -> None: ...


class SesNotificationSender(NotificationSender):
    def __init__(self, config: Config, client: Any) -> None:
        self._source = config.email_from
        self._client = client

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        try:
            self._client.send_email(
                Source=self._source,
                Destination={"ToAddresses": [recipient]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Html": {"Data": html_body, "Charset": "UTF-8"}},
                },
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Failed to send email to {recipient}: {e}", code=ErrorCode.EMAIL_FAILED) from e
        logger.info("Sent '%s' email to %s", subject, recipient)


# --- Templates ---


def verification_email(first_name: str, code: str, ttl_minutes: int) -> tuple[str, str]:
    body = (
        f"<p>Hi {escape(first_name)},</p>"
        f"<p>Your TravelTrack verification code is <strong>{code}</strong>.</p>"
        f"<p>It expires in {ttl_minutes} minutes.</p>"
    )
    return "Verify your TravelTrack account", body


def password_reset_email(first_name: str, code: str, ttl_minutes: int) -> tuple[str, str]:
    body = (
        f"<p>Hi {escape(first_name)},</p>"
        f"<p>Your password reset code is <strong>{code}</strong>.</p>"
        f"<p>It expires in {ttl_minutes} minutes. If you did not ask for a reset, ignore this email.</p>"
    )
    return "Reset your TravelTrack password", body


def trip_invitation_email(inviter_name: str, trip_title: str, trip_url: str) -> tuple[str, str]:
    body = (
        f"<p>{escape(inviter_name)} invited you to collaborate on "
        f"<strong>{escape(trip_title)}</strong>.</p>"
        f'<p><a href="{escape(trip_url)}">Open the trip</a></p>'
    )
    return f"You're invited to {trip_title}", body
