"""Unit tests for SES email sending and the email templates."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.errors import ErrorCode, UpstreamError
from core.services.notifications import (
    SesNotificationSender,
    password_reset_email,
    trip_invitation_email,
    verification_email,
)


@pytest.fixture
def ses_client():
    return MagicMock()


@pytest.fixture
def sender(app_config, ses_client):
    return SesNotificationSender(app_config.model_copy(update={"email_from": "noreply@traveltrack.test"}), ses_client)


def test_send_builds_ses_request(sender, ses_client):
    sender.send("ada@example.com", "Hello", "<p>Hi</p>")

    ses_client.send_email.assert_called_once_with(
        Source="noreply@traveltrack.test",
        Destination={"ToAddresses": ["ada@example.com"]},
        Message={
            "Subject": {"Data": "Hello", "Charset": "UTF-8"},
            "Body": {"Html": {"Data": "<p>Hi</p>", "Charset": "UTF-8"}},
        },
    )


def test_send_failure_raises_upstream_error(sender, ses_client):
    ses_client.send_email.side_effect = ClientError(
        {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified"}}, "SendEmail"
    )
    with pytest.raises(UpstreamError) as exc_info:
        sender.send("ada@example.com", "Hello", "<p>Hi</p>")
    assert exc_info.value.code == ErrorCode.EMAIL_FAILED


def test_verification_email():
    subject, body = verification_email("Ada", "123456", 10)
    assert subject == "Verify your TravelTrack account"
    assert "123456" in body
    assert "10 minutes" in body


def test_password_reset_email():
    subject, body = password_reset_email("Ada", "654321", 10)
    assert "Reset" in subject
    assert "654321" in body


def test_invitation_email_escapes_html():
    subject, body = trip_invitation_email("<b>Eve</b>", "Rome & Naples", "https://app.example.com/trips/1")
    assert subject == "You're invited to Rome & Naples"
    assert "&lt;b&gt;Eve&lt;/b&gt;" in body
    assert "Rome &amp; Naples" in body
    assert 'href="https://app.example.com/trips/1"' in body
