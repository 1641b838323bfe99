"""
tests/test_notification_service.py

Welcome-email rendering and the HTTP relay retry policy. The relay session
is a fake; no network access.
"""

from __future__ import annotations

import logging
import uuid

import pytest
import requests

from app.config import NotificationSettings
from app.services.notification_service import (
    HTTPNotificationSender,
    LoggingNotificationSender,
    NotificationDeliveryError,
    build_welcome_email,
)
from db.models import UserAccount, UserRole


class FakeResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeSession:
    def __init__(self, outcomes: list) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[dict] = []

    def post(self, url, *, json, headers, timeout):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeResponse(outcome)


@pytest.fixture()
def account() -> UserAccount:
    return UserAccount(id=uuid.uuid4(), email="john@college.edu", password_hash="x", role=UserRole.STUDENT)


@pytest.fixture()
def settings() -> NotificationSettings:
    return NotificationSettings(
        backend="http",
        http_url="https://relay.college.edu/send",
        http_token="relay-token",
        from_address="onboarding@college.edu",
        login_url="https://portal.college.edu/login",
        max_retries=2,
        backoff_seconds=0.5,
    )


def _sender(settings: NotificationSettings, session: FakeSession, delays: list[float]) -> HTTPNotificationSender:
    return HTTPNotificationSender(settings, session=session, sleep=delays.append)


def test_welcome_email_carries_credentials_and_login_url(account) -> None:
    message = build_welcome_email(
        account=account,
        full_name="John Doe",
        temporary_password="john@college.edu",
        login_url="https://portal.college.edu/login",
    )

    assert message.recipient == "john@college.edu"
    assert "Hi John Doe," in message.body
    assert "Temporary password: john@college.edu" in message.body
    assert "https://portal.college.edu/login" in message.body


def test_logging_sender_writes_message(account, settings, caplog) -> None:
    with caplog.at_level(logging.INFO, logger="app.services.notification_service"):
        LoggingNotificationSender(settings).send_welcome_email(
            account=account,
            full_name=None,
            temporary_password="john@college.edu",
        )

    assert "to=john@college.edu" in caplog.text


def test_http_sender_posts_payload_with_token(account, settings) -> None:
    session = FakeSession([202])
    delays: list[float] = []

    _sender(settings, session, delays).send_welcome_email(
        account=account,
        full_name="John Doe",
        temporary_password="john@college.edu",
    )

    assert len(session.calls) == 1
    call = session.calls[0]
    assert call["url"] == "https://relay.college.edu/send"
    assert call["headers"]["Authorization"] == "Bearer relay-token"
    assert call["json"]["to"] == ["john@college.edu"]
    assert call["json"]["from"] == "onboarding@college.edu"
    assert delays == []


def test_http_sender_retries_transient_failures_with_backoff(account, settings) -> None:
    session = FakeSession([503, requests.ConnectionError("reset"), 200])
    delays: list[float] = []

    _sender(settings, session, delays).send_welcome_email(
        account=account,
        full_name="John Doe",
        temporary_password="john@college.edu",
    )

    assert len(session.calls) == 3
    assert delays == [0.5, 1.0]


def test_http_sender_gives_up_after_retries(account, settings) -> None:
    session = FakeSession([500, 502, 504])

    with pytest.raises(NotificationDeliveryError, match="unavailable after retries"):
        _sender(settings, session, []).send_welcome_email(
            account=account,
            full_name=None,
            temporary_password="john@college.edu",
        )

    assert len(session.calls) == 3


def test_http_sender_does_not_retry_client_errors(account, settings) -> None:
    session = FakeSession([400])

    with pytest.raises(NotificationDeliveryError, match="status=400"):
        _sender(settings, session, []).send_welcome_email(
            account=account,
            full_name=None,
            temporary_password="john@college.edu",
        )

    assert len(session.calls) == 1


def test_http_sender_requires_url() -> None:
    with pytest.raises(ValueError):
        HTTPNotificationSender(NotificationSettings(backend="http"))
