"""
app/services/notification_service.py

Welcome-email delivery for newly onboarded accounts.

Two backends:
    - LoggingNotificationSender writes the rendered message to the log
      (development default).
    - HTTPNotificationSender posts it to a mail relay with retry/backoff.

Callers decide how strict to be: the bulk importer treats delivery as
best-effort, the invitation resender surfaces failures.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

import requests

from app.config import NotificationSettings, get_notification_settings
from db.models.user_account import UserAccount

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

WELCOME_SUBJECT = "Welcome to SkillBridge - Your Account is Ready"


class NotificationDeliveryError(RuntimeError):
    """
    Raised when a notification cannot be delivered.
    """


@dataclass(frozen=True)
class WelcomeEmail:
    recipient: str
    subject: str
    body: str

    def to_payload(self, *, sender: str) -> dict[str, Any]:
        return {
            "from": sender,
            "to": [self.recipient],
            "subject": self.subject,
            "text": self.body,
        }


def build_welcome_email(
    *,
    account: UserAccount,
    full_name: str | None,
    temporary_password: str,
    login_url: str,
) -> WelcomeEmail:
    greeting = full_name or account.email
    body = "\n".join(
        [
            f"Hi {greeting},",
            "",
            "Your SkillBridge account has been created.",
            "",
            "Login credentials:",
            f"- Email: {account.email}",
            f"- Temporary password: {temporary_password}",
            "",
            f"Sign in at {login_url}",
            "You will be required to change your password on first login.",
        ]
    )
    return WelcomeEmail(recipient=account.email, subject=WELCOME_SUBJECT, body=body)


class NotificationSender(Protocol):
    def send_welcome_email(
        self,
        *,
        account: UserAccount,
        full_name: str | None,
        temporary_password: str,
    ) -> None:
        ...


class LoggingNotificationSender:
    def __init__(self, settings: NotificationSettings) -> None:
        self._settings = settings

    def send_welcome_email(
        self,
        *,
        account: UserAccount,
        full_name: str | None,
        temporary_password: str,
    ) -> None:
        message = build_welcome_email(
            account=account,
            full_name=full_name,
            temporary_password=temporary_password,
            login_url=self._settings.login_url,
        )
        logger.info(
            "Welcome email to=%s subject=%r\n%s",
            message.recipient,
            message.subject,
            message.body,
        )


class HTTPNotificationSender:
    """
    Posts rendered emails as JSON to a mail relay endpoint.
    """

    def __init__(
        self,
        settings: NotificationSettings,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not settings.http_url:
            raise ValueError("HTTPNotificationSender requires a relay URL.")
        self._settings = settings
        self._session = session or requests.Session()
        self._sleep = sleep

    def send_welcome_email(
        self,
        *,
        account: UserAccount,
        full_name: str | None,
        temporary_password: str,
    ) -> None:
        message = build_welcome_email(
            account=account,
            full_name=full_name,
            temporary_password=temporary_password,
            login_url=self._settings.login_url,
        )
        self._post(message.to_payload(sender=self._settings.from_address))
        logger.info("Welcome email relayed to=%s", message.recipient)

    def _post(self, payload: dict[str, Any]) -> None:
        headers = {"Content-Type": "application/json"}
        if self._settings.http_token:
            headers["Authorization"] = f"Bearer {self._settings.http_token}"

        last_error: Exception | None = None
        delay = self._settings.backoff_seconds
        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.post(
                    self._settings.http_url,
                    json=payload,
                    headers=headers,
                    timeout=self._settings.timeout_seconds,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable HTTP status code: {response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return
            except requests.HTTPError as exc:
                last_error = exc
                status_code = exc.response.status_code if exc.response is not None else None
                if status_code not in RETRYABLE_STATUS_CODES:
                    raise NotificationDeliveryError(
                        f"Mail relay rejected the message (status={status_code})."
                    ) from exc
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc

            if attempt < self._settings.max_retries:
                logger.warning(
                    "Mail relay attempt %d/%d failed: %s",
                    attempt + 1,
                    self._settings.max_retries + 1,
                    last_error,
                )
                self._sleep(delay)
                delay *= 2

        raise NotificationDeliveryError("Mail relay unavailable after retries.") from last_error


@lru_cache(maxsize=1)
def get_notification_sender() -> NotificationSender:
    """
    Build and cache the configured notification backend.
    """

    settings = get_notification_settings()
    if settings.backend == "http":
        return HTTPNotificationSender(settings)
    return LoggingNotificationSender(settings)
