"""
Shared fixtures: an in-memory SQLite database built from the ORM metadata,
a seeded college with its administrator, and a recording notification sender.
"""

from __future__ import annotations

from collections.abc import Iterator
from functools import partial

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers all ORM models on Base.metadata
from app.services.bulk_import_service import BulkImportService
from app.services.notification_service import NotificationDeliveryError
from app.services.password_service import hash_password
from db.base import Base
from db.models import AccountStatus, College, UserAccount, UserRole
from db.session import build_session_factory


class RecordingNotificationSender:
    """Collects welcome emails instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str | None]] = []
        self.fail_for: set[str] = set()

    def send_welcome_email(self, *, account, full_name, temporary_password) -> None:
        if account.email in self.fail_for:
            raise NotificationDeliveryError(f"relay refused {account.email}")
        self.sent.append(
            {
                "email": account.email,
                "full_name": full_name,
                "temporary_password": temporary_password,
            }
        )


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Iterator[Session]:
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def college(db_session: Session) -> College:
    college = College(name="Riverside Institute of Technology", domain="college.edu", is_active=True)
    db_session.add(college)
    db_session.commit()
    return college


@pytest.fixture()
def admin(db_session: Session, college: College) -> UserAccount:
    account = UserAccount(
        email="admin@college.edu",
        password_hash=hash_password("admin-secret", rounds=4),
        role=UserRole.COLLEGE_ADMIN,
        college_id=college.id,
        account_status=AccountStatus.ACTIVE,
    )
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture()
def notifier() -> RecordingNotificationSender:
    return RecordingNotificationSender()


@pytest.fixture()
def import_service(notifier: RecordingNotificationSender) -> BulkImportService:
    return BulkImportService(
        max_file_bytes=64 * 1024,
        max_reported_errors=1000,
        log_row_errors=True,
        notification_sender=notifier,
        password_hasher=partial(hash_password, rounds=4),
    )
