from __future__ import annotations

import uuid

import pytest
from sqlalchemy import select

from app.services.invitation_service import (
    IdentityNotFoundError,
    InvitationDispatchError,
    InvitationNotPendingError,
    InvitationService,
)
from db.models import AccountStatus, UserAccount, UserRole
from db.repositories import IdentityRepository


@pytest.fixture()
def invitation_service(notifier) -> InvitationService:
    return InvitationService(notification_sender=notifier)


@pytest.fixture()
def pending_student(import_service, db_session, college, admin) -> UserAccount:
    import_service.import_csv(
        db=db_session,
        entity_type="STUDENT",
        college_id=college.id,
        uploaded_by_user_id=admin.id,
        file_name="students.csv",
        content_type="text/csv",
        content=b"Full Name,Email,Roll Number\nJohn Doe,john@college.edu,CS1\n",
    )
    return db_session.scalars(select(UserAccount).where(UserAccount.email == "john@college.edu")).one()


def test_resend_dispatches_and_stamps(invitation_service, db_session, pending_student, notifier) -> None:
    pending_student.invitation_sent_at = None
    db_session.commit()
    notifier.sent.clear()

    sent_at = invitation_service.resend_invitation(db=db_session, user_id=pending_student.id)

    assert sent_at is not None
    db_session.refresh(pending_student)
    assert pending_student.invitation_sent_at is not None
    assert notifier.sent == [
        {
            "email": "john@college.edu",
            "full_name": "John Doe",
            "temporary_password": "john@college.edu",
        }
    ]


def test_resend_checks_role_when_given(invitation_service, db_session, pending_student) -> None:
    with pytest.raises(IdentityNotFoundError):
        invitation_service.resend_invitation(db=db_session, user_id=pending_student.id, role=UserRole.TRAINER)

    invitation_service.resend_invitation(db=db_session, user_id=pending_student.id, role=UserRole.STUDENT)


def test_unknown_identity_is_rejected(invitation_service, db_session, notifier) -> None:
    with pytest.raises(IdentityNotFoundError):
        invitation_service.resend_invitation(db=db_session, user_id=uuid.uuid4())

    assert notifier.sent == []


def test_activated_identity_is_rejected_without_writes(invitation_service, db_session, pending_student, notifier) -> None:
    IdentityRepository(db_session).activate(pending_student)
    pending_student.invitation_sent_at = None
    db_session.commit()
    notifier.sent.clear()

    with pytest.raises(InvitationNotPendingError):
        invitation_service.resend_invitation(db=db_session, user_id=pending_student.id)

    db_session.refresh(pending_student)
    assert pending_student.account_status == AccountStatus.ACTIVE
    assert pending_student.invitation_sent_at is None
    assert notifier.sent == []


def test_dispatch_failure_is_surfaced_and_not_stamped(invitation_service, db_session, pending_student, notifier) -> None:
    pending_student.invitation_sent_at = None
    db_session.commit()
    notifier.fail_for.add("john@college.edu")

    with pytest.raises(InvitationDispatchError):
        invitation_service.resend_invitation(db=db_session, user_id=pending_student.id)

    db_session.rollback()
    db_session.refresh(pending_student)
    assert pending_student.invitation_sent_at is None
