"""
tests/test_identity_repository.py

Onboarding state transitions on the identity store.
"""

from __future__ import annotations

from db.models import AccountStatus, UserRole
from db.repositories import IdentityRepository


def _pending(db_session, college, email: str = "Asha.Rao@College.edu "):
    identities = IdentityRepository(db_session)
    account = identities.create_pending_identity(
        email=email,
        password_hash="hashed",
        role=UserRole.STUDENT,
        college_id=college.id,
    )
    db_session.commit()
    return identities, account


def test_pending_identity_is_normalised_and_must_change_password(db_session, college) -> None:
    identities, account = _pending(db_session, college)

    assert account.email == "asha.rao@college.edu"
    assert account.account_status == AccountStatus.PENDING_SETUP
    assert account.must_change_password is True
    assert identities.get_user(account.id) is account


def test_exists_by_email_ignores_case_and_whitespace(db_session, college) -> None:
    identities, _ = _pending(db_session, college)

    assert identities.exists_by_email("  ASHA.RAO@college.EDU")
    assert not identities.exists_by_email("ravi.kumar@college.edu")


def test_activate_then_mark_pending_restores_onboarding_state(db_session, college) -> None:
    identities, account = _pending(db_session, college)

    identities.activate(account)
    db_session.commit()
    first_login_at = account.first_login_at

    assert account.account_status == AccountStatus.ACTIVE
    assert account.must_change_password is False
    assert first_login_at is not None

    identities.mark_pending(account)
    db_session.commit()
    db_session.expire_all()
    reloaded = identities.get_user(account.id)

    assert reloaded.account_status == AccountStatus.PENDING_SETUP
    assert reloaded.must_change_password is True
    assert reloaded.first_login_at is not None


def test_mark_invitation_sent_stamps_timestamp(db_session, college) -> None:
    identities, account = _pending(db_session, college)
    assert account.invitation_sent_at is None

    identities.mark_invitation_sent(account)
    db_session.commit()

    assert account.invitation_sent_at is not None
