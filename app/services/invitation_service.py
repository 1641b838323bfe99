"""
app/services/invitation_service.py

Re-sends the welcome email to accounts that have not finished onboarding.

The temporary credential is re-derived from the account email, so the same
login details reach the user again. Rejected requests write nothing.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from functools import lru_cache

from sqlalchemy.orm import Session

from app.services.notification_service import (
    NotificationDeliveryError,
    NotificationSender,
    get_notification_sender,
)
from db.models.user_account import UserAccount, UserRole
from db.repositories.identity_repository import IdentityRepository
from db.repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


class IdentityNotFoundError(LookupError):
    """
    Raised when the user id is unknown or belongs to another role.
    """


class InvitationNotPendingError(ValueError):
    """
    Raised when the account has already completed onboarding.
    """


class InvitationDispatchError(RuntimeError):
    """
    Raised when the welcome email could not be delivered.
    """


class InvitationService:
    def __init__(self, *, notification_sender: NotificationSender | None = None) -> None:
        self._notification_sender = notification_sender or get_notification_sender()

    def resend_invitation(
        self,
        *,
        db: Session,
        user_id: uuid.UUID,
        role: str | None = None,
    ) -> datetime:
        """
        Re-deliver the welcome email and stamp invitation_sent_at.

        Args:
            db:       Active SQLAlchemy session.
            user_id:  Account to re-invite.
            role:     Optional role the account must have (STUDENT/TRAINER).

        Returns:
            The new invitation_sent_at timestamp.

        Raises:
            IdentityNotFoundError:     unknown account or role mismatch.
            InvitationNotPendingError: account is no longer pending setup.
            InvitationDispatchError:   delivery failed; nothing was stamped.
        """

        identities = IdentityRepository(db)
        account = identities.get_user(user_id)
        if account is None or (role is not None and account.role != role):
            raise IdentityNotFoundError(f"User not found: {user_id}")
        if not account.is_pending_setup:
            raise InvitationNotPendingError(
                f"User {account.email} has already completed account setup."
            )

        try:
            self._notification_sender.send_welcome_email(
                account=account,
                full_name=_resolve_full_name(db, account),
                temporary_password=account.email,
            )
        except NotificationDeliveryError as exc:
            logger.warning("Invitation resend failed user_id=%s: %s", user_id, exc)
            raise InvitationDispatchError(f"Could not deliver invitation to {account.email}.") from exc

        identities.mark_invitation_sent(account)
        db.commit()
        logger.info("Invitation re-sent user_id=%s email=%s", account.id, account.email)
        return account.invitation_sent_at


def _resolve_full_name(db: Session, account: UserAccount) -> str | None:
    profiles = ProfileRepository(db)
    if account.role == UserRole.STUDENT:
        student = profiles.get_student_for_user(account.id)
        return student.full_name if student else None
    if account.role == UserRole.TRAINER:
        trainer = profiles.get_trainer_for_user(account.id)
        return trainer.full_name if trainer else None
    return None


@lru_cache(maxsize=1)
def get_invitation_service() -> InvitationService:
    return InvitationService()
