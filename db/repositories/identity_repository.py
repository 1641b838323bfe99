"""
Identity store: user accounts and their onboarding state.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from db.models.user_account import AccountStatus, UserAccount


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_user(self, user_id: uuid.UUID) -> UserAccount | None:
        return self._session.get(UserAccount, user_id)

    def exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(func.lower(UserAccount.email) == normalize_email(email)))
        return bool(self._session.scalar(stmt))

    def create_pending_identity(
        self,
        *,
        email: str,
        password_hash: str,
        role: str,
        college_id: uuid.UUID,
    ) -> UserAccount:
        """
        Insert an account that must change its temporary password on first login.
        """

        account = UserAccount(
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
            college_id=college_id,
            is_active=True,
            must_change_password=True,
            account_status=AccountStatus.PENDING_SETUP,
        )
        self._session.add(account)
        self._session.flush()
        return account

    def mark_invitation_sent(self, account: UserAccount) -> UserAccount:
        account.invitation_sent_at = datetime.now(timezone.utc)
        return account

    def mark_pending(self, account: UserAccount) -> UserAccount:
        account.account_status = AccountStatus.PENDING_SETUP
        account.must_change_password = True
        return account

    def activate(self, account: UserAccount) -> UserAccount:
        account.account_status = AccountStatus.ACTIVE
        account.must_change_password = False
        if account.first_login_at is None:
            account.first_login_at = datetime.now(timezone.utc)
        return account
