"""
Profile store: tenant colleges and the student/trainer profiles attached to
user accounts.
"""

from __future__ import annotations

import uuid

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from db.models.college import College
from db.models.profiles import StudentProfile, TrainerProfile


class ProfileRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_college(self, college_id: uuid.UUID) -> College | None:
        return self._session.get(College, college_id)

    def roll_number_exists(self, *, college_id: uuid.UUID, roll_number: str) -> bool:
        stmt = select(
            exists().where(
                StudentProfile.college_id == college_id,
                StudentProfile.roll_number == roll_number,
            )
        )
        return bool(self._session.scalar(stmt))

    def create_student(
        self,
        *,
        user_id: uuid.UUID,
        college_id: uuid.UUID,
        full_name: str,
        roll_number: str,
        degree: str | None,
        branch: str | None,
        year: int | None,
    ) -> StudentProfile:
        profile = StudentProfile(
            user_id=user_id,
            college_id=college_id,
            full_name=full_name,
            roll_number=roll_number,
            degree=degree,
            branch=branch,
            year=year,
        )
        self._session.add(profile)
        self._session.flush()
        return profile

    def create_trainer(
        self,
        *,
        user_id: uuid.UUID,
        college_id: uuid.UUID,
        full_name: str,
        department: str | None,
        specialization: str | None,
    ) -> TrainerProfile:
        profile = TrainerProfile(
            user_id=user_id,
            college_id=college_id,
            full_name=full_name,
            department=department,
            specialization=specialization,
        )
        self._session.add(profile)
        self._session.flush()
        return profile

    def get_student_for_user(self, user_id: uuid.UUID) -> StudentProfile | None:
        stmt = select(StudentProfile).where(StudentProfile.user_id == user_id)
        return self._session.scalars(stmt).first()

    def get_trainer_for_user(self, user_id: uuid.UUID) -> TrainerProfile | None:
        stmt = select(TrainerProfile).where(TrainerProfile.user_id == user_id)
        return self._session.scalars(stmt).first()
