from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from board_meeting.infrastructure.database.models import LoginLogModel, UserModel


class UserRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: str) -> Optional[UserModel]:
        return self.session.get(UserModel, user_id)

    def get_by_email(self, email: str) -> Optional[UserModel]:
        return self.session.scalars(select(UserModel).where(UserModel.email == email)).first()

    def upsert_profile(self, user_id: str, email: str, full_name: Optional[str] = None,
                       avatar_url: Optional[str] = None) -> UserModel:
        user = self.get(user_id)
        if user is None:
            user = UserModel(id=user_id, email=email, full_name=full_name, avatar_url=avatar_url)
            self.session.add(user)
        else:
            user.email = email
            if full_name:
                user.full_name = full_name
            if avatar_url:
                user.avatar_url = avatar_url
        self.session.flush()
        return user

    def add_login_log(self, email: str, success: bool, user_id: Optional[str] = None,
                      reason: Optional[str] = None, ip_address: Optional[str] = None,
                      user_agent: Optional[str] = None) -> LoginLogModel:
        log = LoginLogModel(
            email=email,
            success=success,
            user_id=user_id,
            reason=reason,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.session.add(log)
        self.session.flush()
        return log

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
