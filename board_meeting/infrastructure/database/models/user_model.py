from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from ..connection import Base


class UserModel(Base):
    """Profile mirror of the auth provider's user."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, comment="Same as the auth provider user ID")
    email = Column(String(255), nullable=False, unique=True, comment="Email address")
    full_name = Column(Text, nullable=True, comment="Display name")
    avatar_url = Column(Text, nullable=True, comment="Avatar URL")
    role = Column(String(30), nullable=False, default="user", comment="Application role")
    two_factor_secret = Column(Text, nullable=True, comment="Encrypted TOTP secret")
    two_factor_enabled = Column(Boolean, nullable=False, default=False, comment="TOTP required at login")
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Created at")
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now, comment="Updated at")

    def __repr__(self):
        return f"<UserModel(id='{self.id}', email='{self.email}', role='{self.role}')>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "fullName": self.full_name,
            "avatarUrl": self.avatar_url,
            "role": self.role,
            "twoFactorEnabled": bool(self.two_factor_enabled),
        }


class LoginLogModel(Base):
    """Audit row for every login attempt."""

    __tablename__ = "login_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), comment="Log ID")
    user_id = Column(String(36), nullable=True, comment="User ID when known")
    email = Column(String(255), nullable=False, comment="Email used for the attempt")
    success = Column(Boolean, nullable=False, default=False, comment="Whether the attempt succeeded")
    reason = Column(Text, nullable=True, comment="Failure reason")
    ip_address = Column(String(64), nullable=True, comment="Client IP")
    user_agent = Column(Text, nullable=True, comment="Client user agent")
    created_at = Column(DateTime, nullable=False, default=datetime.now, comment="Attempt time")

    __table_args__ = (
        Index("idx_login_logs_email", "email"),
        Index("idx_login_logs_created_at", "created_at"),
    )
