"""사용자(프로필/역할/세션) 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100))
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    role_row = relationship("UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan")
    surveys = relationship("Survey", back_populates="creator")
    auth_sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def role(self):
        return self.role_row.role if self.role_row else None


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("profiles.user_id", ondelete="CASCADE"), unique=True, nullable=False)
    role = Column(String(20), nullable=False)  # administrator/surveyor/respondent
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("Profile", back_populates="role_row")


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    session_id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime)

    user = relationship("Profile", back_populates="auth_sessions")


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    token = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime)
