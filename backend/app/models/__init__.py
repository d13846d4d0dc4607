"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import Profile, UserRole, AuthSession, PasswordResetToken
from app.models.survey import Survey, Question, Response

__all__ = [
    "Profile", "UserRole", "AuthSession", "PasswordResetToken",
    "Survey", "Question", "Response",
]
