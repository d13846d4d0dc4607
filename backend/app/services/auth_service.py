"""Auth Service 도메인 서비스 레이어입니다. 가입/로그인/로그아웃/비밀번호 재설정 흐름을 캡슐화합니다."""

import logging
import secrets
import uuid
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import AuthSession, PasswordResetToken, Profile, UserRole
from app.schemas.user import PasswordResetConfirm, SignUpRequest
from app.services.session_events import (
    PASSWORD_RESET_REQUESTED,
    PASSWORD_UPDATED,
    SIGNED_IN,
    SIGNED_OUT,
    SIGNED_UP,
    SessionEvent,
    SessionEvents,
)
from app.utils.permissions import Role, home_path

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def _validate_password_pair(password: str, confirm_password: str):
    if password != confirm_password:
        raise HTTPException(status_code=400, detail="비밀번호가 일치하지 않습니다.")
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"비밀번호는 최소 {settings.PASSWORD_MIN_LENGTH}자 이상이어야 합니다.",
        )


def create_access_token(user_id: int, session_id: str, expires_at: datetime) -> str:
    payload = {"sub": str(user_id), "jti": session_id, "exp": expires_at}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def sign_up(db: Session, data: SignUpRequest, events: SessionEvents) -> Profile:
    email = _normalize_email(data.email)
    full_name = str(data.full_name or "").strip()
    if "@" not in email:
        raise HTTPException(status_code=400, detail="이메일 형식이 올바르지 않습니다.")
    if not full_name:
        raise HTTPException(status_code=400, detail="이름은 필수입니다.")
    role = Role.parse(data.role)
    if role is None:
        raise HTTPException(status_code=400, detail="역할을 선택해야 합니다.")
    _validate_password_pair(data.password, data.confirm_password)

    if db.query(Profile).filter(Profile.email == email).first():
        raise HTTPException(status_code=409, detail="이미 가입된 이메일입니다.")

    user = Profile(email=email, full_name=full_name, password_hash=hash_password(data.password))
    user.role_row = UserRole(role=role.value)
    try:
        db.add(user)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[auth] sign-up failed for %s: %s", email, exc)
        raise HTTPException(status_code=500, detail="회원가입을 처리하지 못했습니다.") from exc
    db.refresh(user)
    events.notify(SessionEvent(SIGNED_UP, user.user_id))
    return user


def sign_in(db: Session, email: str, password: str, events: SessionEvents) -> tuple[Profile, AuthSession, str]:
    user = (
        db.query(Profile)
        .filter(Profile.email == _normalize_email(email), Profile.is_active == True)  # noqa: E712
        .first()
    )
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="이메일 또는 비밀번호가 올바르지 않습니다.",
        )

    expires_at = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    session_row = AuthSession(session_id=uuid.uuid4().hex, user_id=user.user_id, expires_at=expires_at)
    db.add(session_row)
    db.commit()
    db.refresh(session_row)
    token = create_access_token(user.user_id, session_row.session_id, expires_at)
    events.notify(SessionEvent(SIGNED_IN, user.user_id, session_row.session_id))
    return user, session_row, token


def redirect_for(user: Profile) -> str:
    return home_path(user.role)


def sign_out(db: Session, current_session: AuthSession, events: SessionEvents):
    current_session.revoked_at = datetime.utcnow()
    db.commit()
    events.notify(SessionEvent(SIGNED_OUT, current_session.user_id, current_session.session_id))


def request_password_reset(db: Session, email: str, events: SessionEvents) -> str | None:
    """재설정 토큰을 발급한다. 존재하지 않는 이메일도 동일하게 응답하도록 None을 돌려준다."""
    user = db.query(Profile).filter(Profile.email == _normalize_email(email)).first()
    if not user:
        logger.info("[auth] password reset requested for unknown email")
        return None
    token = secrets.token_urlsafe(32)
    db.add(
        PasswordResetToken(
            token=token,
            user_id=user.user_id,
            expires_at=datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
        )
    )
    db.commit()
    # 메일 발송은 외부 시스템 담당
    logger.info("[auth] password reset token issued for user_id=%s", user.user_id)
    events.notify(SessionEvent(PASSWORD_RESET_REQUESTED, user.user_id))
    return token


def confirm_password_reset(db: Session, data: PasswordResetConfirm, events: SessionEvents):
    row = db.query(PasswordResetToken).filter(PasswordResetToken.token == data.token).first()
    if not row or row.used_at is not None or row.expires_at <= datetime.utcnow():
        raise HTTPException(status_code=400, detail="재설정 토큰이 유효하지 않습니다.")
    _validate_password_pair(data.password, data.confirm_password)

    user = db.query(Profile).filter(Profile.user_id == row.user_id).first()
    if not user:
        raise HTTPException(status_code=400, detail="재설정 토큰이 유효하지 않습니다.")
    now = datetime.utcnow()
    user.password_hash = hash_password(data.password)
    row.used_at = now
    # 비밀번호 변경 시 기존 세션은 모두 만료한다.
    db.query(AuthSession).filter(
        AuthSession.user_id == user.user_id,
        AuthSession.revoked_at.is_(None),
    ).update({AuthSession.revoked_at: now}, synchronize_session=False)
    db.commit()
    events.notify(SessionEvent(PASSWORD_UPDATED, user.user_id))
