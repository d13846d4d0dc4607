"""Auth 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.user import (
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    SessionOut,
    SignUpRequest,
    TokenResponse,
    UserOut,
)
from app.services import auth_service
from app.services.session_events import SessionEvents
from app.middleware.auth_middleware import get_current_session, get_current_user, get_session_events
from app.models.user import AuthSession, Profile

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserOut)
def signup(
    request: SignUpRequest,
    db: Session = Depends(get_db),
    events: SessionEvents = Depends(get_session_events),
):
    return auth_service.sign_up(db, request, events)


@router.post("/login", response_model=TokenResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    events: SessionEvents = Depends(get_session_events),
):
    user, _, token = auth_service.sign_in(db, request.email, request.password, events)
    return TokenResponse(
        access_token=token,
        user=UserOut.model_validate(user),
        redirect_to=auth_service.redirect_for(user),
    )


@router.post("/logout")
def logout(
    current_session: AuthSession = Depends(get_current_session),
    db: Session = Depends(get_db),
    events: SessionEvents = Depends(get_session_events),
):
    auth_service.sign_out(db, current_session, events)
    return {"message": "로그아웃 되었습니다.", "redirect_to": "/"}


@router.post("/password-reset")
def request_password_reset(
    request: PasswordResetRequest,
    db: Session = Depends(get_db),
    events: SessionEvents = Depends(get_session_events),
):
    auth_service.request_password_reset(db, request.email, events)
    return {"message": "가입된 이메일이라면 재설정 안내가 발송됩니다."}


@router.post("/password-reset/confirm")
def confirm_password_reset(
    request: PasswordResetConfirm,
    db: Session = Depends(get_db),
    events: SessionEvents = Depends(get_session_events),
):
    auth_service.confirm_password_reset(db, request, events)
    return {"message": "비밀번호가 변경되었습니다."}


@router.get("/me", response_model=UserOut)
def me(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.get("/session", response_model=SessionOut)
def session_info(current_session: AuthSession = Depends(get_current_session)):
    return SessionOut(
        session_id=current_session.session_id,
        user=UserOut.model_validate(current_session.user),
        created_at=current_session.created_at,
        expires_at=current_session.expires_at,
    )
