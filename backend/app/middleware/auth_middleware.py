from datetime import datetime

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.database import get_db
from app.models.user import AuthSession, Profile
from app.config import settings
from app.services.session_events import SessionEvents
from app.utils.permissions import Role

security = HTTPBearer()

ALGORITHM = "HS256"


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


def _load_active_session(db: Session, payload: dict) -> AuthSession:
    user_id = payload.get("sub")
    session_id = payload.get("jti")
    if user_id is None or session_id is None:
        raise HTTPException(status_code=401, detail="Invalid token payload")

    row = db.query(AuthSession).filter(AuthSession.session_id == str(session_id)).first()
    if not row or int(row.user_id) != int(user_id):
        raise HTTPException(status_code=401, detail="Session not found")
    if row.revoked_at is not None or row.expires_at <= datetime.utcnow():
        raise HTTPException(status_code=401, detail="Session expired or signed out")
    return row


def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> AuthSession:
    payload = decode_token(credentials.credentials)
    row = _load_active_session(db, payload)
    user = row.user
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return row


def get_current_user(current_session: AuthSession = Depends(get_current_session)) -> Profile:
    return current_session.user


def require_roles(*roles: Role):
    def checker(current_user: Profile = Depends(get_current_user)) -> Profile:
        if Role.parse(current_user.role) not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(role.value for role in roles)}",
            )
        return current_user
    return checker


def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer(auto_error=False)),
    db: Session = Depends(get_db),
):
    if credentials is None:
        return None
    try:
        payload = decode_token(credentials.credentials)
        row = _load_active_session(db, payload)
    except HTTPException:
        return None
    if not row.user or not row.user.is_active:
        return None
    return row.user


def get_session_events(request: Request) -> SessionEvents:
    return request.app.state.session_events
