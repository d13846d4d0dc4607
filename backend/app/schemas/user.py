"""사용자/인증 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class UserOut(BaseModel):
    user_id: int
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class SignUpRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    password: str
    confirm_password: str
    full_name: str = ""
    role: str


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
    redirect_to: str


class SessionOut(BaseModel):
    session_id: str
    user: UserOut
    created_at: datetime
    expires_at: datetime


class PasswordResetRequest(BaseModel):
    email: str


class PasswordResetConfirm(BaseModel):
    token: str
    password: str
    confirm_password: str


class NavigationOut(BaseModel):
    path: str
    action: str
    target: Optional[str] = None


class AdminUserRow(BaseModel):
    user_id: int
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AdminDashboardOut(BaseModel):
    total_users: int
    total_surveys: int
    total_responses: int
    recent_users: list[AdminUserRow] = []
