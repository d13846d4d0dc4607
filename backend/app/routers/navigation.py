"""클라이언트 라우트 진입 가능 여부를 역할 기준으로 판정하는 API 라우터입니다."""

from fastapi import APIRouter, Depends, Query

from app.middleware.auth_middleware import get_optional_user
from app.schemas.user import NavigationOut
from app.utils.permissions import Role, SessionSnapshot, resolve_path

router = APIRouter(prefix="/api/navigation", tags=["navigation"])


@router.get("/resolve", response_model=NavigationOut)
def resolve(
    path: str = Query(..., min_length=1),
    current_user=Depends(get_optional_user),
):
    snapshot = SessionSnapshot(
        user_id=current_user.user_id if current_user else None,
        role=Role.parse(current_user.role) if current_user else None,
    )
    decision = resolve_path(path, snapshot)
    return NavigationOut(path=path, action=decision.action, target=decision.target)
