"""역할별 대시보드 집계 API 라우터입니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.survey import Response, Survey
from app.models.user import Profile
from app.schemas.survey import RespondentSurveyOut, SurveyOut
from app.schemas.user import AdminDashboardOut
from app.services import response_service
from app.utils.permissions import Role

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_USER_LIMIT = 10


@router.get("/admin", response_model=AdminDashboardOut)
def admin_dashboard(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_roles(Role.ADMINISTRATOR)),
):
    recent_users = (
        db.query(Profile)
        .options(joinedload(Profile.role_row))
        .order_by(Profile.created_at.desc(), Profile.user_id.desc())
        .limit(RECENT_USER_LIMIT)
        .all()
    )
    return {
        "total_users": db.query(Profile).count(),
        "total_surveys": db.query(Survey).count(),
        "total_responses": db.query(Response).count(),
        "recent_users": recent_users,
    }


@router.get("/surveyor", response_model=List[SurveyOut])
def surveyor_dashboard(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_roles(Role.SURVEYOR)),
):
    return (
        db.query(Survey)
        .filter(Survey.created_by == current_user.user_id)
        .order_by(Survey.created_at.desc(), Survey.survey_id.desc())
        .all()
    )


@router.get("/respondent", response_model=List[RespondentSurveyOut])
def respondent_dashboard(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_roles(Role.RESPONDENT)),
):
    surveys = (
        db.query(Survey)
        .filter(Survey.is_published == True)  # noqa: E712
        .order_by(Survey.created_at.desc(), Survey.survey_id.desc())
        .all()
    )
    answered = response_service.answered_survey_ids(db, current_user)
    return [
        {**SurveyOut.model_validate(row).model_dump(), "has_answered": int(row.survey_id) in answered}
        for row in surveys
    ]
