"""설문 작성/응답 API 라우터입니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import Profile
from app.schemas.survey import (
    SubmissionOut,
    SurveyAnswersSubmit,
    SurveyCreate,
    SurveyDetailOut,
    SurveyOut,
    SurveyUpdate,
)
from app.services import response_service, survey_service
from app.utils.permissions import AUTHORING_ROLES

router = APIRouter(prefix="/api/surveys", tags=["surveys"])

require_author = require_roles(*AUTHORING_ROLES)


@router.get("", response_model=List[SurveyOut])
def list_surveys(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return survey_service.list_surveys(db, current_user)


@router.post("", response_model=SurveyOut)
def create_survey(
    data: SurveyCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    return survey_service.create_survey(db, data, current_user)


@router.get("/{survey_id}/edit", response_model=SurveyDetailOut)
def get_for_edit(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    return survey_service.get_for_edit(db, survey_id=survey_id, current_user=current_user)


@router.put("/{survey_id}", response_model=SurveyDetailOut)
def update_survey(
    survey_id: int,
    data: SurveyUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    return survey_service.update_survey(
        db,
        survey_id=survey_id,
        data=data,
        current_user=current_user,
    )


@router.delete("/{survey_id}")
def delete_survey(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    survey_service.delete_survey(db, survey_id=survey_id, current_user=current_user)
    return {"message": "삭제되었습니다."}


@router.delete("/questions/{question_id}")
def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_author),
):
    survey_service.delete_question(db, question_id=question_id, current_user=current_user)
    return {"message": "삭제되었습니다."}


@router.get("/{survey_id}/take", response_model=SurveyDetailOut)
def load_for_response(
    survey_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return response_service.load_for_response(db, survey_id=survey_id)


@router.post("/{survey_id}/responses", response_model=SubmissionOut)
def submit_responses(
    survey_id: int,
    data: SurveyAnswersSubmit,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return response_service.submit_responses(
        db,
        survey_id=survey_id,
        data=data,
        current_user=current_user,
    )
