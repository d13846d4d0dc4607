"""설문 응답 수집 서비스 레이어입니다."""

import logging
import uuid
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.survey import Question, Response, Survey
from app.models.user import Profile
from app.schemas.survey import SurveyAnswersSubmit
from app.services import survey_service
from app.utils.permissions import DEFAULT_PATH

logger = logging.getLogger(__name__)

SCALE_VALUES = {"1", "2", "3", "4", "5"}


def _validate_answer_value(question: Question, answer_text: str):
    if question.question_type == "multiple":
        if answer_text not in (survey_service.parse_options(question) or []):
            raise HTTPException(status_code=400, detail="항목형 응답 값이 유효하지 않습니다.")
    elif question.question_type == "scale":
        if answer_text not in SCALE_VALUES:
            raise HTTPException(status_code=400, detail="점수형 응답은 1에서 5 사이여야 합니다.")


def _ensure_published(survey: Survey):
    if not survey.is_published:
        raise HTTPException(
            status_code=403,
            detail="이 설문은 공개되지 않았습니다.",
            headers={"X-Redirect-To": DEFAULT_PATH},
        )


def load_for_response(db: Session, *, survey_id: int) -> dict:
    survey = survey_service.get_survey(db, survey_id)
    _ensure_published(survey)
    return {"survey": survey, "questions": survey_service.load_questions(db, survey.survey_id)}


def submit_responses(
    db: Session,
    *,
    survey_id: int,
    data: SurveyAnswersSubmit,
    current_user: Profile,
) -> dict:
    detail = load_for_response(db, survey_id=survey_id)
    survey = detail["survey"]
    questions = detail["questions"]
    if not questions:
        raise HTTPException(status_code=400, detail="응답할 문항이 없습니다.")

    question_ids = {int(row.question_id) for row in questions}
    for qid in data.answers:
        if int(qid) not in question_ids:
            raise HTTPException(status_code=400, detail="설문 문항 정보가 올바르지 않습니다.")

    answers = {int(qid): str(text or "").strip() for qid, text in data.answers.items()}
    if any(not answers.get(int(row.question_id)) for row in questions):
        raise HTTPException(status_code=400, detail="모든 문항에 응답해야 제출할 수 있습니다.")
    for row in questions:
        _validate_answer_value(row, answers[int(row.question_id)])

    # 한 번의 제출은 동일 시각/동일 submission_id로 묶인다.
    submitted_at = datetime.utcnow()
    submission_id = uuid.uuid4().hex
    rows = [
        Response(
            survey_id=survey.survey_id,
            question_id=row.question_id,
            user_id=current_user.user_id,
            answer_text=answers[int(row.question_id)],
            submission_id=submission_id,
            created_at=submitted_at,
        )
        for row in questions
    ]
    try:
        db.add_all(rows)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[response] submit failed for survey_id=%s: %s", survey.survey_id, exc)
        raise HTTPException(status_code=500, detail="응답을 제출하지 못했습니다.") from exc

    logger.info(
        "[response] survey_id=%s user_id=%s submission_id=%s",
        survey.survey_id,
        current_user.user_id,
        submission_id,
    )
    return {
        "survey_id": survey.survey_id,
        "submission_id": submission_id,
        "response_count": len(rows),
        "created_at": submitted_at,
    }


def answered_survey_ids(db: Session, current_user: Profile) -> set[int]:
    return {
        int(row[0])
        for row in db.query(Response.survey_id)
        .filter(Response.user_id == current_user.user_id)
        .distinct()
        .all()
    }
