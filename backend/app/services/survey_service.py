"""설문 작성/수정/삭제 서비스 레이어입니다."""

import json
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.survey import Question, Survey
from app.models.user import Profile
from app.schemas.survey import QUESTION_TYPES, SurveyCreate, SurveyQuestionCreate, SurveyUpdate
from app.utils.permissions import DEFAULT_PATH, can_author_surveys, is_administrator, is_survey_owner

logger = logging.getLogger(__name__)


def _normalize_options(values: list[str] | None) -> list[str]:
    rows = []
    seen = set()
    for raw in values or []:
        text = str(raw or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        rows.append(text)
    return rows


def parse_options(question: Question) -> Optional[list[str]]:
    if question.options_json is None:
        return None
    try:
        parsed = json.loads(question.options_json)
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, list):
        return []
    return [str(v) for v in parsed if str(v).strip()]


def attach_question_options(question: Question) -> Question:
    setattr(question, "options", parse_options(question))
    return question


def _validate_question_payload(question_type: str, options: list[str] | None) -> tuple[str, Optional[list[str]]]:
    normalized_type = str(question_type or "text").strip().lower()
    if normalized_type not in QUESTION_TYPES:
        raise HTTPException(status_code=400, detail="지원하지 않는 문항 유형입니다.")
    if normalized_type != "multiple":
        return normalized_type, None
    normalized_options = _normalize_options(options)
    if not normalized_options:
        raise HTTPException(status_code=400, detail="객관식 문항은 최소 1개 이상의 선택지가 필요합니다.")
    return normalized_type, normalized_options


def get_survey(db: Session, survey_id: int) -> Survey:
    row = db.query(Survey).filter(Survey.survey_id == int(survey_id)).first()
    if not row:
        raise HTTPException(status_code=404, detail="설문을 찾을 수 없습니다.")
    return row


def ensure_owner(survey: Survey, current_user: Profile, detail: str):
    if not is_survey_owner(survey, current_user):
        raise HTTPException(status_code=403, detail=detail, headers={"X-Redirect-To": DEFAULT_PATH})


def load_questions(db: Session, survey_id: int) -> list[Question]:
    rows = (
        db.query(Question)
        .filter(Question.survey_id == int(survey_id))
        .order_by(Question.order_number.asc(), Question.question_id.asc())
        .all()
    )
    return [attach_question_options(row) for row in rows]


@dataclass
class QuestionDraft:
    question_text: str
    question_type: str
    options: Optional[list[str]]
    order_number: int

    def to_model(self, survey_id: int) -> Question:
        return Question(
            survey_id=survey_id,
            question_text=self.question_text,
            question_type=self.question_type,
            options_json=json.dumps(self.options, ensure_ascii=False) if self.options is not None else None,
            order_number=self.order_number,
        )


class SurveyDraft:
    """저장 전 문항 목록. 순번은 추가 시점에 한 번 부여되고 삭제 시 재계산하지 않는다."""

    def __init__(self, base_order: int = 0):
        self.questions: list[QuestionDraft] = []
        self._next_order = max(0, int(base_order))

    def add_question(self, data: SurveyQuestionCreate) -> Optional[QuestionDraft]:
        text = str(data.question_text or "").strip()
        if not text:
            return None
        question_type, options = _validate_question_payload(data.question_type, data.options)
        draft = QuestionDraft(
            question_text=text,
            question_type=question_type,
            options=options,
            order_number=self._next_order,
        )
        self._next_order += 1
        self.questions.append(draft)
        return draft

    def remove_question(self, index: int) -> QuestionDraft:
        return self.questions.pop(index)

    def submit(
        self,
        db: Session,
        *,
        title: str,
        description: Optional[str],
        is_published: bool,
        current_user: Profile,
    ) -> Survey:
        normalized_title = str(title or "").strip()
        if not normalized_title:
            raise HTTPException(status_code=400, detail="제목은 필수입니다.")
        if not self.questions:
            raise HTTPException(status_code=400, detail="최소 1개 이상의 문항을 추가해야 합니다.")

        survey = Survey(
            title=normalized_title,
            description=description,
            created_by=current_user.user_id,
            is_published=bool(is_published),
        )
        try:
            db.add(survey)
            db.flush()
            db.add_all([draft.to_model(survey.survey_id) for draft in self.questions])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("[survey] create failed for user_id=%s: %s", current_user.user_id, exc)
            raise HTTPException(status_code=500, detail="설문을 생성하지 못했습니다.") from exc
        db.refresh(survey)
        logger.info(
            "[survey] created survey_id=%s questions=%s",
            survey.survey_id,
            len(self.questions),
        )
        return survey


def _ensure_can_author(current_user: Profile):
    if not can_author_surveys(current_user):
        raise HTTPException(status_code=403, detail="설문 작성은 설문자/관리자만 가능합니다.")


def create_survey(db: Session, data: SurveyCreate, current_user: Profile) -> Survey:
    _ensure_can_author(current_user)
    draft = SurveyDraft()
    for question in data.questions:
        draft.add_question(question)
    return draft.submit(
        db,
        title=data.title,
        description=data.description,
        is_published=data.is_published,
        current_user=current_user,
    )


def list_surveys(db: Session, current_user: Profile) -> list[Survey]:
    query = db.query(Survey)
    if not is_administrator(current_user):
        query = query.filter(
            or_(
                Survey.is_published == True,  # noqa: E712
                Survey.created_by == current_user.user_id,
            )
        )
    return query.order_by(Survey.created_at.desc(), Survey.survey_id.desc()).all()


def get_for_edit(db: Session, *, survey_id: int, current_user: Profile) -> dict:
    survey = get_survey(db, survey_id)
    ensure_owner(survey, current_user, "이 설문을 수정할 권한이 없습니다.")
    return {"survey": survey, "questions": load_questions(db, survey.survey_id)}


def update_survey(
    db: Session,
    *,
    survey_id: int,
    data: SurveyUpdate,
    current_user: Profile,
) -> dict:
    survey = get_survey(db, survey_id)
    ensure_owner(survey, current_user, "이 설문을 수정할 권한이 없습니다.")
    title = str(data.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="제목은 필수입니다.")

    existing = load_questions(db, survey.survey_id)
    base_order = max((int(row.order_number) for row in existing), default=-1) + 1
    draft = SurveyDraft(base_order=base_order)
    for question in data.new_questions:
        draft.add_question(question)
    if not existing and not draft.questions:
        raise HTTPException(status_code=400, detail="최소 1개 이상의 문항이 필요합니다.")

    try:
        survey.title = title
        survey.description = data.description
        survey.is_published = bool(data.is_published)
        db.add_all([row.to_model(survey.survey_id) for row in draft.questions])
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[survey] update failed for survey_id=%s: %s", survey_id, exc)
        raise HTTPException(status_code=500, detail="설문을 수정하지 못했습니다.") from exc
    db.refresh(survey)
    return {"survey": survey, "questions": load_questions(db, survey.survey_id)}


def delete_survey(db: Session, *, survey_id: int, current_user: Profile):
    survey = get_survey(db, survey_id)
    ensure_owner(survey, current_user, "이 설문을 삭제할 권한이 없습니다.")
    try:
        db.delete(survey)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[survey] delete failed for survey_id=%s: %s", survey_id, exc)
        raise HTTPException(status_code=500, detail="설문을 삭제하지 못했습니다.") from exc


def delete_question(db: Session, *, question_id: int, current_user: Profile):
    row = db.query(Question).filter(Question.question_id == int(question_id)).first()
    if not row:
        raise HTTPException(status_code=404, detail="질문을 찾을 수 없습니다.")
    ensure_owner(row.survey, current_user, "이 설문을 수정할 권한이 없습니다.")
    try:
        db.delete(row)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("[survey] question delete failed for question_id=%s: %s", question_id, exc)
        raise HTTPException(status_code=500, detail="질문을 삭제하지 못했습니다.") from exc
