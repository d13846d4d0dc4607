"""설문 결과 리포트 서비스입니다.

응답 테이블은 문항당 한 행씩 쌓이는 append-only 구조이므로, 리포트는
응답자(user_id) 기준으로 다시 묶어 ``응답자 x 문항`` 행렬을 만든다.

* 같은 응답자가 같은 문항에 여러 번 답했다면 ``(created_at, response_id)`` 가
  가장 늦은 값만 남는다. 입력 순서와 무관하다.
* 응답자 행의 시각/submission_id 는 그 응답자의 가장 최근 응답 행을 따른다.
* 점수형(scale) 문항은 숫자로 해석되는 값만 평균을 내고, 표본이 없으면 N/A.
"""

import csv
import io
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.models.survey import Question, Response
from app.models.user import Profile
from app.services import survey_service

logger = logging.getLogger(__name__)

NOT_APPLICABLE = "N/A"
SCALE_TYPE = "scale"


@dataclass(frozen=True)
class ResponseRecord:
    user_id: int
    question_id: int
    answer_text: str
    created_at: Optional[datetime]
    response_id: int = 0
    email: Optional[str] = None
    submission_id: Optional[str] = None

    @property
    def recency(self) -> tuple:
        return (self.created_at or datetime.min, int(self.response_id or 0))


@dataclass
class RespondentRow:
    user_id: int
    email: str
    submitted_at: Optional[datetime]
    submission_id: Optional[str] = None
    answers: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ScaleSummary:
    question_id: int
    question_text: str
    average: Optional[float]
    sample_count: int

    @property
    def display(self) -> str:
        if self.average is None:
            return NOT_APPLICABLE
        return f"{self.average:.2f}"


def group_responses(
    questions: Sequence[Question],
    responses: Iterable[ResponseRecord],
    *,
    unknown_email: str = settings.EXPORT_UNKNOWN_EMAIL,
) -> list[RespondentRow]:
    question_ids = {int(row.question_id) for row in questions}
    rows: dict[int, RespondentRow] = {}
    row_recency: dict[int, tuple] = {}
    cell_recency: dict[tuple[int, int], tuple] = {}

    for record in responses:
        user_id = int(record.user_id)
        recency = record.recency
        row = rows.get(user_id)
        if row is None:
            row = RespondentRow(
                user_id=user_id,
                email=record.email or unknown_email,
                submitted_at=record.created_at,
                submission_id=record.submission_id,
            )
            rows[user_id] = row
            row_recency[user_id] = recency
        elif recency > row_recency[user_id]:
            row.submitted_at = record.created_at
            row.submission_id = record.submission_id
            row_recency[user_id] = recency
        if record.email and row.email == unknown_email:
            row.email = record.email

        question_id = int(record.question_id)
        if question_id not in question_ids:
            continue
        cell = (user_id, question_id)
        if cell in cell_recency and cell_recency[cell] >= recency:
            continue
        cell_recency[cell] = recency
        row.answers[question_id] = record.answer_text

    return sorted(
        rows.values(),
        key=lambda row: (row_recency[row.user_id], row.user_id),
        reverse=True,
    )


def _parse_number(value) -> Optional[float]:
    text = str(value if value is not None else "").strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def scale_average(values: Iterable) -> tuple[Optional[float], int]:
    numbers = [number for number in (_parse_number(value) for value in values) if number is not None]
    if not numbers:
        return None, 0
    return round(sum(numbers) / len(numbers), 2), len(numbers)


def scale_averages(questions: Sequence[Question], rows: Sequence[RespondentRow]) -> list[ScaleSummary]:
    summaries = []
    for question in questions:
        if question.question_type != SCALE_TYPE:
            continue
        question_id = int(question.question_id)
        average, count = scale_average(
            row.answers[question_id] for row in rows if question_id in row.answers
        )
        summaries.append(
            ScaleSummary(
                question_id=question_id,
                question_text=question.question_text,
                average=average,
                sample_count=count,
            )
        )
    return summaries


def _format_date(value: Optional[datetime], date_format: str) -> str:
    if value is None:
        return ""
    return value.strftime(date_format)


def render_csv(
    questions: Sequence[Question],
    rows: Sequence[RespondentRow],
    *,
    date_format: str = settings.EXPORT_DATE_FORMAT,
) -> str:
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(["Email", "Date"] + [question.question_text for question in questions])
    for row in rows:
        values = [row.email, _format_date(row.submitted_at, date_format)]
        for question in questions:
            values.append(row.answers.get(int(question.question_id), ""))
        writer.writerow(values)
    return output.getvalue()


def export_filename(title: str, today: date) -> str:
    slug = re.sub(r"\s+", "_", str(title or "").strip())
    return f"resultados_{slug}_{today.strftime('%Y%m%d')}.csv"


def load_report_data(db: Session, *, survey_id: int, current_user: Profile):
    survey = survey_service.get_survey(db, survey_id)
    # 소유자 확인이 문항/응답 조회보다 먼저 끝나야 한다.
    survey_service.ensure_owner(survey, current_user, "이 설문의 결과를 볼 권한이 없습니다.")

    questions = survey_service.load_questions(db, survey.survey_id)
    rows = (
        db.query(Response, Profile.email)
        .outerjoin(Profile, Profile.user_id == Response.user_id)
        .filter(Response.survey_id == survey.survey_id)
        .order_by(Response.created_at.desc(), Response.response_id.desc())
        .all()
    )
    records = [
        ResponseRecord(
            user_id=response.user_id,
            question_id=response.question_id,
            answer_text=response.answer_text,
            created_at=response.created_at,
            response_id=response.response_id,
            email=email,
            submission_id=response.submission_id,
        )
        for response, email in rows
    ]
    return survey, questions, records


def get_report(db: Session, *, survey_id: int, current_user: Profile) -> dict:
    survey, questions, records = load_report_data(db, survey_id=survey_id, current_user=current_user)
    grouped = group_responses(questions, records)
    summaries = scale_averages(questions, grouped)
    return {
        "survey": survey,
        "questions": questions,
        "rows": [
            {
                "user_id": row.user_id,
                "email": row.email,
                "submitted_at": row.submitted_at,
                "submission_id": row.submission_id,
                "answers": {str(qid): text for qid, text in row.answers.items()},
            }
            for row in grouped
        ],
        "scale_summaries": [
            {
                "question_id": summary.question_id,
                "question_text": summary.question_text,
                "average": summary.average,
                "display": summary.display,
                "sample_count": summary.sample_count,
            }
            for summary in summaries
        ],
        "total_respondents": len(grouped),
    }


def export_csv(
    db: Session,
    *,
    survey_id: int,
    current_user: Profile,
    today: Optional[date] = None,
) -> tuple[str, str]:
    survey, questions, records = load_report_data(db, survey_id=survey_id, current_user=current_user)
    if not records:
        raise HTTPException(status_code=400, detail="내보낼 응답이 없습니다.")
    grouped = group_responses(questions, records)
    content = render_csv(questions, grouped)
    filename = export_filename(survey.title, today or date.today())
    logger.info("[report] exported survey_id=%s respondents=%s", survey.survey_id, len(grouped))
    return content, filename
