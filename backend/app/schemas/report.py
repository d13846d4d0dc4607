"""설문 결과 리포트 응답 스키마입니다."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.schemas.survey import SurveyOut, SurveyQuestionOut


class RespondentRowOut(BaseModel):
    user_id: int
    email: str
    submitted_at: Optional[datetime] = None
    submission_id: Optional[str] = None
    answers: Dict[str, str] = Field(default_factory=dict)


class ScaleSummaryOut(BaseModel):
    question_id: int
    question_text: str
    average: Optional[float] = None
    display: str
    sample_count: int


class SurveyReportOut(BaseModel):
    survey: SurveyOut
    questions: List[SurveyQuestionOut] = Field(default_factory=list)
    rows: List[RespondentRowOut] = Field(default_factory=list)
    scale_summaries: List[ScaleSummaryOut] = Field(default_factory=list)
    total_respondents: int = 0
