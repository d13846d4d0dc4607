"""설문 API 스키마입니다."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


QUESTION_TYPES = {"text", "multiple", "scale"}


class SurveyQuestionCreate(BaseModel):
    question_text: str = ""
    question_type: str = "text"
    options: List[str] = Field(default_factory=list)


class SurveyQuestionOut(BaseModel):
    question_id: int
    survey_id: int
    question_text: str
    question_type: str
    options: Optional[List[str]] = None
    order_number: int

    model_config = {"from_attributes": True}


class SurveyCreate(BaseModel):
    title: str = Field(default="", max_length=200)
    description: Optional[str] = None
    is_published: bool = False
    questions: List[SurveyQuestionCreate] = Field(default_factory=list)


class SurveyUpdate(BaseModel):
    title: str = Field(default="", max_length=200)
    description: Optional[str] = None
    is_published: bool = False
    new_questions: List[SurveyQuestionCreate] = Field(default_factory=list)


class SurveyOut(BaseModel):
    survey_id: int
    title: str
    description: Optional[str] = None
    created_by: int
    is_published: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SurveyDetailOut(BaseModel):
    survey: SurveyOut
    questions: List[SurveyQuestionOut] = Field(default_factory=list)


class RespondentSurveyOut(SurveyOut):
    has_answered: bool = False


class SurveyAnswersSubmit(BaseModel):
    answers: Dict[int, str] = Field(default_factory=dict)


class SubmissionOut(BaseModel):
    survey_id: int
    submission_id: str
    response_count: int
    created_at: datetime
