"""설문/문항/응답 도메인 SQLAlchemy 모델입니다."""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class Survey(Base):
    __tablename__ = "surveys"

    survey_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    created_by = Column(Integer, ForeignKey("profiles.user_id"), nullable=False)
    is_published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    creator = relationship("Profile", back_populates="surveys")
    questions = relationship(
        "Question",
        back_populates="survey",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.order_number.asc(), Question.question_id.asc()",
    )
    responses = relationship(
        "Response",
        back_populates="survey",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_surveys_creator_created", "created_by", "created_at"),
    )


class Question(Base):
    __tablename__ = "questions"

    question_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(Integer, ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False, default="text")  # text/multiple/scale
    options_json = Column(Text, nullable=True)
    order_number = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    survey = relationship("Survey", back_populates="questions")
    responses = relationship(
        "Response",
        back_populates="question",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_questions_survey_order", "survey_id", "order_number"),
    )


class Response(Base):
    __tablename__ = "responses"

    response_id = Column(Integer, primary_key=True, autoincrement=True)
    survey_id = Column(Integer, ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    question_id = Column(Integer, ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("profiles.user_id", ondelete="CASCADE"), nullable=False)
    answer_text = Column(Text, nullable=False)
    submission_id = Column(String(32), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    survey = relationship("Survey", back_populates="responses")
    question = relationship("Question", back_populates="responses")
    user = relationship("Profile")

    __table_args__ = (
        Index("idx_responses_survey_created", "survey_id", "created_at"),
        Index("idx_responses_survey_user", "survey_id", "user_id"),
    )
