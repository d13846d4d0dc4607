"""Seed the database with demo accounts, surveys and responses."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import uuid
from datetime import datetime, timedelta

from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import Profile, UserRole
from app.models.survey import Survey, Question, Response
from app.services.auth_service import hash_password

DEMO_PASSWORD = "demo1234"


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(Profile).count() > 0:
            print("Database already seeded. Skipping.")
            return

        # Users
        accounts = [
            ("admin@encuestas.dev", "관리자 김철수", "administrator"),
            ("surveyor@encuestas.dev", "설문자 이영희", "surveyor"),
            ("user1@encuestas.dev", "응답자 정수연", "respondent"),
            ("user2@encuestas.dev", "응답자 최동현", "respondent"),
        ]
        users = []
        for email, name, role in accounts:
            user = Profile(email=email, full_name=name, password_hash=hash_password(DEMO_PASSWORD))
            user.role_row = UserRole(role=role)
            users.append(user)
        db.add_all(users)
        db.flush()

        surveyor = users[1]
        survey = Survey(
            title="2026 만족도 조사",
            description="프로그램 만족도 설문",
            created_by=surveyor.user_id,
            is_published=True,
        )
        db.add(survey)
        db.flush()

        questions = [
            Question(survey_id=survey.survey_id, question_text="가장 좋았던 점은?", question_type="text", order_number=0),
            Question(
                survey_id=survey.survey_id,
                question_text="추천 의향이 있습니까?",
                question_type="multiple",
                options_json=json.dumps(["예", "아니오"], ensure_ascii=False),
                order_number=1,
            ),
            Question(survey_id=survey.survey_id, question_text="전반적 만족도(1-5)", question_type="scale", order_number=2),
        ]
        db.add_all(questions)
        db.flush()

        # Responses
        base_time = datetime.utcnow() - timedelta(days=1)
        answer_sets = [
            (users[2], ["강의 구성", "예", "5"]),
            (users[3], ["실습 시간", "아니오", "3"]),
        ]
        for offset, (user, answers) in enumerate(answer_sets):
            submission_id = uuid.uuid4().hex
            created_at = base_time + timedelta(minutes=offset)
            for question, text in zip(questions, answers):
                db.add(
                    Response(
                        survey_id=survey.survey_id,
                        question_id=question.question_id,
                        user_id=user.user_id,
                        answer_text=text,
                        submission_id=submission_id,
                        created_at=created_at,
                    )
                )

        db.commit()
        print(f"Seeded {len(users)} users, 1 survey, {len(answer_sets)} submissions. Password: {DEMO_PASSWORD}")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
