"""설문 작성/수정/삭제 흐름을 검증합니다."""

import pytest
from fastapi import HTTPException

from app.models.survey import Question, Response, Survey
from app.schemas.survey import SurveyQuestionCreate
from app.services.survey_service import QuestionDraft, SurveyDraft
from tests.conftest import auth_headers, create_survey


def test_draft_skips_blank_questions_and_numbers_sequentially():
    draft = SurveyDraft()
    assert draft.add_question(SurveyQuestionCreate(question_text="   ")) is None
    first = draft.add_question(SurveyQuestionCreate(question_text="Q1"))
    second = draft.add_question(SurveyQuestionCreate(question_text="Q2", question_type="scale"))
    assert [first.order_number, second.order_number] == [0, 1]
    assert second.options is None


def test_draft_remove_does_not_renumber():
    draft = SurveyDraft()
    for text in ("A", "B", "C"):
        draft.add_question(SurveyQuestionCreate(question_text=text))
    removed = draft.remove_question(0)
    assert removed.question_text == "A"
    assert [q.order_number for q in draft.questions] == [1, 2]
    added = draft.add_question(SurveyQuestionCreate(question_text="D"))
    assert added.order_number == 3


def test_draft_multiple_choice_requires_options():
    draft = SurveyDraft()
    with pytest.raises(HTTPException) as exc:
        draft.add_question(SurveyQuestionCreate(question_text="Pick", question_type="multiple", options=[" ", ""]))
    assert exc.value.status_code == 400
    question = draft.add_question(
        SurveyQuestionCreate(question_text="Pick", question_type="multiple", options=["A", " B ", "A", ""])
    )
    assert question.options == ["A", "B"]


def test_draft_submit_fails_fast_without_title_or_questions(db, seed_users):
    draft = SurveyDraft()
    with pytest.raises(HTTPException) as exc:
        draft.submit(db, title="Title", description=None, is_published=False, current_user=seed_users["surveyor"])
    assert exc.value.status_code == 400

    draft.add_question(SurveyQuestionCreate(question_text="Q1"))
    with pytest.raises(HTTPException) as exc:
        draft.submit(db, title="  ", description=None, is_published=False, current_user=seed_users["surveyor"])
    assert exc.value.status_code == 400
    assert db.query(Survey).count() == 0


def test_draft_submit_rolls_back_survey_when_question_insert_fails(db, seed_users):
    draft = SurveyDraft()
    draft.add_question(SurveyQuestionCreate(question_text="Q1"))
    draft.questions.append(QuestionDraft(question_text=None, question_type="text", options=None, order_number=1))

    with pytest.raises(HTTPException) as exc:
        draft.submit(db, title="Broken", description=None, is_published=True, current_user=seed_users["surveyor"])
    assert exc.value.status_code == 500
    assert db.query(Survey).count() == 0
    assert db.query(Question).count() == 0


def test_create_survey_persists_questions_in_order(client, seed_users):
    headers = auth_headers(client, "surveyor@test.dev")
    detail = create_survey(
        client,
        headers,
        questions=[
            {"question_text": "이름", "question_type": "text"},
            {"question_text": "", "question_type": "text"},
            {"question_text": "색상", "question_type": "multiple", "options": ["빨강", "파랑"]},
            {"question_text": "점수", "question_type": "scale"},
        ],
    )
    questions = detail["questions"]
    assert [q["question_text"] for q in questions] == ["이름", "색상", "점수"]
    assert [q["order_number"] for q in questions] == [0, 1, 2]
    assert questions[0]["options"] is None
    assert questions[1]["options"] == ["빨강", "파랑"]
    assert detail["survey"]["created_by"] == seed_users["surveyor"].user_id


def test_create_survey_requires_title_and_questions(client, seed_users):
    headers = auth_headers(client, "surveyor@test.dev")
    no_title = client.post(
        "/api/surveys",
        json={"title": " ", "questions": [{"question_text": "Q", "question_type": "text"}]},
        headers=headers,
    )
    assert no_title.status_code == 400
    no_questions = client.post("/api/surveys", json={"title": "T", "questions": []}, headers=headers)
    assert no_questions.status_code == 400


def test_edit_appends_questions_after_existing_order(client, seed_users):
    headers = auth_headers(client, "surveyor@test.dev")
    detail = create_survey(client, headers)
    survey_id = detail["survey"]["survey_id"]

    resp = client.put(
        f"/api/surveys/{survey_id}",
        json={
            "title": "수정된 제목",
            "description": None,
            "is_published": False,
            "new_questions": [{"question_text": "추가 문항", "question_type": "text"}],
        },
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["survey"]["title"] == "수정된 제목"
    assert data["survey"]["is_published"] is False
    assert [q["order_number"] for q in data["questions"]] == [0, 1, 2]


def test_non_owner_cannot_edit_or_delete(client, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    other_headers = auth_headers(client, "surveyor2@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]

    edit = client.get(f"/api/surveys/{survey_id}/edit", headers=other_headers)
    assert edit.status_code == 403
    assert edit.headers["x-redirect-to"] == "/dashboard"

    update = client.put(f"/api/surveys/{survey_id}", json={"title": "hijack"}, headers=other_headers)
    assert update.status_code == 403
    assert client.delete(f"/api/surveys/{survey_id}", headers=other_headers).status_code == 403
    question_id = detail["questions"][0]["question_id"]
    assert client.delete(f"/api/surveys/questions/{question_id}", headers=other_headers).status_code == 403


def test_delete_question_cascades_to_responses(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    submit = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "hello", str(q2): "4"}},
        headers=respondent_headers,
    )
    assert submit.status_code == 200, submit.text

    resp = client.delete(f"/api/surveys/questions/{q1}", headers=owner_headers)
    assert resp.status_code == 200
    assert db.query(Response).filter(Response.question_id == q1).count() == 0
    assert db.query(Response).filter(Response.question_id == q2).count() == 1


def test_delete_survey_removes_questions_and_responses(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]

    assert client.delete(f"/api/surveys/{survey_id}", headers=owner_headers).status_code == 200
    assert db.query(Survey).count() == 0
    assert db.query(Question).count() == 0


def test_list_surveys_hides_other_unpublished(client, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    create_survey(client, owner_headers, title="공개", is_published=True)
    create_survey(client, owner_headers, title="비공개", is_published=False)

    respondent_titles = [
        row["title"] for row in client.get("/api/surveys", headers=auth_headers(client, "user1@test.dev")).json()
    ]
    assert respondent_titles == ["공개"]
    owner_titles = {row["title"] for row in client.get("/api/surveys", headers=owner_headers).json()}
    assert owner_titles == {"공개", "비공개"}
    admin_titles = {row["title"] for row in client.get("/api/surveys", headers=auth_headers(client, "admin@test.dev")).json()}
    assert admin_titles == {"공개", "비공개"}


def test_respondent_cannot_delete_survey(client, db, seed_users):
    detail = create_survey(client, auth_headers(client, "surveyor@test.dev"))
    survey_id = detail["survey"]["survey_id"]

    resp = client.delete(f"/api/surveys/{survey_id}", headers=auth_headers(client, "user1@test.dev"))
    assert resp.status_code == 403
    assert db.query(Survey).count() == 1
    missing = client.delete("/api/surveys/999999", headers=auth_headers(client, "user1@test.dev"))
    assert missing.status_code == 403
