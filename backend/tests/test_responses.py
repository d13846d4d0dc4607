"""설문 응답 수집(조회/검증/일괄 저장)을 검증합니다."""

from app.models.survey import Response
from tests.conftest import auth_headers, create_survey


def test_take_survey_returns_questions_in_order(client, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]

    resp = client.get(f"/api/surveys/{survey_id}/take", headers=auth_headers(client, "user1@test.dev"))
    assert resp.status_code == 200
    assert [q["order_number"] for q in resp.json()["questions"]] == [0, 1]


def test_unpublished_survey_cannot_be_taken(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(client, owner_headers, is_published=False)
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    resp = client.get(f"/api/surveys/{survey_id}/take", headers=respondent_headers)
    assert resp.status_code == 403
    assert resp.headers["x-redirect-to"] == "/dashboard"

    submit = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "a", str(q2): "3"}},
        headers=respondent_headers,
    )
    assert submit.status_code == 403
    assert db.query(Response).count() == 0


def test_incomplete_answers_are_rejected_without_writes(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    missing = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "only one"}},
        headers=respondent_headers,
    )
    assert missing.status_code == 400

    blank = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "ok", str(q2): "   "}},
        headers=respondent_headers,
    )
    assert blank.status_code == 400

    unknown = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "ok", str(q2): "4", "999999": "x"}},
        headers=respondent_headers,
    )
    assert unknown.status_code == 400
    assert db.query(Response).count() == 0


def test_submission_writes_one_row_per_question(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    resp = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): "  좋아요 ", str(q2): "5"}},
        headers=respondent_headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["response_count"] == 2

    rows = db.query(Response).order_by(Response.question_id.asc()).all()
    assert [row.answer_text for row in rows] == ["좋아요", "5"]
    assert {row.submission_id for row in rows} == {body["submission_id"]}
    assert len({row.created_at for row in rows}) == 1
    assert {row.user_id for row in rows} == {seed_users["respondent"].user_id}


def test_double_submission_creates_duplicate_rows(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(client, owner_headers)
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    for answer in ("first", "second"):
        resp = client.post(
            f"/api/surveys/{survey_id}/responses",
            json={"answers": {str(q1): answer, str(q2): "2"}},
            headers=respondent_headers,
        )
        assert resp.status_code == 200

    assert db.query(Response).count() == 4
    assert db.query(Response.submission_id).distinct().count() == 2


def test_respondent_dashboard_marks_answered(client, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    answered = create_survey(client, owner_headers, title="응답함")
    create_survey(client, owner_headers, title="미응답")
    create_survey(client, owner_headers, title="비공개", is_published=False)
    q1, q2 = [q["question_id"] for q in answered["questions"]]
    client.post(
        f"/api/surveys/{answered['survey']['survey_id']}/responses",
        json={"answers": {str(q1): "a", str(q2): "1"}},
        headers=respondent_headers,
    )

    resp = client.get("/api/dashboard/respondent", headers=respondent_headers)
    assert resp.status_code == 200
    flags = {row["title"]: row["has_answered"] for row in resp.json()}
    assert flags == {"응답함": True, "미응답": False}


def test_surveyor_and_admin_dashboards(client, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    create_survey(client, owner_headers, title="내 설문")
    create_survey(client, auth_headers(client, "surveyor2@test.dev"), title="남의 설문")

    mine = client.get("/api/dashboard/surveyor", headers=owner_headers)
    assert mine.status_code == 200
    assert [row["title"] for row in mine.json()] == ["내 설문"]

    admin = client.get("/api/dashboard/admin", headers=auth_headers(client, "admin@test.dev"))
    assert admin.status_code == 200
    data = admin.json()
    assert data["total_users"] == 5
    assert data["total_surveys"] == 2
    assert data["total_responses"] == 0
    assert {row["role"] for row in data["recent_users"]} == {"administrator", "surveyor", "respondent"}


def test_answer_values_must_match_question_type(client, db, seed_users):
    owner_headers = auth_headers(client, "surveyor@test.dev")
    respondent_headers = auth_headers(client, "user1@test.dev")
    detail = create_survey(
        client,
        owner_headers,
        questions=[
            {"question_text": "선택", "question_type": "multiple", "options": ["A", "B"]},
            {"question_text": "점수", "question_type": "scale"},
        ],
    )
    survey_id = detail["survey"]["survey_id"]
    q1, q2 = [q["question_id"] for q in detail["questions"]]

    for answers in ({q1: "Z", q2: "3"}, {q1: "A", q2: "42"}, {q1: "A", q2: "abc"}, {q1: "A", q2: "0"}):
        resp = client.post(
            f"/api/surveys/{survey_id}/responses",
            json={"answers": {str(qid): text for qid, text in answers.items()}},
            headers=respondent_headers,
        )
        assert resp.status_code == 400, answers
    assert db.query(Response).count() == 0

    ok = client.post(
        f"/api/surveys/{survey_id}/responses",
        json={"answers": {str(q1): " B ", str(q2): "5"}},
        headers=respondent_headers,
    )
    assert ok.status_code == 200, ok.text

    report = client.get(f"/api/reports/{survey_id}", headers=owner_headers).json()
    assert report["scale_summaries"][0]["average"] == 5.0
